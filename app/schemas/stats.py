# app/schemas/stats.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel

from app.schemas.product import RecordId
from app.schemas.user import SellerRead


class ProductStatsRow(SQLModel):
    """
    Columns fetched per product for the seller dashboard.
    """
    model_config = ConfigDict(extra="ignore")

    id: RecordId
    is_active: bool | None = None
    stock_quantity: int | None = 0
    price: float | None = 0.0
    created_at: datetime | None = None


class SellerStatistics(BaseModel):
    """
    Aggregates over all of a seller's products.

    Serialized with camelCase keys (totalProducts, activeProducts, ...).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_products: int
    active_products: int
    inactive_products: int
    out_of_stock_products: int
    recent_products: int
    total_inventory_value: float


class StatsSummary(SQLModel):
    message: str


class SellerDashboardStats(BaseModel):
    """
    Full payload for GET /seller-stats.
    """
    seller: SellerRead
    statistics: SellerStatistics
    summary: StatsSummary
