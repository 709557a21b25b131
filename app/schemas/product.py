# app/schemas/product.py
from datetime import datetime
from typing import Any

from pydantic import ConfigDict, model_validator
from sqlmodel import SQLModel, Field

from app.schemas.user import SellerRead

# Opaque identifiers: Supabase tables may use uuid or bigint keys.
RecordId = int | str


class ProductRead(SQLModel):
    """
    Product representation for clients.

    Mirrors the `products` table:
      - id, seller_id, title, description, price, image_url, category,
        stock_quantity, is_active, created_at, updated_at
    """

    model_config = ConfigDict(extra="ignore")

    id: RecordId
    seller_id: str | None = None
    title: str | None = None
    description: str | None = None
    price: float | None = None
    image_url: str | None = None
    category: str | None = None
    stock_quantity: int | None = 0
    is_active: bool | None = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    - title, description and price are required (price 0 is valid).
    - seller_id is never taken from the client; unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    image_url: str | None = None
    category: str | None = None
    stock_quantity: int | None = Field(default=None, ge=0)
    is_active: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def require_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            if (
                not data.get("title")
                or not data.get("description")
                or data.get("price") is None
            ):
                raise ValueError("Missing required fields: title, description, price")
        return data

    def to_row(self, seller_id: str) -> dict[str, Any]:
        """Row to insert, with defaults applied and the owner forced."""
        return {
            "seller_id": seller_id,
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "image_url": self.image_url or None,
            "category": self.category or None,
            "stock_quantity": self.stock_quantity or 0,
            "is_active": self.is_active if self.is_active is not None else True,
        }


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.

    Only keys present in the request body are written; use
    `model_dump(exclude_unset=True)` to get them.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    image_url: str | None = None
    category: str | None = None
    stock_quantity: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class ProductEnvelope(SQLModel):
    message: str
    product: ProductRead


class MyProductsRead(SQLModel):
    products: list[ProductRead]
    count: int
    seller: SellerRead
