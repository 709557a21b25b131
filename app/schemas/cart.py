# app/schemas/cart.py
from datetime import datetime

from pydantic import ConfigDict, model_validator
from sqlmodel import SQLModel

from app.schemas.product import RecordId


class CartProduct(SQLModel):
    """
    Public product fields embedded in a cart row (`products(...)` join).
    Every field is optional because joins may select a subset.
    """

    model_config = ConfigDict(extra="ignore")

    id: RecordId | None = None
    title: str | None = None
    description: str | None = None
    price: float | None = None
    image_url: str | None = None
    category: str | None = None
    stock_quantity: int | None = None
    is_active: bool | None = None


class CartItemRead(SQLModel):
    """Read model for a single cart row, optionally joined with its product."""

    model_config = ConfigDict(extra="ignore")

    id: RecordId
    user_id: str | None = None
    product_id: RecordId | None = None
    quantity: int
    added_at: datetime | None = None
    products: CartProduct | None = None


def _require_positive(v: int | None) -> int | None:
    if v is None or v < 1:
        raise ValueError("Quantity must be at least 1")
    return v


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.

    - product_id is required
    - quantity defaults to 1
    """

    model_config = ConfigDict(extra="ignore")

    product_id: RecordId | None = None
    quantity: int = 1

    @model_validator(mode="after")
    def check_payload(self) -> "CartItemCreate":
        if self.product_id is None or self.product_id == "":
            raise ValueError("Product ID is required")
        _require_positive(self.quantity)
        return self


class CartItemUpdate(SQLModel):
    """Payload for updating quantity of a cart item."""

    model_config = ConfigDict(extra="ignore")

    quantity: int | None = None

    @model_validator(mode="after")
    def check_quantity(self) -> "CartItemUpdate":
        _require_positive(self.quantity)
        return self


class CartItemEnvelope(SQLModel):
    message: str
    cartItem: CartItemRead
