# app/services/cart_service.py
import logging
from datetime import datetime, timezone

from supabase import Client, PostgrestAPIError

from app.core.errors import BadRequest, NotFound, upstream_errors
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemEnvelope,
    CartItemRead,
    CartItemUpdate,
    CartProduct,
)
from app.schemas.product import RecordId
from app.schemas.user import CurrentUser, MessageResponse

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - validate product existence and active flag
      - enforce quantity <= stock_quantity
      - merge repeated adds of the same product into one row
      - ownership checks on every per-item operation

    Adds are read-then-branch (update existing row or insert a new one);
    two concurrent adds of the same product can still both insert.
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_owned_item(
        self,
        client: Client,
        item_id: RecordId,
        user_id: str,
        product_columns: str,
    ) -> CartItemRead:
        with upstream_errors("Cart item not found", error_cls=NotFound):
            row = self.cart_repo.get_owned(
                client, item_id, user_id, product_columns=product_columns
            )
        if row is None:
            raise NotFound("Cart item not found")
        return CartItemRead.model_validate(row)

    # ---- public operations ----

    def list_items(self, client: Client, current_user: CurrentUser) -> list[CartItemRead]:
        """Caller's cart rows with product details, newest first."""
        with upstream_errors("Failed to fetch cart items"):
            rows = self.cart_repo.list_for_user(client, current_user.user.id)
        return [CartItemRead.model_validate(row) for row in rows]

    def add_to_cart(
        self,
        client: Client,
        current_user: CurrentUser,
        payload: CartItemCreate,
    ) -> CartItemEnvelope:
        """
        Add a product to the caller's cart.

        Rules:
          - product must exist and be active
          - requested quantity <= stock_quantity
          - if the product is already in the cart, quantities are merged and
            the total must still fit in stock_quantity
        """
        user_id = current_user.user.id
        quantity = payload.quantity

        with upstream_errors("Product not found", error_cls=NotFound):
            row = self.product_repo.get_by_id(
                client,
                payload.product_id,
                columns="id, title, stock_quantity, is_active",
            )
        if row is None:
            raise NotFound("Product not found")
        product = CartProduct.model_validate(row)
        stock = product.stock_quantity or 0

        if not product.is_active:
            raise BadRequest("Product is not active")

        if stock < quantity:
            raise BadRequest("Insufficient stock", available=stock, requested=quantity)

        existing = None
        try:
            existing = self.cart_repo.get_item(client, user_id, payload.product_id)
        except PostgrestAPIError:
            # A failed lookup is treated like "not in cart yet"
            logger.warning(
                "Cart lookup failed for user %s, product %s; inserting",
                user_id,
                payload.product_id,
                exc_info=True,
            )

        if existing is not None:
            current = existing.get("quantity") or 0
            new_quantity = current + quantity
            if new_quantity > stock:
                raise BadRequest(
                    "Cannot add more items than available stock",
                    currentInCart=current,
                    available=stock,
                    requested=quantity,
                )

            with upstream_errors("Failed to update cart item"):
                rows = self.cart_repo.update(
                    client,
                    existing["id"],
                    {
                        "quantity": new_quantity,
                        "added_at": datetime.now(timezone.utc).isoformat(),
                    },
                )
        else:
            with upstream_errors("Failed to add item to cart"):
                rows = self.cart_repo.create(
                    client,
                    {
                        "user_id": user_id,
                        "product_id": payload.product_id,
                        "quantity": quantity,
                    },
                )

        if not rows:
            raise NotFound("Cart item not found")

        logger.info(
            "User %s added %s x product %s to cart", user_id, quantity, product.id
        )
        return CartItemEnvelope(
            message=f'Added "{product.title}" to cart',
            cartItem=CartItemRead.model_validate(rows[0]),
        )

    def update_quantity(
        self,
        client: Client,
        current_user: CurrentUser,
        item_id: RecordId,
        payload: CartItemUpdate,
    ) -> CartItemEnvelope:
        """
        Set the quantity of one of the caller's cart rows.

        If quantity exceeds the product's current stock => 400.
        """
        item = self._get_owned_item(
            client,
            item_id,
            current_user.user.id,
            product_columns="stock_quantity, title",
        )
        product = item.products or CartProduct()
        stock = product.stock_quantity or 0

        if payload.quantity > stock:
            raise BadRequest(
                "Quantity exceeds available stock",
                available=stock,
                requested=payload.quantity,
            )

        with upstream_errors("Failed to update cart item"):
            rows = self.cart_repo.update(client, item_id, {"quantity": payload.quantity})

        if not rows:
            raise NotFound("Cart item not found")

        return CartItemEnvelope(
            message=f'Updated quantity for "{product.title}"',
            cartItem=CartItemRead.model_validate(rows[0]),
        )

    def remove_item(
        self,
        client: Client,
        current_user: CurrentUser,
        item_id: RecordId,
    ) -> MessageResponse:
        """Remove one of the caller's cart rows."""
        item = self._get_owned_item(
            client, item_id, current_user.user.id, product_columns="title"
        )

        with upstream_errors("Failed to remove cart item"):
            self.cart_repo.delete(client, item_id)

        title = item.products.title if item.products else None
        return MessageResponse(message=f'Removed "{title}" from cart')

    def clear_cart(self, client: Client, current_user: CurrentUser) -> MessageResponse:
        """Delete every cart row belonging to the caller."""
        with upstream_errors("Failed to clear cart"):
            self.cart_repo.clear_user_cart(client, current_user.user.id)

        logger.info("Cart cleared for user %s", current_user.user.id)
        return MessageResponse(message="Cart cleared successfully")
