# app/services/product_service.py
import logging
from datetime import datetime, timezone
from typing import Any

from supabase import Client

from app.core.errors import (
    BadRequest,
    Forbidden,
    NotFound,
    UpstreamFailure,
    upstream_errors,
)
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    MyProductsRead,
    ProductCreate,
    ProductEnvelope,
    ProductRead,
    ProductUpdate,
    RecordId,
)
from app.schemas.user import CurrentUser, MessageResponse, SellerRead

logger = logging.getLogger(__name__)


class ProductService:
    """
    Business logic for products.

    Responsibilities:
      - force seller_id to the authenticated caller on create
      - ownership checks before any mutation (read-then-compare), repeated
        as a seller_id filter on the write itself
      - refuse to delete products that sit in someone's cart
      - map Supabase errors to the API error envelope
    """

    def __init__(self, repo: ProductRepository, cart_repo: CartRepository):
        self.repo = repo
        self.cart_repo = cart_repo

    # ----- Helpers -----

    def _get_owned_product(
        self,
        client: Client,
        product_id: RecordId,
        user_id: str,
        columns: str,
        forbidden_message: str,
    ) -> dict[str, Any]:
        with upstream_errors("Product not found", error_cls=NotFound):
            product = self.repo.get_by_id(client, product_id, columns=columns)

        if product is None:
            raise NotFound("Product not found")

        if str(product.get("seller_id")) != user_id:
            logger.warning(
                "User %s tried to modify product %s owned by %s",
                user_id,
                product_id,
                product.get("seller_id"),
            )
            raise Forbidden(forbidden_message)

        return product

    # ----- Public -----

    def list_products(self, client: Client) -> list[ProductRead]:
        """All products, newest first. No pagination."""
        with upstream_errors("Failed to fetch products"):
            rows = self.repo.list_all(client)
        return [ProductRead.model_validate(row) for row in rows]

    # ----- Seller operations -----

    def create_product(
        self,
        user_client: Client,
        current_user: CurrentUser,
        payload: ProductCreate,
    ) -> ProductEnvelope:
        """
        Create a product owned by the caller.

        The insert goes through the caller-scoped client so Supabase RLS
        checks ownership as well.
        """
        row = payload.to_row(seller_id=current_user.user.id)

        with upstream_errors("Failed to create product"):
            created = self.repo.create(user_client, row)

        if not created:
            raise UpstreamFailure("Product creation failed - no data returned")

        product = ProductRead.model_validate(created[0])
        logger.info("Product %s created by %s", product.id, current_user.user.id)
        return ProductEnvelope(message="Product created successfully", product=product)

    def list_my_products(
        self,
        client: Client,
        current_user: CurrentUser,
    ) -> MyProductsRead:
        with upstream_errors("Failed to fetch your products"):
            rows = self.repo.list_for_seller(client, current_user.user.id)

        products = [ProductRead.model_validate(row) for row in rows]
        return MyProductsRead(
            products=products,
            count=len(products),
            seller=SellerRead.from_identity(current_user.user),
        )

    def update_my_product(
        self,
        client: Client,
        current_user: CurrentUser,
        product_id: RecordId,
        payload: ProductUpdate,
    ) -> ProductEnvelope:
        """
        Partial update of a product the caller owns.

        Only fields present in the request body are written.
        """
        user_id = current_user.user.id
        self._get_owned_product(
            client,
            product_id,
            user_id,
            columns="seller_id",
            forbidden_message="You can only edit your own products",
        )

        updates: dict[str, Any] = payload.model_dump(exclude_unset=True)
        if updates.get("price") is not None:
            updates["price"] = float(updates["price"])
        if updates.get("stock_quantity") is not None:
            updates["stock_quantity"] = int(updates["stock_quantity"])
        updates["updated_at"] = datetime.now(timezone.utc).isoformat()

        with upstream_errors("Failed to update product"):
            rows = self.repo.update_owned(client, product_id, user_id, updates)

        # Row vanished between the check and the write
        if not rows:
            raise NotFound("Product not found or update failed")

        logger.info("Product %s updated by %s", product_id, user_id)
        return ProductEnvelope(
            message="Product updated successfully",
            product=ProductRead.model_validate(rows[0]),
        )

    def delete_my_product(
        self,
        client: Client,
        current_user: CurrentUser,
        product_id: RecordId,
    ) -> MessageResponse:
        """
        Delete a product the caller owns.

        Products referenced by any cart item are never deleted; sellers are
        pointed at deactivation instead.
        """
        user_id = current_user.user.id
        product = self._get_owned_product(
            client,
            product_id,
            user_id,
            columns="seller_id, title",
            forbidden_message="You can only delete your own products",
        )

        with upstream_errors("Failed to check cart dependencies"):
            cart_refs = self.cart_repo.list_ids_for_product(client, product_id)

        if cart_refs:
            raise BadRequest(
                "Cannot delete product that is currently in customer carts",
                suggestion="Consider marking it as inactive instead",
            )

        with upstream_errors("Failed to delete product"):
            self.repo.delete_owned(client, product_id, user_id)

        logger.info("Product %s deleted by %s", product_id, user_id)
        return MessageResponse(
            message=f'Product "{product.get("title")}" deleted successfully'
        )
