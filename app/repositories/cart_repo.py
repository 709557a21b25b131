# app/repositories/cart_repo.py
from typing import Any

from supabase import Client

from app.schemas.product import RecordId

TABLE = "cart_items"

# Public product fields joined onto every cart row in the listing
PRODUCT_JOIN = (
    "products(id, title, description, price, image_url, "
    "category, stock_quantity, is_active)"
)


class CartRepository:

    # Get items for a user
    def list_for_user(self, client: Client, user_id: str) -> list[dict[str, Any]]:
        response = (
            client.table(TABLE)
            .select(f"*, {PRODUCT_JOIN}")
            .eq("user_id", user_id)
            .order("added_at", desc=True)
            .execute()
        )
        return response.data or []

    def get_item(
        self, client: Client, user_id: str, product_id: RecordId
    ) -> dict[str, Any] | None:
        response = (
            client.table(TABLE)
            .select("*")
            .eq("user_id", user_id)
            .eq("product_id", product_id)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    def get_owned(
        self,
        client: Client,
        item_id: RecordId,
        user_id: str,
        product_columns: str = "title",
    ) -> dict[str, Any] | None:
        """Cart row by id, only if it belongs to user_id, joined with its product."""
        response = (
            client.table(TABLE)
            .select(f"*, products({product_columns})")
            .eq("id", item_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    def list_ids_for_product(
        self, client: Client, product_id: RecordId
    ) -> list[dict[str, Any]]:
        response = (
            client.table(TABLE)
            .select("id")
            .eq("product_id", product_id)
            .execute()
        )
        return response.data or []

    # CRUD
    def create(self, client: Client, row: dict[str, Any]) -> list[dict[str, Any]]:
        response = client.table(TABLE).insert(row).execute()
        return response.data or []

    def update(
        self, client: Client, item_id: RecordId, values: dict[str, Any]
    ) -> list[dict[str, Any]]:
        response = client.table(TABLE).update(values).eq("id", item_id).execute()
        return response.data or []

    def delete(self, client: Client, item_id: RecordId) -> None:
        client.table(TABLE).delete().eq("id", item_id).execute()

    def clear_user_cart(self, client: Client, user_id: str) -> None:
        client.table(TABLE).delete().eq("user_id", user_id).execute()
