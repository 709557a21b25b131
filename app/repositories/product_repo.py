# app/repositories/product_repo.py
from typing import Any

from supabase import Client

from app.schemas.product import RecordId

TABLE = "products"


class ProductRepository:
    """
    Data access layer for the `products` table.

    - Pure Supabase table calls (select / insert / update / delete).
    - No FastAPI, no business logic.
    - Errors from PostgREST propagate as PostgrestAPIError.
    """

    # ----- Reads -----

    def list_all(self, client: Client) -> list[dict[str, Any]]:
        response = (
            client.table(TABLE)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    def list_for_seller(
        self,
        client: Client,
        seller_id: str,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        response = (
            client.table(TABLE)
            .select(columns)
            .eq("seller_id", seller_id)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    def get_by_id(
        self,
        client: Client,
        product_id: RecordId,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        response = (
            client.table(TABLE)
            .select(columns)
            .eq("id", product_id)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    # ----- Writes -----

    def create(self, client: Client, row: dict[str, Any]) -> list[dict[str, Any]]:
        """Insert a product and return the rows PostgREST hands back."""
        response = client.table(TABLE).insert(row).execute()
        return response.data or []

    def update_owned(
        self,
        client: Client,
        product_id: RecordId,
        seller_id: str,
        values: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Update filtered by id AND seller_id; empty result means nothing matched."""
        response = (
            client.table(TABLE)
            .update(values)
            .eq("id", product_id)
            .eq("seller_id", seller_id)
            .execute()
        )
        return response.data or []

    def delete_owned(
        self,
        client: Client,
        product_id: RecordId,
        seller_id: str,
    ) -> list[dict[str, Any]]:
        response = (
            client.table(TABLE)
            .delete()
            .eq("id", product_id)
            .eq("seller_id", seller_id)
            .execute()
        )
        return response.data or []
