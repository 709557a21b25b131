# app/repositories/profile_repo.py
from typing import Any

from supabase import Client

TABLE = "profiles"


class ProfileRepository:
    """
    Data access layer for the `profiles` table.

    A profile row shares its id with the Supabase Auth user and may not
    exist yet for new accounts.
    """

    def get_by_id(self, client: Client, user_id: str) -> dict[str, Any] | None:
        """Return the profile row, or None if the user has none."""
        response = (
            client.table(TABLE)
            .select("username, website, avatar_url, google_id")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    def upsert(self, client: Client, row: dict[str, Any]) -> list[dict[str, Any]]:
        """Insert or replace the profile keyed by id."""
        response = client.table(TABLE).upsert(row, on_conflict="id").execute()
        return response.data or []
