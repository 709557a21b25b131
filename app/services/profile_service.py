# app/services/profile_service.py
import logging
from datetime import datetime, timezone

from supabase import Client, PostgrestAPIError

from app.core.errors import error_text, upstream_errors
from app.repositories.profile_repo import ProfileRepository
from app.schemas.user import (
    CurrentUser,
    ProfileRead,
    ProfileResponse,
    ProfileUpdate,
    ProfileUpdated,
    ProfileUpdateResponse,
)

logger = logging.getLogger(__name__)


class ProfileService:
    """
    Business logic for user profiles.

    Responsibilities:
      - merge the optional `profiles` row over Supabase Auth metadata
      - upsert the profile (the update endpoint doubles as create)
      - mirror display name / avatar into Auth user metadata (best effort)
    """

    def __init__(self, repo: ProfileRepository):
        self.repo = repo

    def get_profile(self, client: Client, current_user: CurrentUser) -> ProfileResponse:
        """
        Read the caller's profile.

        A missing row (or a failed lookup) is not an error: every field
        falls back to the identity's metadata.
        """
        identity = current_user.user

        profile: dict = {}
        try:
            profile = self.repo.get_by_id(client, identity.id) or {}
        except PostgrestAPIError as exc:
            logger.warning(
                "Profile lookup failed for %s, using identity metadata: %s",
                identity.id,
                error_text(exc),
            )

        username = profile.get("username")
        return ProfileResponse(
            user=ProfileRead(
                id=identity.id,
                email=identity.email,
                name=username or identity.full_name or identity.email,
                username=username or identity.full_name,
                website=profile.get("website") or "",
                avatar_url=profile.get("avatar_url") or identity.avatar_url,
                google_id=profile.get("google_id") or identity.provider_id,
                created_at=identity.created_at,
                last_sign_in_at=identity.last_sign_in_at,
                email_confirmed_at=identity.email_confirmed_at,
            )
        )

    def update_profile(
        self,
        client: Client,
        current_user: CurrentUser,
        payload: ProfileUpdate,
    ) -> ProfileUpdateResponse:
        identity = current_user.user
        row = {
            "id": identity.id,
            "username": payload.username or payload.name or identity.email,
            "website": payload.website or "",
            "avatar_url": payload.avatar_url or "",
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

        with upstream_errors("Failed to update profile"):
            self.repo.upsert(client, row)

        self._mirror_metadata(client, identity.id, payload)

        logger.info("Profile updated for %s", identity.id)
        return ProfileUpdateResponse(
            message="Profile updated successfully",
            user=ProfileUpdated(
                id=identity.id,
                email=identity.email,
                name=row["username"],
                username=row["username"],
                website=row["website"],
                avatar_url=row["avatar_url"],
                updated_at=row["updated_at"],
            ),
        )

    def _mirror_metadata(
        self,
        client: Client,
        user_id: str,
        payload: ProfileUpdate,
    ) -> None:
        """
        Copy display name / avatar into Supabase Auth user metadata.

        The profiles row is authoritative; a failure here is logged only.
        Auth merges user_metadata, so absent fields are left out rather
        than sent as null.
        """
        metadata = {
            key: value
            for key, value in (
                ("full_name", payload.username or payload.name),
                ("avatar_url", payload.avatar_url),
            )
            if value is not None
        }
        if not metadata:
            return

        try:
            client.auth.admin.update_user_by_id(user_id, {"user_metadata": metadata})
        except Exception as exc:
            logger.warning("Could not mirror profile metadata for %s: %s", user_id, exc)
