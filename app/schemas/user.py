# app/schemas/user.py
from datetime import datetime
from typing import Any

from pydantic import ConfigDict, HttpUrl, TypeAdapter, ValidationError, field_validator, model_validator
from sqlmodel import SQLModel, Field

USERNAME_MAX_LENGTH = 50

_http_url = TypeAdapter(HttpUrl)


def is_valid_http_url(value: str | None) -> bool:
    """Empty values are allowed; anything else must be an http(s) URL."""
    if not value:
        return True
    try:
        _http_url.validate_python(value)
    except ValidationError:
        return False
    return True


# ---------------------------------------------------------------------------
# Identity (Supabase Auth user)
# ---------------------------------------------------------------------------


class Identity(SQLModel):
    """
    The subset of a Supabase Auth user this API reads.

    Identity:
      - id: Supabase auth.users.id

    user_metadata carries display data written at sign-up / OAuth:
      - full_name, avatar_url, provider_id
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    last_sign_in_at: datetime | None = None
    email_confirmed_at: datetime | None = None

    @field_validator("user_metadata", mode="before")
    @classmethod
    def default_metadata(cls, v: Any) -> Any:
        return v or {}

    @property
    def full_name(self) -> str | None:
        return self.user_metadata.get("full_name") or None

    @property
    def display_name(self) -> str | None:
        return self.full_name or self.email

    @property
    def avatar_url(self) -> str | None:
        return self.user_metadata.get("avatar_url")

    @property
    def provider_id(self) -> str | None:
        return self.user_metadata.get("provider_id")


class CurrentUser(SQLModel):
    """Result of the auth guard: the verified token and who it belongs to."""

    token: str
    user: Identity
    raw: dict[str, Any] = Field(default_factory=dict)


class UserSummary(SQLModel):
    """Normalized user shape returned by login / session endpoints."""

    id: str
    email: str | None = None
    name: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_identity(cls, identity: Identity) -> "UserSummary":
        return cls(
            id=identity.id,
            email=identity.email,
            name=identity.display_name,
            avatar_url=identity.avatar_url,
        )


class SellerRead(SQLModel):
    id: str
    email: str | None = None
    name: str | None = None

    @classmethod
    def from_identity(cls, identity: Identity) -> "SellerRead":
        return cls(id=identity.id, email=identity.email, name=identity.display_name)


# ---------------------------------------------------------------------------
# Auth payloads
# ---------------------------------------------------------------------------


class Credentials(SQLModel):
    """Email + password pair for login."""

    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def require_both(self) -> "Credentials":
        if not self.email or not self.password:
            raise ValueError("Email and password are required")
        return self


class RegisterRequest(Credentials):
    """
    Payload for account creation.

    Validation rules:
      - email and password are required
      - password must be at least 6 characters
    """

    @model_validator(mode="after")
    def check_password_length(self) -> "RegisterRequest":
        if len(self.password or "") < 6:
            raise ValueError("Password must be at least 6 characters long")
        return self


class MagicLinkRequest(SQLModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None

    @model_validator(mode="after")
    def require_email(self) -> "MagicLinkRequest":
        if not self.email:
            raise ValueError("Email is required")
        return self


class MessageResponse(SQLModel):
    message: str


class LoginResponse(SQLModel):
    message: str
    user: UserSummary
    session: dict[str, Any] | None = None


class MagicLinkResponse(SQLModel):
    message: str
    email: str


class OAuthResponse(SQLModel):
    message: str
    redirectUrl: str | None = None


class SessionInfo(SQLModel):
    access_token: str
    user: dict[str, Any]


class SessionResponse(SQLModel):
    session: SessionInfo
    user: UserSummary


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class ProfileUpdate(SQLModel):
    """
    Payload for PUT /auth/profile (doubles as profile creation).

    Validation rules:
      - username at most 50 characters
      - website / avatar_url, when non-empty, must be http(s) URLs
    """

    model_config = ConfigDict(extra="ignore")

    username: str | None = None
    name: str | None = None
    website: str | None = None
    avatar_url: str | None = None

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str | None) -> str | None:
        if v and len(v) > USERNAME_MAX_LENGTH:
            raise ValueError(
                f"Username too long (max {USERNAME_MAX_LENGTH} characters)"
            )
        return v

    @field_validator("website")
    @classmethod
    def check_website(cls, v: str | None) -> str | None:
        if not is_valid_http_url(v):
            raise ValueError("Invalid website URL")
        return v

    @field_validator("avatar_url")
    @classmethod
    def check_avatar_url(cls, v: str | None) -> str | None:
        if not is_valid_http_url(v):
            raise ValueError("Invalid avatar URL")
        return v


class ProfileRead(SQLModel):
    """Profile fields merged over identity metadata."""

    id: str
    email: str | None = None
    name: str | None = None
    username: str | None = None
    website: str = ""
    avatar_url: str | None = None
    google_id: str | None = None
    created_at: datetime | None = None
    last_sign_in_at: datetime | None = None
    email_confirmed_at: datetime | None = None


class ProfileResponse(SQLModel):
    user: ProfileRead


class ProfileUpdated(SQLModel):
    id: str
    email: str | None = None
    name: str
    username: str
    website: str
    avatar_url: str
    updated_at: str


class ProfileUpdateResponse(SQLModel):
    message: str
    user: ProfileUpdated
