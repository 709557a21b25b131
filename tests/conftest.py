"""Pytest fixtures for the API tests.

Builds the app with test settings and swaps every Supabase client
dependency for one in-memory FakeSupabase, so each test starts with
empty tables and no users. Account and product factories seed state.
"""

from dataclasses import dataclass
from typing import Any

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from app.core.auth import get_user_supabase, require_auth
from app.core.config import Settings
from app.core.supabase_client import get_auth_supabase, get_supabase
from app.main import create_app
from app.schemas.user import CurrentUser
from tests.fakes import FakeSupabase, FakeUser

FRONTEND_URL = "https://shop.example.com"


@dataclass
class Account:
    user: FakeUser
    token: str

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        SUPABASE_URL="https://fake.supabase.co",
        SUPABASE_SERVICE_KEY="service-role-key",
        SUPABASE_ANON_KEY="anon-key",
        FRONTEND_URL=FRONTEND_URL,
        CORS_ORIGINS=[FRONTEND_URL],
    )


@pytest.fixture
def supabase() -> FakeSupabase:
    """Shared in-memory tables and auth for one test."""
    return FakeSupabase()


@pytest.fixture
def client(settings: Settings, supabase: FakeSupabase):
    """TestClient over an app wired to the fake Supabase."""
    app = create_app(settings)

    def caller_scoped(current_user: CurrentUser = Depends(require_auth)) -> FakeSupabase:
        return supabase.scoped(current_user.token)

    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_auth_supabase] = lambda: supabase
    app.dependency_overrides[get_user_supabase] = caller_scoped

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def account_factory(supabase: FakeSupabase):
    """Factory that registers a user and issues a bearer token for them."""

    def _make_account(email: str, password: str = "secret123", **metadata: Any) -> Account:
        user = supabase.auth.create_user(email, password, **metadata)
        return Account(user=user, token=supabase.auth.issue_token(user))

    return _make_account


@pytest.fixture
def seller(account_factory) -> Account:
    return account_factory("seller@example.com", full_name="Sam Seller")


@pytest.fixture
def buyer(account_factory) -> Account:
    return account_factory("buyer@example.com")


@pytest.fixture
def product_factory(supabase: FakeSupabase):
    """Factory that stores a product row directly, bypassing the API."""

    def _make_product(seller: Account, **overrides: Any) -> dict[str, Any]:
        row = {
            "seller_id": seller.id,
            "title": "Widget",
            "description": "A useful widget",
            "price": 10.0,
            "image_url": None,
            "category": None,
            "stock_quantity": 5,
            "is_active": True,
        }
        row.update(overrides)
        return supabase.store.insert("products", row)

    return _make_product
