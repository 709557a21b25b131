# app/routers/cart.py
from fastapi import APIRouter, Depends, status
from supabase import Client

from app.core.auth import require_auth
from app.core.errors import BoundaryRoute
from app.core.supabase_client import get_supabase
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemEnvelope,
    CartItemRead,
    CartItemUpdate,
)
from app.schemas.user import CurrentUser, MessageResponse
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"], route_class=BoundaryRoute)

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=list[CartItemRead])
def get_my_cart(
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Get the current user's cart items with product details.
    """
    return service.list_items(client, current_user)


@router.post("", response_model=CartItemEnvelope, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    payload: CartItemCreate,
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Add product to the current user's cart.

    Adding a product already in the cart increases its quantity.
    """
    return service.add_to_cart(client, current_user, payload)


@router.put("/{item_id}", response_model=CartItemEnvelope)
def update_cart_item(
    item_id: str,
    payload: CartItemUpdate,
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Set the quantity of a cart item.
    """
    return service.update_quantity(client, current_user, item_id, payload)


@router.delete("/{item_id}", response_model=MessageResponse)
def remove_cart_item(
    item_id: str,
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Remove a single item from the cart.
    """
    return service.remove_item(client, current_user, item_id)


@router.delete("", response_model=MessageResponse)
def clear_cart(
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Clear the entire cart.
    """
    return service.clear_cart(client, current_user)
