# app/routers/products.py
from fastapi import APIRouter, Depends, status
from supabase import Client

from app.core.auth import get_user_supabase, require_auth
from app.core.errors import BoundaryRoute
from app.core.supabase_client import get_supabase
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    MyProductsRead,
    ProductCreate,
    ProductEnvelope,
    ProductRead,
    ProductUpdate,
)
from app.schemas.user import CurrentUser, MessageResponse
from app.services.product_service import ProductService

router = APIRouter(tags=["Products"], route_class=BoundaryRoute)

repo = ProductRepository()
cart_repo = CartRepository()
service = ProductService(repo, cart_repo)


# -------- Public endpoints --------


@router.get("/posts", response_model=list[ProductRead])
def list_products(client: Client = Depends(get_supabase)):
    """
    List every product, newest first.

    - Public endpoint.
    """
    return service.list_products(client)


# -------- Seller endpoints --------


@router.post(
    "/posts",
    response_model=ProductEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductCreate,
    current_user: CurrentUser = Depends(require_auth),
    user_client: Client = Depends(get_user_supabase),
):
    """
    Create a new product owned by the caller.

    The insert runs with the caller's token, so RLS applies too.
    """
    return service.create_product(user_client, current_user, payload)


@router.get("/my-products", response_model=MyProductsRead)
def list_my_products(
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Products created by the caller (seller dashboard).
    """
    return service.list_my_products(client, current_user)


@router.put("/my-products/{product_id}", response_model=ProductEnvelope)
def update_my_product(
    product_id: str,
    payload: ProductUpdate,
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Update one of the caller's products (partial update).

    - 404 if the product does not exist.
    - 403 if it belongs to another seller.
    """
    return service.update_my_product(client, current_user, product_id, payload)


@router.delete("/my-products/{product_id}", response_model=MessageResponse)
def delete_my_product(
    product_id: str,
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Delete one of the caller's products.

    Refused with 400 while the product sits in any cart.
    """
    return service.delete_my_product(client, current_user, product_id)
