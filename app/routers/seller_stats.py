# app/routers/seller_stats.py
from fastapi import APIRouter, Depends
from supabase import Client

from app.core.auth import require_auth
from app.core.errors import BoundaryRoute
from app.core.supabase_client import get_supabase
from app.repositories.product_repo import ProductRepository
from app.schemas.stats import SellerDashboardStats
from app.schemas.user import CurrentUser
from app.services.stats_service import StatsService

router = APIRouter(prefix="/seller-stats", tags=["Seller Stats"], route_class=BoundaryRoute)

repo = ProductRepository()
service = StatsService(repo)


@router.get("", response_model=SellerDashboardStats)
def get_seller_stats(
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Aggregated statistics for the caller's products.

    Counts total / active / inactive / out-of-stock products, products
    created in the last 7 days and the total inventory value.
    """
    return service.get_seller_stats(client, current_user)
