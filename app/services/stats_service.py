# app/services/stats_service.py
from datetime import datetime, timedelta, timezone

from supabase import Client

from app.core.errors import upstream_errors
from app.repositories.product_repo import ProductRepository
from app.schemas.stats import (
    ProductStatsRow,
    SellerDashboardStats,
    SellerStatistics,
    StatsSummary,
)
from app.schemas.user import CurrentUser, SellerRead

STATS_COLUMNS = "id, is_active, stock_quantity, price, created_at"

# Products created within this window count as "recent"
RECENT_WINDOW = timedelta(days=7)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def compute_seller_statistics(
    rows: list[ProductStatsRow],
    now: datetime | None = None,
) -> SellerStatistics:
    """
    Single pass over a seller's products.

    The full product set must be in `rows`; nothing here paginates.
    """
    now = now or datetime.now(timezone.utc)
    recent_cutoff = _as_utc(now) - RECENT_WINDOW

    total = 0
    active = 0
    out_of_stock = 0
    recent = 0
    inventory_value = 0.0

    for row in rows:
        stock = row.stock_quantity or 0
        total += 1
        if row.is_active:
            active += 1
        if row.stock_quantity == 0:
            out_of_stock += 1
        if row.created_at is not None and _as_utc(row.created_at) > recent_cutoff:
            recent += 1
        inventory_value += (row.price or 0.0) * stock

    return SellerStatistics(
        total_products=total,
        active_products=active,
        inactive_products=total - active,
        out_of_stock_products=out_of_stock,
        recent_products=recent,
        total_inventory_value=inventory_value,
    )


class StatsService:
    """
    Orchestrates aggregated seller dashboard statistics.
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def get_seller_stats(
        self,
        client: Client,
        current_user: CurrentUser,
    ) -> SellerDashboardStats:
        with upstream_errors("Failed to fetch seller statistics"):
            rows = self.repo.list_for_seller(
                client, current_user.user.id, columns=STATS_COLUMNS
            )

        statistics = compute_seller_statistics(
            [ProductStatsRow.model_validate(row) for row in rows]
        )

        return SellerDashboardStats(
            seller=SellerRead.from_identity(current_user.user),
            statistics=statistics,
            summary=StatsSummary(
                message=(
                    f"You have {statistics.total_products} products, "
                    f"{statistics.active_products} active"
                )
            ),
        )
