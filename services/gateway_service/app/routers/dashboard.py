from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from pydantic import BaseModel
from services.gateway_service.services import dashboard_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["dashboard"])


class AdminDashboardStats(BaseModel):
    total_revenue: float
    user_count: int
    active_users: int
    revenue_by_sport: dict[str, float]
    role_distribution: dict[str, int]
    subscription_stats: dict[str, int]
    total_merchandise_sold: int
    total_merchandise_revenue: float
    revenue_by_product: dict[str, float]


@router.get("/admin/dashboard-stats", response_model=AdminDashboardStats)
async def get_admin_dashboard_stats(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Headline numbers for the admin home screen.
    Aggregates revenue, members and merchandise across services.
    """
    return await dashboard_ops.get_stats(db, caller)
