from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quickdesk.analytics.schemas.analytics import AnalyticsResponse, DashboardResponse
from quickdesk.analytics.services.statistics_service import StatisticsService
from quickdesk.auth.dependencies import get_current_profile, require_admin
from quickdesk.auth.models.profile import Profile
from quickdesk.db.session import get_db

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> DashboardResponse:
    return StatisticsService.get_dashboard(db, current_profile)


@router.get("/admin/analytics", response_model=AnalyticsResponse)
def get_analytics(
    _admin: Profile = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AnalyticsResponse:
    """
    System-wide ticket analytics.

    Returns totals, the status and category breakdowns and the five most
    recently created tickets.
    """
    return StatisticsService.get_analytics(db)
