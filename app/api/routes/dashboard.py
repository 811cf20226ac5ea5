from fastapi import APIRouter

from app.api.dependencies import AdminUserDep, ClockDep, PolicyDep, SessionDep
from app.core import settings_service
from app.core.dashboard_service import build_admin_dashboard
from app.core.logging import get_logger
from app.models.dashboard import AdminDashboard

logger = get_logger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=AdminDashboard)
def get_dashboard(
    session: SessionDep,
    current_user: AdminUserDep,
    policy: PolicyDep,
    clock: ClockDep,
    range: str = "month",
) -> AdminDashboard:
    """
    Attendance overview for today plus weekly and monthly trends.

    ``range`` selects the window used to rank top performers: ``week``,
    ``month``, or the last three months for any other value.

    **RBAC:** Admin only.
    """
    logger.info(f"Admin {current_user.email} accessed dashboard (range={range})")
    return build_admin_dashboard(
        session,
        policy,
        clock(),
        range_=range,
        company_name=settings_service.get_setting_value(
            session, settings_service.COMPANY_NAME
        ),
    )
