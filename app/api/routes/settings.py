from fastapi import APIRouter

from app.api.dependencies import AdminUserDep, CurrentUserDep, SessionDep
from app.core import settings_service
from app.core.logging import get_logger
from app.models.setting import Setting, SettingPublic, SettingsUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=list[SettingPublic])
def get_settings(session: SessionDep, current_user: CurrentUserDep) -> list[Setting]:
    """All settings ordered by key."""
    return settings_service.list_settings(session)


@router.put("", response_model=list[SettingPublic])
def update_settings(
    request: SettingsUpdate,
    session: SessionDep,
    current_user: AdminUserDep,
) -> list[Setting]:
    """
    Insert or update a batch of settings.

    Known keys are validated (``HH:MM`` times, numeric thresholds, IANA
    time zone) before anything is written.

    **RBAC:** Admin only.
    """
    logger.info(
        f"Admin {current_user.email} updating {len(request.settings)} setting(s)"
    )
    return settings_service.upsert_settings(session, request.settings)
