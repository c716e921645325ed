from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quickdesk.auth.dependencies import get_current_profile
from quickdesk.auth.models.profile import STAFF_ROLES, Profile
from quickdesk.auth.schemas.profile import (
    AgentSummary,
    NotificationSettings,
    ProfileResponse,
    ProfileUpdateRequest,
)
from quickdesk.db.session import get_db

router = APIRouter()


@router.get("/profile/me", response_model=ProfileResponse)
def get_my_profile(
    current_profile: Profile = Depends(get_current_profile),
) -> Profile:
    return current_profile


@router.put("/profile/me", response_model=ProfileResponse)
def update_my_profile(
    data: ProfileUpdateRequest,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> Profile:
    # Role changes are an admin concern and never accepted here
    current_profile.full_name = data.full_name
    db.commit()
    db.refresh(current_profile)
    return current_profile


@router.get("/profile/me/notification-settings", response_model=NotificationSettings)
def get_notification_settings(
    current_profile: Profile = Depends(get_current_profile),
) -> NotificationSettings:
    return NotificationSettings.for_profile(current_profile.notification_settings)


@router.put("/profile/me/notification-settings", response_model=NotificationSettings)
def update_notification_settings(
    data: NotificationSettings,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> NotificationSettings:
    current_profile.notification_settings = data.model_dump()
    db.commit()
    return data


@router.delete("/profile/me/notification-settings", response_model=NotificationSettings)
def reset_notification_settings(
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> NotificationSettings:
    defaults = NotificationSettings()
    current_profile.notification_settings = defaults.model_dump()
    db.commit()
    return defaults


@router.get("/agents", response_model=list[AgentSummary])
def list_agents(
    _current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[Profile]:
    """Support agents and admins, for the assignee filter and assignment."""
    return (
        db.query(Profile)
        .filter(Profile.role.in_(STAFF_ROLES), Profile.is_active == True)  # noqa: E712
        .order_by(Profile.full_name)
        .all()
    )
