import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from quickdesk.auth.dependencies import get_current_profile
from quickdesk.auth.models.profile import Profile
from quickdesk.core.redis import invalidate_unread_counts
from quickdesk.db.session import get_db
from quickdesk.notifications.schemas.notification import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from quickdesk.notifications.services.inbox_service import InboxService

router = APIRouter()


@router.get("/notifications", response_model=list[NotificationResponse])
def list_notifications(
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[NotificationResponse]:
    notifications = InboxService(db).list_notifications(current_profile)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> UnreadCountResponse:
    count = await InboxService(db).unread_count(current_profile)
    return UnreadCountResponse(unread_count=count)


@router.patch("/notifications/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> MarkAllReadResponse:
    updated = await asyncio.to_thread(InboxService(db).mark_all_read, current_profile)
    await invalidate_unread_counts([current_profile.id])
    return MarkAllReadResponse(updated=updated)


@router.patch("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> NotificationResponse:
    notification = await asyncio.to_thread(
        InboxService(db).mark_read, current_profile, notification_id
    )
    await invalidate_unread_counts([current_profile.id])
    return NotificationResponse.model_validate(notification)


@router.delete("/notifications/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> None:
    await asyncio.to_thread(InboxService(db).delete, current_profile, notification_id)
    await invalidate_unread_counts([current_profile.id])
