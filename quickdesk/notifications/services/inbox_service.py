import asyncio
from uuid import UUID

from sqlalchemy.orm import Session

from quickdesk.auth.models.profile import Profile
from quickdesk.core.constants import NOTIFICATION_INBOX_LIMIT
from quickdesk.core.exceptions import NotFoundError
from quickdesk.core.redis import (
    cache_unread_count,
    get_cached_unread_count,
    get_unread_generation,
)
from quickdesk.core.repository import BaseRepository
from quickdesk.notifications.models.notification import Notification


class InboxService:
    """A profile's own notifications. Other users' rows behave as missing."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.notifications = BaseRepository(db, Notification)

    def list_notifications(
        self, owner: Profile, limit: int = NOTIFICATION_INBOX_LIMIT
    ) -> list[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == owner.id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )

    async def unread_count(self, owner: Profile) -> int:
        cached = await get_cached_unread_count(owner.id)
        if cached is not None:
            return cached

        generation = await get_unread_generation(owner.id)
        count = await asyncio.to_thread(self._count_unread, owner)
        await cache_unread_count(owner.id, count, generation)
        return count

    def _count_unread(self, owner: Profile) -> int:
        return int(
            self.db.query(Notification)
            .filter(Notification.user_id == owner.id, Notification.read == False)  # noqa: E712
            .count()
        )

    def mark_read(self, owner: Profile, notification_id: UUID) -> Notification:
        notification = self._get_own(owner, notification_id)
        if not notification.read:
            notification.read = True
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def mark_all_read(self, owner: Profile) -> int:
        updated: int = (
            self.db.query(Notification)
            .filter(Notification.user_id == owner.id, Notification.read == False)  # noqa: E712
            .update({Notification.read: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def delete(self, owner: Profile, notification_id: UUID) -> None:
        notification = self._get_own(owner, notification_id)
        self.db.delete(notification)
        self.db.commit()

    def _get_own(self, owner: Profile, notification_id: UUID) -> Notification:
        notification = self.notifications.find_one(
            Notification.id == notification_id, Notification.user_id == owner.id
        )
        if not notification:
            raise NotFoundError("Notification not found", resource="notification")
        return notification
