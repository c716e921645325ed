"""In-app notifications for ticket events.

Each event builds drafts for the interested parties. Drafts are deduplicated
per recipient (the first draft wins), filtered by the recipients' preferences
and inserted in order in a single commit. The matching e-mail is queued after
the commit.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from quickdesk.auth.models.profile import Profile
from quickdesk.auth.schemas.profile import NotificationSettings
from quickdesk.core.config import settings
from quickdesk.notifications.models.notification import Notification, NotificationType
from quickdesk.tickets.models.comment import TicketComment
from quickdesk.tickets.models.ticket import Ticket, TicketStatus

logger = logging.getLogger(__name__)


@dataclass
class NotificationDraft:
    user_id: UUID
    title: str
    message: str
    type: NotificationType
    ticket_id: UUID | None = None
    meta: dict[str, Any] = field(default_factory=dict)


def dispatch_ticket_email(
    ticket_id: UUID,
    event: str,
    *,
    actor_id: UUID | None = None,
    comment_id: UUID | None = None,
) -> None:
    """Queue the e-mail for a ticket event. Failures never reach the caller."""
    if not settings.EMAIL_NOTIFICATIONS_ENABLED:
        return
    try:
        from quickdesk.notifications.tasks import send_ticket_email

        send_ticket_email.delay(
            ticket_id=str(ticket_id),
            event=event,
            comment_id=str(comment_id) if comment_id else None,
            actor_id=str(actor_id) if actor_id else None,
        )
    except (ImportError, AttributeError) as exc:
        logger.error("Celery task import failed: %s", exc, exc_info=True)
    except Exception as exc:
        logger.warning("Failed to enqueue %s e-mail for ticket %s: %s", event, ticket_id, exc)


class NotificationFanout:
    def __init__(self, db: Session) -> None:
        self.db = db

    def ticket_created(self, ticket: Ticket) -> list[UUID]:
        drafts = [
            NotificationDraft(
                user_id=ticket.creator_id,
                title="Ticket Created",
                message=f'Your ticket "{ticket.title}" has been created successfully.',
                type=NotificationType.TICKET_CREATED,
                ticket_id=ticket.id,
                meta={"ticket_title": ticket.title},
            )
        ]
        recipients = self._deliver(drafts)
        dispatch_ticket_email(ticket.id, "created", actor_id=ticket.creator_id)
        return recipients

    def status_changed(self, ticket: Ticket, actor: Profile, old_status: str) -> list[UUID]:
        if ticket.status == TicketStatus.RESOLVED.value:
            draft = NotificationDraft(
                user_id=ticket.creator_id,
                title="Ticket Resolved",
                message=f'Your ticket "{ticket.title}" has been resolved by {actor.full_name}.',
                type=NotificationType.TICKET_RESOLVED,
                ticket_id=ticket.id,
                meta={
                    "ticket_title": ticket.title,
                    "status": ticket.status,
                    "assigned_agent": actor.full_name,
                },
            )
        else:
            draft = NotificationDraft(
                user_id=ticket.creator_id,
                title="Ticket Status Updated",
                message=(
                    f'Your ticket "{ticket.title}" status changed from '
                    f'"{old_status}" to "{ticket.status}".'
                ),
                type=NotificationType.TICKET_UPDATED,
                ticket_id=ticket.id,
                meta={"ticket_title": ticket.title, "status": ticket.status},
            )

        recipients = self._deliver([draft], actor_id=actor.id)
        dispatch_ticket_email(ticket.id, "status_changed", actor_id=actor.id)
        return recipients

    def priority_changed(self, ticket: Ticket, actor: Profile, old_priority: str) -> list[UUID]:
        draft = NotificationDraft(
            user_id=ticket.creator_id,
            title="Ticket Priority Updated",
            message=(
                f'Your ticket "{ticket.title}" priority changed from '
                f'"{old_priority}" to "{ticket.priority}".'
            ),
            type=NotificationType.TICKET_UPDATED,
            ticket_id=ticket.id,
            meta={"ticket_title": ticket.title, "priority": ticket.priority},
        )
        return self._deliver([draft], actor_id=actor.id)

    def assignment_changed(self, ticket: Ticket, actor: Profile) -> list[UUID]:
        agent = ticket.assigned_agent
        if agent is None:
            drafts = [
                NotificationDraft(
                    user_id=ticket.creator_id,
                    title="Ticket Assignment Updated",
                    message=f'Your ticket "{ticket.title}" assignment has been removed.',
                    type=NotificationType.TICKET_UPDATED,
                    ticket_id=ticket.id,
                    meta={"ticket_title": ticket.title},
                )
            ]
            return self._deliver(drafts, actor_id=actor.id)

        meta = {"ticket_title": ticket.title, "assigned_agent": agent.full_name}
        drafts = [
            NotificationDraft(
                user_id=ticket.creator_id,
                title="Ticket Assigned",
                message=f'Your ticket "{ticket.title}" has been assigned to {agent.full_name}.',
                type=NotificationType.TICKET_ASSIGNED,
                ticket_id=ticket.id,
                meta=meta,
            ),
            NotificationDraft(
                user_id=agent.id,
                title="New Ticket Assigned",
                message=f'You have been assigned to ticket "{ticket.title}".',
                type=NotificationType.TICKET_ASSIGNED,
                ticket_id=ticket.id,
                meta=dict(meta),
            ),
        ]
        recipients = self._deliver(drafts, actor_id=actor.id)
        dispatch_ticket_email(ticket.id, "assigned", actor_id=actor.id)
        return recipients

    def comment_added(self, ticket: Ticket, comment: TicketComment, author: Profile) -> list[UUID]:
        meta = {"ticket_title": ticket.title, "comment_author": author.full_name}
        drafts = [
            NotificationDraft(
                user_id=ticket.creator_id,
                title="New Comment on Your Ticket",
                message=f'{author.full_name} commented on your ticket "{ticket.title}".',
                type=NotificationType.TICKET_COMMENTED,
                ticket_id=ticket.id,
                meta=meta,
            )
        ]
        if ticket.assigned_agent_id is not None:
            drafts.append(
                NotificationDraft(
                    user_id=ticket.assigned_agent_id,
                    title="New Comment on Assigned Ticket",
                    message=(
                        f'{author.full_name} commented on ticket "{ticket.title}" '
                        "which is assigned to you."
                    ),
                    type=NotificationType.TICKET_COMMENTED,
                    ticket_id=ticket.id,
                    meta=dict(meta),
                )
            )
        recipients = self._deliver(drafts, actor_id=author.id)
        dispatch_ticket_email(ticket.id, "commented", actor_id=author.id, comment_id=comment.id)
        return recipients

    def _deliver(self, drafts: list[NotificationDraft], actor_id: UUID | None = None) -> list[UUID]:
        """Insert the surviving drafts and return their recipients in order."""
        unique: dict[UUID, NotificationDraft] = {}
        for draft in drafts:
            if draft.user_id == actor_id or draft.user_id in unique:
                continue
            unique[draft.user_id] = draft

        if not unique:
            return []

        profiles = self.db.query(Profile).filter(Profile.id.in_(list(unique))).all()
        preferences = {
            profile.id: NotificationSettings.for_profile(profile.notification_settings)
            for profile in profiles
        }

        delivered: list[UUID] = []
        for user_id, draft in unique.items():
            prefs = preferences.get(user_id)
            if prefs is None or not self._wants_in_app(prefs, draft.type):
                logger.debug("Skipping %s notification for %s", draft.type.value, user_id)
                continue
            self.db.add(
                Notification(
                    user_id=user_id,
                    title=draft.title,
                    message=draft.message,
                    type=draft.type.value,
                    ticket_id=draft.ticket_id,
                    meta=draft.meta,
                )
            )
            delivered.append(user_id)

        if delivered:
            self.db.commit()
        return delivered

    @staticmethod
    def _wants_in_app(prefs: NotificationSettings, notification_type: NotificationType) -> bool:
        if not prefs.in_app_notifications:
            return False
        return bool(getattr(prefs, notification_type.value, True))
