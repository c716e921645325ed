"""Celery tasks for ticket e-mail notifications."""

import asyncio
import logging
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from quickdesk.auth.models.profile import STAFF_ROLES, Profile
from quickdesk.auth.schemas.profile import NotificationSettings
from quickdesk.core.celery_app import celery_app
from quickdesk.core.constants import MESSAGE_PREVIEW_MAX_LENGTH
from quickdesk.db.session import SessionLocal
from quickdesk.notifications.email_templates import (
    build_status_changed_email,
    build_ticket_assigned_email,
    build_ticket_commented_email,
    build_ticket_created_email,
)
from quickdesk.notifications.services.email_service import EmailMessage, get_email_service
from quickdesk.tickets.models.comment import TicketComment
from quickdesk.tickets.models.ticket import Ticket

logger = logging.getLogger(__name__)


def _wants_email(profile: Profile) -> bool:
    prefs = NotificationSettings.for_profile(profile.notification_settings)
    return profile.is_active and prefs.email_notifications


def _unique_by_email(profiles: list[Profile | None]) -> list[Profile]:
    seen: set[str] = set()
    result: list[Profile] = []
    for profile in profiles:
        if profile is None or profile.email in seen:
            continue
        seen.add(profile.email)
        result.append(profile)
    return result


def build_ticket_emails(
    db: Session,
    ticket: Ticket,
    event: str,
    comment: TicketComment | None = None,
    actor_id: UUID | None = None,
) -> list[EmailMessage]:
    """E-mails for one ticket event, filtered by recipient preferences.

    The profile that triggered the event is never e-mailed about it; for
    comments the author counts as the actor.
    """
    skip = {actor_id}
    if comment is not None:
        skip.add(comment.author_id)
    ticket_id = str(ticket.id)
    category_name = ticket.category.name if ticket.category else "General"
    messages: list[EmailMessage] = []

    if event == "created":
        staff = (
            db.query(Profile)
            .filter(Profile.role.in_(STAFF_ROLES), Profile.is_active == True)  # noqa: E712
            .order_by(Profile.email)
            .all()
        )
        for agent in _unique_by_email(list(staff)):
            if agent.id in skip or not _wants_email(agent):
                continue
            messages.append(
                build_ticket_created_email(
                    recipient_name=agent.full_name,
                    recipient_email=agent.email,
                    ticket_id=ticket_id,
                    ticket_title=ticket.title,
                    category_name=category_name,
                    priority=ticket.priority,
                    creator_name=ticket.creator.full_name if ticket.creator else "Unknown",
                )
            )

    elif event == "status_changed":
        creator = ticket.creator
        if creator is not None and creator.id not in skip and _wants_email(creator):
            messages.append(
                build_status_changed_email(
                    recipient_name=creator.full_name,
                    recipient_email=creator.email,
                    ticket_id=ticket_id,
                    ticket_title=ticket.title,
                    status=ticket.status,
                )
            )

    elif event == "assigned":
        agent = ticket.assigned_agent
        if agent is not None and agent.id not in skip and _wants_email(agent):
            messages.append(
                build_ticket_assigned_email(
                    recipient_name=agent.full_name,
                    recipient_email=agent.email,
                    ticket_id=ticket_id,
                    ticket_title=ticket.title,
                    category_name=category_name,
                    priority=ticket.priority,
                    status=ticket.status,
                )
            )

    elif event == "commented":
        author_name = comment.author.full_name if comment and comment.author else "Someone"
        preview = comment.content[:MESSAGE_PREVIEW_MAX_LENGTH] if comment else ""
        for recipient in _unique_by_email([ticket.creator, ticket.assigned_agent]):
            if recipient.id in skip or not _wants_email(recipient):
                continue
            messages.append(
                build_ticket_commented_email(
                    recipient_name=recipient.full_name,
                    recipient_email=recipient.email,
                    ticket_id=ticket_id,
                    ticket_title=ticket.title,
                    status=ticket.status,
                    comment_author=author_name,
                    comment_preview=preview,
                )
            )

    else:
        raise ValueError(f"Unknown ticket e-mail event: {event}")

    return messages


@celery_app.task(bind=True, max_retries=2, default_retry_delay=30)
def send_ticket_email(
    self: Any,
    ticket_id: str,
    event: str,
    comment_id: str | None = None,
    actor_id: str | None = None,
) -> dict[str, int]:
    """Send the e-mails that belong to a ticket event."""
    db = SessionLocal()
    try:
        ticket = db.query(Ticket).filter(Ticket.id == UUID(ticket_id)).first()
        if not ticket:
            logger.error("Ticket %s not found, skipping %s e-mail", ticket_id, event)
            return {"sent": 0, "failed": 0}

        comment = None
        if comment_id:
            comment = db.query(TicketComment).filter(TicketComment.id == UUID(comment_id)).first()

        messages = build_ticket_emails(
            db, ticket, event, comment, actor_id=UUID(actor_id) if actor_id else None
        )
        email_service = get_email_service()
        sent = 0
        failed = 0

        for message in messages:
            try:
                if asyncio.run(email_service.send_email(message)):
                    sent += 1
                else:
                    failed += 1
            except OSError:
                failed += 1
                logger.exception("Failed to send %s e-mail to %s", event, message.to)

        logger.info(
            "Ticket %s e-mail for %s: sent=%d, failed=%d", event, ticket_id, sent, failed
        )
        return {"sent": sent, "failed": failed}
    except Exception as exc:
        logger.exception("send_ticket_email failed: %s", exc)
        if self.request.retries < self.max_retries:
            raise self.retry(exc=exc) from exc
        raise
    finally:
        db.close()
