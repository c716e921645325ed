import uuid
from datetime import datetime, timedelta

from faker import Faker
from sqlalchemy.orm import Session

from quickdesk.auth.models.profile import Profile
from quickdesk.notifications.models.notification import Notification
from quickdesk.tickets.models.category import Category
from quickdesk.tickets.models.comment import TicketComment
from quickdesk.tickets.models.ticket import Ticket

fake = Faker()


def create_profile_factory(
    db_session: Session,
    email: str | None = None,
    full_name: str | None = None,
    role: str = "end_user",
    is_active: bool = True,
    notification_settings: dict | None = None,
) -> Profile:
    """
    Factory function to create test profiles.

    Args:
        db_session: Database session
        email: Profile email (generates random if None)
        full_name: Display name (generates random if None)
        role: "end_user", "support_agent" or "admin"
        is_active: Whether the profile may use the API
        notification_settings: Stored notification preferences

    Returns:
        Created Profile instance
    """
    profile = Profile(
        id=uuid.uuid4(),
        email=email or fake.unique.email(),
        full_name=full_name or fake.name(),
        role=role,
        is_active=is_active,
        notification_settings=notification_settings,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )

    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)

    return profile


def create_category_factory(
    db_session: Session,
    name: str | None = None,
    is_active: bool = True,
) -> Category:
    category = Category(
        name=name or fake.unique.word().title(),
        description=fake.sentence(),
        is_active=is_active,
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


def create_ticket_factory(
    db_session: Session,
    creator: Profile,
    category: Category,
    title: str | None = None,
    description: str | None = None,
    status: str = "open",
    priority: str = "medium",
    assigned_agent: Profile | None = None,
    created_offset_minutes: int = 0,
) -> Ticket:
    """
    Factory function to create test tickets.

    ``created_offset_minutes`` shifts created_at into the past so tests can
    control the default newest-first order.
    """
    created_at = datetime.utcnow() - timedelta(minutes=created_offset_minutes)
    ticket = Ticket(
        title=title or fake.sentence(nb_words=5),
        description=description or fake.paragraph(),
        status=status,
        priority=priority,
        category_id=category.id,
        creator_id=creator.id,
        assigned_agent_id=assigned_agent.id if assigned_agent else None,
        created_at=created_at,
        updated_at=created_at,
    )
    db_session.add(ticket)
    db_session.commit()
    db_session.refresh(ticket)
    return ticket


def create_comment_factory(
    db_session: Session,
    ticket: Ticket,
    author: Profile,
    content: str | None = None,
) -> TicketComment:
    comment = TicketComment(
        ticket_id=ticket.id,
        author_id=author.id,
        content=content or fake.sentence(),
    )
    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)
    return comment


def create_notification_factory(
    db_session: Session,
    user: Profile,
    read: bool = False,
    title: str = "Ticket Created",
    ticket: Ticket | None = None,
    created_offset_minutes: int = 0,
) -> Notification:
    notification = Notification(
        user_id=user.id,
        title=title,
        message=fake.sentence(),
        type="ticket_created",
        ticket_id=ticket.id if ticket else None,
        read=read,
        meta={"ticket_title": ticket.title} if ticket else {},
        created_at=datetime.utcnow() - timedelta(minutes=created_offset_minutes),
    )
    db_session.add(notification)
    db_session.commit()
    db_session.refresh(notification)
    return notification
