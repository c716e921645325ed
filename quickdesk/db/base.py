"""
Database base module - imports all models for Alembic migration detection.

This module imports all SQLAlchemy models to ensure they are registered
with Alembic for automatic migration generation. While the imports appear
unused, they are essential for the migration system to work properly.
"""

from quickdesk.auth.models.profile import Profile
from quickdesk.notifications.models.notification import Notification
from quickdesk.tickets.models import (
    Category,
    Ticket,
    TicketAttachment,
    TicketComment,
    TicketVote,
)

# Export all models for Alembic
__all__ = [
    "Profile",
    "Category",
    "Ticket",
    "TicketComment",
    "TicketAttachment",
    "TicketVote",
    "Notification",
]
