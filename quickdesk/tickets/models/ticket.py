import enum
import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quickdesk.db.session import Base


class TicketStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Sort ranks; string order of the enum values is meaningless
STATUS_ORDER: dict[str, int] = {status.value: rank for rank, status in enumerate(TicketStatus)}
PRIORITY_ORDER: dict[str, int] = {
    priority.value: rank for rank, priority in enumerate(TicketPriority)
}


class Ticket(Base):
    __tablename__ = "tickets"
    __table_args__ = (
        Index("ix_tickets_creator_status", "creator_id", "status"),
        Index("ix_tickets_assigned_agent", "assigned_agent_id"),
        Index("ix_tickets_status_priority", "status", "priority"),
        Index("ix_tickets_category", "category_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default=TicketStatus.OPEN.value)
    priority: Mapped[str] = mapped_column(String(20), default=TicketPriority.MEDIUM.value)

    category_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("categories.id", ondelete="RESTRICT"))
    creator_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"))
    assigned_agent_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, default=None
    )

    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", lazy="joined")
    creator = relationship("Profile", foreign_keys=[creator_id], lazy="joined")
    assigned_agent = relationship("Profile", foreign_keys=[assigned_agent_id], lazy="joined")
    comments = relationship(
        "TicketComment",
        back_populates="ticket",
        order_by="TicketComment.created_at",
        cascade="all, delete-orphan",
    )
    attachments = relationship(
        "TicketAttachment",
        back_populates="ticket",
        order_by="TicketAttachment.created_at",
        cascade="all, delete-orphan",
    )
    votes = relationship("TicketVote", back_populates="ticket", cascade="all, delete-orphan")
