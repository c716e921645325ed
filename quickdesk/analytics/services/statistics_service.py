"""Ticket statistics for the dashboard and the admin analytics page."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from quickdesk.analytics.schemas.analytics import (
    AnalyticsResponse,
    CategoryCount,
    DashboardResponse,
    DashboardStats,
    RecentTicket,
    StatusCount,
)
from quickdesk.auth.models.profile import Profile
from quickdesk.core.constants import RECENT_TICKETS_LIMIT
from quickdesk.tickets.models.category import Category
from quickdesk.tickets.models.ticket import Ticket, TicketStatus
from quickdesk.tickets.services.query_composer import visibility_clause

_ACTIVE_STATUSES = (TicketStatus.OPEN.value, TicketStatus.IN_PROGRESS.value)


def _recent(tickets: list[Ticket]) -> list[RecentTicket]:
    return [
        RecentTicket(
            id=t.id,
            title=t.title,
            status=t.status,
            priority=t.priority,
            created_at=t.created_at,
            category_name=t.category.name if t.category else None,
        )
        for t in tickets
    ]


class StatisticsService:
    @staticmethod
    def get_dashboard(db: Session, viewer: Profile) -> DashboardResponse:
        """Counts over the tickets the viewer can see, plus the latest five.

        Agents and admins also get the number of tickets assigned to them.
        """
        visible = visibility_clause(viewer)
        rows = (
            db.query(Ticket.status, func.count(Ticket.id))
            .filter(visible)
            .group_by(Ticket.status)
            .all()
        )
        by_status = {str(status): int(count) for status, count in rows}

        stats = DashboardStats(
            total_tickets=sum(by_status.values()),
            open_tickets=by_status.get(TicketStatus.OPEN.value, 0),
            in_progress_tickets=by_status.get(TicketStatus.IN_PROGRESS.value, 0),
            resolved_tickets=by_status.get(TicketStatus.RESOLVED.value, 0),
        )

        if viewer.is_staff:
            assigned = db.query(Ticket).filter(Ticket.assigned_agent_id == viewer.id)
            stats.my_tickets = assigned.count()
            stats.my_open_tickets = assigned.filter(Ticket.status.in_(_ACTIVE_STATUSES)).count()

        recent = (
            db.query(Ticket)
            .filter(visible)
            .order_by(Ticket.created_at.desc(), Ticket.id.desc())
            .limit(RECENT_TICKETS_LIMIT)
            .all()
        )
        return DashboardResponse(stats=stats, recent_tickets=_recent(recent))

    @staticmethod
    def get_analytics(db: Session) -> AnalyticsResponse:
        status_rows = db.query(Ticket.status, func.count(Ticket.id)).group_by(Ticket.status).all()
        by_status = {str(status): int(count) for status, count in status_rows}

        category_rows = (
            db.query(Category.id, Category.name, func.count(Ticket.id))
            .outerjoin(Ticket, Ticket.category_id == Category.id)
            .group_by(Category.id, Category.name)
            .order_by(func.count(Ticket.id).desc(), Category.name)
            .all()
        )

        recent = (
            db.query(Ticket)
            .order_by(Ticket.created_at.desc(), Ticket.id.desc())
            .limit(RECENT_TICKETS_LIMIT)
            .all()
        )

        return AnalyticsResponse(
            total_tickets=sum(by_status.values()),
            open_tickets=by_status.get(TicketStatus.OPEN.value, 0),
            closed_tickets=by_status.get(TicketStatus.CLOSED.value, 0),
            total_users=db.query(func.count(Profile.id)).scalar() or 0,
            total_categories=db.query(func.count(Category.id)).scalar() or 0,
            tickets_by_status=[
                StatusCount(status=status.value, count=by_status.get(status.value, 0))
                for status in TicketStatus
            ],
            tickets_by_category=[
                CategoryCount(category_id=category_id, category=name, count=int(count))
                for category_id, name, count in category_rows
            ],
            recent_activity=_recent(recent),
        )
