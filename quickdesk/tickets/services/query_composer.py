"""Role-scoped ticket list queries.

``visibility_clause`` restricts tickets to what a profile may see and is
applied before any user supplied filter, so filters can only narrow it.
"""

import uuid

from sqlalchemy import ColumnElement, and_, case, false, or_, true
from sqlalchemy.orm import Query, Session

from quickdesk.auth.models.profile import Profile, UserRole
from quickdesk.core.constants import MAX_PAGE_SIZE, UNASSIGNED_FILTER
from quickdesk.core.exceptions import ValidationError
from quickdesk.tickets.models.ticket import PRIORITY_ORDER, STATUS_ORDER, Ticket
from quickdesk.tickets.schemas.ticket import TicketFilters


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def visibility_clause(viewer: Profile) -> ColumnElement[bool]:
    if viewer.role == UserRole.ADMIN.value:
        return true()
    if viewer.role == UserRole.SUPPORT_AGENT.value:
        return or_(Ticket.creator_id == viewer.id, Ticket.assigned_agent_id == viewer.id)
    if viewer.role == UserRole.END_USER.value:
        return Ticket.creator_id == viewer.id
    return false()


def _sort_expression(sort_by: str) -> ColumnElement:
    if sort_by == "priority":
        return case(PRIORITY_ORDER, value=Ticket.priority, else_=len(PRIORITY_ORDER))
    if sort_by == "status":
        return case(STATUS_ORDER, value=Ticket.status, else_=len(STATUS_ORDER))
    return getattr(Ticket, sort_by)


def _assignee_clause(assigned_to: str) -> ColumnElement[bool]:
    if assigned_to == UNASSIGNED_FILTER:
        return Ticket.assigned_agent_id.is_(None)
    try:
        agent_id = uuid.UUID(assigned_to)
    except ValueError:
        raise ValidationError(
            f"assigned_to must be an agent id or '{UNASSIGNED_FILTER}'", field="assigned_to"
        ) from None
    return Ticket.assigned_agent_id == agent_id


def compose_ticket_query(db: Session, viewer: Profile, filters: TicketFilters) -> Query:
    """Filtered and sorted ticket query, not yet paginated."""
    conditions: list[ColumnElement[bool]] = [visibility_clause(viewer)]

    if filters.mine:
        conditions.append(Ticket.creator_id == viewer.id)

    if filters.search:
        pattern = f"%{_escape_like(filters.search.strip())}%"
        conditions.append(
            or_(
                Ticket.title.ilike(pattern, escape="\\"),
                Ticket.description.ilike(pattern, escape="\\"),
            )
        )
    if filters.status:
        conditions.append(Ticket.status == filters.status.value)
    if filters.priority:
        conditions.append(Ticket.priority == filters.priority.value)
    if filters.category_id:
        conditions.append(Ticket.category_id == filters.category_id)
    if filters.assigned_to:
        conditions.append(_assignee_clause(filters.assigned_to.strip()))

    sort_column = _sort_expression(filters.sort_by)
    if filters.sort_order == "asc":
        ordering = (sort_column.asc(), Ticket.id.asc())
    else:
        ordering = (sort_column.desc(), Ticket.id.desc())

    return db.query(Ticket).filter(and_(*conditions)).order_by(*ordering)


def paginate(query: Query, page: int, page_size: int) -> tuple[list[Ticket], int]:
    """Return one page of ``query`` and the total row count."""
    page = max(page, 1)
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
    total: int = query.order_by(None).enable_eagerloads(False).count()
    items: list[Ticket] = query.offset((page - 1) * page_size).limit(page_size).all()
    return items, total
