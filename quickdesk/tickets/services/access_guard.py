"""Who may see and change a ticket.

Viewing is allowed to the creator, the assigned agent and admins. Staff who
can view a ticket may triage it; the creator may only close it.
"""

from quickdesk.auth.models.profile import Profile
from quickdesk.core.constants import TICKETS_PATH
from quickdesk.core.exceptions import ForbiddenError, TicketAccessDenied
from quickdesk.tickets.models.ticket import Ticket, TicketStatus


def can_view_ticket(viewer: Profile, ticket: Ticket) -> bool:
    if viewer.is_admin:
        return True
    if ticket.creator_id == viewer.id:
        return True
    return ticket.assigned_agent_id is not None and ticket.assigned_agent_id == viewer.id


def ensure_can_view(viewer: Profile, ticket: Ticket) -> None:
    if not can_view_ticket(viewer, ticket):
        raise TicketAccessDenied(redirect_to=TICKETS_PATH)


def can_manage_ticket(viewer: Profile, ticket: Ticket) -> bool:
    """Status, priority and assignment changes."""
    return viewer.is_staff and can_view_ticket(viewer, ticket)


def can_set_status(viewer: Profile, ticket: Ticket, new_status: str) -> bool:
    if can_manage_ticket(viewer, ticket):
        return True
    return ticket.creator_id == viewer.id and new_status == TicketStatus.CLOSED.value


def ensure_can_set_status(viewer: Profile, ticket: Ticket, new_status: str) -> None:
    ensure_can_view(viewer, ticket)
    if not can_set_status(viewer, ticket, new_status):
        raise ForbiddenError("Only support staff can change this ticket's status.")


def ensure_can_manage(viewer: Profile, ticket: Ticket) -> None:
    ensure_can_view(viewer, ticket)
    if not can_manage_ticket(viewer, ticket):
        raise ForbiddenError("Only support staff can change this ticket.")
