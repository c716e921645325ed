from quickdesk.tickets.models.attachment import TicketAttachment
from quickdesk.tickets.models.category import Category
from quickdesk.tickets.models.comment import TicketComment
from quickdesk.tickets.models.ticket import Ticket, TicketPriority, TicketStatus
from quickdesk.tickets.models.vote import TicketVote, VoteType

__all__ = [
    "Category",
    "Ticket",
    "TicketStatus",
    "TicketPriority",
    "TicketComment",
    "TicketAttachment",
    "TicketVote",
    "VoteType",
]
