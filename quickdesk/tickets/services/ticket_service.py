import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from quickdesk.auth.models.profile import Profile
from quickdesk.auth.schemas.profile import ProfileSummary
from quickdesk.core.datetime_utils import utcnow
from quickdesk.core.exceptions import NotFoundError, ValidationError
from quickdesk.core.schemas import PaginatedResponse, paginated_response
from quickdesk.notifications.services.fanout import NotificationFanout
from quickdesk.tickets.models.attachment import TicketAttachment
from quickdesk.tickets.models.comment import TicketComment
from quickdesk.tickets.models.ticket import Ticket, TicketStatus
from quickdesk.tickets.models.vote import TicketVote, VoteType
from quickdesk.tickets.schemas.ticket import (
    AttachmentResponse,
    CategoryResponse,
    CommentResponse,
    TicketCreate,
    TicketDetailResponse,
    TicketFilters,
    TicketListItem,
)
from quickdesk.tickets.services import access_guard
from quickdesk.tickets.services.category_service import CategoryRepository
from quickdesk.tickets.services.query_composer import compose_ticket_query, paginate
from quickdesk.tickets.services.vote_service import VoteService

logger = logging.getLogger(__name__)


class TicketService:
    """Ticket lifecycle. Mutating methods return the ids of notified profiles."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.fanout = NotificationFanout(db)

    def create_ticket(self, creator: Profile, data: TicketCreate) -> tuple[Ticket, list[UUID]]:
        CategoryRepository(self.db).get_active_or_error(data.category_id)

        ticket = Ticket(
            title=data.title,
            description=data.description,
            category_id=data.category_id,
            priority=data.priority.value,
            status=TicketStatus.OPEN.value,
            creator_id=creator.id,
        )
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)
        logger.info("Ticket %s created by %s", ticket.id, creator.id)

        notified = self.fanout.ticket_created(ticket)
        return ticket, notified

    def list_tickets(
        self, viewer: Profile, filters: TicketFilters, page: int, limit: int
    ) -> PaginatedResponse[TicketListItem]:
        query = compose_ticket_query(self.db, viewer, filters)
        tickets, total = paginate(query, page, limit)
        return paginated_response(self._build_list_items(tickets), total, page, limit)

    def get_ticket(self, ticket_id: UUID) -> Ticket:
        ticket: Ticket | None = self.db.query(Ticket).filter(Ticket.id == ticket_id).first()
        if not ticket:
            raise NotFoundError("Ticket not found", resource="ticket")
        return ticket

    def get_visible_ticket(self, viewer: Profile, ticket_id: UUID) -> Ticket:
        ticket = self.get_ticket(ticket_id)
        access_guard.ensure_can_view(viewer, ticket)
        return ticket

    def build_detail_response(self, viewer: Profile, ticket: Ticket) -> TicketDetailResponse:
        return TicketDetailResponse(
            id=ticket.id,
            title=ticket.title,
            description=ticket.description,
            status=ticket.status,
            priority=ticket.priority,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            category=CategoryResponse.model_validate(ticket.category),
            creator=ProfileSummary.model_validate(ticket.creator),
            assigned_agent=(
                ProfileSummary.model_validate(ticket.assigned_agent)
                if ticket.assigned_agent
                else None
            ),
            comments=[CommentResponse.model_validate(c) for c in ticket.comments],
            attachments=[AttachmentResponse.model_validate(a) for a in ticket.attachments],
            votes=VoteService(self.db).get_summary(ticket.id, viewer),
            can_manage=access_guard.can_manage_ticket(viewer, ticket),
            can_close=access_guard.can_set_status(viewer, ticket, TicketStatus.CLOSED.value),
        )

    def update_status(
        self, viewer: Profile, ticket_id: UUID, new_status: TicketStatus
    ) -> tuple[Ticket, list[UUID]]:
        ticket = self.get_ticket(ticket_id)
        access_guard.ensure_can_set_status(viewer, ticket, new_status.value)

        old_status = ticket.status
        if old_status == new_status.value:
            return ticket, []

        ticket.status = new_status.value
        self.db.commit()
        self.db.refresh(ticket)
        logger.info("Ticket %s status %s -> %s by %s", ticket.id, old_status, ticket.status, viewer.id)

        return ticket, self.fanout.status_changed(ticket, viewer, old_status)

    def update_priority(
        self, viewer: Profile, ticket_id: UUID, new_priority: str
    ) -> tuple[Ticket, list[UUID]]:
        ticket = self.get_ticket(ticket_id)
        access_guard.ensure_can_manage(viewer, ticket)

        old_priority = ticket.priority
        if old_priority == new_priority:
            return ticket, []

        ticket.priority = new_priority
        self.db.commit()
        self.db.refresh(ticket)

        return ticket, self.fanout.priority_changed(ticket, viewer, old_priority)

    def assign_ticket(
        self, viewer: Profile, ticket_id: UUID, agent_id: UUID | None
    ) -> tuple[Ticket, list[UUID]]:
        ticket = self.get_ticket(ticket_id)
        access_guard.ensure_can_manage(viewer, ticket)

        if agent_id is not None:
            agent = self.db.query(Profile).filter(Profile.id == agent_id).first()
            if agent is None or not agent.is_active or not agent.is_staff:
                raise ValidationError(
                    "Tickets can only be assigned to support agents or admins",
                    field="assigned_agent_id",
                )

        if ticket.assigned_agent_id == agent_id:
            return ticket, []

        ticket.assigned_agent_id = agent_id
        self.db.commit()
        self.db.refresh(ticket)
        logger.info("Ticket %s assigned to %s by %s", ticket.id, agent_id, viewer.id)

        return ticket, self.fanout.assignment_changed(ticket, viewer)

    def list_comments(self, viewer: Profile, ticket_id: UUID) -> list[TicketComment]:
        ticket = self.get_visible_ticket(viewer, ticket_id)
        return list(ticket.comments)

    def add_comment(
        self, viewer: Profile, ticket_id: UUID, content: str
    ) -> tuple[TicketComment, list[UUID]]:
        ticket = self.get_visible_ticket(viewer, ticket_id)

        comment = TicketComment(ticket_id=ticket.id, author_id=viewer.id, content=content)
        self.db.add(comment)
        ticket.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(comment)

        return comment, self.fanout.comment_added(ticket, comment, viewer)

    def _build_list_items(self, tickets: list[Ticket]) -> list[TicketListItem]:
        if not tickets:
            return []
        ticket_ids = [t.id for t in tickets]

        comment_counts = dict(
            self.db.query(TicketComment.ticket_id, func.count(TicketComment.id))
            .filter(TicketComment.ticket_id.in_(ticket_ids))
            .group_by(TicketComment.ticket_id)
            .all()
        )
        with_attachments = {
            row[0]
            for row in self.db.query(TicketAttachment.ticket_id)
            .filter(TicketAttachment.ticket_id.in_(ticket_ids))
            .distinct()
            .all()
        }
        vote_counts: dict[tuple[UUID, str], int] = {
            (ticket_id, str(vote_type)): int(count)
            for ticket_id, vote_type, count in self.db.query(
                TicketVote.ticket_id, TicketVote.vote_type, func.count(TicketVote.id)
            )
            .filter(TicketVote.ticket_id.in_(ticket_ids))
            .group_by(TicketVote.ticket_id, TicketVote.vote_type)
            .all()
        }

        return [
            TicketListItem(
                id=ticket.id,
                title=ticket.title,
                description=ticket.description,
                status=ticket.status,
                priority=ticket.priority,
                created_at=ticket.created_at,
                updated_at=ticket.updated_at,
                category=CategoryResponse.model_validate(ticket.category),
                creator=ProfileSummary.model_validate(ticket.creator),
                assigned_agent=(
                    ProfileSummary.model_validate(ticket.assigned_agent)
                    if ticket.assigned_agent
                    else None
                ),
                comment_count=int(comment_counts.get(ticket.id, 0)),
                upvotes=vote_counts.get((ticket.id, VoteType.UPVOTE.value), 0),
                downvotes=vote_counts.get((ticket.id, VoteType.DOWNVOTE.value), 0),
                has_attachments=ticket.id in with_attachments,
            )
            for ticket in tickets
        ]
