import asyncio
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from quickdesk.auth.dependencies import get_current_profile
from quickdesk.auth.models.profile import Profile
from quickdesk.core.rate_limit import limiter
from quickdesk.core.redis import invalidate_unread_counts
from quickdesk.core.schemas import PaginatedResponse
from quickdesk.db.session import get_db
from quickdesk.tickets.schemas.ticket import (
    AssignmentUpdate,
    CommentCreate,
    CommentResponse,
    PriorityUpdate,
    StatusUpdate,
    TicketCreate,
    TicketDetailResponse,
    TicketListItem,
    TicketListParams,
    VoteRequest,
    VoteSummary,
)
from quickdesk.tickets.services.ticket_service import TicketService
from quickdesk.tickets.services.vote_service import VoteService

router = APIRouter()


@router.post(
    "/tickets",
    response_model=TicketDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def create_ticket(
    request: Request,
    data: TicketCreate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> TicketDetailResponse:
    service = TicketService(db)
    ticket, notified = await asyncio.to_thread(service.create_ticket, current_profile, data)
    await invalidate_unread_counts(notified)
    return await asyncio.to_thread(service.build_detail_response, current_profile, ticket)


@router.get("/tickets", response_model=PaginatedResponse[TicketListItem])
def list_tickets(
    params: Annotated[TicketListParams, Query()],
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> PaginatedResponse[TicketListItem]:
    """Tickets visible to the caller, filtered, sorted and paginated."""
    return TicketService(db).list_tickets(current_profile, params, params.page, params.limit)


@router.get("/tickets/{ticket_id}", response_model=TicketDetailResponse)
def get_ticket(
    ticket_id: UUID,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> TicketDetailResponse:
    service = TicketService(db)
    ticket = service.get_visible_ticket(current_profile, ticket_id)
    return service.build_detail_response(current_profile, ticket)


@router.patch("/tickets/{ticket_id}/status", response_model=TicketDetailResponse)
async def update_ticket_status(
    ticket_id: UUID,
    data: StatusUpdate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> TicketDetailResponse:
    service = TicketService(db)
    ticket, notified = await asyncio.to_thread(
        service.update_status, current_profile, ticket_id, data.status
    )
    await invalidate_unread_counts(notified)
    return await asyncio.to_thread(service.build_detail_response, current_profile, ticket)


@router.patch("/tickets/{ticket_id}/priority", response_model=TicketDetailResponse)
async def update_ticket_priority(
    ticket_id: UUID,
    data: PriorityUpdate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> TicketDetailResponse:
    service = TicketService(db)
    ticket, notified = await asyncio.to_thread(
        service.update_priority, current_profile, ticket_id, data.priority.value
    )
    await invalidate_unread_counts(notified)
    return await asyncio.to_thread(service.build_detail_response, current_profile, ticket)


@router.patch("/tickets/{ticket_id}/assignment", response_model=TicketDetailResponse)
async def update_ticket_assignment(
    ticket_id: UUID,
    data: AssignmentUpdate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> TicketDetailResponse:
    service = TicketService(db)
    ticket, notified = await asyncio.to_thread(
        service.assign_ticket, current_profile, ticket_id, data.assigned_agent_id
    )
    await invalidate_unread_counts(notified)
    return await asyncio.to_thread(service.build_detail_response, current_profile, ticket)


@router.get("/tickets/{ticket_id}/comments", response_model=list[CommentResponse])
def list_comments(
    ticket_id: UUID,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[CommentResponse]:
    comments = TicketService(db).list_comments(current_profile, ticket_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.post(
    "/tickets/{ticket_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    ticket_id: UUID,
    data: CommentCreate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> CommentResponse:
    comment, notified = await asyncio.to_thread(
        TicketService(db).add_comment, current_profile, ticket_id, data.content
    )
    await invalidate_unread_counts(notified)
    return CommentResponse.model_validate(comment)


@router.get("/tickets/{ticket_id}/vote", response_model=VoteSummary)
def get_vote_summary(
    ticket_id: UUID,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> VoteSummary:
    TicketService(db).get_visible_ticket(current_profile, ticket_id)
    return VoteService(db).get_summary(ticket_id, current_profile)


@router.put("/tickets/{ticket_id}/vote", response_model=VoteSummary)
def cast_vote(
    ticket_id: UUID,
    data: VoteRequest,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> VoteSummary:
    TicketService(db).get_visible_ticket(current_profile, ticket_id)
    return VoteService(db).cast_vote(ticket_id, current_profile, data.vote_type)


@router.delete("/tickets/{ticket_id}/vote", response_model=VoteSummary)
def withdraw_vote(
    ticket_id: UUID,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> VoteSummary:
    TicketService(db).get_visible_ticket(current_profile, ticket_id)
    return VoteService(db).withdraw_vote(ticket_id, current_profile)
