from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from quickdesk.auth.schemas.profile import ProfileSummary
from quickdesk.core.config import settings
from quickdesk.core.constants import (
    COMMENT_MAX_LENGTH,
    MAX_PAGE_SIZE,
    TICKET_DESCRIPTION_MAX_LENGTH,
    TICKET_TITLE_MAX_LENGTH,
)
from quickdesk.core.datetime_utils import UTCDatetime
from quickdesk.tickets.models.ticket import TicketPriority, TicketStatus
from quickdesk.tickets.models.vote import VoteType

SortField = Literal["created_at", "updated_at", "title", "priority", "status"]
SortOrder = Literal["asc", "desc"]


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Field must not be blank")
    return value


class CategoryResponse(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    color: str

    class Config:
        from_attributes = True


class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=TICKET_TITLE_MAX_LENGTH)
    description: str = Field(..., min_length=1, max_length=TICKET_DESCRIPTION_MAX_LENGTH)
    category_id: UUID
    priority: TicketPriority = TicketPriority.MEDIUM

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_text(value)


class TicketFilters(BaseModel):
    """Ticket list query. Empty strings are treated as absent."""

    search: str | None = None
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    category_id: UUID | None = None
    assigned_to: str | None = None
    sort_by: SortField = "created_at"
    sort_order: SortOrder = "desc"
    mine: bool = False

    @field_validator("search", "status", "priority", "category_id", "assigned_to", mode="before")
    @classmethod
    def empty_as_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class TicketListParams(TicketFilters):
    page: int = Field(1, ge=1)
    limit: int = Field(settings.TICKETS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


class StatusUpdate(BaseModel):
    status: TicketStatus


class PriorityUpdate(BaseModel):
    priority: TicketPriority


class AssignmentUpdate(BaseModel):
    assigned_agent_id: UUID | None = None


class TicketListItem(BaseModel):
    id: UUID
    title: str
    description: str
    status: str
    priority: str
    created_at: UTCDatetime
    updated_at: UTCDatetime
    category: CategoryResponse
    creator: ProfileSummary
    assigned_agent: ProfileSummary | None = None
    comment_count: int = 0
    upvotes: int = 0
    downvotes: int = 0
    has_attachments: bool = False


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=COMMENT_MAX_LENGTH)

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_text(value)


class CommentResponse(BaseModel):
    id: UUID
    ticket_id: UUID
    content: str
    created_at: UTCDatetime
    author: ProfileSummary

    class Config:
        from_attributes = True


class AttachmentResponse(BaseModel):
    id: UUID
    ticket_id: UUID
    file_name: str
    file_size: int
    file_type: str
    uploaded_by: UUID
    created_at: UTCDatetime

    class Config:
        from_attributes = True


class FailedUpload(BaseModel):
    file_name: str
    reason: str


class AttachmentUploadResponse(BaseModel):
    uploaded: list[AttachmentResponse]
    failed: list[FailedUpload]
    uploaded_count: int
    failed_count: int


class VoteRequest(BaseModel):
    vote_type: VoteType


class VoteSummary(BaseModel):
    upvotes: int = 0
    downvotes: int = 0
    my_vote: VoteType | None = None


class TicketDetailResponse(BaseModel):
    id: UUID
    title: str
    description: str
    status: str
    priority: str
    created_at: UTCDatetime
    updated_at: UTCDatetime
    category: CategoryResponse
    creator: ProfileSummary
    assigned_agent: ProfileSummary | None = None
    comments: list[CommentResponse] = Field(default_factory=list)
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    votes: VoteSummary

    # Capabilities of the viewer, so clients can hide controls
    can_manage: bool = False
    can_close: bool = False
