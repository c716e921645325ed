from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from quickdesk.core.datetime_utils import UTCDatetime


class NotificationResponse(BaseModel):
    id: UUID
    title: str
    message: str
    type: str
    ticket_id: UUID | None = None
    read: bool
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="meta")
    created_at: UTCDatetime

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int
