from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from quickdesk.core.datetime_utils import UTCDatetime


class ProfileResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    role: str
    is_active: bool
    created_at: UTCDatetime
    updated_at: UTCDatetime

    class Config:
        from_attributes = True


class ProfileSummary(BaseModel):
    id: UUID
    full_name: str
    email: str | None = None

    class Config:
        from_attributes = True


class AgentSummary(BaseModel):
    """Staff entry visible to every signed-in user; carries no contact details."""

    id: UUID
    full_name: str
    role: str

    class Config:
        from_attributes = True


class ProfileUpdateRequest(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Full name must not be blank")
        return value


class NotificationSettings(BaseModel):
    email_notifications: bool = True
    in_app_notifications: bool = True
    ticket_created: bool = True
    ticket_updated: bool = True
    ticket_commented: bool = True
    ticket_assigned: bool = True
    ticket_resolved: bool = True

    @classmethod
    def for_profile(cls, stored: dict | None) -> "NotificationSettings":
        """Merge stored preferences over the defaults, ignoring unknown keys."""
        known = {k: v for k, v in (stored or {}).items() if k in cls.model_fields}
        return cls(**known)
