from uuid import UUID

from pydantic import BaseModel, Field

from quickdesk.core.datetime_utils import UTCDatetime


class RecentTicket(BaseModel):
    id: UUID
    title: str
    status: str
    priority: str
    created_at: UTCDatetime
    category_name: str | None = None


class DashboardStats(BaseModel):
    total_tickets: int = 0
    open_tickets: int = 0
    in_progress_tickets: int = 0
    resolved_tickets: int = 0
    # Only for support agents and admins: tickets assigned to the viewer
    my_tickets: int | None = None
    my_open_tickets: int | None = None


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_tickets: list[RecentTicket] = Field(default_factory=list)


class StatusCount(BaseModel):
    status: str
    count: int


class CategoryCount(BaseModel):
    category_id: UUID
    category: str
    count: int


class AnalyticsResponse(BaseModel):
    total_tickets: int
    open_tickets: int
    closed_tickets: int
    total_users: int
    total_categories: int
    tickets_by_status: list[StatusCount]
    tickets_by_category: list[CategoryCount]
    recent_activity: list[RecentTicket]
