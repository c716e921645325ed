import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Uuid

from quickdesk.db.session import Base


class UserRole(str, enum.Enum):
    END_USER = "end_user"
    SUPPORT_AGENT = "support_agent"
    ADMIN = "admin"


STAFF_ROLES: tuple[str, ...] = (UserRole.SUPPORT_AGENT.value, UserRole.ADMIN.value)


class Profile(Base):
    """
    Profile of an identity known to the identity provider.

    Attributes:
        id: Identity subject (the token's ``sub`` claim)
        email: Email address (indexed for fast lookups)
        full_name: Display name
        role: "end_user", "support_agent" or "admin"
        is_active: Whether the account may use the API
        notification_settings: Per-user notification preferences (nullable)
        created_at: Profile creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "profiles"

    # Primary fields
    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)

    role = Column(String(50), nullable=False, default=UserRole.END_USER.value)
    is_active = Column(Boolean, default=True, nullable=False)

    notification_settings = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email={self.email}, role={self.role})>"
