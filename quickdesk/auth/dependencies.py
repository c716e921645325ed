import logging
from typing import Annotated, cast
from uuid import UUID

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quickdesk.auth.models.profile import Profile, UserRole
from quickdesk.core import security
from quickdesk.db.session import get_db

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_access_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """Take the identity token from the Authorization header or the cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    if access_token:
        return access_token
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_validated_token_payload(token: str) -> dict:
    payload = security.decode_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def _provision_profile(db: Session, user_id: UUID, payload: dict) -> Profile:
    """Create the profile row for an identity seen for the first time."""
    email = payload.get("email")
    if not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token carries no email claim",
            headers={"WWW-Authenticate": "Bearer"},
        )

    profile = Profile(
        id=user_id,
        email=email,
        full_name=security.display_name_from_claims(payload),
        role=UserRole.END_USER.value,
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request provisioned the same identity first
        db.rollback()
        existing = db.query(Profile).filter(Profile.id == user_id).first()
        if existing is None:
            raise
        return cast(Profile, existing)

    db.refresh(profile)
    logger.info("Provisioned profile %s for %s", user_id, email)
    return profile


async def get_current_profile(
    access_token: str = Depends(get_access_token),
    db: Session = Depends(get_db),
) -> Profile:
    """Resolve the profile behind the identity token"""
    payload = await get_validated_token_payload(access_token)

    subject: str | None = payload.get("sub")
    try:
        user_id = UUID(str(subject))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile is None:
        profile = _provision_profile(db, user_id, payload)

    if not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return cast(Profile, profile)


async def require_staff(current_profile: Profile = Depends(get_current_profile)) -> Profile:
    if not current_profile.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Support agent privileges required",
        )
    return current_profile


async def require_admin(current_profile: Profile = Depends(get_current_profile)) -> Profile:
    if not current_profile.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_profile
