import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from quickdesk.core.config import settings

logger = logging.getLogger(__name__)


def create_access_token(data: dict[str, Any]) -> str:
    """Mint a token shaped like the identity provider's.

    Production tokens come from the identity provider; this exists for seed
    scripts and tests that need a signed token for a known profile.
    """
    to_encode = data.copy()
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "iat": now})
    if settings.JWT_AUDIENCE:
        to_encode.setdefault("aud", settings.JWT_AUDIENCE)
    encoded_jwt: str = jwt.encode(
        to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )
    return encoded_jwt


def decode_token(token: str) -> dict[str, Any] | None:
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options={"verify_aud": bool(settings.JWT_AUDIENCE)},
        )
        return payload
    except JWTError as exc:
        logger.info("Rejected access token: %s", exc)
        return None


def display_name_from_claims(payload: dict[str, Any]) -> str:
    """Pick a display name out of identity-provider claims."""
    metadata = payload.get("user_metadata") or {}
    name = metadata.get("full_name") or payload.get("name")
    if name:
        return str(name)
    email = str(payload.get("email") or "")
    return email.split("@", 1)[0] or "User"
