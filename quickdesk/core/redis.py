import logging
from collections.abc import Iterable
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError

from quickdesk.core.constants import UNREAD_COUNT_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

# Set in the application lifespan; None when Redis is unavailable
redis_client: Redis | None = None


def _unread_key(user_id: UUID | str) -> str:
    return f"notifications:unread:{user_id}"


def _generation_key(user_id: UUID | str) -> str:
    return f"notifications:unread:{user_id}:gen"


# Writes the count only if no invalidation bumped the generation since it was read
_SET_IF_GENERATION = """
if (redis.call('GET', KEYS[2]) or '') == ARGV[1] then
    redis.call('SET', KEYS[1], ARGV[2], 'EX', ARGV[3])
    return 1
end
return 0
"""


async def get_cached_unread_count(user_id: UUID | str) -> int | None:
    if redis_client is None:
        return None
    try:
        value = await redis_client.get(_unread_key(user_id))
    except RedisError as exc:
        logger.warning("Unread count cache read failed: %s", exc)
        return None
    return int(value) if value is not None else None


async def get_unread_generation(user_id: UUID | str) -> str | None:
    """Current cache generation; read it before counting from the database."""
    if redis_client is None:
        return None
    try:
        value = await redis_client.get(_generation_key(user_id))
    except RedisError as exc:
        logger.warning("Unread count generation read failed: %s", exc)
        return None
    return str(value) if value is not None else ""


async def cache_unread_count(user_id: UUID | str, count: int, generation: str | None) -> None:
    """Store ``count`` unless the cache was invalidated after ``generation`` was read."""
    if redis_client is None or generation is None:
        return
    try:
        stored = await redis_client.eval(
            _SET_IF_GENERATION,
            2,
            _unread_key(user_id),
            _generation_key(user_id),
            generation,
            count,
            UNREAD_COUNT_CACHE_TTL_SECONDS,
        )
    except RedisError as exc:
        logger.warning("Unread count cache write failed: %s", exc)
        return
    if not stored:
        logger.debug("Unread count for %s changed while counting, not cached", user_id)


async def invalidate_unread_counts(user_ids: Iterable[UUID | str]) -> None:
    unique = set(user_ids)
    if redis_client is None or not unique:
        return
    try:
        for user_id in unique:
            await redis_client.incr(_generation_key(user_id))
        await redis_client.delete(*[_unread_key(user_id) for user_id in unique])
    except RedisError as exc:
        logger.warning("Unread count cache invalidation failed: %s", exc)
