# app/services/referral_cache.py

import logging
import uuid
from datetime import timedelta

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.core.config import settings
from app.core.exceptions import CacheError

logger = logging.getLogger(__name__)


def _key(code: str) -> str:
    return f"{settings.REFERRAL_CACHE_PREFIX}:{code}"


async def set_referral_code(redis: Redis, code: str, issuer_id: uuid.UUID, ttl: timedelta) -> None:
    """Кладет код в кеш с тем же TTL, что и в БД (с точностью до миллисекунд)."""
    try:
        await redis.set(_key(code), str(issuer_id), px=int(ttl.total_seconds() * 1000))
    except RedisError as e:
        raise CacheError(f"error setting referral code in Redis: {e}") from e


async def get_referrer_id(redis: Redis, code: str) -> uuid.UUID | None:
    """
    Возвращает ID владельца кода или None, если кода нет в кеше.
    """
    try:
        issuer_id = await redis.get(_key(code))
    except RedisError as e:
        raise CacheError(f"error getting referral code from Redis: {e}") from e

    if issuer_id is None:
        return None

    try:
        return uuid.UUID(issuer_id)
    except ValueError as e:
        logger.warning(f"Corrupted cache entry for referral code {code!r}: {issuer_id!r}")
        raise CacheError("error parsing user ID from referral code") from e

