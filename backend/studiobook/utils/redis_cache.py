import json
import logging
import random
from datetime import date
from typing import Optional

import redis

from studiobook.core.config import settings
from .json_utils import dumps

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None

AVAILABILITY_KEY_PREFIX = "availability"


class _NullRedis:
    """Stand-in client when REDIS_URL disables caching.

    Every read is a miss and every write is dropped, so availability is always
    computed from the database.
    """

    def get(self, key: str):
        return None

    def setex(self, key: str, expire: int, value: str):
        return None

    def scan_iter(self, pattern: str):
        return iter(())

    def delete(self, *keys: str):
        return 0

    def close(self):
        return None


def get_redis_client() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        url = settings.REDIS_URL or ""
        # Empty, "none", "disabled", "false" or "0" turn the cache off.
        if not url or url.lower() in {"none", "disabled", "false", "0"}:
            _redis_client = _NullRedis()  # type: ignore[assignment]
            return _redis_client
        # Conservative socket timeouts so a slow Redis never stalls bookings.
        _redis_client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=0.5,
            socket_timeout=0.5,
        )
    return _redis_client


def _apply_jitter(expire: int) -> int:
    """Return a TTL with a small random jitter to prevent cache stampedes."""
    return expire + random.randint(0, max(1, expire // 10))


def _availability_key(room_id: int, day: Optional[date]) -> str:
    return f"{AVAILABILITY_KEY_PREFIX}:{room_id}:{day.isoformat() if day else 'all'}"


def get_cached_availability(room_id: int, day: Optional[date] = None) -> dict | None:
    client = get_redis_client()
    key = _availability_key(room_id, day)
    try:
        data = client.get(key)
    except redis.exceptions.RedisError as exc:
        logger.warning("Redis unavailable: %s", exc)
        return None
    if not data:
        return None
    try:
        return json.loads(data)
    except ValueError as exc:
        # A corrupted entry is a cache miss; availability lookups never 500.
        logger.warning("Could not decode availability cache for key %s: %s", key, exc)
        return None


def cache_availability(
    data: dict,
    room_id: int,
    day: Optional[date] = None,
    expire: Optional[int] = None,
) -> None:
    client = get_redis_client()
    ttl = _apply_jitter(expire if expire is not None else settings.AVAILABILITY_CACHE_TTL)
    try:
        client.setex(_availability_key(room_id, day), ttl, dumps(data))
    except redis.exceptions.RedisError as exc:
        logger.warning("Could not cache availability: %s", exc)


def invalidate_availability_cache(room_id: int, day: Optional[date] = None) -> None:
    """Drop cached busy slots for a room (all days unless ``day`` is given)."""
    client = get_redis_client()
    try:
        if day is None:
            for key in client.scan_iter(f"{AVAILABILITY_KEY_PREFIX}:{room_id}:*"):
                client.delete(key)
        else:
            client.delete(_availability_key(room_id, day))
    except redis.exceptions.RedisError as exc:
        logger.warning("Could not clear availability cache: %s", exc)


def close_redis_client() -> None:
    """Close the global Redis client if it exists."""
    global _redis_client
    if _redis_client is not None:
        try:
            _redis_client.close()
        except redis.exceptions.RedisError as exc:  # pragma: no cover - best effort
            logger.warning("Error closing Redis client: %s", exc)
        finally:
            _redis_client = None
