"""Shared rate limiter instance.

Counters live in Redis when it answers a ping at import time, so limits
hold across workers; otherwise they are kept in process memory
(development and tests). Clients are keyed by address, taking the first
``X-Forwarded-For`` hop when the API sits behind the TLS proxy.
"""

import logging

import redis as sync_redis
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from babytracker.config import settings

logger = logging.getLogger(__name__)


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def _storage_uri() -> str:
    try:
        client = sync_redis.from_url(settings.REDIS_URL, socket_connect_timeout=1)
        try:
            client.ping()
        finally:
            client.close()
    except sync_redis.RedisError:
        logger.warning("Rate limiter: Redis unavailable, using in-memory storage")
        return "memory://"
    logger.info("Rate limiter: Redis storage (%s)", settings.REDIS_URL)
    return settings.REDIS_URL


limiter = Limiter(
    key_func=client_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=_storage_uri(),
)
