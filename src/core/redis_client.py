"""Process-wide Redis client used by the access-token blocklist.

Timeouts are short: an unreachable Redis must surface quickly as
``BlocklistUnavailable`` rather than stall every authenticated request.
"""

import redis
from django.conf import settings

_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return the shared client for ``settings.REDIS_URL``, creating it on first use."""

    global _client
    if _client is None:
        timeout = settings.REDIS_SOCKET_TIMEOUT
        _client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
    return _client


__all__ = ["get_redis_client"]
