from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from app.settings import get_settings

_client: Optional[Redis] = None


def get_redis() -> Redis:
    """
    Process-wide Redis client for the session store, created on first use.
    Creating it does not connect; the first command does.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = Redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=settings.redis_connect_timeout_seconds,
            health_check_interval=30,
        )
    return _client


async def close_redis() -> None:
    global _client
    client, _client = _client, None
    if client is not None:
        await client.aclose()
