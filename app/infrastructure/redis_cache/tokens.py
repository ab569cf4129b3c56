from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from redis.asyncio import Redis

from app.domain import services as domain_services
from app.domain.entities import Token
from app.domain.ports.token_service import TokenServicePort

logger = logging.getLogger(__name__)


class RedisTokenService(TokenServicePort):
    """
    One hash per session at `<prefix><sha256(token)>` holding user_id and
    issued_at. Every operation is a single Redis command (or a MULTI block),
    so a DEL from revoke() is observed by every later HGET.
    """

    def __init__(
        self, redis: Redis, *, key_prefix: str = "sess:", ttl_seconds: int = 86400
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self._prefix}{domain_services.session_token_digest(token)}"

    async def issue(self, user_id: int) -> Token:
        token = Token(
            value=domain_services.generate_session_token(),
            user_id=user_id,
            issued_at=datetime.now(timezone.utc),
        )
        key = self._key(token.value)
        pipe = self._redis.pipeline(transaction=True)
        pipe.hset(
            key,
            mapping={
                "user_id": str(user_id),
                "issued_at": token.issued_at.isoformat(),
            },
        )
        if self._ttl > 0:
            pipe.expire(key, self._ttl)
        await pipe.execute()
        logger.info("session issued", extra={"user_id": user_id})
        return token

    async def validate(self, value: str) -> Optional[int]:
        if not domain_services.looks_like_session_token(value):
            return None
        user_id = await self._redis.hget(self._key(value), "user_id")
        return int(user_id) if user_id else None

    async def revoke(self, value: str) -> bool:
        if not domain_services.looks_like_session_token(value):
            return False
        deleted = await self._redis.delete(self._key(value))
        return int(deleted) == 1
