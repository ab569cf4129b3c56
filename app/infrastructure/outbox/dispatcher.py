from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from psycopg_pool import AsyncConnectionPool

from app.domain.ports.email_port import EmailPort
from app.domain.ports.outbox_repository import VERIFICATION_TOPIC

logger = logging.getLogger(__name__)

_CLAIM_SQL = """
WITH due AS (
    SELECT id
    FROM outbox
    WHERE status = 'pending'
      AND COALESCE(next_attempt_at, NOW()) <= NOW()
    ORDER BY created_at
    FOR UPDATE SKIP LOCKED
    LIMIT %s
)
UPDATE outbox o
SET status = 'processing', updated_at = NOW()
FROM due
WHERE o.id = due.id
RETURNING o.id, o.topic, o.payload, o.attempts;
"""

_DISPATCHED_SQL = """
UPDATE outbox
SET status = 'dispatched', last_error = NULL, updated_at = NOW()
WHERE id = %s;
"""

_FAILED_SQL = """
UPDATE outbox
SET status = 'failed', attempts = attempts + 1, last_error = %s, updated_at = NOW()
WHERE id = %s;
"""

_RESCHEDULE_SQL = """
UPDATE outbox
SET status = 'pending',
    attempts = %s,
    last_error = %s,
    next_attempt_at = NOW() + make_interval(secs => %s),
    updated_at = NOW()
WHERE id = %s;
"""


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff in seconds, capped at `max_delay`."""

    base: int = 2
    max_delay: int = 60

    def compute_delay(self, attempts: int) -> int:
        # `attempts` counts the deliveries tried before this failure
        return min(self.max_delay, self.base * 2**attempts)


class UnsupportedMessage(Exception):
    pass


@dataclass(frozen=True)
class OutboxMessage:
    id: int
    topic: str
    payload: dict[str, Any]
    attempts: int

    @property
    def idempotency_key(self) -> str:
        return f"outbox-{self.id}"


class OutboxDispatcher:
    """
    Delivers rows written by signup and resend. Each poll claims a batch of
    due rows (several workers can poll side by side), sends them one by one
    and either marks them dispatched or puts them back with a backoff.
    """

    def __init__(
        self,
        *,
        pool: AsyncConnectionPool,
        email_adapter: EmailPort,
        batch_size: int = 10,
        poll_interval: float = 1.0,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.pool = pool
        self.email_adapter = email_adapter
        self.batch_size = batch_size
        self.poll_interval = poll_interval
        self.retry_policy = retry_policy or RetryPolicy()

    async def run_forever(self) -> None:
        logger.info(
            "outbox dispatcher started",
            extra={"batch_size": self.batch_size, "poll_interval": self.poll_interval},
        )
        while True:
            if await self._process_once() == 0:
                await asyncio.sleep(self.poll_interval)

    async def _process_once(self) -> int:
        """Handle one claimed batch and return how many rows it held."""
        batch = await self._claim_due_batch(self.batch_size)
        if batch:
            logger.info("claimed messages", extra={"count": len(batch)})
        for msg in batch:
            await self._deliver(msg)
        return len(batch)

    async def _deliver(self, msg: OutboxMessage) -> None:
        try:
            await self._dispatch(msg.topic, msg.payload, msg.idempotency_key)
        except UnsupportedMessage as e:
            # no retry can route it
            logger.error(
                "undeliverable message, marked failed",
                extra={"id": msg.id, "topic": msg.topic, "error": str(e)},
            )
            await self._execute(_FAILED_SQL, (str(e)[:1000], msg.id))
        except Exception as e:  # noqa: BLE001
            delay = self.retry_policy.compute_delay(msg.attempts)
            logger.warning(
                "delivery failed, rescheduled",
                extra={
                    "id": msg.id,
                    "topic": msg.topic,
                    "attempts": msg.attempts + 1,
                    "retry_in_s": delay,
                    "error": str(e),
                },
            )
            await self._execute(
                _RESCHEDULE_SQL, (msg.attempts + 1, str(e)[:1000], delay, msg.id)
            )
        else:
            await self._execute(_DISPATCHED_SQL, (msg.id,))

    async def _dispatch(
        self, topic: str, payload: dict[str, Any], idempotency_key: str
    ) -> None:
        if topic != VERIFICATION_TOPIC:
            raise UnsupportedMessage(f"unknown topic: {topic}")
        channel = payload.get("channel", "email")
        if channel != "email":
            raise UnsupportedMessage(f"unsupported verification channel: {channel}")
        await self.email_adapter.send(
            to=payload["to"],
            subject=payload["subject"],
            body=payload["body"],
            idempotency_key=idempotency_key,
        )

    async def _claim_due_batch(self, limit: int) -> list[OutboxMessage]:
        async with self.pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    await cur.execute(_CLAIM_SQL, (limit,))
                    rows = await cur.fetchall()
        messages = [OutboxMessage(r[0], r[1], r[2] or {}, r[3]) for r in rows]
        return sorted(messages, key=lambda m: m.id)

    async def _execute(self, sql: str, params: tuple[Any, ...]) -> None:
        async with self.pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    await cur.execute(sql, params)
