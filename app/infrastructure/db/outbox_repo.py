from __future__ import annotations

import psycopg
from psycopg.types.json import Json

from app.domain.ports.outbox_repository import OutboxRepositoryPort


class PgOutboxRepository(OutboxRepositoryPort):
    """
    Postgres implementation of the Outbox repo, bound to an *active async connection*.
    This class DOES NOT COMMIT; the caller (UoW) controls transactions, so a
    message is only visible to the dispatcher once the business change commits.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def enqueue(
        self, *, topic: str, payload: dict, idempotency_key: str | None = None
    ) -> str:
        sql = """
        INSERT INTO outbox (topic, payload, status, idempotency_key)
        VALUES (%s, %s, 'pending', %s)
        RETURNING id
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (topic, Json(payload), idempotency_key))
            row = await cur.fetchone()
            return str(row[0])
