from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from types import TracebackType
from typing import Optional, Type

import psycopg
from psycopg_pool import AsyncConnectionPool

from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.infrastructure.db.outbox_repo import PgOutboxRepository
from app.infrastructure.db.users_repo import PgUserRepository

logger = logging.getLogger(__name__)


class PgUnitOfWork(UnitOfWorkPort):
    """
    One pooled connection, one transaction. The repositories share the
    connection and never commit themselves; leaving the block without
    commit() rolls everything back.
    """

    db_users: PgUserRepository
    outbox: PgOutboxRepository

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._stack: Optional[AsyncExitStack] = None
        self._conn: Optional[psycopg.AsyncConnection] = None
        self._committed = False

    async def __aenter__(self) -> "PgUnitOfWork":
        stack = AsyncExitStack()
        self._conn = await stack.enter_async_context(self._pool.connection())
        self._stack = stack
        self._committed = False
        self.db_users = PgUserRepository(self._conn)
        self.outbox = PgOutboxRepository(self._conn)
        return self

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        stack, self._stack = self._stack, None
        try:
            if self._conn is not None and (exc_value or not self._committed):
                try:
                    await self._conn.rollback()
                except psycopg.Error:
                    # the pool discards broken connections on return
                    logger.warning("rollback failed", exc_info=True)
        finally:
            self._conn = None
            if stack is not None:
                await stack.__aexit__(exc_type, exc_value, traceback)

    async def commit(self) -> None:
        if self._conn is None:
            raise RuntimeError("commit() outside of the unit of work")
        await self._conn.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._conn is not None:
            await self._conn.rollback()
        self._committed = False
