from __future__ import annotations

from typing import Optional

from psycopg.conninfo import conninfo_to_dict, make_conninfo
from psycopg_pool import AsyncConnectionPool

from app.settings import get_settings

_pool: Optional[AsyncConnectionPool] = None


def _with_connect_timeout(dsn: str, seconds: int) -> str:
    """Add connect_timeout unless the DSN already sets one."""
    if "connect_timeout" in conninfo_to_dict(dsn):
        return dsn
    return make_conninfo(dsn, connect_timeout=seconds)


def get_pool() -> AsyncConnectionPool:
    """
    The shared pool, created closed on first use. Whoever owns the process
    lifetime (the API lifespan, the outbox worker) opens and closes it.
    """
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = AsyncConnectionPool(
            _with_connect_timeout(
                settings.database_url, settings.db_connect_timeout_seconds
            ),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            timeout=5,
            open=False,
        )
    return _pool


async def open_pool() -> AsyncConnectionPool:
    pool = get_pool()
    if pool.closed:
        await pool.open()
    return pool


async def close_pool() -> None:
    global _pool
    pool, _pool = _pool, None
    if pool is not None:
        await pool.close()
