from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Sequence

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from app.domain.errors import ResourceConflict, ResourceNotFound
from app.domain.ports.resource_controller import (
    AnnouncementsControllerPort,
    Record,
    ResourceControllerPort,
)


class PgResourceController(ResourceControllerPort):
    """
    Generic CRUD over a single table.

    Column names come from the constructor, never from the request, so the
    dynamic SQL below only ever interpolates known identifiers.
    """

    def __init__(
        self,
        pool_provider: Callable[[], AsyncConnectionPool],
        *,
        table: str,
        columns: Sequence[str],
    ) -> None:
        self._pool_provider = pool_provider
        self._table = sql.Identifier(table)
        self._columns = tuple(columns)

    def _known(self, values: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        values = dict(values or {})
        unknown = set(values) - set(self._columns)
        if unknown:
            raise ValueError(f"unknown columns: {sorted(unknown)}")
        return values

    @staticmethod
    def _where(conditions: Mapping[str, Any]) -> sql.Composable:
        if not conditions:
            return sql.SQL("TRUE")
        return sql.SQL(" AND ").join(
            sql.SQL("{} = %s").format(sql.Identifier(k)) for k in conditions
        )

    async def _execute(
        self, query: sql.Composable, params: Sequence[Any]
    ) -> list[Record]:
        try:
            async with self._pool_provider().connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(query, params)
                    if cur.description is None:
                        return []
                    return list(await cur.fetchall())
        except psycopg.errors.ForeignKeyViolation as e:
            raise ResourceNotFound("referenced record does not exist") from e
        except psycopg.errors.UniqueViolation as e:
            raise ResourceConflict("record already exists") from e

    async def create(
        self, fields: Mapping[str, Any], *, scope: Optional[Mapping[str, Any]] = None
    ) -> Record:
        values = {**self._known(fields), **self._known(scope)}
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
            self._table,
            sql.SQL(", ").join(sql.Identifier(k) for k in values),
            sql.SQL(", ").join(sql.Placeholder() for _ in values),
        )
        rows = await self._execute(query, list(values.values()))
        return rows[0]

    async def get_by_id(
        self, record_id: int, *, scope: Optional[Mapping[str, Any]] = None
    ) -> Record:
        conditions = {"id": record_id, **self._known(scope)}
        query = sql.SQL("SELECT * FROM {} WHERE {}").format(
            self._table, self._where(conditions)
        )
        rows = await self._execute(query, list(conditions.values()))
        if not rows:
            raise ResourceNotFound()
        return rows[0]

    async def get_all(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        scope: Optional[Mapping[str, Any]] = None,
    ) -> list[Record]:
        conditions = {**self._known(filters), **self._known(scope)}
        query = sql.SQL("SELECT * FROM {} WHERE {} ORDER BY id").format(
            self._table, self._where(conditions)
        )
        return await self._execute(query, list(conditions.values()))

    async def update(
        self,
        record_id: Optional[int],
        fields: Mapping[str, Any],
        *,
        scope: Optional[Mapping[str, Any]] = None,
    ) -> Record:
        changes = self._known(fields)
        conditions = self._known(scope)
        if record_id is not None:
            conditions = {"id": record_id, **conditions}
        if not conditions:
            raise ValueError("update needs a record id or a scope")
        if not changes:
            rows = await self._execute(
                sql.SQL("SELECT * FROM {} WHERE {}").format(
                    self._table, self._where(conditions)
                ),
                list(conditions.values()),
            )
        else:
            query = sql.SQL(
                "UPDATE {} SET {}, updated_at = now() WHERE {} RETURNING *"
            ).format(
                self._table,
                sql.SQL(", ").join(
                    sql.SQL("{} = %s").format(sql.Identifier(k)) for k in changes
                ),
                self._where(conditions),
            )
            rows = await self._execute(
                query, [*changes.values(), *conditions.values()]
            )
        if not rows:
            raise ResourceNotFound()
        return rows[0]

    async def delete(
        self, record_id: int, *, scope: Optional[Mapping[str, Any]] = None
    ) -> None:
        conditions = {"id": record_id, **self._known(scope)}
        query = sql.SQL("DELETE FROM {} WHERE {} RETURNING id").format(
            self._table, self._where(conditions)
        )
        rows = await self._execute(query, list(conditions.values()))
        if not rows:
            raise ResourceNotFound()


class PgAnnouncementsController(PgResourceController, AnnouncementsControllerPort):
    async def link_characteristic(
        self, announcement_id: int, characteristic_id: int
    ) -> Record:
        query = sql.SQL(
            """
            INSERT INTO announcement_characteristics (announcement_id, characteristic_id)
            VALUES (%s, %s)
            ON CONFLICT DO NOTHING
            """
        )
        await self._execute(query, (announcement_id, characteristic_id))
        return {
            "announcement_id": announcement_id,
            "characteristic_id": characteristic_id,
        }

    async def unlink_characteristic(
        self, announcement_id: int, characteristic_id: int
    ) -> None:
        query = sql.SQL(
            """
            DELETE FROM announcement_characteristics
            WHERE announcement_id = %s AND characteristic_id = %s
            RETURNING announcement_id
            """
        )
        rows = await self._execute(query, (announcement_id, characteristic_id))
        if not rows:
            raise ResourceNotFound()
