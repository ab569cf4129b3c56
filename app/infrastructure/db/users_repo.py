from __future__ import annotations

from typing import Any, Optional

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from app.domain.entities import User
from app.domain.errors import UserAlreadyExists
from app.domain.ports.user_repository import UserRepositoryPort

_USER_COLUMNS = (
    "id",
    "email",
    "phone_number",
    "full_name",
    "verification_type",
    "email_verified",
    "password_hash",
    "verification_code_salt",
    "verification_code_digest",
    "last_code_sent_at",
)
_UPDATABLE = {"email", "full_name", "phone_number", "password_hash"}
_RETURNING = sql.SQL(", ").join(sql.Identifier(c) for c in _USER_COLUMNS)


def _to_user(row: dict[str, Any]) -> User:
    return User(
        id=int(row["id"]),
        email=str(row["email"]),
        phone_number=row["phone_number"],
        full_name=row["full_name"],
        verification_type=row["verification_type"],
        email_verified=bool(row["email_verified"]),
        password_hash=row["password_hash"],
        verification_code_salt=row["verification_code_salt"],
        verification_code_digest=row["verification_code_digest"],
        last_code_sent_at=row["last_code_sent_at"],
    )


class PgUserRepository(UserRepositoryPort):
    """
    Postgres implementation of UserRepositoryPort.

    NOTE:
    - This repo is constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def insert(self, user: User) -> Optional[User]:
        # ON CONFLICT keeps concurrent signups with the same email from both
        # succeeding: the loser gets no row back.
        query = sql.SQL(
            """
            INSERT INTO users (
                email, phone_number, full_name, verification_type, email_verified,
                password_hash, verification_code_salt, verification_code_digest,
                last_code_sent_at
            )
            VALUES (LOWER(TRIM(%s)), %s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING {}
            """
        ).format(_RETURNING)
        params = (
            user.email,
            user.phone_number,
            user.full_name,
            user.verification_type,
            user.email_verified,
            user.password_hash,
            user.verification_code_salt,
            user.verification_code_digest,
            user.last_code_sent_at,
        )
        async with self._conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(query, params)
            row = await cur.fetchone()
        return _to_user(row) if row else None

    async def get_by_email(self, email: str) -> Optional[User]:
        query = sql.SQL("SELECT {} FROM users WHERE email = LOWER(TRIM(%s))").format(
            _RETURNING
        )
        async with self._conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(query, (email,))
            row = await cur.fetchone()
        return _to_user(row) if row else None

    async def get_by_id(
        self, user_id: int, *, for_update: bool = False
    ) -> Optional[User]:
        query = sql.SQL("SELECT {} FROM users WHERE id = %s").format(_RETURNING)
        if for_update:
            query = query + sql.SQL(" FOR UPDATE")
        async with self._conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(query, (user_id,))
            row = await cur.fetchone()
        return _to_user(row) if row else None

    async def update_profile(
        self, user_id: int, changes: dict[str, Any]
    ) -> Optional[User]:
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValueError(f"not updatable: {sorted(unknown)}")

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in changes
        )
        query = sql.SQL(
            "UPDATE users SET {}, updated_at = now() WHERE id = %s RETURNING {}"
        ).format(assignments, _RETURNING)
        try:
            async with self._conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, (*changes.values(), user_id))
                row = await cur.fetchone()
        except psycopg.errors.UniqueViolation as e:
            raise UserAlreadyExists() from e
        return _to_user(row) if row else None

    async def save_verification_state(self, user: User) -> None:
        query = """
        UPDATE users
        SET email_verified = %s,
            verification_code_salt = %s,
            verification_code_digest = %s,
            last_code_sent_at = %s,
            updated_at = now()
        WHERE id = %s
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                query,
                (
                    user.email_verified,
                    user.verification_code_salt,
                    user.verification_code_digest,
                    user.last_code_sent_at,
                    user.id,
                ),
            )
