from datetime import datetime, timezone

import pytest

from app.domain.entities import User
from app.domain.errors import UserAlreadyExists
from app.domain.services import make_code_digest
from app.infrastructure.db.uow import PgUnitOfWork

pytest_plugins = ["tests.integration.db_fixtures"]
pytestmark = pytest.mark.integration


def _user(email: str = " Ana@Example.COM ") -> User:
    u = User(
        email=email,
        phone_number="+5511999990000",
        full_name="Ana Souza",
        password_hash="hash-1",
    )
    u.issue_verification_code(*make_code_digest("012345"), datetime.now(timezone.utc))
    return u


async def test_insert_normalizes_and_returns_stored_user(pool):
    async with PgUnitOfWork(pool) as tx:
        created = await tx.db_users.insert(_user())
        await tx.commit()

    assert created is not None and created.id is not None
    assert created.email == "ana@example.com"
    assert created.code_matches("012345")

    async with PgUnitOfWork(pool) as tx:
        fetched = await tx.db_users.get_by_email("ANA@example.com")
    assert fetched.id == created.id
    assert fetched.password_hash == "hash-1"


async def test_duplicate_email_insert_returns_none(pool):
    async with PgUnitOfWork(pool) as tx:
        assert await tx.db_users.insert(_user()) is not None
        assert await tx.db_users.insert(_user("ana@example.com")) is None
        await tx.commit()


async def test_uncommitted_work_is_rolled_back(pool):
    async with PgUnitOfWork(pool) as tx:
        await tx.db_users.insert(_user())
        await tx.outbox.enqueue(topic="user.verification_code", payload={"to": "x"})

    async with PgUnitOfWork(pool) as tx:
        assert await tx.db_users.get_by_email("ana@example.com") is None


async def test_verification_state_round_trip(pool):
    async with PgUnitOfWork(pool) as tx:
        created = await tx.db_users.insert(_user())
        await tx.commit()

    async with PgUnitOfWork(pool) as tx:
        user = await tx.db_users.get_by_id(created.id, for_update=True)
        user.mark_email_verified()
        await tx.db_users.save_verification_state(user)
        await tx.commit()

    async with PgUnitOfWork(pool) as tx:
        stored = await tx.db_users.get_by_id(created.id)
    assert stored.email_verified is True
    assert stored.has_pending_code is False


async def test_update_profile(pool):
    async with PgUnitOfWork(pool) as tx:
        ana = await tx.db_users.insert(_user())
        bob = await tx.db_users.insert(_user("bob@example.com"))
        await tx.commit()

    async with PgUnitOfWork(pool) as tx:
        updated = await tx.db_users.update_profile(ana.id, {"full_name": "Ana S."})
        await tx.commit()
    assert updated.full_name == "Ana S."

    async with PgUnitOfWork(pool) as tx:
        with pytest.raises(UserAlreadyExists):
            await tx.db_users.update_profile(bob.id, {"email": "ana@example.com"})

    async with PgUnitOfWork(pool) as tx:
        assert await tx.db_users.update_profile(9999, {"full_name": "x"}) is None
