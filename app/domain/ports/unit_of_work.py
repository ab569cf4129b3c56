from __future__ import annotations

from types import TracebackType
from typing import Protocol, Type

from app.domain.ports.outbox_repository import OutboxRepositoryPort
from app.domain.ports.user_repository import UserRepositoryPort


class UnitOfWorkPort(Protocol):
    """
    Transaction boundary around the user repository and the outbox, so a
    user change and the message announcing it commit together.

        async with uow_factory() as tx:
            user = await tx.db_users.get_by_id(user_id, for_update=True)
            ...
            await tx.db_users.save_verification_state(user)
            await tx.outbox.enqueue(topic=VERIFICATION_TOPIC, payload={...})
            await tx.commit()

    Anything not committed when the block exits is rolled back.
    """

    db_users: UserRepositoryPort
    outbox: OutboxRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort": ...

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
