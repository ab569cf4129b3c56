from __future__ import annotations

from typing import Any, Optional, Protocol

from app.domain.entities import User


class UserRepositoryPort(Protocol):
    async def insert(self, user: User) -> Optional[User]:
        """
        Insert a new user together with its pending verification code.
        Return the stored User, or None if the email is already taken.
        """

    async def get_by_email(self, email: str) -> Optional[User]:
        """Fetch user by (normalized) email. Return None if not found."""

    async def get_by_id(self, user_id: int, *, for_update: bool = False) -> Optional[User]:
        """
        Fetch user by id. With for_update=True the row stays locked until the
        surrounding transaction ends.
        """

    async def update_profile(self, user_id: int, changes: dict[str, Any]) -> Optional[User]:
        """
        Apply the given column changes. Return None if the user does not exist.
        Raise UserAlreadyExists if the new email is taken.
        """

    async def save_verification_state(self, user: User) -> None:
        """Persist email_verified, the pending code digest and last_code_sent_at."""
