from __future__ import annotations

from typing import Optional, Protocol

from app.domain.entities import Token


class TokenServicePort(Protocol):
    """
    Session token storage. Implementations must make each operation atomic
    per token: once revoke() has returned, validate() of that value never
    succeeds again.
    """

    async def issue(self, user_id: int) -> Token:
        """Create a fresh random token bound to user_id."""

    async def validate(self, value: str) -> Optional[int]:
        """
        Return the bound user id, or None for unknown, malformed, expired and
        revoked tokens alike.
        """

    async def revoke(self, value: str) -> bool:
        """Drop the token. False if it was not active."""
