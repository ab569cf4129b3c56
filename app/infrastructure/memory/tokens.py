from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from app.domain import services as domain_services
from app.domain.entities import Token
from app.domain.ports.token_service import TokenServicePort


class InMemoryTokenService(TokenServicePort):
    """
    Process-local sessions for single-worker setups and tests.

    None of the methods awaits between reading and writing the dict, so each
    one runs to completion on the event loop without interleaving.
    """

    def __init__(self, *, ttl_seconds: int = 86400) -> None:
        self._tokens: dict[str, Token] = {}
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds > 0 else None

    def __len__(self) -> int:
        return len(self._tokens)

    async def issue(self, user_id: int) -> Token:
        self._sweep()
        token = Token(
            value=domain_services.generate_session_token(),
            user_id=user_id,
            issued_at=datetime.now(timezone.utc),
        )
        self._tokens[domain_services.session_token_digest(token.value)] = token
        return token

    async def validate(self, value: str) -> Optional[int]:
        if not domain_services.looks_like_session_token(value):
            return None
        key = domain_services.session_token_digest(value)
        token = self._tokens.get(key)
        if token is None:
            return None
        if self._expired(token):
            del self._tokens[key]
            return None
        return token.user_id

    async def revoke(self, value: str) -> bool:
        if not domain_services.looks_like_session_token(value):
            return False
        token = self._tokens.pop(domain_services.session_token_digest(value), None)
        return token is not None and not self._expired(token)

    def _sweep(self) -> None:
        # expired sessions nobody presented again
        if self._ttl is None:
            return
        for key in [k for k, t in self._tokens.items() if self._expired(t)]:
            del self._tokens[key]

    def _expired(self, token: Token) -> bool:
        return bool(
            self._ttl and datetime.now(timezone.utc) - token.issued_at >= self._ttl
        )
