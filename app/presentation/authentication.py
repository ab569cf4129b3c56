from __future__ import annotations

import base64
import binascii
from typing import Optional, Protocol

from app.application.credential_store import CredentialStore
from app.domain import services as domain_services
from app.domain.entities import Principal
from app.domain.errors import (
    InvalidCredentials,
    InvalidOrExpiredToken,
    MalformedCredential,
    MissingCredential,
    UserNotFound,
)
from app.domain.ports.token_service import TokenServicePort
from app.presentation.context import RequestContext


class Authenticator(Protocol):
    async def authenticate(self, ctx: RequestContext) -> Principal:
        """Resolve the caller or raise an AuthenticationError."""


def _split_authorization(value: str) -> tuple[str, str]:
    scheme, _, credentials = value.strip().partition(" ")
    return scheme.lower(), credentials.strip()


class BearerAuthenticator:
    """`Authorization: Bearer <token>` checked against the token service."""

    def __init__(self, tokens: TokenServicePort) -> None:
        self._tokens = tokens

    async def authenticate(self, ctx: RequestContext) -> Principal:
        header = ctx.headers.get("authorization")
        if not header or not header.strip():
            raise MissingCredential()
        scheme, token = _split_authorization(header)
        if scheme != "bearer" or not domain_services.looks_like_session_token(token):
            raise MalformedCredential()

        user_id = await self._tokens.validate(token)
        if user_id is None:
            raise InvalidOrExpiredToken()
        return Principal(user_id=user_id, token=token)


class LocalAuthenticator:
    """
    Email and password from the JSON body (or an HTTP Basic header), checked
    against the credential store. A new session token is issued on success;
    earlier sessions of the same user stay valid.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        tokens: TokenServicePort,
        *,
        require_verified_email: bool = False,
    ) -> None:
        self._credentials = credentials
        self._tokens = tokens
        self._require_verified_email = require_verified_email

    async def authenticate(self, ctx: RequestContext) -> Principal:
        email, password = self._extract(ctx)

        try:
            user = await self._credentials.find_by_email(email)
        except UserNotFound:
            user = None
        # always run the hash check so unknown emails cost the same time
        matched = await self._credentials.verify_password(user, password)
        if user is None or not matched:
            raise InvalidCredentials()
        if self._require_verified_email and not user.email_verified:
            raise InvalidCredentials()

        token = await self._tokens.issue(user.id)
        return Principal(user_id=user.id, token=token.value)

    @staticmethod
    def _extract(ctx: RequestContext) -> tuple[str, str]:
        body = ctx.body if isinstance(ctx.body, dict) else {}
        email, password = body.get("email"), body.get("password")
        if isinstance(email, str) and isinstance(password, str) and email and password:
            return email, password

        basic = _basic_credentials(ctx.headers.get("authorization"))
        if basic is not None:
            return basic
        raise MissingCredential()


def _basic_credentials(header: Optional[str]) -> Optional[tuple[str, str]]:
    if not header:
        return None
    scheme, encoded = _split_authorization(header)
    if scheme != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise MalformedCredential() from None
    email, sep, password = decoded.partition(":")
    if not sep or not email or not password:
        raise MalformedCredential()
    return email, password
