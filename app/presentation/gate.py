from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from app.domain.errors import (
    AuthenticationError,
    DomainError,
    FieldViolation,
    InvalidCredentials,
    InvalidStatusTransition,
    NotFoundError,
    ResourceConflict,
    UserAlreadyExists,
    ValidationFailed,
    VerificationCodeMismatch,
    VerificationThrottled,
)
from app.presentation.authentication import Authenticator
from app.presentation.context import RequestContext
from app.presentation.validation import RequestValidator

logger = logging.getLogger(__name__)

Handler = Callable[[RequestContext], Awaitable[Any]]

# (error type, status, client-facing detail); first match wins
_ERROR_TABLE: tuple[tuple[type[DomainError], int, str], ...] = (
    (ValidationFailed, status.HTTP_400_BAD_REQUEST, "validation failed"),
    (VerificationCodeMismatch, status.HTTP_400_BAD_REQUEST, "invalid verification code"),
    (InvalidStatusTransition, status.HTTP_400_BAD_REQUEST, "email already verified"),
    (InvalidCredentials, status.HTTP_401_UNAUTHORIZED, "invalid credentials"),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED, "not authenticated"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not found"),
    (UserAlreadyExists, status.HTTP_409_CONFLICT, "email already registered"),
    (ResourceConflict, status.HTTP_409_CONFLICT, "conflict"),
    (VerificationThrottled, status.HTTP_429_TOO_MANY_REQUESTS, "verification code recently sent"),
)


def error_response(exc: DomainError) -> Optional[JSONResponse]:
    for error_type, status_code, detail in _ERROR_TABLE:
        if isinstance(exc, error_type):
            break
    else:
        return None

    content: dict[str, Any] = {"detail": detail}
    headers: dict[str, str] = {}
    if isinstance(exc, ValidationFailed):
        content["errors"] = [
            {"field": v.field, "message": v.message} for v in exc.violations
        ]
    if isinstance(exc, AuthenticationError):
        headers["WWW-Authenticate"] = "Bearer"
    return JSONResponse(status_code=status_code, content=content, headers=headers)


class RouteGate:
    """
    One endpoint's pipeline: validate the body, then authenticate, then hand
    over to the handler. This is the only place where errors become HTTP
    status codes.
    """

    def __init__(
        self,
        name: str,
        handler: Handler,
        *,
        validator: Optional[RequestValidator] = None,
        authenticator: Optional[Authenticator] = None,
        status_code: int = status.HTTP_200_OK,
    ) -> None:
        self.name = name
        self.handler = handler
        self.validator = validator
        self.authenticator = authenticator
        self.status_code = status_code

    async def dispatch(self, request: Request) -> Response:
        try:
            ctx = RequestContext(
                headers=request.headers,
                path_params=dict(request.path_params),
                query_params=dict(request.query_params),
                body=await self._read_body(request),
            )
            if self.validator is not None:
                ctx.body = self.validator.validate(ctx.body)
            if self.authenticator is not None:
                ctx.principal = await self.authenticator.authenticate(ctx)
            result = await self.handler(ctx)
            response = JSONResponse(
                status_code=self.status_code, content=jsonable_encoder(result)
            )
        except AuthenticationError as e:
            logger.info(
                "authentication rejected",
                extra={"route": self.name, "reason": type(e).__name__},
            )
            return error_response(e)
        except DomainError as e:
            response = error_response(e)
            if response is None:
                return self._internal_error()
            return response
        except Exception:
            return self._internal_error()
        return response

    def _internal_error(self) -> JSONResponse:
        logger.exception("unhandled error", extra={"route": self.name})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "internal server error"},
        )

    async def _read_body(self, request: Request) -> Any:
        raw = await request.body()
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            if self.validator is None:
                # bodies are ignored on routes without rules
                return None
            raise ValidationFailed(
                [FieldViolation("body", "must be valid JSON")]
            ) from None
