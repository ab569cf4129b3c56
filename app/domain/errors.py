from __future__ import annotations

from dataclasses import dataclass


class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str


class ValidationFailed(DomainError):
    """A request body broke one or more field rules."""

    def __init__(self, violations: list[FieldViolation]) -> None:
        super().__init__(", ".join(f"{v.field}: {v.message}" for v in violations))
        self.violations = violations


class InvalidStatusTransition(DomainError):
    """Tried to change a user's verification state in a way that's not allowed."""

    pass


class VerificationCodeMismatch(DomainError):
    """The submitted code is not the user's pending verification code."""

    pass


class VerificationThrottled(DomainError):
    """A new verification code was requested too soon after the previous one."""

    pass


class NotFoundError(DomainError):
    pass


class UserNotFound(NotFoundError):
    """No user matches the lookup criteria (e.g., email)."""

    pass


class ResourceNotFound(NotFoundError):
    """A record (or a record it points to) does not exist."""

    pass


class UserAlreadyExists(DomainError):
    """Another user already owns this email."""

    pass


class ResourceConflict(DomainError):
    """A record would break a uniqueness rule (e.g. a second contact)."""

    pass


class AuthenticationError(DomainError):
    """Base for every failure of an authentication strategy."""

    pass


class MissingCredential(AuthenticationError):
    pass


class MalformedCredential(AuthenticationError):
    pass


class InvalidOrExpiredToken(AuthenticationError):
    pass


class InvalidCredentials(AuthenticationError):
    """Unknown email or wrong password; the two are never told apart."""

    pass
