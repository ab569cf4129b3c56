from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from app.domain.errors import InvalidStatusTransition
from app.domain.services import verify_code_digest

VerificationState = Literal["unverified", "code_issued", "verified"]


@dataclass
class User:
    id: int | None = None
    email: str | None = None
    phone_number: str = ""
    full_name: str = ""
    verification_type: str = "email"
    email_verified: bool = False
    password_hash: str | None = field(default=None, repr=False)
    verification_code_salt: str | None = field(default=None, repr=False)
    verification_code_digest: str | None = field(default=None, repr=False)
    last_code_sent_at: datetime | None = None

    def __post_init__(self):
        if self.email:
            self.email = self.email.strip().lower()
            if not self.email:
                raise ValueError("email cannot be empty")
        else:
            raise ValueError("email is required")

    @property
    def has_pending_code(self) -> bool:
        return bool(self.verification_code_salt and self.verification_code_digest)

    @property
    def verification_state(self) -> VerificationState:
        if self.email_verified:
            return "verified"
        if self.has_pending_code:
            return "code_issued"
        return "unverified"

    def issue_verification_code(
        self, salt_b64: str, digest_b64: str, when: datetime
    ) -> None:
        """Replace any pending code; the previous one stops matching."""
        if self.email_verified:
            raise InvalidStatusTransition()
        self.verification_code_salt = salt_b64
        self.verification_code_digest = digest_b64
        self.last_code_sent_at = when

    def code_matches(self, code: str) -> bool:
        if self.email_verified or not self.has_pending_code:
            return False
        return verify_code_digest(
            code, self.verification_code_salt, self.verification_code_digest
        )

    def mark_email_verified(self) -> None:
        if self.email_verified or not self.has_pending_code:
            raise InvalidStatusTransition()
        self.email_verified = True
        self.verification_code_salt = None
        self.verification_code_digest = None


@dataclass(frozen=True)
class Token:
    value: str = field(repr=False)
    user_id: int
    issued_at: datetime


@dataclass(frozen=True)
class Principal:
    """The authenticated identity attached to a request."""

    user_id: int
    token: str | None = field(default=None, repr=False)
