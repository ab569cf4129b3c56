from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

from fastapi.concurrency import run_in_threadpool

import app.domain.services as domain_services
from app.domain.entities import User
from app.domain.errors import (
    InvalidStatusTransition,
    UserAlreadyExists,
    UserNotFound,
    VerificationCodeMismatch,
    VerificationThrottled,
)
from app.domain.ports.outbox_repository import VERIFICATION_TOPIC
from app.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("email", "password", "full_name")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _verification_payload(user: User, code: str) -> dict[str, Any]:
    return {
        "channel": user.verification_type,
        "to": user.email,
        "subject": "Your verification code",
        "body": "Your code is " + code,
    }


class CredentialStore:
    """
    Owns users, their password hashes and their email-verification codes.

    Every mutation runs inside one unit of work, so a user is never stored
    without its code and its outgoing verification message. Hashing runs in
    the thread pool to keep bcrypt off the event loop.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWorkPort],
        *,
        hash_password: Callable[[str], str],
        verify_password: Callable[[str, str], bool],
        code_digits: int = 6,
        resend_throttle_seconds: int = 60,
    ) -> None:
        self._uow_factory = uow_factory
        self._hash_password = hash_password
        self._verify_password = verify_password
        self._code_digits = code_digits
        self._resend_throttle = timedelta(seconds=resend_throttle_seconds)
        self._dummy_hash: str | None = None

    @property
    def code_digits(self) -> int:
        return self._code_digits

    async def create_user(
        self,
        *,
        email: str,
        phone_number: str,
        password: str,
        full_name: str,
        verification_type: str,
    ) -> User:
        password_hash = await run_in_threadpool(self._hash_password, password)
        code = domain_services.generate_numeric_code(self._code_digits)
        salt_b64, digest_b64 = domain_services.make_code_digest(code)

        user = User(
            email=email,
            phone_number=phone_number,
            full_name=full_name,
            verification_type=verification_type,
            password_hash=password_hash,
        )
        user.issue_verification_code(salt_b64, digest_b64, _utcnow())

        async with self._uow_factory() as transaction:
            created = await transaction.db_users.insert(user)
            if created is None:
                raise UserAlreadyExists()
            await transaction.outbox.enqueue(
                topic=VERIFICATION_TOPIC,
                payload=_verification_payload(created, code),
            )
            await transaction.commit()

        logger.info("user created", extra={"user_id": created.id})
        return created

    async def find_by_email(self, email: str) -> User:
        async with self._uow_factory() as transaction:
            user = await transaction.db_users.get_by_email(email.strip().lower())
        if user is None:
            raise UserNotFound()
        return user

    async def find_by_id(self, user_id: int) -> User:
        async with self._uow_factory() as transaction:
            user = await transaction.db_users.get_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return user

    async def verify_password(self, user: User | None, candidate: str) -> bool:
        """
        Check candidate against the user's hash. A missing user is checked
        against a throwaway hash so both failures take the same time.
        """
        if user is not None and user.password_hash:
            return await run_in_threadpool(
                self._verify_password, candidate, user.password_hash
            )
        await run_in_threadpool(
            self._verify_password, candidate, await self._get_dummy_hash()
        )
        return False

    async def issue_verification_code(self, user_id: int) -> str:
        code = domain_services.generate_numeric_code(self._code_digits)
        salt_b64, digest_b64 = domain_services.make_code_digest(code)
        now = _utcnow()

        async with self._uow_factory() as transaction:
            user = await transaction.db_users.get_by_id(user_id, for_update=True)
            if user is None:
                raise UserNotFound()
            if user.email_verified:
                raise InvalidStatusTransition()
            if (
                self._resend_throttle
                and user.last_code_sent_at is not None
                and now - user.last_code_sent_at < self._resend_throttle
            ):
                raise VerificationThrottled()
            user.issue_verification_code(salt_b64, digest_b64, now)
            await transaction.db_users.save_verification_state(user)
            await transaction.outbox.enqueue(
                topic=VERIFICATION_TOPIC,
                payload=_verification_payload(user, code),
            )
            await transaction.commit()

        logger.info("verification code reissued", extra={"user_id": user_id})
        return code

    async def consume_verification_code(self, user_id: int, code: str) -> User:
        async with self._uow_factory() as transaction:
            user = await transaction.db_users.get_by_id(user_id, for_update=True)
            if user is None:
                raise UserNotFound()
            if not user.code_matches(code):
                raise VerificationCodeMismatch()
            user.mark_email_verified()
            await transaction.db_users.save_verification_state(user)
            await transaction.commit()

        logger.info("email verified", extra={"user_id": user_id})
        return user

    async def update_profile(self, user_id: int, fields: Mapping[str, Any]) -> User:
        changes: dict[str, Any] = {
            key: value for key, value in fields.items() if key in PROFILE_FIELDS
        }
        if "password" in changes:
            changes["password_hash"] = await run_in_threadpool(
                self._hash_password, changes.pop("password")
            )
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()

        async with self._uow_factory() as transaction:
            if changes:
                user = await transaction.db_users.update_profile(user_id, changes)
            else:
                user = await transaction.db_users.get_by_id(user_id)
            if user is None:
                raise UserNotFound()
            await transaction.commit()
        return user

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await run_in_threadpool(
                self._hash_password, secrets.token_urlsafe(16)
            )
        return self._dummy_hash
