from __future__ import annotations

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from app.settings import get_settings

_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain: str, *, rounds: int | None = None) -> str:
    """
    bcrypt hash of `plain`; `rounds` defaults to settings.bcrypt_rounds.
    Blocking. Async callers go through run_in_threadpool.
    """
    cost = rounds if rounds is not None else get_settings().bcrypt_rounds
    return _pwd.hash(plain, rounds=cost)


def verify_password(plain: str, password_hash: str) -> bool:
    """Constant-time check; a hash passlib cannot parse never matches."""
    try:
        return _pwd.verify(plain, password_hash)
    except (UnknownHashError, ValueError):
        return False
