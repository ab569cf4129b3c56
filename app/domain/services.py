from __future__ import annotations

import base64
import hashlib
import hmac
import os
import re
import secrets

SESSION_TOKEN_BYTES = 32
_SESSION_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{43}$")


def generate_numeric_code(digits: int = 6) -> str:
    """Zero-padded numeric code with `digits` digits."""
    return f"{secrets.randbelow(10**digits):0{digits}d}"


def normalize_code(value: int | str, digits: int = 6) -> str:
    """
    Bring a submitted code back to its zero-padded form.
    JSON clients may send the code as a number, which drops leading zeros.
    """
    if isinstance(value, int):
        return f"{value:0{digits}d}"
    return str(value).strip().zfill(digits)


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _salted_digest(salt: bytes, code: str) -> bytes:
    return hashlib.sha256(salt + code.encode("utf-8")).digest()


def make_code_digest(code: str) -> tuple[str, str]:
    """
    Hash a verification code for storage. Returns base64 (salt, digest) with
    digest = sha256(salt || code); the plain code is never persisted.
    """
    salt = os.urandom(16)
    return _b64(salt), _b64(_salted_digest(salt, code))


def verify_code_digest(code: str, salt_b64: str, digest_b64: str) -> bool:
    try:
        salt = base64.b64decode(salt_b64, validate=True)
        expected = base64.b64decode(digest_b64, validate=True)
    except (ValueError, TypeError):
        return False
    return hmac.compare_digest(_salted_digest(salt, code), expected)


def generate_session_token() -> str:
    """43 URL-safe characters (256 bits of entropy)."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def looks_like_session_token(value: str | None) -> bool:
    return bool(value) and _SESSION_TOKEN_RE.fullmatch(value) is not None


def session_token_digest(value: str) -> str:
    """Token stores key sessions by this digest, never by the raw token."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()
