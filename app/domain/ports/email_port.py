from __future__ import annotations

from typing import Protocol


class EmailPort(Protocol):
    """Outgoing mail; the only channel verification codes travel on today."""

    async def send(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        idempotency_key: str | None = None,
    ) -> None:
        """
        Hand one message over for delivery. Raise on any failure so the
        outbox keeps the message and retries it later. Two calls with the
        same idempotency_key must not produce two mails.
        """
