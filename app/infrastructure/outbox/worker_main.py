"""
Outbox worker process: `python -m app.infrastructure.outbox.worker_main`.

Runs the dispatcher until SIGINT/SIGTERM, then releases the pool and the
shared HTTP client.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress

from app.infrastructure.db.pool import close_pool, open_pool
from app.infrastructure.email.http_smtp_adapter import HttpSmtpEmailAdapter
from app.infrastructure.http.client import close_http_client, open_http_client
from app.infrastructure.outbox.dispatcher import OutboxDispatcher, RetryPolicy
from app.logging import setup_logging
from app.settings import Settings, get_settings

logger = logging.getLogger(__name__)


async def build_dispatcher(settings: Settings) -> OutboxDispatcher:
    email = HttpSmtpEmailAdapter(
        base_url=settings.smtp_base_url,
        client=await open_http_client(),
        sender=settings.mail_sender,
    )
    return OutboxDispatcher(
        pool=await open_pool(),
        email_adapter=email,
        batch_size=settings.outbox_batch_size,
        poll_interval=settings.outbox_poll_interval_ms / 1000,
        retry_policy=RetryPolicy(
            base=settings.outbox_retry_base_seconds,
            max_delay=settings.outbox_retry_max_seconds,
        ),
    )


async def _run() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    try:
        dispatcher = await build_dispatcher(settings)
        worker = asyncio.create_task(dispatcher.run_forever())
        logger.info("outbox worker started")

        stopped = asyncio.create_task(stop.wait())
        done, _ = await asyncio.wait(
            {worker, stopped}, return_when=asyncio.FIRST_COMPLETED
        )
        if worker in done:
            # run_forever only returns by raising
            stopped.cancel()
            worker.result()

        logger.info("outbox worker stopping")
        worker.cancel()
        with suppress(asyncio.CancelledError):
            await worker
    finally:
        await close_http_client()
        await close_pool()
    logger.info("outbox worker stopped")


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
