import logging
import sys
import time

from pythonjsonlogger.json import JsonFormatter


class UTCJsonFormatter(JsonFormatter):
    converter = time.gmtime


def setup_logging(level: str = "INFO", *, service: str = "imovel-finder-api") -> None:
    """
    Route every logger to stdout as one JSON object per line. Records carry
    the service name plus whatever the call site passed in `extra`.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        UTCJsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "ts", "levelname": "level"},
            static_fields={"service": service},
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    # per-request noise
    for name in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(name).setLevel("WARNING")
