"""Structured JSON logging shared by the API service and the review CLI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from pythonjsonlogger import jsonlogger

# Request-per-line chatter from the HTTP stack drowns out source adapter logs.
_NOISY_LOGGERS = ("httpx", "httpcore")


class _ServiceContext(logging.Filter):
    """Stamps every record with the emitting service and environment."""

    def __init__(self, service_name: str, env: str) -> None:
        super().__init__()
        self.service_name = service_name
        self.env = env

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        record.environment = self.env
        return True


def configure_logging(
    service_name: str,
    env: str,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Route all logging through one JSON handler for `service_name`.

    The API logs to stdout. The CLI passes ``sys.stderr`` so that exported
    CSV and table output on stdout stays clean. Calling this again replaces
    the previous handler.
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(_ServiceContext(service_name, env))
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(service)s %(environment)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "severity"},
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
