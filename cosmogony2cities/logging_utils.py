"""Logging setup: plain text for terminals, structured JSON for collectors."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

_RESERVED_LOG_RECORD_FIELDS = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "thread",
    "threadName",
    "taskName",
}

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s — %(message)s"


class JsonLogFormatter(logging.Formatter):
    """Render stdlib LogRecord objects as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        data = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_RECORD_FIELDS and not key.startswith("_")
        }
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        payload = {
            "timestamp": timestamp,
            "level": record.levelname.lower(),
            "module": record.name,
            "event": record.getMessage(),
            "data": data,
        }
        return json.dumps(payload, default=str, separators=(",", ":"))


def configure_logging(level: int | str = logging.INFO, json_output: bool = False) -> None:
    """Configure the root logger once, as JSON records or plain text lines."""
    root = logging.getLogger()
    if getattr(root, "_cosmogony2cities_logging", False):
        return

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root.handlers.clear()
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.addHandler(handler)
    root._cosmogony2cities_logging = True  # type: ignore[attr-defined]


def log_event(logger: logging.Logger, event: str, **data) -> None:
    """Emit structured event data under the standard schema."""
    logger.info(event, extra=data)
