"""Structured JSON logging helpers for container-friendly stdout logs."""

import json
import logging
import sys
from typing import Any, TextIO

from randomorg_wire.core.time_utils import utc_now

_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()) | {"message", "asctime"}
_CONFIGURED_FLAG = "_randomorg_wire_configured"


class JsonFormatter(logging.Formatter):
    """Serialize log records as compact JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": utc_now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED and not key.startswith("_")
        }
        if extras:
            payload["context"] = extras

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # repr() keeps Decimal, datetime and bytes context values loggable
        return json.dumps(payload, ensure_ascii=True, separators=(",", ":"), default=repr)


def configure_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure process-wide JSON logging once.

    Logs go to stdout unless ``stream`` is given; services that emit records
    on stdout pass stderr instead.
    """

    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG, False):
        return

    root.handlers.clear()
    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.addHandler(handler)
    root.setLevel(level.upper())
    setattr(root, _CONFIGURED_FLAG, True)
