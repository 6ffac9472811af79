from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

SERVICE_NAME = "hr_schedule"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: fixed envelope first, then the ``extra`` fields."""

    def __init__(self, service: str = SERVICE_NAME):
        super().__init__()
        self._service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": self._service,
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=True)


class _ServiceHandler(logging.StreamHandler):
    """Marker type so repeated setup replaces only our own handler."""


def setup_json_logging(level: str = "INFO", *, service: str = SERVICE_NAME) -> logging.Handler:
    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if isinstance(h, _ServiceHandler)]:
        root_logger.removeHandler(existing)

    handler = _ServiceHandler(sys.stderr)
    handler.setFormatter(JsonFormatter(service))
    root_logger.addHandler(handler)
    root_logger.setLevel(str(level or "INFO").upper())
    return handler
