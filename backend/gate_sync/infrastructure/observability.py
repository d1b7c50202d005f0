"""Structured Logging — one JSON object per line, carrying sync context.

Invariants:
    - Every line has timestamp, level, logger, message
    - correlation_key, entity_name, operation, error_code, task_id and path are
      copied from the record's extra= when set
    - setup_logging is idempotent: repeated lifespans never stack handlers

Design Decisions:
    - Plain stdlib logging with a custom Formatter, as everywhere else in the service
    - fmt="text" for local runs; anything else is JSON
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "correlation_key", "entity_name", "operation", "error_code",
    "task_id", "path",
)

_HANDLER_NAME = "gate_sync"


class JSONFormatter(logging.Formatter):
    """Render a LogRecord plus its sync context as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({
            key: getattr(record, key)
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        })
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "text":
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-7s %(name)s [%(correlation_key)s] %(message)s",
            defaults={"correlation_key": "-"},
        ))
    else:
        handler.setFormatter(JSONFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # SQL echo and per-request access lines drown out sync context
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
