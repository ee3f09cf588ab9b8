"""Structured Logging — one JSON line per record for delivery tracing.

Invariants:
    - Every line has timestamp (record creation time, UTC), level, logger, message
    - Delivery extras (user_id, receiver_id, message_id, notification_id,
      event_type, error_code, path, close_code) are copied when set
    - setup_logging is idempotent: calling it twice does not duplicate lines

Design Decisions:
    - Standard library logging with a custom formatter; modules log through
      logging.getLogger(__name__) and pass context via `extra`
    - "text" format for local runs, JSON everywhere else
"""

import json
import logging
from datetime import datetime, timezone

DELIVERY_FIELDS = (
    "user_id", "receiver_id", "message_id", "notification_id",
    "event_type", "error_code", "path", "close_code",
)
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as a JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            key: getattr(record, key)
            for key in DELIVERY_FIELDS
            if getattr(record, key, None) is not None
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _SocialHubHandler(logging.StreamHandler):
    """Marker type so setup_logging can find and replace its own handler."""


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _SocialHubHandler)]:
        root.removeHandler(existing)

    handler = _SocialHubHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
