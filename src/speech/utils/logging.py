"""Structured logging utilities."""

import json
import logging
from typing import Any

# LogRecord attributes that are not user-supplied `extra` fields
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object, including `extra` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Setup root logging.

    Args:
        level: Logging level
        json_format: Whether to use JSON format
    """
    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%H:%M:%S")
        )
    logging.basicConfig(level=getattr(logging, level.upper()), handlers=[handler], force=True)


def log_event(event_type: str, data: dict[str, Any]) -> None:
    """Log structured event.

    Args:
        event_type: Event type identifier
        data: Event data dictionary
    """
    logging.getLogger("speech.events").info(json.dumps({"event": event_type, **data}))
