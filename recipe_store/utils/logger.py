"""Logging for the recipe store.

Every module logs through `logger` (named "recipe_store") or an adapter from
`operation_logger()`, which stamps each record with the store operation that
produced it. Output goes to stdout; environment variables pick the shape:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

Structured fields carried on records:
- operation: business-layer method name (e.g. "delete_ingredient")
- entity_id: primary key of the entity the message is about
"""

import json
import logging
import os
import sys
from typing import Any, MutableMapping, Optional

STRUCTURED_FIELDS = ("operation", "entity_id")


def _structured(record: logging.LogRecord) -> dict[str, Any]:
    """Collect the structured fields present on a record."""
    return {field: getattr(record, field) for field in STRUCTURED_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, structured fields promoted to top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_structured(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RichTextFormatter(logging.Formatter):
    """Colored single-line text: marker, time, level, logger, [operation] message (#id)."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "RESET": "\033[0m",
    }

    ICONS = {
        "DEBUG": "·",
        "INFO": "+",
        "WARNING": "!",
        "ERROR": "x",
    }

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        fields = _structured(record)

        parts = [
            self.ICONS.get(level, " "),
            self.formatTime(record, "%Y-%m-%d %H:%M:%S"),
            f"{level:<8}",
            f"{record.name:<20}",
        ]
        if fields.get("operation"):
            parts.append(f"[{fields['operation']}]")
        parts.append(record.getMessage())
        if fields.get("entity_id") is not None:
            parts.append(f"(#{fields['entity_id']})")

        text = f"{self.COLORS.get(level, self.COLORS['RESET'])}{' '.join(parts)}{self.COLORS['RESET']}"
        if record.exc_info:
            text += f"\n{self.formatException(record.exc_info)}"
        return text


class OperationLogger(logging.LoggerAdapter):
    """Adapter that tags every record with a fixed `operation`.

    Per-call `extra` (typically `entity_id`) is merged on top.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, attaching a stdout handler on first use.

    Args:
        name: Logger name, typically module name.

    Returns:
        Configured logger instance.
    """
    instance = logging.getLogger(name)
    if instance.handlers:
        return instance

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    instance.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if os.getenv("LOG_TYPE", "text").lower() == "json" else RichTextFormatter())
    instance.addHandler(handler)
    return instance


def operation_logger(operation: str, base: Optional[logging.Logger] = None) -> OperationLogger:
    """Adapter over `base` (default: the package logger) bound to `operation`."""
    return OperationLogger(base or logger, {"operation": operation})


logger = get_logger("recipe_store")
