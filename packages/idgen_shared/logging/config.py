"""Stdout logging configuration for idgen components.

Design goals:
- Emit to stdout only; the CLI and embedding processes own log collection.
- Carry structured fields from both the bound context and ``extra=`` kwargs.
- Stay idempotent so repeated CLI invocations in one process do not duplicate
  handlers.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

from . import fields
from .context import bind_context, get_context

# Attributes present on every ``LogRecord``; anything else came from ``extra=``.
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "context"}


def _structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Collect bound context plus ``extra=`` attributes for one record."""
    output: dict[str, Any] = {}
    context = getattr(record, "context", None)
    if isinstance(context, dict):
        output.update(context)
    for key, value in vars(record).items():
        if key in _RESERVED_RECORD_ATTRS or key.startswith("_"):
            continue
        output.setdefault(key, value)
    return output


class ContextFilter(logging.Filter):
    """Inject the current logging context into each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, "context", get_context())
        return True


class JsonFormatter(logging.Formatter):
    """Emit newline-delimited JSON logs with stable core fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.now(UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
        }
        payload.update(_structured_fields(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Human-readable formatter that still appends structured fields."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        structured = _structured_fields(record)
        if not structured:
            return message
        suffix = " ".join(f"{key}={value}" for key, value in sorted(structured.items()))
        return f"{message} {suffix}"


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure root logging with a single stream handler (stdout by default).

    Existing root handlers are replaced, so calling this more than once never
    produces duplicate lines.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(stream=stream if stream is not None else sys.stdout)
    handler.setLevel(level.upper())
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())

    root.addHandler(handler)

    bind_context(**{fields.SERVICE: service, fields.ENVIRONMENT: environment})


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger using Python's standard logging hierarchy."""
    return logging.getLogger(name)
