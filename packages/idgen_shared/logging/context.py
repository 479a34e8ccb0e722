"""Context propagation helpers for structured logging.

Fields bound here are attached to every record emitted on the current thread
or task. The CLI binds generator identity once per invocation so that library
log lines do not need to repeat it.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from contextvars import ContextVar, Token
from typing import Mapping

from . import fields

_LOG_CONTEXT: ContextVar[dict[str, str]] = ContextVar("idgen_log_context", default={})


def get_context() -> dict[str, str]:
    """Return a shallow copy of the current logging context."""
    return dict(_LOG_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind values into the current logging context.

    Values are stringified so every structured line has the same shape.
    ``None`` values are skipped.
    """
    updates = {str(key): str(value) for key, value in values.items() if value is not None}
    if not updates:
        return
    _LOG_CONTEXT.set({**_LOG_CONTEXT.get(), **updates})


def clear_context(*keys: str) -> None:
    """Clear selected keys, or everything when no keys are given."""
    if not keys:
        _LOG_CONTEXT.set({})
        return
    remaining = {
        key: value for key, value in _LOG_CONTEXT.get().items() if key not in keys
    }
    _LOG_CONTEXT.set(remaining)


class log_context(AbstractContextManager[None]):
    """Temporarily bind logging context for the duration of a block.

    Exceptions leaving the block propagate unchanged.
    """

    def __init__(self, values: Mapping[str, object]) -> None:
        self._values = dict(values)
        self._token: Token[dict[str, str]] | None = None

    def __enter__(self) -> None:
        self._token = _LOG_CONTEXT.set(dict(_LOG_CONTEXT.get()))
        bind_context(**self._values)

    def __exit__(self, *exc_info: object) -> None:
        if self._token is not None:
            _LOG_CONTEXT.reset(self._token)
            self._token = None


def generator_log_context(
    *, kind: str, node_id: int | None = None
) -> AbstractContextManager[None]:
    """Bind generator identity fields for the duration of a block."""
    return log_context({fields.GENERATOR_KIND: kind, fields.NODE_ID: node_id})
