"""Constructors for ``ErrorDetail`` values, one per category."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail


def _detail(
    category: ErrorCategory,
    code: str,
    message: str,
    *,
    retryable: bool,
    metadata: Mapping[str, str] | None,
) -> ErrorDetail:
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        retryable=retryable,
        metadata=dict(metadata or {}),
    )


def validation_error(
    message: str,
    *,
    code: str = codes.VALIDATION_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Caller supplied a bad argument or malformed input. Never retryable."""
    return _detail(
        ErrorCategory.VALIDATION, code, message, retryable=False, metadata=metadata
    )


def unsupported_error(
    message: str,
    *,
    code: str = codes.UNSUPPORTED_OPERATION,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """A generator was asked for a representation it does not produce."""
    return _detail(
        ErrorCategory.UNSUPPORTED, code, message, retryable=False, metadata=metadata
    )


def state_error(
    message: str,
    *,
    code: str = codes.CLOCK_REGRESSION,
    retryable: bool = True,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Generation failed because of clock state; a later call may succeed."""
    return _detail(
        ErrorCategory.STATE, code, message, retryable=retryable, metadata=metadata
    )


def dependency_error(
    message: str,
    *,
    code: str = codes.DIGEST_UNAVAILABLE,
    retryable: bool = False,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """A platform primitive (for example a digest) is missing."""
    return _detail(
        ErrorCategory.DEPENDENCY, code, message, retryable=retryable, metadata=metadata
    )


def internal_error(
    message: str,
    *,
    code: str = codes.INTERNAL_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    return _detail(
        ErrorCategory.INTERNAL, code, message, retryable=False, metadata=metadata
    )
