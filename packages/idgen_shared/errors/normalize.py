"""Exception normalization utilities for shared error contracts."""

from __future__ import annotations

from . import codes
from .factories import internal_error, unsupported_error, validation_error
from .types import ErrorDetail


def exception_to_error(exc: Exception) -> ErrorDetail:
    """Normalize a Python exception into a shared ``ErrorDetail``.

    Exceptions that know their own shape expose ``to_error_detail()`` and are
    returned unchanged. Everything else is mapped conservatively by builtin
    exception type.
    """
    to_error_detail = getattr(exc, "to_error_detail", None)
    if callable(to_error_detail):
        detail = to_error_detail()
        if isinstance(detail, ErrorDetail):
            return detail

    metadata = {"exception_type": type(exc).__name__}

    if isinstance(exc, ValueError):
        return validation_error(str(exc), code=codes.INVALID_ARGUMENT, metadata=metadata)

    if isinstance(exc, NotImplementedError):
        return unsupported_error(
            str(exc) or "operation not supported",
            code=codes.UNSUPPORTED_OPERATION,
            metadata=metadata,
        )

    return internal_error(
        str(exc) or "unexpected exception",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )
