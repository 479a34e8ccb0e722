"""Tests for shared error normalization across idgen failures."""

from __future__ import annotations

from packages.idgen_core import (
    ClockRegressionError,
    ClockStalledError,
    DigestUnavailableError,
    InvalidArgumentError,
    InvalidEncodingError,
    TimestampOverflowError,
    UnsupportedOperationError,
)
from packages.idgen_shared.errors import (
    ErrorCategory,
    codes,
    exception_to_error,
    state_error,
)


def test_idgen_errors_describe_themselves() -> None:
    """Each typed failure maps onto its own code and category."""
    cases = [
        (
            InvalidArgumentError(message="bad", argument="node_id"),
            codes.INVALID_ARGUMENT,
            ErrorCategory.VALIDATION,
        ),
        (
            InvalidEncodingError(message="bad", character="U", position=3),
            codes.INVALID_ENCODING,
            ErrorCategory.VALIDATION,
        ),
        (
            ClockRegressionError(message="late"),
            codes.CLOCK_REGRESSION,
            ErrorCategory.STATE,
        ),
        (
            ClockStalledError(message="stuck"),
            codes.CLOCK_STALLED,
            ErrorCategory.STATE,
        ),
        (
            UnsupportedOperationError(message="no"),
            codes.UNSUPPORTED_OPERATION,
            ErrorCategory.UNSUPPORTED,
        ),
        (
            TimestampOverflowError(message="too late", timestamp=1, epoch_ms=0),
            codes.TIMESTAMP_OVERFLOW,
            ErrorCategory.STATE,
        ),
        (
            DigestUnavailableError(message="gone", algorithm="md5"),
            codes.DIGEST_UNAVAILABLE,
            ErrorCategory.DEPENDENCY,
        ),
    ]

    for exc, code, category in cases:
        detail = exception_to_error(exc)
        assert detail.code == code
        assert detail.category is category
        assert detail.message == str(exc)


def test_only_transient_clock_failures_are_retryable() -> None:
    assert exception_to_error(ClockRegressionError(message="late")).retryable is True
    assert exception_to_error(ClockStalledError(message="stuck")).retryable is True
    assert exception_to_error(InvalidArgumentError(message="bad")).retryable is False
    assert exception_to_error(DigestUnavailableError(message="gone")).retryable is False
    assert (
        exception_to_error(TimestampOverflowError(message="too late")).retryable
        is False
    )


def test_error_metadata_carries_fields() -> None:
    detail = exception_to_error(
        InvalidEncodingError(message="bad", character="U", position=3)
    )

    assert detail.metadata == {"character": "U", "position": "3"}


def test_typed_errors_remain_builtin_compatible() -> None:
    """Validation failures are ValueErrors and unsupported ones NotImplementedErrors."""
    assert isinstance(InvalidArgumentError(message="x"), ValueError)
    assert isinstance(InvalidEncodingError(message="x"), ValueError)
    assert isinstance(UnsupportedOperationError(message="x"), NotImplementedError)


def test_builtin_exceptions_are_mapped_by_type() -> None:
    value = exception_to_error(ValueError("nope"))
    unsupported = exception_to_error(NotImplementedError())
    internal = exception_to_error(RuntimeError("boom"))

    assert value.category is ErrorCategory.VALIDATION
    assert value.code == codes.INVALID_ARGUMENT
    assert unsupported.category is ErrorCategory.UNSUPPORTED
    assert unsupported.message == "operation not supported"
    assert internal.category is ErrorCategory.INTERNAL
    assert internal.code == codes.UNEXPECTED_EXCEPTION
    assert internal.metadata["exception_type"] == "RuntimeError"


def test_state_error_factory_defaults() -> None:
    detail = state_error("clock moved backwards")

    assert detail.code == codes.CLOCK_REGRESSION
    assert detail.retryable is True
    assert detail.metadata == {}
