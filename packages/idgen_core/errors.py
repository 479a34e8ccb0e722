"""Typed failures raised by identifier codecs and generators.

Configuration mistakes (``InvalidArgumentError``, ``InvalidEncodingError``,
``UnsupportedOperationError``) fail the same way on every call. Clock failures
(``ClockRegressionError``, ``ClockStalledError``) depend on generator state and
may succeed on a later call once the clock catches up. ``TimestampOverflowError``
means the encoder epoch is too old for the clock and never clears on its own.
"""

from __future__ import annotations

from dataclasses import dataclass

from packages.idgen_shared.errors import (
    ErrorDetail,
    codes,
    dependency_error,
    internal_error,
    state_error,
    unsupported_error,
    validation_error,
)


@dataclass(frozen=True)
class IdGenError(Exception):
    """Base error type for identifier generation failures."""

    message: str

    def __str__(self) -> str:
        """Return human-readable error message."""
        return self.message

    def to_error_detail(self) -> ErrorDetail:
        """Return the shared error shape for this failure."""
        return internal_error(self.message)


@dataclass(frozen=True)
class InvalidArgumentError(IdGenError, ValueError):
    """Out-of-range or malformed constructor/parse input."""

    argument: str = ""

    def to_error_detail(self) -> ErrorDetail:
        return validation_error(
            self.message,
            code=codes.INVALID_ARGUMENT,
            metadata={"argument": self.argument},
        )


@dataclass(frozen=True)
class InvalidEncodingError(IdGenError, ValueError):
    """Character outside the Base32 alphabet, or a disallowed leading symbol."""

    character: str = ""
    position: int = -1

    def to_error_detail(self) -> ErrorDetail:
        return validation_error(
            self.message,
            code=codes.INVALID_ENCODING,
            metadata={"character": self.character, "position": str(self.position)},
        )


@dataclass(frozen=True)
class ClockRegressionError(IdGenError):
    """Observed time is behind the last time a generator issued an id."""

    last_timestamp: int = -1
    observed_timestamp: int = -1
    retryable: bool = True

    def to_error_detail(self) -> ErrorDetail:
        return state_error(
            self.message,
            code=codes.CLOCK_REGRESSION,
            retryable=self.retryable,
            metadata={
                "last_timestamp": str(self.last_timestamp),
                "observed_timestamp": str(self.observed_timestamp),
            },
        )


@dataclass(frozen=True)
class ClockStalledError(IdGenError):
    """The clock did not advance within the configured spin-wait budget."""

    last_timestamp: int = -1
    waited_ms: float = 0.0
    retryable: bool = True

    def to_error_detail(self) -> ErrorDetail:
        return state_error(
            self.message,
            code=codes.CLOCK_STALLED,
            retryable=self.retryable,
            metadata={
                "last_timestamp": str(self.last_timestamp),
                "waited_ms": f"{self.waited_ms:.3f}",
            },
        )


@dataclass(frozen=True)
class TimestampOverflowError(IdGenError):
    """Time since the encoder epoch no longer fits the 41-bit timestamp field."""

    timestamp: int = -1
    epoch_ms: int = 0

    def to_error_detail(self) -> ErrorDetail:
        return state_error(
            self.message,
            code=codes.TIMESTAMP_OVERFLOW,
            retryable=False,
            metadata={
                "timestamp": str(self.timestamp),
                "epoch_ms": str(self.epoch_ms),
            },
        )


@dataclass(frozen=True)
class UnsupportedOperationError(IdGenError, NotImplementedError):
    """A generator variant was asked for a representation it does not produce."""

    operation: str = ""
    kind: str = ""

    def to_error_detail(self) -> ErrorDetail:
        return unsupported_error(
            self.message,
            metadata={"operation": self.operation, "kind": self.kind},
        )


@dataclass(frozen=True)
class DigestUnavailableError(IdGenError):
    """The digest primitive used for 32-bit projection could not be obtained."""

    algorithm: str = ""

    def to_error_detail(self) -> ErrorDetail:
        return dependency_error(
            self.message,
            metadata={"algorithm": self.algorithm},
        )
