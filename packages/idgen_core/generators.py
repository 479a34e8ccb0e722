"""Generator capability and its four identifier variants.

Every variant answers the same three requests: a 32-bit id, a 64-bit id and a
text id. A variant that has no natural form for a request raises
``UnsupportedOperationError``; failures while producing a supported form raise
the specific ``IdGenError`` subclass instead.

The set of variants is closed and tagged by ``GeneratorKind``.
"""

from __future__ import annotations

import secrets
import threading
import uuid
from enum import Enum
from random import Random
from typing import Callable, Protocol, final

from packages.idgen_core.errors import UnsupportedOperationError
from packages.idgen_core.snowflake import SnowflakeEncoder
from packages.idgen_core.ulid import ULID, RandomBytes, now_ms

_MASK_32 = 0xFFFFFFFF
_MASK_64 = (1 << 64) - 1
_INT32_POSITIVE_MASK = 0x7FFFFFFF
_INT64_POSITIVE_MASK = (1 << 63) - 1

# Exclusive upper bound of the random low half of a random int id.
_RANDOM_INT_BOUND = 0x7FFF


class GeneratorKind(str, Enum):
    """Closed set of identifier formats."""

    RANDOM = "random"
    SNOWFLAKE = "snowflake"
    UUID = "uuid"
    ULID = "ulid"


class IdGenerator(Protocol):
    """Capability shared by all generator variants."""

    @property
    def kind(self) -> GeneratorKind:
        """Tag identifying the variant."""

    def produce_next_int(self) -> int:
        """Return the next id projected into the signed 32-bit range."""

    def produce_next_long(self) -> int:
        """Return the next id projected into the signed 64-bit range."""

    def produce_next_text(self) -> str:
        """Return the next id in the variant's canonical text form."""


def to_int32(value: int) -> int:
    """Reinterpret the low 32 bits of ``value`` as a signed integer."""
    value &= _MASK_32
    return value - (1 << 32) if value >> 31 else value


def to_int64(value: int) -> int:
    """Reinterpret the low 64 bits of ``value`` as a signed integer."""
    value &= _MASK_64
    return value - (1 << 64) if value >> 63 else value


def _rotate_halves(value: int) -> int:
    """Swap the 32-bit halves of a 64-bit value."""
    return ((value << 32) | (value >> 32)) & _MASK_64


def fold_to_int32(high: int, low: int) -> int:
    """XOR-fold two unsigned 64-bit halves into a signed 32-bit value."""
    combined = high ^ _rotate_halves(low)
    return to_int32(combined ^ (combined >> 32))


def fold_to_int64(high: int, low: int) -> int:
    """XOR the half-swapped 64-bit halves into a signed 64-bit value."""
    return to_int64(_rotate_halves(high) ^ _rotate_halves(low))


def _unsupported(kind: GeneratorKind, operation: str) -> UnsupportedOperationError:
    return UnsupportedOperationError(
        message=f"{kind.value} generator cannot produce {operation} ids",
        operation=operation,
        kind=kind.value,
    )


@final
class RandomIdGenerator:
    """Ids that mix the clock with a cryptographically strong random source."""

    kind = GeneratorKind.RANDOM

    def __init__(
        self, *, rng: Random | None = None, clock: Callable[[], int] = now_ms
    ) -> None:
        self._rng = rng if rng is not None else secrets.SystemRandom()
        self._clock = clock

    def produce_next_int(self) -> int:
        """Low 16 clock bits over 15 random bits; always non-negative."""
        value = ((self._clock() & 0xFFFF) << 16) | self._rng.randrange(_RANDOM_INT_BOUND)
        return value & _INT32_POSITIVE_MASK

    def produce_next_long(self) -> int:
        """Clock milliseconds over 32 random bits; always non-negative."""
        value = (self._clock() << 32) | self._rng.getrandbits(32)
        return value & _INT64_POSITIVE_MASK

    def produce_next_text(self) -> str:
        raise _unsupported(self.kind, "text")


@final
class UuidIdGenerator:
    """Ids backed by platform random (version 4) UUIDs."""

    kind = GeneratorKind.UUID

    def __init__(self, *, factory: Callable[[], uuid.UUID] = uuid.uuid4) -> None:
        self._factory = factory

    def _halves(self) -> tuple[int, int]:
        value = self._factory().int
        return value >> 64, value & _MASK_64

    def produce_next_int(self) -> int:
        return fold_to_int32(*self._halves())

    def produce_next_long(self) -> int:
        return fold_to_int64(*self._halves())

    def produce_next_text(self) -> str:
        """Canonical 36-character hyphenated UUID text."""
        return str(self._factory())


@final
class UlidIdGenerator:
    """Ids backed by ULID values.

    With ``monotonic=True`` each value is derived from the previous one through
    ``ULID.monotonic``; the generator serializes that chain with its own lock.
    """

    kind = GeneratorKind.ULID

    def __init__(
        self,
        *,
        monotonic: bool = False,
        clock: Callable[[], int] = now_ms,
        randbytes: RandomBytes = secrets.token_bytes,
    ) -> None:
        self._monotonic = monotonic
        self._clock = clock
        self._randbytes = randbytes
        self._lock = threading.Lock()
        self._last: ULID | None = None

    @property
    def monotonic(self) -> bool:
        return self._monotonic

    def next_ulid(self) -> ULID:
        """Return the next ULID value."""
        if not self._monotonic:
            return ULID.generate(self._clock(), randbytes=self._randbytes)
        with self._lock:
            self._last = ULID.monotonic(
                self._last, self._clock(), randbytes=self._randbytes
            )
            return self._last

    def produce_next_int(self) -> int:
        value = self.next_ulid()
        return fold_to_int32(value.high, value.low)

    def produce_next_long(self) -> int:
        value = self.next_ulid()
        return fold_to_int64(value.high, value.low)

    def produce_next_text(self) -> str:
        """Canonical 26-character Base32 ULID text."""
        return str(self.next_ulid())


@final
class SnowflakeIdGenerator:
    """Ids issued by one ``SnowflakeEncoder``."""

    kind = GeneratorKind.SNOWFLAKE

    def __init__(self, encoder: SnowflakeEncoder) -> None:
        self._encoder = encoder

    @property
    def encoder(self) -> SnowflakeEncoder:
        return self._encoder

    def produce_next_int(self) -> int:
        return self._encoder.next_int_id()

    def produce_next_long(self) -> int:
        return self._encoder.next_id()

    def produce_next_text(self) -> str:
        raise _unsupported(self.kind, "text")
