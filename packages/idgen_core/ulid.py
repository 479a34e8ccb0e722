"""ULID value type.

A ULID is 128 bits stored as two unsigned 64-bit halves. The top 48 bits of
``high`` hold a millisecond Unix timestamp; the remaining 16 bits of ``high``
and all 64 bits of ``low`` hold 80 bits of randomness. The canonical text form
is 26 Crockford Base32 symbols: 10 for the timestamp, 16 for the randomness.

Values are immutable. ``increment`` and ``to_rfc4122`` return new values, and
ordering is unsigned 128-bit comparison of ``(high, low)``, so sorting ULIDs,
their 16-byte big-endian form, or their text form all agree.

Monotonic generation via ``ULID.monotonic`` keeps no shared state: callers
that share a previous value across threads must serialize access to it.
"""

from __future__ import annotations

import hashlib
import secrets
import time
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable, ClassVar

from packages.idgen_core import base32
from packages.idgen_core.errors import InvalidArgumentError, InvalidEncodingError

TIMESTAMP_BITS = 48
RANDOM_BITS = 80
RANDOM_BYTES = 10
ULID_BYTES = 16
TEXT_LENGTH = 26
TIMESTAMP_TEXT_LENGTH = 10
RANDOM_TEXT_LENGTH = 16

MAX_TIMESTAMP = (1 << TIMESTAMP_BITS) - 1
MONOTONIC_WINDOW_MS = 10_000

_MASK_16 = 0xFFFF
_MASK_64 = (1 << 64) - 1
_MASK_80 = (1 << RANDOM_BITS) - 1
_MASK_128 = (1 << 128) - 1

# The first symbol covers the top 5 of 50 encoded timestamp bits; only the
# low 3 may be set for the timestamp to fit in 48 bits.
_FIRST_SYMBOL_OVERFLOW_BITS = 0b11000

# RFC-4122 version 4 and variant 2 bit positions within each half.
_RFC4122_VERSION_CLEAR = 0xFFFFFFFFFFFF0FFF
_RFC4122_VERSION_SET = 0x0000000000004000
_RFC4122_VARIANT_CLEAR = 0x3FFFFFFFFFFFFFFF
_RFC4122_VARIANT_SET = 0x8000000000000000

RandomBytes = Callable[[int], bytes]


def now_ms() -> int:
    """Return the current Unix time in milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True, order=True, slots=True, repr=False)
class ULID:
    """Immutable 128-bit ULID value."""

    high: int
    low: int

    MIN: ClassVar[ULID]
    MAX: ClassVar[ULID]

    def __post_init__(self) -> None:
        for name in ("high", "low"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidArgumentError(
                    message=f"ULID {name} half must be an int", argument=name
                )
            if value < 0 or value > _MASK_64:
                raise InvalidArgumentError(
                    message=f"ULID {name} half must be an unsigned 64-bit value",
                    argument=name,
                )

    # -- construction -----------------------------------------------------

    @classmethod
    def from_parts(cls, timestamp: int, random: bytes) -> ULID:
        """Build a ULID from a 48-bit timestamp and a 10-byte random tail."""
        if (
            not isinstance(timestamp, int)
            or isinstance(timestamp, bool)
            or timestamp < 0
            or timestamp > MAX_TIMESTAMP
        ):
            raise InvalidArgumentError(
                message=f"invalid timestamp: {timestamp!r} (must be in [0, {MAX_TIMESTAMP}])",
                argument="timestamp",
            )
        if not isinstance(random, (bytes, bytearray, memoryview)) or len(random) != RANDOM_BYTES:
            raise InvalidArgumentError(
                message=f"invalid random length: random tail must be exactly {RANDOM_BYTES} bytes",
                argument="random",
            )
        tail = bytes(random)
        high = (timestamp << 16) | int.from_bytes(tail[:2], "big")
        low = int.from_bytes(tail[2:], "big")
        return cls(high, low)

    @classmethod
    def from_bytes(cls, data: bytes) -> ULID:
        """Unpack the canonical 16-byte big-endian binary form."""
        if not isinstance(data, (bytes, bytearray, memoryview)) or len(data) != ULID_BYTES:
            raise InvalidArgumentError(
                message=f"ULID bytes must be exactly {ULID_BYTES} bytes",
                argument="data",
            )
        raw = bytes(data)
        return cls(int.from_bytes(raw[:8], "big"), int.from_bytes(raw[8:], "big"))

    @classmethod
    def from_int(cls, value: int) -> ULID:
        """Build a ULID from its unsigned 128-bit integer value."""
        if not isinstance(value, int) or value < 0 or value > _MASK_128:
            raise InvalidArgumentError(
                message="ULID integer must be an unsigned 128-bit value",
                argument="value",
            )
        return cls(value >> 64, value & _MASK_64)

    @classmethod
    def from_uuid(cls, value: uuid.UUID) -> ULID:
        """Reinterpret a UUID's 128 bits as a ULID without transformation."""
        return cls.from_int(value.int)

    @classmethod
    def parse(cls, text: str) -> ULID:
        """Parse the 26-character Base32 text form.

        Raises:
            InvalidArgumentError: ``text`` is not a 26-character string.
            InvalidEncodingError: a character is outside the alphabet, or the
                leading symbol would push the timestamp past 48 bits.
        """
        if not isinstance(text, str) or len(text) != TEXT_LENGTH:
            raise InvalidArgumentError(
                message=f"ULID text must be exactly {TEXT_LENGTH} characters",
                argument="text",
            )
        groups = base32.decode_symbols(text)
        if groups[0] & _FIRST_SYMBOL_OVERFLOW_BITS:
            raise InvalidEncodingError(
                message=f"invalid first character {text[0]!r}: timestamp exceeds 48 bits",
                character=text[0],
                position=0,
            )
        value = base32.pack_symbols(groups)
        return cls(value >> 64, value & _MASK_64)

    @classmethod
    def generate(
        cls,
        timestamp: int | None = None,
        *,
        randbytes: RandomBytes = secrets.token_bytes,
    ) -> ULID:
        """Return a fresh ULID with 80 bits of cryptographically strong randomness."""
        when = now_ms() if timestamp is None else timestamp
        return cls.from_parts(when, randbytes(RANDOM_BYTES))

    @classmethod
    def monotonic(
        cls,
        previous: ULID | None,
        timestamp: int | None = None,
        *,
        randbytes: RandomBytes = secrets.token_bytes,
    ) -> ULID:
        """Return a value strictly greater than ``previous`` when the clock allows.

        When ``timestamp`` is at or behind ``previous.timestamp`` by less than
        ten seconds, the result is ``previous.increment()``. Any other
        timestamp, including a larger regression, starts a fresh random value.
        """
        when = now_ms() if timestamp is None else timestamp
        if previous is None:
            return cls.generate(when, randbytes=randbytes)
        last = previous.timestamp
        if last - MONOTONIC_WINDOW_MS < when <= last:
            return previous.increment()
        return cls.generate(when, randbytes=randbytes)

    @classmethod
    def from_digest(cls, timestamp: int, data: bytes) -> ULID:
        """Derive the random tail from the first 10 bytes of SHA-256(``data``)."""
        digest = hashlib.sha256(data).digest()
        return cls.from_parts(timestamp, digest[:RANDOM_BYTES])

    @classmethod
    def min_for(cls, timestamp: int) -> ULID:
        """Smallest ULID for ``timestamp``."""
        return cls.from_parts(timestamp, bytes(RANDOM_BYTES))

    @classmethod
    def max_for(cls, timestamp: int) -> ULID:
        """Largest ULID for ``timestamp``."""
        return cls.from_parts(timestamp, b"\xff" * RANDOM_BYTES)

    # -- views ------------------------------------------------------------

    @property
    def timestamp(self) -> int:
        return self.high >> 16

    @property
    def randomness(self) -> int:
        return ((self.high & _MASK_16) << 64) | self.low

    @property
    def random_bytes(self) -> bytes:
        return self.randomness.to_bytes(RANDOM_BYTES, "big")

    @property
    def datetime(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=UTC)

    def to_bytes(self) -> bytes:
        return self.high.to_bytes(8, "big") + self.low.to_bytes(8, "big")

    def to_uuid(self) -> uuid.UUID:
        """Reinterpret these 128 bits as a UUID without transformation."""
        return uuid.UUID(int=int(self))

    def to_rfc4122(self) -> ULID:
        """Return a copy with the version nibble set to 4 and variant bits to ``10``.

        The result reads as a valid random UUID through ``to_uuid``. Six bits
        of this value are overwritten, so this is not invertible.
        """
        high = (self.high & _RFC4122_VERSION_CLEAR) | _RFC4122_VERSION_SET
        low = (self.low & _RFC4122_VARIANT_CLEAR) | _RFC4122_VARIANT_SET
        return ULID(high, low)

    def increment(self) -> ULID:
        """Add one to the 80-bit randomness, carrying into the timestamp on overflow.

        ``ULID.MAX`` wraps around to ``ULID.MIN``.
        """
        return ULID.from_int((int(self) + 1) & _MASK_128)

    # -- dunder -----------------------------------------------------------

    def __int__(self) -> int:
        return (self.high << 64) | self.low

    def __str__(self) -> str:
        return base32.encode_int(self.timestamp, TIMESTAMP_TEXT_LENGTH) + base32.encode_int(
            self.randomness, RANDOM_TEXT_LENGTH
        )

    def __repr__(self) -> str:
        return f"ULID('{self}')"

    def __hash__(self) -> int:
        bits = self.high ^ self.low
        return (bits ^ (bits >> 32)) & 0xFFFFFFFF


ULID.MIN = ULID(0, 0)
ULID.MAX = ULID(_MASK_64, _MASK_64)
