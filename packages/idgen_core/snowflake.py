"""Snowflake-style 64-bit identifier encoder.

Layout, most significant bit first::

    0 | (timestamp - epoch) : 41 | node_id : 10 | sequence : 12

One encoder instance issues up to 4096 ids per millisecond. When the sequence
is exhausted the encoder spins on the clock until the next millisecond. If the
clock is observed behind the last issued timestamp, generation fails with
``ClockRegressionError`` and is never retried internally.
"""

from __future__ import annotations

import hashlib
import threading
import time
from dataclasses import dataclass
from typing import Callable

from packages.idgen_core.errors import (
    ClockRegressionError,
    ClockStalledError,
    DigestUnavailableError,
    InvalidArgumentError,
    TimestampOverflowError,
)
from packages.idgen_core.ulid import now_ms
from packages.idgen_shared.config import DEFAULT_SNOWFLAKE_EPOCH_MS
from packages.idgen_shared.logging import fields, get_logger

_LOGGER = get_logger(__name__)

TIMESTAMP_BITS = 41
NODE_BITS = 10
SEQUENCE_BITS = 12
CENTER_BITS = 5
WORKER_BITS = 5

MAX_NODE_ID = (1 << NODE_BITS) - 1
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1
MAX_CENTER_ID = (1 << CENTER_BITS) - 1
MAX_WORKER_ID = (1 << WORKER_BITS) - 1
MAX_TIMESTAMP_DELTA = (1 << TIMESTAMP_BITS) - 1

NODE_SHIFT = SEQUENCE_BITS
TIMESTAMP_SHIFT = SEQUENCE_BITS + NODE_BITS

DEFAULT_DIGEST_ALGORITHM = "md5"
_INT32_POSITIVE_MASK = 0x7FFFFFFF

Clock = Callable[[], int]


@dataclass(frozen=True, slots=True)
class SnowflakeParts:
    """Decoded fields of one Snowflake id."""

    timestamp: int
    node_id: int
    sequence: int

    @property
    def center(self) -> int:
        return self.node_id >> WORKER_BITS

    @property
    def worker(self) -> int:
        return self.node_id & MAX_WORKER_ID


def compose_node_id(center: int, worker: int) -> int:
    """Pack two 5-bit sub-fields into a 10-bit node id (``center * 32 + worker``)."""
    _require_range("center", center, 0, MAX_CENTER_ID)
    _require_range("worker", worker, 0, MAX_WORKER_ID)
    return (center << WORKER_BITS) | worker


def decode_snowflake(
    value: int, *, epoch_ms: int = DEFAULT_SNOWFLAKE_EPOCH_MS
) -> SnowflakeParts:
    """Split a Snowflake id back into absolute timestamp, node id and sequence."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidArgumentError(
            message="Snowflake id must be a non-negative int", argument="value"
        )
    return SnowflakeParts(
        timestamp=(value >> TIMESTAMP_SHIFT) + epoch_ms,
        node_id=(value >> NODE_SHIFT) & MAX_NODE_ID,
        sequence=value & MAX_SEQUENCE,
    )


def project_to_int32(value: int, *, algorithm: str = DEFAULT_DIGEST_ALGORITHM) -> int:
    """Fold the first four digest bytes of ``str(value)`` into a non-negative int32.

    Best-effort projection: not reversible and not collision-free.
    """
    digest = hashlib.new(
        algorithm, str(value).encode("ascii"), usedforsecurity=False
    ).digest()
    return int.from_bytes(digest[:4], "big") & _INT32_POSITIVE_MASK


@dataclass
class _SequenceState:
    last_timestamp: int = -1
    last_sequence: int = 0


class SnowflakeEncoder:
    """Thread-safe Snowflake id producer for one node.

    ``clock`` returns epoch milliseconds and defaults to the system clock.
    ``max_wait_ms`` bounds the spin-wait on sequence exhaustion; ``None``
    waits for as long as the clock takes to advance, and that wait cannot be
    cancelled.
    """

    def __init__(
        self,
        node_id: int,
        *,
        epoch_ms: int = DEFAULT_SNOWFLAKE_EPOCH_MS,
        clock: Clock | None = None,
        digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM,
        max_wait_ms: float | None = None,
    ) -> None:
        if not isinstance(epoch_ms, int) or isinstance(epoch_ms, bool) or epoch_ms < 0:
            raise InvalidArgumentError(
                message="epoch must be greater than or equal to 0", argument="epoch_ms"
            )
        _require_range("node_id", node_id, 0, MAX_NODE_ID)
        if max_wait_ms is not None and max_wait_ms <= 0:
            raise InvalidArgumentError(
                message="max_wait_ms must be positive when set", argument="max_wait_ms"
            )

        self._node_id = node_id
        self._node_bits = node_id << NODE_SHIFT
        self._epoch_ms = epoch_ms
        self._clock: Clock = clock if clock is not None else now_ms
        self._max_wait_ms = max_wait_ms
        self._digest_algorithm = digest_algorithm
        self._digest_failure = _probe_digest(digest_algorithm)

        self._lock = threading.Lock()
        self._state = _SequenceState()

    @classmethod
    def from_parts(cls, center: int, worker: int, **kwargs: object) -> SnowflakeEncoder:
        """Build an encoder whose node id is composed from ``center`` and ``worker``."""
        return cls(compose_node_id(center, worker), **kwargs)  # type: ignore[arg-type]

    @property
    def node_id(self) -> int:
        return self._node_id

    @property
    def epoch_ms(self) -> int:
        return self._epoch_ms

    @property
    def digest_algorithm(self) -> str:
        return self._digest_algorithm

    def next_id(self) -> int:
        """Return the next 64-bit id.

        Raises:
            ClockRegressionError: the clock is behind the last issued timestamp
                or behind the configured epoch.
            ClockStalledError: ``max_wait_ms`` elapsed while waiting for the
                next millisecond.
            TimestampOverflowError: the clock is past the 41-bit range that
                starts at the epoch.
        """
        with self._lock:
            state = self._state
            timestamp = self._clock()

            if timestamp < state.last_timestamp:
                _LOGGER.warning(
                    "clock moved backwards; refusing to issue snowflake id",
                    extra={
                        fields.NODE_ID: self._node_id,
                        fields.LAST_TIMESTAMP: state.last_timestamp,
                        fields.OBSERVED_TIMESTAMP: timestamp,
                    },
                )
                raise ClockRegressionError(
                    message=(
                        f"clock moved backwards: observed {timestamp} ms, "
                        f"last issued {state.last_timestamp} ms"
                    ),
                    last_timestamp=state.last_timestamp,
                    observed_timestamp=timestamp,
                )
            if timestamp < self._epoch_ms:
                raise ClockRegressionError(
                    message=f"clock {timestamp} ms is behind epoch {self._epoch_ms} ms",
                    last_timestamp=self._epoch_ms,
                    observed_timestamp=timestamp,
                )

            if timestamp == state.last_timestamp:
                sequence = (state.last_sequence + 1) & MAX_SEQUENCE
                if sequence == 0:
                    timestamp = self._wait_next_ms(state.last_timestamp)
            else:
                sequence = 0

            delta = timestamp - self._epoch_ms
            if delta > MAX_TIMESTAMP_DELTA:
                raise TimestampOverflowError(
                    message=(
                        f"clock {timestamp} ms is more than {MAX_TIMESTAMP_DELTA} ms "
                        f"past epoch {self._epoch_ms} ms"
                    ),
                    timestamp=timestamp,
                    epoch_ms=self._epoch_ms,
                )

            state.last_timestamp = timestamp
            state.last_sequence = sequence
            return (delta << TIMESTAMP_SHIFT) | self._node_bits | sequence

    def next_int_id(self) -> int:
        """Return a non-negative 32-bit projection of the next 64-bit id.

        Raises:
            DigestUnavailableError: the digest algorithm could not be obtained
                when this encoder was built. Checked before an id is consumed.
        """
        if self._digest_failure is not None:
            raise DigestUnavailableError(
                message=f"digest algorithm {self._digest_algorithm!r} is unavailable",
                algorithm=self._digest_algorithm,
            ) from self._digest_failure
        return project_to_int32(self.next_id(), algorithm=self._digest_algorithm)

    def decode(self, value: int) -> SnowflakeParts:
        """Decode an id issued under this encoder's epoch."""
        return decode_snowflake(value, epoch_ms=self._epoch_ms)

    def _wait_next_ms(self, last_timestamp: int) -> int:
        _LOGGER.debug(
            "snowflake sequence exhausted; waiting for next millisecond",
            extra={fields.NODE_ID: self._node_id, fields.LAST_TIMESTAMP: last_timestamp},
        )
        started = time.monotonic()
        timestamp = self._clock()
        while timestamp <= last_timestamp:
            if self._max_wait_ms is not None:
                waited_ms = (time.monotonic() - started) * 1000
                if waited_ms > self._max_wait_ms:
                    raise ClockStalledError(
                        message=(
                            f"clock did not advance past {last_timestamp} ms "
                            f"within {self._max_wait_ms} ms"
                        ),
                        last_timestamp=last_timestamp,
                        waited_ms=waited_ms,
                    )
            timestamp = self._clock()
        return timestamp


def _probe_digest(algorithm: str) -> Exception | None:
    """Return the failure raised while obtaining ``algorithm``, if any.

    The probe takes one digest so that variable-length algorithms such as
    ``shake_128``, which need an explicit length, are rejected here.
    """
    try:
        digest = hashlib.new(algorithm, usedforsecurity=False).digest()
        if len(digest) < 4:
            raise ValueError(f"digest {algorithm!r} is shorter than 4 bytes")
    except (ValueError, TypeError) as exc:
        _LOGGER.warning(
            "digest algorithm unavailable; 32-bit snowflake ids will fail",
            extra={fields.DIGEST_ALGORITHM: algorithm},
        )
        return exc
    return None


def _require_range(name: str, value: int, low: int, high: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or not low <= value <= high:
        raise InvalidArgumentError(
            message=f"{name} must be between {low} and {high}, got {value!r}",
            argument=name,
        )
