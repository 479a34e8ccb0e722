"""Tests for the generator variants and their integer projections."""

from __future__ import annotations

import random
import uuid

import pytest

from packages.idgen_core import (
    GeneratorKind,
    RandomIdGenerator,
    SnowflakeEncoder,
    SnowflakeIdGenerator,
    ULID,
    UlidIdGenerator,
    UnsupportedOperationError,
    UuidIdGenerator,
)
from packages.idgen_core.generators import (
    fold_to_int32,
    fold_to_int64,
    to_int32,
    to_int64,
)

_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1


def _zero_bytes(size: int) -> bytes:
    return bytes(size)


def test_signed_reinterpretation() -> None:
    assert to_int32(0x7FFFFFFF) == _INT32_MAX
    assert to_int32(0x80000000) == _INT32_MIN
    assert to_int32(0x1_FFFFFFFF) == -1
    assert to_int64(0x8000000000000000) == _INT64_MIN
    assert to_int64((1 << 64) - 1) == -1


def test_fold_to_int32_known_values() -> None:
    assert fold_to_int32(0, 0) == 0
    assert fold_to_int32(0, 1) == 1
    assert fold_to_int32(0x80000000, 0) == _INT32_MIN
    assert fold_to_int32(1 << 32, 0) == 1


def test_fold_to_int64_swaps_halves_before_xor() -> None:
    assert fold_to_int64(1, 0) == 1 << 32
    assert fold_to_int64(0, 1 << 32) == 1
    assert fold_to_int64(0x80000000, 0) == _INT64_MIN
    assert fold_to_int64(5, 5) == 0


def test_every_variant_reports_its_kind() -> None:
    encoder = SnowflakeEncoder(1)

    assert RandomIdGenerator().kind is GeneratorKind.RANDOM
    assert UuidIdGenerator().kind is GeneratorKind.UUID
    assert UlidIdGenerator().kind is GeneratorKind.ULID
    assert SnowflakeIdGenerator(encoder).kind is GeneratorKind.SNOWFLAKE


@pytest.mark.parametrize(
    "generator",
    [RandomIdGenerator(), SnowflakeIdGenerator(SnowflakeEncoder(3))],
    ids=["random", "snowflake"],
)
def test_text_is_unsupported_for_numeric_variants(generator: object) -> None:
    with pytest.raises(UnsupportedOperationError) as exc_info:
        generator.produce_next_text()  # type: ignore[attr-defined]

    assert exc_info.value.operation == "text"
    assert exc_info.value.to_error_detail().category.value == "unsupported"


def test_random_int_mixes_low_clock_bits_with_random_bits() -> None:
    generator = RandomIdGenerator(rng=random.Random(42), clock=lambda: 0x12345)

    for _ in range(500):
        value = generator.produce_next_int()
        assert 0 <= value <= _INT32_MAX
        assert value >> 16 == 0x2345
        assert value & 0xFFFF < 0x7FFF


def test_random_int_stays_non_negative_when_clock_sets_high_bit() -> None:
    generator = RandomIdGenerator(rng=random.Random(1), clock=lambda: 0xFFFF)

    assert all(generator.produce_next_int() >= 0 for _ in range(200))


def test_random_long_carries_low_31_clock_bits_in_upper_half() -> None:
    generator = RandomIdGenerator(rng=random.Random(7), clock=lambda: 1_700_000_000_000)

    value = generator.produce_next_long()

    assert 0 <= value <= _INT64_MAX
    assert value >> 32 == 1_700_000_000_000 & 0x7FFFFFFF


def test_uuid_projections_fold_the_same_bits() -> None:
    fixed = uuid.UUID(int=1)
    generator = UuidIdGenerator(factory=lambda: fixed)

    assert generator.produce_next_text() == str(fixed)
    assert generator.produce_next_int() == 1
    assert generator.produce_next_long() == 1 << 32


def test_uuid_values_cover_signed_ranges() -> None:
    generator = UuidIdGenerator()

    ints = [generator.produce_next_int() for _ in range(2_000)]
    longs = [generator.produce_next_long() for _ in range(2_000)]

    assert all(_INT32_MIN <= value <= _INT32_MAX for value in ints)
    assert all(_INT64_MIN <= value <= _INT64_MAX for value in longs)
    assert any(value < 0 for value in longs)
    assert len(generator.produce_next_text()) == 36


def test_ulid_text_is_parseable() -> None:
    text = UlidIdGenerator().produce_next_text()

    assert len(text) == 26
    assert str(ULID.parse(text)) == text


def test_ulid_projection_uses_value_halves() -> None:
    generator = UlidIdGenerator(clock=lambda: 1, randbytes=_zero_bytes)
    value = ULID.min_for(1)

    assert generator.produce_next_int() == fold_to_int32(value.high, value.low)
    assert generator.produce_next_long() == fold_to_int64(value.high, value.low)


def test_monotonic_ulid_generator_increments_under_frozen_clock() -> None:
    generator = UlidIdGenerator(
        monotonic=True, clock=lambda: 1_000, randbytes=_zero_bytes
    )

    values = [generator.next_ulid() for _ in range(1_000)]

    assert generator.monotonic is True
    assert values[0] == ULID.min_for(1_000)
    assert values[-1].randomness == 999
    assert all(a < b for a, b in zip(values, values[1:]))


def test_non_monotonic_ulid_generator_draws_fresh_randomness() -> None:
    generator = UlidIdGenerator(clock=lambda: 1_000, randbytes=_zero_bytes)

    assert generator.next_ulid() == generator.next_ulid() == ULID.min_for(1_000)


def test_snowflake_generator_delegates_to_encoder() -> None:
    encoder = SnowflakeEncoder(9, epoch_ms=0, clock=lambda: 100)
    generator = SnowflakeIdGenerator(encoder)

    first = generator.produce_next_long()
    projected = generator.produce_next_int()

    assert generator.encoder is encoder
    assert encoder.decode(first).node_id == 9
    assert 0 <= projected <= _INT32_MAX
    assert encoder.decode(generator.produce_next_long()).sequence == 2
