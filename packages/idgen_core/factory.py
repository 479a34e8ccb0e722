"""Construction helpers for identifier generators."""

from __future__ import annotations

from typing import TypeVar

from packages.idgen_core.errors import InvalidArgumentError
from packages.idgen_core.generators import (
    GeneratorKind,
    IdGenerator,
    RandomIdGenerator,
    SnowflakeIdGenerator,
    UlidIdGenerator,
    UuidIdGenerator,
)
from packages.idgen_core.snowflake import DEFAULT_DIGEST_ALGORITHM, SnowflakeEncoder
from packages.idgen_shared.config import DEFAULT_SNOWFLAKE_EPOCH_MS, IdGenSettings
from packages.idgen_shared.logging import fields, get_logger

_LOGGER = get_logger(__name__)

_Generator = TypeVar(
    "_Generator",
    RandomIdGenerator,
    UuidIdGenerator,
    UlidIdGenerator,
    SnowflakeIdGenerator,
)


def create_random() -> RandomIdGenerator:
    """Create a generator mixing the clock with secure random bits."""
    return _created(RandomIdGenerator())


def create_uuid() -> UuidIdGenerator:
    """Create a generator backed by random UUIDs."""
    return _created(UuidIdGenerator())


def create_ulid(*, monotonic: bool = False) -> UlidIdGenerator:
    """Create a ULID generator, optionally chaining values monotonically."""
    return _created(UlidIdGenerator(monotonic=monotonic))


def create_snowflake(
    node_id: int,
    *,
    epoch_ms: int = DEFAULT_SNOWFLAKE_EPOCH_MS,
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM,
    max_wait_ms: float | None = None,
) -> SnowflakeIdGenerator:
    """Create a Snowflake generator for ``node_id`` in ``[0, 1023]``."""
    encoder = SnowflakeEncoder(
        node_id,
        epoch_ms=epoch_ms,
        digest_algorithm=digest_algorithm,
        max_wait_ms=max_wait_ms,
    )
    return _created(SnowflakeIdGenerator(encoder))


def create_snowflake_from_parts(
    center: int,
    worker: int,
    *,
    epoch_ms: int = DEFAULT_SNOWFLAKE_EPOCH_MS,
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM,
    max_wait_ms: float | None = None,
) -> SnowflakeIdGenerator:
    """Create a Snowflake generator whose node id is ``center * 32 + worker``."""
    encoder = SnowflakeEncoder.from_parts(
        center,
        worker,
        epoch_ms=epoch_ms,
        digest_algorithm=digest_algorithm,
        max_wait_ms=max_wait_ms,
    )
    return _created(SnowflakeIdGenerator(encoder))


def create_generator(
    kind: GeneratorKind | str,
    *,
    node_id: int | None = None,
    center: int | None = None,
    worker: int | None = None,
    epoch_ms: int = DEFAULT_SNOWFLAKE_EPOCH_MS,
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM,
    max_wait_ms: float | None = None,
    monotonic: bool = False,
) -> IdGenerator:
    """Create a generator by kind.

    Snowflake generators need either ``node_id`` or both ``center`` and
    ``worker``. Options that do not apply to the selected kind are ignored.
    """
    resolved = coerce_kind(kind)
    if resolved is GeneratorKind.RANDOM:
        return create_random()
    if resolved is GeneratorKind.UUID:
        return create_uuid()
    if resolved is GeneratorKind.ULID:
        return create_ulid(monotonic=monotonic)

    snowflake_options = {
        "epoch_ms": epoch_ms,
        "digest_algorithm": digest_algorithm,
        "max_wait_ms": max_wait_ms,
    }
    if center is not None or worker is not None:
        if center is None or worker is None or node_id is not None:
            raise InvalidArgumentError(
                message="snowflake node must be given as node_id or as both center and worker",
                argument="node_id",
            )
        return create_snowflake_from_parts(center, worker, **snowflake_options)
    if node_id is None:
        raise InvalidArgumentError(
            message="snowflake generator requires node_id or center and worker",
            argument="node_id",
        )
    return create_snowflake(node_id, **snowflake_options)


def generator_from_settings(settings: IdGenSettings) -> IdGenerator:
    """Create the configured default generator."""
    snowflake = settings.snowflake
    return create_generator(
        settings.generator.kind,
        node_id=snowflake.node_id,
        epoch_ms=snowflake.epoch_ms,
        digest_algorithm=snowflake.digest_algorithm,
        max_wait_ms=snowflake.max_wait_ms,
        monotonic=settings.ulid.monotonic,
    )


def coerce_kind(kind: GeneratorKind | str) -> GeneratorKind:
    """Resolve a kind tag from an enum member or its string value."""
    if isinstance(kind, GeneratorKind):
        return kind
    try:
        return GeneratorKind(str(kind).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(item.value for item in GeneratorKind)
        raise InvalidArgumentError(
            message=f"unknown generator kind {kind!r}; expected one of: {allowed}",
            argument="kind",
        ) from exc


def _created(generator: _Generator) -> _Generator:
    """Log one created generator and return it unchanged."""
    extra: dict[str, object] = {fields.GENERATOR_KIND: generator.kind.value}
    if isinstance(generator, SnowflakeIdGenerator):
        extra[fields.NODE_ID] = generator.encoder.node_id
        extra[fields.EPOCH_MS] = generator.encoder.epoch_ms
    elif isinstance(generator, UlidIdGenerator):
        extra[fields.MONOTONIC] = generator.monotonic
    _LOGGER.info("id generator created", extra=extra)
    return generator
