"""Public idgen interface: ULID values, Snowflake encoding and generators."""

from packages.idgen_core.errors import (
    ClockRegressionError,
    ClockStalledError,
    DigestUnavailableError,
    IdGenError,
    InvalidArgumentError,
    InvalidEncodingError,
    TimestampOverflowError,
    UnsupportedOperationError,
)
from packages.idgen_core.factory import (
    coerce_kind,
    create_generator,
    create_random,
    create_snowflake,
    create_snowflake_from_parts,
    create_ulid,
    create_uuid,
    generator_from_settings,
)
from packages.idgen_core.generators import (
    GeneratorKind,
    IdGenerator,
    RandomIdGenerator,
    SnowflakeIdGenerator,
    UlidIdGenerator,
    UuidIdGenerator,
)
from packages.idgen_core.snowflake import (
    SnowflakeEncoder,
    SnowflakeParts,
    compose_node_id,
    decode_snowflake,
)
from packages.idgen_core.ulid import ULID

__all__ = [
    "ClockRegressionError",
    "ClockStalledError",
    "DigestUnavailableError",
    "GeneratorKind",
    "IdGenError",
    "IdGenerator",
    "InvalidArgumentError",
    "InvalidEncodingError",
    "RandomIdGenerator",
    "SnowflakeEncoder",
    "SnowflakeIdGenerator",
    "SnowflakeParts",
    "TimestampOverflowError",
    "ULID",
    "UlidIdGenerator",
    "UnsupportedOperationError",
    "UuidIdGenerator",
    "coerce_kind",
    "compose_node_id",
    "create_generator",
    "create_random",
    "create_snowflake",
    "create_snowflake_from_parts",
    "create_ulid",
    "create_uuid",
    "decode_snowflake",
    "generator_from_settings",
]
