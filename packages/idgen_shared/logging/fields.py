"""Canonical logging field names for structured idgen logs.

Keeping names centralized prevents drift between the library modules, the CLI
actor, and any downstream log processing.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"

# Generator identity fields.
GENERATOR_KIND = "generator_kind"
NODE_ID = "node_id"
EPOCH_MS = "epoch_ms"
MONOTONIC = "monotonic"

# Clock fields.
LAST_TIMESTAMP = "last_timestamp"
OBSERVED_TIMESTAMP = "observed_timestamp"

# Digest projection fields.
DIGEST_ALGORITHM = "digest_algorithm"

# Common process-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
