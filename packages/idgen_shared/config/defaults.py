"""Built-in default configuration values for idgen.

These defaults are the final fallback in the configuration cascade:
CLI params > ENV vars > config file > built-in defaults.
"""

from __future__ import annotations

from typing import Any

DEFAULT_SNOWFLAKE_EPOCH_MS = 1751308800000
"""2025-07-01T00:00:00Z in milliseconds."""

BUILTIN_DEFAULTS: dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "json_output": True,
        "service": "idgen",
        "environment": "dev",
    },
    "generator": {
        "kind": "ulid",
    },
    "snowflake": {
        "node_id": 0,
        "epoch_ms": DEFAULT_SNOWFLAKE_EPOCH_MS,
        "digest_algorithm": "md5",
        "max_wait_ms": None,
    },
    "ulid": {
        "monotonic": False,
    },
}
