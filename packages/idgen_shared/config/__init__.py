"""Public API for shared idgen configuration utilities."""

from .defaults import BUILTIN_DEFAULTS, DEFAULT_SNOWFLAKE_EPOCH_MS
from .loader import load_config, load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    GeneratorSettings,
    IdGenSettings,
    LoggingSettings,
    SnowflakeSettings,
    UlidSettings,
)

__all__ = [
    "BUILTIN_DEFAULTS",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_SNOWFLAKE_EPOCH_MS",
    "GeneratorSettings",
    "IdGenSettings",
    "LoggingSettings",
    "SnowflakeSettings",
    "UlidSettings",
    "load_config",
    "load_settings",
]
