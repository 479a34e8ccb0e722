"""Typed configuration models for idgen runtime settings."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .defaults import DEFAULT_SNOWFLAKE_EPOCH_MS

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "idgen" / "idgen.yaml"

GeneratorKindName = Literal["random", "snowflake", "uuid", "ulid"]


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "idgen"
    environment: str = "dev"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        """Accept lower-case level names from env and YAML."""
        return value.upper() if isinstance(value, str) else value


class GeneratorSettings(BaseModel):
    """Selection of the default generator variant."""

    kind: GeneratorKindName = "ulid"


class SnowflakeSettings(BaseModel):
    """Snowflake encoder settings for this node."""

    node_id: int = Field(default=0, ge=0, le=1023)
    epoch_ms: int = Field(default=DEFAULT_SNOWFLAKE_EPOCH_MS, ge=0)
    digest_algorithm: str = "md5"
    max_wait_ms: float | None = Field(default=None, gt=0)


class UlidSettings(BaseModel):
    """ULID generator settings."""

    monotonic: bool = False


class IdGenSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix="IDGEN_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)
    snowflake: SnowflakeSettings = Field(default_factory=SnowflakeSettings)
    ulid: UlidSettings = Field(default_factory=UlidSettings)

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply idgen precedence: init > env > yaml > model defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )
