"""Tests for pydantic-settings-backed idgen configuration loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from packages.idgen_shared.config import (
    DEFAULT_SNOWFLAKE_EPOCH_MS,
    IdGenSettings,
    load_config,
    load_settings,
)


def test_load_settings_uses_idgen_precedence_cascade(tmp_path: Path) -> None:
    """CLI params should override env, env should override YAML, then defaults."""
    config_file = tmp_path / "idgen.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "  service: from-yaml",
                "snowflake:",
                "  node_id: 7",
                "  epoch_ms: 1000",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(
        cli_params={"logging": {"level": "DEBUG"}, "snowflake": {"node_id": None}},
        environ={
            "IDGEN_LOGGING__LEVEL": "ERROR",
            "IDGEN_SNOWFLAKE__NODE_ID": "9",
            "IDGEN_ULID__MONOTONIC": "true",
            "OTHER_SNOWFLAKE__NODE_ID": "100",
        },
        config_path=config_file,
    )

    assert settings.logging.level == "DEBUG"
    assert settings.logging.service == "from-yaml"
    assert settings.snowflake.node_id == 9
    assert settings.snowflake.epoch_ms == 1000
    assert settings.ulid.monotonic is True


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Settings should fall back to built-in defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "idgen.yaml", environ={})

    assert settings.logging.level == "INFO"
    assert settings.logging.json_output is True
    assert settings.logging.service == "idgen"
    assert settings.generator.kind == "ulid"
    assert settings.snowflake.node_id == 0
    assert settings.snowflake.epoch_ms == DEFAULT_SNOWFLAKE_EPOCH_MS
    assert settings.snowflake.digest_algorithm == "md5"
    assert settings.snowflake.max_wait_ms is None
    assert settings.ulid.monotonic is False


def test_load_settings_accepts_lower_case_log_level(tmp_path: Path) -> None:
    settings = load_settings(
        environ={"IDGEN_LOGGING__LEVEL": "debug"}, config_path=tmp_path / "x.yaml"
    )

    assert settings.logging.level == "DEBUG"


@pytest.mark.parametrize(
    "environ",
    [
        {"IDGEN_SNOWFLAKE__NODE_ID": "1024"},
        {"IDGEN_SNOWFLAKE__EPOCH_MS": "-1"},
        {"IDGEN_GENERATOR__KIND": "sequence"},
        {"IDGEN_SNOWFLAKE__MAX_WAIT_MS": "0"},
    ],
)
def test_load_settings_rejects_out_of_range_values(
    environ: dict[str, str], tmp_path: Path
) -> None:
    with pytest.raises(ValidationError):
        load_settings(environ=environ, config_path=tmp_path / "x.yaml")


def test_load_config_rejects_non_mapping_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "idgen.yaml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="top-level mapping"):
        load_config(config_path=config_file, environ={})


def test_load_config_coerces_env_scalars(tmp_path: Path) -> None:
    merged = load_config(
        environ={
            "IDGEN_SNOWFLAKE__MAX_WAIT_MS": "2.5",
            "IDGEN_LOGGING__JSON_OUTPUT": "false",
            "IDGEN_SNOWFLAKE__DIGEST_ALGORITHM": "sha256",
        },
        config_path=tmp_path / "missing.yaml",
    )

    assert merged["snowflake"]["max_wait_ms"] == 2.5
    assert merged["logging"]["json_output"] is False
    assert merged["snowflake"]["digest_algorithm"] == "sha256"


def test_settings_model_reads_prefixed_environment(monkeypatch: Any) -> None:
    """The settings model resolves ``IDGEN_`` variables on its own."""
    monkeypatch.setenv("IDGEN_SNOWFLAKE__NODE_ID", "17")
    monkeypatch.setenv("IDGEN_GENERATOR__KIND", "random")

    settings = IdGenSettings()

    assert settings.snowflake.node_id == 17
    assert settings.generator.kind == "random"
    assert settings.snowflake.digest_algorithm == "md5"
