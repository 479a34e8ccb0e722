"""Settings resolution for idgen.

Sources are layered lowest to highest:

    built-in defaults < ~/.config/idgen/idgen.yaml < IDGEN_* environment < CLI

Environment keys nest on ``__``: ``IDGEN_SNOWFLAKE__NODE_ID=7`` sets
``snowflake.node_id``. Values are read as YAML scalars, so ``true``, ``7`` and
``2.5`` arrive typed.
"""

from __future__ import annotations

import os
from functools import reduce
from pathlib import Path
from typing import Any, Mapping

import yaml

from .defaults import BUILTIN_DEFAULTS
from .models import DEFAULT_CONFIG_PATH, IdGenSettings

ENV_PREFIX = "IDGEN_"
ENV_NESTING = "__"


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
) -> IdGenSettings:
    """Resolve typed settings from every source.

    The merged mapping always contains every key, so the returned model does
    not depend on whatever else the process environment holds.
    """
    return IdGenSettings(
        **load_config(cli_params=cli_params, environ=environ, config_path=config_path)
    )


def load_config(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
    defaults: Mapping[str, Any] | None = None,
    env_prefix: str = ENV_PREFIX,
) -> dict[str, Any]:
    """Return the plain merged mapping before model validation.

    ``None`` values in ``cli_params`` mean "not given" and never override a
    lower layer.
    """
    layers = [
        defaults if defaults is not None else BUILTIN_DEFAULTS,
        read_config_file(config_path),
        read_environment(environ, prefix=env_prefix),
        _without_unset(cli_params or {}),
    ]
    return reduce(_overlay, layers, {})


def read_config_file(path: str | Path | None = None) -> dict[str, Any]:
    """Read the YAML config file, or nothing when it does not exist."""
    resolved = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not resolved.is_file():
        return {}

    document = yaml.safe_load(resolved.read_text(encoding="utf-8"))
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ValueError(f"Config file must contain a top-level mapping: {resolved}")
    return _overlay({}, document)


def read_environment(
    environ: Mapping[str, str] | None = None, *, prefix: str = ENV_PREFIX
) -> dict[str, Any]:
    """Collect prefixed environment variables into a nested mapping."""
    env = os.environ if environ is None else environ
    tree: dict[str, Any] = {}
    for name, raw in env.items():
        path = _env_path(name, prefix)
        if path:
            _assign(tree, path, _parse_scalar(raw))
    return tree


def _env_path(name: str, prefix: str) -> list[str]:
    if not name.startswith(prefix):
        return []
    return [part.lower() for part in name[len(prefix) :].split(ENV_NESTING) if part]


def _assign(tree: dict[str, Any], path: list[str], value: Any) -> None:
    *parents, leaf = path
    node = tree
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[leaf] = value


def _parse_scalar(raw: str) -> Any:
    """Read one environment value as YAML; fall back to the raw string."""
    if not raw.strip():
        return raw
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def _overlay(base: Mapping[str, Any], top: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``top`` over ``base`` into fresh dicts."""
    merged = {str(key): _copy(value) for key, value in base.items()}
    for key, value in top.items():
        below = merged.get(str(key))
        if isinstance(below, dict) and isinstance(value, Mapping):
            merged[str(key)] = _overlay(below, value)
        else:
            merged[str(key)] = _copy(value)
    return merged


def _copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return _overlay({}, value)
    if isinstance(value, list):
        return [_copy(item) for item in value]
    return value


def _without_unset(params: Mapping[str, Any]) -> dict[str, Any]:
    pruned: dict[str, Any] = {}
    for key, value in params.items():
        if isinstance(value, Mapping):
            value = _without_unset(value)
            if not value:
                continue
        elif value is None:
            continue
        pruned[str(key)] = value
    return pruned
