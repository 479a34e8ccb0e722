"""idgen command-line interface implemented with Typer."""

from __future__ import annotations

import dataclasses
import json
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import typer

from packages.idgen_core import (
    GeneratorKind,
    IdGenError,
    IdGenerator,
    ULID,
    create_generator,
    decode_snowflake,
)
from packages.idgen_shared.config import IdGenSettings, load_settings
from packages.idgen_shared.errors import ErrorCategory, ErrorDetail, exception_to_error
from packages.idgen_shared.logging import configure_logging, generator_log_context

SUCCESS_EXIT_CODE = 0
INTERNAL_ERROR_EXIT_CODE = 1
VALIDATION_ERROR_EXIT_CODE = 2
STATE_ERROR_EXIT_CODE = 3
DEPENDENCY_ERROR_EXIT_CODE = 4

_EXIT_CODES = {
    ErrorCategory.VALIDATION: VALIDATION_ERROR_EXIT_CODE,
    ErrorCategory.UNSUPPORTED: VALIDATION_ERROR_EXIT_CODE,
    ErrorCategory.STATE: STATE_ERROR_EXIT_CODE,
    ErrorCategory.DEPENDENCY: DEPENDENCY_ERROR_EXIT_CODE,
}


class OutputFormat(str, Enum):
    """Representation requested from a generator."""

    INT = "int"
    LONG = "long"
    TEXT = "text"


@dataclass(frozen=True)
class CliConfig:
    """Global CLI runtime options propagated to commands."""

    settings: IdGenSettings
    as_json: bool


def _emit_output(result: Any, as_json: bool) -> None:
    """Render command output in requested format."""
    if as_json:
        typer.echo(json.dumps(result, sort_keys=True, separators=(",", ":")))
        return
    if isinstance(result, dict):
        for key, value in result.items():
            typer.echo(f"{key}: {value}")
        return
    if isinstance(result, list):
        for item in result:
            typer.echo(str(item))
        return
    typer.echo(str(result))


def _emit_error(detail: ErrorDetail, as_json: bool) -> None:
    """Render one normalized error to stderr."""
    if as_json:
        payload = dataclasses.asdict(detail)
        payload["category"] = detail.category.value
        payload["metadata"] = dict(detail.metadata)
        typer.echo(json.dumps({"error": payload}, sort_keys=True), err=True)
        return
    typer.echo(f"error: {detail.message}", err=True)


def _run_command(as_json: bool, invoke: Callable[[], Any]) -> None:
    """Execute one command body and map failures to process exit codes."""
    try:
        result = invoke()
    except (IdGenError, ValueError) as exc:
        detail = exception_to_error(exc)
        _emit_error(detail, as_json)
        raise typer.Exit(
            code=_EXIT_CODES.get(detail.category, INTERNAL_ERROR_EXIT_CODE)
        ) from exc

    _emit_output(result, as_json)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""
    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


def _isoformat(value: ULID) -> str | None:
    """Return the ISO datetime of a ULID timestamp, if the platform can represent it."""
    try:
        return value.datetime.isoformat()
    except (OverflowError, OSError, ValueError):
        return None


def _default_format(kind: GeneratorKind) -> OutputFormat:
    if kind in (GeneratorKind.UUID, GeneratorKind.ULID):
        return OutputFormat.TEXT
    return OutputFormat.LONG


def _produce(generator: IdGenerator, output_format: OutputFormat) -> int | str:
    if output_format is OutputFormat.INT:
        return generator.produce_next_int()
    if output_format is OutputFormat.LONG:
        return generator.produce_next_long()
    return generator.produce_next_text()


app = typer.Typer(no_args_is_help=True, help="idgen identifier generator")


@app.callback()
def main(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
    log_level: str | None = typer.Option(
        None, help="Override logging level (DEBUG, INFO, WARNING, ...)"
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to an idgen YAML config file"
    ),
) -> None:
    """Resolve settings and configure logging for all commands."""
    try:
        settings = load_settings(
            cli_params={"logging": {"level": log_level}},
            config_path=config,
        )
    except ValueError as exc:
        _emit_error(exception_to_error(exc), as_json)
        raise typer.Exit(code=VALIDATION_ERROR_EXIT_CODE) from exc

    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
        stream=sys.stderr,
    )
    ctx.obj = CliConfig(settings=settings, as_json=as_json)


@app.command("next")
def next_command(
    ctx: typer.Context,
    kind: GeneratorKind | None = typer.Argument(
        None, help="Generator kind; defaults to generator.kind from settings"
    ),
    count: int = typer.Option(1, "--count", "-n", min=1, help="Number of ids"),
    output_format: OutputFormat | None = typer.Option(
        None, "--format", case_sensitive=False, help="int, long or text"
    ),
    node_id: int | None = typer.Option(None, help="Snowflake node id [0, 1023]"),
    center: int | None = typer.Option(None, help="Snowflake center id [0, 31]"),
    worker: int | None = typer.Option(None, help="Snowflake worker id [0, 31]"),
    epoch_ms: int | None = typer.Option(None, help="Snowflake epoch in ms"),
    monotonic: bool = typer.Option(
        False, "--monotonic", help="Chain ULIDs monotonically"
    ),
) -> None:
    """Generate one or more identifiers."""
    cfg = _require_config(ctx)
    settings = cfg.settings
    resolved_kind = kind if kind is not None else GeneratorKind(settings.generator.kind)
    resolved_format = (
        output_format if output_format is not None else _default_format(resolved_kind)
    )
    if node_id is None and center is None and worker is None:
        node_id = settings.snowflake.node_id

    def invoke() -> Any:
        generator = create_generator(
            resolved_kind,
            node_id=node_id,
            center=center,
            worker=worker,
            epoch_ms=epoch_ms if epoch_ms is not None else settings.snowflake.epoch_ms,
            digest_algorithm=settings.snowflake.digest_algorithm,
            max_wait_ms=settings.snowflake.max_wait_ms,
            monotonic=monotonic or settings.ulid.monotonic,
        )
        log_node = node_id if resolved_kind is GeneratorKind.SNOWFLAKE else None
        with generator_log_context(kind=resolved_kind.value, node_id=log_node):
            ids = [_produce(generator, resolved_format) for _ in range(count)]
        if cfg.as_json:
            return {
                "kind": resolved_kind.value,
                "format": resolved_format.value,
                "ids": ids,
            }
        return ids

    _run_command(cfg.as_json, invoke)


@app.command("inspect-ulid")
def inspect_ulid_command(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="26-character ULID text"),
) -> None:
    """Decode a ULID and show its fields."""
    cfg = _require_config(ctx)

    def invoke() -> dict[str, Any]:
        value = ULID.parse(text)
        return {
            "ulid": str(value),
            "timestamp": value.timestamp,
            "datetime": _isoformat(value),
            "randomness": value.random_bytes.hex(),
            "bytes": value.to_bytes().hex(),
            "uuid": str(value.to_uuid()),
            "rfc4122": str(value.to_rfc4122().to_uuid()),
        }

    _run_command(cfg.as_json, invoke)


@app.command("inspect-snowflake")
def inspect_snowflake_command(
    ctx: typer.Context,
    value: int = typer.Argument(..., help="64-bit Snowflake id"),
    epoch_ms: int | None = typer.Option(None, help="Epoch the id was issued under"),
) -> None:
    """Decode a Snowflake id into timestamp, node and sequence."""
    cfg = _require_config(ctx)
    epoch = epoch_ms if epoch_ms is not None else cfg.settings.snowflake.epoch_ms

    def invoke() -> dict[str, Any]:
        parts = decode_snowflake(value, epoch_ms=epoch)
        return {
            "id": value,
            "timestamp": parts.timestamp,
            "node_id": parts.node_id,
            "center": parts.center,
            "worker": parts.worker,
            "sequence": parts.sequence,
        }

    _run_command(cfg.as_json, invoke)


if __name__ == "__main__":
    app()
