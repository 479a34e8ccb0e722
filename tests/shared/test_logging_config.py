"""Tests for structured logging configuration and context binding."""

from __future__ import annotations

import io
import json
import logging
from typing import Iterator

import pytest

from packages.idgen_core import ClockRegressionError
from packages.idgen_shared.logging import (
    bind_context,
    clear_context,
    configure_logging,
    generator_log_context,
    get_context,
    get_logger,
    log_context,
)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    clear_context()
    yield
    clear_context()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_formatter_merges_context_and_extra_fields() -> None:
    stream = io.StringIO()
    configure_logging(level="INFO", service="idgen", environment="test", stream=stream)

    with generator_log_context(kind="snowflake", node_id=5):
        get_logger("idgen.test").info("issued", extra={"sequence": 3})

    payload = json.loads(stream.getvalue().strip())
    assert payload["message"] == "issued"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "idgen.test"
    assert payload["generator_kind"] == "snowflake"
    assert payload["node_id"] == "5"
    assert payload["sequence"] == 3
    assert payload["service"] == "idgen"
    assert payload["environment"] == "test"


def test_plain_formatter_appends_sorted_fields() -> None:
    stream = io.StringIO()
    configure_logging(level="DEBUG", json_output=False, stream=stream)

    get_logger("idgen.test").debug("waiting", extra={"node_id": 2, "last_timestamp": 10})

    line = stream.getvalue().strip()
    assert "DEBUG idgen.test waiting" in line
    assert line.endswith("last_timestamp=10 node_id=2")


def test_configure_logging_replaces_handlers_and_filters_level() -> None:
    first = io.StringIO()
    second = io.StringIO()
    configure_logging(level="INFO", stream=first)
    configure_logging(level="WARNING", stream=second)

    logger = get_logger("idgen.test")
    logger.info("dropped")
    logger.warning("kept")

    assert first.getvalue() == ""
    assert len(second.getvalue().strip().splitlines()) == 1
    assert json.loads(second.getvalue())["message"] == "kept"


def test_log_context_restores_previous_values_on_error() -> None:
    bind_context(node_id=1)

    with pytest.raises(RuntimeError):
        with log_context({"node_id": 2, "generator_kind": "ulid"}):
            assert get_context() == {"node_id": "2", "generator_kind": "ulid"}
            raise RuntimeError("boom")

    assert get_context() == {"node_id": "1"}


def test_bind_context_skips_none_and_clear_removes_keys() -> None:
    bind_context(node_id=None, generator_kind="uuid", service="idgen")
    clear_context("service")

    assert get_context() == {"generator_kind": "uuid"}


def test_generator_context_omits_missing_node() -> None:
    with generator_log_context(kind="ulid"):
        assert get_context() == {"generator_kind": "ulid"}


def test_generator_context_passes_frozen_errors_through_unchanged() -> None:
    """Immutable idgen errors leave the block as-is and the context is restored."""
    error = ClockRegressionError(message="late", last_timestamp=2, observed_timestamp=1)

    with pytest.raises(ClockRegressionError) as exc_info:
        with generator_log_context(kind="snowflake", node_id=3):
            raise error

    assert exc_info.value is error
    assert get_context() == {}
