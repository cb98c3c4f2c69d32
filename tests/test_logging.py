"""Unit tests for logging setup."""

from __future__ import annotations

import json
from typing import Generator

import pytest
import structlog

from catalog.logging import configure_from, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _restore_structlog() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()


@pytest.mark.unit
def test_json_format(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging("INFO", "json")
    get_logger("catalog.test", request_id="r1").info("product_created", product_id=3)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "product_created"
    assert record["product_id"] == 3
    assert record["request_id"] == "r1"
    assert record["level"] == "info"
    assert "timestamp" in record


@pytest.mark.unit
def test_level_filtering(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging("WARNING", "json")
    log = get_logger("catalog.test")
    log.info("quiet")
    log.warning("store_reset")

    out = capsys.readouterr().out
    assert "quiet" not in out
    assert "store_reset" in out


@pytest.mark.unit
def test_configure_from_config(capsys: pytest.CaptureFixture[str]) -> None:
    from catalog.config import Config, ObservabilityConfig

    configure_from(Config(observability=ObservabilityConfig(log_level="ERROR", log_format="json")))
    log = get_logger("catalog.test")
    log.warning("dropped")
    log.error("invariant_violation", product_id=7)

    lines = capsys.readouterr().out.strip().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["invariant_violation"]
