"""Unit tests for structured logging setup."""

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from src.features.observability import (
    bind_request_context,
    clear_request_context,
    configure_logging,
)


@pytest.fixture(autouse=True)
def restore_structlog() -> Iterator[None]:
    yield
    clear_request_context()
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.unit
    def test_json_output(self) -> None:
        """JSON logs carry the event, level and bound request id."""
        output = io.StringIO()
        configure_logging(level="info", output=output, json_format=True)
        bind_request_context("req-1")

        structlog.get_logger().info("fetch_complete", chain_id="abc")

        record = json.loads(output.getvalue().strip())
        assert record["event"] == "fetch_complete"
        assert record["level"] == "info"
        assert record["request_id"] == "req-1"
        assert record["chain_id"] == "abc"

    @pytest.mark.unit
    def test_level_filtering(self) -> None:
        """Events below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output)

        structlog.get_logger().info("hop_request")

        assert output.getvalue() == ""
