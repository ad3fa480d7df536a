"""Unit tests for structured logging setup."""

import json

import pytest
import structlog

from core.config import Settings
from core.logging import setup_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestSetupLogging:
    def test_json_output(self, capsys: pytest.CaptureFixture[str]):
        setup_logging(Settings(_env_file=None, log_json=True))

        structlog.get_logger().info("group_created", group_id=1)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "group_created"
        assert event["group_id"] == 1
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filtering(self, capsys: pytest.CaptureFixture[str]):
        setup_logging(Settings(_env_file=None, log_json=True, log_level="WARNING"))

        structlog.get_logger().info("dropped")
        structlog.get_logger().warning("kept")

        out = capsys.readouterr().out
        assert "dropped" not in out
        assert "kept" in out
