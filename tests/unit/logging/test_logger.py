# tests/unit/logging/test_logger.py — v1
"""Tests for logging/logger.py — formatters and setup."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from jekyllbuild.logging.context import set_run_context, set_stage_context
from jekyllbuild.logging.logger import (
    ROOT_LOGGER,
    ActionsFormatter,
    JsonFormatter,
    TextFormatter,
    get_logger,
    setup_logging,
)


def _record(level: int, msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("jekyllbuild.test", level, __file__, 1, msg, args, None)


@pytest.fixture
def reset_root():
    yield
    root = logging.getLogger(ROOT_LOGGER)
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()


class TestJsonFormatter:
    def test_fields_and_context(self):
        set_run_context("run-1")
        set_stage_context("jekyll build")
        data = json.loads(JsonFormatter().format(_record(logging.INFO, "built %d", 3)))
        assert data["level"] == "INFO"
        assert data["logger"] == "jekyllbuild.test"
        assert data["message"] == "built 3"
        assert data["context"] == {"run_id": "run-1", "stage": "jekyll build"}

    def test_no_context(self):
        data = json.loads(JsonFormatter().format(_record(logging.INFO, "x")))
        assert "context" not in data


class TestTextFormatter:
    def test_stage_included(self):
        set_stage_context("bundle install")
        line = TextFormatter().format(_record(logging.WARNING, "slow"))
        assert "[WARNING ]" in line
        assert "(bundle install)" in line
        assert line.endswith("- slow")


class TestActionsFormatter:
    @pytest.mark.parametrize(
        ("level", "prefix"),
        [
            (logging.DEBUG, "::debug::"),
            (logging.WARNING, "::warning::"),
            (logging.ERROR, "::error::"),
            (logging.CRITICAL, "::error::"),
        ],
    )
    def test_commands(self, level, prefix):
        assert ActionsFormatter().format(_record(level, "msg")) == f"{prefix}msg"

    def test_info_plain(self):
        assert ActionsFormatter().format(_record(logging.INFO, "100%")) == "100%"

    def test_multiline_escaped(self):
        out = ActionsFormatter().format(_record(logging.ERROR, "a\nb"))
        assert out == "::error::a%0Ab"


class TestSetupLogging:
    def test_get_logger_namespaced(self):
        assert get_logger("cache").name == "jekyllbuild.cache"

    def test_console_only(self, reset_root):
        setup_logging(level="DEBUG", log_format="actions")
        root = logging.getLogger(ROOT_LOGGER)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ActionsFormatter)

    def test_reinit_replaces_handlers(self, reset_root):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1

    def test_file_handler_json(self, reset_root, tmp_path: Path):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(level="INFO", log_format="text", log_file=log_file)
        get_logger("test").info("hello %s", "file")
        for handler in logging.getLogger(ROOT_LOGGER).handlers:
            handler.flush()

        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["message"] == "hello file"
