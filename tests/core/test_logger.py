"""
Unit tests for log formatting, credential loggers and secret previews.
"""

import json
import logging

import pytest

from cloudctx.core.logger import (
    CONSOLE_LINE_FORMAT,
    CONSOLE_LOGGER,
    CONSOLE_TIME_FORMAT,
    NULL_LOGGER,
    CustomFormatter,
    JSONFormatter,
    get_credentials_logger,
    log_level,
    preview,
    setup_logger,
)


def _record(message, **extra):
    record = logging.LogRecord(
        name="cloudctx.test", level=logging.INFO, pathname=__file__, lineno=42,
        msg=message, args=(), exc_info=None, func="test_func",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestPreview:

    @pytest.mark.parametrize("secret,length,expected", [
        ("wJalrXUtnFEMI/K7MDENG", 8, "wJalrXUt..."),
        ("eyJ0eXAiOiJKV1QiLCJhbGciOiJSUzI1NiJ9", 20, "eyJ0eXAiOiJKV1QiLCJh..."),
        ("short", 8, "shor..."),
        ("", 8, "<empty>"),
        (None, 8, "<empty>"),
    ])
    def test_preview(self, secret, length, expected):
        assert preview(secret, length) == expected

    def test_preview_never_returns_whole_secret(self):
        for secret in ("a", "ab", "abcdefgh"):
            assert not preview(secret, 8).startswith(secret)


class TestCredentialsLogger:

    def test_debug_toggle(self):
        assert get_credentials_logger(True) is CONSOLE_LOGGER
        assert get_credentials_logger(False) is NULL_LOGGER

    def test_null_logger_drops_everything(self):
        assert NULL_LOGGER.disabled is True
        assert NULL_LOGGER.propagate is False

    def test_console_line_format(self):
        formatter = logging.Formatter(CONSOLE_LINE_FORMAT, datefmt=CONSOLE_TIME_FORMAT)
        line = formatter.format(_record("Retrieving AWS credentials..."))

        prefix, message = line.split(" ", 1)
        assert len(prefix) == len("HH:MM:SS")
        assert message.startswith("[")
        assert ":42]: Retrieving AWS credentials..." in message

    def test_console_logger_format(self):
        handler = CONSOLE_LOGGER.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.formatter._fmt == CONSOLE_LINE_FORMAT


class TestFormatters:

    def test_custom_formatter_multiline_message_and_extra(self):
        formatted = CustomFormatter().format(_record("first\nsecond", pool="cloudctx-aws-rds-pool"))

        assert "[INFO]" in formatted
        assert "Message: first" in formatted
        assert "\n             second" in formatted
        assert "pool: cloudctx-aws-rds-pool" in formatted

    def test_custom_formatter_location(self):
        formatted = CustomFormatter(include_location=True).format(_record("hello"))
        assert ":test_func:42" in formatted

    def test_json_formatter(self):
        payload = json.loads(JSONFormatter().format(_record("hello", scope="resolver")))

        assert payload["level"] == "INFO"
        assert payload["message"] == "hello"
        assert payload["scope"] == "resolver"
        assert payload["location"]["line"] == 42


class TestSetupLogger:

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("CLOUDCTX_LOG_LEVEL", "warning")
        assert log_level() == logging.WARNING

        monkeypatch.setenv("CLOUDCTX_LOG_LEVEL", "nonsense")
        assert log_level() == logging.INFO

    def test_setup_logger_adds_a_single_handler(self):
        logger = setup_logger("cloudctx.tests.setup")
        setup_logger("cloudctx.tests.setup")

        assert len(logger.handlers) == 1
        assert logger.propagate is False
