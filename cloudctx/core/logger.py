from datetime import datetime
import re
import os
import sys
import json
import logging
import traceback
from typing import Optional


LOG_SEVERITY = {
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "WARNING": "WARNING",
    "ERROR": "ERROR",
    "CRITICAL": "CRITICAL"
}

_RESERVED_RECORD_KEYS = {
    "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "process", "processName", "scope", "name", "taskName"
}


def stringify_extra(value):
    if isinstance(value, (list, dict)):
        return str(value)
    else:
        return value


def log_level(default: str = "INFO") -> int:
    """Resolve the logging level from CLOUDCTX_LOG_LEVEL."""
    name = os.getenv("CLOUDCTX_LOG_LEVEL", default).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


class CustomFormatter(logging.Formatter):

    def __init__(self, fmt="%(message)s", include_location=False):
        super().__init__(fmt)
        self.include_location = include_location

    def format(self, record):
        level_name = LOG_SEVERITY.get(record.levelname, record.levelname)

        scope_highlight = f"{record.scope}" if hasattr(record, "scope") else ""
        location = ""
        if self.include_location:
            location = f"{record.pathname}:{record.lineno}\n({record.module}:{record.funcName}:{record.lineno})"

        metadata_line = f"{datetime.now().isoformat()} [{level_name}] {scope_highlight} {location}".strip()

        message = record.getMessage()
        message_split = message.splitlines()
        if len(message_split) > 1:
            message_line = f"     Message: {message_split[0]}"
            for line in message_split[1:]:
                message_line += f"\n             {line}"
        else:
            message_line = f"     Message: {message}"

        extra_items = [
            f"{key}: {stringify_extra(value)}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        ]
        extra_info = ""
        if extra_items:
            extra_info = f"\n     {' '.join(extra_items)}"
        formatted_log = f"{metadata_line}\n{message_line}{extra_info}"
        if record.exc_info:
            # clickable "File path:line" entries
            format_exception = traceback.format_exception(*record.exc_info)
            format_exception = "".join(
                re.sub(r'File "([^"]+)", line (\d+),', r'File "\1:\2"', line)
                for line in format_exception
            )
            formatted_log += f"\n{format_exception}"
        return formatted_log


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_dict = {
            "level": record.levelname,
            "message": record.getMessage(),
            "time": self.formatTime(record, self.datefmt),
            "location": {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            },
        }
        if hasattr(record, "scope"):
            log_dict["scope"] = record.scope
        if record.exc_info:
            log_dict["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_dict, ensure_ascii=False)


def setup_logger(name: str, include_location=False, use_json=False):
    logger = logging.getLogger(name)

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(logging.DEBUG)
        if use_json:
            stream_handler.setFormatter(JSONFormatter())
        else:
            stream_handler.setFormatter(CustomFormatter(include_location=include_location))
        logger.addHandler(stream_handler)
    logger.setLevel(log_level())
    logger.propagate = False
    return logger


# Credential diagnostics
#
# Credential providers run before any application logging is configured, so
# they use one of two fixed loggers: a null logger that drops everything, or a
# console logger that writes "HH:MM:SS [module:line]: message" lines to stderr.
# The line format is relied on by operators grepping for resolution problems.

CREDENTIALS_CONSOLE_LOGGER_NAME = "cloudctx.credentials.console"
CONSOLE_LINE_FORMAT = "%(asctime)s [%(module)s:%(lineno)d]: %(message)s"
CONSOLE_TIME_FORMAT = "%H:%M:%S"


def _build_null_logger() -> logging.Logger:
    logger = logging.Logger("cloudctx.credentials.null")
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    logger.disabled = True
    return logger


def _build_console_logger() -> logging.Logger:
    logger = logging.getLogger(CREDENTIALS_CONSOLE_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(CONSOLE_LINE_FORMAT, datefmt=CONSOLE_TIME_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger


NULL_LOGGER = _build_null_logger()
CONSOLE_LOGGER = _build_console_logger()


def get_credentials_logger(debug: bool) -> logging.Logger:
    """Return the console logger when debug is on, the null logger otherwise."""
    return CONSOLE_LOGGER if debug else NULL_LOGGER


def preview(secret: Optional[str], length: int = 8) -> str:
    """
    Redacted preview of a secret: its first `length` characters and an ellipsis.

    Never returns the full value, even for secrets shorter than `length`.
    """
    if not secret:
        return "<empty>"
    shown = min(length, max(len(secret) - 1, 0))
    return f"{secret[:shown]}..."
