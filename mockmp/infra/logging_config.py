# mockmp/infra/logging_config.py
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any

from mockmp.config import MockSettings

LOGGER_NAME = "mockmp"

_CONTEXT_FIELDS = ("unit", "member", "seq", "is_async")


class JSONFormatter(logging.Formatter):
    """Format engine logs as JSON for CI log collectors"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        return json.dumps(log_data, default=repr)


class ConsoleFormatter(logging.Formatter):
    """Human-readable format for local test runs"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

        context_parts = []
        if hasattr(record, "unit"):
            context_parts.append(f"unit={record.unit}")
        if hasattr(record, "member"):
            context_parts.append(f"member={record.member}")
        if hasattr(record, "seq"):
            context_parts.append(f"seq={record.seq}")
        if getattr(record, "is_async", False):
            context_parts.append("async")

        context = f" [{' '.join(context_parts)}]" if context_parts else ""

        return (
            f"{color}[{timestamp}] {record.levelname:8}{reset} "
            f"{record.name}{context} - {record.getMessage()}"
        )


def setup_logging(level: str = "WARNING", use_json: bool = False) -> None:
    """
    Attach a handler to the ``mockmp`` logger.

    Only the library logger is touched; the root logger stays under the
    control of the host test suite.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_json: If True, use JSON format
    """
    engine_logger = logging.getLogger(LOGGER_NAME)
    engine_logger.setLevel(level)

    for handler in engine_logger.handlers[:]:
        engine_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    if use_json:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ConsoleFormatter())

    engine_logger.addHandler(console_handler)
    engine_logger.propagate = False

    engine_logger.debug("Logging configured: level=%s, json=%s", level, use_json)


def setup_logging_from_settings(settings: MockSettings) -> None:
    setup_logging(settings.log_level, settings.log_json)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name"""
    return logging.getLogger(name)


class LogContext:
    """Add unit/member/call context to log records"""

    def __init__(
            self,
            logger: logging.Logger,
            unit: str | None = None,
            member: str | None = None,
            seq: int | None = None,
            is_async: bool | None = None,
    ):
        self.logger = logger
        self.context = {
            k: v for k, v in {
                "unit": unit,
                "member": member,
                "seq": seq,
                "is_async": is_async,
            }.items() if v is not None
        }

    def _log(self, level: int, msg: str, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        extra.update(self.context)
        self.logger.log(level, msg, *args, extra=extra, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log(logging.ERROR, msg, *args, **kwargs)
