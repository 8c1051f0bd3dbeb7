"""Structured logging configuration for Taurus.

structlog is configured once per process with a shared processor chain:
contextvars merge, secret masking, log level, ISO 8601 UTC timestamps and
callsite info. Dev mode renders a colored console line, prod mode emits JSON.
When file logging is enabled, every entry is also written as JSON to a
daily-rotated file under ``~/.taurus/logs/``.

Event naming convention:
- dot.notation, ``domain.entity.verb_past_tense``
- e.g. "agents.lifecycle.agent_activated", "agents.health.pass_completed"

Standard log keys:
- agent: Agent name
- status / health_status: Lifecycle and health states
- healthy_count / total_active: Health pass aggregates

Usage:
    from taurus.observability import configure_logging, get_logger

    configure_logging(LoggingConfig(mode=LogMode.PROD))
    log = get_logger(__name__)
    log.info("agents.lifecycle.agent_activated", agent="github")
"""

from __future__ import annotations

from enum import Enum
import logging
from logging.handlers import TimedRotatingFileHandler
import os
from pathlib import Path
import sys
from typing import Any

from pydantic import BaseModel, Field
import structlog

from taurus.core.security import (
    is_sensitive_field,
    is_sensitive_value,
    mask_api_key,
    mask_endpoint,
    sanitize_for_logging,
)


class LogMode(str, Enum):
    """Logging output mode."""

    DEV = "dev"
    PROD = "prod"


class LoggingConfig(BaseModel):
    """Configuration for structured logging.

    Attributes:
        mode: Output mode (dev for human-readable, prod for JSON).
        log_level: Minimum log level to output.
        log_dir: Directory for log files. Defaults to ~/.taurus/logs/.
        max_log_days: Number of days to retain log files.
        enable_file_logging: Whether to write logs to files.
    """

    mode: LogMode = Field(default=LogMode.DEV)
    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".taurus" / "logs")
    max_log_days: int = Field(default=7, ge=1, le=365)
    enable_file_logging: bool = Field(default=False)

    model_config = {"frozen": True}


_configured: bool = False
_console_logging_enabled: bool = True

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# structlog's own keys, never masked
_RESERVED_KEYS = frozenset({"event", "level", "timestamp", "filename", "lineno"})


def _get_mode_from_env() -> LogMode:
    """Read TAURUS_LOG_MODE, defaulting to dev."""
    if os.environ.get("TAURUS_LOG_MODE", "dev").lower() == "prod":
        return LogMode.PROD
    return LogMode.DEV


def _get_log_level(level_str: str) -> int:
    return _LEVELS.get(level_str.upper(), logging.INFO)


def _setup_file_handler(config: LoggingConfig) -> TimedRotatingFileHandler | None:
    """Create the midnight-rotated JSON file handler, if enabled."""
    if not config.enable_file_logging:
        return None

    config.log_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(config.log_dir / "taurus.log"),
        when="midnight",
        interval=1,
        backupCount=config.max_log_days,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(_get_log_level(config.log_level))
    return handler


def _mask_sensitive_data(
    _logger: Any,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that masks secrets before rendering.

    Agent endpoints get special treatment: URLs are stripped of credentials,
    anything else is masked as a token.
    """
    for key, value in list(event_dict.items()):
        if key in _RESERVED_KEYS:
            continue
        if key == "endpoint" and (value is None or isinstance(value, str)):
            event_dict[key] = mask_endpoint(value)
        elif is_sensitive_field(key):
            event_dict[key] = "<REDACTED>"
        elif isinstance(value, str) and is_sensitive_value(value):
            event_dict[key] = mask_api_key(value)
        elif isinstance(value, dict):
            event_dict[key] = sanitize_for_logging(value)
    return event_dict


def _get_processors(mode: LogMode) -> list[Any]:
    """Build the processor chain ending in the mode's renderer."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _mask_sensitive_data,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
        structlog.processors.format_exc_info,
    ]
    if mode == LogMode.DEV:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def set_console_logging(enabled: bool) -> None:
    """Enable or disable console (stderr) log output."""
    global _console_logging_enabled
    _console_logging_enabled = enabled


def is_console_logging_enabled() -> bool:
    """Return True if console logging is enabled."""
    return _console_logging_enabled


class _TeeLogger:
    """Writes rendered lines to stderr and, optionally, a file handler."""

    def __init__(self, file_handler: TimedRotatingFileHandler | None = None) -> None:
        self._file_handler = file_handler

    def _log(self, message: str, level: int) -> None:
        if _console_logging_enabled:
            print(message, file=sys.stderr)
        if self._file_handler:
            record = logging.LogRecord(
                name="taurus",
                level=level,
                pathname="",
                lineno=0,
                msg=message,
                args=(),
                exc_info=None,
            )
            self._file_handler.emit(record)

    def msg(self, message: str) -> None:
        self._log(message, logging.INFO)

    def debug(self, message: str) -> None:
        self._log(message, logging.DEBUG)

    def info(self, message: str) -> None:
        self._log(message, logging.INFO)

    def warning(self, message: str) -> None:
        self._log(message, logging.WARNING)

    warn = warning

    def error(self, message: str) -> None:
        self._log(message, logging.ERROR)

    exception = error

    def critical(self, message: str) -> None:
        self._log(message, logging.CRITICAL)

    fatal = critical


class _TeeLoggerFactory:
    def __init__(self, file_handler: TimedRotatingFileHandler | None = None) -> None:
        self._file_handler = file_handler

    def __call__(self, *_args: Any) -> _TeeLogger:
        return _TeeLogger(self._file_handler)


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog for the application.

    Call once at startup; calling again replaces the previous configuration.

    Args:
        config: Logging configuration. If None, uses defaults with
            mode from the TAURUS_LOG_MODE environment variable.
    """
    global _configured

    if config is None:
        config = LoggingConfig(mode=_get_mode_from_env())

    log_level = _get_log_level(config.log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    file_handler = _setup_file_handler(config)
    if file_handler:
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=_get_processors(config.mode),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=_TeeLoggerFactory(file_handler),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger, configuring defaults on first use.

    Example:
        log = get_logger(__name__)
        log.info("agents.health.pass_completed", healthy_count=4, total_active=5)
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables carried into every subsequent log entry.

    Never bind sensitive data (API keys, raw endpoints).
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove context variables from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


def reset_logging() -> None:
    """Reset logging state. Intended for tests."""
    global _configured
    _configured = False
    clear_context()
    structlog.reset_defaults()
