"""Logging configuration for Assistant Bridge using structlog.

structlog renders each event once; stdlib handlers decide where it goes:
a rich console handler on stderr and, optionally, a log file holding one
JSON object per line.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.typing import EventDict, WrappedLogger

APP_NAME = "assistant-bridge"
APP_VERSION = "0.1.0"

REDACTED = "[REDACTED]"

# Substrings of key names whose values are never logged (case-insensitive)
SENSITIVE_FIELDS = frozenset(
    {"password", "pwd", "apikey", "api_key", "token", "secret", "authorization", "credential"}
)

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with the application name and version."""
    event_dict.setdefault("app", APP_NAME)
    event_dict.setdefault("version", APP_VERSION)
    return event_dict


class JSONFileFormatter(logging.Formatter):
    """One JSON object per record, for the log file."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": _ANSI_ESCAPE.sub("", record.getMessage()),
            "app": APP_NAME,
            "version": APP_VERSION,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _level(name: str | None, default: int) -> int:
    return getattr(logging, (name or "").upper(), default) if name else default


def _file_handler(log_file: str, level: int, log_format: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    if log_format == "json":
        handler.setFormatter(JSONFileFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def configure_logging(
    level: str = "WARNING",
    log_format: str = "json",
    log_file: str | None = None,
    file_level: str | None = None,
) -> None:
    """Configure structured logging for the application.

    Safe to call again: previous root handlers are replaced.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log file format, 'json' or 'console'
        log_file: Optional log file path
        file_level: Log file level (defaults to DEBUG)
    """
    console_level = _level(level, logging.WARNING)
    file_log_level = _level(file_level, logging.DEBUG)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(console_level)

    handlers: list[logging.Handler] = [console_handler]
    if log_file:
        handlers.append(_file_handler(log_file, file_log_level, log_format))

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    # structlog drops events below every handler's level; handlers filter the rest
    threshold = min(handler.level for handler in handlers)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            add_app_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Logging is reconfigured once the configuration file is loaded
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def log_api_request(
    logger: structlog.stdlib.BoundLogger,
    method: str,
    url: str,
    status_code: int,
    duration_ms: float | None = None,
    **extra: Any,
) -> None:
    """Log a completed API call; error statuses are logged as warnings."""
    fields: dict[str, Any] = {"method": method, "url": url, "status_code": status_code, **extra}
    if duration_ms is not None:
        fields["duration_ms"] = round(duration_ms, 2)

    if status_code >= 500:
        logger.warning("api_request_server_error", **fields)
    elif status_code >= 400:
        logger.warning("api_request_client_error", **fields)
    else:
        logger.info("api_request_success", **fields)


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    context: str,
    **extra: Any,
) -> None:
    """Log an exception with its type, message and traceback."""
    logger.error(
        "error_occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        context=context,
        exc_info=True,
        **extra,
    )


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(field in lowered for field in SENSITIVE_FIELDS)


def sanitize_payload(payload: Any, max_depth: int = 10) -> Any:
    """Return a copy of ``payload`` with sensitive values replaced by ``[REDACTED]``.

    Args:
        payload: JSON-like data (dicts, lists, scalars)
        max_depth: Nesting depth below which data is replaced by a marker
    """
    if max_depth <= 0:
        return "[MAX_DEPTH_EXCEEDED]"
    if isinstance(payload, dict):
        return {
            key: REDACTED if _is_sensitive(key) else sanitize_payload(value, max_depth - 1)
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [sanitize_payload(item, max_depth - 1) for item in payload]
    return payload


def truncate_payload(payload: Any, max_size: int = 10000) -> str:
    """Serialize ``payload`` for a log line, cut to ``max_size`` characters."""
    try:
        text = json.dumps(payload, indent=2, default=str)
    except (TypeError, ValueError):
        text = str(payload)

    if len(text) <= max_size:
        return text
    return f"{text[:max_size]}\n... [TRUNCATED - {len(text)} total chars]"


def should_log_payloads(log_payloads_enabled: bool) -> bool:
    """Payloads are logged only when enabled and the root logger accepts DEBUG."""
    return log_payloads_enabled and logging.getLogger().isEnabledFor(logging.DEBUG)
