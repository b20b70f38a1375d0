"""
Structured JSON logging for the MCP mediator.

Key features:
- JSON lines with timestamp, level, component and message fields
- INFO/WARNING to stdout, ERROR/CRITICAL to stderr
- Safe serialization of arbitrary ``extra`` values
- An adapter from the mediator's ``(event_name, data)`` logging callback
  contract onto a standard logger

Example usage:
    from mcp_mediator.core.logging_config import setup_logging, get_logger, LogLevel

    setup_logging(level=LogLevel.INFO)
    logger = get_logger("mcp_mediator.host")
    logger.info("Request served", extra={"duration_ms": 12, "method": "tools/call"})
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

__all__ = [
    "LogLevel",
    "LogEventCallback",
    "SafeJSONEncoder",
    "JSONFormatter",
    "setup_logging",
    "get_logger",
    "configure_from_dict",
    "logging_event_sink",
    "emit_event",
    "PerformanceLogger",
]

LogEventCallback = Callable[[str, Dict[str, Any]], None]

_logger = logging.getLogger(__name__)


class LogLevel(Enum):
    """Log levels accepted in configuration files and on the command line."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def from_string(cls, level_str: str) -> 'LogLevel':
        """
        Case-insensitive lookup.

        Raises:
            ValueError: If level_str is not a valid log level
        """
        try:
            return cls(level_str.upper())
        except (ValueError, AttributeError):
            valid_levels = [level.value for level in cls]
            raise ValueError(f"Invalid log level '{level_str}'. Valid levels: {valid_levels}")

    def to_logging_level(self) -> int:
        return getattr(logging, self.value)


class SafeJSONEncoder(json.JSONEncoder):
    """JSON encoder that never raises on unknown objects."""

    def default(self, obj: Any) -> Union[str, Dict[str, Any], list]:
        try:
            if hasattr(obj, '__dict__'):
                return {'_type': obj.__class__.__name__, '_repr': str(obj)}
            if hasattr(obj, '__iter__') and not isinstance(obj, (str, bytes)):
                return list(obj)
            return str(obj)
        except Exception:
            return f"<unserializable: {type(obj).__name__}>"


class JSONFormatter(logging.Formatter):
    """
    Render log records as single-line JSON.

    Output format:
    {
        "timestamp": "2026-01-13T10:00:00Z",
        "level": "INFO",
        "component": "mcp_mediator.mcp.invoker",
        "message": "mcp_tool_failed",
        "event": "mcp_tool_failed",
        "event_data": {"tool": "lookup", "error": "..."}
    }
    """

    # LogRecord attributes that are not user-supplied extras
    EXCLUDED_FIELDS = frozenset({
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
        'filename', 'module', 'lineno', 'funcName', 'created',
        'msecs', 'relativeCreated', 'thread', 'threadName',
        'processName', 'process', 'taskName', 'exc_info', 'exc_text',
        'stack_info', 'message', 'asctime'
    })

    def __init__(self, include_source_location: bool = False):
        super().__init__()
        self.include_source_location = include_source_location
        self.json_encoder = SafeJSONEncoder(separators=(',', ':'), ensure_ascii=False)

    def format(self, record: logging.LogRecord) -> str:
        try:
            log_data: Dict[str, Any] = {
                "timestamp": self._format_timestamp(record.created),
                "level": record.levelname,
                "component": record.name,
                "message": self._safe_get_message(record),
            }

            if self.include_source_location:
                log_data.update({
                    "file": record.filename,
                    "line": record.lineno,
                    "function": record.funcName,
                })

            for key, value in record.__dict__.items():
                if key not in self.EXCLUDED_FIELDS and not key.startswith('_'):
                    log_data[key] = value

            if record.exc_info:
                log_data["exception"] = self.formatException(record.exc_info)

            return self.json_encoder.encode(log_data)
        except Exception as e:
            timestamp = self._format_timestamp(record.created)
            return (f"{timestamp} {record.levelname} {record.name} "
                    f"{self._safe_get_message(record)} [JSON_FORMAT_ERROR: {e}]")

    @staticmethod
    def _format_timestamp(created: float) -> str:
        dt = datetime.fromtimestamp(created, tz=timezone.utc)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def _safe_get_message(record: logging.LogRecord) -> str:
        try:
            return record.getMessage()
        except Exception:
            return f"<message formatting failed: {record.msg}>"


class _BelowLevelFilter(logging.Filter):
    """Pass only records strictly below ``max_level``."""

    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.max_level


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    include_source_location: bool = False,
    format_json: bool = True
) -> None:
    """
    Configure root logging for the mediator process.

    Existing root handlers are removed so repeated calls do not duplicate
    output.

    Args:
        level: Minimum log level to output (default: INFO)
        include_source_location: Include file/line info in logs (default: False)
        format_json: Use JSON formatting (default: True)
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level.to_logging_level())

    if format_json:
        formatter: logging.Formatter = JSONFormatter(include_source_location=include_source_location)
    else:
        formatter = logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%S'
        )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level.to_logging_level())
    stdout_handler.addFilter(_BelowLevelFilter(logging.ERROR))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)

    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(stderr_handler)


def get_logger(component: str, extra_context: Optional[Dict[str, Any]] = None) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Get a logger for a component, optionally bound to default context.

    Example:
        logger = get_logger("mcp_mediator.host", {"service": "mcp-mediator"})
        logger.info("Listening", extra={"port": 8080})
    """
    logger = logging.getLogger(component)

    if extra_context:
        class ContextAdapter(logging.LoggerAdapter):
            def process(self, msg, kwargs):
                merged = dict(extra_context)
                merged.update(kwargs.get('extra') or {})
                kwargs['extra'] = merged
                return msg, kwargs

        return ContextAdapter(logger, extra_context)

    return logger


def configure_from_dict(config: Dict[str, Any]) -> None:
    """
    Configure logging from the ``logging`` section of the configuration.

    Example config:
        {"level": "INFO", "include_source_location": false, "format_json": true}
    """
    try:
        level = LogLevel.from_string(config.get('level', 'INFO'))
    except ValueError:
        level = LogLevel.INFO

    setup_logging(
        level=level,
        include_source_location=bool(config.get('include_source_location', False)),
        format_json=bool(config.get('format_json', True)),
    )


def _level_for_event(event_name: str) -> int:
    lowered = event_name.lower()
    if "error" in lowered or "failed" in lowered or "cancelled" in lowered:
        return logging.WARNING
    return logging.INFO


def logging_event_sink(logger: Optional[logging.Logger] = None) -> LogEventCallback:
    """
    Adapt the ``(event_name, data)`` callback contract onto a logger.

    Event data travels under ``event_data`` so keys such as ``name`` or
    ``message`` cannot clash with LogRecord attributes.
    """
    target = logger or logging.getLogger("mcp_mediator.events")

    def _sink(event_name: str, data: Dict[str, Any]) -> None:
        target.log(_level_for_event(event_name), event_name,
                   extra={"event": event_name, "event_data": dict(data)})

    return _sink


def emit_event(callback: Optional[LogEventCallback], event_name: str, data: Dict[str, Any]) -> None:
    """Fire-and-forget call of a logging callback; its failures are contained."""
    if callback is None:
        return
    try:
        callback(event_name, data)
    except Exception:
        _logger.debug("Logging callback failed for event %s", event_name, exc_info=True)


class PerformanceLogger:
    """
    Context manager that logs how long an operation took.

    Example:
        with PerformanceLogger(logger, "tools/call", tool="lookup"):
            ...
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: Any):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[int] = None

    def __enter__(self) -> 'PerformanceLogger':
        self.start_time = time.perf_counter()
        self.logger.debug(f"Starting {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return
        self.duration_ms = int((time.perf_counter() - self.start_time) * 1000)
        log_context = {**self.context, "duration_ms": self.duration_ms, "operation": self.operation}

        if exc_type is None:
            self.logger.info(f"Completed {self.operation}", extra=log_context)
        else:
            log_context["error_type"] = exc_type.__name__
            self.logger.error(f"Failed {self.operation}", extra=log_context)
