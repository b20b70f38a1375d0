"""Logging support for the MCP mediator."""

from .logging_config import (
    LogEventCallback,
    LogLevel,
    PerformanceLogger,
    emit_event,
    get_logger,
    logging_event_sink,
    setup_logging,
)

__all__ = [
    "LogEventCallback",
    "LogLevel",
    "PerformanceLogger",
    "emit_event",
    "get_logger",
    "logging_event_sink",
    "setup_logging",
]
