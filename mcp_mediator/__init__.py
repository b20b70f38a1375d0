"""Stateless MCP mediator: expose schema-described tools over JSON-RPC 2.0."""

from .config import Config, ConfigManager, McpConfig
from .exceptions import (
    ErrorCodes,
    InvalidParamsError,
    OperationCancelledError,
    ProtocolError,
    ToolArgumentError,
    ToolDomainError,
    ToolError,
)
from .mcp.content import audio_content, image_content, resource_content, text_content
from .mcp.server import McpMediator
from .outcome import CancellationToken, OutcomeKind, ToolOutcome
from .schema import SchemaBuilder
from .tool_registry import ToolDefinition, ToolRegistry

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "Config",
    "ConfigManager",
    "ErrorCodes",
    "InvalidParamsError",
    "McpConfig",
    "McpMediator",
    "OperationCancelledError",
    "OutcomeKind",
    "ProtocolError",
    "SchemaBuilder",
    "ToolArgumentError",
    "ToolDefinition",
    "ToolDomainError",
    "ToolError",
    "ToolOutcome",
    "ToolRegistry",
    "audio_content",
    "image_content",
    "resource_content",
    "text_content",
]
