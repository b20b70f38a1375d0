"""JSON-RPC / MCP protocol layer."""

from .content import (
    audio_content,
    format_tool_result,
    image_content,
    resource_content,
    text_content,
)
from .dispatcher import MethodDispatcher
from .envelope import RequestEnvelope, parse_request
from .invoker import ToolInvoker
from .server import McpMediator

__all__ = [
    "McpMediator",
    "MethodDispatcher",
    "RequestEnvelope",
    "ToolInvoker",
    "audio_content",
    "format_tool_result",
    "image_content",
    "parse_request",
    "resource_content",
    "text_content",
]
