"""
Error taxonomy for the MCP mediator.

Two disjoint families are defined here and must never be mixed up:

Protocol-level errors (``ProtocolError`` and subclasses):
    Structural problems with the JSON-RPC exchange itself. They are rendered as
    the ``error`` member of a JSON-RPC response envelope.

Tool-level errors (``ToolError`` and subclasses):
    Business failures raised by tool handlers. They never become JSON-RPC
    errors; the invoker turns them into a ``tools/call`` result carrying
    ``isError: true`` so the calling model can read the failure and retry.

Example usage:
    from mcp_mediator.exceptions import ToolArgumentError, ToolDomainError

    def lookup_account(arguments, cancellation):
        account_id = arguments.get("account_id")
        if not account_id:
            raise ToolArgumentError("account_id must not be empty")
        account = directory.find(account_id)
        if account is None:
            raise ToolDomainError(f"No account with id {account_id}")
        return account
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

__all__ = [
    "ErrorCodes",
    "ProtocolError",
    "ParseError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "InvalidParamsError",
    "InternalError",
    "ToolError",
    "ToolArgumentError",
    "ToolDomainError",
    "OperationCancelledError",
    "ConfigurationError",
    "generate_request_id",
    "format_error_payload",
]

MAX_ERROR_MESSAGE_LENGTH = 5000


class ErrorCodes:
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


def generate_request_id(prefix: str = "req") -> str:
    """
    Generate a correlation id for one mediated request.

    The id only tags log events; it is never sent to the client, which
    correlates responses through the JSON-RPC ``id`` instead.

    Example:
        >>> generate_request_id("mcp")
        'mcp-12345678-1234-5678-9abc-123456789abc'
    """
    return f"{prefix}-{uuid.uuid4()}"


# -- Protocol-level ------------------------------------------------------------


class ProtocolError(Exception):
    """
    Base class for errors surfaced as a JSON-RPC ``error`` object.

    Attributes:
        code: JSON-RPC error code
        message: Human-readable description
        data: Optional diagnostic payload (omitted on the wire when blank)
    """

    code: int = ErrorCodes.INTERNAL_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None, data: Any = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class ParseError(ProtocolError):
    """The request body is not valid JSON."""

    code = ErrorCodes.PARSE_ERROR
    default_message = "Parse error"


class InvalidRequestError(ProtocolError):
    """The request body is not a usable JSON-RPC request."""

    code = ErrorCodes.INVALID_REQUEST
    default_message = "Invalid Request"


class MethodNotFoundError(ProtocolError):
    """The requested method is not in the routing table."""

    code = ErrorCodes.METHOD_NOT_FOUND
    default_message = "Method not found"

    def __init__(self, method: str):
        super().__init__(f"Method not found: {method}", data=method)
        self.method = method


class InvalidParamsError(ProtocolError):
    """Parameters of a recognised method are missing or malformed."""

    code = ErrorCodes.INVALID_PARAMS
    default_message = "Invalid params"


class InternalError(ProtocolError):
    """An unexpected fault while producing a built-in method's result."""

    code = ErrorCodes.INTERNAL_ERROR
    default_message = "Internal error"


# -- Tool-level ----------------------------------------------------------------


class ToolError(Exception):
    """Base class for failures a tool handler reports to the calling model."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ToolArgumentError(ToolError):
    """The tool was called with arguments it cannot work with."""


class ToolDomainError(ToolError):
    """A declared business failure inside the tool (not found, conflict, ...)."""


class OperationCancelledError(Exception):
    """Raised by a handler that observed its cancellation token."""

    def __init__(self, message: str = "Operation was cancelled"):
        super().__init__(message)
        self.message = message


class ConfigurationError(Exception):
    """Configuration file missing, unreadable or invalid."""


def format_error_payload(error: ProtocolError) -> Dict[str, Any]:
    """
    Build the JSON-RPC ``error`` member for a protocol error.

    ``data`` is left out when it is ``None`` or a blank string. Extremely long
    messages are truncated so one runaway exception text cannot bloat the
    response.
    """
    message = error.message
    if len(message) > MAX_ERROR_MESSAGE_LENGTH:
        message = message[: MAX_ERROR_MESSAGE_LENGTH - 3] + "..."

    payload: Dict[str, Any] = {"code": error.code, "message": message}
    data = error.data
    if data is not None and not (isinstance(data, str) and not data.strip()):
        payload["data"] = data
    return payload
