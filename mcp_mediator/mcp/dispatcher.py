"""JSON-RPC method dispatch for the MCP mediator.

Every request ends in exactly one response envelope, notifications included,
because the host always needs a body to send back.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from ..config import McpConfig
from ..core.logging_config import LogEventCallback, emit_event
from ..exceptions import InternalError, InvalidParamsError, MethodNotFoundError, ProtocolError
from ..outcome import CancellationToken
from ..tool_registry import ToolRegistry
from .envelope import RequestEnvelope
from .invoker import ToolInvoker
from .serializer import error_response, success_response

__all__ = ["MethodDispatcher", "ROUTED_METHODS", "ACKNOWLEDGED_METHODS"]

logger = logging.getLogger(__name__)

MethodHandler = Callable[[Dict[str, Any], CancellationToken], Dict[str, Any]]

# Methods answered with an empty result object.
ACKNOWLEDGED_METHODS: Tuple[str, ...] = (
    "initialized",
    "notifications/initialized",
    "notifications/cancelled",
    "notifications/roots/list_changed",
    "ping",
    "logging/setLevel",
)

ROUTED_METHODS: Tuple[str, ...] = ACKNOWLEDGED_METHODS + (
    "initialize",
    "tools/list",
    "tools/call",
    "resources/list",
    "resources/templates/list",
    "resources/read",
    "prompts/list",
    "prompts/get",
    "completion/complete",
)


class MethodDispatcher:
    """Route a parsed request to its built-in behaviour or to a tool."""

    def __init__(
        self,
        registry: ToolRegistry,
        config: Optional[McpConfig] = None,
        log_event: Optional[LogEventCallback] = None,
        validate_arguments: bool = True,
    ) -> None:
        self.registry = registry
        self.config = config or McpConfig()
        self.log_event = log_event
        self.invoker = ToolInvoker(registry, log_event=log_event, validate=validate_arguments)
        self._routes = self._build_routes()

    def _build_routes(self) -> Dict[str, MethodHandler]:
        routes: Dict[str, MethodHandler] = {name: self._acknowledge for name in ACKNOWLEDGED_METHODS}
        routes.update({
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "resources/list": lambda params, token: {"resources": []},
            "resources/templates/list": lambda params, token: {"resourceTemplates": []},
            "resources/read": self._resources_read,
            "prompts/list": lambda params, token: {"prompts": []},
            "prompts/get": self._prompts_get,
            "completion/complete": lambda params, token: {
                "completion": {"values": [], "total": 0, "hasMore": False}
            },
        })

        missing = set(ROUTED_METHODS) - set(routes)
        extra = set(routes) - set(ROUTED_METHODS)
        if missing or extra:
            raise RuntimeError(f"Routing table mismatch: missing={sorted(missing)} extra={sorted(extra)}")
        return routes

    def is_routed(self, method: str) -> bool:
        return method in self._routes

    def dispatch(self, request: RequestEnvelope, cancellation: Optional[CancellationToken] = None) -> Dict[str, Any]:
        """Produce the response envelope for ``request``."""
        handler = self._routes.get(request.method)
        if handler is None:
            return error_response(request.id, MethodNotFoundError(request.method))

        token = cancellation or CancellationToken.none()
        try:
            result = handler(request.params_object(), token)
        except ProtocolError as exc:
            return error_response(request.id, exc)
        except Exception as exc:
            logger.error("Unhandled error while dispatching", exc_info=True, extra={"method": request.method})
            emit_event(self.log_event, "mcp_internal_error",
                       {"method": request.method, "error": str(exc), "error_type": type(exc).__name__})
            return error_response(request.id, InternalError(f"Internal error: {exc}"))

        return success_response(request.id, result)

    # -- Built-in methods ------------------------------------------------------

    @staticmethod
    def _acknowledge(params: Dict[str, Any], token: CancellationToken) -> Dict[str, Any]:
        return {}

    def _initialize(self, params: Dict[str, Any], token: CancellationToken) -> Dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if isinstance(requested, str) and requested.strip() else self.config.protocol_version

        server_info: Dict[str, Any] = {"name": self.config.name, "version": self.config.version}
        if self.config.title:
            server_info["title"] = self.config.title

        result: Dict[str, Any] = {
            "protocolVersion": version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": server_info,
        }
        if self.config.instructions:
            result["instructions"] = self.config.instructions
        return result

    def _tools_list(self, params: Dict[str, Any], token: CancellationToken) -> Dict[str, Any]:
        # ``cursor`` is accepted but the list is always complete.
        return {"tools": self.registry.list_tools()}

    def _tools_call(self, params: Dict[str, Any], token: CancellationToken) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidParamsError("Missing required parameter: name")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise InvalidParamsError("Parameter 'arguments' must be an object")

        emit_event(self.log_event, "mcp_tool_invoked", {"tool": name})
        return dict(self.invoker.invoke(name, arguments, token))

    @staticmethod
    def _resources_read(params: Dict[str, Any], token: CancellationToken) -> Dict[str, Any]:
        uri = params.get("uri")
        raise InvalidParamsError(f"Resource not found: {uri}", data=uri if isinstance(uri, str) else None)

    @staticmethod
    def _prompts_get(params: Dict[str, Any], token: CancellationToken) -> Dict[str, Any]:
        name = params.get("name")
        raise InvalidParamsError(f"Prompt not found: {name}", data=name if isinstance(name, str) else None)
