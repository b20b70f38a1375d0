"""Request-scoped MCP mediator.

``McpMediator`` turns one raw request body into one raw response body. It
builds a fresh ``ToolRegistry`` from the supplied factory for every request,
so no state survives between calls.

Example:
    def build_registry() -> ToolRegistry:
        registry = ToolRegistry()
        registry.register(
            "echo", "Echo the message back",
            SchemaBuilder().string("message", "Text to echo", required=True),
            lambda arguments, cancellation: arguments["message"],
        )
        return registry

    mediator = McpMediator(build_registry)
    body = mediator.handle('{"jsonrpc":"2.0","id":1,"method":"ping"}')
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..config import McpConfig
from ..core.logging_config import LogEventCallback, PerformanceLogger, emit_event
from ..exceptions import InternalError, ProtocolError, generate_request_id
from ..outcome import CancellationToken
from ..tool_registry import ToolRegistry
from .dispatcher import MethodDispatcher
from .envelope import RequestEnvelope, envelope_from_mapping, parse_request
from .serializer import error_response, render

__all__ = ["McpMediator", "RegistryFactory"]

logger = logging.getLogger(__name__)

RegistryFactory = Callable[[], ToolRegistry]
Body = Union[str, bytes, bytearray, None]


class McpMediator:
    """Raw body in, raw body out."""

    def __init__(
        self,
        registry_factory: RegistryFactory,
        config: Optional[McpConfig] = None,
        log_event: Optional[LogEventCallback] = None,
        validate_arguments: bool = True,
    ) -> None:
        self.registry_factory = registry_factory
        self.config = config or McpConfig()
        self.log_event = log_event
        self.validate_arguments = validate_arguments

    def handle(self, body: Body, cancellation: Optional[CancellationToken] = None) -> str:
        """Mediate one request and return the serialized response."""
        response = self.handle_raw(body, cancellation)
        try:
            return render(response)
        except Exception as exc:
            # e.g. a pre-formed tool result holding values JSON cannot encode
            logger.error("Response could not be serialized", exc_info=True)
            return render(error_response(response.get("id"), InternalError(f"Internal error: {exc}")))

    def handle_raw(self, body: Body, cancellation: Optional[CancellationToken] = None) -> Dict[str, Any]:
        """Like :meth:`handle` but return the response as a dict."""
        correlation_id = generate_request_id("mcp")
        try:
            request = parse_request(body)
        except ProtocolError as exc:
            emit_event(self.log_event, "mcp_request_rejected",
                       {"correlation_id": correlation_id, "code": exc.code, "error": exc.message})
            return error_response(None, exc)
        except Exception as exc:
            logger.error("Request body could not be read", exc_info=True)
            return error_response(None, InternalError(f"Internal error: {exc}"))
        return self._dispatch(request, cancellation, correlation_id)

    def handle_message(
        self, message: Mapping[str, Any], cancellation: Optional[CancellationToken] = None
    ) -> Dict[str, Any]:
        """Mediate an already-decoded JSON object."""
        correlation_id = generate_request_id("mcp")
        try:
            request = envelope_from_mapping(message)
        except ProtocolError as exc:
            return error_response(None, exc)
        return self._dispatch(request, cancellation, correlation_id)

    async def handle_async(self, body: Body, cancellation: Optional[CancellationToken] = None) -> str:
        """Run :meth:`handle` on a worker thread.

        If the awaiting task is cancelled the request's token is cancelled too,
        so a handler polling it can stop early.
        """
        token = cancellation or CancellationToken()
        try:
            return await asyncio.to_thread(self.handle, body, token)
        except asyncio.CancelledError:
            token.cancel("Request was cancelled by the host")
            raise

    def _dispatch(
        self, request: RequestEnvelope, cancellation: Optional[CancellationToken], correlation_id: str
    ) -> Dict[str, Any]:
        emit_event(self.log_event, "mcp_request_received",
                   {"correlation_id": correlation_id, "method": request.method, "id": request.id})

        with PerformanceLogger(logger, "mcp request", method=request.method, correlation_id=correlation_id):
            try:
                registry = self.registry_factory()
            except Exception as exc:
                logger.error("Tool registry factory failed", exc_info=True)
                emit_event(self.log_event, "mcp_internal_error",
                           {"correlation_id": correlation_id, "error": str(exc), "error_type": type(exc).__name__})
                return error_response(request.id, InternalError(f"Internal error: {exc}"))

            dispatcher = MethodDispatcher(
                registry,
                config=self.config,
                log_event=self.log_event,
                validate_arguments=self.validate_arguments,
            )
            return dispatcher.dispatch(request, cancellation)
