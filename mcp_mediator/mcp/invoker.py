"""Error boundary around tool handlers.

Every handler failure is converted into a ``tools/call`` result with
``isError: true``. The only protocol error raised from here is
``InvalidParamsError`` for a tool name that is not registered, since there is
no handler that could report it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Dict, Optional

from ..core.logging_config import LogEventCallback, emit_event
from ..exceptions import InvalidParamsError, OperationCancelledError, ToolArgumentError, ToolDomainError
from ..outcome import CancellationToken, OutcomeKind, ToolOutcome
from ..tool_registry import ToolDefinition, ToolRegistry
from .content import ToolCallResult, error_result, format_tool_result
from .validation import validate_arguments

__all__ = ["ToolInvoker"]

logger = logging.getLogger(__name__)


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ToolInvoker:
    """Resolve a tool, run its handler safely and format the outcome."""

    def __init__(
        self,
        registry: ToolRegistry,
        log_event: Optional[LogEventCallback] = None,
        validate: bool = True,
    ) -> None:
        self.registry = registry
        self.log_event = log_event
        self.validate = validate

    def resolve(self, name: Any) -> ToolDefinition:
        definition = self.registry.get(name)
        if definition is None:
            raise InvalidParamsError(f"Unknown tool: {name}", data=name if isinstance(name, str) else None)
        return definition

    def invoke(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> ToolCallResult:
        """Call tool ``name`` and return its ``tools/call`` result.

        Raises:
            InvalidParamsError: ``name`` is not registered
        """
        definition = self.resolve(name)
        arguments = dict(arguments or {})
        token = cancellation or CancellationToken.none()

        outcome = self._run(definition, arguments, token)

        if outcome.kind is OutcomeKind.OK:
            try:
                return format_tool_result(outcome.value, structured=definition.output_schema is not None)
            except Exception as exc:
                logger.error("Tool result could not be formatted", exc_info=True, extra={"tool": definition.name})
                outcome = ToolOutcome.unexpected(f"result could not be serialized: {_describe(exc)}", exc)

        if outcome.kind is OutcomeKind.ARGUMENT_ERROR:
            emit_event(self.log_event, "mcp_tool_invalid_arguments",
                       {"tool": definition.name, "error": outcome.message})
            return error_result(f"Invalid arguments: {outcome.message}")

        if outcome.kind is OutcomeKind.DOMAIN_ERROR:
            emit_event(self.log_event, "mcp_tool_error",
                       {"tool": definition.name, "error": outcome.message})
            return error_result(f"Tool error: {outcome.message}")

        event = "mcp_tool_cancelled" if isinstance(outcome.error, OperationCancelledError) else "mcp_tool_failed"
        data: Dict[str, Any] = {"tool": definition.name, "error": outcome.message}
        if outcome.error is not None:
            data["error_type"] = type(outcome.error).__name__
        emit_event(self.log_event, event, data)
        return error_result(f"Tool execution failed: {outcome.message}")

    def _run(self, definition: ToolDefinition, arguments: Dict[str, Any], token: CancellationToken) -> ToolOutcome:
        if self.validate:
            problems = validate_arguments(definition.input_schema, arguments)
            if problems:
                return ToolOutcome.argument_error("; ".join(problems))

        try:
            token.raise_if_cancelled()
            value = definition.handler(arguments, token)
            if inspect.isawaitable(value):
                value = self._await(value)
        except ToolArgumentError as exc:
            return ToolOutcome.argument_error(exc.message)
        except ToolDomainError as exc:
            return ToolOutcome.domain_error(exc.message)
        except OperationCancelledError as exc:
            return ToolOutcome.unexpected(exc.message, exc)
        except Exception as exc:
            logger.error("Tool handler raised", exc_info=True, extra={"tool": definition.name})
            return ToolOutcome.unexpected(_describe(exc), exc)

        if isinstance(value, ToolOutcome):
            return value
        return ToolOutcome.ok(value)

    @staticmethod
    def _await(awaitable: Any) -> Any:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise RuntimeError(
                "async tool handler called from a running event loop; use McpMediator.handle_async"
            )

        async def _drive() -> Any:
            return await awaitable

        return asyncio.run(_drive())
