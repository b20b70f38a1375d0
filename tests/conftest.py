"""Shared pytest fixtures for mediator tests."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Tuple, Union

import pytest

from mcp_mediator.exceptions import ToolArgumentError, ToolDomainError
from mcp_mediator.mcp.content import image_content, text_content
from mcp_mediator.mcp.server import McpMediator
from mcp_mediator.outcome import ToolOutcome
from mcp_mediator.schema import SchemaBuilder
from mcp_mediator.tool_registry import ToolRegistry


def build_sample_registry() -> ToolRegistry:
    """Registry with one tool per handler behaviour the mediator must cope with."""
    registry = ToolRegistry()

    registry.register(
        "echo",
        "Echo the message back",
        SchemaBuilder().string("message", "Text to echo", required=True),
        lambda arguments, cancellation: arguments["message"],
        annotations={"readOnlyHint": True, "idempotentHint": True},
    )

    def lookup_user(arguments, cancellation):
        if arguments["user_id"] == "missing":
            raise ToolDomainError("User missing does not exist")
        if arguments["user_id"].startswith(" "):
            raise ToolArgumentError("user_id must not start with whitespace")
        return {"id": arguments["user_id"], "displayName": "Ada Lovelace", "active": True}

    registry.register(
        "lookup_user",
        "Look up a directory user",
        SchemaBuilder().string("user_id", "Directory id", required=True),
        lookup_user,
        title="Lookup user",
        output_schema=SchemaBuilder()
        .string("id", "Directory id", required=True)
        .string("displayName", "Display name")
        .boolean("active", "Account enabled"),
    )

    def explode(arguments, cancellation):
        raise RuntimeError("connection reset by peer")

    registry.register("explode", "Always fails unexpectedly", None, explode)

    registry.register(
        "outcome_tool",
        "Reports failures through explicit outcomes",
        SchemaBuilder().string("mode", "ok | argument | domain | unexpected", required=True),
        lambda arguments, cancellation: {
            "ok": ToolOutcome.ok({"done": True}),
            "argument": ToolOutcome.argument_error("mode rejected"),
            "domain": ToolOutcome.domain_error("case is closed"),
            "unexpected": ToolOutcome.unexpected("backend timed out"),
        }[arguments["mode"]],
    )

    registry.register(
        "snapshot",
        "Returns a pre-formed result",
        None,
        lambda arguments, cancellation: {
            "content": [text_content("chart"), image_content("iVBORw0KGgo=", "image/png")],
            "structuredContent": {"points": 3},
        },
    )
    return registry


@pytest.fixture
def sample_registry() -> ToolRegistry:
    return build_sample_registry()


@pytest.fixture
def events() -> List[Tuple[str, Dict[str, Any]]]:
    return []


@pytest.fixture
def mediator(events: List[Tuple[str, Dict[str, Any]]]) -> McpMediator:
    return McpMediator(build_sample_registry, log_event=lambda name, data: events.append((name, data)))


@pytest.fixture
def call(mediator: McpMediator) -> Callable[[Union[str, Dict[str, Any]]], Dict[str, Any]]:
    """Send a request (dict or raw text) through the mediator and decode the reply."""

    def _call(request: Union[str, Dict[str, Any]]) -> Dict[str, Any]:
        body = request if isinstance(request, str) else json.dumps(request)
        return json.loads(mediator.handle(body))

    return _call


@pytest.fixture
def registry_factory() -> Callable[[], ToolRegistry]:
    return build_sample_registry
