"""
Tool registry tests.

Acceptance criteria:
- list_tools() returns wire descriptors in registration order
- lookup is case-insensitive
- re-registering a name overwrites the earlier definition (last write wins)
"""

from __future__ import annotations

import pytest

from mcp_mediator.schema import SchemaBuilder
from mcp_mediator.tool_registry import ToolRegistry


def _noop(arguments, cancellation):
    return None


class TestToolRegistryRegistration:
    def test_descriptor_shape(self) -> None:
        registry = ToolRegistry()
        registry.register(
            "search_cases",
            "Search support cases",
            SchemaBuilder().string("query", "Text", required=True),
            _noop,
            title="Search cases",
            output_schema=SchemaBuilder().integer("count", "Hits", required=True),
            annotations={"readOnlyHint": True, "openWorldHint": True},
        )

        (descriptor,) = registry.list_tools()
        assert descriptor == {
            "name": "search_cases",
            "title": "Search cases",
            "description": "Search support cases",
            "inputSchema": {
                "type": "object",
                "properties": {"query": {"type": "string", "description": "Text"}},
                "required": ["query"],
            },
            "outputSchema": {
                "type": "object",
                "properties": {"count": {"type": "integer", "description": "Hits"}},
                "required": ["count"],
            },
            "annotations": {"readOnlyHint": True, "openWorldHint": True},
        }
        assert "handler" not in descriptor

    def test_optional_members_are_omitted(self) -> None:
        registry = ToolRegistry()
        registry.register("ping_backend", "Check the backend", None, _noop)

        (descriptor,) = registry.list_tools()
        assert descriptor == {
            "name": "ping_backend",
            "description": "Check the backend",
            "inputSchema": {"type": "object", "properties": {}},
        }

    def test_accepts_prebuilt_schema_mapping(self) -> None:
        registry = ToolRegistry()
        schema = {"type": "object", "properties": {"n": {"type": "integer"}}, "required": ["n"]}
        registry.register("square", "Square a number", schema, _noop)

        schema["required"].append("mutated")
        assert registry.get("square").input_schema["required"] == ["n"]

    def test_registration_order_is_preserved(self) -> None:
        registry = ToolRegistry()
        for name in ("zeta", "alpha", "mid"):
            registry.register(name, name, None, _noop)

        assert [t["name"] for t in registry.list_tools()] == ["zeta", "alpha", "mid"]

    def test_invalid_registrations(self) -> None:
        registry = ToolRegistry()
        with pytest.raises(ValueError):
            registry.register("  ", "blank", None, _noop)
        with pytest.raises(TypeError):
            registry.register("no_handler", "missing handler")
        with pytest.raises(TypeError):
            registry.register("bad_schema", "schema", ["not", "a", "schema"], _noop)  # type: ignore[arg-type]


class TestToolRegistryLookup:
    def test_lookup_is_case_insensitive(self) -> None:
        registry = ToolRegistry()
        registry.register("Get_Account", "Fetch account", None, _noop)

        assert registry.get("get_account") is registry.get("GET_ACCOUNT")
        assert "get_ACCOUNT" in registry
        assert registry.get("other") is None
        assert registry.get(None) is None

    def test_duplicate_registration_overwrites(self) -> None:
        registry = ToolRegistry()
        registry.register("echo", "first", None, lambda a, c: "first")
        registry.register("other", "other", None, _noop)
        registry.register("ECHO", "second", None, lambda a, c: "second")

        assert len(registry) == 2
        assert registry.names() == ["ECHO", "other"]
        definition = registry.get("echo")
        assert definition.description == "second"
        assert definition.handler({}, None) == "second"

    def test_decorator_registration_uses_name_and_docstring(self) -> None:
        registry = ToolRegistry()

        @registry.tool(input_schema=SchemaBuilder().string("message", "Text", required=True))
        def shout(arguments, cancellation):
            """Upper-case the message."""
            return arguments["message"].upper()

        definition = registry.get("shout")
        assert definition is not None
        assert definition.description == "Upper-case the message."
        assert definition.input_schema["required"] == ["message"]
        assert shout({"message": "hi"}, None) == "HI"

    def test_descriptors_do_not_share_schema_state(self) -> None:
        registry = ToolRegistry()
        registry.register("t", "t", SchemaBuilder().string("a", "a"), _noop)

        first = registry.list_tools()
        first[0]["inputSchema"]["properties"]["a"]["type"] = "integer"

        assert registry.list_tools()[0]["inputSchema"]["properties"]["a"]["type"] == "string"
