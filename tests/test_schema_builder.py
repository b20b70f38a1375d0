"""
Schema builder tests.

Acceptance criteria:
- build() yields {type: object, properties, required?} with required omitted when empty
- every field method returns a new builder and leaves the original untouched
- nested objects and arrays carry their own schemas
"""

from __future__ import annotations

import pytest

from mcp_mediator.schema import SchemaBuilder


class TestSchemaBuilderBasics:
    def test_empty_builder_builds_object_without_required(self) -> None:
        schema = SchemaBuilder().build()

        assert schema == {"type": "object", "properties": {}}
        assert "required" not in schema

    def test_primitive_fields_with_constraints(self) -> None:
        schema = (
            SchemaBuilder()
            .string("query", "Search text", required=True)
            .string("since", "Lower bound", format="date-time")
            .string("order", "Sort order", enum=["asc", "desc"], default="asc")
            .integer("top_k", "Number of hits", default=5)
            .number("min_score", "Score threshold")
            .boolean("include_archived", "Search archive too", default=False)
            .build()
        )

        props = schema["properties"]
        assert list(props) == ["query", "since", "order", "top_k", "min_score", "include_archived"]
        assert props["query"] == {"type": "string", "description": "Search text"}
        assert props["since"]["format"] == "date-time"
        assert props["order"]["enum"] == ["asc", "desc"]
        assert props["order"]["default"] == "asc"
        assert props["top_k"] == {"type": "integer", "description": "Number of hits", "default": 5}
        assert props["min_score"]["type"] == "number"
        assert props["include_archived"]["default"] is False
        assert schema["required"] == ["query"]

    def test_builder_is_immutable(self) -> None:
        base = SchemaBuilder().string("a", "first")
        extended = base.integer("b", "second", required=True)

        assert list(base.build()["properties"]) == ["a"]
        assert "required" not in base.build()
        assert list(extended.build()["properties"]) == ["a", "b"]

    def test_readding_property_replaces_it_in_place(self) -> None:
        schema = (
            SchemaBuilder()
            .string("a", "first", required=True)
            .string("b", "second")
            .integer("a", "first again")
            .build()
        )

        assert list(schema["properties"]) == ["a", "b"]
        assert schema["properties"]["a"]["type"] == "integer"
        assert "required" not in schema

    def test_required_is_subset_of_properties(self) -> None:
        schema = (
            SchemaBuilder()
            .string("x", "x", required=True)
            .object("nested", "n", SchemaBuilder().string("y", "y", required=True), required=True)
            .build()
        )

        assert set(schema["required"]) <= set(schema["properties"])
        nested = schema["properties"]["nested"]
        assert set(nested["required"]) <= set(nested["properties"])

    def test_empty_name_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            SchemaBuilder().string("", "nameless")


class TestSchemaBuilderComposite:
    def test_array_of_primitive_items(self) -> None:
        schema = SchemaBuilder().array("tags", "Tags", items="string").build()

        assert schema["properties"]["tags"] == {
            "type": "array",
            "description": "Tags",
            "items": {"type": "string"},
        }

    def test_array_of_objects_from_builder(self) -> None:
        item = SchemaBuilder().string("name", "Product name", required=True).number("price", "Price")
        schema = SchemaBuilder().array("products", "Products", items=item, required=True).build()

        items = schema["properties"]["products"]["items"]
        assert items["type"] == "object"
        assert items["required"] == ["name"]
        assert schema["required"] == ["products"]

    def test_unknown_item_type_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            SchemaBuilder().array("x", "x", items="datetime")

    def test_nested_object(self) -> None:
        address = SchemaBuilder().string("city", "City", required=True).string("zip", "Postal code")
        schema = SchemaBuilder().object("address", "Postal address", address).build()

        node = schema["properties"]["address"]
        assert node["type"] == "object"
        assert node["description"] == "Postal address"
        assert list(node["properties"]) == ["city", "zip"]
        assert node["required"] == ["city"]

    def test_object_without_builder_has_empty_properties(self) -> None:
        node = SchemaBuilder().object("card", "Card payload").build()["properties"]["card"]

        assert node == {"type": "object", "description": "Card payload", "properties": {}}

    def test_build_is_deterministic_and_returns_copies(self) -> None:
        builder = SchemaBuilder().string("q", "Query", required=True).array("tags", "Tags")

        first = builder.build()
        first["properties"]["q"]["description"] = "mutated"
        first["required"].append("tags")

        assert builder.build() == SchemaBuilder().string("q", "Query", required=True).array("tags", "Tags").build()
        assert builder.build()["properties"]["q"]["description"] == "Query"
        assert builder.build()["required"] == ["q"]
