"""JSON-Schema builder for tool input and output descriptors.

``SchemaBuilder`` is an immutable value: every field method returns a new
builder and ``build()`` is the only way to get a schema out of it.

Example:
    >>> schema = (
    ...     SchemaBuilder()
    ...     .string("query", "Search text", required=True)
    ...     .integer("top_k", "Number of hits", default=5)
    ...     .array("tags", "Restrict to tags", items="string")
    ...     .build()
    ... )
    >>> schema["required"]
    ['query']
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, TypedDict, Union

__all__ = ["SchemaBuilder", "SchemaNode", "ObjectSchema", "PRIMITIVE_TYPES", "SCHEMA_TYPES"]

PRIMITIVE_TYPES: Tuple[str, ...] = ("string", "integer", "number", "boolean")
SCHEMA_TYPES: Tuple[str, ...] = PRIMITIVE_TYPES + ("array", "object")


class SchemaNode(TypedDict, total=False):
    type: str
    description: str
    format: str
    enum: List[Any]
    default: Any
    items: Dict[str, Any]
    properties: Dict[str, Any]
    required: List[str]


class ObjectSchema(TypedDict, total=False):
    type: str
    properties: Dict[str, SchemaNode]
    required: List[str]


ItemSpec = Union[str, "SchemaBuilder", Mapping[str, Any]]


def _field(
    type_: str,
    description: str,
    *,
    format: Optional[str] = None,
    enum: Optional[Sequence[Any]] = None,
    default: Any = None,
) -> SchemaNode:
    node: SchemaNode = {"type": type_, "description": description}
    if format is not None:
        node["format"] = format
    if enum is not None:
        node["enum"] = list(enum)
    if default is not None:
        node["default"] = default
    return node


def _item_schema(items: ItemSpec) -> Dict[str, Any]:
    if isinstance(items, SchemaBuilder):
        return dict(items.build())
    if isinstance(items, str):
        if items not in SCHEMA_TYPES:
            raise ValueError(f"Unsupported item type '{items}'. Valid types: {list(SCHEMA_TYPES)}")
        if items == "object":
            return {"type": "object", "properties": {}}
        if items == "array":
            raise ValueError("Nested arrays need an explicit item schema mapping")
        return {"type": items}
    if isinstance(items, Mapping):
        return deepcopy(dict(items))
    raise TypeError(f"items must be a type name, SchemaBuilder or mapping, not {type(items).__name__}")


@dataclass(frozen=True)
class SchemaBuilder:
    """Immutable, fluent builder of an object schema."""

    properties: Tuple[Tuple[str, SchemaNode], ...] = ()
    required_names: Tuple[str, ...] = ()

    def _with(self, name: str, node: SchemaNode, required: bool) -> "SchemaBuilder":
        if not isinstance(name, str) or not name:
            raise ValueError("Property name must be a non-empty string")

        # Re-adding a property replaces it in place.
        existing = [n for n, _ in self.properties]
        if name in existing:
            props = tuple((n, node if n == name else v) for n, v in self.properties)
        else:
            props = self.properties + ((name, node),)

        req = tuple(r for r in self.required_names if r != name)
        if required:
            req = req + (name,)
        return replace(self, properties=props, required_names=req)

    def string(
        self,
        name: str,
        description: str,
        required: bool = False,
        *,
        format: Optional[str] = None,
        enum: Optional[Sequence[str]] = None,
        default: Optional[str] = None,
    ) -> "SchemaBuilder":
        return self._with(name, _field("string", description, format=format, enum=enum, default=default), required)

    def integer(
        self,
        name: str,
        description: str,
        required: bool = False,
        *,
        enum: Optional[Sequence[int]] = None,
        default: Optional[int] = None,
    ) -> "SchemaBuilder":
        return self._with(name, _field("integer", description, enum=enum, default=default), required)

    def number(
        self,
        name: str,
        description: str,
        required: bool = False,
        *,
        enum: Optional[Sequence[float]] = None,
        default: Optional[float] = None,
    ) -> "SchemaBuilder":
        return self._with(name, _field("number", description, enum=enum, default=default), required)

    def boolean(
        self,
        name: str,
        description: str,
        required: bool = False,
        *,
        default: Optional[bool] = None,
    ) -> "SchemaBuilder":
        return self._with(name, _field("boolean", description, default=default), required)

    def array(
        self,
        name: str,
        description: str,
        items: ItemSpec = "string",
        required: bool = False,
    ) -> "SchemaBuilder":
        node = _field("array", description)
        node["items"] = _item_schema(items)
        return self._with(name, node, required)

    def object(
        self,
        name: str,
        description: str,
        builder: Optional["SchemaBuilder"] = None,
        required: bool = False,
    ) -> "SchemaBuilder":
        nested = (builder or SchemaBuilder()).build()
        node: SchemaNode = {"type": "object", "description": description}
        node.update(nested)  # type: ignore[typeddict-item]
        node["type"] = "object"
        return self._with(name, node, required)

    def build(self) -> ObjectSchema:
        """Return the finished ``{type: object, properties, required?}`` schema.

        The result is a fresh copy; mutating it does not affect the builder.
        """
        schema: ObjectSchema = {
            "type": "object",
            "properties": {name: deepcopy(node) for name, node in self.properties},
        }
        if self.required_names:
            schema["required"] = list(self.required_names)
        return schema
