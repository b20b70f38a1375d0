"""MCP tool registry.

Public API:
- ToolRegistry.register(name, description, input_schema, handler, ...)
- ToolRegistry.tool(...): decorator form of ``register``
- ToolRegistry.get(name): case-insensitive lookup
- ToolRegistry.list_tools(): wire descriptors in registration order

A registry is meant to be built fresh for every request by a factory
function; nothing here is shared between requests.
"""

from __future__ import annotations

import inspect
import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, TypedDict, Union

from .outcome import CancellationToken
from .schema import SchemaBuilder

__all__ = ["Handler", "ToolAnnotations", "ToolDefinition", "ToolRegistry"]

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any], CancellationToken], Any]
SchemaSpec = Union[SchemaBuilder, Mapping[str, Any], None]


class ToolAnnotations(TypedDict, total=False):
    """Behaviour hints a client may show or use for approval decisions."""

    title: str
    readOnlyHint: bool
    destructiveHint: bool
    idempotentHint: bool
    openWorldHint: bool


def _resolve_schema(spec: SchemaSpec) -> Dict[str, Any]:
    if spec is None:
        return dict(SchemaBuilder().build())
    if isinstance(spec, SchemaBuilder):
        return dict(spec.build())
    if isinstance(spec, Mapping):
        return deepcopy(dict(spec))
    raise TypeError(f"Schema must be a SchemaBuilder or mapping, not {type(spec).__name__}")


@dataclass
class ToolDefinition:
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Handler
    title: Optional[str] = None
    output_schema: Optional[Dict[str, Any]] = None
    annotations: Optional[Dict[str, Any]] = None

    def to_descriptor(self) -> Dict[str, Any]:
        """Render the ``tools/list`` entry (handler excluded)."""
        descriptor: Dict[str, Any] = {"name": self.name}
        if self.title:
            descriptor["title"] = self.title
        descriptor["description"] = self.description
        # deepcopy so callers cannot mutate the registered schema
        descriptor["inputSchema"] = deepcopy(self.input_schema)
        if self.output_schema is not None:
            descriptor["outputSchema"] = deepcopy(self.output_schema)
        if self.annotations:
            descriptor["annotations"] = dict(self.annotations)
        return descriptor


class ToolRegistry:
    """Name to tool-definition mapping with case-insensitive lookup."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}

    @staticmethod
    def _key(name: str) -> str:
        return name.casefold()

    def register(
        self,
        name: str,
        description: str,
        input_schema: SchemaSpec = None,
        handler: Optional[Handler] = None,
        *,
        title: Optional[str] = None,
        output_schema: SchemaSpec = None,
        annotations: Optional[Mapping[str, Any]] = None,
    ) -> ToolDefinition:
        """Register a tool and return its definition.

        Registering a name that already exists (in any letter case) replaces
        the earlier definition; the tool keeps its original listing position.

        Raises:
            ValueError: name is empty
            TypeError: handler is not callable or a schema has the wrong type
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Tool name must be a non-empty string")
        if handler is None or not callable(handler):
            raise TypeError(f"Handler for tool '{name}' must be callable")

        definition = ToolDefinition(
            name=name,
            description=description or "",
            input_schema=_resolve_schema(input_schema),
            handler=handler,
            title=title,
            output_schema=None if output_schema is None else _resolve_schema(output_schema),
            annotations=dict(annotations) if annotations else None,
        )

        key = self._key(name)
        if key in self._tools:
            logger.debug("Replacing tool definition", extra={"tool": name})
        self._tools[key] = definition
        return definition

    def tool(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        input_schema: SchemaSpec = None,
        **kwargs: Any,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`register`.

        The function name and docstring are used when ``name`` or
        ``description`` are not given.

        Example:
            @registry.tool(input_schema=SchemaBuilder().string("message", "Text", required=True))
            def echo(arguments, cancellation):
                \"\"\"Echo the message back.\"\"\"
                return arguments["message"]
        """

        def decorator(func: Handler) -> Handler:
            self.register(
                name or func.__name__,
                description if description is not None else (inspect.getdoc(func) or ""),
                input_schema,
                func,
                **kwargs,
            )
            return func

        return decorator

    def get(self, name: Any) -> Optional[ToolDefinition]:
        if not isinstance(name, str):
            return None
        return self._tools.get(self._key(name))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(list(self._tools.values()))

    def names(self) -> List[str]:
        return [td.name for td in self._tools.values()]

    def list_tools(self) -> List[Dict[str, Any]]:
        """Return tool descriptors in registration order."""
        return [td.to_descriptor() for td in self._tools.values()]
