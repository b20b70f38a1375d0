"""Light argument validation against a tool's input schema.

Checks required members, primitive types, enum membership, item types of
arrays and nested objects. Extra arguments are accepted; handlers stay
responsible for anything beyond this.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

__all__ = ["validate_arguments"]


def _matches_type(value: Any, type_: str) -> bool:
    if type_ == "string":
        return isinstance(value, str)
    if type_ == "integer":
        if isinstance(value, bool):
            return False
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    if type_ == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if type_ == "boolean":
        return isinstance(value, bool)
    if type_ == "array":
        return isinstance(value, list)
    if type_ == "object":
        return isinstance(value, dict)
    # Unknown or absent type: nothing to check
    return True


def _check_node(path: str, value: Any, node: Mapping[str, Any], errors: List[str]) -> None:
    type_ = node.get("type")
    if isinstance(type_, str) and not _matches_type(value, type_):
        errors.append(f"Argument '{path}' must be of type {type_}")
        return

    enum = node.get("enum")
    if isinstance(enum, list) and value not in enum:
        errors.append(f"Argument '{path}' must be one of {enum}")

    if type_ == "array":
        items = node.get("items")
        if isinstance(items, Mapping):
            for index, item in enumerate(value):
                _check_node(f"{path}[{index}]", item, items, errors)
    elif type_ == "object" and isinstance(node.get("properties"), Mapping):
        _check_object(value, node, errors, prefix=f"{path}.")


def _check_object(arguments: Dict[str, Any], schema: Mapping[str, Any], errors: List[str], prefix: str = "") -> None:
    properties = schema.get("properties") or {}
    for name in schema.get("required") or []:
        if arguments.get(name) is None:
            errors.append(f"Missing required argument: {prefix}{name}")

    for name, node in properties.items():
        if name not in arguments or arguments[name] is None:
            continue
        if isinstance(node, Mapping):
            _check_node(f"{prefix}{name}", arguments[name], node, errors)


def validate_arguments(schema: Mapping[str, Any], arguments: Dict[str, Any]) -> List[str]:
    """Return a list of problems; an empty list means the arguments fit."""
    errors: List[str] = []
    _check_object(arguments, schema, errors)
    return errors
