"""Normalise handler return values into the MCP ``tools/call`` result shape.

A value that already looks like a tool-call result passes through; anything
else is wrapped as a single text content item.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Dict, List, Mapping, Optional, TypedDict

from pydantic import BaseModel

__all__ = [
    "ContentItem",
    "ToolCallResult",
    "text_content",
    "image_content",
    "audio_content",
    "resource_content",
    "is_tool_call_result",
    "to_text",
    "format_tool_result",
    "error_result",
]


class ContentItem(TypedDict, total=False):
    type: str
    text: str
    data: str
    mimeType: str
    resource: Dict[str, Any]


class ToolCallResult(TypedDict, total=False):
    content: List[ContentItem]
    isError: bool
    structuredContent: Dict[str, Any]
    _meta: Dict[str, Any]


def text_content(text: str) -> ContentItem:
    return {"type": "text", "text": text}


def image_content(data: str, mime_type: str) -> ContentItem:
    """``data`` is base64-encoded image bytes."""
    return {"type": "image", "data": data, "mimeType": mime_type}


def audio_content(data: str, mime_type: str) -> ContentItem:
    """``data`` is base64-encoded audio bytes."""
    return {"type": "audio", "data": data, "mimeType": mime_type}


def resource_content(
    uri: str,
    *,
    text: Optional[str] = None,
    blob: Optional[str] = None,
    mime_type: Optional[str] = None,
) -> ContentItem:
    """Embedded resource item carrying either ``text`` or base64 ``blob``."""
    resource: Dict[str, Any] = {"uri": uri}
    if mime_type is not None:
        resource["mimeType"] = mime_type
    if blob is not None:
        resource["blob"] = blob
    else:
        resource["text"] = text or ""
    return {"type": "resource", "resource": resource}


def is_tool_call_result(value: Any) -> bool:
    """True when ``value`` has a non-empty ``content`` list of tagged items."""
    if not isinstance(value, Mapping):
        return False
    content = value.get("content")
    if not isinstance(content, list) or not content:
        return False
    first = content[0]
    return isinstance(first, Mapping) and "type" in first


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def to_text(value: Any) -> str:
    """Render a handler value as the text of one content item."""
    if value is None:
        return "{}"
    if isinstance(value, str):
        return value
    value = _jsonable(value)
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return str(value)


def format_tool_result(value: Any, structured: bool = False) -> ToolCallResult:
    """Build a success ``ToolCallResult`` from a handler's return value.

    Args:
        value: Whatever the handler returned
        structured: Also expose a mapping value as ``structuredContent``
            (used for tools that declare an output schema)
    """
    if is_tool_call_result(value):
        # Members other than content/isError (``_meta``, structuredContent) are kept as-is.
        passthrough = dict(value)
        passthrough["content"] = list(value["content"])
        passthrough["isError"] = bool(value.get("isError", False))
        return passthrough  # type: ignore[return-value]

    result: ToolCallResult = {"content": [text_content(to_text(value))], "isError": False}
    if structured:
        plain = _jsonable(value)
        if isinstance(plain, Mapping):
            result["structuredContent"] = dict(plain)
    return result


def error_result(text: str) -> ToolCallResult:
    """Tool-level failure: a result the calling model can read, not a protocol error."""
    return {"content": [text_content(text)], "isError": True}
