"""JSON-RPC request envelope parsing.

Only the structure needed for routing is checked here; parameter validation
belongs to the dispatcher and the tool invoker.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import InvalidRequestError, ParseError

__all__ = ["RequestEnvelope", "parse_request", "envelope_from_mapping"]


class RequestEnvelope(BaseModel):
    """Lightweight view of an inbound JSON-RPC request.

    Unknown members are ignored. ``id`` may be any JSON value; a missing id
    reads as ``None`` and is echoed back as ``null``.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    jsonrpc: str = "2.0"
    id: Any = None
    method: str = ""
    params: Any = Field(default=None)

    @field_validator("jsonrpc", mode="before")
    @classmethod
    def _coerce_tag(cls, v: Any) -> str:
        return "2.0" if v is None else str(v)

    @field_validator("method", mode="before")
    @classmethod
    def _coerce_method(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else json.dumps(v)

    def params_object(self) -> Dict[str, Any]:
        """``params`` as a dict; anything that is not an object reads as empty."""
        return dict(self.params) if isinstance(self.params, dict) else {}


def envelope_from_mapping(message: Mapping[str, Any]) -> RequestEnvelope:
    """Build an envelope from an already-decoded JSON object."""
    if not isinstance(message, Mapping):
        raise InvalidRequestError("Request body must be a JSON object")
    return RequestEnvelope.model_validate(dict(message))


def parse_request(body: Optional[Union[str, bytes, bytearray]]) -> RequestEnvelope:
    """Parse a raw request body into a ``RequestEnvelope``.

    Raises:
        InvalidRequestError: empty body, or JSON that is not an object
        ParseError: undecodable bytes or invalid JSON
    """
    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Parse error: request body is not valid UTF-8 ({exc.reason})") from exc

    if body is None or not body.strip():
        raise InvalidRequestError("Empty request body")

    try:
        decoded = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Parse error: {exc.msg} at line {exc.lineno} column {exc.colno}") from exc
    except RecursionError as exc:
        raise ParseError("Parse error: request body is nested too deeply") from exc
    except ValueError as exc:
        raise ParseError(f"Parse error: {exc}") from exc

    return envelope_from_mapping(decoded)
