"""JSON-RPC response envelopes."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from ..core.logging_config import SafeJSONEncoder
from ..exceptions import ProtocolError, format_error_payload

__all__ = ["JSONRPC_VERSION", "success_response", "error_response", "render"]

JSONRPC_VERSION = "2.0"


def success_response(request_id: Any, result: Mapping[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": dict(result)}


def error_response(request_id: Any, error: ProtocolError) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": format_error_payload(error)}


def render(response: Mapping[str, Any], indent: Optional[int] = None) -> str:
    """Serialize a response envelope to the outgoing body text."""
    separators = None if indent else (",", ":")
    return json.dumps(response, cls=SafeJSONEncoder, ensure_ascii=False, indent=indent, separators=separators)
