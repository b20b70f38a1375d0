"""Content formatter tests."""

from __future__ import annotations

import json
from dataclasses import dataclass

from pydantic import BaseModel

from mcp_mediator.mcp.content import (
    audio_content,
    error_result,
    format_tool_result,
    image_content,
    is_tool_call_result,
    resource_content,
    text_content,
)


class _Case(BaseModel):
    case_id: str
    status: str


@dataclass
class _Page:
    title: str
    views: int


class TestImplicitWrapping:
    def test_string_passes_verbatim(self) -> None:
        result = format_tool_result("plain answer")

        assert result == {"content": [{"type": "text", "text": "plain answer"}], "isError": False}

    def test_none_becomes_empty_object_text(self) -> None:
        assert format_tool_result(None)["content"][0]["text"] == "{}"

    def test_mapping_is_indented_json(self) -> None:
        value = {"name": "Zoë", "tags": ["a", "b"]}
        text = format_tool_result(value)["content"][0]["text"]

        assert text == json.dumps(value, indent=2, ensure_ascii=False)
        assert "Zoë" in text

    def test_list_is_indented_json(self) -> None:
        text = format_tool_result([1, 2])["content"][0]["text"]

        assert json.loads(text) == [1, 2]
        assert "\n" in text

    def test_pydantic_model_and_dataclass(self) -> None:
        model_text = format_tool_result(_Case(case_id="C-1", status="open"))["content"][0]["text"]
        dc_text = format_tool_result(_Page(title="Home", views=3))["content"][0]["text"]

        assert json.loads(model_text) == {"case_id": "C-1", "status": "open"}
        assert json.loads(dc_text) == {"title": "Home", "views": 3}

    def test_scalars_are_serialized_generically(self) -> None:
        assert format_tool_result(True)["content"][0]["text"] == "true"
        assert format_tool_result(42)["content"][0]["text"] == "42"
        assert format_tool_result(2.5)["content"][0]["text"] == "2.5"

    def test_structured_content_only_when_requested(self) -> None:
        value = {"count": 2}

        assert "structuredContent" not in format_tool_result(value)
        assert format_tool_result(value, structured=True)["structuredContent"] == {"count": 2}
        assert "structuredContent" not in format_tool_result("text", structured=True)


class TestPassThrough:
    def test_preformed_result_passes_through(self) -> None:
        preformed = {
            "content": [text_content("a"), image_content("AAAA", "image/png")],
            "structuredContent": {"k": 1},
        }

        result = format_tool_result(preformed)

        assert result["content"] == preformed["content"]
        assert result["isError"] is False
        assert result["structuredContent"] == {"k": 1}

    def test_preformed_error_flag_is_kept(self) -> None:
        result = format_tool_result({"content": [text_content("nope")], "isError": True})

        assert result["isError"] is True

    def test_shape_check(self) -> None:
        assert is_tool_call_result({"content": [{"type": "text", "text": "x"}]})
        assert not is_tool_call_result({"content": []})
        assert not is_tool_call_result({"content": [{"text": "untagged"}]})
        assert not is_tool_call_result({"content": "text"})
        assert not is_tool_call_result(["content"])

    def test_extra_members_pass_through(self) -> None:
        preformed = {
            "content": [text_content("Opening chat")],
            "_meta": {"ui": {"resourceUri": "ui://chat"}},
        }

        result = format_tool_result(preformed)

        assert result["_meta"] == {"ui": {"resourceUri": "ui://chat"}}
        assert result["isError"] is False
        assert "_meta" in preformed and "isError" not in preformed

    def test_empty_content_list_is_wrapped_instead(self) -> None:
        result = format_tool_result({"content": []})

        assert len(result["content"]) == 1
        assert json.loads(result["content"][0]["text"]) == {"content": []}


class TestContentItems:
    def test_constructors(self) -> None:
        assert audio_content("UklGR", "audio/wav") == {"type": "audio", "data": "UklGR", "mimeType": "audio/wav"}
        assert resource_content("file:///a.txt", text="hi", mime_type="text/plain") == {
            "type": "resource",
            "resource": {"uri": "file:///a.txt", "mimeType": "text/plain", "text": "hi"},
        }
        assert resource_content("file:///b.bin", blob="AAE=")["resource"]["blob"] == "AAE="

    def test_error_result(self) -> None:
        assert error_result("Tool error: boom") == {
            "content": [{"type": "text", "text": "Tool error: boom"}],
            "isError": True,
        }
