from __future__ import annotations

from typing import Any, Dict, Optional


def text_result(text: str) -> Dict[str, Any]:
    """Wrap text in the content payload shape tool results use."""

    return {"content": [{"type": "text", "text": text}]}


def result_text(result: Any) -> Optional[str]:
    if not isinstance(result, dict):
        return None
    content = result.get("content")
    if not content or not isinstance(content, list):
        return None
    first = content[0]
    if isinstance(first, dict) and isinstance(first.get("text"), str):
        return first["text"]
    return None


def has_content(result: Any) -> bool:
    return isinstance(result, dict) and bool(result.get("content"))


def is_error(result: Any) -> bool:
    return isinstance(result, dict) and ("error" in result or result.get("success") is False)
