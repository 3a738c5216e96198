"""Short one-line renderings of tool calls and results for log output."""
from __future__ import annotations

from typing import Any, Mapping

# Path-like arguments first: they are what the sanitizer rewrites.
_ARGUMENT_KEYS: tuple[str, ...] = ("repo_path", "path", "source", "destination", "q", "message", "revision")

RESULT_PREVIEW_LIMIT = 400
ARGUMENT_PREVIEW_LIMIT = 60


def shorten(value: Any, limit: int) -> str:
    text = str(value)
    if len(text) <= limit:
        return text
    if limit < 4:
        return text[:limit]
    return text[: limit - 3] + "..."


def summarize_tool_call(name: str, arguments: Mapping[str, Any] | None) -> str:
    """``git_status(repo_path=/sandbox/repos/x)`` style summary of one call."""
    shown = []
    for key in _ARGUMENT_KEYS:
        value = (arguments or {}).get(key)
        if isinstance(value, (str, int, float)) and value != "":
            shown.append(f"{key}={shorten(value, ARGUMENT_PREVIEW_LIMIT)}")
    hidden = len(arguments or {}) - len(shown)
    if hidden > 0:
        shown.append(f"+{hidden} more")
    return f"{name or 'tool'}({', '.join(shown)})"


def preview_result(text: str) -> str:
    return shorten(text or "", RESULT_PREVIEW_LIMIT)


__all__ = ["preview_result", "shorten", "summarize_tool_call"]
