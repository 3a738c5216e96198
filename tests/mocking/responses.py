"""Content blocks and message objects shaped like Anthropic Messages API replies."""
from __future__ import annotations

import copy
import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

_message_ids = itertools.count(1)


def text_block(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


def tool_use_block(name: str, input_payload: Mapping[str, Any], *, tool_use_id: str) -> Dict[str, Any]:
    return {"type": "tool_use", "id": tool_use_id, "name": name, "input": dict(input_payload)}


def tool_result_block(tool_use_id: str, content: str, *, is_error: bool = False) -> Dict[str, Any]:
    """The block the bridge feeds back for one ``tool_use``."""
    return {"type": "tool_result", "tool_use_id": tool_use_id, "content": content, "is_error": is_error}


@dataclass
class MockAnthropicResponse:
    """Assistant message as returned by ``messages.create``.

    The runner only reads ``content``; ``stop_reason`` is kept consistent with
    it so logs look like the real thing.
    """

    content: List[Dict[str, Any]] = field(default_factory=list)
    id: str = field(default_factory=lambda: f"msg_mock_{next(_message_ids)}")
    model: str = "claude-mock"
    role: str = "assistant"
    stop_reason: str = "end_turn"

    @classmethod
    def from_blocks(cls, blocks: Sequence[Mapping[str, Any]]) -> "MockAnthropicResponse":
        content = [dict(block) for block in blocks]
        wants_tools = any(block.get("type") == "tool_use" for block in content)
        return cls(content=content, stop_reason="tool_use" if wants_tools else "end_turn")

    def clone(self) -> "MockAnthropicResponse":
        return MockAnthropicResponse(
            content=copy.deepcopy(self.content),
            id=self.id,
            model=self.model,
            role=self.role,
            stop_reason=self.stop_reason,
        )


__all__ = ["MockAnthropicResponse", "text_block", "tool_result_block", "tool_use_block"]
