"""Drive a conversation until the model stops asking for tools."""
from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from anthropic import AsyncAnthropic

from bridge import ToolBridge
from config import AnthropicConfig, load_anthropic_config, load_bridge_config

logger = logging.getLogger(__name__)

LOOP_LIMIT_ERROR = "tool loop limit exceeded"


@dataclass
class ToolEvent:
    round: int
    tool_name: str
    raw_input: Any
    result: str
    is_error: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "tool": self.tool_name,
            "input": self.raw_input,
            "result": self.result,
            "is_error": self.is_error,
        }


@dataclass
class BridgeRunOptions:
    max_rounds: int = field(default_factory=lambda: load_bridge_config().max_rounds)
    system: Optional[str] = None


@dataclass
class BridgeRunResult:
    final_response: str
    conversation: List[Dict[str, Any]]
    rounds: int
    stopped_reason: str
    tool_events: List[ToolEvent] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "final_response": self.final_response,
            "rounds": self.rounds,
            "stopped_reason": self.stopped_reason,
            "error": self.error,
            "tool_events": [event.to_dict() for event in self.tool_events],
        }


class ToolBridgeRunner:
    """Query the model, fulfil its tool calls and feed the results back.

    Each model response is appended to the conversation before it is
    inspected. The loop ends on the first response without ``tool_use``
    blocks, or after ``max_rounds`` model queries.
    """

    def __init__(
        self,
        bridge: ToolBridge,
        options: Optional[BridgeRunOptions] = None,
        *,
        client: Any = None,
        config: Optional[AnthropicConfig] = None,
    ) -> None:
        self.bridge = bridge
        self.options = options or BridgeRunOptions()
        if self.options.max_rounds <= 0:
            raise ValueError("max_rounds must be positive")
        self.config = config or load_anthropic_config()
        self.client = client or AsyncAnthropic()

    async def run(
        self,
        prompt: str,
        *,
        conversation: Optional[List[Dict[str, Any]]] = None,
    ) -> BridgeRunResult:
        """Append *prompt* to *conversation* (mutated in place) and run the loop."""
        if not prompt.strip():
            raise ValueError("prompt must contain text")

        history = conversation if conversation is not None else []
        history.append({"role": "user", "content": [{"type": "text", "text": prompt.strip()}]})
        return await self.resume(history)

    async def resume(self, conversation: List[Dict[str, Any]]) -> BridgeRunResult:
        """Run the loop on a conversation whose last turn is already in place."""
        events: List[ToolEvent] = []
        final_response = ""

        for round_idx in range(1, self.options.max_rounds + 1):
            response = await self._query_model(conversation)
            blocks = _normalize_content(getattr(response, "content", None) or [])
            conversation.append({"role": "assistant", "content": blocks})
            final_response = _blocks_to_text(blocks)

            tool_uses = [block for block in blocks if block.get("type") == "tool_use"]
            if not tool_uses:
                return BridgeRunResult(
                    final_response=final_response,
                    conversation=conversation,
                    rounds=round_idx,
                    stopped_reason="completed",
                    tool_events=events,
                )

            results = await self.bridge.fulfill(blocks)
            for block, result in zip(tool_uses, results):
                events.append(
                    ToolEvent(
                        round=round_idx,
                        tool_name=str(block.get("name", "")),
                        raw_input=block.get("input", {}),
                        result=str(result.get("content", "")),
                        is_error=bool(result.get("is_error")),
                    )
                )
            conversation.append({"role": "user", "content": results})

        logger.warning("stopping after %d model rounds: %s", self.options.max_rounds, LOOP_LIMIT_ERROR)
        return BridgeRunResult(
            final_response=final_response,
            conversation=conversation,
            rounds=self.options.max_rounds,
            stopped_reason="max_rounds",
            tool_events=events,
            error=LOOP_LIMIT_ERROR,
        )

    async def _query_model(self, conversation: List[Dict[str, Any]]) -> Any:
        request: Dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "messages": conversation,
        }
        definitions = self.bridge.tool_definitions()
        if definitions:
            request["tools"] = definitions
        if self.options.system:
            request["system"] = self.options.system
        response = self.client.messages.create(**request)
        if inspect.isawaitable(response):
            response = await response
        return response


def _normalize_content(blocks: Iterable[Any]) -> List[Dict[str, Any]]:
    return [_normalize_block(block) for block in blocks]


def _normalize_block(block: Any) -> Dict[str, Any]:
    if isinstance(block, dict):
        return dict(block)
    btype = getattr(block, "type", None)
    if btype == "text":
        return {"type": "text", "text": getattr(block, "text", "")}
    if btype == "tool_use":
        return {
            "type": "tool_use",
            "id": getattr(block, "id", getattr(block, "tool_use_id", "")),
            "name": getattr(block, "name", ""),
            "input": getattr(block, "input", {}),
        }
    data = {"type": btype or "text"}
    for attr in ("id", "name", "text", "content", "input"):
        if hasattr(block, attr):
            data[attr] = getattr(block, attr)
    return data


def _blocks_to_text(blocks: Iterable[Dict[str, Any]]) -> str:
    texts = [block.get("text", "") for block in blocks if block.get("type") == "text"]
    return "\n".join(txt for txt in texts if txt).strip()


def format_result_json(result: BridgeRunResult) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)


__all__ = [
    "BridgeRunOptions",
    "BridgeRunResult",
    "LOOP_LIMIT_ERROR",
    "ToolBridgeRunner",
    "ToolEvent",
    "format_result_json",
]
