"""Tool routing: translate ``tool_use`` blocks into provider calls."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from config import SandboxConfig
from errors import RoutingError, ToolError
from session.state import SessionState
from .catalog import RouteEntry, ToolCatalog
from .sanitizer import sanitize_arguments
from .tool_summary import preview_result, summarize_tool_call

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """Represents a parsed tool call emitted by the model."""

    tool_name: str
    call_id: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolOutput:
    """Result of one tool call, already flattened to text."""

    content: str
    success: bool


@dataclass
class PreparedCall:
    """A call that has been routed and sanitized but not yet dispatched."""

    call: ToolCall
    route: Optional[RouteEntry] = None
    arguments: Dict[str, Any] = field(default_factory=dict)
    error: Optional[ToolError] = None


class ToolRouter:
    """Routes tool calls through a catalog and returns ``tool_result`` blocks."""

    def __init__(self, catalog: ToolCatalog, sandbox: SandboxConfig) -> None:
        self._catalog = catalog
        self._sandbox = sandbox

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    @staticmethod
    def build_tool_call(item: Mapping[str, Any]) -> Optional[ToolCall]:
        if item.get("type") != "tool_use":
            return None

        arguments = item.get("input", {})
        if not isinstance(arguments, dict):
            arguments = {}
        return ToolCall(
            tool_name=str(item.get("name", "")),
            call_id=str(item.get("id", "")),
            arguments=dict(arguments),
        )

    def prepare(self, call: ToolCall, state: SessionState) -> PreparedCall:
        """Resolve the route and rewrite the arguments of *call*.

        Reads and writes ``state``; callers must not run two prepares at once.
        """
        route = self._catalog.route(call.tool_name)
        if route is None:
            return PreparedCall(call=call, error=RoutingError(call.tool_name))
        try:
            arguments = sanitize_arguments(
                call.tool_name,
                call.arguments,
                state,
                route.sanitizer,
                self._sandbox,
            )
        except ToolError as exc:
            return PreparedCall(call=call, route=route, error=exc)
        return PreparedCall(call=call, route=route, arguments=arguments)

    async def execute(self, prepared: PreparedCall) -> Dict[str, Any]:
        output = await self._execute(prepared)
        return {
            "type": "tool_result",
            "tool_use_id": prepared.call.call_id,
            "content": output.content,
            "is_error": not output.success,
        }

    async def dispatch(self, call: ToolCall, state: SessionState) -> Dict[str, Any]:
        return await self.execute(self.prepare(call, state))

    async def _execute(self, prepared: PreparedCall) -> ToolOutput:
        name = prepared.call.tool_name
        if isinstance(prepared.error, RoutingError):
            logger.warning("%s", prepared.error.message)
            return ToolOutput(content=prepared.error.message, success=False)
        if prepared.error is not None:
            logger.warning("tool %s rejected: %s", name, prepared.error.message)
            return ToolOutput(content=f"ERROR: {prepared.error.message}", success=False)

        assert prepared.route is not None
        logger.debug("calling %s on %s", summarize_tool_call(name, prepared.arguments), prepared.route.label)
        try:
            result = await prepared.route.connection.call_tool(name, prepared.arguments)
            text = render_tool_result(result)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.warning("tool %s failed: %s", name, message)
            return ToolOutput(content=f"ERROR: {message}", success=False)

        is_error = bool(_field(result, "isError"))
        logger.debug("tool_result %s: %s", name, preview_result(text))
        return ToolOutput(content=text, success=not is_error)


def render_tool_result(result: Any) -> str:
    """Flatten a provider result into the text handed back to the model."""

    content = _field(result, "content")
    if isinstance(content, (list, tuple)):
        return "\n".join(_segment_text(segment) for segment in content)
    if isinstance(result, str):
        return result
    return json.dumps(_jsonable(result), ensure_ascii=False)


def _segment_text(segment: Any) -> str:
    if _field(segment, "type") == "text":
        text = _field(segment, "text")
        return "" if text is None else str(text)
    return json.dumps(_jsonable(segment), ensure_ascii=False)


def _field(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def _jsonable(value: Any) -> Any:
    dump = getattr(value, "model_dump", None)
    if callable(dump):
        return dump(mode="json", exclude_none=True)
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


__all__ = ["PreparedCall", "ToolCall", "ToolOutput", "ToolRouter", "render_tool_result"]
