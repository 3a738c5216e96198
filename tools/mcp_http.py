"""Remote connections: a JSON-RPC service reached over HTTP.

The remote service does not publish a tool catalog. Its tools are declared
here by hand and mapped onto RPC method names.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from errors import ErrorType, ProviderConnectionError, ToolCallError
from session.settings import MCPServerDefinition, pairs_to_dict
from .schemas import HealthPingInput, JokesGetInput, JokesSearchInput, validate_tool_input
from .spec import ToolDescriptor

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: Mapping[str, str] = {"Content-Type": "application/json"}
DEFAULT_TIMEOUT_SECONDS = 30.0

METHOD_ALIASES: Mapping[str, str] = {
    "jokes_get": "jokes.get",
    "jokes_search": "jokes.search",
    "health_ping": "health.ping",
}

REMOTE_TOOLS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="jokes_get",
        description="Return a random dad joke.",
        input_schema=JokesGetInput.input_schema(),
    ),
    ToolDescriptor(
        name="jokes_search",
        description='Search dad jokes by keyword. Use "limit" to ask for N jokes.',
        input_schema=JokesSearchInput.input_schema(),
    ),
    ToolDescriptor(
        name="health_ping",
        description="Health ping for the remote service.",
        input_schema=HealthPingInput.input_schema(),
    ),
)


@dataclass
class RemoteConnection:
    """Stateless JSON-RPC client; safe to share across calls."""

    name: str
    rpc_url: str
    headers: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    tools: tuple[ToolDescriptor, ...] = REMOTE_TOOLS
    aliases: Mapping[str, str] = field(default_factory=lambda: dict(METHOD_ALIASES))
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    async def list_tools(self) -> List[ToolDescriptor]:
        return list(self.tools)

    async def call_tool(self, name: str, arguments: Mapping[str, Any]) -> Any:
        if not isinstance(name, str) or not name:
            raise ToolCallError(f"invalid tool name: {json.dumps(name)}", error_type=ErrorType.VALIDATION)

        method = self.aliases.get(name, name)
        if method == "tools/call":
            params: Dict[str, Any] = {"name": name, "arguments": dict(arguments)}
        else:
            try:
                params = validate_tool_input(name, arguments)
            except ValueError as exc:
                raise ToolCallError(
                    f"invalid arguments for {name}: {exc}",
                    tool_name=name,
                    error_type=ErrorType.VALIDATION,
                ) from exc

        return await asyncio.to_thread(self._json_rpc, method, params)

    async def aclose(self) -> None:
        return None

    def _json_rpc(self, method: str, params: Mapping[str, Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": int(time.time() * 1000),
            "method": method,
            "params": dict(params),
        }
        body = json.dumps(payload).encode("utf-8")
        request = Request(self.rpc_url, data=body, headers=dict(self.headers), method="POST")
        logger.debug("json-rpc %s -> %s", method, self.rpc_url)

        try:
            with urlopen(request, timeout=self.timeout) as response:
                status = response.status
                raw = response.read()
        except HTTPError as exc:
            status = exc.code
            raw = exc.read() or b""
        except URLError as exc:
            raise ToolCallError(f"error calling {method}: {exc.reason}") from exc

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ToolCallError(f"invalid response from server (not JSON) - HTTP {status}") from exc

        error = data.get("error") if isinstance(data, dict) else None
        if not 200 <= status < 300 or error:
            message = _error_message(error) or f"HTTP {status}"
            raise ToolCallError(f"error calling {method}: {message}")

        if not isinstance(data, dict):
            return data
        return data.get("result")


def connect_http_server(definition: MCPServerDefinition) -> RemoteConnection:
    """Build a remote connection; nothing is sent until the first call."""

    base = (definition.url or "").rstrip("/")
    if not base:
        raise ProviderConnectionError(definition.name, "'url' is not configured")
    headers = pairs_to_dict(definition.headers) or dict(DEFAULT_HEADERS)
    logger.info("using remote provider %s at %s", definition.name, base)
    return RemoteConnection(name=definition.name, rpc_url=base, headers=headers)


def _error_message(error: Optional[Any]) -> Optional[str]:
    if isinstance(error, dict):
        message = error.get("message")
        return str(message) if message else None
    if error:
        return str(error)
    return None


__all__ = ["METHOD_ALIASES", "REMOTE_TOOLS", "RemoteConnection", "connect_http_server"]
