"""The capability every tool provider connection exposes."""
from __future__ import annotations

from typing import Any, List, Mapping, Protocol, runtime_checkable

from errors import ProviderConnectionError
from session.settings import MCPServerDefinition
from .mcp_client import connect_stdio_server
from .mcp_http import connect_http_server
from .spec import ToolDescriptor


@runtime_checkable
class Connection(Protocol):
    """A live handle to one tool provider."""

    name: str

    async def list_tools(self) -> List[ToolDescriptor]:
        ...

    async def call_tool(self, name: str, arguments: Mapping[str, Any]) -> Any:
        ...

    async def aclose(self) -> None:
        ...


async def connect_provider(definition: MCPServerDefinition) -> Connection:
    """Open a connection for *definition* using its configured transport."""

    if definition.transport == "http":
        return connect_http_server(definition)
    if definition.transport == "stdio":
        return await connect_stdio_server(definition)
    raise ProviderConnectionError(definition.name, f"unknown transport '{definition.transport}'")


__all__ = ["Connection", "connect_provider"]
