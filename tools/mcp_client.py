"""Process-backed connections: MCP client sessions over stdio."""
from __future__ import annotations

import logging
import os
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from mcp.client.session import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client

from errors import ProviderConnectionError
from session.settings import MCPServerDefinition, pairs_to_dict
from .spec import ToolDescriptor

logger = logging.getLogger(__name__)


@dataclass
class ProcessConnection:
    """A live MCP session with a subprocess this connection owns.

    There is no restart logic: once the subprocess dies every later call fails.
    """

    name: str
    session: ClientSession
    _stack: AsyncExitStack

    async def list_tools(self) -> List[ToolDescriptor]:
        response = await self.session.list_tools()
        return [
            ToolDescriptor(
                name=tool.name,
                description=tool.description or "",
                input_schema=tool.inputSchema or None,
            )
            for tool in response.tools
        ]

    async def call_tool(self, name: str, arguments: Mapping[str, Any]) -> Any:
        return await self.session.call_tool(name, dict(arguments))

    async def aclose(self) -> None:
        await self._stack.aclose()


async def connect_stdio_server(definition: MCPServerDefinition) -> ProcessConnection:
    """Launch the configured MCP server, run the handshake and return a connection."""

    if not definition.command:
        raise ProviderConnectionError(definition.name, "'command' is not configured")

    parameters = StdioServerParameters(
        command=definition.command,
        args=list(definition.args),
        env=_definition_env(definition),
        cwd=str(definition.cwd) if definition.cwd else None,
        encoding=definition.encoding,
        encoding_error_handler=definition.encoding_errors,
    )

    logger.info(
        "launching provider %s: %s %s",
        definition.name,
        definition.command,
        " ".join(definition.args),
    )
    stack = AsyncExitStack()
    try:
        read_stream, write_stream = await stack.enter_async_context(stdio_client(parameters))
        session = await stack.enter_async_context(ClientSession(read_stream, write_stream))
        await session.initialize()
    except BaseException as exc:
        await stack.aclose()
        if not isinstance(exc, Exception):
            raise
        raise ProviderConnectionError(definition.name, str(exc) or type(exc).__name__) from exc

    logger.info("connected to provider %s", definition.name)
    return ProcessConnection(name=definition.name, session=session, _stack=stack)


def _definition_env(definition: MCPServerDefinition) -> Dict[str, str]:
    env = dict(os.environ)
    env.update(pairs_to_dict(definition.env))
    return env


__all__ = ["ProcessConnection", "connect_stdio_server"]
