"""Tool bridge abstractions: provider connections, catalog, sanitizer and router."""

from .catalog import ProviderBinding, RouteEntry, ToolCatalog, ToolCollision, build_tool_catalog
from .connection import Connection, connect_provider
from .mcp_client import ProcessConnection, connect_stdio_server
from .mcp_http import RemoteConnection, connect_http_server
from .router import PreparedCall, ToolCall, ToolOutput, ToolRouter, render_tool_result
from .sanitizer import SanitizerKind, force_under_base, sanitize_arguments
from .schemas import ToolSchema, validate_tool_input
from .spec import ToolDescriptor, ToolSpec
from errors import (
    CatalogError,
    ErrorType,
    ProviderConnectionError,
    RoutingError,
    SanitizationError,
    ToolCallError,
    ToolError,
)

__all__ = [
    "CatalogError",
    "Connection",
    "ErrorType",
    "PreparedCall",
    "ProcessConnection",
    "ProviderBinding",
    "ProviderConnectionError",
    "RemoteConnection",
    "RouteEntry",
    "RoutingError",
    "SanitizationError",
    "SanitizerKind",
    "ToolCall",
    "ToolCallError",
    "ToolCatalog",
    "ToolCollision",
    "ToolDescriptor",
    "ToolError",
    "ToolOutput",
    "ToolRouter",
    "ToolSchema",
    "ToolSpec",
    "build_tool_catalog",
    "connect_http_server",
    "connect_provider",
    "connect_stdio_server",
    "force_under_base",
    "render_tool_result",
    "sanitize_arguments",
    "validate_tool_input",
]
