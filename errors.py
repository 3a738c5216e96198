"""Structured error types for the tool bridge."""
from __future__ import annotations

from enum import Enum


class ErrorType(Enum):
    """Classification of tool errors."""

    FATAL = "fatal"
    RECOVERABLE = "recoverable"
    VALIDATION = "validation"


class ToolError(Exception):
    """Base class for errors raised while fulfilling a single tool call."""

    def __init__(self, message: str, error_type: ErrorType = ErrorType.RECOVERABLE) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.message


class RoutingError(ToolError):
    """The model asked for a tool that no provider registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Tool not registered: {tool_name}", ErrorType.VALIDATION)
        self.tool_name = tool_name


class ToolCallError(ToolError):
    """A provider rejected or failed a tool call."""

    def __init__(
        self,
        message: str,
        *,
        tool_name: str | None = None,
        error_type: ErrorType = ErrorType.RECOVERABLE,
    ) -> None:
        super().__init__(message, error_type)
        self.tool_name = tool_name


class SanitizationError(ToolError):
    """A path argument has a shape the sanitizer cannot confine."""

    def __init__(self, message: str, *, argument: str) -> None:
        super().__init__(message, ErrorType.VALIDATION)
        self.argument = argument


class BridgeError(Exception):
    """Base class for failures while bringing providers online."""

    def __init__(self, message: str, *, provider: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.message


class ProviderConnectionError(BridgeError):
    """A provider could not be reached or is misconfigured."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"could not connect to provider '{provider}': {reason}", provider=provider)
        self.reason = reason


class CatalogError(BridgeError):
    """A provider failed to list its tools."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"provider '{provider}' failed to list tools: {reason}", provider=provider)
        self.reason = reason


__all__ = [
    "BridgeError",
    "CatalogError",
    "ErrorType",
    "ProviderConnectionError",
    "RoutingError",
    "SanitizationError",
    "ToolCallError",
    "ToolError",
]
