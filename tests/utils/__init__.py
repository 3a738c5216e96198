"""Shared testing utilities."""
from .provider_stub import StubConnection, stub_tool, text_result

__all__ = ["StubConnection", "stub_tool", "text_result"]
