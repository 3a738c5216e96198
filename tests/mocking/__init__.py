"""Scripted Anthropic client for runner tests."""
from .client import MockAnthropic
from .responses import MockAnthropicResponse, text_block, tool_result_block, tool_use_block

__all__ = ["MockAnthropic", "MockAnthropicResponse", "text_block", "tool_result_block", "tool_use_block"]
