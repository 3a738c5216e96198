"""Shared configuration helpers for the model client, sandbox and tool loop."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_MODEL = "claude-3-7-sonnet-latest"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_REPOS_DIR = "repos"
DEFAULT_DEMO_DIR = "demo"
DEFAULT_MAX_ROUNDS = 16


@dataclass(frozen=True)
class AnthropicConfig:
    """Simple container for Anthropic model configuration."""

    model: str
    max_tokens: int


@dataclass(frozen=True)
class SandboxConfig:
    """Absolute base directories that path arguments are confined to."""

    repos_base: str
    demo_base: str


@dataclass(frozen=True)
class BridgeConfig:
    max_rounds: int


def _parse_positive_int(raw: Optional[str], fallback: int) -> int:
    """Return a positive integer parsed from *raw*, or *fallback* on failure."""

    if raw is None:
        return fallback
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def load_anthropic_config() -> AnthropicConfig:
    """Load Anthropic settings from environment variables with safe fallbacks."""

    model = (os.getenv("ANTHROPIC_MODEL") or "").strip() or DEFAULT_MODEL
    max_tokens = _parse_positive_int(os.getenv("ANTHROPIC_MAX_TOKENS"), DEFAULT_MAX_TOKENS)
    return AnthropicConfig(model=model, max_tokens=max_tokens)


def load_sandbox_config(cwd: Optional[Path] = None) -> SandboxConfig:
    """Resolve the sandbox base directories against *cwd* (default: process cwd)."""

    root = Path(cwd) if cwd is not None else Path.cwd()
    repos = (os.getenv("MCP_BASE_REPOS") or "").strip() or DEFAULT_REPOS_DIR
    demo = (os.getenv("MCP_BASE_DEMO") or "").strip() or DEFAULT_DEMO_DIR
    return SandboxConfig(
        repos_base=_absolute(root, repos),
        demo_base=_absolute(root, demo),
    )


def load_bridge_config() -> BridgeConfig:
    max_rounds = _parse_positive_int(os.getenv("TOOLBRIDGE_MAX_ROUNDS"), DEFAULT_MAX_ROUNDS)
    return BridgeConfig(max_rounds=max_rounds)


def _absolute(root: Path, raw: str) -> str:
    return os.path.normpath(os.path.join(str(root.resolve()), os.path.expanduser(raw)))


__all__ = [
    "AnthropicConfig",
    "BridgeConfig",
    "DEFAULT_DEMO_DIR",
    "DEFAULT_MAX_ROUNDS",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_MODEL",
    "DEFAULT_REPOS_DIR",
    "SandboxConfig",
    "load_anthropic_config",
    "load_bridge_config",
    "load_sandbox_config",
]
