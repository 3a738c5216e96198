"""Session configuration and per-conversation state."""
from .settings import (
    BridgeSettings,
    MCPServerDefinition,
    load_bridge_settings,
    providers_from_env,
)
from .state import SessionState

__all__ = [
    "BridgeSettings",
    "MCPServerDefinition",
    "SessionState",
    "load_bridge_settings",
    "providers_from_env",
]
