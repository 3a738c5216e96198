"""Per-conversation state shared by the argument sanitizers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class SessionState:
    """Mutable state that lives for one chat session.

    ``current_repo_path`` is written by the version-control sanitizer whenever a
    call names a repository explicitly and read by both path sanitizers when a
    later call omits it.
    """

    current_repo_path: Optional[str] = None

    def reset(self) -> None:
        self.current_repo_path = None


__all__ = ["SessionState"]
