"""Path confinement for tool arguments supplied by the model.

Arguments arriving in ``tool_use`` blocks are untrusted. Before a call is
dispatched, every path-bearing argument of a filesystem or version-control
provider is rewritten so it resolves inside a configured base directory.
Escapes are not rejected: they are coerced to ``<base>/<basename>``, which
flattens whatever directory layout the caller tried to inject. A path
argument that is not a string is rejected with ``SanitizationError``.
"""
from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from config import SandboxConfig
from errors import SanitizationError
from session.state import SessionState

logger = logging.getLogger(__name__)

REPO_PATH_KEY = "repo_path"
DEFAULT_REPO_NAME = "repo-mcp"
STAGE_FILES_TOOL = "git_add"
STAGE_FILES_KEY = "files"
FILESYSTEM_PATH_KEYS = ("path", "source", "destination")


class SanitizerKind(Enum):
    """How a provider's arguments are rewritten before dispatch."""

    FILESYSTEM = "filesystem"
    VERSION_CONTROL = "version-control"
    NONE = "none"

    @classmethod
    def parse(cls, raw: Any) -> "SanitizerKind":
        if isinstance(raw, cls):
            return raw
        key = str(raw or "none").strip().lower()
        aliases = {"fs": cls.FILESYSTEM, "git": cls.VERSION_CONTROL, "version_control": cls.VERSION_CONTROL}
        if key in aliases:
            return aliases[key]
        return cls(key)


def is_within(base: str, candidate: str) -> bool:
    return candidate == base or candidate.startswith(base.rstrip(os.sep) + os.sep)


def force_under_base(base: str, value: str) -> str:
    """Return *value* resolved under *base*, coercing escapes to ``base/basename``.

    *base* must be an absolute, normalised directory path.
    """
    resolved = os.path.normpath(os.path.join(base, value))
    if is_within(base, resolved):
        return resolved

    fallback = os.path.normpath(os.path.join(base, os.path.basename(value)))
    if is_within(base, fallback):
        logger.debug("coerced escaping path %r to %s", value, fallback)
        return fallback
    # basename was "..", "." or empty
    logger.debug("coerced escaping path %r to base %s", value, base)
    return base


def sanitize_arguments(
    tool_name: str,
    raw_args: Optional[Mapping[str, Any]],
    state: SessionState,
    sanitizer: SanitizerKind,
    sandbox: SandboxConfig,
) -> Dict[str, Any]:
    """Return a rewritten copy of *raw_args* for *tool_name*."""

    if sanitizer is SanitizerKind.VERSION_CONTROL:
        return _sanitize_version_control(tool_name, raw_args, state, sandbox)
    if sanitizer is SanitizerKind.FILESYSTEM:
        return _sanitize_filesystem(raw_args, state, sandbox)
    return dict(raw_args or {})


def _sanitize_version_control(
    tool_name: str,
    raw_args: Optional[Mapping[str, Any]],
    state: SessionState,
    sandbox: SandboxConfig,
) -> Dict[str, Any]:
    args = dict(raw_args or {})

    requested = args.get(REPO_PATH_KEY)
    if isinstance(requested, str) and requested:
        repo_path = force_under_base(sandbox.repos_base, requested)
    elif state.current_repo_path:
        repo_path = state.current_repo_path
    else:
        repo_path = os.path.join(sandbox.repos_base, DEFAULT_REPO_NAME)
    args[REPO_PATH_KEY] = repo_path

    files = args.get(STAGE_FILES_KEY)
    if tool_name == STAGE_FILES_TOOL and files is not None:
        if isinstance(files, str):
            files = [files]
        if not isinstance(files, list):
            raise SanitizationError(
                f"{STAGE_FILES_KEY} must be a list of paths, got {type(files).__name__}",
                argument=STAGE_FILES_KEY,
            )
        args[STAGE_FILES_KEY] = [_relative_to_repo(repo_path, item) for item in files]

    # state changes only once every argument has been rewritten
    state.current_repo_path = repo_path
    return args


def _relative_to_repo(repo_path: str, item: Any) -> str:
    if not isinstance(item, str):
        raise SanitizationError(
            f"{STAGE_FILES_KEY} entries must be strings, got {type(item).__name__}",
            argument=STAGE_FILES_KEY,
        )
    if not os.path.isabs(item):
        return item
    confined = force_under_base(repo_path, item)
    return os.path.relpath(confined, repo_path) or "."


def _sanitize_filesystem(
    raw_args: Optional[Mapping[str, Any]],
    state: SessionState,
    sandbox: SandboxConfig,
) -> Dict[str, Any]:
    args = dict(raw_args or {})

    for key in FILESYSTEM_PATH_KEYS:
        value = args.get(key)
        if value is None or value == "":
            continue
        if not isinstance(value, str):
            raise SanitizationError(
                f"{key} must be a string, got {type(value).__name__}",
                argument=key,
            )
        if state.current_repo_path:
            relative = os.path.basename(value) if os.path.isabs(value) else value
            args[key] = force_under_base(state.current_repo_path, relative)
        else:
            args[key] = force_under_base(sandbox.demo_base, value)

    return args


__all__ = [
    "FILESYSTEM_PATH_KEYS",
    "REPO_PATH_KEY",
    "SanitizerKind",
    "force_under_base",
    "is_within",
    "sanitize_arguments",
]
