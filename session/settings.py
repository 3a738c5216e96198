"""Provider configuration for the tool bridge."""
from __future__ import annotations

import os
import shlex
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path.home() / ".config" / "toolbridge" / "config.toml",
)

TRANSPORTS = ("stdio", "http")
SANITIZER_NAMES = {
    "filesystem": "filesystem",
    "fs": "filesystem",
    "version-control": "version-control",
    "version_control": "version-control",
    "git": "version-control",
    "none": "none",
}
COLLISION_POLICIES = ("replace", "error")

GIT_IDENTITY_DEFAULTS: tuple[tuple[str, str], ...] = (
    ("GIT_AUTHOR_NAME", "toolbridge"),
    ("GIT_AUTHOR_EMAIL", "toolbridge@localhost"),
    ("GIT_COMMITTER_NAME", "toolbridge"),
    ("GIT_COMMITTER_EMAIL", "toolbridge@localhost"),
)


@dataclass
class MCPServerDefinition:
    """Configuration for launching or reaching one tool provider."""

    name: str
    transport: str = "stdio"
    command: Optional[str] = None
    args: tuple[str, ...] = ()
    env: tuple[tuple[str, str], ...] = ()
    cwd: Optional[Path] = None
    url: Optional[str] = None
    headers: tuple[tuple[str, str], ...] = ()
    sanitizer: str = "none"
    encoding: str = "utf-8"
    encoding_errors: str = "strict"

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class BridgeSettings:
    providers: tuple[MCPServerDefinition, ...] = ()
    on_collision: str = "replace"
    strict_catalog: bool = False
    source: Optional[Path] = field(default=None, compare=False)

    def update_with(self, **overrides: Any) -> "BridgeSettings":
        """Return new settings with top-level fields replaced."""

        for key in overrides:
            if not hasattr(self, key):
                raise KeyError(f"Unknown bridge setting '{key}'")
        return replace(self, **overrides)


def load_bridge_settings(path: Optional[Path] = None) -> BridgeSettings:
    """Load provider settings from *path*, default locations, or the environment."""

    config_data: Mapping[str, Any]
    chosen_path: Optional[Path] = None

    if path is not None:
        chosen_path = path.expanduser().resolve()
        config_data = _loads(chosen_path)
    else:
        env_path = os.getenv("TOOLBRIDGE_CONFIG")
        if env_path:
            candidate = Path(env_path).expanduser().resolve()
            if candidate.exists():
                chosen_path = candidate
                config_data = _loads(candidate)
            else:
                config_data = {}
        else:
            for candidate in DEFAULT_CONFIG_PATHS:
                if candidate.exists():
                    chosen_path = candidate
                    config_data = _loads(candidate)
                    break
            else:
                config_data = {}

    if chosen_path is None:
        return BridgeSettings(providers=providers_from_env(os.environ))
    settings = _settings_from_mapping(config_data, base_dir=chosen_path.parent)
    return replace(settings, source=chosen_path)


def providers_from_env(environ: Mapping[str, str]) -> tuple[MCPServerDefinition, ...]:
    """Build provider definitions from the ``MCP_*`` environment variables."""

    providers: list[MCPServerDefinition] = []

    fs_command = (environ.get("MCP_FS_COMMAND") or "").strip()
    if fs_command:
        providers.append(
            MCPServerDefinition(
                name="filesystem",
                command=fs_command,
                args=tuple(shlex.split(environ.get("MCP_FS_ARGS", ""))),
                sanitizer="filesystem",
            )
        )

    git_command = (environ.get("MCP_GIT_COMMAND") or "").strip()
    if git_command:
        identity = tuple((key, environ.get(key) or default) for key, default in GIT_IDENTITY_DEFAULTS)
        providers.append(
            MCPServerDefinition(
                name="git",
                command=git_command,
                args=tuple(shlex.split(environ.get("MCP_GIT_ARGS", ""))),
                env=identity,
                sanitizer="version-control",
            )
        )

    food_command = (environ.get("MCP_FOOD_COMMAND") or "").strip()
    if food_command:
        providers.append(
            MCPServerDefinition(
                name="food",
                command=food_command,
                args=tuple(shlex.split(environ.get("MCP_FOOD_ARGS", ""))),
            )
        )

    remote_url = (environ.get("MCP_REMOTE_URL") or "").strip()
    if remote_url:
        providers.append(MCPServerDefinition(name="remote", transport="http", url=remote_url))

    return tuple(providers)


def _loads(path: Path) -> Mapping[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def _settings_from_mapping(mapping: Mapping[str, Any], *, base_dir: Optional[Path]) -> BridgeSettings:
    settings = BridgeSettings()

    bridge_section = mapping.get("bridge")
    if isinstance(bridge_section, Mapping):
        on_collision = str(bridge_section.get("on_collision", settings.on_collision)).strip().lower()
        if on_collision not in COLLISION_POLICIES:
            raise ValueError(f"bridge.on_collision must be one of {', '.join(COLLISION_POLICIES)}")
        settings = replace(
            settings,
            on_collision=on_collision,
            strict_catalog=bool(bridge_section.get("strict_catalog", settings.strict_catalog)),
        )

    providers_value = _coerce_sequence(mapping.get("providers"))
    definitions: list[MCPServerDefinition] = []
    if providers_value:
        for item in providers_value:
            if not isinstance(item, Mapping):
                raise ValueError("providers entries must be tables")
            definitions.append(_parse_provider(item, base_dir))

    return replace(settings, providers=tuple(definitions))


def _coerce_sequence(value: Any) -> Optional[Sequence[Any]]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return value
    if isinstance(value, str):
        return [value]
    return None


def _parse_provider(entry: Mapping[str, Any], base_dir: Optional[Path]) -> MCPServerDefinition:
    name_raw = entry.get("name")
    if name_raw is None:
        raise ValueError("provider definition missing required 'name'")
    name = str(name_raw).strip()
    if not name:
        raise ValueError("provider definition 'name' must contain text")

    transport = str(entry.get("transport", "stdio")).strip().lower()
    if transport not in TRANSPORTS:
        raise ValueError(f"provider '{name}' transport must be one of {', '.join(TRANSPORTS)}")

    sanitizer = parse_sanitizer_name(entry.get("sanitizer", "none"), provider=name)

    if transport == "http":
        url = str(entry.get("url") or "").strip()
        if not url:
            raise ValueError(f"provider '{name}' missing required 'url'")
        return MCPServerDefinition(
            name=name,
            transport=transport,
            url=url,
            headers=_coerce_pairs(entry.get("headers"), what="headers"),
            sanitizer=sanitizer,
        )

    command_raw = entry.get("command")
    if not command_raw:
        raise ValueError(f"provider '{name}' missing required 'command'")
    command = str(command_raw)

    args_value = entry.get("args", ())
    if isinstance(args_value, (list, tuple)):
        args = tuple(str(item) for item in args_value)
    elif isinstance(args_value, str):
        args = tuple(shlex.split(args_value))
    else:
        raise ValueError(f"provider '{name}' args must be a list or string")

    env = _coerce_pairs(entry.get("env"), what="env")
    if sanitizer == "version-control":
        present = {key for key, _ in env}
        env = env + tuple(
            (key, os.environ.get(key) or default)
            for key, default in GIT_IDENTITY_DEFAULTS
            if key not in present
        )

    cwd_value = entry.get("cwd")
    cwd_path: Optional[Path]
    if cwd_value is not None:
        cwd_path = Path(str(cwd_value)).expanduser()
        if not cwd_path.is_absolute() and base_dir is not None:
            cwd_path = (base_dir / cwd_path).resolve()
        else:
            cwd_path = cwd_path.resolve()
    else:
        cwd_path = None

    return MCPServerDefinition(
        name=name,
        transport=transport,
        command=command,
        args=args,
        env=env,
        cwd=cwd_path,
        sanitizer=sanitizer,
        encoding=str(entry.get("encoding", "utf-8")),
        encoding_errors=str(entry.get("encoding_errors", "strict")),
    )


def parse_sanitizer_name(raw: Any, *, provider: str = "") -> str:
    """Normalise a configured sanitizer name (``fs`` and ``git`` are accepted aliases)."""

    key = str(raw or "none").strip().lower()
    try:
        return SANITIZER_NAMES[key]
    except KeyError as exc:
        where = f"provider '{provider}' " if provider else ""
        raise ValueError(f"{where}sanitizer must be one of filesystem, version-control, none") from exc


def _coerce_pairs(value: Any, *, what: str) -> tuple[tuple[str, str], ...]:
    if value is None:
        return ()
    if isinstance(value, Mapping):
        return tuple((str(k), str(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        pairs: list[tuple[str, str]] = []
        for item in value:
            if isinstance(item, Mapping):
                for key, val in item.items():
                    pairs.append((str(key), str(val)))
            elif isinstance(item, str):
                if "=" not in item:
                    raise ValueError(f"{what} entries provided as strings must be KEY=VALUE")
                key, _, val = item.partition("=")
                pairs.append((key.strip(), val.strip()))
            else:
                raise ValueError(f"{what} entries must be mappings or KEY=VALUE strings")
        return tuple(pairs)
    raise ValueError(f"{what} must be a mapping or sequence of KEY=VALUE strings")


def pairs_to_dict(pairs: Sequence[tuple[str, str]]) -> Dict[str, str]:
    return {key: value for key, value in pairs}


__all__ = [
    "BridgeSettings",
    "MCPServerDefinition",
    "load_bridge_settings",
    "pairs_to_dict",
    "parse_sanitizer_name",
    "providers_from_env",
]
