"""Check that every configured provider can be reached and lists its tools."""
from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from rich.console import Console

from session import MCPServerDefinition, load_bridge_settings
from tools import Connection, connect_provider

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


@dataclass
class ProviderHealth:
    name: str
    ok: bool
    tools: List[str] = field(default_factory=list)
    error: Optional[str] = None


async def check_provider(
    definition: MCPServerDefinition,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    connect: Callable[[MCPServerDefinition], Awaitable[Connection]] = connect_provider,
) -> ProviderHealth:
    """Connect to one provider and list its tools, each step under *timeout*."""

    connection: Optional[Connection] = None
    try:
        async with asyncio.timeout(timeout):
            connection = await connect(definition)
        async with asyncio.timeout(timeout):
            tools = await connection.list_tools()
    except TimeoutError:
        return ProviderHealth(definition.name, ok=False, error=f"Timeout > {int(timeout * 1000)}ms")
    except Exception as exc:
        return ProviderHealth(definition.name, ok=False, error=str(exc) or type(exc).__name__)
    finally:
        if connection is not None:
            try:
                await connection.aclose()
            except Exception as exc:
                logger.debug("closing %s failed: %s", definition.name, exc)
    return ProviderHealth(definition.name, ok=True, tools=[tool.name for tool in tools])


async def run_healthcheck(
    definitions: Sequence[MCPServerDefinition],
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    connect: Callable[[MCPServerDefinition], Awaitable[Connection]] = connect_provider,
) -> List[ProviderHealth]:
    results = []
    for definition in definitions:
        results.append(await check_provider(definition, timeout=timeout, connect=connect))
    return results


def render_report(results: Sequence[ProviderHealth], console: Console) -> None:
    console.print("[bold]--- Provider healthcheck ---[/bold]")
    if not results:
        console.print("[yellow]no providers configured[/yellow]")
    for health in results:
        if health.ok:
            console.print(f"[green]{health.name}[/green] responded, tools: {', '.join(health.tools) or '(none)'}")
        else:
            console.print(f"[red]{health.name}[/red] failed: {health.error}")
    console.print("[bold]--- End healthcheck ---[/bold]")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Check connectivity to the configured tool providers")
    parser.add_argument("--config", type=Path, help="Path to a TOML provider configuration")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_SECONDS, help="Seconds allowed per step")
    args = parser.parse_args(argv)

    settings = load_bridge_settings(args.config)
    results = asyncio.run(run_healthcheck(settings.providers, timeout=args.timeout))
    render_report(results, Console())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
