"""Command-line interface for running one tool-enabled prompt headlessly."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

from bridge import ToolBridge
from bridge_runner import BridgeRunOptions, BridgeRunResult, ToolBridgeRunner, format_result_json
from config import load_bridge_config
from errors import BridgeError
from session import BridgeSettings, load_bridge_settings


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one prompt through the tool bridge")
    prompt_group = parser.add_mutually_exclusive_group(required=False)
    prompt_group.add_argument("--prompt", help="User prompt to start the session with")
    prompt_group.add_argument("--prompt-file", type=Path, help="File containing the initial prompt")

    parser.add_argument("--config", type=Path, help="Path to TOML provider configuration")
    parser.add_argument("--max-rounds", type=int, default=None, help="Maximum model queries per prompt")
    parser.add_argument("--system", help="Optional system prompt")
    parser.add_argument(
        "--strict-catalog",
        action="store_true",
        help="Abort when any provider fails to list its tools",
    )
    parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON summary")
    parser.add_argument("--verbose", action="store_true", help="Log tool calls and provider activity")

    return parser.parse_args(argv)


def load_prompt(args: argparse.Namespace) -> str:
    if args.prompt_file:
        return args.prompt_file.read_text(encoding="utf-8")
    if args.prompt:
        return args.prompt
    if not sys.stdin.isatty():
        return sys.stdin.read()
    raise SystemExit("No prompt provided. Use --prompt, --prompt-file, or pipe input via stdin.")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    console = Console(stderr=True)

    prompt = load_prompt(args)
    settings = _load_settings(args.config)
    if args.strict_catalog:
        settings = settings.update_with(strict_catalog=True)

    options = BridgeRunOptions(
        max_rounds=args.max_rounds or load_bridge_config().max_rounds,
        system=args.system,
    )

    try:
        result = asyncio.run(_run(settings, options, prompt, console, verbose=args.verbose))
    except BridgeError as exc:
        console.print(f"[red]Could not enable tools:[/red] {exc}")
        return 2

    if args.json:
        print(format_result_json(result))
    else:
        _print_human_summary(result)
    return 1 if result.error else 0


async def _run(
    settings: BridgeSettings,
    options: BridgeRunOptions,
    prompt: str,
    console: Console,
    *,
    verbose: bool,
) -> BridgeRunResult:
    async with ToolBridge(settings) as bridge:
        report_catalog(bridge, console, verbose=verbose)
        runner = ToolBridgeRunner(bridge, options)
        return await runner.run(prompt)


def report_catalog(bridge: ToolBridge, console: Console, *, verbose: bool = False) -> None:
    """Tell the operator about providers that failed to list tools and about collisions."""
    catalog = bridge.catalog
    for label, error in catalog.failures.items():
        console.print(f"[red]provider {label} unavailable:[/red] {error.reason}")
    for collision in catalog.collisions:
        console.print(
            f"[yellow]tool {collision.tool_name} from {collision.winner} overrides {collision.previous}[/yellow]"
        )
    if verbose:
        console.print(f"Enabled {len(catalog.specs)} tools: {', '.join(catalog.tool_names) or '(none)'}")


def _load_settings(config_path: Optional[Path]) -> BridgeSettings:
    try:
        return load_bridge_settings(config_path)
    except Exception as exc:  # pragma: no cover - surfaced to user
        raise SystemExit(f"Failed to load config {config_path}: {exc}")


def _print_human_summary(result: BridgeRunResult) -> None:
    final = result.final_response or "<no final response>"
    print(final)
    print("\n---")
    print(f"Stopped reason: {result.stopped_reason} (rounds: {result.rounds})")
    if result.error:
        print(f"Error: {result.error}")

    if result.tool_events:
        print("Tools executed:")
        for event in result.tool_events:
            status = "error" if event.is_error else "ok"
            print(f"  - round {event.round}: {event.tool_name} [{status}]")
    else:
        print("Tools executed: none")


if __name__ == "__main__":
    raise SystemExit(main())
