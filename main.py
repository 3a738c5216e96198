"""Minimal chat loop with the tool bridge enabled for the whole session."""

import asyncio
import sys

from rich.console import Console

from bridge import ToolBridge
from bridge_runner import ToolBridgeRunner
from cli import configure_logging, report_catalog
from errors import BridgeError
from session import load_bridge_settings


async def chat(console: Console) -> None:
    settings = load_bridge_settings()
    async with ToolBridge(settings) as bridge:
        report_catalog(bridge, console, verbose=True)
        runner = ToolBridgeRunner(bridge)
        conversation = []

        console.print("Chat with tools enabled (ctrl-d to quit)")
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            user_text = line.rstrip("\n")
            if not user_text.strip():
                continue

            mark = len(conversation)
            try:
                result = await runner.run(user_text, conversation=conversation)
            except Exception as exc:  # pragma: no cover - surfaced to user
                console.print(f"[red]Anthropic error:[/red] {exc}")
                del conversation[mark:]
                continue

            if result.final_response:
                console.print(f"[bold]assistant:[/bold] {result.final_response}")
            if result.error:
                console.print(f"[red]error:[/red] {result.error}")


def main() -> None:
    configure_logging(verbose=False)
    console = Console()
    try:
        asyncio.run(chat(console))
    except BridgeError as exc:
        console.print(f"[red]Could not enable tools:[/red] {exc}")
        raise SystemExit(2)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
