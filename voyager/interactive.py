#!/usr/bin/env python3
"""
Voyager Interactive CLI

Chat with the travel concierge from a terminal. Trace entries are printed
as they happen; Ctrl+C cancels the request in flight.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from .config import config
from .gateway.ollama import OllamaGateway
from .messages import Message
from .orchestration.events import EventKind, TraceEntry
from .orchestration.loop import LoopOutcome
from .session import ChatSession
from .tools import build_default_registry

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    # Trace entries are printed by the CLI itself.
    logging.getLogger("voyager.events").setLevel(logging.WARNING)


def print_banner() -> None:
    """Print the welcome banner."""
    banner = """
╔════════════════════════════════════════════════════════════════╗
║                      Voyager AI Interactive                     ║
║                                                                 ║
║  Travel concierge with tool calling over a local model          ║
╚════════════════════════════════════════════════════════════════╝

Available commands:
  /help     - Show this help message
  /trace    - Show the trace of the last request
  /tools    - List available tools
  /stats    - Show session statistics
  /verbose  - Toggle live trace output
  /clear    - Clear conversation history
  /reset    - Reset session statistics and tool counters
  /quit     - Exit the CLI

Ask about flights, hotels, weather, activities, visas or currencies.
"""
    print(banner)


class ConsoleEventSink:
    """Print each trace entry on one line as it is produced."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def on_event(self, entry: TraceEntry) -> None:
        if not self.enabled:
            return
        marker = "✗" if entry.kind is EventKind.ERROR else "·"
        print(f"  {marker} [{entry.kind.value}] {entry.label}")


def print_trace(outcome: Optional[LoopOutcome]) -> None:
    """Print the trace of the last chat request."""
    if outcome is None or not outcome.trace:
        print("\nNo trace available. Send a message first.\n")
        return

    print("\n" + "═" * 70)
    print("ORCHESTRATION TRACE")
    print("═" * 70)
    for entry in outcome.trace:
        print(f"\n┌─ {entry.kind.value}  {entry.timestamp}")
        print(f"│  {entry.label}")
        if entry.kind in (EventKind.TOOL_CALL, EventKind.ERROR):
            payload = json.dumps(entry.payload, indent=2, default=str)
            if len(payload) > 400:
                payload = payload[:400] + "..."
            print("│  " + payload.replace("\n", "\n│  "))
        print("└" + "─" * 68)
    print(f"\nState: {outcome.state.value}  Stats: {outcome.stats()}\n")


class InteractiveCLI:
    """Interactive CLI for Voyager."""

    def __init__(self, session: ChatSession, verbose: bool = True):
        self.session = session
        self.console = ConsoleEventSink(enabled=verbose)
        self.history: list[Message] = []
        self.last_outcome: Optional[LoopOutcome] = None
        self._loop = asyncio.new_event_loop()

    def toggle_verbose(self) -> None:
        self.console.enabled = not self.console.enabled
        print(f"\nLive trace: {'ON' if self.console.enabled else 'OFF'}\n")

    def clear_history(self) -> None:
        self.history = []
        print("\nConversation history cleared.\n")

    def print_tools(self) -> None:
        print("\nAvailable Tools:")
        print("─" * 64)
        for i, tool in enumerate(self.session.list_tools(), start=1):
            print(f"{i}. {tool['name'].ljust(22)} used {tool['usageCount']}x")
        print()

    def process_query(self, query: str) -> None:
        """Send one user message; Ctrl+C cancels the request."""
        print("\n" + "─" * 70)
        messages = [*self.history, Message(role="user", content=query)]
        task = self._loop.create_task(self.session.chat(messages, sink=self.console))
        try:
            outcome = self._loop.run_until_complete(task)
        except KeyboardInterrupt:
            task.cancel()
            try:
                self._loop.run_until_complete(task)
            except asyncio.CancelledError:
                pass
            print("\n\nRequest cancelled.\n")
            return

        self.last_outcome = outcome
        if not outcome.failed:
            self.history = [*messages, outcome.final_message]

        print("\n" + "═" * 70)
        print(outcome.final_message.content)
        print("═" * 70)
        stats = outcome.stats()
        print(
            f"({stats['iterations']} iteration(s), {stats['toolCallsTotal']} tool call(s), "
            f"{stats['totalDurationMs']}ms in tools) Use /trace to see the full trace.\n"
        )

    def run(self) -> None:
        """Run the interactive CLI loop."""
        print_banner()

        while True:
            try:
                user_input = input(">>> ").strip()
            except KeyboardInterrupt:
                print("\n\nType /quit to exit.\n")
                continue
            except EOFError:
                print("\nGoodbye!\n")
                break

            if not user_input:
                continue

            if user_input.startswith("/"):
                command = user_input.lower()
                if command in ("/quit", "/exit", "/q"):
                    print("\nGoodbye!\n")
                    break
                elif command in ("/help", "/h", "/?"):
                    print_banner()
                elif command == "/trace":
                    print_trace(self.last_outcome)
                elif command == "/tools":
                    self.print_tools()
                elif command == "/stats":
                    print(json.dumps(self.session.stats(), indent=2))
                elif command == "/verbose":
                    self.toggle_verbose()
                elif command == "/clear":
                    self.clear_history()
                elif command == "/reset":
                    self.session.reset()
                    print("\nSession statistics reset.\n")
                else:
                    print(f"\nUnknown command: {user_input}")
                    print("Type /help for available commands.\n")
            else:
                self.process_query(user_input)

        self.cleanup()

    def cleanup(self) -> None:
        """Close the gateway and the event loop."""
        self._loop.run_until_complete(self.session.close())
        self._loop.close()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Voyager AI Interactive CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                  # Start interactive mode
  %(prog)s -v                               # Start with debug logging
  %(prog)s -q "Weather in Tokyo next week"  # Run a single query
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-q", "--query", type=str, help="Run a single query and exit")
    parser.add_argument(
        "--ollama-url",
        type=str,
        default=None,
        help=f"Ollama server URL (default: from OLLAMA_URL env or {config.ollama.base_url})",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help=f"Model name (default: from OLLAMA_MODEL env or {config.ollama.model})",
    )
    parser.add_argument("--json", action="store_true", help="Output results as JSON (for scripting)")

    args = parser.parse_args()
    setup_logging(args.verbose)

    session = ChatSession(
        registry=build_default_registry(),
        gateway=OllamaGateway(base_url=args.ollama_url, model=args.model),
        max_iterations=config.orchestrator.max_iterations,
        system_prompt=config.orchestrator.system_prompt or None,
    )

    if args.query:
        outcome = asyncio.run(_single_query(session, args.query))
        if args.json:
            output = {
                "query": args.query,
                "response": outcome.response(),
                "stats": outcome.stats(),
                "trace": [entry.to_dict() for entry in outcome.trace],
            }
            print(json.dumps(output, indent=2, default=str))
        else:
            print(outcome.final_message.content)
        sys.exit(1 if outcome.failed else 0)

    InteractiveCLI(session, verbose=not args.json).run()


async def _single_query(session: ChatSession, query: str) -> LoopOutcome:
    try:
        return await session.chat([Message(role="user", content=query)])
    finally:
        await session.close()


if __name__ == "__main__":
    main()
