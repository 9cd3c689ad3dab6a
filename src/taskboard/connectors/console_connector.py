# src/taskboard/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import ClientState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def console_notifier(message: str) -> None:
    """Mutation failures arrive here after the command already returned."""
    _print_ts(f"[!] {message}")


async def run_console_loop(state: ClientState) -> None:
    """
    Interactive board console.

    input() runs in a worker thread so the event loop keeps dispatching and
    reconciling mutations while the prompt is waiting.
    """
    logger.info("Console client started (api=%s).", getattr(state.settings, "api_base_url", "?"))
    _print_ts("[CONSOLE] Task board. Use /help for commands. Use /exit to quit.\n")

    if await state.mutator.refresh():
        print(await command_registry.handle(state, "/board"), flush=True)

    def emit(text: str) -> None:
        _print_ts(text)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, "> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = await command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is None:
            cmd_response = "Commands start with '/'. Use /help to list them."
        print(cmd_response, flush=True)

    if state.mutator.in_flight:
        _print_ts(f"Waiting for {state.mutator.in_flight} pending change(s)...")
        await state.mutator.drain()

    logger.info("Console client finished.")
