# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, then runs one of:
- serve:   the HTTP Task API (Flask) over the JSON store,
- console: the interactive board client against the API.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
from dataclasses import replace

from ..config import get_settings
from ..connectors.console_connector import console_notifier, run_console_loop
from ..logging_setup import setup_logging
from .bootstrap import create_client_state, create_server_app

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskboard", description="Task board API server and console client.")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP Task API.")
    serve.add_argument("--host", default=None, help="Bind address (default from TASKBOARD_HOST).")
    serve.add_argument("--port", type=int, default=None, help="Port (default from TASKBOARD_PORT).")
    serve.add_argument("--debug", action="store_true", help="Flask debug mode.")

    console = sub.add_parser("console", help="Run the interactive console client.")
    console.add_argument("--api", default=None, help="API base URL (default from TASKBOARD_API_BASE_URL).")
    return parser


def _serve(settings, args: argparse.Namespace) -> None:
    app = create_server_app(settings=settings)
    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Serving %s on http://%s:%d (tasks file: %s)", settings.app_name, host, port, settings.tasks_path)
    app.run(host=host, port=port, debug=args.debug, threaded=True)


async def _console(settings, args: argparse.Namespace) -> None:
    if args.api:
        settings = replace(settings, api_base_url=args.api)

    state = create_client_state(settings=settings, notify=console_notifier)
    try:
        await run_console_loop(state)
    finally:
        close = getattr(state.api, "aclose", None)
        if close is not None:
            try:
                await close()
            except Exception:
                logger.debug("API client close failed.", exc_info=True)


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    command = args.command or "console"
    if args.command is None:
        # Bare `taskboard` behaves like `taskboard console`.
        args = _build_parser().parse_args(["console"])

    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(
        log_dir=settings.data_dir,
        log_name=f"{command}.log",
        console_level=console_level,
        show_requests=command == "serve",
    )

    logger.info("Starting %s %s...", getattr(settings, "app_name", "taskboard"), command)

    if command == "serve":
        _serve(settings, args)
        return

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_console(settings, args))
    logger.info("Bye.")


if __name__ == "__main__":
    main()
