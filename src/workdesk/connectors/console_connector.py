# src/workdesk/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..remote.errors import WorkdeskError, friendly_error_message

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsolePresenter:
    """Presenter port for the terminal: prompts, errors and notices become timestamped lines."""

    def show_prompt(self, title: str, message: str) -> None:
        _print_ts(f"[{title}] {message}")

    def show_error(self, message: str) -> None:
        _print_ts(f"[Error] {message}")

    def show_info(self, message: str) -> None:
        _print_ts(message)


async def run_console_loop(state: AppState) -> None:
    """
    Read commands from stdin without blocking the event loop.

    input() runs in a worker thread so delete-confirmation timers and the notes
    poller keep firing while the prompt is waiting.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands, /login or /register to start, /exit to quit.\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
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
            response = await command_registry.handle(state, user_input)
        except WorkdeskError as e:
            logger.info("Command failed: %s: %s", e.__class__.__name__, e.message)
            state.presenter.show_error(friendly_error_message(e))
            continue
        except ValueError as e:
            state.presenter.show_error(str(e))
            continue
        except Exception:
            logger.exception("Command handler crashed.")
            _print_ts("Internal error while handling a command.")
            continue

        if response is None:
            _print_ts("Commands start with '/'. Use /help to list them.")
            continue

        print(f"[{_ts_local()}] {response}\n", flush=True)

    logger.info("Console connector finished.")
