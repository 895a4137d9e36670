# src/workdesk/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, checks the backend once, then runs the
console REPL on an asyncio loop until /exit, EOF or Ctrl+C.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, shutdown
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..remote.errors import WorkdeskError, friendly_error_message

logger = logging.getLogger(__name__)


async def _run(settings, *, api=None, presenter=None) -> None:
    state = create_initial_state(settings=settings, api=api, presenter=presenter)
    try:
        try:
            status = await state.api.health()
            logger.info("Backend reachable: %s", status.message)
            state.presenter.show_info(
                f"Connected to {getattr(state.api, 'base_url', 'server')}: {status.message or 'OK'}"
            )
        except WorkdeskError as e:
            # Not fatal: the user may start the backend later.
            logger.warning("Backend check failed: %s", e.message)
            state.presenter.show_error(friendly_error_message(e))

        if settings.console_enabled:
            await run_console_loop(state)
        else:
            logger.info("Console disabled; nothing to run.")
    finally:
        await shutdown(state)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")

    logger.info("Bye.")


if __name__ == "__main__":
    main()
