# src/workdesk/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Loggers that would flood the prompt: every poller tick and every HTTP request.
_QUIET_APP_LOGGERS = ("workdesk.sync.refresh",)
_HTTP_LOGGERS = ("httpx", "httpcore")


class _ConsoleNoiseFilter(logging.Filter):
    """Keep the REPL readable: app logs pass, the notes poller and libraries only when something is wrong."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("workdesk."):
            if name.startswith(_QUIET_APP_LOGGERS):
                return record.levelno >= logging.WARNING
            return True

        # httpx/httpcore, py.warnings and anything else.
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/workdesk",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Send filtered logs to stderr and everything to <log_dir>/workdesk.log.

    Replaces existing root handlers, so calling it twice does not duplicate output.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    logfile = logging.FileHandler(str(log_dir / "workdesk.log"), encoding="utf-8")
    logfile.setLevel(file_level)
    logfile.setFormatter(fmt)
    root.addHandler(logfile)

    logging.captureWarnings(True)

    # Request lines are DEBUG/INFO in httpx; the client logs its own outcomes.
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
