"""
dailywall console utilities

This module provides application-wide access to Rich Console objects for writing to stdout and
stderr, and routes the standard logging module through Rich so the long-running engine and the
one-shot commands share the same look.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

dailywall_theme = Theme(
    {"warning": "orange_red1", "fail": "bold red", "confirm": "", "describe": ""}
)

console = Console(theme=dailywall_theme)
error_console = Console(theme=dailywall_theme, stderr=True)

LOG_LEVELS = {"quiet": logging.WARNING, "normal": logging.INFO, "verbose": logging.DEBUG}


def setup_logging(verbosity: str = "normal") -> None:
    """Send log records to stderr through Rich. verbosity is one of LOG_LEVELS."""

    logging.basicConfig(
        level=LOG_LEVELS.get(verbosity, logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, rich_tracebacks=True)],
        force=True,
    )


"""
Formatting helpers for the one-shot commands (fetch, local). The run command reports through
logging instead. Progress and results go to stdout; warnings and failures go to stderr so the
picture path a command echoes stays easy to capture in scripts.
"""


def warn(msg: str):
    """Report a recoverable problem, e.g. no cached picture or a subcommand that failed to load."""

    error_console.print(f":exclamation_mark-emoji: [bold]warning: [/] {msg}", style="warning")


def describe(msg: str, **kwargs):
    console.print(msg, style="describe", **kwargs)


def confirm_success(msg: str, **kwargs):
    """Report a completed step such as a saved download. kwargs pass through to console.print."""

    console.print(msg, style="confirm", **kwargs)


def fail(msg: str):
    """Report the DailywallError that ended a command; catch_errors calls this before exiting."""

    error_console.print(f":x-emoji: failed. {msg}", style="fail")
