"""
dailywall

Keep your Hyprland wallpaper in sync with Bing's picture of the day.

This module defines the entry point to the dailywall CLI: a 'cli' command group that loads the
configuration, sets up logging and hands both to whichever subcommand was invoked. Subcommands
live in dailywall/subcommands/ and are attached at startup by import_commands/attach_commands.
"""

import sys
import inspect
import importlib.util
from collections.abc import Iterable
from functools import wraps
from pathlib import Path
from typing import Optional

import click

import dailywall
from dailywall.config import init
from dailywall.console import fail, setup_logging, warn
from dailywall.errors import DailywallError


def catch_errors(func):
    """
    Catch dailywall errors, format them with the "fail" console template and exit the application
    with an error code.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DailywallError as error:
            fail(str(error))
            sys.exit(1)

    return wrapper


@click.group()
@click.option(
    "--verbose",
    "verbosity",
    flag_value="verbose",
    help="Log every step, including each IPC command.",
)
@click.option(
    "--quiet",
    "verbosity",
    flag_value="quiet",
    help="Only log warnings and errors.",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Read config.json from this directory instead of the default location.",
)
@click.version_option(version=dailywall.__version__)
@click.pass_context
@catch_errors
def cli(ctx: click.Context, verbosity, config_dir):
    """
    dailywall

    Download Bing's picture of the day and show it on every monitor through hyprpaper.


    Run the wallpaper engine (normally started from your Hyprland config):

        $ dailywall run

    Download today's picture without touching the desktop:

        $ dailywall fetch

    See which picture is already available locally:

        $ dailywall local
    """

    setup_logging(verbosity or "normal")
    ctx.obj = init(config_dir)


def import_commands(module_paths: Optional[Iterable] = None) -> list[click.Command]:
    """
    Retrieve a list of click Commands from module_paths. Default directory is the built in
    subcommands directory.

    A valid dailywall command module defines a "cli" function wrapped as a click Command object.
    Set the 'name' keyword argument in the @click.command decorator to name the command.
    """

    if module_paths is None:
        module_paths = Path(dailywall.__file__).parent.glob("subcommands/*.py")

    commands = []

    for path in sorted(module_paths):
        name = inspect.getmodulename(path)
        if name != "__init__":

            # Recipe for importing a source file directly comes from the importlib docs:
            # https://docs.python.org/3/library/importlib.html#importing-a-source-file-directly
            module_name = f"dailywall.subcommands.{name}"
            spec = importlib.util.spec_from_file_location(module_name, path)
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)

            try:
                commands.append(getattr(module, "cli"))

            except AttributeError:
                warn(f"Cannot add command {name}: no 'cli' function found.")

    return commands


def attach_commands(group: click.Group, commands: list[click.Command]):
    """
    Attach each command in a list of click Command objects to a provided group.
    """

    for command in commands:
        group.add_command(command)


def main():

    commands = import_commands()
    attach_commands(cli, commands)
    cli()


if __name__ == "__main__":
    main()
