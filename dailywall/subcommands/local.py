"""
Local Command
"""

import sys

import click

from dailywall.cache import Today, poll_local_picture
from dailywall.config import DailywallConfig
from dailywall.console import describe, warn
from dailywall.scheduler import utc_now


@click.command(name="local")
@click.pass_obj
def cli(config: DailywallConfig):
    """Show the picture of the day already downloaded, if any."""

    directory = config.get_pictures_directory()
    local_picture = poll_local_picture(directory, utc_now())

    if local_picture is None:
        warn(f"no picture from today or yesterday in {directory}")
        sys.exit(1)

    day = "today" if isinstance(local_picture, Today) else "yesterday"
    describe(f"found {day}'s picture")
    click.echo(str(local_picture.path))
