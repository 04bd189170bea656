"""
Fetch Command
"""

import click

from dailywall import bing_handler
from dailywall.cli import catch_errors
from dailywall.config import DailywallConfig
from dailywall.console import confirm_success, describe


@click.command(name="fetch")
@click.pass_obj
@catch_errors
def cli(config: DailywallConfig):
    """Download today's picture of the day (if needed) and print its path."""

    describe(":earth_asia-emoji: asking Bing for the picture of the day ...")
    picture = bing_handler.image_of_the_day(config.get_market())
    picture_path = config.get_pictures_directory() / picture.file_name

    if picture_path.exists():
        describe(f"'{picture.title}' is already located at {picture_path.parent}")
    else:
        bing_handler.download_image(picture, picture_path)
        confirm_success(f":floppy_disk-emoji: saved '{picture_path.name}' to {picture_path.parent}")

    click.echo(str(picture_path))
