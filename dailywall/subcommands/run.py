"""
Run Command

Starts the wallpaper engine and runs until the process is stopped. Typically launched from the
Hyprland config after hyprpaper:

    exec-once = hyprpaper
    exec-once = dailywall run
"""

import queue
import logging

import click

from dailywall import hyprland
from dailywall.cli import catch_errors
from dailywall.config import DailywallConfig
from dailywall.errors import DailywallError
from dailywall.hyprland import MonitorListener
from dailywall.hyprpaper import Hyprpaper
from dailywall.notifier import ChangeNotifier, FilePublisher
from dailywall.scheduler import PollScheduler
from dailywall.state import SchedulerState
from dailywall.wallpaper_handler import WallpaperSequencer

logger = logging.getLogger(__name__)


def build_scheduler(config: DailywallConfig, events: queue.Queue) -> PollScheduler:
    """Wire the engine's components together from the configuration."""

    fallback_picture = config.locate_fallback_picture()
    if fallback_picture is None:
        raise DailywallError(
            "No fallback picture found. Set 'fallback_picture' in "
            f"{config.config_dir / 'config.json'} to an image to show until a picture is downloaded."
        )

    state = SchedulerState(fallback_picture)
    sequencer = WallpaperSequencer(
        hyprpaper=Hyprpaper(config.hyprpaper_socket),
        list_outputs=hyprland.list_monitors,
        state=state,
    )

    notifier = ChangeNotifier()
    if config.current_picture_file is not None:
        notifier.subscribe(FilePublisher(config.current_picture_file))
    if config.publish_dbus:
        # PyGObject is an optional dependency, only needed when publishing on D-Bus
        from dailywall.dbus_publisher import DBusPublisher

        publisher = DBusPublisher(state)
        publisher.start()
        notifier.subscribe(publisher)

    return PollScheduler(
        pictures_directory=config.get_pictures_directory(),
        state=state,
        sequencer=sequencer,
        notifier=notifier,
        events=events,
        market=config.get_market(),
    )


@click.command(name="run")
@click.pass_obj
@catch_errors
def cli(config: DailywallConfig):
    """Keep the wallpaper in sync with Bing's picture of the day."""

    events = queue.Queue()
    scheduler = build_scheduler(config, events)
    MonitorListener(events).start()

    logger.info("Storing pictures in %s", scheduler.pictures_directory)
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        logger.info("Stopped")
