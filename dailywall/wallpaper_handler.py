"""
Wallpaper Sequencer

Puts a picture on every Hyprland monitor through hyprpaper without ever showing a blank frame.

A new picture goes through three steps, always in this order:

    1. preload(new)                 make the image resident in hyprpaper
    2. wallpaper(monitor, new)      for every monitor Hyprland currently reports
    3. unload(old)                  release the previous image, only once step 2 is over

Releasing the old image last means a failing or slow preload/apply leaves the old image on
screen. A monitor that fails in step 2 is logged and skipped; it does not stop the others or the
unload. A failed preload abandons the transition altogether: nothing is applied and the old image
stays registered as the applied one.

Monitors plugged in later get the already-resident picture with a single wallpaper command.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable

from dailywall.errors import DaemonError
from dailywall.hyprpaper import Hyprpaper
from dailywall.state import SchedulerState

logger = logging.getLogger(__name__)


class WallpaperSequencer:
    def __init__(
        self,
        hyprpaper: Hyprpaper,
        list_outputs: Callable[[], Iterable[str]],
        state: SchedulerState,
    ):
        self.hyprpaper = hyprpaper
        self.list_outputs = list_outputs
        self.state = state

    def update_wallpaper(self, path: Path) -> bool:
        """
        Show path on all outputs and release the previously applied picture. Returns False if the
        picture could not be preloaded, in which case nothing changed.
        """

        path = Path(path)

        with self.state.locked():
            old_picture = self.state.last_applied

            if old_picture == path:
                logger.debug("Picture %s is already applied", path)
                return True

            try:
                self.hyprpaper.preload(path)
            except DaemonError as error:
                logger.error("Failed to preload wallpaper %s: %s", path, error)
                return False

            self.apply_wallpaper_to_all_outputs(path)
            self.state.set_applied_picture(path)

            if old_picture is not None:
                logger.debug("Unloading old wallpaper: %s", old_picture)
                try:
                    self.hyprpaper.unload(old_picture)
                except DaemonError as error:
                    logger.error("Failed to unload old wallpaper %s: %s", old_picture, error)

        logger.info("Wallpaper is now %s", path)
        return True

    def apply_wallpaper_to_all_outputs(self, path: Path) -> None:
        try:
            outputs = list(self.list_outputs())
        except DaemonError as error:
            logger.error("Failed to list outputs: %s", error)
            return

        for output in outputs:
            self.apply_wallpaper_to_output(output, path)

    def apply_wallpaper_to_output(self, output: str, path: Path) -> bool:
        try:
            self.hyprpaper.set_wallpaper(output, path)
        except DaemonError as error:
            logger.warning("Failed to apply wallpaper %s to %s: %s", path, output, error)
            return False
        return True

    def on_output_added(self, output: str) -> None:
        """Show the current picture on a newly connected output. No preload, no unload."""

        with self.state.locked():
            path = self.state.displayed_picture()
            logger.debug("Output %s added, applying %s", output, path)
            self.apply_wallpaper_to_output(output, path)
