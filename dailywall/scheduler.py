"""
Poll Scheduler

Decides when to look for a new picture of the day and what to do with it:

    Bootstrapping ──► Cycling ──► Sleeping ──► Cycling ──► ...

Bootstrapping (once): reuse a picture from the local cache if there is one. Today's picture means
nothing to do until the next 07:00 boundary. Yesterday's picture is shown right away, and today's
is fetched a minute later so yesterday's never flashes by for a split second. With no local
picture the scheduler cycles straight away. Whenever bootstrapping or a cycle ends with nothing
applied yet, for example because hyprpaper is still starting, the fallback picture is shown and
published, and the next poll is at most an hour away.

Cycling (poll_picture): ask Bing for the picture of the day, download it unless the file already
exists, hand it to the wallpaper sequencer and publish it. The next poll happens at the picture's
end date. Any failure keeps the current picture and retries in an hour.

Sleeping: wait for the next poll against the wall clock, in short slices so a suspended laptop or
a stepped clock is noticed. Monitor-added events from the compositor arrive through the same
queue and are handled in between, which keeps every wallpaper change on this one thread.
"""

import queue
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from dailywall import bing_handler
from dailywall.bing_handler import Market
from dailywall.cache import Today, Yesterday, poll_local_picture
from dailywall.dates import predict_next_poll_time
from dailywall.errors import FileWriteError, MalformedDate, NoImagesFound, TransportError
from dailywall.hyprland import OutputAdded
from dailywall.notifier import ChangeNotifier
from dailywall.state import SchedulerState
from dailywall.wallpaper_handler import WallpaperSequencer

logger = logging.getLogger(__name__)

RETRY_DELAY = timedelta(hours=1)
YESTERDAY_GRACE = timedelta(minutes=1)
# longest uninterrupted wait before the wall clock is read again
WAKE_INTERVAL = timedelta(seconds=60)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PollScheduler:
    def __init__(
        self,
        pictures_directory: Path,
        state: SchedulerState,
        sequencer: WallpaperSequencer,
        notifier: ChangeNotifier,
        events: Optional[queue.Queue] = None,
        market: Optional[Market] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.pictures_directory = Path(pictures_directory)
        self.state = state
        self.sequencer = sequencer
        self.notifier = notifier
        self.events = events if events is not None else queue.Queue()
        self.market = market
        self.clock = clock

    def run_forever(self) -> None:
        self.bootstrap()
        while True:
            self.sleep_until_next_poll()
            self.cycle()

    def bootstrap(self) -> None:
        """Show something as soon as possible and schedule the first real poll."""

        now = self.clock()
        local_picture = poll_local_picture(self.pictures_directory, now)

        if isinstance(local_picture, Today):
            logger.debug("Located today's picture at %s", local_picture.path)
            next_poll = predict_next_poll_time(now)

        elif isinstance(local_picture, Yesterday):
            logger.debug(
                "Located yesterday's picture at %s, refreshing in 1 minute", local_picture.path
            )
            next_poll = now + YESTERDAY_GRACE

        else:
            logger.debug("No local picture available, polling Bing")
            self.cycle()
            logger.info("Next poll at %s", self.state.next_poll)
            return

        if not self.adopt_picture(local_picture.path):
            next_poll = min(next_poll, now + RETRY_DELAY)
            self.show_fallback_if_blank()

        self.state.set_next_poll(next_poll)
        logger.info("Next poll at %s", next_poll)

    def cycle(self) -> None:
        path, next_poll = self.poll_picture()

        if path is not None and not self.adopt_picture(path):
            # hyprpaper could not load the picture, keep the file and try again later
            next_poll = self.clock() + RETRY_DELAY
            path = None

        if path is None:
            self.show_fallback_if_blank()

        self.state.set_next_poll(next_poll)

    def show_fallback_if_blank(self) -> None:
        """Apply and publish the fallback picture if nothing has been applied yet."""

        if self.state.last_applied is not None:
            return

        fallback_picture = self.state.fallback_picture
        logger.info("Failed to show a picture, showing %s for now", fallback_picture)
        if self.sequencer.update_wallpaper(fallback_picture):
            self.state.set_current_picture(fallback_picture)
            self.notifier.publish(fallback_picture)

    def poll_picture(self) -> tuple[Optional[Path], datetime]:
        """
        Make sure today's picture is on disk. Returns its path (None on failure) and the instant
        at which the next poll should run.
        """

        logger.debug("Polling picture")
        try:
            picture = bing_handler.image_of_the_day(self.market)
        except (TransportError, NoImagesFound) as error:
            logger.error("Failed to query image of the day: %s, retrying in an hour.", error)
            return None, self.clock() + RETRY_DELAY

        picture_path = self.pictures_directory / picture.file_name

        if picture_path.exists():
            logger.debug("Picture already downloaded")
        else:
            try:
                bing_handler.download_image(picture, picture_path)
            except (TransportError, FileWriteError) as error:
                logger.error("Failed to download image: %s, retrying in an hour.", error)
                return None, self.clock() + RETRY_DELAY

        now = self.clock()
        try:
            end_date = picture.get_end_date()
        except MalformedDate as error:
            next_poll = predict_next_poll_time(now)
            logger.warning("Failed to parse end date: %s, assuming %s", error, next_poll)
            return picture_path, next_poll

        if end_date < now:
            next_poll = predict_next_poll_time(now)
            logger.warning("Bing returned end date in the past, assuming %s", next_poll)
            return picture_path, next_poll

        return picture_path, end_date

    def adopt_picture(self, path: Path) -> bool:
        """Apply path to the outputs and publish it as the current picture."""

        if not self.sequencer.update_wallpaper(path):
            return False

        if self.state.set_current_picture(path):
            self.notifier.publish(path)
        return True

    def sleep_until_next_poll(self) -> None:
        """
        Block until the next poll is due, handling monitor-added events while waiting. Returns
        early if the wall clock jumps backwards.
        """

        wait_until = self.state.next_poll
        logger.debug("Sleeping until %s", wait_until)
        previous = self.clock()

        while True:
            now = self.clock()
            if wait_until is None or now >= wait_until:
                return
            if now < previous - WAKE_INTERVAL:
                logger.error(
                    "Error while sleeping: clock stepped backwards from %s to %s", previous, now
                )
                return
            previous = now

            timeout = min(wait_until - now, WAKE_INTERVAL).total_seconds()
            try:
                event = self.events.get(timeout=timeout)
            except queue.Empty:
                continue
            self.handle_event(event)

    def handle_event(self, event) -> None:
        if isinstance(event, OutputAdded):
            self.sequencer.on_output_added(event.name)
        else:
            logger.warning("Ignoring unknown event %r", event)
