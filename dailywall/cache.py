"""
Local Cache Prober

Look through the pictures directory for a picture that was downloaded earlier so the desktop can
show something immediately at startup, before (or without) any network access.

Downloaded pictures are named "<startdate>-<title>.jpg", so the start date doubles as the lookup
key: a file whose name starts with today's date is today's picture. "Yesterday" is computed as
now minus 24 hours rather than the previous calendar day so that it buckets the same way the
remote source does.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Union

from dailywall.dates import format_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Today:
    path: Path


@dataclass(frozen=True)
class Yesterday:
    path: Path


LocalPicture = Union[Today, Yesterday]


def poll_local_picture(directory: Path, now: datetime) -> Optional[LocalPicture]:
    """
    Return Today(path) if today's picture is present in directory, otherwise Yesterday(path) if
    yesterday's is, otherwise None. A directory that cannot be listed counts as empty.
    """

    today = format_date(now)
    yesterday = format_date(now - timedelta(hours=24))
    logger.debug(
        "Looking for today's picture %s and yesterday's as fallback %s", today, yesterday
    )

    try:
        entries = list(Path(directory).iterdir())
    except OSError as error:
        logger.debug("Cannot list pictures directory %s: %s", directory, error)
        return None

    yesterday_path = None
    for entry in entries:
        if entry.name.startswith(today):
            return Today(entry)
        if entry.name.startswith(yesterday):
            # keep looking, today's picture may still turn up
            yesterday_path = entry

    if yesterday_path is not None:
        return Yesterday(yesterday_path)
    return None
