"""
Scheduler State

The engine's only mutable state. It is owned by the scheduler, which is the only writer; the
wallpaper sequencer and the publishers read it. Updates go through one re-entrant lock so a
reader on another thread (the D-Bus publisher) never sees a half-finished update.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional


class SchedulerState:
    """
    current_picture  newest picture the engine knows about, the fallback asset until one is found
    last_applied     picture currently shown on the outputs, None until the first apply
    next_poll        instant of the next poll cycle
    """

    def __init__(self, fallback_picture: Path):
        self._lock = threading.RLock()
        self.fallback_picture = Path(fallback_picture)
        self._current_picture = self.fallback_picture
        self._last_applied: Optional[Path] = None
        self._next_poll: Optional[datetime] = None

    @contextmanager
    def locked(self):
        """Hold the state lock across a sequence of operations, e.g. a wallpaper transition."""

        with self._lock:
            yield self

    @property
    def current_picture(self) -> Path:
        # lock-free, never blocks behind a wallpaper transition; the reference is swapped
        # in a single assignment
        return self._current_picture

    @property
    def last_applied(self) -> Optional[Path]:
        with self._lock:
            return self._last_applied

    @property
    def next_poll(self) -> Optional[datetime]:
        with self._lock:
            return self._next_poll

    def displayed_picture(self) -> Path:
        """The picture a newly connected output should show: the applied one, else the fallback."""

        with self._lock:
            return self._last_applied or self.fallback_picture

    def set_current_picture(self, path: Path) -> bool:
        """Record a new current picture. Returns True if the value changed."""

        path = Path(path)
        with self._lock:
            changed = path != self._current_picture
            self._current_picture = path
            return changed

    def set_applied_picture(self, path: Path) -> None:
        """Record that path has been applied to the outputs. Only the sequencer calls this."""

        with self._lock:
            self._last_applied = Path(path)

    def set_next_poll(self, instant: datetime) -> None:
        with self._lock:
            self._next_poll = instant
