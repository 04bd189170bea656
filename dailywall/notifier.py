"""
Change Notifier

Mirrors the current picture path to whoever is interested: a D-Bus property, a plain file for
status bars, or any other callable. Publishing is best effort. A subscriber that fails is logged
and skipped; the engine's own state is never rolled back because of it.
"""

import os
import logging
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Subscriber = Callable[[Path], None]


class ChangeNotifier:
    def __init__(self, subscribers: Optional[list[Subscriber]] = None):
        self.subscribers: list[Subscriber] = list(subscribers or [])

    def subscribe(self, subscriber: Subscriber) -> None:
        self.subscribers.append(subscriber)

    def publish(self, path: Path) -> None:
        logger.debug("Publishing current picture %s", path)
        for subscriber in self.subscribers:
            try:
                subscriber(Path(path))
            except Exception as error:
                logger.error(
                    "Error while notifying %s of picture change: %s",
                    getattr(subscriber, "__name__", type(subscriber).__name__),
                    error,
                )


class FilePublisher:
    """Write the current picture path, followed by a newline, into a file."""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path).expanduser()

    def __call__(self, path: Path) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        partial = self.file_path.with_name(f".{self.file_path.name}.tmp")
        partial.write_text(f"{path}\n", encoding="utf-8")
        # readers polling the file must never see it half written
        os.replace(partial, self.file_path)
