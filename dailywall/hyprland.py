"""
Hyprland Output Watcher

Two read-only views of the compositor's output (monitor) topology:

- list_monitors() asks Hyprland's control socket (.socket.sock) for the current monitors. It is
  called every time the wallpaper is broadcast, since monitors come and go.
- MonitorListener follows Hyprland's event socket (.socket2.sock) on a background thread and
  forwards every "monitoradded>>NAME" event into a queue. The thread never touches wallpaper
  state itself; the scheduler loop consumes the queue.
"""

import os
import json
import queue
import socket
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dailywall.errors import DaemonError
from dailywall.hyprpaper import HYPR_RUNTIME_DIR, SOCKET_TIMEOUT

logger = logging.getLogger(__name__)

CONTROL_SOCKET_NAME = ".socket.sock"
EVENT_SOCKET_NAME = ".socket2.sock"
MONITOR_ADDED_EVENT = "monitoradded"


@dataclass(frozen=True)
class OutputAdded:
    """Event: a monitor named `name` became available."""

    name: str


def instance_directory() -> Path:
    signature = os.environ.get("HYPRLAND_INSTANCE_SIGNATURE")
    if not signature:
        raise DaemonError("HYPRLAND_INSTANCE_SIGNATURE is not set, is Hyprland running?")
    return HYPR_RUNTIME_DIR / signature


def list_monitors(socket_path: Optional[Path] = None) -> list[str]:
    """Return the names of all monitors currently known to Hyprland. Raises DaemonError."""

    socket_path = socket_path or instance_directory() / CONTROL_SOCKET_NAME

    chunks = []
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(SOCKET_TIMEOUT)
            sock.connect(str(socket_path))
            sock.sendall(b"j/monitors")
            while chunk := sock.recv(4096):
                chunks.append(chunk)
    except OSError as error:
        raise DaemonError(f"Failed to query monitors from {socket_path}: {error}") from error

    try:
        monitors = json.loads(b"".join(chunks))
        if not isinstance(monitors, list):
            raise TypeError(f"expected a list of monitors, got {type(monitors).__name__}")
        return [monitor["name"] for monitor in monitors]
    except (ValueError, TypeError, KeyError) as error:
        raise DaemonError(f"Unexpected reply to monitor query: {error}") from error


def parse_event(line: str) -> Optional[OutputAdded]:
    """
    Turn one line of the event socket into an event we care about, or None.

    Lines look like "monitoradded>>DP-1". Newer Hyprland versions also send
    "monitoraddedv2>>1,DP-1,description" for the same monitor, which is ignored so each monitor
    is handled exactly once.
    """

    event, separator, data = line.strip().partition(">>")
    if separator and event == MONITOR_ADDED_EVENT and data:
        return OutputAdded(data)
    return None


class MonitorListener:
    """Background thread forwarding monitor-added events from Hyprland into `events`."""

    def __init__(self, events: queue.Queue, socket_path: Optional[Path] = None):
        self.events = events
        self.socket_path = socket_path
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread:
            return
        self.socket_path = self.socket_path or instance_directory() / EVENT_SOCKET_NAME
        self._thread = threading.Thread(target=self._run, name="MonitorListener", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.connect(str(self.socket_path))
                logger.debug("Listening for Hyprland events on %s", self.socket_path)
                with sock.makefile("r", encoding="utf-8", errors="replace") as stream:
                    self.forward(stream)
        except OSError as error:
            logger.error("Hyprland event listener stopped: %s", error)
            return
        logger.error("Hyprland closed the event socket, new monitors will not get a wallpaper")

    def forward(self, lines) -> None:
        for line in lines:
            event = parse_event(line)
            if event is not None:
                logger.debug("Monitor added: %s", event.name)
                self.events.put(event)
