"""
hyprpaper IPC

hyprpaper (the Hyprland wallpaper daemon) listens on a Unix domain socket and accepts one text
command per connection, answering "ok" on success:

    preload <path>              load an image into memory
    wallpaper <monitor>,<path>  show a preloaded image on a monitor
    unload <path>               release a preloaded image

The socket lives in a per-instance directory named after $HYPRLAND_INSTANCE_SIGNATURE, or directly
in /tmp/hypr for sessions started without one.
"""

import os
import socket
import logging
import time
from pathlib import Path
from typing import Optional

from dailywall.errors import DaemonError

logger = logging.getLogger(__name__)

HYPR_RUNTIME_DIR = Path("/tmp/hypr")
SOCKET_NAME = ".hyprpaper.sock"

CONNECT_ATTEMPTS = 5
CONNECT_DELAY = 0.2
SOCKET_TIMEOUT = 5.0
ACK = b"ok"


def default_socket_path() -> Path:
    signature = os.environ.get("HYPRLAND_INSTANCE_SIGNATURE")
    if signature:
        return HYPR_RUNTIME_DIR / signature / SOCKET_NAME
    return HYPR_RUNTIME_DIR / SOCKET_NAME


class Hyprpaper:
    """Client for hyprpaper's command socket. Each command opens a fresh connection."""

    def __init__(self, socket_path: Optional[Path] = None):
        self.socket_path = Path(socket_path) if socket_path else default_socket_path()

    def _connect(self) -> socket.socket:
        for attempt in range(1, CONNECT_ATTEMPTS + 1):
            logger.debug("Connecting to %s attempt #%d", self.socket_path, attempt)
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            sock.settimeout(SOCKET_TIMEOUT)
            try:
                sock.connect(str(self.socket_path))
                return sock
            except OSError as error:
                sock.close()
                logger.debug("Error connecting: %s", error)
                if attempt != CONNECT_ATTEMPTS:
                    time.sleep(CONNECT_DELAY)

        raise DaemonError(f"Could not open hyprpaper socket {self.socket_path}")

    def send(self, command: str) -> str:
        """Send one command and return the acknowledgement. Raises DaemonError unless it is "ok"."""

        sock = self._connect()
        try:
            logger.debug("Sending message: %r", command)
            sock.sendall(command.encode())
            reply = sock.recv(len(ACK))
        except OSError as error:
            raise DaemonError(f"hyprpaper IPC failed for {command!r}: {error}") from error
        finally:
            sock.close()

        if reply != ACK:
            raise DaemonError(f"hyprpaper rejected {command!r}: {reply!r}")
        return reply.decode()

    def preload(self, path: Path) -> str:
        logger.debug("Preloading wallpaper: %s", path)
        # hyprpaper reads preload paths as C strings
        return self.send(f"preload {path}\0")

    def set_wallpaper(self, monitor: str, path: Path) -> str:
        logger.debug("Applying wallpaper '%s' to monitor: %s", path, monitor)
        return self.send(f"wallpaper {monitor},{path}")

    def unload(self, path: Path) -> str:
        logger.debug("Unloading wallpaper: %s", path)
        return self.send(f"unload {path}")
