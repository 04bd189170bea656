"""
dailywall Errors

Every failure that crosses a component boundary is raised as one of the exceptions below so
that callers can handle errors by kind instead of by whichever library produced them. Library
exceptions are chained with "raise ... from error" to keep the original traceback available in logs.

    DailywallError
    ├── TransportError      network, HTTP status or response decoding problem
    ├── NoImagesFound       the remote source answered without a usable image record
    ├── FileWriteError      local filesystem problem while storing a picture
    ├── DaemonError         hyprpaper (or the compositor) refused or misbehaved
    └── MalformedDate       a date string could not be decoded
"""

from pathlib import Path


class DailywallError(Exception):
    """Base class for all dailywall errors."""

    pass


class TransportError(DailywallError):
    """
    Raised when a request to the remote picture source fails: connection errors, timeouts,
    bad status codes or a response body that cannot be decoded.
    """

    pass


class NoImagesFound(DailywallError):
    """Raised when the metadata response is empty or the image record is incomplete."""

    pass


class FileWriteError(DailywallError):
    """
    Raised when a picture cannot be written to its destination.
    """

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write picture to {path}: {cause}")


class DaemonError(DailywallError):
    """Raised when the wallpaper daemon or the compositor IPC does not acknowledge a request."""

    pass


class MalformedDate(DailywallError):
    """Raised when a date string does not start with a valid YYYYMMDD date."""

    pass
