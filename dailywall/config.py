"""
dailywall Configuration Management

This file handles utilities related to generating and loading variables from a configuration file.
DailywallConfig should be loaded at startup, before any command runs. Raise a DailywallConfigError
for any issues that arise in processing or retrieving these configuration variables.

The configuration file is "config.json". For Linux this is saved at ~/.config/dailywall/config.json
(or wherever platformdirs says the user configuration directory is). Set DAILYWALL_CONFIG_DIR in
the environment to point dailywall at another directory.

Every key is optional:

    market                locale tag passed to Bing, e.g. "en-GB". Bing guesses when unset.
    pictures_directory    where pictures are downloaded and looked up
    fallback_picture      picture shown until the first picture of the day is available
    hyprpaper_socket      path of hyprpaper's IPC socket
    current_picture_file  file that always contains the current picture path
    publish_dbus          expose the current picture on the session bus
"""

import os
import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path, PurePath
from typing import Optional

from platformdirs import user_config_path, user_pictures_path

from dailywall.bing_handler import Market
from dailywall.errors import DailywallError

logger = logging.getLogger(__name__)

APP_NAME = "dailywall"
CONFIG_FILE_NAME = "config.json"
PICTURES_SUBFOLDER = "Bing Wallpapers"
CACHE_SUBFOLDER = "bing-wallpaper-cache"
FALLBACK_PICTURE_NAME = "bliss.jpg"


class DailywallConfigError(DailywallError):
    """Raise when an issue occurs with handling dailywall configuration."""

    pass


class PathEncoder(json.JSONEncoder):
    """
    custom encoder adds support for serializing pathlib objects as strings
    """

    def default(self, o):
        if isinstance(o, PurePath):
            return str(o)

        else:
            return json.JSONEncoder.default(self, o)


def default_config_dir() -> Path:
    try:
        return Path(os.environ["DAILYWALL_CONFIG_DIR"]).expanduser()
    except KeyError:
        return user_config_path(APP_NAME)


@dataclass
class DailywallConfig:
    """
    Configuration variables for dailywall. Instantiated by supplying keyword arguments from a
    deserialized json object, so application code refers to attributes and never to raw
    dictionary keys. Keep the json object flat.
    """

    market: Optional[str] = None
    pictures_directory: Optional[Path] = None
    fallback_picture: Optional[Path] = None
    hyprpaper_socket: Optional[Path] = None
    current_picture_file: Optional[Path] = None
    publish_dbus: bool = False
    config_dir: Path = field(default_factory=default_config_dir, metadata={"persist": False})

    def __post_init__(self):
        """
        JSON cannot deserialize a str into a Path, so convert path-like values here. Also
        validate the market early so a typo is reported at startup instead of on first poll.
        """

        for name in (
            "pictures_directory",
            "fallback_picture",
            "hyprpaper_socket",
            "current_picture_file",
        ):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, Path(value).expanduser())

        self.config_dir = Path(self.config_dir)

        if self.market is not None:
            try:
                Market.from_str(self.market)
            except ValueError as error:
                raise DailywallConfigError(str(error)) from error

    def get_market(self) -> Optional[Market]:
        return Market.from_str(self.market) if self.market else None

    def get_pictures_directory(self) -> Path:
        """
        Explicit override, else "<pictures dir>/Bing Wallpapers" when the user has a pictures
        directory, else "<config dir>/bing-wallpaper-cache".
        """

        if self.pictures_directory is not None:
            return self.pictures_directory

        pictures_dir = user_pictures_path()
        if pictures_dir.is_dir():
            return pictures_dir / PICTURES_SUBFOLDER

        return self.config_dir / CACHE_SUBFOLDER

    def locate_fallback_picture(self) -> Optional[Path]:
        """Return the first existing candidate for the fallback picture, or None."""

        candidates = [
            self.fallback_picture,
            Path("/usr/share/dailywall") / FALLBACK_PICTURE_NAME,
            Path.cwd() / FALLBACK_PICTURE_NAME,
        ]

        for candidate in candidates:
            if candidate is not None and candidate.is_file():
                return candidate
        return None

    def to_json(self) -> str:
        persisted = {
            f.name: getattr(self, f.name) for f in fields(self) if f.metadata.get("persist", True)
        }
        return json.dumps(persisted, sort_keys=True, indent=4, cls=PathEncoder)

    def generate_config_json(self) -> Path:
        """
        Write the config to config_dir/config.json and return the written file's path.

        Warning: will overwrite any existing config file for dailywall.
        """

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            dest_file = self.config_dir / CONFIG_FILE_NAME
            dest_file.write_text(self.to_json(), encoding="utf-8")

        except OSError as error:
            raise DailywallConfigError(
                f"There was an error saving the configuration file: {error}."
            ) from error

        return dest_file


def load_config(config_dir: Optional[Path] = None) -> DailywallConfig:
    """
    Load config.json from config_dir (default: DAILYWALL_CONFIG_DIR or the platform config
    directory). Raise DailywallConfigError if it is missing or invalid.
    """

    config_dir = Path(config_dir) if config_dir else default_config_dir()
    config_src = config_dir / CONFIG_FILE_NAME

    try:
        from_json = json.loads(config_src.read_text(encoding="utf-8"))

    except json.JSONDecodeError as error:
        raise DailywallConfigError(f"There was an issue reading the config: {error}") from error

    except OSError as error:
        raise DailywallConfigError(f"There was an issue opening the config: {error}") from error

    if not isinstance(from_json, dict):
        raise DailywallConfigError(f"{config_src} must contain a JSON object")

    known = {f.name for f in fields(DailywallConfig) if f.metadata.get("persist", True)}
    unknown = set(from_json) - known
    if unknown:
        raise DailywallConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    return DailywallConfig(config_dir=config_dir, **from_json)


def init(config_dir: Optional[Path] = None) -> DailywallConfig:
    """Load the configuration, writing a default one on first run."""

    config_dir = Path(config_dir) if config_dir else default_config_dir()

    if not (config_dir / CONFIG_FILE_NAME).exists():
        config = DailywallConfig(config_dir=config_dir)
        config_file = config.generate_config_json()
        if config.locate_fallback_picture() is None:
            logger.warning(
                "Wrote a default configuration to %s. Set 'fallback_picture' there to an image "
                "to show until the first picture is downloaded.",
                config_file,
            )
        return config

    return load_config(config_dir)
