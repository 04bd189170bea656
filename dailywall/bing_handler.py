"""
Bing Picture of the Day - Metadata Resolver and Downloader

This module is a wrapper around Bing's public, unauthenticated image archive endpoint
(HPImageArchive.aspx). A single GET returns JSON metadata for the current picture of the day:

    {"images": [{"startdate": "20240115", "fullstartdate": "202401150800",
                 "enddate": "20240116", "url": "/th?id=...jpg", "urlbase": "/th?id=OHR.Foo_EN-US123",
                 "title": "Foo"}]}

The full resolution image lives at https://www.bing.com<urlbase>_UHD.jpg. Images are multi-megabyte
UHD assets, so they are streamed to disk in chunks rather than read into memory.

Nothing in here retries. The scheduler decides when to try again.
"""

import os
import logging
from enum import Enum
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import requests

from dailywall.dates import decode_date
from dailywall.errors import FileWriteError, NoImagesFound, TransportError

logger = logging.getLogger(__name__)

BING_IMAGE_API_BASE_URL = "https://www.bing.com/HPImageArchive.aspx"
BING_BASE_URL = "https://www.bing.com"
UHD_SUFFIX = "_UHD.jpg"

# (connect, read) in seconds. requests waits forever by default.
REQUEST_TIMEOUT = (10, 60)
CHUNK_SIZE = 64 * 1024


class Market(str, Enum):
    """Locale tags understood by Bing's "mkt" query parameter."""

    DANISH_DENMARK = "da-DK"
    GERMAN_GERMANY = "de-DE"
    ENGLISH_AUSTRALIA = "en-AU"
    ENGLISH_CANADA = "en-CA"
    ENGLISH_GB = "en-GB"
    ENGLISH_INDIA = "en-IN"
    ENGLISH_US = "en-US"
    SPANISH_SPAIN = "es-ES"
    FRENCH_CANADA = "fr-CA"
    FRENCH_FRANCE = "fr-FR"
    ITALIAN_ITALY = "it-IT"
    JAPANESE_JAPAN = "ja-JP"
    PORTUGUESE_BRAZIL = "pt-BR"
    CHINESE_CHINA = "zh-CN"

    @classmethod
    def from_str(cls, tag: str) -> "Market":
        try:
            return cls(tag)
        except ValueError:
            raise ValueError(f"Unknown market: {tag}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DailyPicture:
    """
    One day's image record as returned by Bing. Dates are kept in their raw string form and only
    decoded on demand, because a malformed end date must not prevent the picture from being used.
    """

    start_date: str
    full_start_date: str
    end_date: str
    url: str
    url_base: str
    title: str

    @classmethod
    def from_json(cls, record: dict) -> "DailyPicture":
        try:
            return cls(
                start_date=str(record["startdate"]),
                full_start_date=str(record.get("fullstartdate", "")),
                end_date=str(record["enddate"]),
                url=str(record.get("url", "")),
                url_base=str(record["urlbase"]),
                title=str(record["title"]),
            )
        except (KeyError, TypeError) as error:
            raise NoImagesFound(f"Bing returned an incomplete image record: {error}") from error

    @property
    def image_url(self) -> str:
        return f"{BING_BASE_URL}{self.url_base}{UHD_SUFFIX}"

    @property
    def file_name(self) -> str:
        """
        Name of the local file for this picture. Deterministic in (start_date, title), which makes
        it both the download target and the cache lookup key.
        """

        # a title containing a path separator would otherwise escape the pictures directory
        title = self.title.replace(os.sep, "_")
        return f"{self.start_date}-{title}.jpg"

    def get_end_date(self) -> datetime:
        """Decode end_date. Raises MalformedDate."""

        return decode_date(self.end_date)


def image_of_the_day(market: Optional[Market] = None) -> DailyPicture:
    """
    Query Bing for exactly one picture: the current picture of the day. The market is optional;
    when omitted Bing picks one based on the client's location.

    Raises TransportError for any network, HTTP or decoding failure and NoImagesFound if the
    response contains no image.
    """

    params = {"format": "js", "idx": "0", "n": "1"}
    if market is not None:
        params["mkt"] = str(market)

    try:
        r = requests.get(BING_IMAGE_API_BASE_URL, params=params, timeout=REQUEST_TIMEOUT)
        r.raise_for_status()
        payload = r.json()
    except requests.exceptions.RequestException as error:
        raise TransportError(f"Failed to query Bing image archive: {error}") from error
    except ValueError as error:
        # older versions of requests raise a plain json decoding error
        raise TransportError(f"Bing returned invalid JSON: {error}") from error

    images = payload.get("images") if isinstance(payload, dict) else None
    if not images:
        raise NoImagesFound("Bing API did not return any images")

    picture = DailyPicture.from_json(images[0])
    logger.debug("Bing picture of the day: %s (%s)", picture.title, picture.start_date)
    return picture


def download_image(picture: DailyPicture, file_path: Path) -> Path:
    """
    Stream the UHD image for picture into file_path, creating missing parent directories.

    The body is written to a hidden temporary file next to the destination and renamed into place
    only once the whole body has arrived. A file existing at file_path therefore always means a
    complete download. Raises TransportError or FileWriteError; the temporary file is removed on
    failure.
    """

    destination_path = Path(file_path)
    # leading dot: the cache prober matches on a date prefix and must not see partial files
    partial_path = destination_path.with_name(f".{destination_path.name}.part")
    url = picture.image_url

    logger.debug("Downloading image from %s into %s", url, destination_path)

    try:
        destination_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise FileWriteError(destination_path, error) from error

    try:
        with requests.get(url, stream=True, timeout=REQUEST_TIMEOUT) as r:
            r.raise_for_status()
            with open(partial_path, "wb") as file:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    file.write(chunk)
        os.replace(partial_path, destination_path)

    except requests.exceptions.RequestException as error:
        _discard(partial_path)
        raise TransportError(f"Failed to download {url}: {error}") from error

    except OSError as error:
        _discard(partial_path)
        raise FileWriteError(destination_path, error) from error

    return destination_path


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as error:
        logger.warning("Could not remove partial download %s: %s", path, error)
