"""
Date/Time Codec

Bing encodes dates as compact digit strings: "YYYYMMDD" for calendar dates (startdate, enddate)
and "YYYYMMDDHHMM" for full timestamps (fullstartdate). This module turns those strings into
timezone-aware UTC datetimes.

A new picture of the day becomes available at 07:00. That hour is used both as the default time
when a date string carries no (or an unreadable) time part, and to predict when to check for the
next picture when the remote source does not tell us.
"""

from datetime import datetime, time, timedelta, timezone

from dailywall.errors import MalformedDate

DATE_FORMAT = "%Y%m%d"
TIME_FORMAT = "%H%M"

# hour (UTC) at which the picture of the day changes over
PICTURE_CHANGE_HOUR = 7


def decode_date(value: str) -> datetime:
    """
    Decode a Bing date string into an aware UTC datetime.

    The first 8 characters must form a valid calendar date. An optional 4 digit HHMM time may
    follow; when it is missing or cannot be parsed the time defaults to PICTURE_CHANGE_HOUR:00.

    >>> decode_date("202401150930")
    datetime.datetime(2024, 1, 15, 9, 30, tzinfo=datetime.timezone.utc)
    """

    if not isinstance(value, str) or len(value) < 8 or not value[:8].isdigit():
        raise MalformedDate(f"Expected at least 8 digits (YYYYMMDD), got {value!r}")

    try:
        date = datetime.strptime(value[:8], DATE_FORMAT).date()
    except ValueError as error:
        raise MalformedDate(f"Invalid calendar date in {value!r}: {error}") from error

    remainder = value[8:]
    try:
        # strptime accepts single digit fields, so insist on exactly HHMM
        if len(remainder) != 4 or not remainder.isdigit():
            raise ValueError(remainder)
        clock = datetime.strptime(remainder, TIME_FORMAT).time()
    except ValueError:
        clock = time(hour=PICTURE_CHANGE_HOUR)

    return datetime.combine(date, clock, tzinfo=timezone.utc)


def format_date(instant: datetime) -> str:
    """Encode the calendar date of instant (in UTC) the way Bing prefixes its start dates."""

    return instant.astimezone(timezone.utc).strftime(DATE_FORMAT)


def predict_next_poll_time(now: datetime) -> datetime:
    """
    Return the next PICTURE_CHANGE_HOUR boundary: today's if now is still before it, otherwise
    tomorrow's.
    """

    now = now.astimezone(timezone.utc)
    boundary = datetime.combine(now.date(), time(hour=PICTURE_CHANGE_HOUR), tzinfo=timezone.utc)
    if now.hour >= PICTURE_CHANGE_HOUR:
        boundary += timedelta(days=1)
    return boundary
