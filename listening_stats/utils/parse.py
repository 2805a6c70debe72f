"""Timestamp parsing helpers shared by the history readers and the statistics engine"""
import re
from datetime import datetime

FORMATTED_END_TIME = "%Y-%m-%d %H:%M:%S"
SPOTIFY_END_TIME = "%Y-%m-%d %H:%M"

# Fractional seconds of any precision
FRACTION = re.compile(r"\.(\d+)")


def parse_formatted_end_time(end_time: str) -> datetime:
    """Parse the end time stored on events"""
    return datetime.strptime(end_time, FORMATTED_END_TIME)


def format_end_time(end_time: datetime) -> str:
    return end_time.strftime(FORMATTED_END_TIME)


def parse_spotify_end_time(end_time: str) -> datetime:
    """Parse the minute precision end time of the Spotify account data export"""
    return datetime.strptime(end_time, SPOTIFY_END_TIME)


def parse_end_time_rfc3339(end_time: str) -> datetime:
    """
    Parse an RFC 3339 timestamp and keep its wall clock time.

    The offset is dropped so that the result is naive, like the other end times.
    """
    if not isinstance(end_time, str) or not end_time:
        raise ValueError(f"Invalid timestamp: {end_time!r}")
    if end_time.endswith('Z'):
        end_time = end_time[:-1] + '+00:00'
    end_time = FRACTION.sub(_pad_fraction, end_time, count=1)
    return datetime.fromisoformat(end_time).replace(tzinfo=None)


def _pad_fraction(match) -> str:
    # fromisoformat before 3.11 only takes 3 or 6 digits
    return "." + match.group(1)[:6].ljust(6, "0")
