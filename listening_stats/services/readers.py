"""Readers turning exported listening history files into raw track play records"""
import csv
import json
import logging
import os
from typing import Any, Dict, List

from listening_stats.commands import TrackPlay
from listening_stats.errors import (
    CannotReadContentsError,
    DeserializationError,
    NotAFileError,
    UnsupportedFileTypeError,
)
from listening_stats.models.track_play import (
    AppleMusicPlayActivity,
    SpotifyExtendedPlay,
    SpotifyPlay,
)

logger = logging.getLogger(__name__)

# Keys only present in the extended streaming history export
EXTENDED_HISTORY_KEYS = ('ts', 'master_metadata_track_name')

def read_track_plays(path: str) -> List[TrackPlay]:
    """
    Read every track play record of an export file.

    Raises:
        ReadError: If the file cannot be read or holds no supported records
    """
    if not os.path.isfile(path):
        raise NotAFileError(path)

    extension = os.path.splitext(path)[1].lower()
    if extension == '.json':
        return parse_json(path)
    if extension == '.csv':
        return parse_csv(path)
    raise UnsupportedFileTypeError(path, extension or os.path.basename(path))


def parse_json(path: str) -> List[TrackPlay]:
    """Parse a Spotify export, either the account data or the extended streaming history"""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            entries = json.load(f)
    except OSError as e:
        raise CannotReadContentsError(path, str(e)) from e
    except ValueError as e:
        raise DeserializationError(path, f"Unable to deserialize JSON: {e}") from e

    if not isinstance(entries, list):
        raise DeserializationError(path, "Expected a list of track plays")

    track_plays: List[TrackPlay] = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping invalid entry in {path}: {entry!r}")
            continue
        track_plays.append(_spotify_record(entry))
    return track_plays


def _spotify_record(entry: Dict[str, Any]) -> TrackPlay:
    if any(key in entry for key in EXTENDED_HISTORY_KEYS):
        return SpotifyExtendedPlay.from_dict(entry)
    return SpotifyPlay.from_dict(entry)


def parse_csv(path: str) -> List[TrackPlay]:
    """Parse an Apple Music play activity export, keeping play end events only"""
    try:
        with open(path, 'r', encoding='utf-8-sig', newline='') as f:
            reader = csv.DictReader(f)
            headers = reader.fieldnames or []
            if not any(header.lower() == AppleMusicPlayActivity.IDENTIFYING_HEADER.lower() for header in headers):
                raise DeserializationError(path, "Missing Apple Music play activity headers")

            activities = [AppleMusicPlayActivity.from_row(row) for row in reader]
    except OSError as e:
        raise CannotReadContentsError(path, str(e)) from e
    except csv.Error as e:
        raise DeserializationError(path, f"Unable to deserialize CSV: {e}") from e

    track_plays: List[TrackPlay] = [activity for activity in activities if activity.is_end_event()]
    if not track_plays:
        raise DeserializationError(path, "No records successfully deserialized")
    return track_plays
