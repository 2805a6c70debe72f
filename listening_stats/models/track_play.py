"""Raw track play records from each supported export format and their normalized shape"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from listening_stats.config import DEFAULT_SKIP_PERCENT
from listening_stats.errors import NormalizationError
from listening_stats.utils.parse import (
    format_end_time,
    parse_end_time_rfc3339,
    parse_spotify_end_time,
)

@dataclass(frozen=True)
class Normalized:
    """A track play in the common shape every source is converted to"""
    artist_name: str
    track_name: str
    end_time: datetime
    service_hint: str
    album_name: Optional[str] = None
    ms_played: Optional[int] = None
    track_ms: Optional[int] = None
    skipped: Optional[bool] = None

    def formatted_end_time(self) -> str:
        return format_end_time(self.end_time)

    def play_time(self) -> int:
        return self.ms_played or 0

    def is_skipped(self, skip_percent: float = DEFAULT_SKIP_PERCENT) -> bool:
        return bool(self.skipped) or self.is_skipped_by_percent(skip_percent)

    def is_skipped_by_percent(self, skip_percent: float = DEFAULT_SKIP_PERCENT) -> bool:
        if self.ms_played is None or not self.track_ms:
            return False
        return self.ms_played / self.track_ms < skip_percent


def _required_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise NormalizationError(f"Missing required field {field_name!r}")
    return value


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _required_int(value: Any, field_name: str) -> int:
    result = _optional_int(value, field_name)
    if result is None:
        raise NormalizationError(f"Missing required field {field_name!r}")
    return result


def _optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise NormalizationError(f"Invalid integer for {field_name!r}: {value!r}") from e


@dataclass(frozen=True)
class SpotifyPlay:
    """Entry of the Spotify account data export (StreamingHistory*.json)"""
    end_time: str
    artist_name: str
    track_name: str
    ms_played: int

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> 'SpotifyPlay':
        return cls(
            end_time=entry.get('endTime'),
            artist_name=entry.get('artistName'),
            track_name=entry.get('trackName'),
            ms_played=entry.get('msPlayed'),
        )

    def to_normalized(self) -> Normalized:
        try:
            end_time = parse_spotify_end_time(self.end_time)
        except (TypeError, ValueError) as e:
            raise NormalizationError(f"Unparseable Spotify end time {self.end_time!r}") from e

        return Normalized(
            artist_name=_required_text(self.artist_name, 'artistName'),
            track_name=_required_text(self.track_name, 'trackName'),
            end_time=end_time,
            service_hint="spotify",
            ms_played=_required_int(self.ms_played, 'msPlayed'),
        )


@dataclass(frozen=True)
class SpotifyExtendedPlay:
    """Entry of the Spotify extended streaming history export (Streaming_History_Audio_*.json)"""
    ts: str
    artist_name: Optional[str]
    track_name: Optional[str]
    album_name: Optional[str]
    ms_played: Optional[int]
    skipped: Optional[bool]

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> 'SpotifyExtendedPlay':
        return cls(
            ts=entry.get('ts'),
            artist_name=entry.get('master_metadata_album_artist_name'),
            track_name=entry.get('master_metadata_track_name'),
            album_name=entry.get('master_metadata_album_album_name'),
            ms_played=entry.get('ms_played'),
            skipped=entry.get('skipped'),
        )

    def to_normalized(self) -> Normalized:
        try:
            end_time = parse_end_time_rfc3339(self.ts)
        except (TypeError, ValueError) as e:
            raise NormalizationError(f"Unparseable Spotify timestamp {self.ts!r}") from e

        # Podcast episodes and audiobooks carry no track metadata
        return Normalized(
            artist_name=_required_text(self.artist_name, 'master_metadata_album_artist_name'),
            track_name=_required_text(self.track_name, 'master_metadata_track_name'),
            album_name=_optional_text(self.album_name),
            end_time=end_time,
            service_hint="spotify",
            ms_played=_required_int(self.ms_played, 'ms_played'),
            skipped=bool(self.skipped) if self.skipped is not None else None,
        )


@dataclass(frozen=True)
class AppleMusicPlayActivity:
    """Row of the Apple Music "Play Activity" CSV export"""
    artist_name: Optional[str]
    song_name: Optional[str]
    album_name: Optional[str]
    event_type: Optional[str]
    end_reason_type: Optional[str]
    event_end_timestamp: Optional[str]
    media_duration_ms: Optional[str]
    play_duration_ms: Optional[str]

    IDENTIFYING_HEADER = "Event Type"

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'AppleMusicPlayActivity':
        return cls(
            artist_name=row.get('Artist Name'),
            song_name=row.get('Song Name'),
            album_name=row.get('Album Name'),
            event_type=row.get('Event Type'),
            end_reason_type=row.get('End Reason Type'),
            event_end_timestamp=row.get('Event End Timestamp'),
            media_duration_ms=row.get('Media Duration In Milliseconds'),
            play_duration_ms=row.get('Play Duration Milliseconds'),
        )

    def is_end_event(self) -> bool:
        return (self.event_type or "").lower() == "play_end"

    def to_normalized(self) -> Normalized:
        ms_played = _optional_int(self.play_duration_ms, 'Play Duration Milliseconds')
        if ms_played is not None and ms_played < 0:
            raise NormalizationError(f"Negative play duration {ms_played}")

        try:
            end_time = parse_end_time_rfc3339(self.event_end_timestamp)
        except (TypeError, ValueError) as e:
            raise NormalizationError(f"Unparseable Apple Music timestamp {self.event_end_timestamp!r}") from e

        return Normalized(
            artist_name=_required_text(self.artist_name, 'Artist Name'),
            track_name=_required_text(self.song_name, 'Song Name'),
            album_name=_optional_text(self.album_name),
            end_time=end_time,
            service_hint="apple_music",
            ms_played=ms_played,
            track_ms=_optional_int(self.media_duration_ms, 'Media Duration In Milliseconds'),
        )
