"""Command deciding how a raw track play enters the listening history"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

from listening_stats.config import DEFAULT_SKIP_PERCENT, MIN_LISTEN_LENGTH_MS
from listening_stats.errors import NormalizationError
from listening_stats.models.events import Event, EventData, TrackPlayAdded, TrackPlayIgnored
from listening_stats.models.track_play import (
    AppleMusicPlayActivity,
    Normalized,
    SpotifyExtendedPlay,
    SpotifyPlay,
)
from listening_stats.ports import HasListen

logger = logging.getLogger(__name__)

TrackPlay = Union[SpotifyPlay, SpotifyExtendedPlay, AppleMusicPlayActivity]

@dataclass
class AddTrackPlay:
    """
    Turns one raw track play into the next event, or into nothing.

    The command only reads the tracker. Appending the event and projecting it
    is left to the caller.
    """
    track_play: TrackPlay
    min_listen_length: int = MIN_LISTEN_LENGTH_MS
    skip_percent: float = DEFAULT_SKIP_PERCENT

    def normalize(self) -> Normalized:
        """
        Raises:
            NormalizationError: If the record is malformed
        """
        return self.track_play.to_normalized()

    def handle(self, tracker: HasListen) -> Optional[Event]:
        """Return the event to append, None for malformed or already recorded plays"""
        try:
            normalized = self.normalize()
        except NormalizationError as e:
            logger.debug(f"Dropping malformed track play {self.track_play}: {e}")
            return None

        data = self.handle_normalized(normalized, tracker)
        if data is None:
            return None
        return Event(version=tracker.version + 1, data=data)

    def handle_normalized(self, listen: Normalized, tracker: HasListen) -> Optional[EventData]:
        end_time = listen.formatted_end_time()
        if tracker.has_listen(listen.artist_name, listen.track_name, end_time):
            return None

        event_type = TrackPlayIgnored if self.is_skip(listen) else TrackPlayAdded
        return event_type(
            artist_name=listen.artist_name,
            track_name=listen.track_name,
            album_name=listen.album_name,
            ms_played=listen.play_time(),
            end_time=end_time,
            service_hint=listen.service_hint,
        )

    def is_skip(self, listen: Normalized) -> bool:
        return listen.is_skipped(self.skip_percent) or listen.play_time() < self.min_listen_length
