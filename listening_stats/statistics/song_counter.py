"""Per-artist play counters keyed case-insensitively by song or album name"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from listening_stats.statistics.counts import AlbumCount, SongCount
from listening_stats.statistics.time_played import TimePlayed


def name_key(name: str) -> str:
    """Case-insensitive map key for artist, song and album names"""
    return name.casefold()


def rank_key(count: int, name: str):
    """Sort key: most plays first, ties by case-folded name"""
    return (-count, name_key(name))


class SongCounter:
    """
    Play counts for the songs of one artist.

    Songs are matched case-insensitively, the first spelling seen is kept for display.
    total_plays always equals the sum of the per-song counts.
    """
    entry_type = SongCount

    def __init__(self):
        self.total_plays = 0
        self.total_time_played = TimePlayed()
        self._entries: Dict[str, SongCount] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def increment(self, name: str, time_played: int = 0, count: int = 1) -> None:
        key = name_key(name)
        entry = self._entries.get(key)
        if entry is None:
            entry = self.entry_type(name=name, count=0)
            self._entries[key] = entry
        entry.count += count
        self.total_plays += count
        self.total_time_played.add_ms(time_played)

    def increment_song(self, track_name: str, time_played: int = 0) -> None:
        self.increment(track_name, time_played)

    def add(self, other: 'SongCounter') -> None:
        """Fold another counter of the same artist into this one"""
        for entry in other._entries.values():
            self.increment(entry.name, count=entry.count)
        self.total_time_played.add_ms(other.total_time_played.time_ms)

    def copy(self) -> 'SongCounter':
        counter = type(self)()
        counter.add(self)
        return counter

    def get(self, name: str) -> Optional[SongCount]:
        entry = self._entries.get(name_key(name))
        if entry is None:
            return None
        return self.entry_type(name=entry.name, count=entry.count)

    def all_song_plays(self) -> List[SongCount]:
        """Copies of every entry, most played first"""
        entries = sorted(self._entries.values(), key=lambda e: rank_key(e.count, e.name))
        return [self.entry_type(name=e.name, count=e.count) for e in entries]

    def max_song_play(self) -> SongCount:
        """The most played entry, or an empty one when nothing was counted"""
        entries = self.all_song_plays()
        if not entries:
            return self.entry_type()
        return entries[0]

    def names(self) -> List[str]:
        return sorted((e.name for e in self._entries.values()), key=name_key)


class AlbumCounter(SongCounter):
    """Play counts for the albums of one artist"""
    entry_type = AlbumCount

    def increment_album(self, album_name: str, time_played: int = 0) -> None:
        self.increment(album_name, time_played)


@dataclass
class ArtistSongCounter:
    """An artist's display name together with a copy of their song counter"""
    artist_name: str
    play_details: SongCounter = field(default_factory=SongCounter)

    @property
    def total_plays(self) -> int:
        return self.play_details.total_plays

    def max_song_play(self) -> SongCount:
        return self.play_details.max_song_play()

    def total_plays_display(self) -> str:
        return f"{self.artist_name} - {self.total_plays}"

    def max_song_display(self) -> str:
        song = self.max_song_play()
        return f"{self.artist_name} - {song.name} - {song.count}"

    def __str__(self) -> str:
        return self.total_plays_display()
