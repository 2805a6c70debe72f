"""Artist level play, skip and album counters with the ranking queries built on them"""
from typing import Dict, Iterable, List, Optional

from listening_stats.models.stats import GeneralStats
from listening_stats.statistics.counts import (
    AlbumCount,
    ArtistAndAlbumCount,
    ArtistAndSongCount,
    SongCount,
)
from listening_stats.statistics.song_counter import (
    AlbumCounter,
    ArtistSongCounter,
    SongCounter,
    name_key,
    rank_key,
)
from listening_stats.statistics.time_played import TimePlayed


class ArtistsCounts:
    """
    Counters for every artist of one period (a day, a month, a year or all time).

    All maps are keyed by the case-folded artist name; artist_names holds the
    first spelling seen for display. Only played songs add to time_played.
    """

    def __init__(self):
        self.per_artist: Dict[str, SongCounter] = {}
        self.per_artist_albums: Dict[str, AlbumCounter] = {}
        self.per_artist_skipped: Dict[str, SongCounter] = {}
        self.artist_names: Dict[str, str] = {}
        self.time_played = TimePlayed()

    def _remember_name(self, artist_name: str) -> str:
        key = name_key(artist_name)
        self.artist_names.setdefault(key, artist_name)
        return key

    def add_song_play(self, artist_name: str, track_name: str, time_played: int,
                      album_name: Optional[str] = None) -> None:
        key = self._remember_name(artist_name)
        self.per_artist.setdefault(key, SongCounter()).increment_song(track_name, time_played)
        if album_name:
            self.per_artist_albums.setdefault(key, AlbumCounter()).increment_album(album_name, time_played)
        self.time_played.add_ms(time_played)

    def add_song_skip(self, artist_name: str, track_name: str) -> None:
        key = self._remember_name(artist_name)
        self.per_artist_skipped.setdefault(key, SongCounter()).increment_song(track_name)

    def merge(self, other: 'ArtistsCounts') -> None:
        """Sum another set of counts into this one"""
        for key, name in other.artist_names.items():
            self.artist_names.setdefault(key, name)
        for target, source in ((self.per_artist, other.per_artist),
                               (self.per_artist_albums, other.per_artist_albums),
                               (self.per_artist_skipped, other.per_artist_skipped)):
            for key, counter in source.items():
                if key in target:
                    target[key].add(counter)
                else:
                    target[key] = counter.copy()
        self.time_played.add_ms(other.time_played.time_ms)

    @classmethod
    def merged(cls, counts: Iterable['ArtistsCounts']) -> 'ArtistsCounts':
        result = cls()
        for artists_counts in counts:
            result.merge(artists_counts)
        return result

    def is_empty(self) -> bool:
        return not self.per_artist and not self.per_artist_skipped

    def total_count(self) -> int:
        """Total plays across all artists"""
        return sum(counter.total_plays for counter in self.per_artist.values())

    def skipped_count(self) -> int:
        return sum(counter.total_plays for counter in self.per_artist_skipped.values())

    def artist_count(self) -> int:
        """Number of distinct artists with at least one play"""
        return len(self.per_artist)

    def display_name(self, key: str) -> str:
        return self.artist_names.get(key, key)

    def find_artist(self, artist_name: str) -> Optional[ArtistSongCounter]:
        """Case-insensitive exact lookup of one artist's plays"""
        key = name_key(artist_name)
        counter = self.per_artist.get(key)
        if counter is None:
            return None
        return ArtistSongCounter(self.display_name(key), counter.copy())

    def artist_songs(self, artist_name: str) -> List[str]:
        counter = self.per_artist.get(name_key(artist_name))
        if counter is None:
            return []
        return counter.names()

    def search(self, prefix: str) -> List[str]:
        """Display names of played artists starting with prefix, case-insensitive, sorted"""
        needle = name_key(prefix)
        keys = sorted(key for key in self.per_artist if key.startswith(needle))
        return [self.display_name(key) for key in keys]

    def all(self) -> List[ArtistSongCounter]:
        """Every played artist, most played first"""
        artists = [ArtistSongCounter(self.display_name(key), counter.copy())
                   for key, counter in self.per_artist.items()]
        artists.sort(key=lambda a: rank_key(a.total_plays, a.artist_name))
        return artists

    def over_min_plays(self, min_plays: int) -> List[ArtistSongCounter]:
        return [artist for artist in self.all() if artist.total_plays >= min_plays]

    def top(self, count: int) -> List[ArtistSongCounter]:
        return self.all()[:max(count, 0)]

    def top_unique_artists(self, count: int) -> List[ArtistSongCounter]:
        """Artists ranked by the play count of their single most played song"""
        artists = self.all()
        artists.sort(key=lambda a: rank_key(a.max_song_play().count, a.artist_name))
        return artists[:max(count, 0)]

    def top_songs(self, count: int) -> List[ArtistAndSongCount]:
        return self._top_entries(self.per_artist, count)

    def top_skipped_songs(self, count: int) -> List[ArtistAndSongCount]:
        return self._top_entries(self.per_artist_skipped, count)

    def top_skipped(self, count: int) -> List[ArtistSongCounter]:
        """Artists ranked by number of skips"""
        artists = [ArtistSongCounter(self.display_name(key), counter.copy())
                   for key, counter in self.per_artist_skipped.items()]
        artists.sort(key=lambda a: rank_key(a.total_plays, a.artist_name))
        return artists[:max(count, 0)]

    def top_albums(self, count: int) -> List[ArtistAndAlbumCount]:
        albums = [
            ArtistAndAlbumCount(self.display_name(key), AlbumCount(album.name, album.count))
            for key, counter in self.per_artist_albums.items()
            for album in counter.all_song_plays()
        ]
        albums.sort(key=lambda a: (-a.album_count.count, name_key(a.artist_name), name_key(a.album_count.name)))
        return albums[:max(count, 0)]

    def _top_entries(self, counters: Dict[str, SongCounter], count: int) -> List[ArtistAndSongCount]:
        songs = [
            ArtistAndSongCount(self.display_name(key), SongCount(song.name, song.count))
            for key, counter in counters.items()
            for song in counter.all_song_plays()
        ]
        songs.sort(key=lambda s: (-s.song_count.count, name_key(s.artist_name), name_key(s.song_count.name)))
        return songs[:max(count, 0)]

    def general_stats(self, count: int) -> GeneralStats:
        return GeneralStats(
            count_artists_listened_to=self.artist_count(),
            artist_total_plays=[a.total_plays_display() for a in self.top(count)],
            most_played_songs=[str(s) for s in self.top_songs(count)],
            artist_most_played_songs=[a.max_song_display() for a in self.top_unique_artists(count)],
        )
