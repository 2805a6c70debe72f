"""Display value objects returned by the ranking queries"""
from dataclasses import dataclass

@dataclass
class SongCount:
    name: str = ""
    count: int = 0

    def __str__(self) -> str:
        return f"{self.name} - {self.count}"

@dataclass
class AlbumCount:
    name: str = ""
    count: int = 0

    def __str__(self) -> str:
        return f"{self.name} - {self.count}"

@dataclass
class ArtistAndSongCount:
    artist_name: str
    song_count: SongCount

    def __str__(self) -> str:
        return f"{self.artist_name} - {self.song_count.name} - {self.song_count.count}"

@dataclass
class ArtistAndAlbumCount:
    artist_name: str
    album_count: AlbumCount

    def __str__(self) -> str:
        return f"{self.artist_name} - {self.album_count.name} - {self.album_count.count}"
