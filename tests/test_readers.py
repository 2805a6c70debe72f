import json

import pytest

from listening_stats.errors import (
    DeserializationError,
    NotAFileError,
    UnsupportedFileTypeError,
)
from listening_stats.models.track_play import (
    AppleMusicPlayActivity,
    SpotifyExtendedPlay,
    SpotifyPlay,
)
from listening_stats.services.readers import read_track_plays

APPLE_HEADER = (
    "Artist Name,Song Name,Album Name,Event Type,End Reason Type,Event End Timestamp,"
    "Media Duration In Milliseconds,Play Duration Milliseconds\n"
)


def write_json(path, entries):
    path.write_text(json.dumps(entries), encoding="utf-8")
    return str(path)


def test_spotify_account_data(tmp_path):
    path = write_json(tmp_path / "StreamingHistory0.json", [
        {"endTime": "2022-01-05 10:00", "artistName": "A", "trackName": "X", "msPlayed": 200000},
        {"endTime": "2022-01-05 10:04", "artistName": "B", "trackName": "Y", "msPlayed": 1000},
    ])

    plays = read_track_plays(path)

    assert [type(p) for p in plays] == [SpotifyPlay, SpotifyPlay]
    assert plays[0].to_normalized().formatted_end_time() == "2022-01-05 10:00:00"


def test_spotify_extended_history(tmp_path):
    path = write_json(tmp_path / "Streaming_History_Audio_2022.json", [
        {
            "ts": "2022-01-05T10:00:00Z",
            "master_metadata_album_artist_name": "A",
            "master_metadata_track_name": "X",
            "master_metadata_album_album_name": "Album",
            "ms_played": 200000,
            "skipped": None,
        },
    ])

    (play,) = read_track_plays(path)

    assert isinstance(play, SpotifyExtendedPlay)
    assert play.to_normalized().album_name == "Album"


def test_invalid_json_entries_are_skipped(tmp_path):
    path = write_json(tmp_path / "history.json", [
        "garbage",
        {"endTime": "2022-01-05 10:00", "artistName": "A", "trackName": "X", "msPlayed": 200000},
    ])
    assert len(read_track_plays(path)) == 1


def test_json_must_be_a_list(tmp_path):
    path = write_json(tmp_path / "history.json", {"endTime": "2022-01-05 10:00"})
    with pytest.raises(DeserializationError):
        read_track_plays(path)


def test_broken_json(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(DeserializationError):
        read_track_plays(str(path))


def test_apple_music_keeps_play_end_rows(tmp_path):
    path = tmp_path / "Apple Music Play Activity.csv"
    path.write_text(
        APPLE_HEADER
        + "A,X,Album,PLAY_START,,2022-01-05T09:57:00Z,200000,0\n"
        + "A,X,Album,PLAY_END,NATURAL_END_OF_TRACK,2022-01-05T10:00:00Z,200000,200000\n",
        encoding="utf-8",
    )

    (activity,) = read_track_plays(str(path))

    assert isinstance(activity, AppleMusicPlayActivity)
    normalized = activity.to_normalized()
    assert normalized.track_ms == 200000
    assert normalized.formatted_end_time() == "2022-01-05 10:00:00"


def test_apple_music_without_play_end_rows(tmp_path):
    path = tmp_path / "activity.csv"
    path.write_text(APPLE_HEADER + "A,X,Album,PLAY_START,,2022-01-05T09:57:00Z,200000,0\n", encoding="utf-8")
    with pytest.raises(DeserializationError):
        read_track_plays(str(path))


def test_csv_without_apple_headers(tmp_path):
    path = tmp_path / "other.csv"
    path.write_text("a,b\n1,2\n", encoding="utf-8")
    with pytest.raises(DeserializationError):
        read_track_plays(str(path))


def test_unsupported_extension(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")
    with pytest.raises(UnsupportedFileTypeError):
        read_track_plays(str(path))


def test_missing_file(tmp_path):
    with pytest.raises(NotAFileError):
        read_track_plays(str(tmp_path / "missing.json"))
