from datetime import datetime

import pytest

from listening_stats.commands import AddTrackPlay
from listening_stats.config import Settings
from listening_stats.errors import NormalizationError
from listening_stats.models.events import TrackPlayAdded, TrackPlayIgnored
from listening_stats.models.track_play import (
    AppleMusicPlayActivity,
    Normalized,
    SpotifyExtendedPlay,
    SpotifyPlay,
)
from listening_stats.services.listen_tracker import ListenTracker


def spotify_play(ms_played=200000, end_time="2022-01-05 10:00", artist="A", track="X"):
    return SpotifyPlay(end_time=end_time, artist_name=artist, track_name=track, ms_played=ms_played)


def apple_row(**overrides):
    row = {
        "Artist Name": "A",
        "Song Name": "X",
        "Album Name": "Album",
        "Event Type": "PLAY_END",
        "End Reason Type": "NATURAL_END_OF_TRACK",
        "Event End Timestamp": "2022-01-05T10:00:00.000Z",
        "Media Duration In Milliseconds": "200000",
        "Play Duration Milliseconds": "200000",
    }
    row.update(overrides)
    return AppleMusicPlayActivity.from_row(row)


def test_genuine_listen_becomes_track_play_added():
    event = AddTrackPlay(spotify_play()).handle(ListenTracker())

    assert event.version == 1
    assert isinstance(event.data, TrackPlayAdded)
    assert event.data.artist_name == "A"
    assert event.data.end_time == "2022-01-05 10:00:00"
    assert event.data.ms_played == 200000
    assert event.data.service_hint == "spotify"


def test_version_follows_tracker():
    tracker = ListenTracker(version=41)
    assert AddTrackPlay(spotify_play()).handle(tracker).version == 42


def test_known_listen_is_dropped():
    tracker = ListenTracker(listens={"A-X-2022-01-05 10:00:00"}, version=1)
    assert AddTrackPlay(spotify_play()).handle(tracker) is None


def test_short_play_is_a_skip():
    command = AddTrackPlay(spotify_play(ms_played=500), min_listen_length=1000)
    event = command.handle(ListenTracker())
    assert isinstance(event.data, TrackPlayIgnored)
    assert event.data.ms_played == 500


def test_threshold_is_exclusive():
    command = AddTrackPlay(spotify_play(ms_played=10000))
    assert isinstance(command.handle(ListenTracker()).data, TrackPlayAdded)


def test_explicit_skip_flag():
    record = SpotifyExtendedPlay.from_dict({
        "ts": "2022-01-05T10:00:00Z",
        "master_metadata_album_artist_name": "A",
        "master_metadata_track_name": "X",
        "master_metadata_album_album_name": "Album",
        "ms_played": 180000,
        "skipped": True,
    })
    event = AddTrackPlay(record).handle(ListenTracker())
    assert isinstance(event.data, TrackPlayIgnored)
    assert event.data.album_name == "Album"


def test_skip_by_played_share():
    # 15 seconds of a 10 minute track
    record = apple_row(**{"Media Duration In Milliseconds": "600000", "Play Duration Milliseconds": "15000"})
    event = AddTrackPlay(record).handle(ListenTracker())
    assert isinstance(event.data, TrackPlayIgnored)
    assert event.data.service_hint == "apple_music"


def test_played_share_above_threshold_is_a_listen():
    record = apple_row(**{"Media Duration In Milliseconds": "200000", "Play Duration Milliseconds": "30000"})
    assert isinstance(AddTrackPlay(record).handle(ListenTracker()).data, TrackPlayAdded)


@pytest.mark.parametrize("record", [
    spotify_play(end_time="yesterday"),
    spotify_play(artist=""),
    spotify_play(track=None),
    apple_row(**{"Play Duration Milliseconds": "-5"}),
    apple_row(**{"Event End Timestamp": ""}),
    SpotifyExtendedPlay.from_dict({"ts": "2022-01-05T10:00:00Z", "ms_played": 1000}),
    SpotifyPlay.from_dict({"endTime": "2022-01-05 10:00", "artistName": "A", "trackName": "X"}),
    SpotifyExtendedPlay.from_dict({
        "ts": "2022-01-05T10:00:00Z",
        "master_metadata_album_artist_name": "A",
        "master_metadata_track_name": "X",
    }),
])
def test_malformed_records_are_dropped(record):
    command = AddTrackPlay(record)
    with pytest.raises(NormalizationError):
        command.normalize()
    assert command.handle(ListenTracker()) is None


def test_normalized_skip_by_percent_needs_duration():
    listen = Normalized(artist_name="A", track_name="X", end_time=datetime(2022, 1, 5), service_hint="test",
                        ms_played=1)
    assert not listen.is_skipped_by_percent()
    assert Normalized(artist_name="A", track_name="X", end_time=datetime(2022, 1, 5), service_hint="test",
                      ms_played=1, track_ms=1000).is_skipped_by_percent()


def test_rfc3339_offsets_keep_wall_clock():
    record = apple_row(**{"Event End Timestamp": "2022-01-05T10:00:00+02:00"})
    assert AddTrackPlay(record).normalize().formatted_end_time() == "2022-01-05 10:00:00"


def test_apple_music_play_duration_is_optional():
    record = apple_row(**{"Play Duration Milliseconds": ""})
    assert AddTrackPlay(record).normalize().ms_played is None


def test_short_fractional_seconds_parse():
    record = apple_row(**{"Event End Timestamp": "2022-01-05T10:00:52.2Z"})
    assert AddTrackPlay(record).normalize().formatted_end_time() == "2022-01-05 10:00:52"


def test_command_defaults_follow_settings():
    settings = Settings()
    command = AddTrackPlay(spotify_play())
    assert command.min_listen_length == settings.MIN_LISTEN_LENGTH_MS
    assert command.skip_percent == settings.SKIP_PERCENT_THRESHOLD
