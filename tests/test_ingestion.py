import json

import pytest

from conftest import play
from listening_stats.models.events import Event, TrackPlayAdded, TrackPlayIgnored
from listening_stats.models.track_play import SpotifyPlay
from listening_stats.services.ingestion import ListenIngestor
from listening_stats.services.listen_tracker import ListenTrackerRepository, listen_tracker_repo
from listening_stats.services.memory import InMemoryEventStore, InMemorySnapshotStore
from listening_stats.services.storage import SqlEventStore, SqlSnapshotStore


def spotify_entry(artist="A", track="X", end_time="2022-01-05 10:00", ms_played=200000):
    return {"endTime": end_time, "artistName": artist, "trackName": track, "msPlayed": ms_played}


def ingestor_for(store, snapshots, min_listen_length=10000):
    repository = listen_tracker_repo(snapshots, store, "listens")
    return ListenIngestor(store, repository, "listens", min_listen_length=min_listen_length)


@pytest.fixture
def history_folder(tmp_path):
    folder = tmp_path / "history"
    folder.mkdir()
    (folder / "StreamingHistory0.json").write_text(json.dumps([
        spotify_entry(),
        spotify_entry(),
        spotify_entry(track="Y", end_time="2022-01-05 10:04", ms_played=500),
        spotify_entry(end_time="not a date"),
    ]), encoding="utf-8")
    (folder / "broken.json").write_text("{", encoding="utf-8")
    (folder / "readme.txt").write_text("notes", encoding="utf-8")
    return folder


def test_duplicate_in_one_batch_is_recorded_once():
    store = InMemoryEventStore()
    ingestor = ingestor_for(store, InMemorySnapshotStore())

    events = ingestor.process_track_plays([SpotifyPlay.from_dict(spotify_entry()),
                                           SpotifyPlay.from_dict(spotify_entry())])

    assert len(events) == 1
    assert store.stream_version("listens") == 1
    assert isinstance(store.get_events("listens").events[0].data, TrackPlayAdded)


def test_short_play_is_stored_as_skip():
    store = InMemoryEventStore()
    ingestor = ingestor_for(store, InMemorySnapshotStore(), min_listen_length=1000)

    (event,) = ingestor.process_track_plays([SpotifyPlay.from_dict(spotify_entry(ms_played=500))])

    assert isinstance(event.data, TrackPlayIgnored)


def test_folder_summary(history_folder):
    store = InMemoryEventStore()
    ingestor = ingestor_for(store, InMemorySnapshotStore())

    summary = ingestor.process_listens(str(history_folder))

    assert summary.files_processed == 1
    assert summary.files_failed == 2
    assert summary.records_read == 4
    assert summary.plays_added == 1
    assert summary.skips_added == 1
    assert summary.duplicates == 1
    assert summary.malformed == 1
    assert summary.events_added == 2
    assert store.stream_version("listens") == 2


def test_reimport_is_idempotent(history_folder, database):
    store = SqlEventStore(database)
    snapshots = SqlSnapshotStore(database)
    ingestor_for(store, snapshots).process_listens(str(history_folder))

    # A fresh process: tracker reloaded from the snapshot
    summary = ingestor_for(store, snapshots).process_listens(str(history_folder))

    assert summary.events_added == 0
    assert summary.duplicates == 3
    assert store.stream_version("listens") == 2


def test_tracker_flushed_after_batch(history_folder):
    snapshots = InMemorySnapshotStore()
    ingestor_for(InMemoryEventStore(), snapshots).process_listens(str(history_folder))
    assert snapshots.read("listen_tracker")[0] == 2


def test_missing_folder(tmp_path):
    ingestor = ingestor_for(InMemoryEventStore(), InMemorySnapshotStore())
    with pytest.raises(FileNotFoundError):
        ingestor.process_listens(str(tmp_path / "nope"))


def test_conflict_recovers_by_catching_up():
    store = InMemoryEventStore()
    snapshots = InMemorySnapshotStore()
    repository = ListenTrackerRepository(snapshots)
    ingestor = ListenIngestor(store, repository, "listens")

    # Written behind the tracker's back
    store.add_event("listens", Event(version=1, data=play(artist="B", end_time="2021-06-01 08:00:00")), 1)

    events = ingestor.process_track_plays([SpotifyPlay.from_dict(spotify_entry())])

    assert [e.version for e in events] == [2]
    assert repository.get().version == 2
    assert repository.get().has_listen("B", "X", "2021-06-01 08:00:00")


def test_conflict_with_same_listen_is_a_duplicate():
    store = InMemoryEventStore()
    repository = ListenTrackerRepository(InMemorySnapshotStore())
    ingestor = ListenIngestor(store, repository, "listens")
    store.add_event("listens", Event(version=1, data=play()), 1)

    events = ingestor.process_track_plays([SpotifyPlay.from_dict(spotify_entry())])

    assert events == []
    assert store.stream_version("listens") == 1
