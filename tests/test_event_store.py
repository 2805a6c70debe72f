import pytest

from conftest import play
from listening_stats.errors import StreamReadError, VersionConflictError
from listening_stats.models.db import StreamMessage
from listening_stats.models.events import Event, TrackPlayAdded, TrackPlayIgnored
from listening_stats.services.storage import SqlEventStore


def append(store, stream, *data):
    for d in data:
        version = store.stream_version(stream) + 1
        store.add_event(stream, Event(version=version, data=d), version)


def test_new_stream_is_empty(event_store):
    assert event_store.stream_version("listens") == 0
    stream = event_store.get_events("listens")
    assert stream.events == []
    assert stream.version == 0


def test_events_replay_in_append_order(event_store):
    tracks = ["one", "two", "three", "four"]
    append(event_store, "listens", *[play(track=t) for t in tracks])

    stream = event_store.get_events("listens")
    assert [e.version for e in stream] == [1, 2, 3, 4]
    assert [e.data.track_name for e in stream] == tracks
    assert stream.version == 4
    assert event_store.stream_version("listens") == 4


def test_event_types_survive_storage(event_store):
    append(event_store, "listens", play(album="Album"), play(track="Y", ms_played=500, skipped=True))

    first, second = event_store.get_events("listens").events
    assert isinstance(first.data, TrackPlayAdded)
    assert first.data.album_name == "Album"
    assert isinstance(second.data, TrackPlayIgnored)
    assert second.data.ms_played == 500


def test_add_event_returns_stored_event(event_store):
    stored = event_store.add_event("listens", Event(version=1, data=play()), 1)
    assert stored.version == 1
    assert stored.data == play()


@pytest.mark.parametrize("expected_version", [0, 1, 2])
def test_stale_expected_version_conflicts(event_store, expected_version):
    append(event_store, "listens", play(track="a"), play(track="b"))

    with pytest.raises(VersionConflictError) as exc:
        event_store.add_event("listens", Event(version=expected_version, data=play(track="c")), expected_version)

    assert exc.value.current_version == 2
    assert exc.value.expected_version == expected_version
    assert event_store.stream_version("listens") == 2
    assert [e.data.track_name for e in event_store.get_events("listens")] == ["a", "b"]


def test_gap_is_rejected(event_store):
    append(event_store, "listens", play())

    with pytest.raises(VersionConflictError):
        event_store.add_event("listens", Event(version=5, data=play(track="Y")), 5)
    assert event_store.stream_version("listens") == 1


def test_streams_are_independent(event_store):
    append(event_store, "listens", play(), play(track="Y"))
    append(event_store, "other", play(track="Z"))

    assert event_store.stream_version("listens") == 2
    assert event_store.stream_version("other") == 1
    assert [e.data.track_name for e in event_store.get_events("other")] == ["Z"]


def test_get_events_after(event_store):
    append(event_store, "listens", *[play(track=str(i)) for i in range(1, 6)])

    stream = event_store.get_events_after("listens", 3)
    assert [e.version for e in stream] == [4, 5]
    assert stream.version == 5


def test_get_events_after_with_nothing_newer(event_store):
    append(event_store, "listens", play())

    stream = event_store.get_events_after("listens", 1)
    assert len(stream) == 0
    assert stream.version == 1


def test_sql_store_reports_corrupt_rows(database):
    store = SqlEventStore(database)
    append(store, "listens", play())
    with database.session() as session:
        session.add(StreamMessage(stream="listens", position=2, data="not json"))

    with pytest.raises(StreamReadError):
        store.get_events("listens")


def test_sql_store_persists_across_handles(database):
    append(SqlEventStore(database), "listens", play(), play(track="Y"))

    other = SqlEventStore(database)
    assert other.stream_version("listens") == 2
    with pytest.raises(VersionConflictError):
        other.add_event("listens", Event(version=2, data=play(track="Z")), 2)
