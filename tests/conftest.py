"""Shared fixtures for the listening history tests."""
import pytest

from listening_stats.db import Database
from listening_stats.db_config import DatabaseConfig
from listening_stats.models.events import Event, TrackPlayAdded, TrackPlayIgnored
from listening_stats.services.memory import InMemoryEventStore, InMemorySnapshotStore
from listening_stats.services.storage import SqlEventStore, SqlSnapshotStore


def play(artist="A", track="X", end_time="2022-01-05 10:00:00", ms_played=200000, album=None,
         skipped=False):
    """Event data for one play, a skip when skipped is set."""
    event_type = TrackPlayIgnored if skipped else TrackPlayAdded
    return event_type(
        artist_name=artist,
        track_name=track,
        album_name=album,
        ms_played=ms_played,
        end_time=end_time,
        service_hint="spotify",
    )


def events_of(*data):
    return [Event(version=i, data=d) for i, d in enumerate(data, start=1)]


@pytest.fixture
def database():
    db = Database(DatabaseConfig(":memory:"))
    db.init()
    yield db
    db.dispose()


@pytest.fixture(params=["sql", "memory"])
def event_store(request, database):
    if request.param == "sql":
        return SqlEventStore(database)
    return InMemoryEventStore()


@pytest.fixture(params=["sql", "memory"])
def snapshot_store(request, database):
    if request.param == "sql":
        return SqlSnapshotStore(database)
    return InMemorySnapshotStore()
