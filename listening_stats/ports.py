"""Port definitions for the event log and snapshot storage backends."""

from typing import Optional, Protocol, Tuple

from listening_stats.models.events import Event, EventStream


class EventStore(Protocol):
    """Versioned, append-only event log that adapters can implement for any backend."""

    def stream_version(self, stream: str) -> int:
        """Return the number of events in the stream, 0 if it was never written."""

    def add_event(self, stream: str, event: Event, expected_version: int) -> Event:
        """Append the event at expected_version or raise VersionConflictError."""

    def get_events(self, stream: str) -> EventStream:
        """Return every event of the stream in append order."""

    def get_events_after(self, stream: str, version: int) -> EventStream:
        """Return the events positioned strictly after version."""


class SnapshotStore(Protocol):
    """Storage for named projection snapshots."""

    def read(self, name: str) -> Optional[Tuple[int, str]]:
        """Return (version, serialized data) of the snapshot, or None when absent."""

    def write(self, name: str, version: int, data: str) -> None:
        """Overwrite the snapshot stored under name."""


class HasListen(Protocol):
    """Read-only deduplication index used by the ingestion command."""

    def has_listen(self, artist_name: str, track_name: str, end_time: str) -> bool:
        """Return True if this listen was already recorded."""

    @property
    def version(self) -> int:
        """Version of the last event folded into the index."""
