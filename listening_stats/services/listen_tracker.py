"""Listen tracker projection: deduplication index with snapshot and catch-up"""
import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Set

from listening_stats.config import LISTEN_TRACKER_SNAPSHOT
from listening_stats.errors import SnapshotReadError
from listening_stats.models.events import Event
from listening_stats.ports import EventStore, SnapshotStore
from listening_stats.utils.json_encoder import json_dumps

logger = logging.getLogger(__name__)

def build_listen_id(artist_name: str, track_name: str, end_time: str) -> str:
    """Deduplication key of a listen"""
    return f"{artist_name}-{track_name}-{end_time}"

@dataclass
class ListenTracker:
    """Set of recorded listens and the version of the last event folded into it"""
    listens: Set[str] = field(default_factory=set)
    version: int = 0

    def has_listen(self, artist_name: str, track_name: str, end_time: str) -> bool:
        return build_listen_id(artist_name, track_name, end_time) in self.listens

    def fold(self, event: Event) -> bool:
        """
        Fold one event into the index.

        Events at or below the current version were already folded and are ignored.

        Returns:
            bool: True if the event was folded

        Raises:
            ValueError: If the event would skip a version
        """
        if event.version <= self.version:
            return False
        if event.version != self.version + 1:
            raise ValueError(
                f"Listen tracker at version {self.version} cannot fold event {event.version}"
            )

        data = event.data
        self.listens.add(build_listen_id(data.artist_name, data.track_name, data.end_time))
        self.version = event.version
        return True


class ListenTrackerRepository:
    """
    Keeps the listen tracker in memory and persists it as a snapshot.

    Snapshots are written back every buffer_count projected events and on flush(),
    not on every event.
    """

    def __init__(self, snapshots: SnapshotStore, buffer_count: int = 1000,
                 name: str = LISTEN_TRACKER_SNAPSHOT):
        self.snapshots = snapshots
        self.buffer_count = max(1, buffer_count)
        self.name = name
        self.lock = threading.RLock()
        self.dirty = False
        self.not_persisted_count = 0
        self.listen_tracker = self._read()

    def get(self) -> ListenTracker:
        """Current in-memory tracker. Callers must treat it as read-only."""
        return self.listen_tracker

    def project_event(self, event: Event) -> None:
        """Fold an appended event and write a snapshot once the buffer is full"""
        with self.lock:
            if not self.listen_tracker.fold(event):
                logger.debug(f"Event {event.version} already projected, tracker at {self.listen_tracker.version}")
                return

            self.not_persisted_count += 1
            self.dirty = True

            if self.not_persisted_count >= self.buffer_count:
                self._write()

    def flush(self) -> None:
        """Persist the tracker if it changed since the last snapshot"""
        with self.lock:
            if not self.dirty:
                return
            self._write()

    def catch_up(self, store: EventStore, stream: str) -> int:
        """
        Bring the tracker up to the current version of the stream.

        Returns:
            int: Number of events folded
        """
        with self.lock:
            store_version = store.stream_version(stream)
            current_version = self.listen_tracker.version

            if current_version == store_version:
                logger.debug(f"Listen tracker up to date at version {current_version}")
                return 0

            if current_version > store_version:
                logger.warning(
                    f"Listen tracker snapshot at version {current_version} is ahead of stream "
                    f"{stream} at {store_version}. Rebuilding from scratch."
                )
                self.listen_tracker = ListenTracker()
                self.dirty = True

            event_stream = store.get_events_after(stream, self.listen_tracker.version)
            logger.info(
                f"Catching up listen tracker from version {self.listen_tracker.version} "
                f"with {len(event_stream)} events"
            )
            for event in event_stream.events:
                self.project_event(event)
            self.flush()
            return len(event_stream)

    def _read(self) -> ListenTracker:
        try:
            stored = self.snapshots.read(self.name)
        except SnapshotReadError as e:
            logger.warning(f"Could not read {self.name} snapshot, starting empty: {e}")
            return ListenTracker()

        if stored is None:
            logger.info(f"No {self.name} snapshot found, starting empty")
            return ListenTracker()

        version, data = stored
        try:
            listens = json.loads(data)
            if not isinstance(listens, list):
                raise ValueError(f"expected a list, got {type(listens).__name__}")
        except ValueError as e:
            logger.warning(f"Could not deserialize {self.name} snapshot, starting empty: {e}")
            return ListenTracker()

        logger.info(f"Loaded {self.name} snapshot at version {version} with {len(listens)} listens")
        return ListenTracker(listens=set(listens), version=version)

    def _write(self) -> None:
        # Errors propagate and leave the dirty flag set
        self.snapshots.write(self.name, self.listen_tracker.version, json_dumps(self.listen_tracker.listens))
        self.dirty = False
        self.not_persisted_count = 0


def listen_tracker_repo(snapshots: SnapshotStore, store: EventStore, stream: str,
                        buffer_count: int = 1000) -> ListenTrackerRepository:
    """Load the last snapshot and fold whatever the stream gained since"""
    repository = ListenTrackerRepository(snapshots, buffer_count=buffer_count)
    repository.catch_up(store, stream)
    return repository
