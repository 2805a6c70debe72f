"""In-memory event log and snapshot backends.

They follow the same contracts as the SQL backends and are used for tests
and throwaway sessions where nothing needs to survive the process.
"""
import threading
from typing import Dict, List, Optional, Tuple

from listening_stats.errors import VersionConflictError
from listening_stats.models.events import Event, EventStream


class InMemoryEventStore:
    """Append-only event log keeping every stream in a list"""

    def __init__(self) -> None:
        self._streams: Dict[str, List[Event]] = {}
        self.lock = threading.RLock()

    def stream_version(self, stream: str) -> int:
        with self.lock:
            return len(self._streams.get(stream, []))

    def add_event(self, stream: str, event: Event, expected_version: int) -> Event:
        with self.lock:
            events = self._streams.setdefault(stream, [])
            current_version = len(events)
            if expected_version != current_version + 1:
                raise VersionConflictError(expected_version, current_version)

            stored = Event(version=expected_version, data=event.data)
            events.append(stored)
            return stored

    def get_events(self, stream: str) -> EventStream:
        with self.lock:
            events = list(self._streams.get(stream, []))
        return EventStream(events=events, version=len(events))

    def get_events_after(self, stream: str, version: int) -> EventStream:
        with self.lock:
            events = [e for e in self._streams.get(stream, []) if e.version > version]
        return EventStream(events=events, version=events[-1].version if events else version)


class InMemorySnapshotStore:
    """Snapshot storage backed by a dict"""

    def __init__(self) -> None:
        self._snapshots: Dict[str, Tuple[int, str]] = {}
        self.writes = 0

    def read(self, name: str) -> Optional[Tuple[int, str]]:
        return self._snapshots.get(name)

    def write(self, name: str, version: int, data: str) -> None:
        self._snapshots[name] = (version, data)
        self.writes += 1
