"""Database storage services for the event log and projection snapshots"""
import logging
import threading
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from listening_stats.db import Database
from listening_stats.errors import (
    SnapshotReadError,
    SnapshotWriteError,
    StreamReadError,
    StreamWriteError,
    VersionConflictError,
)
from listening_stats.models.db import Snapshot, StreamMessage
from listening_stats.models.events import (
    Event,
    EventStream,
    deserialize_event_data,
    serialize_event_data,
)

logger = logging.getLogger(__name__)

class SqlEventStore:
    """Append-only event log stored in the streams table"""

    def __init__(self, database: Database):
        self.database = database
        self.lock = threading.RLock()

    def stream_version(self, stream: str) -> int:
        """Current number of events in the stream, 0 when it was never written"""
        with self.lock:
            try:
                with self.database.session() as session:
                    return self._current_version(session, stream)
            except SQLAlchemyError as e:
                logger.error(f"Database error reading version of stream {stream}: {e}")
                raise StreamReadError(stream, str(e)) from e

    def add_event(self, stream: str, event: Event, expected_version: int) -> Event:
        """
        Append an event at expected_version.

        The append only succeeds when expected_version is the next position of the
        stream. Nothing is written otherwise.

        Raises:
            VersionConflictError: If the stream already holds expected_version or would get a gap
            StreamWriteError: If the event cannot be serialized or stored
        """
        with self.lock:
            try:
                serialized = serialize_event_data(event.data)
            except (TypeError, ValueError) as e:
                logger.error(f"Failed to serialize event for stream {stream}: {e}")
                raise StreamWriteError(stream, str(e)) from e

            try:
                with self.database.session() as session:
                    current_version = self._current_version(session, stream)
                    if expected_version != current_version + 1:
                        raise VersionConflictError(expected_version, current_version)

                    session.add(StreamMessage(stream=stream, position=expected_version, data=serialized))
            except IntegrityError as e:
                # Position taken by a writer outside this handle
                logger.warning(f"Position {expected_version} already taken in stream {stream}: {e}")
                raise VersionConflictError(expected_version, self.stream_version(stream)) from e
            except SQLAlchemyError as e:
                logger.error(f"Database error appending to stream {stream}: {e}")
                raise StreamWriteError(stream, str(e)) from e

            logger.debug(f"Appended event {expected_version} to stream {stream}")
            return Event(version=expected_version, data=event.data)

    def get_events(self, stream: str) -> EventStream:
        """Full ordered replay of the stream"""
        events = self._read_events(stream, after=None)
        return EventStream(events=events, version=len(events))

    def get_events_after(self, stream: str, version: int) -> EventStream:
        """Replay of the events positioned strictly after version"""
        events = self._read_events(stream, after=version)
        return EventStream(events=events, version=events[-1].version if events else version)

    def _read_events(self, stream: str, after: Optional[int]) -> List[Event]:
        with self.lock:
            try:
                with self.database.session() as session:
                    query = session.query(StreamMessage.position, StreamMessage.data).filter(
                        StreamMessage.stream == stream
                    )
                    if after is not None:
                        query = query.filter(StreamMessage.position > after)
                    rows = query.order_by(StreamMessage.position).all()
            except SQLAlchemyError as e:
                logger.error(f"Database error reading stream {stream}: {e}")
                raise StreamReadError(stream, str(e)) from e

        events = []
        for row in rows:
            try:
                events.append(Event(version=row.position, data=deserialize_event_data(row.data)))
            except ValueError as e:
                logger.error(f"Failed to deserialize event {row.position} of stream {stream}: {e}")
                raise StreamReadError(stream, f"event {row.position}: {e}") from e
        return events

    @staticmethod
    def _current_version(session: Session, stream: str) -> int:
        current = session.query(func.max(StreamMessage.position)).filter(
            StreamMessage.stream == stream
        ).scalar()
        return int(current or 0)


class SqlSnapshotStore:
    """Named projection snapshots stored in the snapshots table"""

    def __init__(self, database: Database):
        self.database = database

    def read(self, name: str) -> Optional[Tuple[int, str]]:
        """Return (version, data) of the snapshot, None if it was never written"""
        try:
            with self.database.session() as session:
                snapshot = session.get(Snapshot, name)
                if snapshot is None:
                    return None
                return int(snapshot.version), snapshot.data
        except SQLAlchemyError as e:
            logger.error(f"Database error reading snapshot {name}: {e}")
            raise SnapshotReadError(f"Unable to read snapshot {name!r}: {e}") from e

    def write(self, name: str, version: int, data: str) -> None:
        """Insert or overwrite the snapshot"""
        try:
            with self.database.session() as session:
                session.merge(Snapshot(name=name, version=version, data=data))
            logger.debug(f"Stored snapshot {name} at version {version}")
        except SQLAlchemyError as e:
            logger.error(f"Database error writing snapshot {name}: {e}")
            raise SnapshotWriteError(f"Unable to write snapshot {name!r}: {e}") from e
