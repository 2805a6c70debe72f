"""Batch ingestion of exported listening history into the event log"""
import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from listening_stats.commands import AddTrackPlay, TrackPlay
from listening_stats.config import DEFAULT_SKIP_PERCENT, MIN_LISTEN_LENGTH_MS
from listening_stats.errors import NormalizationError, ReadError, VersionConflictError
from listening_stats.models.events import Event, TrackPlayAdded
from listening_stats.models.track_play import Normalized
from listening_stats.ports import EventStore
from listening_stats.services.listen_tracker import ListenTrackerRepository
from listening_stats.services.readers import read_track_plays

logger = logging.getLogger(__name__)

@dataclass
class IngestionSummary:
    """Counts reported at the end of an ingestion run"""
    files_processed: int = 0
    files_failed: int = 0
    records_read: int = 0
    plays_added: int = 0
    skips_added: int = 0
    duplicates: int = 0
    malformed: int = 0
    conflicts: int = 0
    failed_files: List[str] = field(default_factory=list)

    @property
    def events_added(self) -> int:
        return self.plays_added + self.skips_added

    def merge(self, other: 'IngestionSummary') -> None:
        self.files_processed += other.files_processed
        self.files_failed += other.files_failed
        self.records_read += other.records_read
        self.plays_added += other.plays_added
        self.skips_added += other.skips_added
        self.duplicates += other.duplicates
        self.malformed += other.malformed
        self.conflicts += other.conflicts
        self.failed_files.extend(other.failed_files)


class ListenIngestor:
    """Runs AddTrackPlay over raw records, appends the events and projects them"""

    def __init__(self, store: EventStore, repository: ListenTrackerRepository, stream: str,
                 min_listen_length: int = MIN_LISTEN_LENGTH_MS,
                 skip_percent: float = DEFAULT_SKIP_PERCENT):
        self.store = store
        self.repository = repository
        self.stream = stream
        self.min_listen_length = min_listen_length
        self.skip_percent = skip_percent

    def process_listens(self, input_folder: str) -> IngestionSummary:
        """
        Ingest every file of a folder.

        Unreadable files are reported in the summary and do not stop the batch.
        """
        if not os.path.isdir(input_folder):
            raise FileNotFoundError(f"History folder not found: {input_folder}")

        summary = IngestionSummary()
        for file_name in sorted(os.listdir(input_folder)):
            path = os.path.join(input_folder, file_name)
            if not os.path.isfile(path):
                continue
            try:
                file_summary = self.process_file(path)
            except ReadError as e:
                logger.warning(f"Skipping {path}: {e}")
                summary.files_failed += 1
                summary.failed_files.append(path)
                continue

            summary.merge(file_summary)
            logger.info(f"Processed {path}: added {file_summary.events_added} events")

        self.repository.flush()
        logger.info(
            f"Ingestion complete: {summary.files_processed} files, {summary.records_read} records, "
            f"{summary.plays_added} plays, {summary.skips_added} skips, {summary.duplicates} duplicates, "
            f"{summary.malformed} malformed, {summary.files_failed} failed files"
        )
        return summary

    def process_file(self, path: str) -> IngestionSummary:
        """
        Ingest one export file.

        Raises:
            ReadError: If the file cannot be read
        """
        track_plays = read_track_plays(path)
        summary = IngestionSummary(files_processed=1)
        self.process_track_plays(track_plays, summary)
        return summary

    def process_track_plays(self, track_plays: Iterable[TrackPlay],
                            summary: Optional[IngestionSummary] = None) -> List[Event]:
        """Ingest raw records, returning the appended events"""
        if summary is None:
            summary = IngestionSummary()

        events: List[Event] = []
        with self.repository.lock:
            for track_play in track_plays:
                summary.records_read += 1
                command = AddTrackPlay(
                    track_play=track_play,
                    min_listen_length=self.min_listen_length,
                    skip_percent=self.skip_percent,
                )
                try:
                    normalized = command.normalize()
                except NormalizationError as e:
                    summary.malformed += 1
                    logger.debug(f"Dropping malformed track play: {e}")
                    continue

                event = self._append(command, normalized, summary)
                if event is not None:
                    events.append(event)
        return events

    def _append(self, command: AddTrackPlay, normalized: Normalized,
                summary: IngestionSummary) -> Optional[Event]:
        # A conflict means the tracker fell behind the store: catch up once and re-derive
        for attempt in range(2):
            tracker = self.repository.get()
            data = command.handle_normalized(normalized, tracker)
            if data is None:
                summary.duplicates += 1
                return None

            expected_version = tracker.version + 1
            try:
                appended = self.store.add_event(self.stream, Event(version=expected_version, data=data),
                                                expected_version)
            except VersionConflictError as e:
                summary.conflicts += 1
                logger.warning(f"Version conflict on stream {self.stream}: {e}")
                if attempt == 0:
                    self.repository.catch_up(self.store, self.stream)
                    continue
                return None

            self.repository.project_event(appended)
            if isinstance(appended.data, TrackPlayAdded):
                summary.plays_added += 1
            else:
                summary.skips_added += 1
            return appended
        return None
