"""Wires storage, ingestion and statistics for one listening history database"""
import logging
from dataclasses import asdict
from typing import Optional

from listening_stats.config import Settings
from listening_stats.db import Database
from listening_stats.db_config import DatabaseConfig
from listening_stats.models.stats import GeneralStats, StatsResponse, YearReport
from listening_stats.services.ingestion import IngestionSummary, ListenIngestor
from listening_stats.services.listen_tracker import ListenTrackerRepository, listen_tracker_repo
from listening_stats.services.storage import SqlEventStore, SqlSnapshotStore
from listening_stats.statistics.event_processor import EventProcessor

logger = logging.getLogger(__name__)

class ListeningHistory:
    """Handles ingestion of exported history and the statistics built from it"""

    def __init__(self, settings: Settings, database: Optional[Database] = None):
        self.settings = settings
        self.stream = settings.LISTENS_STREAM
        self.database = database or Database(DatabaseConfig.from_settings(settings))
        self.database.init()
        self.store = SqlEventStore(self.database)
        self.snapshots = SqlSnapshotStore(self.database)
        self._repository: Optional[ListenTrackerRepository] = None
        self._processor: Optional[EventProcessor] = None

    @property
    def repository(self) -> ListenTrackerRepository:
        """Listen tracker, loaded and caught up on first access"""
        if self._repository is None:
            self._repository = listen_tracker_repo(
                self.snapshots, self.store, self.stream,
                buffer_count=self.settings.SNAPSHOT_BUFFER_COUNT,
            )
        return self._repository

    def ingest(self, folder: str) -> IngestionSummary:
        """Import every export file of a folder; importing the same files again adds nothing"""
        ingestor = ListenIngestor(
            self.store,
            self.repository,
            self.stream,
            min_listen_length=self.settings.MIN_LISTEN_LENGTH_MS,
            skip_percent=self.settings.SKIP_PERCENT_THRESHOLD,
        )
        summary = ingestor.process_listens(folder)
        if summary.events_added:
            self._processor = None
        return summary

    def load_processor(self) -> EventProcessor:
        """Fold the stream into statistics, reusing the last result while nothing was ingested"""
        if self._processor is None:
            self._processor = EventProcessor.from_store(self.store, self.stream)
        return self._processor

    def general_stats(self, count: Optional[int] = None) -> GeneralStats:
        if count is None:
            count = self.settings.GENERAL_STATS_COUNT
        return self.load_processor().general_stats(count)

    def year_report(self, year: int, count: Optional[int] = None) -> Optional[YearReport]:
        if count is None:
            count = self.settings.GENERAL_STATS_COUNT
        processor = self.load_processor()
        year_counts = processor.year_count(year)
        if year_counts is None:
            return None

        artists_counts = year_counts.artists_counts
        return YearReport(
            year=year,
            total_plays=artists_counts.total_count(),
            total_skips=artists_counts.skipped_count(),
            hours_played=artists_counts.time_played.time_hr,
            month_totals=processor.month_totals(year),
            weekday_totals=processor.weekday_totals(year),
            general=artists_counts.general_stats(count),
        )

    def stats(self, summary: Optional[IngestionSummary] = None, count: Optional[int] = None) -> StatsResponse:
        """Summary of the whole history, optionally with the result of an ingestion run"""
        processor = self.load_processor()
        artists_counts = processor.artists_counts
        ingestion = None
        if summary is not None:
            ingestion = asdict(summary)
            ingestion['events_added'] = summary.events_added

        return StatsResponse(
            stream=self.stream,
            version=self.store.stream_version(self.stream),
            total_plays=artists_counts.total_count(),
            total_skips=artists_counts.skipped_count(),
            hours_played=artists_counts.time_played.time_hr,
            years=[y.year for y in processor.year_counts()],
            general=self.general_stats(count),
            ingestion=ingestion,
        )

    def close(self) -> None:
        """Persist the listen tracker and release the database"""
        try:
            if self._repository is not None:
                self._repository.flush()
        finally:
            self.database.dispose()
