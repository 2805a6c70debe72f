"""Folds the listening event stream into calendar partitioned statistics"""
import logging
import random
from datetime import date
from typing import Dict, Iterable, List, Optional

from listening_stats.models.events import Event, TrackPlayAdded, TrackPlayIgnored
from listening_stats.models.stats import DataPoint, GeneralStats
from listening_stats.ports import EventStore
from listening_stats.statistics.artists_counts import ArtistsCounts
from listening_stats.statistics.calendar_counts import CalendarDay, MonthCounts, YearCounts
from listening_stats.statistics.counts import ArtistAndAlbumCount, ArtistAndSongCount
from listening_stats.statistics.song_counter import ArtistSongCounter
from listening_stats.utils.parse import parse_formatted_end_time

logger = logging.getLogger(__name__)

class EventProcessor:
    """
    Read model over the whole event stream.

    Every play is added to its day, month and year and to the all-time counts at once,
    so each level always equals the sum of the level below it.
    """

    def __init__(self):
        self.years: Dict[int, YearCounts] = {}
        self.artists_counts = ArtistsCounts()
        self.events_processed = 0
        self.events_rejected = 0

    @classmethod
    def from_events(cls, events: Iterable[Event]) -> 'EventProcessor':
        processor = cls()
        processor.process_events(events)
        return processor

    @classmethod
    def from_store(cls, store: EventStore, stream: str) -> 'EventProcessor':
        events = store.get_events(stream)
        processor = cls.from_events(events)
        logger.info(f"Loaded {processor.events_processed} events from stream {stream} (version {events.version})")
        return processor

    def process_events(self, events: Iterable[Event]) -> None:
        for event in events:
            self.process_event(event)

    def process_event(self, event: Event) -> None:
        data = event.data
        try:
            day = CalendarDay.from_datetime(parse_formatted_end_time(data.end_time))
        except ValueError:
            # Not folded anywhere so the calendar levels stay in step with the totals
            self.events_rejected += 1
            logger.warning(f"Ignoring event {event.version} with invalid end time {data.end_time!r}")
            return

        year_counts = self.years.get(day.year)
        if year_counts is None:
            year_counts = YearCounts(year=day.year)
            self.years[day.year] = year_counts

        if isinstance(data, TrackPlayAdded):
            year_counts.add_song_play(day, data.artist_name, data.track_name, data.ms_played, data.album_name)
            self.artists_counts.add_song_play(data.artist_name, data.track_name, data.ms_played, data.album_name)
        elif isinstance(data, TrackPlayIgnored):
            year_counts.add_song_skip(day, data.artist_name, data.track_name)
            self.artists_counts.add_song_skip(data.artist_name, data.track_name)
        self.events_processed += 1

    def year_counts(self) -> List[YearCounts]:
        return [self.years[year] for year in sorted(self.years)]

    def year_count(self, year: int) -> Optional[YearCounts]:
        return self.years.get(year)

    def month_counts(self, month: int) -> List[MonthCounts]:
        """The given month of every year that has plays in it"""
        return [year_counts.months[month] for year_counts in self.year_counts()
                if month in year_counts.months]

    def month_across_years(self, month: int) -> ArtistsCounts:
        return MonthCounts.merge(self.month_counts(month))

    def artists_on_day(self, day: date) -> ArtistsCounts:
        """Artist counts of one date, empty when nothing was played that day"""
        year_counts = self.years.get(day.year)
        if year_counts is None:
            return ArtistsCounts()
        day_counts = year_counts.day_count(day.month, day.day)
        if day_counts is None:
            return ArtistsCounts()
        return ArtistsCounts.merged([day_counts.artists_counts])

    def artist_song_counter(self, artist_name: str) -> Optional[ArtistSongCounter]:
        return self.artists_counts.find_artist(artist_name)

    def artist_songs(self, artist_name: str) -> List[str]:
        return self.artists_counts.artist_songs(artist_name)

    def search_artists(self, prefix: str) -> List[str]:
        return self.artists_counts.search(prefix)

    def total_count(self) -> int:
        return self.artists_counts.total_count()

    def over_min_plays(self, min_plays: int) -> List[ArtistSongCounter]:
        return self.artists_counts.over_min_plays(min_plays)

    def top(self, count: int) -> List[ArtistSongCounter]:
        return self.artists_counts.top(count)

    def top_songs(self, count: int) -> List[ArtistAndSongCount]:
        return self.artists_counts.top_songs(count)

    def top_unique_artists(self, count: int) -> List[ArtistSongCounter]:
        return self.artists_counts.top_unique_artists(count)

    def top_albums(self, count: int) -> List[ArtistAndAlbumCount]:
        return self.artists_counts.top_albums(count)

    def top_skipped(self, count: int) -> List[ArtistSongCounter]:
        return self.artists_counts.top_skipped(count)

    def top_skipped_songs(self, count: int) -> List[ArtistAndSongCount]:
        return self.artists_counts.top_skipped_songs(count)

    def general_stats(self, count: int) -> GeneralStats:
        return self.artists_counts.general_stats(count)

    def random_artists(self, count: int, year: Optional[int] = None, month: Optional[int] = None,
                       min_listens: int = 0, rng: Optional[random.Random] = None) -> List[str]:
        """
        Sample artist names with at least min_listens plays.

        The pool is restricted to a year and/or a month when given; a month without
        a year covers that month of every year.
        """
        if year is not None:
            year_counts = self.years.get(year)
            if year_counts is None:
                return []
            if month is None:
                pool = year_counts.artists_counts
            else:
                month_counts = year_counts.month_count(month)
                if month_counts is None:
                    return []
                pool = month_counts.artists_counts
        elif month is not None:
            pool = self.month_across_years(month)
        else:
            pool = self.artists_counts

        names = [artist.artist_name for artist in pool.over_min_plays(min_listens)]
        rng = rng or random.Random()
        return rng.sample(names, min(max(count, 0), len(names)))

    def month_totals(self, year: int) -> List[DataPoint]:
        year_counts = self.years.get(year)
        if year_counts is None:
            return []
        return year_counts.month_totals()

    def weekday_totals(self, year: int) -> List[DataPoint]:
        year_counts = self.years.get(year) or YearCounts(year=year)
        return year_counts.weekday_totals()
