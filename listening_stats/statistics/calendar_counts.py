"""Year, month and day partitions of the artist counters"""
import calendar
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from listening_stats.models.stats import DataPoint
from listening_stats.statistics.artists_counts import ArtistsCounts
from listening_stats.statistics.song_counter import ArtistSongCounter

# Python weekdays, Monday == 0, in chart order
WEEK_ORDER = (calendar.SUNDAY, calendar.MONDAY, calendar.TUESDAY, calendar.WEDNESDAY,
              calendar.THURSDAY, calendar.FRIDAY, calendar.SATURDAY)
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def order_in_week(weekday: int) -> int:
    """Position of a Python weekday in a week starting on Sunday"""
    return (weekday + 1) % 7


@dataclass(frozen=True)
class CalendarDay:
    year: int
    month: int
    day: int
    weekday: int

    @classmethod
    def from_datetime(cls, value) -> 'CalendarDay':
        """Accepts a date or a datetime"""
        return cls(year=value.year, month=value.month, day=value.day, weekday=value.weekday())


@dataclass
class DayCounts:
    day_of_month: int
    weekday: int
    artists_counts: ArtistsCounts = field(default_factory=ArtistsCounts)


@dataclass
class MonthCounts:
    month: int
    days: Dict[int, DayCounts] = field(default_factory=dict)
    artists_counts: ArtistsCounts = field(default_factory=ArtistsCounts)

    def _day(self, day: CalendarDay) -> DayCounts:
        day_counts = self.days.get(day.day)
        if day_counts is None:
            day_counts = DayCounts(day_of_month=day.day, weekday=day.weekday)
            self.days[day.day] = day_counts
        return day_counts

    def add_song_play(self, day: CalendarDay, artist_name: str, track_name: str, time_played: int,
                      album_name: Optional[str] = None) -> None:
        self._day(day).artists_counts.add_song_play(artist_name, track_name, time_played, album_name)
        self.artists_counts.add_song_play(artist_name, track_name, time_played, album_name)

    def add_song_skip(self, day: CalendarDay, artist_name: str, track_name: str) -> None:
        self._day(day).artists_counts.add_song_skip(artist_name, track_name)
        self.artists_counts.add_song_skip(artist_name, track_name)

    def day_count(self, day: int) -> Optional[DayCounts]:
        return self.days.get(day)

    def day_counts(self) -> List[DayCounts]:
        return [self.days[day] for day in sorted(self.days)]

    def over_min_plays(self, min_plays: int) -> List[ArtistSongCounter]:
        return self.artists_counts.over_min_plays(min_plays)

    @staticmethod
    def merge(month_counts: Iterable['MonthCounts']) -> ArtistsCounts:
        """Sum the artist counts of several months, e.g. the same month of different years"""
        return ArtistsCounts.merged(m.artists_counts for m in month_counts)


@dataclass
class YearCounts:
    year: int
    months: Dict[int, MonthCounts] = field(default_factory=dict)
    artists_counts: ArtistsCounts = field(default_factory=ArtistsCounts)

    def _month(self, month: int) -> MonthCounts:
        month_counts = self.months.get(month)
        if month_counts is None:
            month_counts = MonthCounts(month=month)
            self.months[month] = month_counts
        return month_counts

    def add_song_play(self, day: CalendarDay, artist_name: str, track_name: str, time_played: int,
                      album_name: Optional[str] = None) -> None:
        self._month(day.month).add_song_play(day, artist_name, track_name, time_played, album_name)
        self.artists_counts.add_song_play(artist_name, track_name, time_played, album_name)

    def add_song_skip(self, day: CalendarDay, artist_name: str, track_name: str) -> None:
        self._month(day.month).add_song_skip(day, artist_name, track_name)
        self.artists_counts.add_song_skip(artist_name, track_name)

    def month_count(self, month: int) -> Optional[MonthCounts]:
        return self.months.get(month)

    def month_counts(self) -> List[MonthCounts]:
        return [self.months[month] for month in sorted(self.months)]

    def day_count(self, month: int, day: int) -> Optional[DayCounts]:
        month_counts = self.months.get(month)
        if month_counts is None:
            return None
        return month_counts.day_count(day)

    def over_min_plays(self, min_plays: int) -> List[ArtistSongCounter]:
        return self.artists_counts.over_min_plays(min_plays)

    def month_totals(self) -> List[DataPoint]:
        """Total plays of each month that has plays, in month order"""
        return [DataPoint(label=f"{m.month:02d}", value=m.artists_counts.total_count())
                for m in self.month_counts()]

    def weekday_totals(self) -> List[DataPoint]:
        """Total plays per weekday, Sunday to Saturday, zeros included"""
        totals = [0] * 7
        for month_counts in self.months.values():
            for day_counts in month_counts.days.values():
                totals[order_in_week(day_counts.weekday)] += day_counts.artists_counts.total_count()
        return [DataPoint(label=WEEKDAY_LABELS[weekday], value=totals[order_in_week(weekday)])
                for weekday in WEEK_ORDER]
