"""Report models handed to the UI and export layers"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

class GeneralStats(BaseModel):
    """
    Summary of a set of artist counts.

    Every list holds display strings, best ranked first:
        artist_total_plays: "artist - plays"
        most_played_songs: "artist - song - plays"
        artist_most_played_songs: "artist - song - plays" for each artist's favourite song
    """
    count_artists_listened_to: int = 0
    artist_total_plays: List[str] = Field(default_factory=list, description="Top artists by total plays")
    most_played_songs: List[str] = Field(default_factory=list, description="Top songs across all artists")
    artist_most_played_songs: List[str] = Field(default_factory=list, description="Top artists by their most played song")

class DataPoint(BaseModel):
    """One bar of a calendar breakdown chart"""
    label: str = Field(description="Bar label, e.g. '03' or 'Sun'")
    value: int = Field(description="Total plays")

class YearReport(BaseModel):
    """Statistics of one calendar year"""
    year: int
    total_plays: int = 0
    total_skips: int = 0
    hours_played: float = 0.0
    month_totals: List[DataPoint] = Field(default_factory=list)
    weekday_totals: List[DataPoint] = Field(default_factory=list)
    general: GeneralStats = Field(default_factory=GeneralStats)

class StatsResponse(BaseModel):
    """
    Result of a stats run.

    Attributes:
        stream: Event stream the statistics were folded from
        version: Stream version at load time
        total_plays: Plays across all years
        total_skips: Skipped plays across all years
        hours_played: Listening time of the plays
        years: Years with at least one event
        general: All-time general stats
        ingestion: Summary of the ingestion run, if one happened
    """
    stream: str
    version: int = 0
    total_plays: int = 0
    total_skips: int = 0
    hours_played: float = 0.0
    years: List[int] = Field(default_factory=list)
    general: GeneralStats = Field(default_factory=GeneralStats)
    ingestion: Optional[Dict[str, Any]] = None
