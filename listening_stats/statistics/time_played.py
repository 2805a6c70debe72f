"""Accumulated listening time"""
from dataclasses import dataclass

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE

@dataclass
class TimePlayed:
    """The same millisecond total expressed in four units"""
    time_ms: int = 0
    time_sec: float = 0.0
    time_min: float = 0.0
    time_hr: float = 0.0

    def add_ms(self, time: int) -> None:
        self.time_ms += time
        self.time_sec = self.time_ms / MS_PER_SECOND
        self.time_min = self.time_ms / MS_PER_MINUTE
        self.time_hr = self.time_ms / MS_PER_HOUR
