"""Immutable event records appended to the listening history log"""
import json
from dataclasses import asdict, dataclass, field
from typing import List, Optional, Union

@dataclass(frozen=True)
class TrackPlayData:
    """Fields shared by every track play event"""
    artist_name: str
    track_name: str
    album_name: Optional[str]
    ms_played: int
    end_time: str
    service_hint: str

@dataclass(frozen=True)
class TrackPlayAdded(TrackPlayData):
    """A genuine listen"""

@dataclass(frozen=True)
class TrackPlayIgnored(TrackPlayData):
    """A play that was classified as a skip"""

EventData = Union[TrackPlayAdded, TrackPlayIgnored]

EVENT_TYPES = {
    "TrackPlayAdded": TrackPlayAdded,
    "TrackPlayIgnored": TrackPlayIgnored,
}

@dataclass(frozen=True)
class Event:
    """An event together with its 1-based position in the stream"""
    version: int
    data: EventData

@dataclass
class EventStream:
    """Ordered events of one stream and the stream version they lead up to"""
    events: List[Event] = field(default_factory=list)
    version: int = 0

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self):
        return iter(self.events)


def serialize_event_data(data: EventData) -> str:
    """Serialize event data as a JSON object tagged with its event type"""
    payload = {"type": type(data).__name__}
    payload.update(asdict(data))
    return json.dumps(payload)


def deserialize_event_data(raw: str) -> EventData:
    """
    Rebuild event data from its tagged JSON form.

    Raises:
        ValueError: If the payload is not valid JSON, has an unknown type or is missing fields
    """
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError(f"Event payload must be an object, got {type(payload).__name__}")

    event_type = EVENT_TYPES.get(payload.pop("type", None))
    if event_type is None:
        raise ValueError(f"Unknown event type in payload: {raw[:100]}")

    try:
        return event_type(
            artist_name=payload["artist_name"],
            track_name=payload["track_name"],
            album_name=payload.get("album_name"),
            ms_played=int(payload["ms_played"]),
            end_time=payload["end_time"],
            service_hint=payload.get("service_hint", "unknown"),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed event payload: {e}") from e
