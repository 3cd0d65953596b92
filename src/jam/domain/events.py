from dataclasses import dataclass, field
from typing import Dict

from jam.domain.models.release import GigEvent, ReleaseRecord


@dataclass
class TrainingApplied:
    week: int
    activity: str
    gains: Dict[str, float] = field(default_factory=dict)


@dataclass
class DiceRolled:
    week: int
    skill: str
    faces: int
    value: int


@dataclass
class ReleaseCompleted:
    record: ReleaseRecord


@dataclass
class GigCompleted:
    record: ReleaseRecord
    gig: GigEvent
    gains: Dict[str, float] = field(default_factory=dict)


@dataclass
class WeekAdvanced:
    week_before: int
    week_after: int


@dataclass
class VenueUnlocked:
    venue_key: str
    venue_name: str
    fans: int


@dataclass
class SeasonEnded:
    final_week: int
    money: int
    fans: int
    releases: int


@dataclass
class CalendarGrantApplied:
    event_id: str
    week: int
    amount: int


@dataclass
class Notification:
    text: str
