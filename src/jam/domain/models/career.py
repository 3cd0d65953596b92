from __future__ import annotations

from dataclasses import dataclass, field

from jam.domain.models.calendar import EventResolution
from jam.domain.models.dice import DiceTable
from jam.domain.models.release import ReleaseRecord
from jam.domain.models.song import SongConcept
from jam.domain.models.stats import PerformerStats
from jam.domain.models.week_plan import WeekPlan


SEASON_LENGTH = 52
DEFAULT_PERFORMER_NAME = "Your Performer"

PHASE_PLANNING = "planning"
PHASE_IN_PROGRESS = "in_progress"
PHASE_FINISHED = "finished"
PHASE_READY = "ready"
PHASE_PERFORMING = "performing"
PHASE_SEASON_OVER = "season_over"


@dataclass(frozen=True)
class CareerState:
    week: int = 1
    money: int = 0
    fans: int = 0
    stats: PerformerStats = field(default_factory=PerformerStats)
    plan: WeekPlan = field(default_factory=WeekPlan)
    concept: SongConcept = field(default_factory=SongConcept)
    concept_locked: bool = False
    finished_ready: bool = False
    dice: DiceTable = field(default_factory=DiceTable)
    history: tuple[ReleaseRecord, ...] = ()
    performer_name: str = DEFAULT_PERFORMER_NAME
    vinyl_unlocked: bool = False
    calendar_seed: int = 0
    events_resolved: tuple[EventResolution, ...] = ()

    def __post_init__(self) -> None:
        if int(self.week) < 1:
            raise ValueError("Week must be at least 1")
        if int(self.fans) < 0:
            raise ValueError("Fans cannot be negative")

    @property
    def season_over(self) -> bool:
        return self.week > SEASON_LENGTH

    @property
    def days_remaining(self) -> int:
        return self.plan.days_remaining

    @property
    def phase(self) -> str:
        if self.season_over:
            return PHASE_SEASON_OVER
        if not self.concept_locked:
            return PHASE_PLANNING
        if self.days_remaining > 0:
            return PHASE_IN_PROGRESS
        if self.finished_ready:
            return PHASE_READY
        return PHASE_FINISHED

    def find_release(self, ref: str) -> ReleaseRecord | None:
        for record in self.history:
            if record.ref == ref:
                return record
        return None

    def is_event_resolved(self, event_id: str) -> bool:
        return any(row.event_id == event_id for row in self.events_resolved)

    def resolution_for(self, event_id: str) -> EventResolution | None:
        for row in self.events_resolved:
            if row.event_id == event_id:
                return row
        return None
