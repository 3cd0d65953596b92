from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class ActionResult:
    messages: List[str] = field(default_factory=list)
    accepted: bool = True
    season_over: bool = False


@dataclass
class DieFaceView:
    skill: str
    faces: int
    value: int | None = None
    quality: float | None = None
    next_faces: int | None = None
    next_threshold: float | None = None


@dataclass
class CalendarEventView:
    id: str
    week: int
    title: str
    short: str
    details: str
    kind: str
    effect_summary: str = ""
    choices: List[str] = field(default_factory=list)
    resolved: bool = False
    chosen: int | None = None


@dataclass
class CareerView:
    week: int
    season_length: int
    phase: str
    money: int
    fans: int
    vocals: float
    writing: float
    stage: float
    days_left: int
    gigs_this_week: int
    max_gigs: int
    genre: str
    theme: str
    song_name: str
    concept_locked: bool
    performer_name: str
    scoring_mode: str
    pairing_hint: str = ""
    week_gains: Dict[str, float] = field(default_factory=dict)
    dice: List[DieFaceView] = field(default_factory=list)
    events: List[CalendarEventView] = field(default_factory=list)
    effect_summary: str = ""
    last_release: "ReleaseView | None" = None


@dataclass
class VenueOptionView:
    key: str
    name: str
    cost: int
    break_even: int
    fan_requirement: int
    locked: bool
    risk: str
    turnout: str
    forecast_score: float
    description: str = ""


@dataclass
class GigOptionView:
    ref: str
    song_name: str
    genre: str
    theme: str
    release_week: int
    grade: str
    score: float
    weeks_since_release: int
    gigs_this_week: int
    decay: float


@dataclass
class ReleaseView:
    ref: str
    week: int
    song_name: str
    genre: str
    theme: str
    venue: str
    score: float
    grade: str
    chart_pos: int
    money_gain: int
    fans_gain: int
    review: str = ""
    feedback: List[str] = field(default_factory=list)
    fan_comments: List[str] = field(default_factory=list)
    gig_count: int = 0
    gig_money: int = 0
    gig_fans: int = 0


@dataclass
class CareerSummaryView:
    total_releases: int
    total_money: int
    total_gigs: int
    best_grade: str | None
    best_chart_pos: int | None
    money: int
    fans: int
    week: int
