from __future__ import annotations

import logging
import random
from typing import List, Optional

from jam.application.dtos import (
    ActionResult,
    CalendarEventView,
    CareerSummaryView,
    CareerView,
    DieFaceView,
    GigOptionView,
    ReleaseView,
    VenueOptionView,
)
from jam.application.services import career_rules, save_migrator
from jam.application.services.balance_tables import GRADE_THRESHOLDS, VENUES
from jam.application.services.career_journal import CareerJournal
from jam.application.services.career_rules import Transition
from jam.application.services.compatibility import compatibility_rating, pair_label
from jam.application.services.dice_service import faces_for, next_die_info
from jam.application.services.event_bus import EventBus
from jam.application.services.gig_economy import gig_decay
from jam.application.services.release_scorer import SCORING_MODE_DICE, SCORING_MODES, forecast_score
from jam.application.services.scheduler import ImmediateScheduler, Scheduler
from jam.application.services.season_calendar import (
    build_season_schedule,
    effect_for_event,
    effects_for_week,
    events_for_week,
)
from jam.application.services.seed_policy import RandomSource
from jam.application.services.venue_economy import risk_label, turnout_label
from jam.domain.events import Notification, ReleaseCompleted
from jam.domain.models.career import (
    DEFAULT_PERFORMER_NAME,
    PHASE_PERFORMING,
    SEASON_LENGTH,
    CareerState,
)
from jam.domain.models.dice import SKILLS
from jam.domain.models.release import ReleaseRecord
from jam.domain.models.week_plan import MAX_GIGS_PER_WEEK
from jam.domain.repositories import SaveRepository, SaveStoreError


logger = logging.getLogger(__name__)

DEFAULT_PERFORM_DELAY_S = 2.5
CALENDAR_SEED_MAX = 2**31 - 1

SKILL_STAT = {"sing": "vocals", "write": "writing", "perform": "stage"}


def _release_view(record: ReleaseRecord) -> ReleaseView:
    return ReleaseView(
        ref=record.ref,
        week=record.week,
        song_name=record.song_name or "Untitled",
        genre=record.genre,
        theme=record.theme,
        venue=record.venue,
        score=record.score,
        grade=record.grade,
        chart_pos=record.chart_pos,
        money_gain=record.money_gain,
        fans_gain=record.fans_gain,
        review=record.review,
        feedback=list(record.feedback),
        fan_comments=list(record.fan_comments),
        gig_count=len(record.gigs),
        gig_money=record.gig_money,
        gig_fans=record.gig_fans,
    )


class CareerService:
    """Owns the running career: applies rule transitions, saves and publishes events."""

    def __init__(
        self,
        save_repo: SaveRepository,
        *,
        rng: Optional[RandomSource] = None,
        event_bus: Optional[EventBus] = None,
        scheduler: Optional[Scheduler] = None,
        save_key: str = save_migrator.SAVE_KEY,
        scoring_mode: str = SCORING_MODE_DICE,
        perform_delay_s: float = DEFAULT_PERFORM_DELAY_S,
        performer_name: str = DEFAULT_PERFORMER_NAME,
    ) -> None:
        if scoring_mode not in SCORING_MODES:
            raise ValueError(f"Unsupported scoring mode: {scoring_mode}")
        self.save_repo = save_repo
        self.rng = rng or random.Random()
        self.event_bus = event_bus or EventBus()
        self.scheduler = scheduler or ImmediateScheduler()
        self.save_key = save_key
        self.scoring_mode = scoring_mode
        self.perform_delay_s = max(0.0, float(perform_delay_s))
        self.state = CareerState(performer_name=performer_name or DEFAULT_PERFORMER_NAME)
        self._schedule = build_season_schedule(self.state.calendar_seed)
        self._performing = False
        self._pending_release: Optional[Transition] = None
        self.last_release: Optional[ReleaseRecord] = None
        self.journal: Optional[CareerJournal] = None

    # --- internals -------------------------------------------------------

    @property
    def performing(self) -> bool:
        return self._performing

    @property
    def phase(self) -> str:
        if self._performing:
            return PHASE_PERFORMING
        return self.state.phase

    @property
    def schedule(self):
        return self._schedule

    def _set_state(self, state: CareerState) -> None:
        if state.calendar_seed != self.state.calendar_seed:
            self._schedule = build_season_schedule(state.calendar_seed)
        self.state = state

    def _persist(self) -> List[str]:
        try:
            self.save_repo.put(self.save_key, save_migrator.dumps(self.state))
        except SaveStoreError:
            logger.warning("Could not save progress for key %s", self.save_key, exc_info=True)
            return ["Progress could not be saved."]
        return []

    def _publish(self, events, messages) -> None:
        self.event_bus.publish_all(events)
        self.event_bus.publish_all(Notification(text=text) for text in messages)

    def _busy(self) -> Optional[ActionResult]:
        if self._performing:
            return ActionResult(messages=["The performance is still underway."], accepted=False)
        return None

    def _commit(self, transition: Transition, *, publish: bool = True) -> ActionResult:
        if not transition.accepted:
            logger.debug("Rejected career action: %s", "; ".join(transition.messages))
            return ActionResult(messages=list(transition.messages), accepted=False, season_over=self.state.season_over)
        self._set_state(transition.state)
        messages = list(transition.messages) + self._persist()
        if publish:
            self._publish(transition.events, transition.messages)
        return ActionResult(messages=messages, accepted=True, season_over=self.state.season_over)

    def _fresh_seed(self) -> int:
        return int(self.rng.randint(0, CALENDAR_SEED_MAX))

    # --- save lifecycle --------------------------------------------------

    def has_save(self) -> bool:
        try:
            return self.save_repo.exists(self.save_key)
        except SaveStoreError:
            logger.warning("Save store unavailable while checking for a save", exc_info=True)
            return False

    def new_season_intent(self, performer_name: Optional[str] = None) -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        name = str(performer_name or "").strip() or self.state.performer_name
        seed = self._fresh_seed()
        transition = career_rules.new_career(
            schedule=build_season_schedule(seed),
            calendar_seed=seed,
            performer_name=name,
            vinyl_unlocked=self.state.vinyl_unlocked,
        )
        self.last_release = None
        logger.info("Starting a new season for %s", name)
        result = self._commit(transition)
        result.messages.insert(0, f"Welcome, {name}! Week 1 of {SEASON_LENGTH}.")
        return result

    def load_intent(self) -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        try:
            raw = self.save_repo.get(self.save_key)
        except SaveStoreError:
            logger.warning("Save store unavailable while loading", exc_info=True)
            raw = None
        loaded = save_migrator.load(raw)
        if loaded is None:
            return ActionResult(messages=["No saved season found."], accepted=False)
        self._set_state(loaded)
        self._schedule = build_season_schedule(loaded.calendar_seed)
        self.last_release = loaded.history[0] if loaded.history else None
        logger.info("Loaded save %s at week %d", self.save_key, loaded.week)
        return ActionResult(
            messages=[f"Welcome back, {loaded.performer_name}! Week {min(loaded.week, SEASON_LENGTH)}."],
            season_over=loaded.season_over,
        )

    def clear_save_intent(self) -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        try:
            self.save_repo.delete(self.save_key)
        except SaveStoreError:
            logger.warning("Could not clear save %s", self.save_key, exc_info=True)
            return ActionResult(messages=["The save could not be cleared."], accepted=False)
        logger.info("Cleared save %s", self.save_key)
        return ActionResult(messages=["Save cleared."])

    # --- commands --------------------------------------------------------

    def choose_concept_intent(self, genre: str, theme: str, song_name: str = "") -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        return self._commit(career_rules.choose_concept(self.state, genre, theme, song_name))

    def instruct_intent(self, activity: str) -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        return self._commit(career_rules.instruct(self.state, activity, self.rng, mode=self.scoring_mode))

    def finish_song_intent(self) -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        return self._commit(career_rules.finish_song(self.state))

    def perform_release_intent(self, venue_key: str) -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        transition = career_rules.perform_release(
            self.state,
            venue_key,
            self.rng,
            schedule=self._schedule,
            mode=self.scoring_mode,
        )
        result = self._commit(transition, publish=False)
        if not result.accepted:
            return result

        record = transition.record
        logger.info(
            "Released %r at week %d: score %.1f grade %s chart #%d",
            record.song_name,
            record.week,
            record.score,
            record.grade,
            record.chart_pos,
        )
        self._performing = True
        self._pending_release = transition
        venue_name = record.venue
        self.scheduler.schedule_after(self.perform_delay_s, self._reveal_release)
        messages = [f"Performing at {venue_name}..."]
        if not self._performing:
            messages.extend(result.messages)
        else:
            messages.extend(result.messages[len(transition.messages):])
        return ActionResult(messages=messages, accepted=True, season_over=self.state.season_over)

    def _reveal_release(self) -> None:
        transition = self._pending_release
        self._pending_release = None
        self._performing = False
        if transition is None or transition.record is None:
            return
        self.last_release = transition.record
        self.event_bus.publish(ReleaseCompleted(record=transition.record))
        self._publish(transition.events, transition.messages)

    def book_gig_intent(self, release_ref: str, venue_key: str) -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        transition = career_rules.book_gig(self.state, release_ref, venue_key, schedule=self._schedule)
        if transition.accepted:
            logger.info("Gig booked for %s at week %d", release_ref, self.state.week)
        return self._commit(transition)

    def resolve_event_choice_intent(self, event_id: str, choice_index: int) -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        return self._commit(
            career_rules.resolve_event_choice(self.state, event_id, choice_index, schedule=self._schedule)
        )

    def restart_intent(self) -> ActionResult:
        busy = self._busy()
        if busy is not None:
            return busy
        seed = self._fresh_seed()
        transition = career_rules.restart(self.state, schedule=build_season_schedule(seed), calendar_seed=seed)
        self.last_release = None
        logger.info("Restarting the season for %s", self.state.performer_name)
        return self._commit(transition)

    # --- queries ---------------------------------------------------------

    def _dice_views(self) -> List[DieFaceView]:
        views: List[DieFaceView] = []
        for skill in SKILLS:
            stat = self.state.stats.get(SKILL_STAT[skill])
            result = self.state.dice.get(skill)
            upcoming = next_die_info(stat)
            views.append(
                DieFaceView(
                    skill=skill,
                    faces=result.faces if result is not None else faces_for(stat),
                    value=result.value if result is not None else None,
                    quality=result.quality if result is not None else None,
                    next_faces=upcoming.faces if upcoming is not None else None,
                    next_threshold=upcoming.threshold if upcoming is not None else None,
                )
            )
        return views

    def list_calendar_views(self, week: Optional[int] = None) -> List[CalendarEventView]:
        """Calendar events for ``week``; all events of the season when omitted."""

        events = self._schedule if week is None else events_for_week(self._schedule, week)
        views: List[CalendarEventView] = []
        for event in events:
            resolution = self.state.resolution_for(event.id)
            views.append(
                CalendarEventView(
                    id=event.id,
                    week=event.week,
                    title=event.title,
                    short=event.short,
                    details=event.details,
                    kind=event.kind,
                    effect_summary=effect_for_event(event, self.state.events_resolved).summary()
                    if (event.effect is not None or resolution is not None)
                    else "",
                    choices=[choice.label for choice in event.choices],
                    resolved=resolution is not None,
                    chosen=resolution.choice_index if resolution is not None else None,
                )
            )
        return views

    def get_career_view(self) -> CareerView:
        state = self.state
        concept = state.concept
        effect = effects_for_week(self._schedule, state.week, state.events_resolved)
        last = _release_view(self.last_release) if self.last_release is not None and not self._performing else None
        return CareerView(
            week=state.week,
            season_length=SEASON_LENGTH,
            phase=self.phase,
            money=state.money,
            fans=state.fans,
            vocals=state.stats.vocals,
            writing=state.stats.writing,
            stage=state.stats.stage,
            days_left=state.days_remaining,
            gigs_this_week=state.plan.gigs_this_week,
            max_gigs=MAX_GIGS_PER_WEEK,
            genre=concept.genre,
            theme=concept.theme,
            song_name=concept.name,
            concept_locked=state.concept_locked,
            performer_name=state.performer_name,
            scoring_mode=self.scoring_mode,
            pairing_hint=pair_label(compatibility_rating(concept.genre, concept.theme)),
            week_gains=state.plan.gains(),
            dice=self._dice_views(),
            events=self.list_calendar_views(state.week),
            effect_summary=effect.summary(),
            last_release=last,
        )

    def venue_options(self) -> List[VenueOptionView]:
        state = self.state
        expected = forecast_score(
            mode=self.scoring_mode,
            dice=state.dice,
            plan=state.plan,
            week=state.week,
            genre=state.concept.genre,
            theme=state.concept.theme,
        )
        return [
            VenueOptionView(
                key=venue.key,
                name=venue.name,
                cost=venue.cost,
                break_even=venue.break_even,
                fan_requirement=venue.fan_requirement,
                locked=not venue.is_accessible(state.fans),
                risk=risk_label(venue, expected),
                turnout=turnout_label(venue),
                forecast_score=expected,
                description=venue.description,
            )
            for venue in VENUES.values()
        ]

    def gig_options(self) -> List[GigOptionView]:
        state = self.state
        options: List[GigOptionView] = []
        for record in state.history:
            decay = gig_decay(record, week=state.week, plan=state.plan)
            options.append(
                GigOptionView(
                    ref=record.ref,
                    song_name=record.song_name or "Untitled",
                    genre=record.genre,
                    theme=record.theme,
                    release_week=record.release_week,
                    grade=record.grade,
                    score=record.score,
                    weeks_since_release=max(0, state.week - record.release_week),
                    gigs_this_week=state.plan.gig_count_for(record.ref),
                    decay=decay.factor,
                )
            )
        return options

    def list_release_views(self) -> List[ReleaseView]:
        return [_release_view(record) for record in self.state.history]

    def career_summary(self) -> CareerSummaryView:
        history = self.state.history
        grade_rank = {grade: rank for rank, (_, grade) in enumerate(GRADE_THRESHOLDS)}
        best_grade = min((record.grade for record in history), key=lambda grade: grade_rank.get(grade, len(grade_rank)), default=None)
        return CareerSummaryView(
            total_releases=len(history),
            total_money=sum(record.money_gain + record.gig_money for record in history),
            total_gigs=sum(len(record.gigs) for record in history),
            best_grade=best_grade,
            best_chart_pos=min((record.chart_pos for record in history), default=None),
            money=self.state.money,
            fans=self.state.fans,
            week=self.state.week,
        )
