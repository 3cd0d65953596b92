"""Pure career transitions.

Every public function takes the current ``CareerState`` plus the player's
input (and an RNG where the rules draw) and returns a ``Transition``. A
rejected request returns the unchanged state with ``accepted=False`` and a
short reason; nothing here raises for player input.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence

from jam.application.services.balance_tables import (
    BUSKING_STAGE_BONUS,
    NO_RISK_VENUE_KEY,
    VENUES,
    venue_for_key,
)
from jam.application.services.compatibility import compatibility_rating, pair_label
from jam.application.services.dice_service import record_check, resolve_check
from jam.application.services.gig_economy import GigOutcome, settle_gig
from jam.application.services.release_feedback import build_feedback, fan_comments, flavour_rng, pick_review
from jam.application.services.release_scorer import SCORING_MODE_DICE, ReleaseScore, score_release
from jam.application.services.season_calendar import find_event, pending_grants, performance_effect
from jam.application.services.seed_policy import RandomSource
from jam.application.services.training_service import apply_training
from jam.application.services.venue_economy import VenueOutcome, settle_performance
from jam.domain.events import (
    CalendarGrantApplied,
    DiceRolled,
    GigCompleted,
    SeasonEnded,
    TrainingApplied,
    VenueUnlocked,
    WeekAdvanced,
)
from jam.domain.models.calendar import CalendarEvent, EventResolution
from jam.domain.models.career import (
    PHASE_FINISHED,
    PHASE_IN_PROGRESS,
    PHASE_PLANNING,
    PHASE_READY,
    CareerState,
)
from jam.domain.models.dice import ACTIVITY_SKILL, DiceTable
from jam.domain.models.release import ReleaseRecord
from jam.domain.models.song import SongConcept, normalize_genre, normalize_song_name, normalize_theme
from jam.domain.models.stats import STAT_NAMES, PerformerStats
from jam.domain.models.week_plan import MAX_GIGS_PER_WEEK, TRAINING_ACTIVITIES, WeekPlan, normalize_activity


@dataclass(frozen=True)
class Transition:
    state: CareerState
    accepted: bool = True
    messages: tuple[str, ...] = ()
    events: tuple[object, ...] = ()
    record: ReleaseRecord | None = None
    score: ReleaseScore | None = None
    economics: VenueOutcome | None = None
    gig: GigOutcome | None = None


@dataclass
class _Draft:
    state: CareerState
    messages: list[str] = field(default_factory=list)
    events: list[object] = field(default_factory=list)

    def done(self, **extra) -> Transition:
        return Transition(
            state=self.state,
            accepted=True,
            messages=tuple(self.messages),
            events=tuple(self.events),
            **extra,
        )


def rejected(state: CareerState, reason: str) -> Transition:
    return Transition(state=state, accepted=False, messages=(reason,))


def _applied_gains(before: PerformerStats, after: PerformerStats) -> dict[str, float]:
    gains: dict[str, float] = {}
    for name in STAT_NAMES:
        delta = after.get(name) - before.get(name)
        if delta:
            gains[name] = delta
    return gains


def _venue_unlocks(fans_before: int, fans_after: int) -> list[VenueUnlocked]:
    unlocked: list[VenueUnlocked] = []
    for venue in VENUES.values():
        if venue.fan_requirement <= 0:
            continue
        if fans_before < venue.fan_requirement <= fans_after:
            unlocked.append(VenueUnlocked(venue_key=venue.key, venue_name=venue.name, fans=int(fans_after)))
    return unlocked


def pay_week_grants(draft: _Draft, schedule: Sequence[CalendarEvent]) -> None:
    state = draft.state
    grants = pending_grants(schedule, state.week, state.events_resolved)
    if not grants:
        return
    money = state.money
    resolved = list(state.events_resolved)
    for event in grants:
        amount = int(event.effect.grant_money) if event.effect is not None else 0
        money += amount
        resolved.append(EventResolution(event_id=event.id))
        draft.events.append(CalendarGrantApplied(event_id=event.id, week=state.week, amount=amount))
        draft.messages.append(f"{event.title}: +£{amount}.")
    draft.state = replace(state, money=money, events_resolved=tuple(resolved))


def new_career(
    *,
    schedule: Sequence[CalendarEvent],
    calendar_seed: int,
    performer_name: str,
    vinyl_unlocked: bool = False,
) -> Transition:
    draft = _Draft(
        state=CareerState(
            performer_name=performer_name,
            vinyl_unlocked=bool(vinyl_unlocked),
            calendar_seed=int(calendar_seed),
        )
    )
    pay_week_grants(draft, schedule)
    return draft.done()


def restart(state: CareerState, *, schedule: Sequence[CalendarEvent], calendar_seed: int) -> Transition:
    outcome = new_career(
        schedule=schedule,
        calendar_seed=calendar_seed,
        performer_name=state.performer_name,
        vinyl_unlocked=state.vinyl_unlocked,
    )
    return replace(outcome, messages=("Fresh start! Ready to work!",) + outcome.messages)


def choose_concept(state: CareerState, genre: str | None, theme: str | None, name: str | None) -> Transition:
    if state.phase != PHASE_PLANNING:
        return rejected(state, "The song concept is already locked for this week.")
    picked_genre = normalize_genre(genre)
    picked_theme = normalize_theme(theme)
    if picked_genre is None:
        return rejected(state, f"Unknown genre: {genre}")
    if picked_theme is None:
        return rejected(state, f"Unknown theme: {theme}")

    concept = SongConcept(genre=picked_genre, theme=picked_theme, name=normalize_song_name(name))
    label = pair_label(compatibility_rating(concept.genre, concept.theme))
    draft = _Draft(state=replace(state, concept=concept, concept_locked=True, finished_ready=False))
    draft.messages.append(f"Working on '{concept.display_name}' ({concept.genre} / {concept.theme}): {label}.")
    return draft.done()


def instruct(state: CareerState, activity: str | None, rng: RandomSource, *, mode: str = SCORING_MODE_DICE) -> Transition:
    picked = normalize_activity(activity)
    if picked not in TRAINING_ACTIVITIES:
        return rejected(state, f"Unknown activity: {activity}")
    if state.phase != PHASE_IN_PROGRESS:
        return rejected(state, "No training days are available right now.")

    training = apply_training(picked, state.stats, state.plan)
    draft = _Draft(state=replace(state, stats=training.stats, plan=training.plan))
    gains = _applied_gains(state.stats, training.stats)
    draft.events.append(TrainingApplied(week=state.week, activity=picked, gains=gains))
    draft.messages.append(f"{picked.title()} day: {training.stat_name} +{training.delta:.3f}.")

    if mode == SCORING_MODE_DICE:
        skill = ACTIVITY_SKILL[picked]
        result = resolve_check(skill, training.stats.get(training.stat_name), rng)
        draft.state = replace(draft.state, dice=record_check(draft.state.dice, skill, result))
        draft.events.append(DiceRolled(week=state.week, skill=skill, faces=result.faces, value=result.value))
        draft.messages.append(f"Rolled {result.value} on a d{result.faces} for {skill}.")
    return draft.done()


def finish_song(state: CareerState) -> Transition:
    if state.phase != PHASE_FINISHED:
        return rejected(state, "Use every day of the week before finishing the song.")
    draft = _Draft(state=replace(state, finished_ready=True))
    draft.messages.append("Song finished. Choose a venue to perform.")
    return draft.done()


def perform_release(
    state: CareerState,
    venue_key: str | None,
    rng: RandomSource,
    *,
    schedule: Sequence[CalendarEvent],
    mode: str = SCORING_MODE_DICE,
) -> Transition:
    if state.phase != PHASE_READY:
        return rejected(state, "Finish the song before choosing a venue.")
    venue = venue_for_key(venue_key)
    if venue is None:
        return rejected(state, f"Unknown venue: {venue_key}")
    if not venue.is_accessible(state.fans):
        return rejected(state, f"{venue.name} requires {venue.fan_requirement} fans.")

    concept = state.concept
    scored = score_release(
        mode=mode,
        dice=state.dice,
        plan=state.plan,
        week=state.week,
        genre=concept.genre,
        theme=concept.theme,
        venue=venue,
        fans=state.fans,
        rng=rng,
    )
    economics = settle_performance(
        score=scored.score,
        grade=scored.grade,
        venue=venue,
        fans=state.fans,
        week=state.week,
        effect=performance_effect(schedule, state.week, state.events_resolved),
    )

    previous = state.history[0] if state.history else None
    record = ReleaseRecord(
        week=state.week,
        release_week=state.week,
        song_name=concept.name,
        genre=concept.genre,
        theme=concept.theme,
        venue=venue.name,
        score=scored.score,
        grade=scored.grade,
        chart_pos=scored.chart_pos,
        money_gain=economics.net,
        fans_gain=economics.fans_gain,
        feedback=tuple(
            build_feedback(stats=state.stats, plan=state.plan, genre=concept.genre, theme=concept.theme, previous=previous)
        ),
    )
    flavour = flavour_rng(state.calendar_seed, state.week, concept.name)
    record = replace(record, review=pick_review(record.grade, flavour))
    record = replace(record, fan_comments=tuple(fan_comments(record, state.performer_name, flavour)))

    stats = state.stats
    draft = _Draft(state=state)
    if venue.key == NO_RISK_VENUE_KEY:
        stats = stats.with_gains({"stage": BUSKING_STAGE_BONUS})
        gains = _applied_gains(state.stats, stats)
        if gains:
            draft.events.append(TrainingApplied(week=state.week, activity="busking", gains=gains))

    fans_after = state.fans + economics.fans_gain
    draft.state = replace(
        state,
        week=state.week + 1,
        money=state.money + economics.net,
        fans=fans_after,
        stats=stats,
        plan=WeekPlan(),
        concept=replace(concept, name=""),
        concept_locked=False,
        finished_ready=False,
        dice=DiceTable(),
        history=(record,) + tuple(state.history),
    )
    draft.events.extend(_venue_unlocks(state.fans, fans_after))
    draft.events.append(WeekAdvanced(week_before=state.week, week_after=state.week + 1))
    draft.messages.append(
        f"'{concept.display_name}' scored {scored.score:.0f} ({scored.grade}), chart #{scored.chart_pos}: "
        f"£{economics.net}, +{economics.fans_gain} fans."
    )
    if draft.state.season_over:
        draft.events.append(
            SeasonEnded(
                final_week=state.week,
                money=draft.state.money,
                fans=draft.state.fans,
                releases=len(draft.state.history),
            )
        )
        draft.messages.append("The season is over. Restart to play another year.")
    else:
        pay_week_grants(draft, schedule)
    return draft.done(record=record, score=scored, economics=economics)


def book_gig(
    state: CareerState,
    release_ref: str,
    venue_key: str | None,
    *,
    schedule: Sequence[CalendarEvent],
) -> Transition:
    if state.phase != PHASE_IN_PROGRESS:
        return rejected(state, "No free day for a gig right now.")
    if state.plan.gigs_this_week >= MAX_GIGS_PER_WEEK:
        return rejected(state, "Weekly gig cap reached.")
    record = state.find_release(str(release_ref))
    if record is None:
        return rejected(state, "That song has not been released.")
    venue = venue_for_key(venue_key)
    if venue is None:
        return rejected(state, f"Unknown venue: {venue_key}")
    if not venue.is_accessible(state.fans):
        return rejected(state, f"{venue.name} requires {venue.fan_requirement} fans.")

    outcome = settle_gig(
        record,
        venue,
        week=state.week,
        fans=state.fans,
        plan=state.plan,
        effect=performance_effect(schedule, state.week, state.events_resolved),
    )
    stats = state.stats.with_gains(outcome.gains)
    gains = _applied_gains(state.stats, stats)
    entry = replace(outcome.entry, gains=tuple(sorted(gains.items())))
    updated = record.with_gig(outcome.gig)
    history = tuple(updated if row.ref == record.ref else row for row in state.history)
    fans_after = state.fans + outcome.gig.fans_gain

    draft = _Draft(
        state=replace(
            state,
            money=state.money + outcome.gig.money_gain,
            fans=fans_after,
            stats=stats,
            plan=state.plan.append(entry),
            history=history,
        )
    )
    draft.events.append(TrainingApplied(week=state.week, activity="gig", gains=gains))
    draft.events.append(GigCompleted(record=updated, gig=outcome.gig, gains=gains))
    draft.events.extend(_venue_unlocks(state.fans, fans_after))
    draft.messages.append(
        f"Gig at {venue.name} with '{record.song_name or 'Untitled'}': £{outcome.gig.money_gain}, +{outcome.gig.fans_gain} fans."
    )
    return draft.done(record=updated, gig=outcome)


def resolve_event_choice(
    state: CareerState,
    event_id: str,
    choice_index: int,
    *,
    schedule: Sequence[CalendarEvent],
) -> Transition:
    if state.season_over:
        return rejected(state, "The season is over.")
    event = find_event(schedule, event_id)
    if event is None or not event.choices:
        return rejected(state, "There is no decision to make for that event.")
    if event.week != state.week:
        return rejected(state, "That event is not happening this week.")
    if state.is_event_resolved(event.id):
        return rejected(state, "You already decided.")
    try:
        index = int(choice_index)
    except (TypeError, ValueError):
        return rejected(state, "Unknown choice.")
    if not 0 <= index < len(event.choices):
        return rejected(state, "Unknown choice.")

    choice = event.choices[index]
    draft = _Draft(
        state=replace(
            state,
            money=state.money + int(choice.effect.grant_money),
            events_resolved=tuple(state.events_resolved) + (EventResolution(event_id=event.id, choice_index=index),),
        )
    )
    if choice.effect.grant_money:
        draft.events.append(CalendarGrantApplied(event_id=event.id, week=state.week, amount=int(choice.effect.grant_money)))
    draft.messages.append(f"{event.title}: {choice.label}.")
    return draft.done()
