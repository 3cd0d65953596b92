from __future__ import annotations

from dataclasses import dataclass

from jam.application.services.balance_tables import DIE_TIERS, WORST_DIE_FACES
from jam.application.services.seed_policy import RandomSource, roll_between
from jam.domain.models.dice import SKILLS, DiceResult, DiceTable
from jam.domain.models.stats import STAT_MAX, clamp_stat


@dataclass(frozen=True)
class DieStep:
    threshold: float
    faces: int


@dataclass(frozen=True)
class DieProgress:
    current_faces: int
    next_faces: int | None
    floor: float
    goal: float
    fraction: float


def faces_for(stat: float) -> int:
    value = clamp_stat(stat)
    for threshold, faces in DIE_TIERS:
        if value >= threshold:
            return faces
    return WORST_DIE_FACES


def roll_die(faces: int, rng: RandomSource) -> int:
    return roll_between(rng, 1, max(1, int(faces)))


def resolve_check(skill: str, stat: float, rng: RandomSource) -> DiceResult:
    if skill not in SKILLS:
        raise ValueError(f"Unknown skill: {skill}")
    faces = faces_for(stat)
    return DiceResult(faces=faces, value=roll_die(faces, rng))


def record_check(table: DiceTable, skill: str, result: DiceResult) -> DiceTable:
    """Store the week's result for a skill; a newer roll replaces the older one."""

    return table.record(skill, result)


def next_die_info(stat: float) -> DieStep | None:
    value = clamp_stat(stat)
    for threshold, faces in reversed(DIE_TIERS):
        if value < threshold:
            return DieStep(threshold=threshold, faces=faces)
    return None


def die_progress(stat: float) -> DieProgress:
    value = clamp_stat(stat)
    current = faces_for(value)
    upcoming = next_die_info(value)
    if upcoming is None:
        best_threshold = DIE_TIERS[0][0]
        return DieProgress(current_faces=current, next_faces=None, floor=best_threshold, goal=STAT_MAX, fraction=1.0)

    floor = 0.0
    for threshold, _ in DIE_TIERS:
        if value >= threshold:
            floor = threshold
            break
    span = upcoming.threshold - floor
    fraction = 0.0 if span <= 0 else max(0.0, min(1.0, (value - floor) / span))
    return DieProgress(
        current_faces=current,
        next_faces=upcoming.faces,
        floor=floor,
        goal=upcoming.threshold,
        fraction=fraction,
    )
