from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


STAT_MIN = 0.0
STAT_MAX = 10.0
STARTING_STAT = 2.0

STAT_NAMES: tuple[str, ...] = ("vocals", "writing", "stage")


def clamp_stat(value: float | None) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return STAT_MIN
    if numeric != numeric:
        return STAT_MIN
    return max(STAT_MIN, min(STAT_MAX, numeric))


@dataclass(frozen=True)
class PerformerStats:
    vocals: float = STARTING_STAT
    writing: float = STARTING_STAT
    stage: float = STARTING_STAT

    def __post_init__(self) -> None:
        object.__setattr__(self, "vocals", clamp_stat(self.vocals))
        object.__setattr__(self, "writing", clamp_stat(self.writing))
        object.__setattr__(self, "stage", clamp_stat(self.stage))

    def get(self, stat_name: str) -> float:
        if stat_name not in STAT_NAMES:
            raise ValueError(f"Unknown performer stat: {stat_name}")
        return float(getattr(self, stat_name))

    def with_gains(self, gains: Mapping[str, float]) -> "PerformerStats":
        """Return a copy with each gain added and the result clamped to [0, 10]."""

        values = {name: self.get(name) for name in STAT_NAMES}
        for name, delta in (gains or {}).items():
            if name not in values:
                raise ValueError(f"Unknown performer stat: {name}")
            values[name] = clamp_stat(values[name] + float(delta))
        return PerformerStats(**values)

    def as_dict(self) -> dict[str, float]:
        return {name: self.get(name) for name in STAT_NAMES}


def stats_from_mapping(payload: Mapping[str, Any] | None) -> PerformerStats:
    data = payload or {}

    def _stat(name: str) -> float:
        raw = data.get(name)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            return STARTING_STAT
        return clamp_stat(raw)

    return PerformerStats(
        vocals=_stat("vocals"),
        writing=_stat("writing"),
        stage=_stat("stage"),
    )
