from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Venue:
    key: str
    name: str
    cost: int
    break_even: float
    payout_per_point: float
    fan_multiplier: float
    variance: int
    fan_requirement: int = 0
    tip_floor: int | None = None
    description: str = ""

    @property
    def is_no_risk(self) -> bool:
        return self.cost <= 0

    def is_accessible(self, fans: int) -> bool:
        return int(fans) >= int(self.fan_requirement)
