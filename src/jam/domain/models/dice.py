from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator


SKILLS: tuple[str, ...] = ("sing", "write", "perform")

ACTIVITY_SKILL = {
    "practice": "sing",
    "write": "write",
    "perform": "perform",
}


@dataclass(frozen=True)
class DiceResult:
    """One skill check. Lower values are better."""

    faces: int
    value: int

    def __post_init__(self) -> None:
        if int(self.faces) < 1:
            raise ValueError("A die needs at least one face")
        if not 1 <= int(self.value) <= int(self.faces):
            raise ValueError(f"Die value {self.value} is outside 1..{self.faces}")

    @property
    def quality(self) -> float:
        return (self.faces + 1 - self.value) / self.faces


@dataclass(frozen=True)
class DiceTable:
    sing: DiceResult | None = None
    write: DiceResult | None = None
    perform: DiceResult | None = None

    def get(self, skill: str) -> DiceResult | None:
        if skill not in SKILLS:
            raise ValueError(f"Unknown skill: {skill}")
        return getattr(self, skill)

    def record(self, skill: str, result: DiceResult) -> "DiceTable":
        if skill not in SKILLS:
            raise ValueError(f"Unknown skill: {skill}")
        return replace(self, **{skill: result})

    def items(self) -> Iterator[tuple[str, DiceResult | None]]:
        for skill in SKILLS:
            yield skill, getattr(self, skill)

    @property
    def complete(self) -> bool:
        return all(result is not None for _, result in self.items())

    @property
    def is_empty(self) -> bool:
        return all(result is None for _, result in self.items())
