from __future__ import annotations

from dataclasses import dataclass


EVENT_KINDS: tuple[str, ...] = ("bonus", "penalty", "choice", "info")


@dataclass(frozen=True)
class EventEffect:
    fan_mult: float = 1.0
    payout_mult: float = 1.0
    grant_money: int = 0

    def merge(self, other: "EventEffect") -> "EventEffect":
        return EventEffect(
            fan_mult=self.fan_mult * other.fan_mult,
            payout_mult=self.payout_mult * other.payout_mult,
            grant_money=self.grant_money + other.grant_money,
        )

    @property
    def is_neutral(self) -> bool:
        return self.fan_mult == 1.0 and self.payout_mult == 1.0 and self.grant_money == 0

    def summary(self) -> str:
        parts: list[str] = []
        if self.fan_mult != 1.0:
            parts.append(f"Fans x{self.fan_mult:.2f}")
        if self.payout_mult != 1.0:
            parts.append(f"Payout x{self.payout_mult:.2f}")
        if self.grant_money:
            parts.append(f"+£{self.grant_money} now")
        return " - ".join(parts)


@dataclass(frozen=True)
class EventChoice:
    label: str
    effect: EventEffect


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    week: int
    key: str
    title: str
    short: str
    details: str
    kind: str
    effect: EventEffect | None = None
    choices: tuple[EventChoice, ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"Unsupported calendar event kind: {self.kind}")


@dataclass(frozen=True)
class EventResolution:
    event_id: str
    choice_index: int | None = None
