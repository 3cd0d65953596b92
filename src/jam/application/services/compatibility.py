from __future__ import annotations

from jam.application.services.balance_tables import (
    COMPAT_BONUS_GOOD,
    RISKY_BIG_BOOST,
    RISKY_BOOST_ODDS,
    RISKY_PENALTY,
)
from jam.application.services.seed_policy import RandomSource, roll_between


# -1 risky, 0 okay, +1 great. Pairs left out of a genre's row rate 0.
COMPATIBILITY_TABLE: dict[str, dict[str, int]] = {
    "Pop": {
        "Love": 1,
        "Heartbreak": 1,
        "Party": 1,
        "Empowerment": 1,
        "Rebellion": -1,
        "Adventure": -1,
        "Nostalgia": 0,
        "Melancholy": 0,
    },
    "Rock": {
        "Rebellion": 1,
        "Freedom": 1,
        "Empowerment": 1,
        "Dreams": -1,
        "Nostalgia": -1,
        "Love": 0,
        "Heartbreak": 0,
        "Party": 0,
        "Melancholy": 0,
    },
    "EDM": {
        "Party": 1,
        "Freedom": 0,
        "Love": -1,
        "Dreams": 0,
        "Adventure": 1,
        "Melancholy": -1,
    },
    "Hip-Hop": {
        "Rebellion": 1,
        "Empowerment": 1,
        "Party": 1,
        "Dreams": -1,
        "Melancholy": -1,
        "Love": 0,
        "Heartbreak": 0,
        "Nostalgia": 0,
    },
    "Jazz": {
        "Love": 1,
        "Melancholy": 1,
        "Nostalgia": 1,
        "Party": -1,
        "Rebellion": -1,
    },
    "Country": {
        "Heartbreak": 1,
        "Love": 1,
        "Adventure": 1,
        "Party": -1,
        "Rebellion": -1,
    },
    "R&B": {
        "Love": 1,
        "Heartbreak": 1,
        "Dreams": 1,
        "Rebellion": -1,
        "Freedom": -1,
    },
    "Metal": {
        "Rebellion": 1,
        "Freedom": 1,
        "Love": -1,
        "Party": -1,
        "Melancholy": 0,
    },
    "Folk": {
        "Nostalgia": 1,
        "Adventure": 1,
        "Dreams": 1,
        "Party": -1,
        "Empowerment": -1,
    },
    "Synthwave": {
        "Nostalgia": 1,
        "Dreams": 1,
        "Party": 1,
        "Empowerment": -1,
        "Heartbreak": -1,
        "Melancholy": 0,
    },
}


def compatibility_rating(genre: str, theme: str) -> int:
    row = COMPATIBILITY_TABLE.get(str(genre), {})
    rating = row.get(str(theme), 0)
    return max(-1, min(1, int(rating)))


def forecast_bonus(genre: str, theme: str) -> int:
    """Expected bonus shown before release; risky pairs report their expected value."""

    rating = compatibility_rating(genre, theme)
    if rating > 0:
        return COMPAT_BONUS_GOOD
    if rating == 0:
        return 0
    chance = 1 / RISKY_BOOST_ODDS
    return round(chance * RISKY_BIG_BOOST - (1 - chance) * RISKY_PENALTY)


def realized_bonus(genre: str, theme: str, rng: RandomSource) -> int:
    """Bonus applied at scoring time. Only risky pairs consume a roll."""

    rating = compatibility_rating(genre, theme)
    if rating > 0:
        return COMPAT_BONUS_GOOD
    if rating == 0:
        return 0
    roll = roll_between(rng, 1, RISKY_BOOST_ODDS)
    return RISKY_BIG_BOOST if roll == 1 else -RISKY_PENALTY


def pair_label(rating: int) -> str:
    if rating > 0:
        return "great combination"
    if rating < 0:
        return "risky combination"
    return "okay combination"
