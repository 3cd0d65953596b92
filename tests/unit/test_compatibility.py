import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from jam.application.services.compatibility import (
    COMPATIBILITY_TABLE,
    compatibility_rating,
    forecast_bonus,
    pair_label,
    realized_bonus,
)
from jam.domain.models.song import GENRES, THEMES


class _ScriptedRng:
    def __init__(self, values) -> None:
        self.values = list(values)
        self.calls = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return self.values.pop(0)


class CompatibilityTests(unittest.TestCase):
    def test_ratings_cover_known_pairs_and_default_to_okay(self) -> None:
        self.assertEqual(1, compatibility_rating("Pop", "Love"))
        self.assertEqual(-1, compatibility_rating("Pop", "Rebellion"))
        self.assertEqual(0, compatibility_rating("Pop", "Freedom"))
        self.assertEqual(0, compatibility_rating("Polka", "Love"))

    def test_table_only_uses_known_genres_and_themes(self) -> None:
        for genre, row in COMPATIBILITY_TABLE.items():
            self.assertIn(genre, GENRES)
            for theme, rating in row.items():
                self.assertIn(theme, THEMES)
                self.assertIn(rating, (-1, 0, 1))

    def test_good_pair_bonus_does_not_roll(self) -> None:
        rng = _ScriptedRng([])
        self.assertEqual(8, realized_bonus("Pop", "Love", rng))
        self.assertEqual(0, realized_bonus("Pop", "Freedom", rng))
        self.assertEqual([], rng.calls)

    def test_risky_pair_big_boost_on_one_in_four(self) -> None:
        rng = _ScriptedRng([1])
        self.assertEqual(12, realized_bonus("Pop", "Rebellion", rng))
        self.assertEqual([(1, 4)], rng.calls)

    def test_risky_pair_penalty_on_other_rolls(self) -> None:
        for roll in (2, 3, 4):
            self.assertEqual(-8, realized_bonus("Pop", "Rebellion", _ScriptedRng([roll])))

    def test_forecast_reports_expected_value(self) -> None:
        self.assertEqual(8, forecast_bonus("Pop", "Love"))
        self.assertEqual(0, forecast_bonus("Pop", "Freedom"))
        self.assertEqual(-3, forecast_bonus("Pop", "Rebellion"))

    def test_pair_labels(self) -> None:
        self.assertEqual("great combination", pair_label(1))
        self.assertEqual("okay combination", pair_label(0))
        self.assertEqual("risky combination", pair_label(-1))


if __name__ == "__main__":
    unittest.main()
