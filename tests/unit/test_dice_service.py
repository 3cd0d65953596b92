import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from jam.application.services.dice_service import (
    die_progress,
    faces_for,
    next_die_info,
    record_check,
    resolve_check,
)
from jam.domain.models.dice import DiceResult, DiceTable


class _ScriptedRng:
    def __init__(self, values) -> None:
        self.values = list(values)
        self.calls = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return self.values.pop(0)


class DiceServiceTests(unittest.TestCase):
    def test_faces_follow_stat_tiers(self) -> None:
        self.assertEqual(20, faces_for(2.0))
        self.assertEqual(20, faces_for(4.99))
        self.assertEqual(12, faces_for(5.0))
        self.assertEqual(10, faces_for(7.0))
        self.assertEqual(8, faces_for(9.0))
        self.assertEqual(8, faces_for(9.49))
        self.assertEqual(6, faces_for(9.5))
        self.assertEqual(6, faces_for(42))

    def test_next_die_info_points_at_next_tier(self) -> None:
        step = next_die_info(2.0)
        self.assertEqual(12, step.faces)
        self.assertEqual(5.0, step.threshold)
        self.assertEqual(8, next_die_info(7.5).faces)
        self.assertIsNone(next_die_info(9.6))

    def test_die_progress_reports_fraction_within_tier(self) -> None:
        progress = die_progress(6.0)
        self.assertEqual(12, progress.current_faces)
        self.assertEqual(10, progress.next_faces)
        self.assertAlmostEqual(0.5, progress.fraction)

        start = die_progress(2.0)
        self.assertEqual(0.0, start.floor)
        self.assertAlmostEqual(0.4, start.fraction)

        top = die_progress(10.0)
        self.assertIsNone(top.next_faces)
        self.assertEqual(1.0, top.fraction)

    def test_resolve_check_rolls_die_for_stat(self) -> None:
        rng = _ScriptedRng([3])
        result = resolve_check("write", 7.2, rng)
        self.assertEqual([(1, 10)], rng.calls)
        self.assertEqual(DiceResult(faces=10, value=3), result)
        self.assertAlmostEqual(0.8, result.quality)

    def test_resolve_check_rejects_unknown_skill(self) -> None:
        with self.assertRaises(ValueError):
            resolve_check("dance", 2.0, _ScriptedRng([1]))

    def test_newer_roll_replaces_older_one(self) -> None:
        table = record_check(DiceTable(), "sing", DiceResult(faces=20, value=2))
        table = record_check(table, "sing", DiceResult(faces=20, value=17))
        self.assertEqual(17, table.sing.value)
        self.assertIsNone(table.write)
        self.assertFalse(table.complete)

    def test_die_quality_rewards_low_rolls(self) -> None:
        self.assertEqual(1.0, DiceResult(faces=20, value=1).quality)
        self.assertAlmostEqual(0.05, DiceResult(faces=20, value=20).quality)
        with self.assertRaises(ValueError):
            DiceResult(faces=6, value=7)


if __name__ == "__main__":
    unittest.main()
