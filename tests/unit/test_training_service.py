import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from jam.application.services.dice_service import faces_for
from jam.application.services.training_service import apply_training
from jam.domain.models.stats import PerformerStats
from jam.domain.models.week_plan import WeekPlan


class TrainingServiceTests(unittest.TestCase):
    def test_seven_writing_days_follow_diminishing_curve(self) -> None:
        stats = PerformerStats()
        plan = WeekPlan()
        for _ in range(7):
            outcome = apply_training("write", stats, plan)
            stats, plan = outcome.stats, outcome.plan

        expected_gain = sum(0.15 * 0.85 ** (k - 1) for k in range(1, 8))
        self.assertAlmostEqual(2.0 + expected_gain, stats.writing, places=9)
        self.assertEqual(2.0, stats.vocals)
        self.assertEqual(2.0, stats.stage)
        self.assertEqual(7, plan.days_used)
        self.assertEqual(0, plan.days_remaining)
        self.assertEqual(20, faces_for(stats.writing))

    def test_ordinal_counts_per_activity(self) -> None:
        plan = WeekPlan()
        stats = PerformerStats()
        first = apply_training("write", stats, plan)
        other = apply_training("practice", first.stats, first.plan)
        second = apply_training("write", other.stats, other.plan)

        self.assertEqual(1, other.nth)
        self.assertEqual(2, second.nth)
        self.assertAlmostEqual(0.1275, second.delta)
        self.assertEqual("writing", second.stat_name)
        self.assertEqual("vocals", other.stat_name)

    def test_triad_uses_stat_before_gain(self) -> None:
        outcome = apply_training("perform", PerformerStats(stage=4.0), WeekPlan())
        entry = outcome.plan.entries[-1]
        self.assertAlmostEqual(1.5, entry.triad)
        self.assertEqual("perform", entry.activity)

    def test_gain_is_clamped_at_stat_max(self) -> None:
        outcome = apply_training("practice", PerformerStats(vocals=9.95), WeekPlan())
        self.assertEqual(10.0, outcome.stats.vocals)
        self.assertAlmostEqual(0.05, outcome.plan.entries[-1].gain_for("vocals"))
        self.assertAlmostEqual(0.15, outcome.delta)

    def test_unknown_activity_raises(self) -> None:
        with self.assertRaises(ValueError):
            apply_training("gig", PerformerStats(), WeekPlan())


if __name__ == "__main__":
    unittest.main()
