import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from jam.application.services.release_feedback import (
    FAN_COMMENT_COUNT,
    build_feedback,
    fan_comments,
    flavour_rng,
    pick_review,
)
from jam.domain.models.release import ReleaseRecord
from jam.domain.models.stats import PerformerStats
from jam.domain.models.week_plan import DayEntry, WeekPlan


class _ScriptedRng:
    def __init__(self, values) -> None:
        self.values = list(values)

    def randint(self, a: int, b: int) -> int:
        return self.values.pop(0)


def _record(grade: str = "A", chart_pos: int = 20, score: float = 85) -> ReleaseRecord:
    return ReleaseRecord(
        week=4,
        release_week=4,
        song_name="Glow",
        genre="Pop",
        theme="Love",
        venue="Busking",
        score=score,
        grade=grade,
        chart_pos=chart_pos,
        money_gain=5,
        fans_gain=10,
    )


def _plan(*activities: str) -> WeekPlan:
    plan = WeekPlan()
    for activity in activities:
        plan = plan.append(DayEntry(activity=activity))
    return plan


class ReleaseFeedbackTests(unittest.TestCase):
    def test_all_writing_week_flags_melody_and_stage(self) -> None:
        tips = build_feedback(
            stats=PerformerStats(),
            plan=_plan(*["write"] * 7),
            genre="Pop",
            theme="Love",
            previous=None,
        )
        self.assertEqual(
            [
                "Improve singing & spend more days composing (melody).",
                "Improve stage presence & spend more days rehearsing.",
                "Dedicate more time to performance this week.",
            ],
            tips,
        )

    def test_repeating_last_concept_is_called_out(self) -> None:
        tips = build_feedback(
            stats=PerformerStats(),
            plan=_plan("practice", "practice", "write", "write", "write", "perform", "perform"),
            genre="Pop",
            theme="Love",
            previous=_record(),
        )
        self.assertIn("Too similar to last release - try varying genre or theme.", tips)
        self.assertIn("Improve singing & spend more days composing (melody).", tips)

    def test_pick_review_uses_grade_pool(self) -> None:
        self.assertEqual("A big step up!", pick_review("A", _ScriptedRng([1])))
        self.assertEqual("...", pick_review("Z", _ScriptedRng([])))

    def test_fan_comments_lead_with_top_ten_note(self) -> None:
        comments = fan_comments(_record(chart_pos=5), "Mira", _ScriptedRng([0, 0, 0]))
        self.assertEqual(FAN_COMMENT_COUNT, len(comments))
        self.assertEqual("Top 5! Legends in the making.", comments[0])
        self.assertEqual("On repeat! Glow is unreal.", comments[1])
        self.assertEqual("Chills. Mira absolutely delivered.", comments[2])
        self.assertEqual("Loving the growth each week!", comments[-1])

    def test_fan_comments_without_chart_note(self) -> None:
        comments = fan_comments(_record(grade="D", chart_pos=80, score=30), "", _ScriptedRng([4, 0, 0, 0]))
        self.assertEqual(FAN_COMMENT_COUNT, len(comments))
        self.assertEqual("Proud of the grind - keep going!", comments[0])
        self.assertEqual(len(set(comments[:4])), 4)

    def test_flavour_rng_is_stable_per_release(self) -> None:
        first = flavour_rng(7, 4, "Glow")
        second = flavour_rng(7, 4, "Glow")
        self.assertEqual([first.randint(0, 999) for _ in range(3)], [second.randint(0, 999) for _ in range(3)])


if __name__ == "__main__":
    unittest.main()
