import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from jam.application.services.scheduler import BlockingScheduler, ImmediateScheduler, ManualScheduler


class SchedulerTests(unittest.TestCase):
    def test_immediate_scheduler_runs_callback_now(self) -> None:
        seen = []
        ImmediateScheduler().schedule_after(5.0, lambda: seen.append("done"))
        self.assertEqual(["done"], seen)

    def test_manual_scheduler_fires_in_due_order(self) -> None:
        scheduler = ManualScheduler()
        seen = []
        scheduler.schedule_after(2.0, lambda: seen.append("slow"))
        scheduler.schedule_after(1.0, lambda: seen.append("fast"))
        scheduler.schedule_after(1.0, lambda: seen.append("fast-2"))

        self.assertEqual(0, scheduler.advance(0.5))
        self.assertEqual(3, scheduler.pending)
        self.assertEqual(2, scheduler.advance(0.5))
        self.assertEqual(["fast", "fast-2"], seen)
        self.assertEqual(1, scheduler.advance(5))
        self.assertEqual(0, scheduler.pending)

    def test_blocking_scheduler_sleeps_then_calls_back(self) -> None:
        slept = []
        seen = []
        scheduler = BlockingScheduler(sleep=slept.append)

        scheduler.schedule_after(2.5, lambda: seen.append("revealed"))
        scheduler.schedule_after(0, lambda: seen.append("instant"))

        self.assertEqual([2.5], slept)
        self.assertEqual(["revealed", "instant"], seen)


if __name__ == "__main__":
    unittest.main()
