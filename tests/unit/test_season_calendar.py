import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from jam.application.services.season_calendar import (
    build_season_schedule,
    effect_for_event,
    effects_for_week,
    events_for_week,
    find_event,
    pending_grants,
    performance_effect,
)
from jam.domain.models.calendar import EventResolution


class SeasonCalendarTests(unittest.TestCase):
    def test_same_seed_builds_same_schedule(self) -> None:
        self.assertEqual(build_season_schedule(1234), build_season_schedule(1234))

    def test_schedule_has_fixed_beats_and_one_off_week(self) -> None:
        schedule = build_season_schedule(99)
        ids = {event.id for event in schedule}
        for expected in ("grant-3", "festival-6", "festival-20", "openmic-24", "festival-34", "finalchance-51", "finale-52"):
            self.assertIn(expected, ids)
        off_weeks = [event.week for event in schedule if event.key == "offweek"]
        self.assertEqual(1, len(off_weeks))
        self.assertTrue(16 <= off_weeks[0] <= 27)
        self.assertEqual(sorted(event.week for event in schedule), [event.week for event in schedule])

    def test_off_week_varies_across_seeds(self) -> None:
        weeks = {next(e.week for e in build_season_schedule(seed) if e.key == "offweek") for seed in range(40)}
        self.assertGreater(len(weeks), 1)

    def test_week_three_grant_is_pending_until_paid(self) -> None:
        schedule = build_season_schedule(5)
        pending = pending_grants(schedule, 3, ())
        self.assertEqual(["grant-3"], [event.id for event in pending])
        self.assertEqual(100, pending[0].effect.grant_money)
        self.assertEqual([], pending_grants(schedule, 3, (EventResolution(event_id="grant-3"),)))
        self.assertEqual([], pending_grants(schedule, 4, ()))

    def test_festival_effects_merge_for_week(self) -> None:
        schedule = build_season_schedule(5)
        effect = effects_for_week(schedule, 6, ())
        self.assertAlmostEqual(1.2, effect.fan_mult)
        self.assertAlmostEqual(1.2, effect.payout_mult)
        self.assertTrue(effects_for_week(schedule, 2, ()).is_neutral)

    def test_choice_event_applies_only_chosen_effect(self) -> None:
        schedule = build_season_schedule(5)
        event = find_event(schedule, "openmic-24")
        self.assertTrue(effect_for_event(event, ()).is_neutral)
        hype = effect_for_event(event, (EventResolution(event_id="openmic-24", choice_index=1),))
        self.assertAlmostEqual(1.2, hype.fan_mult)
        tips = effect_for_event(event, (EventResolution(event_id="openmic-24", choice_index=0),))
        self.assertEqual(60, tips.grant_money)

    def test_performance_effect_drops_grant_money(self) -> None:
        schedule = build_season_schedule(5)
        effect = performance_effect(schedule, 3, ())
        self.assertEqual(0, effect.grant_money)
        self.assertTrue(effect.is_neutral)

    def test_events_for_week_and_missing_lookup(self) -> None:
        schedule = build_season_schedule(5)
        self.assertEqual(["finale-52"], [event.id for event in events_for_week(schedule, 52)])
        self.assertIsNone(find_event(schedule, "nope-1"))


if __name__ == "__main__":
    unittest.main()
