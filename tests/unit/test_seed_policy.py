import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from jam.application.services.seed_policy import derive_rng, derive_seed, roll_between


class _RecordingRng:
    def __init__(self) -> None:
        self.calls = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return a


class SeedPolicyTests(unittest.TestCase):
    def test_same_context_same_seed(self) -> None:
        context = {"seed": 9, "week": 4, "song": "Glow"}
        self.assertEqual(derive_seed("release.flavour", context), derive_seed("release.flavour", context))

    def test_context_key_order_does_not_change_seed(self) -> None:
        context_a = {"a": 1, "b": {"x": 2, "y": 3}}
        context_b = {"b": {"y": 3, "x": 2}, "a": 1}
        self.assertEqual(derive_seed("season.calendar", context_a), derive_seed("season.calendar", context_b))

    def test_namespace_changes_seed(self) -> None:
        context = {"seed": 10}
        self.assertNotEqual(derive_seed("season.calendar", context), derive_seed("release.flavour", context))

    def test_non_finite_float_in_context_raises(self) -> None:
        with self.assertRaises(ValueError):
            derive_seed("release.flavour", {"score": float("nan")})

    def test_derive_rng_is_deterministic_for_same_context(self) -> None:
        context = {"seed": 12, "week": 4}
        rng_a = derive_rng("release.flavour", context)
        rng_b = derive_rng("release.flavour", context)
        self.assertEqual(rng_a.randint(1, 1000), rng_b.randint(1, 1000))

    def test_roll_between_orders_bounds(self) -> None:
        rng = _RecordingRng()
        self.assertEqual(-3, roll_between(rng, 3, -3))
        self.assertEqual([(-3, 3)], rng.calls)


if __name__ == "__main__":
    unittest.main()
