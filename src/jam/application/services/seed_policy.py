from __future__ import annotations

import hashlib
import json
import math
import random
from typing import Any, Mapping, Protocol


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        ...


def _canonical(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _canonical(val) for key, val in sorted(value.items(), key=lambda item: str(item[0]))}
    if isinstance(value, (list, tuple)):
        return [_canonical(item) for item in value]
    if isinstance(value, (set, frozenset)):
        normalized = [_canonical(item) for item in value]
        return sorted(normalized, key=lambda item: json.dumps(item, sort_keys=True, separators=(",", ":")))
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("Seed context contains non-finite float value.")
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def derive_seed(namespace: str, context: Mapping[str, Any]) -> int:
    payload = {"namespace": str(namespace), "context": _canonical(context)}
    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    digest = hashlib.sha256(serialized.encode("utf-8")).hexdigest()
    return int(digest, 16) % (2**32)


def derive_rng(namespace: str, context: Mapping[str, Any]) -> random.Random:
    return random.Random(derive_seed(namespace, context))


def roll_between(rng: RandomSource, low: int, high: int) -> int:
    lo, hi = int(low), int(high)
    if lo > hi:
        lo, hi = hi, lo
    return int(rng.randint(lo, hi))
