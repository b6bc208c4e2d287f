from __future__ import annotations

import hashlib
import json
import math
import random
from typing import Any, Iterable, Mapping, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def next(self) -> float:
        """Return a float in [0, 1)."""


class SeededRandomSource:
    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def next(self) -> float:
        return self._rng.random()


class ScriptedRandomSource:
    """Replays a fixed sequence of draws; used to pin probabilistic branches."""

    def __init__(self, values: Iterable[float], *, fallback: float | None = None) -> None:
        self._values = [float(value) for value in values]
        self._index = 0
        self._fallback = fallback

    def next(self) -> float:
        if self._index < len(self._values):
            value = self._values[self._index]
            self._index += 1
            return value
        if self._fallback is not None:
            return float(self._fallback)
        raise IndexError("ScriptedRandomSource exhausted")

    @property
    def consumed(self) -> int:
        return self._index


def chance(rng: RandomSource, probability: float) -> bool:
    return rng.next() < float(probability)


def pick_index(rng: RandomSource, length: int) -> int:
    if length <= 0:
        raise ValueError("Cannot pick from an empty sequence")
    return min(int(math.floor(rng.next() * length)), length - 1)


def pick(rng: RandomSource, options: Sequence[T]) -> T:
    return options[pick_index(rng, len(options))]


def jitter(rng: RandomSource, spread: float) -> float:
    return (rng.next() - 0.5) * float(spread)


def _normalize(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _normalize(val) for key, val in sorted(value.items(), key=lambda item: str(item[0]))}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    if isinstance(value, (set, frozenset)):
        normalized = [_normalize(item) for item in value]
        return sorted(normalized, key=lambda item: json.dumps(item, sort_keys=True, separators=(",", ":")))
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Seed context contains a non-finite float: {value!r}")
    return value


def derive_seed(namespace: str, context: Mapping[str, Any]) -> int:
    payload = {"namespace": str(namespace), "context": _normalize(context)}
    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(serialized.encode("utf-8")).hexdigest()
    return int(digest, 16) % (2**32)


def derive_random_source(namespace: str, context: Mapping[str, Any]) -> SeededRandomSource:
    return SeededRandomSource(derive_seed(namespace, context))
