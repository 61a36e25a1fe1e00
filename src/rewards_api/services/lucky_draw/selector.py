"""Roulette-wheel selection over integer prize weights."""

from __future__ import annotations

import random
from typing import Iterable, Iterator, Protocol, Sequence, TypeVar

from .errors import InvalidDistributionError


class RandomSource(Protocol):
    """Anything exposing ``randrange(stop)``; ``random.Random`` qualifies."""

    def randrange(self, stop: int) -> int:  # pragma: no cover - protocol
        ...


class WeightedCandidate(Protocol):
    probability_bp: int


CandidateT = TypeVar("CandidateT", bound=WeightedCandidate)


class FixedRandomSource:
    """Replays a fixed sequence of picks; records each ``stop`` it was asked for."""

    def __init__(self, picks: Iterable[int]) -> None:
        self._picks: Iterator[int] = iter(picks)
        self.calls: list[int] = []

    def randrange(self, stop: int) -> int:
        try:
            pick = next(self._picks)
        except StopIteration as exc:
            raise RuntimeError("Fixed random source exhausted") from exc
        self.calls.append(stop)
        if not 0 <= pick < stop:
            raise ValueError(f"Fixed pick {pick} outside [0, {stop})")
        return pick


def default_random_source() -> RandomSource:
    return random.Random()


def select_weighted(candidates: Sequence[CandidateT], rng: RandomSource) -> CandidateT:
    """Pick the first candidate whose cumulative weight exceeds a uniform draw.

    Candidates must already be in their stable order. Zero-weight entries can
    never be selected; a non-positive total is a configuration error.
    """

    weights = [int(candidate.probability_bp or 0) for candidate in candidates]
    if any(weight < 0 for weight in weights):
        raise InvalidDistributionError("Prize weights must be non-negative")

    total = sum(weights)
    if total <= 0:
        raise InvalidDistributionError("Total prize weight must be positive")

    pick = rng.randrange(total)
    cumulative = 0
    for candidate, weight in zip(candidates, weights):
        cumulative += weight
        if pick < cumulative:
            return candidate

    # randrange(total) always lands below the final bound
    raise InvalidDistributionError(f"Pick {pick} fell outside total weight {total}")


__all__ = [
    "FixedRandomSource",
    "RandomSource",
    "default_random_source",
    "select_weighted",
]
