from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence, Tuple, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Minimal randomness capability threaded through every combat roll.

    Anything exposing these three methods can be injected, e.g. a scripted
    stub in tests that returns fixed rolls.
    """

    def random(self) -> float:  # pragma: no cover - Protocol
        ...

    def uniform(self, a: float, b: float) -> float:  # pragma: no cover - Protocol
        ...

    def choice(self, seq: Sequence[T]) -> T:  # pragma: no cover - Protocol
        ...


@dataclass
class RNG:
    """
    Seedable combat RNG backed by a private random.Random.

    Two RNGs built from the same seed produce the same encounter. The draw
    counter and snapshot()/restore() make it possible to replay a fight from
    any point, e.g. when reproducing a reported balance bug.
    """

    seed: Optional[int] = None
    draws: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def random(self) -> float:
        """Next float in [0.0, 1.0); used for every probability roll."""
        self.draws += 1
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        """Float in [a, b]; used for the damage variance band."""
        self.draws += 1
        return self._rng.uniform(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        """Pick one element, e.g. the ability an enemy casts."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        self.draws += 1
        return seq[self._rng.randrange(len(seq))]

    def snapshot(self) -> Tuple[int, Any]:
        return self.draws, self._rng.getstate()

    def restore(self, snapshot: Tuple[int, Any]) -> None:
        self.draws, state = snapshot
        self._rng.setstate(state)
