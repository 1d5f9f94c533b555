"""Shared infrastructure: injectable randomness and the event bus."""

from .events import EventBus
from .rng import RNG, RandomSource

__all__ = ["EventBus", "RNG", "RandomSource"]
