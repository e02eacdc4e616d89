"""Deterministic pseudo-random generator and seed derivation."""

from __future__ import annotations

import math

# Reproducing a run requires these exact constants.
LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280

REPLICATION_SEED_STRIDE = 10000
LEAD_TIME_SEED_OFFSET = 50000

PURPOSE_DEMAND = "demand"
PURPOSE_LEAD_TIME = "lead_time"


class LinearCongruentialGenerator:
    """Uniform stream from ``state = (state * a + c) mod m``."""

    __slots__ = ("state",)

    def __init__(self, seed: int) -> None:
        self.state = int(seed)

    def next(self) -> float:
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def randrange(self, n: int) -> int:
        if n <= 0:
            raise ValueError("randrange requires a positive bound.")
        return int(self.next() * n)


def derive_seed(
    base_seed: int, replication: int, day: int, purpose: str = PURPOSE_DEMAND
) -> int:
    seed = base_seed + replication * REPLICATION_SEED_STRIDE + day
    if purpose == PURPOSE_DEMAND:
        return seed
    if purpose == PURPOSE_LEAD_TIME:
        return seed + LEAD_TIME_SEED_OFFSET
    raise ValueError(f"Unknown seed purpose: {purpose!r}.")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return int(math.floor(value + 0.5))
