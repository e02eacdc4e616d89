"""Demand and lead-time distributions sampled from the deterministic PRG."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
import warnings

from .prng import LCG_MODULUS, LinearCongruentialGenerator, round_half_up


class DistributionFamily(str, Enum):
    NORMAL = "normal"
    TRIANGULAR = "triangular"
    UNIFORM = "uniform"
    POISSON = "poisson"
    # Unrecognised names are sampled as normal(param1, param2).
    UNKNOWN_AS_NORMAL = "unknown"


_FAMILY_ALIASES = {
    "normal": DistributionFamily.NORMAL,
    "gaussian": DistributionFamily.NORMAL,
    "norm": DistributionFamily.NORMAL,
    "triangular": DistributionFamily.TRIANGULAR,
    "triangle": DistributionFamily.TRIANGULAR,
    "tri": DistributionFamily.TRIANGULAR,
    "uniform": DistributionFamily.UNIFORM,
    "unif": DistributionFamily.UNIFORM,
    "poisson": DistributionFamily.POISSON,
    "pois": DistributionFamily.POISSON,
}

_MIN_UNIFORM = 1.0 / LCG_MODULUS


def resolve_family(name: str | DistributionFamily | None) -> DistributionFamily:
    if isinstance(name, DistributionFamily):
        return name
    if name is None:
        return DistributionFamily.NORMAL
    normalized = str(name).strip().lower()
    return _FAMILY_ALIASES.get(normalized, DistributionFamily.UNKNOWN_AS_NORMAL)


@dataclass(frozen=True)
class DistributionSpec:
    """Distribution family plus up to three positional parameters.

    normal=(mean, stddev), triangular=(min, mode, max), uniform=(min, max),
    poisson=(lambda). Parameters are taken as given; plausibility is the
    caller's concern.
    """

    family: DistributionFamily | str
    param1: float
    param2: float = 0.0
    param3: float = 0.0
    source_name: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        raw = self.family
        resolved = resolve_family(raw)
        if resolved is DistributionFamily.UNKNOWN_AS_NORMAL:
            warnings.warn(
                f"Unknown distribution family {raw!r}; sampling as normal.",
                stacklevel=3,
            )
        if self.source_name is None and not isinstance(raw, DistributionFamily):
            object.__setattr__(self, "source_name", raw)
        object.__setattr__(self, "family", resolved)
        object.__setattr__(self, "param1", float(self.param1))
        object.__setattr__(self, "param2", float(self.param2 or 0.0))
        object.__setattr__(self, "param3", float(self.param3 or 0.0))

    @property
    def name(self) -> str:
        if self.source_name is not None:
            return self.source_name
        return self.family.value

    @property
    def mean(self) -> float:
        family = self.family
        if family in (DistributionFamily.NORMAL, DistributionFamily.UNKNOWN_AS_NORMAL):
            return self.param1
        if family is DistributionFamily.TRIANGULAR:
            return (self.param1 + self.param2 + self.param3) / 3.0
        if family is DistributionFamily.UNIFORM:
            return (self.param1 + self.param2) / 2.0
        if family is DistributionFamily.POISSON:
            return self.param1
        raise AssertionError(f"Unhandled distribution family: {family}")

    @property
    def std(self) -> float:
        family = self.family
        if family in (DistributionFamily.NORMAL, DistributionFamily.UNKNOWN_AS_NORMAL):
            return self.param2
        if family is DistributionFamily.TRIANGULAR:
            a, b, c = self.param1, self.param2, self.param3
            variance = (a * a + b * b + c * c - a * b - a * c - b * c) / 18.0
            return math.sqrt(max(variance, 0.0))
        if family is DistributionFamily.UNIFORM:
            return abs(self.param2 - self.param1) / math.sqrt(12.0)
        if family is DistributionFamily.POISSON:
            return math.sqrt(max(self.param1, 0.0))
        raise AssertionError(f"Unhandled distribution family: {family}")


def standard_normal(rng: LinearCongruentialGenerator) -> float:
    """Box-Muller transform, cosine branch."""
    u1 = rng.next()
    u2 = rng.next()
    if u1 <= 0.0:
        u1 = _MIN_UNIFORM
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def _sample_normal(mean: float, std: float, rng: LinearCongruentialGenerator) -> int:
    return max(0, round_half_up(mean + standard_normal(rng) * std))


def _sample_triangular(
    low: float, mode: float, high: float, rng: LinearCongruentialGenerator
) -> int:
    u = rng.next()
    span = high - low
    if span == 0:
        return max(0, round_half_up(low))
    split = (mode - low) / span
    if u < split:
        value = low + math.sqrt(u * span * (mode - low))
    else:
        value = high - math.sqrt((1.0 - u) * span * (high - mode))
    return max(0, round_half_up(value))


def _sample_uniform(low: float, high: float, rng: LinearCongruentialGenerator) -> int:
    return max(0, round_half_up(low + rng.next() * (high - low)))


def _sample_poisson(lam: float, rng: LinearCongruentialGenerator) -> int:
    threshold = math.exp(-lam)
    count = 0
    product = 1.0
    while True:
        count += 1
        product *= rng.next()
        if product <= threshold:
            break
    return count - 1


def sample(spec: DistributionSpec, rng: LinearCongruentialGenerator) -> int:
    """Draw one non-negative integer value from ``spec``."""
    family = spec.family
    if family is DistributionFamily.NORMAL:
        return _sample_normal(spec.param1, spec.param2, rng)
    if family is DistributionFamily.TRIANGULAR:
        return _sample_triangular(spec.param1, spec.param2, spec.param3, rng)
    if family is DistributionFamily.UNIFORM:
        return _sample_uniform(spec.param1, spec.param2, rng)
    if family is DistributionFamily.POISSON:
        return _sample_poisson(spec.param1, rng)
    if family is DistributionFamily.UNKNOWN_AS_NORMAL:
        return _sample_normal(spec.param1, spec.param2, rng)
    raise AssertionError(f"Unhandled distribution family: {family}")
