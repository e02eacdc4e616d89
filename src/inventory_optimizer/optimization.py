"""Differential Evolution search over bounded policy parameters."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
import logging

from .prng import LinearCongruentialGenerator

logger = logging.getLogger(__name__)

Objective = Callable[[Sequence[float]], float]
Bounds = Sequence[tuple[float, float]]


@dataclass(frozen=True)
class OptimizerConfig:
    population_size: int = 15
    max_generations: int = 50
    mutation: float = 0.8
    crossover_probability: float = 0.9
    s_margin: int = 200
    big_s_margin: int = 300
    s_floor: int = 1
    big_s_floor: int = 100

    def __post_init__(self) -> None:
        if self.population_size < 4:
            raise ValueError("population_size must be at least 4.")
        if self.max_generations < 0:
            raise ValueError("max_generations cannot be negative.")
        if not 0.0 <= self.crossover_probability <= 1.0:
            raise ValueError("crossover_probability must be between 0 and 1.")
        if self.s_margin < 0 or self.big_s_margin < 0:
            raise ValueError("Search margins must be non-negative.")


@dataclass(frozen=True)
class GenerationRecord:
    generation: int
    best_cost: float
    best_candidate: tuple[float, ...]


@dataclass(frozen=True)
class DifferentialEvolutionResult:
    x: tuple[float, ...]
    fun: float
    history: tuple[GenerationRecord, ...]
    evaluations: int


def _validate_bounds(bounds: Bounds) -> list[tuple[float, float]]:
    checked = [(float(low), float(high)) for low, high in bounds]
    if not checked:
        raise ValueError("Bounds must be provided.")
    for low, high in checked:
        if low > high:
            raise ValueError(f"Lower bound {low} exceeds upper bound {high}.")
    return checked


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _best_index(fitness: Sequence[float]) -> int:
    return min(range(len(fitness)), key=fitness.__getitem__)


def _permuted_others(
    index: int, size: int, rng: LinearCongruentialGenerator
) -> list[int]:
    others = [other for other in range(size) if other != index]
    for position in range(len(others) - 1, 0, -1):
        swap = rng.randrange(position + 1)
        others[position], others[swap] = others[swap], others[position]
    return others


def differential_evolution(
    objective: Objective,
    bounds: Bounds,
    *,
    population_size: int = 15,
    max_generations: int = 100,
    seed: int = 42,
    mutation: float = 0.8,
    crossover_probability: float = 0.9,
) -> DifferentialEvolutionResult:
    """Minimise ``objective`` within ``bounds`` using DE/rand/1/bin.

    A single seeded generator drives initialisation, partner selection and
    crossover. Trials replace their parent only on a strictly lower cost, so
    the best cost never increases between generations. The search always
    returns the best member found once ``max_generations`` is spent.
    """
    if population_size < 4:
        raise ValueError("population_size must be at least 4.")
    if max_generations < 0:
        raise ValueError("max_generations cannot be negative.")
    checked_bounds = _validate_bounds(bounds)
    dimensions = len(checked_bounds)
    rng = LinearCongruentialGenerator(seed)

    population = [
        [low + rng.next() * (high - low) for low, high in checked_bounds]
        for _ in range(population_size)
    ]
    fitness = [objective(member) for member in population]
    evaluations = population_size
    history: list[GenerationRecord] = []

    for generation in range(1, max_generations + 1):
        next_population: list[list[float]] = []
        for index in range(population_size):
            a, b, c = _permuted_others(index, population_size, rng)[:3]
            mutant = [
                _clamp(
                    population[a][dim]
                    + mutation * (population[b][dim] - population[c][dim]),
                    *checked_bounds[dim],
                )
                for dim in range(dimensions)
            ]
            forced = rng.randrange(dimensions)
            trial = [
                mutant[dim]
                if rng.next() < crossover_probability or dim == forced
                else population[index][dim]
                for dim in range(dimensions)
            ]
            trial_fitness = objective(trial)
            evaluations += 1
            if trial_fitness < fitness[index]:
                next_population.append(trial)
                fitness[index] = trial_fitness
            else:
                next_population.append(population[index])
        population = next_population

        best = _best_index(fitness)
        history.append(
            GenerationRecord(
                generation=generation,
                best_cost=fitness[best],
                best_candidate=tuple(population[best]),
            )
        )
        logger.debug(
            "Generation %d best cost %.4f at %s",
            generation,
            fitness[best],
            population[best],
        )

    best = _best_index(fitness)
    return DifferentialEvolutionResult(
        x=tuple(population[best]),
        fun=fitness[best],
        history=tuple(history),
        evaluations=evaluations,
    )
