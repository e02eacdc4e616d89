"""Day-stepped simulation of an (s, S) policy."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import statistics

from .distributions import DistributionSpec, sample
from .prng import (
    PURPOSE_DEMAND,
    PURPOSE_LEAD_TIME,
    LinearCongruentialGenerator,
    derive_seed,
)


@dataclass(frozen=True)
class SimulationConfig:
    horizon_days: int = 365
    replications: int = 30
    seed: int = 42
    target_service_level: float = 95.0
    ordering_cost: float = 100.0
    holding_cost_per_unit_day: float = 0.5

    def __post_init__(self) -> None:
        if self.horizon_days <= 0:
            raise ValueError("horizon_days must be positive.")
        if self.replications <= 0:
            raise ValueError("replications must be positive.")
        if not 0.0 <= self.target_service_level <= 100.0:
            raise ValueError("target_service_level must be between 0 and 100.")
        if self.ordering_cost < 0 or self.holding_cost_per_unit_day < 0:
            raise ValueError("Cost inputs must be non-negative.")


@dataclass(frozen=True)
class SampleStatistics:
    mean: float
    minimum: float
    maximum: float
    std: float

    @classmethod
    def from_values(cls, values: Sequence[float]) -> "SampleStatistics | None":
        if not values:
            return None
        return cls(
            mean=statistics.fmean(values),
            minimum=min(values),
            maximum=max(values),
            std=statistics.pstdev(values),
        )


@dataclass(frozen=True)
class SimulationOutcome:
    replication: int
    total_cost: float
    holding_cost: float
    ordering_cost: float
    fill_rate: float
    service_level_csl: float
    avg_inventory: float
    total_demand: int
    stockouts: int
    order_count: int
    demand_samples: tuple[int, ...]
    lead_time_samples: tuple[int, ...]

    @property
    def demand_statistics(self) -> SampleStatistics | None:
        return SampleStatistics.from_values(self.demand_samples)

    @property
    def lead_time_statistics(self) -> SampleStatistics | None:
        return SampleStatistics.from_values(self.lead_time_samples)


def simulate_policy(
    s: int,
    big_s: int,
    *,
    demand: DistributionSpec,
    lead_time: DistributionSpec,
    config: SimulationConfig,
    replication: int,
) -> SimulationOutcome:
    """Run one replication of the (s, S) policy over ``config.horizon_days``.

    Inventory starts at S. Replenishment is instantaneous: the sampled lead
    time is recorded but the order lands the same day.
    """
    horizon = config.horizon_days
    inventory = big_s
    stockouts = 0
    total_demand = 0
    inventory_sum = 0
    order_count = 0
    demand_samples: list[int] = []
    lead_time_samples: list[int] = []

    for day in range(horizon):
        demand_rng = LinearCongruentialGenerator(
            derive_seed(config.seed, replication, day, PURPOSE_DEMAND)
        )
        day_demand = sample(demand, demand_rng)
        demand_samples.append(day_demand)
        total_demand += day_demand

        if inventory < day_demand:
            stockouts += day_demand - inventory
            inventory = 0
        else:
            inventory -= day_demand

        if inventory <= s:
            lead_time_rng = LinearCongruentialGenerator(
                derive_seed(config.seed, replication, day, PURPOSE_LEAD_TIME)
            )
            lead_time_samples.append(max(1, sample(lead_time, lead_time_rng)))
            order_count += 1
            inventory = big_s

        inventory_sum += inventory

    holding_cost = inventory_sum * config.holding_cost_per_unit_day
    ordering_cost = order_count * config.ordering_cost
    if total_demand > 0:
        fill_rate = (total_demand - stockouts) / total_demand * 100.0
    else:
        fill_rate = 100.0
    # Day-count proxy: stockout units are capped at the horizon length.
    csl = (horizon - min(stockouts, horizon)) / horizon * 100.0

    return SimulationOutcome(
        replication=replication,
        total_cost=holding_cost + ordering_cost,
        holding_cost=holding_cost,
        ordering_cost=ordering_cost,
        fill_rate=fill_rate,
        service_level_csl=csl,
        avg_inventory=inventory_sum / horizon,
        total_demand=total_demand,
        stockouts=stockouts,
        order_count=order_count,
        demand_samples=tuple(demand_samples),
        lead_time_samples=tuple(lead_time_samples),
    )
