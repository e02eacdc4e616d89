"""Replication runs and the cost objective built on them."""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import Executor
from dataclasses import dataclass
from functools import partial
import math
import statistics

from .distributions import DistributionSpec
from .prng import round_half_up
from .simulation import SampleStatistics, SimulationConfig, SimulationOutcome, simulate_policy

# Ranks above every finite cost regardless of the cost scale.
INVALID_POLICY_COST = math.inf


@dataclass(frozen=True)
class ReplicationSummary:
    s: int
    big_s: int
    outcomes: tuple[SimulationOutcome, ...]

    @property
    def mean_cost(self) -> float:
        return statistics.fmean(outcome.total_cost for outcome in self.outcomes)

    @property
    def mean_fill_rate(self) -> float:
        return statistics.fmean(outcome.fill_rate for outcome in self.outcomes)

    @property
    def mean_csl(self) -> float:
        return statistics.fmean(
            outcome.service_level_csl for outcome in self.outcomes
        )

    @property
    def avg_inventory_statistics(self) -> SampleStatistics:
        stats = SampleStatistics.from_values(
            [outcome.avg_inventory for outcome in self.outcomes]
        )
        if stats is None:
            raise RuntimeError("Replication summary has no outcomes.")
        return stats


def is_valid_policy(s: int, big_s: int) -> bool:
    return big_s > s


def run_replications(
    s: int,
    big_s: int,
    *,
    demand: DistributionSpec,
    lead_time: DistributionSpec,
    config: SimulationConfig,
    executor: Executor | None = None,
) -> ReplicationSummary:
    """Simulate ``config.replications`` independent runs of one policy.

    Each replication seeds its own generators, so mapping the work onto an
    executor returns the same outcomes as the sequential loop.
    """
    run = partial(
        simulate_policy,
        s,
        big_s,
        demand=demand,
        lead_time=lead_time,
        config=config,
    )
    indices = range(config.replications)
    if executor is None:
        outcomes = [run(replication=index) for index in indices]
    else:
        outcomes = list(executor.map(_run_indexed, [run] * len(indices), indices))
    return ReplicationSummary(s=s, big_s=big_s, outcomes=tuple(outcomes))


def _run_indexed(run: partial, replication: int) -> SimulationOutcome:
    return run(replication=replication)


def evaluate_policy(
    s: int,
    big_s: int,
    *,
    demand: DistributionSpec,
    lead_time: DistributionSpec,
    config: SimulationConfig,
    executor: Executor | None = None,
) -> float:
    """Mean total cost across replications, or the penalty when S <= s."""
    if not is_valid_policy(s, big_s):
        return INVALID_POLICY_COST
    return run_replications(
        s,
        big_s,
        demand=demand,
        lead_time=lead_time,
        config=config,
        executor=executor,
    ).mean_cost


class PolicyObjective:
    """Objective over continuous ``(s, S)`` candidates for the optimizer."""

    def __init__(
        self,
        *,
        demand: DistributionSpec,
        lead_time: DistributionSpec,
        config: SimulationConfig,
        executor: Executor | None = None,
    ) -> None:
        self.demand = demand
        self.lead_time = lead_time
        self.config = config
        self.executor = executor
        self.evaluations = 0

    def __call__(self, candidate: Sequence[float]) -> float:
        s, big_s = candidate_to_policy(candidate)
        self.evaluations += 1
        return evaluate_policy(
            s,
            big_s,
            demand=self.demand,
            lead_time=self.lead_time,
            config=self.config,
            executor=self.executor,
        )


def candidate_to_policy(candidate: Sequence[float]) -> tuple[int, int]:
    if len(candidate) != 2:
        raise ValueError("Policy candidates must have exactly two dimensions.")
    return round_half_up(candidate[0]), round_half_up(candidate[1])
