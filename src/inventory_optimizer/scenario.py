"""Portfolio-level orchestration of (s, S) policy optimization."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import Executor, ProcessPoolExecutor
from dataclasses import dataclass, field
import logging
import statistics

from .breakdown import IterationRecord, build_replication_detail, summarize_iteration
from .distributions import DistributionFamily, DistributionSpec
from .optimization import GenerationRecord, OptimizerConfig, differential_evolution
from .prng import round_half_up
from .replications import PolicyObjective, ReplicationSummary, run_replications
from .service_levels import SafetyStockCalculation, reorder_point, safety_stock_components
from .simulation import SampleStatistics, SimulationConfig, SimulationOutcome

logger = logging.getLogger(__name__)

DEFAULT_DEMAND = DistributionSpec(DistributionFamily.NORMAL, 100.0, 20.0)
DEFAULT_LEAD_TIME = DistributionSpec(DistributionFamily.NORMAL, 2.0, 0.5)


@dataclass(frozen=True)
class PolicyRow:
    location_id: str
    product_id: str
    initial_s: int = 200
    initial_big_s: int = 500


@dataclass(frozen=True)
class ScenarioInputs:
    """Everything one optimization run needs, keyed the way rows arrive."""

    policies: Sequence[PolicyRow]
    demand: Mapping[str, DistributionSpec] = field(default_factory=dict)
    lead_times: Mapping[tuple[str, str], DistributionSpec] = field(
        default_factory=dict
    )
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)

    def demand_for(self, product_id: str) -> DistributionSpec:
        return self.demand.get(product_id, DEFAULT_DEMAND)

    def lead_time_for(self, location_id: str, product_id: str) -> DistributionSpec:
        return self.lead_times.get((location_id, product_id), DEFAULT_LEAD_TIME)


@dataclass(frozen=True)
class ReplicationRecord:
    replication: int
    location_id: str
    product_id: str
    s: int
    big_s: int
    safety_stock: int
    outcome: SimulationOutcome

    @property
    def total_cost(self) -> float:
        return self.outcome.total_cost

    @property
    def fill_rate(self) -> float:
        return self.outcome.fill_rate

    @property
    def csl(self) -> float:
        return self.outcome.service_level_csl

    @property
    def avg_inventory(self) -> float:
        return self.outcome.avg_inventory


@dataclass(frozen=True)
class PolicyOptimizationResult:
    location_id: str
    product_id: str
    best_s: int
    best_big_s: int
    best_cost: float
    safety_stock: int
    reorder_point: float
    safety_stock_calculation: SafetyStockCalculation
    avg_inventory: SampleStatistics
    bounds: tuple[tuple[float, float], ...]
    evaluations: int
    history: tuple[GenerationRecord, ...]
    iterations: tuple[IterationRecord, ...]
    replications: tuple[ReplicationRecord, ...]


@dataclass(frozen=True)
class ScenarioKPIs:
    total_cost: float
    avg_fill_rate: float
    avg_csl: float


@dataclass(frozen=True)
class ScenarioResult:
    results: tuple[PolicyOptimizationResult, ...]
    replications: tuple[ReplicationRecord, ...]
    iterations: tuple[IterationRecord, ...]
    kpis: ScenarioKPIs


def search_bounds(
    initial_s: int, initial_big_s: int, config: OptimizerConfig | None = None
) -> tuple[tuple[float, float], tuple[float, float]]:
    """Search box around a seed policy, floored at small positive minimums."""
    config = config or OptimizerConfig()
    return (
        (
            float(max(config.s_floor, initial_s - config.s_margin)),
            float(initial_s + config.s_margin),
        ),
        (
            float(max(config.big_s_floor, initial_big_s - config.big_s_margin)),
            float(initial_big_s + config.big_s_margin),
        ),
    )


def compute_kpis(records: Iterable[ReplicationRecord]) -> ScenarioKPIs:
    records = list(records)
    if not records:
        return ScenarioKPIs(total_cost=0.0, avg_fill_rate=0.0, avg_csl=0.0)
    return ScenarioKPIs(
        total_cost=statistics.fmean(record.total_cost for record in records),
        avg_fill_rate=statistics.fmean(record.fill_rate for record in records),
        avg_csl=statistics.fmean(record.csl for record in records),
    )


def _detailed_iterations(
    history: Sequence[GenerationRecord],
    *,
    row: PolicyRow,
    inputs: ScenarioInputs,
    demand: DistributionSpec,
    lead_time: DistributionSpec,
    safety: SafetyStockCalculation,
    executor: Executor | None,
) -> list[IterationRecord]:
    cache: dict[tuple[int, int], ReplicationSummary] = {}
    iterations: list[IterationRecord] = []
    for record in history:
        s, big_s = (round_half_up(value) for value in record.best_candidate)
        summary = cache.get((s, big_s))
        if summary is None:
            summary = run_replications(
                s,
                big_s,
                demand=demand,
                lead_time=lead_time,
                config=inputs.simulation,
                executor=executor,
            )
            cache[(s, big_s)] = summary
        details = [
            build_replication_detail(
                outcome,
                s=s,
                big_s=big_s,
                demand=demand,
                lead_time=lead_time,
                config=inputs.simulation,
                safety_stock=safety,
            )
            for outcome in summary.outcomes
        ]
        iterations.append(
            summarize_iteration(
                details,
                iteration=record.generation,
                location_id=row.location_id,
                product_id=row.product_id,
                s=s,
                big_s=big_s,
                safety_stock=safety.result,
            )
        )
    return iterations


def optimize_policy(
    row: PolicyRow,
    inputs: ScenarioInputs,
    *,
    executor: Executor | None = None,
    capture_iteration_details: bool = True,
) -> PolicyOptimizationResult:
    """Optimize one (location, product) policy and re-run the winner in detail."""
    demand = inputs.demand_for(row.product_id)
    lead_time = inputs.lead_time_for(row.location_id, row.product_id)
    simulation = inputs.simulation
    optimizer = inputs.optimizer

    safety = safety_stock_components(
        demand.mean,
        demand.std,
        lead_time.mean,
        lead_time.std,
        simulation.target_service_level,
    )
    bounds = search_bounds(row.initial_s, row.initial_big_s, optimizer)

    logger.info(
        "Optimizing policy for %s - %s within bounds %s",
        row.location_id,
        row.product_id,
        bounds,
    )
    objective = PolicyObjective(
        demand=demand, lead_time=lead_time, config=simulation, executor=executor
    )
    search = differential_evolution(
        objective,
        bounds,
        population_size=optimizer.population_size,
        max_generations=optimizer.max_generations,
        seed=simulation.seed,
        mutation=optimizer.mutation,
        crossover_probability=optimizer.crossover_probability,
    )
    best_s, best_big_s = (round_half_up(value) for value in search.x)
    logger.info(
        "Best solution for %s - %s: s=%d, S=%d, cost=%.4f",
        row.location_id,
        row.product_id,
        best_s,
        best_big_s,
        search.fun,
    )

    iterations: list[IterationRecord] = []
    if capture_iteration_details:
        iterations = _detailed_iterations(
            search.history,
            row=row,
            inputs=inputs,
            demand=demand,
            lead_time=lead_time,
            safety=safety,
            executor=executor,
        )

    final = run_replications(
        best_s,
        best_big_s,
        demand=demand,
        lead_time=lead_time,
        config=simulation,
        executor=executor,
    )
    records = tuple(
        ReplicationRecord(
            replication=outcome.replication + 1,
            location_id=row.location_id,
            product_id=row.product_id,
            s=best_s,
            big_s=best_big_s,
            safety_stock=safety.result,
            outcome=outcome,
        )
        for outcome in final.outcomes
    )

    return PolicyOptimizationResult(
        location_id=row.location_id,
        product_id=row.product_id,
        best_s=best_s,
        best_big_s=best_big_s,
        best_cost=search.fun,
        safety_stock=safety.result,
        reorder_point=reorder_point(demand.mean, lead_time.mean, safety.result),
        safety_stock_calculation=safety,
        avg_inventory=final.avg_inventory_statistics,
        bounds=bounds,
        evaluations=objective.evaluations,
        history=search.history,
        iterations=tuple(iterations),
        replications=records,
    )


def _run_policies(
    inputs: ScenarioInputs,
    *,
    executor: Executor | None,
    capture_iteration_details: bool,
) -> list[PolicyOptimizationResult]:
    return [
        optimize_policy(
            row,
            inputs,
            executor=executor,
            capture_iteration_details=capture_iteration_details,
        )
        for row in inputs.policies
    ]


def run_scenario(
    inputs: ScenarioInputs,
    *,
    max_workers: int | None = None,
    capture_iteration_details: bool = True,
) -> ScenarioResult:
    """Optimize every policy row and aggregate KPIs over the final passes.

    ``max_workers`` greater than one runs replications on a process pool;
    results are identical to the sequential run.
    """
    if max_workers is not None and max_workers <= 0:
        raise ValueError("max_workers must be positive.")
    logger.info(
        "Starting optimization of %d policies with %s",
        len(inputs.policies),
        inputs.simulation,
    )
    if max_workers is not None and max_workers > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            results = _run_policies(
                inputs,
                executor=executor,
                capture_iteration_details=capture_iteration_details,
            )
    else:
        results = _run_policies(
            inputs,
            executor=None,
            capture_iteration_details=capture_iteration_details,
        )

    replications = tuple(
        record for result in results for record in result.replications
    )
    iterations = tuple(
        iteration for result in results for iteration in result.iterations
    )
    return ScenarioResult(
        results=tuple(results),
        replications=replications,
        iterations=iterations,
        kpis=compute_kpis(replications),
    )
