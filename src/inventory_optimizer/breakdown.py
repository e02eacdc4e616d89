"""Per-replication calculation breakdowns for auditing optimization runs."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import statistics

from .distributions import DistributionSpec
from .service_levels import SafetyStockCalculation, reorder_point
from .simulation import SampleStatistics, SimulationConfig, SimulationOutcome

REORDER_POINT_FORMULA = "Reorder Point = (avg_demand × avg_lead_time) + safety_stock"
HOLDING_COST_FORMULA = "Holding Cost = avg_inventory × holding_cost_rate"
ORDERING_COST_FORMULA = (
    "Ordering Cost = (horizon_demand / order_quantity) × ordering_cost"
)


@dataclass(frozen=True)
class DistributionAnalysis:
    model: str
    mean: float
    std: float
    sampled: SampleStatistics | None


@dataclass(frozen=True)
class ReorderPointCalculation:
    avg_demand_during_lead_time: float
    safety_stock: int
    result: float
    formula: str = REORDER_POINT_FORMULA


@dataclass(frozen=True)
class CostBreakdown:
    """Simulated cost split plus the analytic estimates shown next to it."""

    simulated_holding_cost: float
    simulated_ordering_cost: float
    total_cost: float
    avg_inventory: float
    holding_rate: float
    estimated_holding_cost: float
    horizon_demand: float
    order_quantity: int
    ordering_cost_per_order: float
    estimated_order_count: float
    estimated_ordering_cost: float
    holding_formula: str = HOLDING_COST_FORMULA
    ordering_formula: str = ORDERING_COST_FORMULA


@dataclass(frozen=True)
class PerformanceMetrics:
    achieved_service_level: float
    target_service_level: float
    avg_inventory: float
    fill_rate: float


@dataclass(frozen=True)
class CalculationBreakdown:
    demand: DistributionAnalysis
    lead_time: DistributionAnalysis
    safety_stock: SafetyStockCalculation
    reorder_point: ReorderPointCalculation
    costs: CostBreakdown
    performance: PerformanceMetrics


@dataclass(frozen=True)
class ReplicationDetail:
    replication: int
    s: int
    big_s: int
    outcome: SimulationOutcome
    calculation: CalculationBreakdown


@dataclass(frozen=True)
class IterationRecord:
    iteration: int
    location_id: str
    product_id: str
    s: int
    big_s: int
    safety_stock: int
    avg_cost: float
    avg_fill_rate: float
    avg_csl: float
    replications: tuple[ReplicationDetail, ...] = ()


def analyze_distribution(
    spec: DistributionSpec, samples: Sequence[int]
) -> DistributionAnalysis:
    return DistributionAnalysis(
        model=spec.name,
        mean=spec.mean,
        std=spec.std,
        sampled=SampleStatistics.from_values(samples),
    )


def reorder_point_calculation(
    demand: DistributionSpec, lead_time: DistributionSpec, safety_stock: int
) -> ReorderPointCalculation:
    during_lead_time = demand.mean * lead_time.mean
    return ReorderPointCalculation(
        avg_demand_during_lead_time=during_lead_time,
        safety_stock=safety_stock,
        result=reorder_point(demand.mean, lead_time.mean, safety_stock),
    )


def cost_breakdown(
    outcome: SimulationOutcome,
    *,
    s: int,
    big_s: int,
    demand: DistributionSpec,
    config: SimulationConfig,
) -> CostBreakdown:
    order_quantity = big_s - s
    horizon_demand = demand.mean * config.horizon_days
    estimated_orders = horizon_demand / order_quantity if order_quantity > 0 else 0.0
    return CostBreakdown(
        simulated_holding_cost=outcome.holding_cost,
        simulated_ordering_cost=outcome.ordering_cost,
        total_cost=outcome.total_cost,
        avg_inventory=outcome.avg_inventory,
        holding_rate=config.holding_cost_per_unit_day,
        estimated_holding_cost=outcome.avg_inventory * config.holding_cost_per_unit_day,
        horizon_demand=horizon_demand,
        order_quantity=order_quantity,
        ordering_cost_per_order=config.ordering_cost,
        estimated_order_count=estimated_orders,
        estimated_ordering_cost=estimated_orders * config.ordering_cost,
    )


def build_replication_detail(
    outcome: SimulationOutcome,
    *,
    s: int,
    big_s: int,
    demand: DistributionSpec,
    lead_time: DistributionSpec,
    config: SimulationConfig,
    safety_stock: SafetyStockCalculation,
) -> ReplicationDetail:
    calculation = CalculationBreakdown(
        demand=analyze_distribution(demand, outcome.demand_samples),
        lead_time=analyze_distribution(lead_time, outcome.lead_time_samples),
        safety_stock=safety_stock,
        reorder_point=reorder_point_calculation(demand, lead_time, safety_stock.result),
        costs=cost_breakdown(outcome, s=s, big_s=big_s, demand=demand, config=config),
        performance=PerformanceMetrics(
            achieved_service_level=outcome.service_level_csl / 100.0,
            target_service_level=config.target_service_level / 100.0,
            avg_inventory=outcome.avg_inventory,
            fill_rate=outcome.fill_rate,
        ),
    )
    return ReplicationDetail(
        replication=outcome.replication + 1,
        s=s,
        big_s=big_s,
        outcome=outcome,
        calculation=calculation,
    )


def summarize_iteration(
    details: Sequence[ReplicationDetail],
    *,
    iteration: int,
    location_id: str,
    product_id: str,
    s: int,
    big_s: int,
    safety_stock: int,
    keep_details: bool = True,
) -> IterationRecord:
    if not details:
        raise ValueError("At least one replication detail is required.")
    return IterationRecord(
        iteration=iteration,
        location_id=location_id,
        product_id=product_id,
        s=s,
        big_s=big_s,
        safety_stock=safety_stock,
        avg_cost=statistics.fmean(detail.outcome.total_cost for detail in details),
        avg_fill_rate=statistics.fmean(detail.outcome.fill_rate for detail in details),
        avg_csl=statistics.fmean(
            detail.outcome.service_level_csl for detail in details
        ),
        replications=tuple(details) if keep_details else (),
    )
