"""Stochastic (s, S) inventory-policy optimization."""

from importlib.metadata import PackageNotFoundError, version as _dist_version

try:
    from ._version import version as __version__
except ModuleNotFoundError:
    try:
        __version__ = _dist_version("inventory-optimizer")
    except PackageNotFoundError:
        __version__ = "0.0.0"

from .prng import (
    LCG_INCREMENT,
    LCG_MODULUS,
    LCG_MULTIPLIER,
    LinearCongruentialGenerator,
    derive_seed,
    round_half_up,
)
from .distributions import DistributionFamily, DistributionSpec, resolve_family, sample
from .service_levels import (
    SafetyStockCalculation,
    inverse_normal_cdf,
    normal_cdf,
    reorder_point,
    safety_stock,
    safety_stock_components,
)
from .simulation import (
    SampleStatistics,
    SimulationConfig,
    SimulationOutcome,
    simulate_policy,
)
from .replications import (
    INVALID_POLICY_COST,
    PolicyObjective,
    ReplicationSummary,
    evaluate_policy,
    run_replications,
)
from .optimization import (
    DifferentialEvolutionResult,
    GenerationRecord,
    OptimizerConfig,
    differential_evolution,
)
from .breakdown import (
    CalculationBreakdown,
    CostBreakdown,
    IterationRecord,
    ReplicationDetail,
)
from .scenario import (
    DEFAULT_DEMAND,
    DEFAULT_LEAD_TIME,
    PolicyOptimizationResult,
    PolicyRow,
    ReplicationRecord,
    ScenarioInputs,
    ScenarioKPIs,
    ScenarioResult,
    compute_kpis,
    optimize_policy,
    run_scenario,
    search_bounds,
)
from .io import (
    DemandRow,
    LeadTimeRow,
    build_scenario_inputs,
    iter_demand_rows_from_csv,
    iter_lead_time_rows_from_csv,
    iter_policy_rows_from_csv,
    iteration_records_to_dataframe,
    iteration_records_to_dicts,
    optimizer_config_from_mapping,
    policy_results_to_dataframe,
    policy_results_to_dicts,
    replication_records_to_dataframe,
    replication_records_to_dicts,
    simulation_config_from_mapping,
)

__all__ = [
    "__version__",
    "LCG_INCREMENT",
    "LCG_MODULUS",
    "LCG_MULTIPLIER",
    "LinearCongruentialGenerator",
    "derive_seed",
    "round_half_up",
    "DistributionFamily",
    "DistributionSpec",
    "resolve_family",
    "sample",
    "SafetyStockCalculation",
    "inverse_normal_cdf",
    "normal_cdf",
    "reorder_point",
    "safety_stock",
    "safety_stock_components",
    "SampleStatistics",
    "SimulationConfig",
    "SimulationOutcome",
    "simulate_policy",
    "INVALID_POLICY_COST",
    "PolicyObjective",
    "ReplicationSummary",
    "evaluate_policy",
    "run_replications",
    "DifferentialEvolutionResult",
    "GenerationRecord",
    "OptimizerConfig",
    "differential_evolution",
    "CalculationBreakdown",
    "CostBreakdown",
    "IterationRecord",
    "ReplicationDetail",
    "DEFAULT_DEMAND",
    "DEFAULT_LEAD_TIME",
    "PolicyOptimizationResult",
    "PolicyRow",
    "ReplicationRecord",
    "ScenarioInputs",
    "ScenarioKPIs",
    "ScenarioResult",
    "compute_kpis",
    "optimize_policy",
    "run_scenario",
    "search_bounds",
    "DemandRow",
    "LeadTimeRow",
    "build_scenario_inputs",
    "iter_demand_rows_from_csv",
    "iter_lead_time_rows_from_csv",
    "iter_policy_rows_from_csv",
    "iteration_records_to_dataframe",
    "iteration_records_to_dicts",
    "optimizer_config_from_mapping",
    "policy_results_to_dataframe",
    "policy_results_to_dicts",
    "replication_records_to_dataframe",
    "replication_records_to_dicts",
    "simulation_config_from_mapping",
]
