"""Helpers for loading scenario inputs and serialising optimization results."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
import csv
from dataclasses import dataclass
import math
import warnings

from .breakdown import IterationRecord
from .distributions import DistributionSpec
from .optimization import OptimizerConfig
from .prng import round_half_up
from .scenario import (
    DEFAULT_DEMAND,
    DEFAULT_LEAD_TIME,
    PolicyOptimizationResult,
    PolicyRow,
    ReplicationRecord,
    ScenarioInputs,
)
from .simulation import SimulationConfig


@dataclass(frozen=True)
class DemandRow:
    product_id: str
    demand_model: str
    param1: float
    param2: float | None = None
    param3: float | None = None


@dataclass(frozen=True)
class LeadTimeRow:
    dest_id: str
    product_id: str
    lt_model: str
    lt_param1: float
    lt_param2: float | None = None
    lt_param3: float | None = None


_SIMULATION_KEYS = {
    "horizon_days": ("simulation_days", "horizon_days"),
    "replications": ("replications",),
    "seed": ("random_seed", "seed"),
    "target_service_level": ("service_level_target", "target_service_level"),
    "ordering_cost": ("ordering_cost",),
    "holding_cost_per_unit_day": ("holding_cost", "holding_cost_per_unit_day"),
}
_OPTIMIZER_KEYS = {
    "population_size": ("population_size",),
    "max_generations": ("max_iterations", "max_generations"),
    "mutation": ("mutation",),
    "crossover_probability": ("crossover_probability",),
}
_INT_FIELDS = {"horizon_days", "replications", "seed", "population_size", "max_generations"}


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def _coalesce_value(mapping: Mapping[str, object], *fields: str) -> object | None:
    for name in fields:
        value = mapping.get(name)
        if not _is_missing(value):
            return value
    return None


def _parse_optional_float(value: object) -> float | None:
    if _is_missing(value):
        return None
    return float(value)  # type: ignore[arg-type]


def _config_kwargs(
    mapping: Mapping[str, object], keys: Mapping[str, tuple[str, ...]]
) -> dict[str, object]:
    kwargs: dict[str, object] = {}
    for name, aliases in keys.items():
        value = _coalesce_value(mapping, *aliases)
        if value is None:
            continue
        kwargs[name] = int(value) if name in _INT_FIELDS else float(value)  # type: ignore[arg-type]
    return kwargs


def simulation_config_from_mapping(mapping: Mapping[str, object]) -> SimulationConfig:
    """Build a ``SimulationConfig`` from request-style keys, keeping defaults."""
    return SimulationConfig(**_config_kwargs(mapping, _SIMULATION_KEYS))


def optimizer_config_from_mapping(mapping: Mapping[str, object]) -> OptimizerConfig:
    return OptimizerConfig(**_config_kwargs(mapping, _OPTIMIZER_KEYS))


def _validate_required_columns(
    fieldnames: Iterable[str] | None,
    *,
    required_fields: Iterable[str],
    context: str,
) -> None:
    if not fieldnames:
        warnings.warn(f"Missing header row for {context}.", stacklevel=3)
        raise ValueError(f"{context} is missing a header row.")
    field_set = set(fieldnames)
    missing = [name for name in required_fields if name not in field_set]
    if missing:
        missing_display = ", ".join(missing)
        warnings.warn(
            f"Missing required columns for {context}: {missing_display}.",
            stacklevel=3,
        )
        raise ValueError(f"{context} is missing required columns: {missing_display}.")


def iter_policy_rows_from_csv(path: str) -> Iterator[PolicyRow]:
    with open(path, newline="") as handle:
        reader = csv.DictReader(handle)
        _validate_required_columns(
            reader.fieldnames,
            required_fields=("location_id", "product_id"),
            context="Policy CSV",
        )
        for row in reader:
            initial_s = _coalesce_value(row, "initial_s")
            initial_big_s = _coalesce_value(row, "initial_S", "initial_big_s")
            yield PolicyRow(
                location_id=row["location_id"],
                product_id=row["product_id"],
                initial_s=(
                    200 if initial_s is None else round_half_up(float(initial_s))
                ),
                initial_big_s=(
                    500
                    if initial_big_s is None
                    else round_half_up(float(initial_big_s))
                ),
            )


def iter_demand_rows_from_csv(path: str) -> Iterator[DemandRow]:
    with open(path, newline="") as handle:
        reader = csv.DictReader(handle)
        _validate_required_columns(
            reader.fieldnames,
            required_fields=("product_id", "demand_model", "param1"),
            context="Demand CSV",
        )
        for row in reader:
            yield DemandRow(
                product_id=row["product_id"],
                demand_model=row["demand_model"],
                param1=float(row["param1"]),
                param2=_parse_optional_float(row.get("param2")),
                param3=_parse_optional_float(row.get("param3")),
            )


def iter_lead_time_rows_from_csv(path: str) -> Iterator[LeadTimeRow]:
    with open(path, newline="") as handle:
        reader = csv.DictReader(handle)
        _validate_required_columns(
            reader.fieldnames,
            required_fields=("dest_id", "product_id", "lt_model", "lt_param1"),
            context="Lead time CSV",
        )
        for row in reader:
            yield LeadTimeRow(
                dest_id=row["dest_id"],
                product_id=row["product_id"],
                lt_model=row["lt_model"],
                lt_param1=float(row["lt_param1"]),
                lt_param2=_parse_optional_float(row.get("lt_param2")),
                lt_param3=_parse_optional_float(row.get("lt_param3")),
            )


def demand_spec_from_row(row: DemandRow) -> DistributionSpec:
    return DistributionSpec(
        row.demand_model or DEFAULT_DEMAND.family,
        row.param1,
        DEFAULT_DEMAND.param2 if row.param2 is None else row.param2,
        row.param3 or 0.0,
    )


def lead_time_spec_from_row(row: LeadTimeRow) -> DistributionSpec:
    return DistributionSpec(
        row.lt_model or DEFAULT_LEAD_TIME.family,
        row.lt_param1,
        DEFAULT_LEAD_TIME.param2 if row.lt_param2 is None else row.lt_param2,
        row.lt_param3 or 0.0,
    )


def build_scenario_inputs(
    policies: Iterable[PolicyRow],
    demand_rows: Iterable[DemandRow] = (),
    lead_time_rows: Iterable[LeadTimeRow] = (),
    config: Mapping[str, object] | None = None,
) -> ScenarioInputs:
    """Assemble ``ScenarioInputs``; the first row per key wins."""
    demand: dict[str, DistributionSpec] = {}
    for row in demand_rows:
        if row.product_id not in demand:
            demand[row.product_id] = demand_spec_from_row(row)
    lead_times: dict[tuple[str, str], DistributionSpec] = {}
    for row in lead_time_rows:
        key = (row.dest_id, row.product_id)
        if key not in lead_times:
            lead_times[key] = lead_time_spec_from_row(row)
    config = config or {}
    return ScenarioInputs(
        policies=tuple(policies),
        demand=demand,
        lead_times=lead_times,
        simulation=simulation_config_from_mapping(config),
        optimizer=optimizer_config_from_mapping(config),
    )


def policy_results_to_dicts(
    results: Iterable[PolicyOptimizationResult],
) -> list[dict[str, str | int | float]]:
    serialized: list[dict[str, str | int | float]] = []
    for result in results:
        serialized.append(
            {
                "location_id": result.location_id,
                "product_id": result.product_id,
                "s": result.best_s,
                "S": result.best_big_s,
                "best_cost": result.best_cost,
                "safety_stock": result.safety_stock,
                "reorder_point": result.reorder_point,
                "avg_inventory_min": result.avg_inventory.minimum,
                "avg_inventory_max": result.avg_inventory.maximum,
                "avg_inventory_mean": result.avg_inventory.mean,
                "avg_inventory_std": result.avg_inventory.std,
                "evaluations": result.evaluations,
            }
        )
    return serialized


def replication_records_to_dicts(
    records: Iterable[ReplicationRecord],
) -> list[dict[str, str | int | float]]:
    serialized: list[dict[str, str | int | float]] = []
    for record in records:
        outcome = record.outcome
        serialized.append(
            {
                "replication": record.replication,
                "location_id": record.location_id,
                "product_id": record.product_id,
                "s": record.s,
                "S": record.big_s,
                "safety_stock": record.safety_stock,
                "avg_inventory": outcome.avg_inventory,
                "total_cost": outcome.total_cost,
                "holding_cost": outcome.holding_cost,
                "ordering_cost": outcome.ordering_cost,
                "fill_rate": outcome.fill_rate,
                "csl": outcome.service_level_csl,
                "order_count": outcome.order_count,
                "total_demand": outcome.total_demand,
                "stockouts": outcome.stockouts,
            }
        )
    return serialized


def iteration_records_to_dicts(
    iterations: Iterable[IterationRecord],
) -> list[dict[str, str | int | float]]:
    serialized: list[dict[str, str | int | float]] = []
    for iteration in iterations:
        serialized.append(
            {
                "iteration": iteration.iteration,
                "location_id": iteration.location_id,
                "product_id": iteration.product_id,
                "s": iteration.s,
                "S": iteration.big_s,
                "safety_stock": iteration.safety_stock,
                "avg_cost": iteration.avg_cost,
                "avg_fill_rate": iteration.avg_fill_rate,
                "avg_csl": iteration.avg_csl,
                "replications": len(iteration.replications),
            }
        )
    return serialized


def _dicts_to_dataframe(data: list[dict[str, str | int | float]], *, library: str, caller: str):
    if library == "pandas":
        try:
            import pandas as pd  # type: ignore
        except ModuleNotFoundError as exc:
            raise ModuleNotFoundError(
                f"pandas is required for {caller}(library='pandas')."
            ) from exc
        return pd.DataFrame(data)
    if library == "polars":
        try:
            import polars as pl  # type: ignore
        except ModuleNotFoundError as exc:
            raise ModuleNotFoundError(
                f"polars is required for {caller}(library='polars')."
            ) from exc
        return pl.DataFrame(data)
    raise ValueError("library must be 'pandas' or 'polars'.")


def policy_results_to_dataframe(
    results: Iterable[PolicyOptimizationResult], *, library: str = "pandas"
):
    """Convert per-policy results into a pandas or polars DataFrame."""
    return _dicts_to_dataframe(
        policy_results_to_dicts(results),
        library=library,
        caller="policy_results_to_dataframe",
    )


def replication_records_to_dataframe(
    records: Iterable[ReplicationRecord], *, library: str = "pandas"
):
    return _dicts_to_dataframe(
        replication_records_to_dicts(records),
        library=library,
        caller="replication_records_to_dataframe",
    )


def iteration_records_to_dataframe(
    iterations: Iterable[IterationRecord], *, library: str = "pandas"
):
    return _dicts_to_dataframe(
        iteration_records_to_dicts(iterations),
        library=library,
        caller="iteration_records_to_dataframe",
    )
