import statistics

import pytest

from inventory_optimizer import (
    DEFAULT_DEMAND,
    DEFAULT_LEAD_TIME,
    DistributionSpec,
    OptimizerConfig,
    PolicyRow,
    ScenarioInputs,
    SimulationConfig,
    compute_kpis,
    evaluate_policy,
    optimize_policy,
    run_scenario,
    search_bounds,
)


def _small_inputs(policies, **optimizer_overrides):
    optimizer_values = {"population_size": 5, "max_generations": 2}
    optimizer_values.update(optimizer_overrides)
    return ScenarioInputs(
        policies=policies,
        demand={"P1": DistributionSpec("normal", 50, 10)},
        lead_times={("DC1", "P1"): DistributionSpec("normal", 3, 1)},
        simulation=SimulationConfig(horizon_days=30, replications=3, seed=7),
        optimizer=OptimizerConfig(**optimizer_values),
    )


def test_search_bounds_around_seed_policy():
    assert search_bounds(200, 500) == ((1.0, 400.0), (200.0, 800.0))
    assert search_bounds(50, 150) == ((1.0, 250.0), (100.0, 450.0))


def test_missing_specs_fall_back_to_defaults():
    inputs = ScenarioInputs(policies=[PolicyRow("DC9", "P9")])

    assert inputs.demand_for("P9") == DEFAULT_DEMAND
    assert inputs.lead_time_for("DC9", "P9") == DEFAULT_LEAD_TIME
    assert DEFAULT_DEMAND.mean == 100 and DEFAULT_DEMAND.std == 20
    assert DEFAULT_LEAD_TIME.mean == 2 and DEFAULT_LEAD_TIME.std == 0.5


def test_end_to_end_optimization_beats_seed_policy():
    simulation = SimulationConfig(
        horizon_days=365,
        replications=30,
        seed=42,
        target_service_level=95,
        ordering_cost=100,
        holding_cost_per_unit_day=0.5,
    )
    inputs = ScenarioInputs(
        policies=[PolicyRow("DC1", "P1", initial_s=200, initial_big_s=500)],
        demand={"P1": DistributionSpec("normal", 100, 20)},
        lead_times={("DC1", "P1"): DistributionSpec("normal", 2, 0.5)},
        simulation=simulation,
        optimizer=OptimizerConfig(population_size=15, max_generations=5),
    )

    scenario = run_scenario(inputs)
    result = scenario.results[0]
    seed_cost = evaluate_policy(
        200,
        500,
        demand=inputs.demand["P1"],
        lead_time=inputs.lead_times[("DC1", "P1")],
        config=simulation,
    )

    assert result.best_big_s > result.best_s
    assert result.safety_stock == 94
    assert result.reorder_point == 294
    assert result.best_cost < seed_cost
    (s_low, s_high), (big_s_low, big_s_high) = result.bounds
    assert s_low <= result.best_s <= s_high
    assert big_s_low <= result.best_big_s <= big_s_high
    assert len(result.replications) == 30
    assert scenario.kpis.total_cost == pytest.approx(result.best_cost)
    assert len(result.history) == 5
    assert len(scenario.iterations) == 5
    assert all(len(iteration.replications) == 30 for iteration in scenario.iterations)
    assert scenario.iterations[-1].avg_cost == pytest.approx(result.history[-1].best_cost)


def test_scenario_aggregates_kpis_across_policies():
    inputs = _small_inputs([PolicyRow("DC1", "P1", 60, 200), PolicyRow("DC2", "P2", 150, 400)])

    scenario = run_scenario(inputs)

    assert [result.location_id for result in scenario.results] == ["DC1", "DC2"]
    assert len(scenario.replications) == 6
    assert len(scenario.iterations) == 4
    assert scenario.kpis.total_cost == pytest.approx(
        statistics.fmean(record.total_cost for record in scenario.replications)
    )
    assert scenario.kpis.avg_fill_rate == pytest.approx(
        statistics.fmean(record.fill_rate for record in scenario.replications)
    )
    assert scenario.kpis.avg_csl == pytest.approx(
        statistics.fmean(record.csl for record in scenario.replications)
    )


def test_optimize_policy_records_final_pass_details():
    inputs = _small_inputs([])
    result = optimize_policy(PolicyRow("DC1", "P1", 60, 200), inputs)

    record = result.replications[0]
    assert record.replication == 1
    assert (record.s, record.big_s) == (result.best_s, result.best_big_s)
    assert record.safety_stock == result.safety_stock
    assert result.evaluations == 5 * 3
    detail = result.iterations[0].replications[0]
    assert detail.replication == 1
    costs = detail.calculation.costs
    assert costs.total_cost == pytest.approx(
        costs.simulated_holding_cost + costs.simulated_ordering_cost
    )
    assert costs.order_quantity == detail.big_s - detail.s
    assert detail.calculation.demand.model == "normal"
    assert detail.calculation.demand.sampled is not None
    assert detail.calculation.reorder_point.avg_demand_during_lead_time == 150
    assert detail.calculation.performance.target_service_level == 0.95


def test_iteration_details_can_be_skipped():
    inputs = _small_inputs([PolicyRow("DC1", "P1", 60, 200)], max_generations=3)

    scenario = run_scenario(inputs, capture_iteration_details=False)

    assert scenario.iterations == ()
    assert len(scenario.results[0].history) == 3


def test_process_pool_matches_sequential_run():
    inputs = _small_inputs([PolicyRow("DC1", "P1", 60, 200)])

    sequential = run_scenario(inputs)
    parallel = run_scenario(inputs, max_workers=2)

    assert parallel == sequential


def test_empty_portfolio_has_zero_kpis():
    scenario = run_scenario(_small_inputs([]))

    assert scenario.results == ()
    assert compute_kpis([]) == scenario.kpis
    assert scenario.kpis.total_cost == 0.0


def test_run_scenario_rejects_non_positive_workers():
    with pytest.raises(ValueError, match="max_workers"):
        run_scenario(_small_inputs([]), max_workers=0)


def test_large_cost_scale_still_returns_valid_policy():
    inputs = ScenarioInputs(
        policies=[PolicyRow("DC1", "P1", 200, 500)],
        simulation=SimulationConfig(
            horizon_days=30,
            replications=2,
            seed=7,
            ordering_cost=5e6,
            holding_cost_per_unit_day=1e7,
        ),
        optimizer=OptimizerConfig(population_size=5, max_generations=2),
    )

    result = optimize_policy(inputs.policies[0], inputs, capture_iteration_details=False)

    assert result.best_big_s > result.best_s
    assert 1e10 < result.best_cost < float("inf")


def test_safety_stock_uses_distribution_moments_for_non_normal_families():
    inputs = ScenarioInputs(
        policies=[PolicyRow("DC1", "P1", 200, 500)],
        demand={"P1": DistributionSpec("uniform", 40, 160)},
        lead_times={("DC1", "P1"): DistributionSpec("poisson", 4)},
        simulation=SimulationConfig(horizon_days=5, replications=1, seed=1),
        optimizer=OptimizerConfig(population_size=4, max_generations=0),
    )

    result = optimize_policy(inputs.policies[0], inputs, capture_iteration_details=False)
    calculation = result.safety_stock_calculation

    # uniform(40, 160): mean 100, variance 1200; poisson(4): mean 4, variance 4
    assert calculation.demand_variance == pytest.approx(1200)
    assert calculation.lead_time_variance == pytest.approx(4)
    assert calculation.total_variance == pytest.approx(4 * 1200 + 100**2 * 4)
    assert result.safety_stock == 348
    assert result.reorder_point == pytest.approx(100 * 4 + 348)
