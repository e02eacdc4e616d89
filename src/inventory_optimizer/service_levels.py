"""Normal-distribution estimators and safety stock formulas."""

from __future__ import annotations

from dataclasses import dataclass
import math

from .prng import round_half_up

SAFETY_STOCK_FORMULA = (
    "Safety Stock = z-score × √(avg_lead_time × demand_variance"
    " + avg_demand² × lead_time_variance)"
)

_ACKLAM_A = (
    -3.969683028665376e01,
    2.209460984245205e02,
    -2.759285104469687e02,
    1.383577518672690e02,
    -3.066479806614716e01,
    2.506628277459239e00,
)
_ACKLAM_B = (
    -5.447609879822406e01,
    1.615858368580409e02,
    -1.556989798598866e02,
    6.680131188771972e01,
    -1.328068155288572e01,
)
_ACKLAM_C = (
    -7.784894002430293e-03,
    -3.223964580411365e-01,
    -2.400758277161838e00,
    -2.549732539343734e00,
    4.374664141464968e00,
    2.938163982698783e00,
)
_ACKLAM_D = (
    7.784695709041462e-03,
    3.224671290700398e-01,
    2.445134137142996e00,
    3.754408661907416e00,
)
_P_LOW = 0.02425
_P_HIGH = 1.0 - _P_LOW


def inverse_normal_cdf(p: float) -> float:
    """Approximate the standard normal quantile (inverse CDF).

    Returns 0.0 when ``p`` is outside the open interval (0, 1), so a
    service level of 0% or 100% yields no safety stock instead of an error.
    """
    if not 0.0 < p < 1.0:
        return 0.0

    a, b, c, d = _ACKLAM_A, _ACKLAM_B, _ACKLAM_C, _ACKLAM_D

    if p < _P_LOW:
        q = math.sqrt(-2.0 * math.log(p))
        return (
            ((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q
            + c[5]
        ) / (
            ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q) + 1.0
        )
    if p <= _P_HIGH:
        q = p - 0.5
        r = q * q
        return (
            (((((a[0] * r + a[1]) * r + a[2]) * r + a[3]) * r + a[4]) * r + a[5])
            * q
        ) / (
            ((((b[0] * r + b[1]) * r + b[2]) * r + b[3]) * r + b[4]) * r
            + 1.0
        )
    q = math.sqrt(-2.0 * math.log(1.0 - p))
    return -(
        ((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q
        + c[5]
    ) / (
        ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q) + 1.0
    )


def normal_cdf(z: float) -> float:
    """Abramowitz-Stegun polynomial approximation of the standard normal CDF."""
    t = 1.0 / (1.0 + 0.2316419 * abs(z))
    density = 0.3989423 * math.exp(-z * z / 2.0)
    tail = density * t * (
        0.3193815
        + t * (-0.3565638 + t * (1.781478 + t * (-1.821256 + t * 1.330274)))
    )
    return 1.0 - tail if z > 0 else tail


@dataclass(frozen=True)
class SafetyStockCalculation:
    z_score: float
    target_service_level: float
    demand_variance: float
    lead_time_variance: float
    demand_component: float
    lead_time_component: float
    total_variance: float
    result: int
    implied_service_level: float
    formula: str = SAFETY_STOCK_FORMULA


def safety_stock_components(
    demand_mean: float,
    demand_std: float,
    lead_time_mean: float,
    lead_time_std: float,
    service_level_pct: float,
) -> SafetyStockCalculation:
    z_score = inverse_normal_cdf(service_level_pct / 100.0)
    demand_variance = demand_std**2
    lead_time_variance = lead_time_std**2
    demand_component = lead_time_mean * demand_variance
    lead_time_component = demand_mean**2 * lead_time_variance
    total_variance = demand_component + lead_time_component
    sigma = math.sqrt(max(total_variance, 0.0))
    result = max(0, round_half_up(z_score * sigma))
    implied = normal_cdf(result / sigma) if sigma > 0 else 1.0
    return SafetyStockCalculation(
        z_score=z_score,
        target_service_level=service_level_pct / 100.0,
        demand_variance=demand_variance,
        lead_time_variance=lead_time_variance,
        demand_component=demand_component,
        lead_time_component=lead_time_component,
        total_variance=total_variance,
        result=result,
        implied_service_level=implied,
    )


def safety_stock(
    demand_mean: float,
    demand_std: float,
    lead_time_mean: float,
    lead_time_std: float,
    service_level_pct: float,
) -> int:
    """Safety stock combining demand and lead-time variability.

    Assumes demand and lead time are independent:
    ``z * sqrt(LT * sd_D**2 + D**2 * sd_LT**2)``, floored at zero.
    """
    return safety_stock_components(
        demand_mean, demand_std, lead_time_mean, lead_time_std, service_level_pct
    ).result


def reorder_point(
    demand_mean: float, lead_time_mean: float, safety_stock_units: float
) -> float:
    return demand_mean * lead_time_mean + safety_stock_units
