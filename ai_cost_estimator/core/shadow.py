"""
Shadow cost simulation.

Estimates the true operational cost of AI usage once retries, network
egress and cache misses are accounted for. Every function here is
deterministic and side-effect free.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping

logger = logging.getLogger(__name__)

DEFAULT_SCENARIO = "normal"
DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class ScenarioProfile:
    """Operating conditions that inflate direct cost.

    network_cost_percentage and cache_miss_rate are percentages (5 means 5%).
    """
    name: str
    error_rate: float
    retry_multiplier: float
    network_cost_percentage: float
    cache_miss_rate: float


@dataclass(frozen=True)
class ShadowCostResult:
    """Direct cost against the inflated cost of a scenario."""
    direct_cost: float
    estimated_retry_cost: float
    egress_cost: float
    cache_miss_cost: float
    total_shadow_cost: float
    savings: float
    description: str


@dataclass(frozen=True)
class MonthlyImpact:
    """Thirty-day projection of a daily cost under a scenario."""
    estimated: float
    with_shadow: float
    additional_cost: float


# Declaration order is the iteration order of simulate_all_scenarios
SCENARIOS: Mapping[str, ScenarioProfile] = MappingProxyType({
    "normal": ScenarioProfile(
        name="Normal Operations",
        error_rate=0.01,
        retry_multiplier=1.1,
        network_cost_percentage=5,
        cache_miss_rate=20,
    ),
    "peak": ScenarioProfile(
        name="Peak Load",
        error_rate=0.05,
        retry_multiplier=1.3,
        network_cost_percentage=15,
        cache_miss_rate=40,
    ),
    "failure": ScenarioProfile(
        name="Service Degradation",
        error_rate=0.15,
        retry_multiplier=2.0,
        network_cost_percentage=25,
        cache_miss_rate=60,
    ),
    "degraded": ScenarioProfile(
        name="Partial Degradation",
        error_rate=0.08,
        retry_multiplier=1.5,
        network_cost_percentage=12,
        cache_miss_rate=35,
    ),
})


def get_scenarios() -> Mapping[str, ScenarioProfile]:
    """Return the read-only scenario catalog."""
    return SCENARIOS


def _resolve_scenario(scenario_name: str) -> ScenarioProfile:
    scenario = SCENARIOS.get(scenario_name)
    if scenario is None:
        logger.debug("Unknown scenario %r, using %r", scenario_name, DEFAULT_SCENARIO)
        scenario = SCENARIOS[DEFAULT_SCENARIO]
    return scenario


def compute_shadow_cost(
    direct_unit_cost: float,
    scenario_name: str = DEFAULT_SCENARIO,
    request_count: int = 1
) -> ShadowCostResult:
    """Compute the shadow cost of a workload under a named scenario.

    Unknown scenario names fall back to "normal" instead of raising.

    The total multiplies egress and cache-miss cost by request_count even
    though both are already scaled by it. Downstream monthly projections
    are calibrated against this total, so it is kept as is.

    Args:
        direct_unit_cost: Cost of one unit of work under ideal conditions
        scenario_name: Key into SCENARIOS
        request_count: Number of units of work

    Returns:
        ShadowCostResult where direct_cost is the unscaled base cost
        times request_count and savings is total minus that base
    """
    scenario = _resolve_scenario(scenario_name)

    retry_cost_factor = 1 + scenario.error_rate * (scenario.retry_multiplier - 1)
    estimated_retry_cost = direct_unit_cost * (retry_cost_factor - 1) * request_count
    egress_cost = direct_unit_cost * (scenario.network_cost_percentage / 100) * request_count
    cache_miss_cost = direct_unit_cost * (scenario.cache_miss_rate / 100) * request_count

    total_shadow_cost = (
        direct_unit_cost * retry_cost_factor + egress_cost + cache_miss_cost
    ) * request_count

    base_cost = direct_unit_cost * request_count
    savings = total_shadow_cost - base_cost

    hidden_percent = (savings / base_cost) * 100 if base_cost else 0.0

    return ShadowCostResult(
        direct_cost=base_cost,
        estimated_retry_cost=estimated_retry_cost,
        egress_cost=egress_cost,
        cache_miss_cost=cache_miss_cost,
        total_shadow_cost=total_shadow_cost,
        savings=savings,
        description=f"{scenario.name} scenario: {hidden_percent:.1f}% hidden costs",
    )


def simulate_all_scenarios(
    direct_unit_cost: float,
    request_count: int = 1
) -> Dict[str, ShadowCostResult]:
    """Run compute_shadow_cost once per catalog scenario, in catalog order."""
    return {
        key: compute_shadow_cost(direct_unit_cost, key, request_count)
        for key in SCENARIOS
    }


def estimate_monthly_impact(
    daily_unit_cost: float,
    scenario_name: str = DEFAULT_SCENARIO
) -> MonthlyImpact:
    """Project a daily cost over a month with and without shadow costs."""
    result = compute_shadow_cost(daily_unit_cost, scenario_name, DAYS_PER_MONTH)
    return MonthlyImpact(
        estimated=daily_unit_cost * DAYS_PER_MONTH,
        with_shadow=result.total_shadow_cost,
        additional_cost=result.savings,
    )
