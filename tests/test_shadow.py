"""
Tests for shadow cost simulation.
"""
import pytest

from ai_cost_estimator.core.shadow import (
    SCENARIOS,
    compute_shadow_cost,
    estimate_monthly_impact,
    get_scenarios,
    simulate_all_scenarios,
)

# Total for 2 requests of 100 under "normal": (100.1 + 10 + 40) * 2.
# Egress and cache-miss costs are scaled by request count twice.
NORMAL_TWO_REQUEST_TOTAL = 300.2


class TestScenarioCatalog:
    """Test the fixed scenario catalog."""

    def test_declaration_order(self):
        assert list(SCENARIOS) == ["normal", "peak", "failure", "degraded"]

    def test_normal_scenario_values(self):
        normal = SCENARIOS["normal"]
        assert normal.error_rate == 0.01
        assert normal.retry_multiplier == 1.1
        assert normal.network_cost_percentage == 5
        assert normal.cache_miss_rate == 20

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            get_scenarios()["custom"] = SCENARIOS["normal"]


class TestComputeShadowCost:
    """Test single-scenario shadow cost."""

    def test_normal_single_request(self):
        result = compute_shadow_cost(100, "normal", 1)
        assert result.direct_cost == 100
        assert result.estimated_retry_cost == pytest.approx(0.1)
        assert result.egress_cost == pytest.approx(5)
        assert result.cache_miss_cost == pytest.approx(20)
        assert result.total_shadow_cost == pytest.approx(125.1)
        assert result.savings == pytest.approx(25.1)

    def test_total_double_scales_egress_and_cache_misses(self):
        """Pin the total formula for multiple requests."""
        result = compute_shadow_cost(100, "normal", 2)
        assert result.egress_cost == pytest.approx(10)
        assert result.cache_miss_cost == pytest.approx(40)
        assert result.total_shadow_cost == pytest.approx(NORMAL_TWO_REQUEST_TOTAL)
        assert result.savings == pytest.approx(NORMAL_TWO_REQUEST_TOTAL - 200)

    def test_peak_scenario(self):
        result = compute_shadow_cost(10, "peak", 1)
        assert result.estimated_retry_cost == pytest.approx(0.15)
        assert result.egress_cost == pytest.approx(1.5)
        assert result.cache_miss_cost == pytest.approx(4.0)
        assert result.total_shadow_cost == pytest.approx(15.65)

    def test_savings_is_total_minus_direct(self):
        for key in SCENARIOS:
            result = compute_shadow_cost(42.5, key, 3)
            assert result.savings == result.total_shadow_cost - result.direct_cost
            assert result.savings >= 0

    def test_unknown_scenario_defaults_to_normal(self):
        """Verify unknown scenarios fall back silently."""
        assert compute_shadow_cost(100, "nope", 4) == compute_shadow_cost(100, "normal", 4)

    def test_default_arguments(self):
        assert compute_shadow_cost(100) == compute_shadow_cost(100, "normal", 1)

    def test_description(self):
        result = compute_shadow_cost(100, "normal", 1)
        assert result.description == "Normal Operations scenario: 25.1% hidden costs"

    def test_zero_direct_cost(self):
        """Verify a zero base cost reports zero hidden cost instead of NaN."""
        result = compute_shadow_cost(0, "failure", 10)
        assert result.total_shadow_cost == 0
        assert result.savings == 0
        assert result.description == "Service Degradation scenario: 0.0% hidden costs"

    def test_identical_inputs_give_identical_output(self):
        assert compute_shadow_cost(3.3, "degraded", 17) == compute_shadow_cost(3.3, "degraded", 17)


class TestSimulateAllScenarios:
    """Test multi-scenario simulation."""

    def test_returns_every_scenario_in_order(self):
        results = simulate_all_scenarios(100, 5)
        assert list(results) == ["normal", "peak", "failure", "degraded"]

    def test_matches_direct_calls(self):
        results = simulate_all_scenarios(12.0, 3)
        for key, result in results.items():
            assert result == compute_shadow_cost(12.0, key, 3)

    def test_failure_costs_more_than_normal(self):
        results = simulate_all_scenarios(100)
        assert results["failure"].total_shadow_cost > results["normal"].total_shadow_cost


class TestEstimateMonthlyImpact:
    """Test thirty-day projections."""

    def test_normal_month(self):
        impact = estimate_monthly_impact(10, "normal")
        assert impact.estimated == 300
        assert impact.with_shadow == pytest.approx(2550.3)
        assert impact.additional_cost == pytest.approx(2250.3)

    def test_consistent_with_shadow_cost(self):
        impact = estimate_monthly_impact(7.5, "peak")
        result = compute_shadow_cost(7.5, "peak", 30)
        assert impact.with_shadow == result.total_shadow_cost
        assert impact.additional_cost == result.savings
