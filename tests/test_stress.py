"""Tests for the stress test harness.

Tests verify:
- Each shock rewrites exactly the intended field on a new model
- Unknown shocks compare the baseline against itself
- Result metrics (delta, minimum, recovery, security budget)
- Suite runs and table formatting
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from stakeflow.adversarial.stress import (
    STRESS_LIBRARY,
    StressTestResult,
    apply_shock,
    compare_outputs,
    format_stress_table,
    run_stress_suite,
    run_stress_test,
)
from stakeflow.config.loader import load_preset
from stakeflow.simulation.runner import compute_staking_series

from conftest import make_model


class TestApplyShock:
    """Shocked models are derived, never mutated."""

    def test_rate_hike(self, base_model):
        """Opportunity cost rises by 300 bps."""
        shocked = apply_shock(base_model, "rate_hike")
        assert shocked.demand.opportunity_cost_annual == pytest.approx(0.08)
        assert base_model.demand.opportunity_cost_annual == 0.05

    def test_fee_drawdown_flat_fees(self, base_model):
        """Flat fees per step are halved."""
        shocked = apply_shock(base_model, "fee_drawdown")
        assert shocked.rewards.fees.fees_per_step == 1000
        assert base_model.rewards.fees.fees_per_step == 2000

    def test_fee_drawdown_fee_model(self):
        """A fee model's constant base is halved too."""
        model = make_model(rewards={"fees": {
            "fees_per_step": None,
            "fees_model": {"type": "grow", "params": {"constant_fees": 800, "growth_rate": 0.02}},
        }})
        shocked = apply_shock(model, "fee_drawdown")
        assert shocked.rewards.fees.fees_per_step is None
        assert shocked.rewards.fees.fees_model.params.constant_fees == 400
        assert shocked.rewards.fees.fees_model.params.growth_rate == 0.02

    def test_price_crash_flat(self, base_model):
        """Flat prices drop 60%."""
        shocked = apply_shock(base_model, "price_crash")
        assert shocked.price_scenario.price == pytest.approx(0.8)

    def test_price_crash_other_scenarios_unchanged(self):
        """Non-flat price scenarios are left as they are."""
        model = load_preset("L1 PoS Aggressive")
        assert apply_shock(model, "price_crash") == model

    def test_slash_event(self, base_model):
        """Slashing becomes certain at 10% severity."""
        shocked = apply_shock(base_model, "slash_event")
        assert shocked.risk.slash_prob_annual == 1.0
        assert shocked.risk.slash_severity_pct == 0.10
        assert base_model.risk.slash_prob_annual == 0.0

    def test_unknown_shock_returns_model(self, base_model):
        """Unknown identifiers leave the model unchanged."""
        assert apply_shock(base_model, "meteor_strike") is base_model


class TestStressMetrics:
    """Metrics of individual stress tests."""

    def test_unknown_shock_is_a_no_op(self, base_model):
        """Comparing a run to itself shows no change and instant recovery."""
        result = run_stress_test(base_model, "meteor_strike")
        assert result.type == "meteor_strike"
        assert result.delta_staking_ratio == 0.0
        assert result.time_to_recover_steps == 0
        assert result.security_budget_reduction == 0.0

    def test_slash_event_properties(self):
        """Slashing never lifts participation above the baseline."""
        model = load_preset("L1 PoS Conservative")
        baseline = compute_staking_series(model)
        result = run_stress_test(model, "slash_event")

        assert result.min_staking_ratio <= baseline.metadata.final_staking_ratio
        assert result.delta_staking_ratio <= 0.0
        assert result.security_budget_reduction >= 0.0
        assert 0 <= result.time_to_recover_steps <= model.horizon_steps + 1

    def test_rate_hike_lowers_participation(self, base_model):
        """A higher opportunity cost ends at a lower ratio."""
        assert run_stress_test(base_model, "rate_hike").delta_staking_ratio < 0.0

    def test_price_crash_cuts_security_budget(self, base_model):
        """A 60% price drop removes more than half of the stake's USD value."""
        result = run_stress_test(base_model, "price_crash")
        assert result.security_budget_reduction > 0.5

    def test_zero_baseline_value(self):
        """A worthless baseline reports no budget reduction."""
        model = make_model(price_scenario={"type": "flat", "price": 0.0})
        assert run_stress_test(model, "rate_hike").security_budget_reduction == 0.0

    def test_never_recovering_uses_step_count(self, base_model):
        """Without convergence recovery time is the number of steps."""
        baseline = compute_staking_series(base_model)
        stressed = compute_staking_series(make_model(demand={"max_participation": 0.5}))
        result = compare_outputs("custom", baseline, stressed)
        assert result.time_to_recover_steps == len(stressed.steps)

    def test_precomputed_baseline(self, base_model):
        """Passing the baseline gives the same result as recomputing it."""
        baseline = compute_staking_series(base_model)
        assert run_stress_test(base_model, "fee_drawdown", baseline=baseline) == \
            run_stress_test(base_model, "fee_drawdown")


class TestStressSuite:
    """Running and formatting the full library."""

    def test_suite_runs_every_shock(self, base_model):
        """Default suite covers the whole library."""
        results = run_stress_suite(base_model)
        assert list(results) == list(STRESS_LIBRARY)
        assert all(isinstance(result, StressTestResult) for result in results.values())

    def test_suite_explicit_none(self, base_model):
        """Passing no shocks explicitly also runs the full library."""
        assert list(run_stress_suite(base_model, shocks=None)) == list(STRESS_LIBRARY)

    def test_suite_subset(self, base_model):
        """A shock subset runs only those shocks."""
        results = run_stress_suite(base_model, ["slash_event"])
        assert list(results) == ["slash_event"]

    def test_format_table(self, base_model):
        """Table lists display names under the header row."""
        table = format_stress_table(run_stress_suite(base_model))
        lines = table.splitlines()
        assert "Shock" in lines[0]
        assert "Budget Cut" in lines[0]
        assert len(lines) == 2 + len(STRESS_LIBRARY)
        for scenario in STRESS_LIBRARY.values():
            assert scenario.name in table


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
