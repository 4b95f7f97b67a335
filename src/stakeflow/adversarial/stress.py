"""Stress tests - Apply one shock to a staking model and diff against baseline."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Literal, Optional

from ..config.schema import PriceScenarioFlat, StakingModel
from ..simulation.runner import StakingOutputs, compute_staking_series

logger = logging.getLogger(__name__)

StressTestType = Literal["rate_hike", "fee_drawdown", "price_crash", "slash_event"]

RATE_HIKE_BPS = 0.03
FEE_DRAWDOWN_FACTOR = 0.5
PRICE_CRASH_FACTOR = 0.4
SLASH_EVENT_PROBABILITY = 1.0
SLASH_EVENT_SEVERITY = 0.10
RECOVERY_TOLERANCE = 0.01


@dataclass
class StressScenario:
    """A named shock."""
    name: str
    description: str


STRESS_LIBRARY = {
    "rate_hike": StressScenario(
        name="Rate Hike",
        description="Opportunity cost +300 bps",
    ),
    "fee_drawdown": StressScenario(
        name="Fee Drawdown",
        description="Flat and base protocol fees halved",
    ),
    "price_crash": StressScenario(
        name="Price Crash",
        description="Flat price -60% (other price scenarios unchanged)",
    ),
    "slash_event": StressScenario(
        name="Slash Event",
        description="Certain slashing at 10% severity",
    ),
}


@dataclass
class StressTestResult:
    """Shocked run compared with its baseline."""
    type: str
    delta_staking_ratio: float
    min_staking_ratio: float
    time_to_recover_steps: int
    security_budget_reduction: float


def apply_shock(model: StakingModel, shock: str) -> StakingModel:
    """
    Build a new model with one shock applied.

    Args:
        model: Baseline model (not modified)
        shock: Stress test identifier; unknown identifiers leave the model as is

    Returns:
        Shocked model
    """
    if shock == "rate_hike":
        demand = model.demand.model_copy(
            update={"opportunity_cost_annual": model.demand.opportunity_cost_annual + RATE_HIKE_BPS}
        )
        return model.model_copy(update={"demand": demand})

    if shock == "fee_drawdown":
        fees = model.rewards.fees
        fee_updates = {}
        if fees.fees_per_step:
            fee_updates["fees_per_step"] = fees.fees_per_step * FEE_DRAWDOWN_FACTOR
        if fees.fees_model is not None and fees.fees_model.params.constant_fees:
            params = fees.fees_model.params.model_copy(
                update={"constant_fees": fees.fees_model.params.constant_fees * FEE_DRAWDOWN_FACTOR}
            )
            fee_updates["fees_model"] = fees.fees_model.model_copy(update={"params": params})
        rewards = model.rewards.model_copy(update={"fees": fees.model_copy(update=fee_updates)})
        return model.model_copy(update={"rewards": rewards})

    if shock == "price_crash":
        scenario = model.price_scenario
        if isinstance(scenario, PriceScenarioFlat):
            crashed = scenario.model_copy(update={"price": scenario.price * PRICE_CRASH_FACTOR})
            return model.model_copy(update={"price_scenario": crashed})
        return model

    if shock == "slash_event":
        risk = model.risk.model_copy(update={
            "slash_prob_annual": SLASH_EVENT_PROBABILITY,
            "slash_severity_pct": SLASH_EVENT_SEVERITY,
        })
        return model.model_copy(update={"risk": risk})

    logger.debug("Unknown stress test %r; running baseline against itself", shock)
    return model


def compare_outputs(shock: str, baseline: StakingOutputs, stressed: StakingOutputs) -> StressTestResult:
    """
    Diff a shocked run against its baseline.

    Args:
        shock: Stress test identifier
        baseline: Outputs of the unshocked model
        stressed: Outputs of the shocked model

    Returns:
        StressTestResult
    """
    delta_staking_ratio = (
        stressed.metadata.final_staking_ratio - baseline.metadata.final_staking_ratio
    )
    min_staking_ratio = min(step.staking_ratio for step in stressed.steps)

    time_to_recover_steps = len(stressed.steps)
    for i, (stressed_step, baseline_step) in enumerate(zip(stressed.steps, baseline.steps)):
        if abs(stressed_step.staking_ratio - baseline_step.staking_ratio) < RECOVERY_TOLERANCE:
            time_to_recover_steps = i
            break

    baseline_value = baseline.metadata.total_stake_value_usd
    if baseline_value != 0:
        security_budget_reduction = 1 - stressed.metadata.total_stake_value_usd / baseline_value
    else:
        security_budget_reduction = 0.0

    return StressTestResult(
        type=shock,
        delta_staking_ratio=delta_staking_ratio,
        min_staking_ratio=min_staking_ratio,
        time_to_recover_steps=time_to_recover_steps,
        security_budget_reduction=security_budget_reduction,
    )


def run_stress_test(
    model: StakingModel,
    shock: str,
    baseline: Optional[StakingOutputs] = None
) -> StressTestResult:
    """
    Run one stress test.

    Args:
        model: Baseline model
        shock: Stress test identifier
        baseline: Precomputed baseline outputs (computed when omitted)

    Returns:
        StressTestResult
    """
    if baseline is None:
        baseline = compute_staking_series(model)
    stressed = compute_staking_series(apply_shock(model, shock))
    result = compare_outputs(shock, baseline, stressed)

    logger.debug(
        "Stress test %s on %s: delta ratio %+.4f, budget reduction %.2f%%",
        shock, model.name, result.delta_staking_ratio, result.security_budget_reduction * 100,
    )
    return result


def run_stress_suite(
    model: StakingModel,
    shocks: Optional[Iterable[str]] = None
) -> Dict[str, StressTestResult]:
    """
    Run several stress tests against one shared baseline.

    Args:
        model: Baseline model
        shocks: Stress test identifiers (defaults to the full library)

    Returns:
        Mapping of shock identifier -> StressTestResult
    """
    if shocks is None:
        shocks = list(STRESS_LIBRARY.keys())

    baseline = compute_staking_series(model)
    return {shock: run_stress_test(model, shock, baseline=baseline) for shock in shocks}


def format_stress_table(results: Dict[str, StressTestResult]) -> str:
    """
    Format stress test results as a text table.

    Args:
        results: Mapping of shock identifier -> StressTestResult

    Returns:
        Formatted table string
    """
    lines = []
    headers = ["Shock", "Δ Ratio", "Min Ratio", "Recover", "Budget Cut"]
    lines.append(" | ".join(f"{h:>12}" for h in headers))
    lines.append("-" * 72)

    for shock, result in results.items():
        scenario = STRESS_LIBRARY.get(shock)
        display_name = scenario.name if scenario else shock

        row = [
            f"{display_name[:12]:>12}",
            f"{result.delta_staking_ratio * 100:>+11.2f}%",
            f"{result.min_staking_ratio * 100:>11.2f}%",
            f"{result.time_to_recover_steps:>12d}",
            f"{result.security_budget_reduction * 100:>11.2f}%",
        ]
        lines.append(" | ".join(row))

    return "\n".join(lines)
