"""Sanity checks and validation for staking model inputs and outputs.

The engine itself never rejects a structurally valid model; these checks
report implausible values so callers can decide what to do with them.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..config.schema import StakingModel
from ..simulation.runner import StakingOutputs

RATIO_EPSILON = 1e-12


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "input", "bounds", "archetype", "invariant"
    message: str
    details: Optional[str] = None


class SanityChecker:
    """Run sanity checks on a staking model and its outputs."""

    def __init__(self, model: StakingModel):
        """Initialize with a staking model."""
        self.model = model

    def _check_fraction(self, name: str, value: Optional[float]) -> List[ValidationWarning]:
        if value is None or 0.0 <= value <= 1.0:
            return []
        return [ValidationWarning(
            severity="error",
            category="bounds",
            message=f"{name} must be a fraction between 0 and 1",
            details=f"Current value: {value}"
        )]

    def check_model_inputs(self) -> List[ValidationWarning]:
        """
        Check model inputs for implausible values.

        Returns:
            List of validation warnings
        """
        model = self.model
        warnings = []

        fractions = {
            "demand.base_participation": model.demand.base_participation,
            "demand.max_participation": model.demand.max_participation,
            "demand.adjustment_speed": model.demand.adjustment_speed,
            "staking.operator_commission_pct": model.staking.operator_commission_pct,
            "staking.max_stake_pct_of_supply": model.staking.max_stake_pct_of_supply,
            "rewards.inflation.distribution_to_stakers_pct": model.rewards.inflation.distribution_to_stakers_pct,
            "rewards.fees.fee_share_to_stakers_pct": model.rewards.fees.fee_share_to_stakers_pct,
            "risk.slash_prob_annual": model.risk.slash_prob_annual,
            "risk.slash_severity_pct": model.risk.slash_severity_pct,
        }
        for name, value in fractions.items():
            warnings.extend(self._check_fraction(name, value))

        if model.circulating_supply_0 <= 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="input",
                message="Initial circulating supply must be positive",
                details=f"Current value: {model.circulating_supply_0:,.0f}"
            ))

        if model.circulating_supply_0 > model.total_supply:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Initial circulating supply exceeds total supply",
                details=f"Circulating: {model.circulating_supply_0:,.0f}, Total: {model.total_supply:,.0f}"
            ))

        unlocked = model.circulating_supply_0 + sum(unlock.amount for unlock in model.unlock_schedule)
        if unlocked > model.total_supply:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Unlock schedule releases more than total supply",
                details=f"Circulating after unlocks: {unlocked:,.0f}, Total: {model.total_supply:,.0f}"
            ))

        if any(unlock.amount < 0 for unlock in model.unlock_schedule):
            warnings.append(ValidationWarning(
                severity="error",
                category="input",
                message="Unlock amounts must be non-negative; circulating supply cannot decrease",
            ))

        unlock_steps = [unlock.t for unlock in model.unlock_schedule]
        if unlock_steps != sorted(unlock_steps):
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Unlock schedule is not ordered by step",
            ))

        if model.initial_price <= 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="input",
                message="Initial price must be positive",
                details=f"Current value: {model.initial_price}"
            ))

        if model.demand.base_participation > model.demand.max_participation:
            warnings.append(ValidationWarning(
                severity="error",
                category="bounds",
                message="Base participation exceeds max participation",
                details=(
                    f"Base: {model.demand.base_participation:.2f}, "
                    f"Max: {model.demand.max_participation:.2f}"
                )
            ))

        cap = model.staking.max_stake_pct_of_supply
        if cap is not None and cap < model.demand.base_participation:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Stake cap is below base participation; ratio is pinned at the cap",
                details=f"Cap: {cap:.2f}, Base: {model.demand.base_participation:.2f}"
            ))

        if model.demand.elasticity_preset == "custom" and not model.demand.elasticity_k:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Custom elasticity without elasticity_k; falling back to K=6",
            ))

        if model.horizon_steps == 0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Zero-step horizon produces a single step",
            ))

        # Archetype blocks other than the model's own only stack in hybrid mode
        foreign_blocks = [
            name for name in model.enabled_blocks()
            if name != model.archetype and name not in ("consensus", "defi")
        ]
        if foreign_blocks and not model.hybrid_mode:
            warnings.append(ValidationWarning(
                severity="warning",
                category="archetype",
                message=f"Archetype '{model.archetype}' has extra blocks without hybrid_mode",
                details=f"Blocks: {', '.join(foreign_blocks)}"
            ))

        return warnings

    def check_outputs(self, outputs: StakingOutputs) -> List[ValidationWarning]:
        """
        Check a completed run against the engine's invariants.

        Args:
            outputs: Staking run outputs

        Returns:
            List of validation warnings
        """
        model = self.model
        warnings = []

        expected_steps = model.horizon_steps + 1
        if len(outputs.steps) != expected_steps:
            warnings.append(ValidationWarning(
                severity="error",
                category="invariant",
                message="Step count does not match horizon",
                details=f"Expected {expected_steps}, got {len(outputs.steps)}"
            ))

        ceiling = model.demand.max_participation
        if model.staking.max_stake_pct_of_supply is not None:
            ceiling = min(ceiling, model.staking.max_stake_pct_of_supply)

        previous_supply = None
        for step in outputs.steps:
            if step.staking_ratio < -RATIO_EPSILON or step.staking_ratio > ceiling + RATIO_EPSILON:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="invariant",
                    message=f"t={step.t}: staking ratio outside [0, {ceiling:.4f}]",
                    details=f"Ratio: {step.staking_ratio:.6f}"
                ))
            if step.net_apr < 0:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="invariant",
                    message=f"t={step.t}: negative net APR",
                    details=f"Net APR: {step.net_apr:.6f}"
                ))
            if step.rewards_to_stakers < 0 or step.stake_tokens < 0:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="invariant",
                    message=f"t={step.t}: negative reward flow or stake",
                ))
            if previous_supply is not None and step.circulating_supply < previous_supply:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="invariant",
                    message=f"t={step.t}: circulating supply decreased",
                    details=f"{previous_supply:,.0f} -> {step.circulating_supply:,.0f}"
                ))
            previous_supply = step.circulating_supply

        if outputs.metadata.float_locked_pct > 1.0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Staked plus locked tokens exceed circulating supply",
                details=f"Float locked: {outputs.metadata.float_locked_pct * 100:.1f}%"
            ))

        return warnings


def validate_simulation_results(model: StakingModel, outputs: StakingOutputs) -> List[ValidationWarning]:
    """
    Run every check on a model and its outputs.

    Args:
        model: Staking model
        outputs: Outputs of compute_staking_series(model)

    Returns:
        List of all validation warnings
    """
    checker = SanityChecker(model)
    warnings = []
    warnings.extend(checker.check_model_inputs())
    warnings.extend(checker.check_outputs(outputs))
    return warnings
