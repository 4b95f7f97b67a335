"""Yield composition - Gross and net APR for stakers.

Key Concepts:
- Gross APR annualizes the per-step reward flow over stake: r / stake * steps_per_year
- Net APR = gross * (1 - commission) - risk penalties - lockup penalty, floored at 0
- Risk penalty = slash_prob * slash_severity + smart_contract_risk + demand risk addend
"""

from typing import Sequence

from ..config.schema import LockupOption, StakingModel


def average_lock_steps(lockup_options: Sequence[LockupOption]) -> float:
    """Mean lock length over the offered lockup options (0 when none)."""
    if not lockup_options:
        return 0.0
    return sum(option.lock_steps for option in lockup_options) / len(lockup_options)


class YieldComposer:
    """Convert reward flow into gross and net APR."""

    def __init__(self, model: StakingModel):
        """
        Initialize yield composer.

        Args:
            model: Staking model supplying commission, risk and lockup terms
        """
        self.steps_per_year = model.steps_per_year
        self.operator_commission_pct = model.staking.operator_commission_pct
        self.risk_penalty = (
            model.risk.slash_prob_annual * model.risk.slash_severity_pct +
            model.risk.smart_contract_risk_annual +
            model.demand.risk_penalty_annual
        )

        penalty_model = model.demand.lockup_penalty_model
        if penalty_model.type == "linear":
            self.lockup_penalty = (
                average_lock_steps(model.staking.lockup_options) *
                penalty_model.penalty_per_lock_step *
                self.steps_per_year
            )
        else:
            self.lockup_penalty = 0.0

    def compute_gross_apr(self, rewards_to_stakers: float, stake_tokens: float) -> float:
        """
        Compute gross APR.

        Formula: gross = rewards / stake * steps_per_year

        Args:
            rewards_to_stakers: Reward flow for one step (tokens)
            stake_tokens: Tokens staked

        Returns:
            Gross APR (0 when nothing is staked)
        """
        if stake_tokens <= 0:
            return 0.0
        return rewards_to_stakers / stake_tokens * self.steps_per_year

    def compute_net_apr(self, gross_apr: float) -> float:
        """
        Compute net APR after commission, risk and lockup penalties.

        Args:
            gross_apr: Gross APR

        Returns:
            Net APR, never negative
        """
        net_apr = gross_apr * (1 - self.operator_commission_pct)
        net_apr -= self.risk_penalty
        net_apr -= self.lockup_penalty
        return max(0.0, net_apr)
