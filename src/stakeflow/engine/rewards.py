"""Reward sources - Per-step token flow paid to stakers.

Key Concepts:
- Inflation: circulating * annual_rate / steps_per_year * share_to_stakers
- Fees: USD per step converted at the step price, times share_to_stakers
- Other: named streams, token- or USD-denominated, each with its own share
- Sources are independent; a disabled source contributes nothing
"""

from dataclasses import dataclass

from ..config.schema import FeesRewards, InflationRewards, RewardsSources
from .price import interpolate_series


@dataclass
class RewardBreakdown:
    """Rewards paid to stakers in one step, by source (tokens)."""
    inflation: float = 0.0
    fees: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return self.inflation + self.fees + self.other

    @property
    def fee_coverage_pct(self) -> float:
        """Share of the step's reward flow funded by fees (0-100)."""
        total = self.total
        if total == 0:
            return 0.0
        return self.fees / total * 100


def inflation_rate_at(inflation: InflationRewards, t: int) -> float:
    """
    Annual inflation rate in force at step t.

    The last schedule entry with entry.t <= t wins; before the first entry
    (or without a schedule) the flat annual rate applies.
    """
    rate = inflation.annual_inflation_rate
    if inflation.inflation_schedule:
        for entry in inflation.inflation_schedule:
            if entry.t <= t:
                rate = entry.annual_rate
    return rate


def fees_usd_at(fees: FeesRewards, t: int) -> float:
    """Protocol fees generated at step t (USD)."""
    if fees.fees_per_step is not None:
        return fees.fees_per_step

    model = fees.fees_model
    if model is None:
        return 0.0

    params = model.params
    if model.type == "constant":
        return params.constant_fees or 0.0
    if model.type == "grow":
        base = params.constant_fees or 0.0
        growth = params.growth_rate or 0.0
        return base * (1 + growth) ** t
    if model.type == "custom_series":
        knots = [(point.t, point.fees) for point in (params.series or [])]
        return interpolate_series(knots, t, default=0.0)
    return 0.0


class RewardsAccountant:
    """Sum the enabled reward sources into a per-step token amount."""

    def __init__(self, rewards: RewardsSources, steps_per_year: int = 12):
        """
        Initialize rewards accountant.

        Args:
            rewards: Reward source configuration
            steps_per_year: 12 for monthly steps, 52 for weekly
        """
        self.rewards = rewards
        self.steps_per_year = steps_per_year

    def compute_inflation_rewards(self, t: int, circulating_supply: float) -> float:
        inflation = self.rewards.inflation
        if not inflation.enabled:
            return 0.0
        annual_rate = inflation_rate_at(inflation, t)
        inflation_tokens = circulating_supply * annual_rate / self.steps_per_year
        return inflation_tokens * inflation.distribution_to_stakers_pct

    def compute_fee_rewards(self, t: int, price: float) -> float:
        fees = self.rewards.fees
        if not fees.enabled:
            return 0.0
        fees_usd = fees_usd_at(fees, t)
        fees_tokens = fees_usd / price if price > 0 else 0.0
        return fees_tokens * fees.fee_share_to_stakers_pct

    def compute_other_rewards(self, price: float) -> float:
        total = 0.0
        for stream in self.rewards.other:
            reward_tokens = stream.per_step_amount
            if stream.denom == "usd":
                reward_tokens = reward_tokens / price if price > 0 else 0.0
            total += reward_tokens * stream.to_stakers_pct
        return total

    def compute_rewards(self, t: int, price: float, circulating_supply: float) -> RewardBreakdown:
        """
        Compute rewards paid to stakers at step t.

        Args:
            t: Step index
            price: Token price at step t (USD)
            circulating_supply: Circulating supply at step t

        Returns:
            RewardBreakdown in tokens
        """
        return RewardBreakdown(
            inflation=self.compute_inflation_rewards(t, circulating_supply),
            fees=self.compute_fee_rewards(t, price),
            other=self.compute_other_rewards(price),
        )
