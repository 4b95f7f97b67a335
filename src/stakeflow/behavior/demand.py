"""Staking demand - Target participation from the yield spread.

Key Concepts:
- Spread = net_apr - opportunity_cost_annual
- Target ratio = base + (max - base) * sigmoid(K * spread)
- Partial adjustment: ratio moves a fixed fraction of the gap to target each step
- Hard caps: max_participation, then max_stake_pct_of_supply when set
"""

from typing import Optional

from scipy.special import expit

from ..config.schema import DemandModel

ELASTICITY_PRESETS = {
    "low": 3.0,
    "medium": 6.0,
    "high": 10.0,
}
DEFAULT_ELASTICITY_K = 6.0


def elasticity_k(demand: DemandModel) -> float:
    """Sigmoid steepness K for the demand model's elasticity preset."""
    if demand.elasticity_preset == "custom":
        return demand.elasticity_k or DEFAULT_ELASTICITY_K
    return ELASTICITY_PRESETS.get(demand.elasticity_preset, DEFAULT_ELASTICITY_K)


class DemandEquilibrium:
    """Map net yield to a target staking ratio and smooth toward it."""

    def __init__(self, demand: DemandModel, max_stake_pct_of_supply: Optional[float] = None):
        """
        Initialize demand equilibrium.

        Args:
            demand: Demand model parameters
            max_stake_pct_of_supply: Optional protocol cap on the staking ratio
        """
        self.demand = demand
        self.k = elasticity_k(demand)
        self.max_stake_pct_of_supply = max_stake_pct_of_supply

    def compute_target_ratio(self, net_apr: float) -> float:
        """
        Compute the staking ratio that holders want at this yield.

        Formula: target = base + (max - base) * sigmoid(K * (net_apr - opportunity_cost))

        Args:
            net_apr: Net APR offered to stakers

        Returns:
            Target staking ratio in [0, 1]
        """
        spread = net_apr - self.demand.opportunity_cost_annual
        target = (
            self.demand.base_participation +
            (self.demand.max_participation - self.demand.base_participation) * float(expit(self.k * spread))
        )
        return max(0.0, min(1.0, target))

    def advance_ratio(self, current: float, target: float) -> float:
        """
        Move the staking ratio one step toward target.

        Args:
            current: Staking ratio before this step's adjustment
            target: Target staking ratio

        Returns:
            Adjusted ratio, clamped to the participation and supply caps
        """
        adjusted = current + self.demand.adjustment_speed * (target - current)
        clamped = max(0.0, min(self.demand.max_participation, adjusted))

        if self.max_stake_pct_of_supply is not None:
            clamped = min(clamped, self.max_stake_pct_of_supply)

        return clamped
