"""Staker cohorts layered on top of the average staking yield.

Key Concepts:
- Each optional archetype block (liquid staking, restaking, vote-escrow) defines one cohort
- Cohort APR = mean net APR over the run + block-specific addenda
- Adoption shares approach their ceiling exponentially: share += speed * (ceiling - share)
"""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..config.schema import StakingModel

LST_COHORT = "LST Holders"
RESTAKING_COHORT = "Restakers"
VE_COHORT = "ve Lockers"


@dataclass
class CohortYield:
    """Yield and participation of one staker cohort."""
    cohort: str
    net_apr: float
    participation_pct: float


def approach(share: float, ceiling: float, speed: float) -> float:
    """
    Advance an adoption share one step toward its ceiling.

    Args:
        share: Current share
        ceiling: Maximum share
        speed: Fraction of the remaining gap closed per step

    Returns:
        New share, never above ceiling
    """
    return min(ceiling, share + speed * (ceiling - share))


def mean_net_apr(net_aprs: Sequence[float]) -> float:
    """Average net APR over the run (0 for an empty run)."""
    if len(net_aprs) == 0:
        return 0.0
    return float(np.mean(net_aprs))


def lst_apr(model: StakingModel, avg_net_apr: float) -> float:
    """Liquid-staking holders earn staking yield plus DeFi yield, less the LST discount."""
    return (
        avg_net_apr +
        model.liquid_staking.extra_defi_yield_annual -
        model.risk.liquidity_discount_pct
    )


def restaking_apr(model: StakingModel, avg_net_apr: float) -> float:
    """Restakers add incremental yield and bear expected correlated slashing."""
    restaking = model.restaking
    return (
        avg_net_apr +
        restaking.incremental_yield_annual -
        restaking.correlated_slash_prob_annual * restaking.correlated_slash_severity_pct
    )


def ve_apr(model: StakingModel, avg_net_apr: float) -> float:
    """Vote-escrow lockers add bribe yield and the value of gauge control."""
    ve = model.ve_governance
    return avg_net_apr + (ve.bribe_yield_annual or 0.0) + (ve.control_value_annual or 0.0)


def compute_cohort_yields(
    model: StakingModel,
    net_aprs: Sequence[float],
    lst_share: float,
    ve_participation: float
) -> List[CohortYield]:
    """
    Derive cohort yields after the step loop.

    Args:
        model: Staking model
        net_aprs: Net APR of every simulated step
        lst_share: Final liquid-staking share of stakers
        ve_participation: Final vote-escrow share of circulating supply

    Returns:
        One CohortYield per enabled cohort block, in LST / restaking / ve order
    """
    avg_net_apr = mean_net_apr(net_aprs)
    cohorts = []

    if model.liquid_staking is not None and model.liquid_staking.enabled:
        cohorts.append(CohortYield(
            cohort=LST_COHORT,
            net_apr=lst_apr(model, avg_net_apr),
            participation_pct=lst_share,
        ))

    if model.restaking is not None and model.restaking.enabled:
        cohorts.append(CohortYield(
            cohort=RESTAKING_COHORT,
            net_apr=restaking_apr(model, avg_net_apr),
            participation_pct=model.restaking.max_restake_pct_of_stake,
        ))

    if model.ve_governance is not None and model.ve_governance.enabled:
        cohorts.append(CohortYield(
            cohort=VE_COHORT,
            net_apr=ve_apr(model, avg_net_apr),
            participation_pct=ve_participation,
        ))

    return cohorts
