"""Simulation runner - Advance staking participation and yield over the horizon.

Key Features:
- Price and supply paths are generated once up front
- One pure step function advances the loop state (staking ratio, adoption shares)
- Rewards, stake and APR at step t use the ratio carried in from step t-1;
  the ratio recorded at step t is the post-adjustment value carried to t+1
- Cohort yields and summary statistics are derived after the loop
"""

import logging
from dataclasses import asdict, dataclass, replace
from typing import List, Tuple

import numpy as np
import pandas as pd

from ..behavior.cohorts import CohortYield, approach, compute_cohort_yields
from ..behavior.demand import DemandEquilibrium
from ..config.schema import StakingModel
from ..engine.price import generate_price_series
from ..engine.rewards import RewardsAccountant
from ..engine.supply import generate_supply_series
from ..engine.yields import YieldComposer
from .summary import StakingMetadata, summarize_steps

logger = logging.getLogger(__name__)


@dataclass
class StakingStep:
    """One simulated step."""
    t: int
    price: float
    circulating_supply: float
    stake_tokens: float
    staking_ratio: float  # Post-adjustment ratio carried into step t+1
    target_staking_ratio: float
    locked_tokens: float
    rewards_to_stakers: float  # Tokens
    gross_apr: float
    net_apr: float
    fee_coverage_pct: float  # % of rewards funded by fees
    stake_value_usd: float


@dataclass
class StakingOutputs:
    """Complete staking run result."""
    steps: List[StakingStep]
    cohorts: List[CohortYield]
    metadata: StakingMetadata

    def to_frame(self) -> pd.DataFrame:
        """Step records as a DataFrame, one row per step."""
        return pd.DataFrame([asdict(step) for step in self.steps])


@dataclass(frozen=True)
class LoopState:
    """State carried from one step to the next."""
    staking_ratio: float
    lst_share: float = 0.0
    ve_participation: float = 0.0


@dataclass
class StepContext:
    """Per-run inputs shared by every step."""
    model: StakingModel
    prices: np.ndarray
    supply: np.ndarray
    rewards: RewardsAccountant
    yields: YieldComposer
    demand: DemandEquilibrium

    @classmethod
    def from_model(cls, model: StakingModel) -> 'StepContext':
        return cls(
            model=model,
            prices=generate_price_series(model),
            supply=generate_supply_series(model),
            rewards=RewardsAccountant(model.rewards, steps_per_year=model.steps_per_year),
            yields=YieldComposer(model),
            demand=DemandEquilibrium(model.demand, model.staking.max_stake_pct_of_supply),
        )


def initial_state(model: StakingModel) -> LoopState:
    """Loop state before step 0."""
    return LoopState(staking_ratio=model.demand.base_participation)


def advance_step(context: StepContext, state: LoopState, t: int) -> Tuple[StakingStep, LoopState]:
    """
    Simulate step t.

    Args:
        context: Per-run inputs
        state: State carried in from step t-1 (or the initial state)
        t: Step index

    Returns:
        (step record, state to carry into step t+1)
    """
    model = context.model
    price = float(context.prices[t])
    circulating_supply = float(context.supply[t])

    breakdown = context.rewards.compute_rewards(t, price, circulating_supply)
    rewards_to_stakers = breakdown.total

    stake_tokens = state.staking_ratio * circulating_supply
    gross_apr = context.yields.compute_gross_apr(rewards_to_stakers, stake_tokens)
    net_apr = context.yields.compute_net_apr(gross_apr)

    target_ratio = context.demand.compute_target_ratio(net_apr)
    next_ratio = context.demand.advance_ratio(state.staking_ratio, target_ratio)

    ve = model.ve_governance
    ve_enabled = ve is not None and ve.enabled
    locked_tokens = state.ve_participation * circulating_supply if ve_enabled else 0.0

    step = StakingStep(
        t=t,
        price=price,
        circulating_supply=circulating_supply,
        stake_tokens=stake_tokens,
        staking_ratio=next_ratio,
        target_staking_ratio=target_ratio,
        locked_tokens=locked_tokens,
        rewards_to_stakers=rewards_to_stakers,
        gross_apr=gross_apr,
        net_apr=net_apr,
        fee_coverage_pct=breakdown.fee_coverage_pct,
        stake_value_usd=stake_tokens * price,
    )

    lst_share = state.lst_share
    lst = model.liquid_staking
    if lst is not None and lst.enabled:
        lst_share = approach(lst_share, lst.adoption_max_pct_of_stakers, lst.adoption_speed)

    ve_participation = state.ve_participation
    if ve_enabled:
        ve_participation = approach(ve_participation, ve.lock_adoption_max_pct_of_supply, ve.lock_adoption_speed)

    next_state = replace(
        state,
        staking_ratio=next_ratio,
        lst_share=lst_share,
        ve_participation=ve_participation,
    )
    return step, next_state


class StakingSimulationRunner:
    """Run the staking step loop for one model."""

    def __init__(self, model: StakingModel):
        """
        Initialize simulation runner.

        Args:
            model: Staking model (read-only)
        """
        self.model = model
        self.context = StepContext.from_model(model)

    def run(self) -> StakingOutputs:
        """
        Run the simulation.

        Returns:
            StakingOutputs with horizon_steps + 1 step records
        """
        model = self.model
        logger.debug(
            "Running %s (%s, %d %s steps)",
            model.name, model.archetype, model.horizon_steps, model.time_step,
        )

        state = initial_state(model)
        steps: List[StakingStep] = []
        for t in range(model.horizon_steps + 1):
            step, state = advance_step(self.context, state, t)
            steps.append(step)

        cohorts = compute_cohort_yields(
            model,
            [step.net_apr for step in steps],
            lst_share=state.lst_share,
            ve_participation=state.ve_participation,
        )
        metadata = summarize_steps(steps, model.horizon_steps)

        logger.debug(
            "Finished %s: final ratio %.4f, avg net APR %.4f",
            model.name, metadata.final_staking_ratio, metadata.avg_net_apr,
        )
        return StakingOutputs(steps=steps, cohorts=cohorts, metadata=metadata)


def compute_staking_series(model: StakingModel) -> StakingOutputs:
    """Simulate staking dynamics for one model."""
    return StakingSimulationRunner(model).run()
