"""Run-level summary statistics for a completed staking series."""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

REWARD_RUNWAY_THRESHOLD = 0.5  # Fraction of step-0 reward flow


@dataclass
class StakingMetadata:
    """Aggregate statistics of one staking run."""
    final_staking_ratio: float
    avg_gross_apr: float
    avg_net_apr: float
    avg_fee_coverage: float
    total_stake_value_usd: float  # USD value of stake at the final step
    reward_runway_steps: int
    float_locked_pct: float


def _mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def compute_reward_runway(rewards: Sequence[float], horizon_steps: int) -> int:
    """
    First step at which reward flow falls below half of step 0's.

    Args:
        rewards: Reward flow per step (tokens)
        horizon_steps: Value returned when flow never drops that far

    Returns:
        Step index of the drop, or horizon_steps
    """
    if len(rewards) == 0:
        return horizon_steps

    threshold = rewards[0] * REWARD_RUNWAY_THRESHOLD
    for i in range(1, len(rewards)):
        if rewards[i] < threshold:
            return i
    return horizon_steps


def summarize_steps(steps: Sequence, horizon_steps: int) -> StakingMetadata:
    """
    Summarize a completed step sequence.

    Args:
        steps: StakingStep records in time order
        horizon_steps: Configured horizon (runway default)

    Returns:
        StakingMetadata
    """
    if not steps:
        return StakingMetadata(
            final_staking_ratio=0.0,
            avg_gross_apr=0.0,
            avg_net_apr=0.0,
            avg_fee_coverage=0.0,
            total_stake_value_usd=0.0,
            reward_runway_steps=horizon_steps,
            float_locked_pct=0.0,
        )

    final_step = steps[-1]
    if final_step.circulating_supply > 0:
        float_locked_pct = (final_step.stake_tokens + final_step.locked_tokens) / final_step.circulating_supply
    else:
        float_locked_pct = 0.0

    return StakingMetadata(
        final_staking_ratio=final_step.staking_ratio,
        avg_gross_apr=_mean([step.gross_apr for step in steps]),
        avg_net_apr=_mean([step.net_apr for step in steps]),
        avg_fee_coverage=_mean([step.fee_coverage_pct for step in steps]),
        total_stake_value_usd=final_step.stake_value_usd,
        reward_runway_steps=compute_reward_runway([step.rewards_to_stakers for step in steps], horizon_steps),
        float_locked_pct=float_locked_pct,
    )
