"""Circulating supply from a sparse unlock schedule."""

from typing import Sequence

import numpy as np

from ..config.schema import StakingModel, UnlockEntry


def circulating_supply_at(initial: float, unlock_schedule: Sequence[UnlockEntry], t: int) -> float:
    """
    Compute circulating supply at step t.

    Formula: S(t) = S0 + Σ amount_i for all unlocks with t_i <= t

    Args:
        initial: Circulating supply at step 0 (before unlocks)
        unlock_schedule: Unlock events
        t: Step index

    Returns:
        Circulating supply
    """
    supply = initial
    for unlock in unlock_schedule:
        if unlock.t <= t:
            supply += unlock.amount
    return supply


def generate_supply_series(model: StakingModel) -> np.ndarray:
    """Circulating supply for steps 0..=horizon_steps."""
    return np.array(
        [
            circulating_supply_at(model.circulating_supply_0, model.unlock_schedule, t)
            for t in range(model.horizon_steps + 1)
        ],
        dtype=float,
    )
