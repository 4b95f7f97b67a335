"""Exogenous price path generation.

The staking engine does not model market impact: price is an input series
built once per run from the model's price scenario.
"""

from typing import Sequence, Tuple

import numpy as np

from ..config.schema import (
    PriceScenarioBullBaseBear,
    PriceScenarioCustom,
    PriceScenarioFlat,
    StakingModel,
)


def interpolate_series(knots: Sequence[Tuple[float, float]], t: float, default: float = 1.0) -> float:
    """
    Linearly interpolate a knot series at step t.

    Knots outside the sampled range clamp to the nearest endpoint.

    Args:
        knots: (t, value) pairs in any order
        t: Step to sample
        default: Value returned for an empty series

    Returns:
        Interpolated value
    """
    if not knots:
        return default

    ordered = sorted(knots, key=lambda knot: knot[0])
    xs = np.array([knot[0] for knot in ordered], dtype=float)
    ys = np.array([knot[1] for knot in ordered], dtype=float)
    return float(np.interp(t, xs, ys))


def generate_price_series(model: StakingModel) -> np.ndarray:
    """
    Generate the price path for steps 0..=horizon_steps.

    Args:
        model: Staking model

    Returns:
        Array of horizon_steps + 1 prices
    """
    n_points = model.horizon_steps + 1
    scenario = model.price_scenario

    if isinstance(scenario, PriceScenarioFlat):
        return np.full(n_points, float(scenario.price))

    if isinstance(scenario, PriceScenarioBullBaseBear):
        # Integer-floor thirds; a horizon shorter than 3 steps is all bear.
        third = model.horizon_steps // 3
        prices = np.empty(n_points)
        for t in range(n_points):
            if t < third:
                multiplier = scenario.bull_multiplier
            elif t < third * 2:
                multiplier = scenario.base_multiplier
            else:
                multiplier = scenario.bear_multiplier
            prices[t] = model.initial_price * multiplier
        return prices

    if isinstance(scenario, PriceScenarioCustom):
        knots = [(point.t, point.price) for point in scenario.series]
        return np.array([interpolate_series(knots, t) for t in range(n_points)], dtype=float)

    return np.full(n_points, float(model.initial_price))
