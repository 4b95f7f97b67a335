"""Shared fixtures for staking workbench tests."""

import copy
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from stakeflow.config.schema import StakingModel


BASE_MODEL = {
    "name": "Test Chain",
    "archetype": "consensus",
    "token_symbol": "TEST",
    "total_supply": 10_000_000,
    "circulating_supply_0": 1_000_000,
    "initial_price": 2.0,
    "price_scenario": {"type": "flat", "price": 2.0},
    "unlock_schedule": [{"t": 12, "amount": 100_000}],
    "time_step": "monthly",
    "horizon_steps": 24,
    "rewards": {
        "inflation": {
            "enabled": True,
            "annual_inflation_rate": 0.12,
            "distribution_to_stakers_pct": 1.0,
        },
        "fees": {
            "enabled": True,
            "fees_per_step": 2000,
            "fee_share_to_stakers_pct": 0.5,
        },
        "other": [],
    },
    "staking": {"operator_commission_pct": 0.1},
    "demand": {
        "opportunity_cost_annual": 0.05,
        "elasticity_preset": "medium",
        "base_participation": 0.4,
        "max_participation": 0.8,
        "adjustment_speed": 0.2,
    },
    "risk": {},
}


def _merge(target: dict, updates: dict) -> dict:
    # Tagged unions (price scenarios, fee models) are replaced whole
    for key, value in updates.items():
        if isinstance(value, dict) and "type" not in value and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value
    return target


def make_model(**updates) -> StakingModel:
    """Build a StakingModel from BASE_MODEL with nested overrides."""
    data = _merge(copy.deepcopy(BASE_MODEL), updates)
    return StakingModel.from_dict(data)


@pytest.fixture
def base_model() -> StakingModel:
    return make_model()
