"""Staking dynamics workbench."""

from .adversarial.stress import run_stress_test
from .config.loader import load_preset
from .config.schema import StakingModel
from .simulation.runner import StakingOutputs, compute_staking_series

__version__ = "1.0.0"

__all__ = [
    "StakingModel",
    "StakingOutputs",
    "compute_staking_series",
    "load_preset",
    "run_stress_test",
]
