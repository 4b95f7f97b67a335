"""Staking model loader from YAML."""

from pathlib import Path
from typing import Any, Dict, List

import yaml

from .schema import StakingModel

PRESETS_PATH = Path(__file__).parent / "presets.yaml"


def _read_presets(yaml_path: Path = PRESETS_PATH) -> List[Dict[str, Any]]:
    with open(yaml_path, 'r') as f:
        data = yaml.safe_load(f)
    return data.get("presets", [])


def list_presets() -> List[str]:
    """Names of the bundled staking presets, in catalog order."""
    return [preset["name"] for preset in _read_presets()]


def load_preset(name: str) -> StakingModel:
    """
    Load a bundled staking preset by name.

    Args:
        name: Preset name (e.g., "L1 PoS Conservative")

    Returns:
        StakingModel object
    """
    for preset in _read_presets():
        if preset["name"] == name:
            return StakingModel.from_dict(preset["model"])
    raise ValueError(f"Unknown preset: {name}")


def load_model(yaml_path: str) -> StakingModel:
    """
    Load a staking model from a YAML file.

    The file holds a single model mapping, or a preset entry with a
    ``model`` key.

    Args:
        yaml_path: Path to YAML file

    Returns:
        StakingModel object
    """
    with open(yaml_path, 'r') as f:
        data = yaml.safe_load(f)

    if "model" in data:
        data = data["model"]
    return StakingModel.from_dict(data)


def model_from_dict(data: Dict[str, Any]) -> StakingModel:
    """
    Create a staking model from a dictionary.

    Args:
        data: Model dictionary

    Returns:
        StakingModel object
    """
    return StakingModel.from_dict(data)
