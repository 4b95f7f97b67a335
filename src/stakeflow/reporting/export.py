"""Export functionality for CSV and JSON."""

import json
from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from ..config.schema import StakingModel
from ..simulation.runner import StakingOutputs


def outputs_to_frame(outputs: StakingOutputs, model: StakingModel = None) -> pd.DataFrame:
    """
    Convert step records to a DataFrame.

    Args:
        outputs: Staking run outputs
        model: Optional model; adds a t_years column when given

    Returns:
        DataFrame with one row per step
    """
    df = outputs.to_frame()
    if model is not None and not df.empty:
        df['t_years'] = df['t'] / model.steps_per_year
    return df


def export_csv(outputs: StakingOutputs, filepath: str, model: StakingModel = None):
    """Export step records to CSV."""
    df = outputs_to_frame(outputs, model)
    df.to_csv(filepath, index=False)


def outputs_to_dict(outputs: StakingOutputs, model: StakingModel = None) -> Dict[str, Any]:
    """JSON-ready representation of a run."""
    export_data = {
        'steps': [asdict(step) for step in outputs.steps],
        'cohorts': [asdict(cohort) for cohort in outputs.cohorts],
        'metadata': asdict(outputs.metadata),
    }
    if model is not None:
        export_data = {
            'model': model.to_dict(),
            'model_hash': model.compute_hash(),
            **export_data,
        }
    return export_data


def export_json(outputs: StakingOutputs, filepath: str, model: StakingModel = None):
    """Export a run (and optionally its model) to JSON."""
    with open(filepath, 'w') as f:
        json.dump(outputs_to_dict(outputs, model), f, indent=2)
