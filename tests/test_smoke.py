"""Smoke tests for core staking workbench modules.

These tests verify basic functionality without deep validation.
Run these first to catch obvious breakage.
"""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from pydantic import ValidationError

from stakeflow.config.loader import list_presets, load_model, load_preset, model_from_dict
from stakeflow.config.schema import PriceScenarioBullBaseBear, StakingModel
from stakeflow.simulation.runner import StakingOutputs, compute_staking_series

from conftest import BASE_MODEL, make_model


EXPECTED_PRESETS = [
    "L1 PoS Conservative",
    "L1 PoS Aggressive",
    "DeFi Emissions Farm",
    "App Bond Required",
    "Liquid Staking Enabled",
    "veTokenomics",
]


class TestPresetLoading:
    """Smoke tests for the bundled preset catalog."""

    def test_list_presets(self):
        """All six presets are bundled, in catalog order."""
        assert list_presets() == EXPECTED_PRESETS

    @pytest.mark.parametrize("name", EXPECTED_PRESETS)
    def test_load_each_preset(self, name):
        """Every preset validates into a StakingModel."""
        model = load_preset(name)
        assert isinstance(model, StakingModel)
        assert model.name == name

    def test_unknown_preset_raises(self):
        """Unknown preset names are rejected."""
        with pytest.raises(ValueError, match="Unknown preset"):
            load_preset("Not A Preset")

    def test_preset_price_scenario_variant(self):
        """Discriminated price scenarios resolve to the right class."""
        model = load_preset("L1 PoS Aggressive")
        assert isinstance(model.price_scenario, PriceScenarioBullBaseBear)
        assert model.price_scenario.bull_multiplier == 2.0

    def test_steps_per_year(self):
        """Monthly models have 12 steps per year, weekly 52."""
        assert model_from_dict(BASE_MODEL).steps_per_year == 12
        weekly = dict(BASE_MODEL, time_step="weekly")
        assert model_from_dict(weekly).steps_per_year == 52

    def test_load_model_from_yaml(self, tmp_path):
        """A model YAML file round-trips through the loader."""
        import yaml

        path = tmp_path / "model.yaml"
        path.write_text(yaml.safe_dump(BASE_MODEL))
        model = load_model(str(path))
        assert model.name == "Test Chain"
        assert model.horizon_steps == 24


class TestModelSchema:
    """Smoke tests for schema behavior."""

    def test_model_is_frozen(self):
        """Engine input cannot be mutated in place."""
        model = model_from_dict(BASE_MODEL)
        with pytest.raises(ValidationError):
            model.horizon_steps = 10

    def test_hash_is_deterministic(self):
        """Same model produces same hash."""
        assert model_from_dict(BASE_MODEL).compute_hash() == model_from_dict(BASE_MODEL).compute_hash()

    def test_hash_changes_with_content(self):
        """Different models produce different hashes."""
        other = dict(BASE_MODEL, horizon_steps=12)
        assert model_from_dict(BASE_MODEL).compute_hash() != model_from_dict(other).compute_hash()

    def test_unknown_archetype_rejected(self):
        """Archetype tags form a closed set."""
        with pytest.raises(ValidationError):
            model_from_dict(dict(BASE_MODEL, archetype="proof_of_work"))

    def test_missing_required_block_rejected(self):
        """Structurally incomplete models fail at construction."""
        data = dict(BASE_MODEL)
        del data["demand"]
        with pytest.raises(ValidationError):
            model_from_dict(data)

    def test_whole_number_horizon_coerced(self):
        """Float horizons from JSON are accepted when whole."""
        assert model_from_dict(dict(BASE_MODEL, horizon_steps=12.0)).horizon_steps == 12

    def test_fractional_horizon_rejected(self):
        """A fractional horizon is an error, never truncated."""
        with pytest.raises(ValidationError, match="whole number"):
            model_from_dict(dict(BASE_MODEL, horizon_steps=3.7))

    def test_price_scenario_override_replaces_variant(self):
        """Switching scenario type keeps none of the flat scenario's fields."""
        model = make_model(price_scenario={
            "type": "bull_base_bear",
            "bull_multiplier": 2.0,
            "base_multiplier": 1.0,
            "bear_multiplier": 0.5,
        })
        assert isinstance(model.price_scenario, PriceScenarioBullBaseBear)

        custom = make_model(price_scenario={"type": "custom_series", "series": [{"t": 0, "price": 1.5}]})
        assert custom.price_scenario.series[0].price == 1.5

    def test_to_dict_roundtrip(self):
        """to_dict output rebuilds an equal model."""
        model = model_from_dict(BASE_MODEL)
        assert StakingModel.from_dict(model.to_dict()) == model

    def test_enabled_blocks(self):
        """Only present and enabled archetype blocks are listed."""
        model = load_preset("Liquid Staking Enabled")
        assert model.enabled_blocks() == ["liquid_staking"]


class TestSimulationRunner:
    """Smoke tests for a full run."""

    @pytest.mark.parametrize("name", EXPECTED_PRESETS)
    def test_run_each_preset(self, name):
        """Every preset simulates to completion."""
        model = load_preset(name)
        outputs = compute_staking_series(model)
        assert isinstance(outputs, StakingOutputs)
        assert len(outputs.steps) == model.horizon_steps + 1

    def test_top_level_exports(self):
        """Package root exposes the primary operations."""
        import stakeflow

        assert stakeflow.compute_staking_series is compute_staking_series
        assert callable(stakeflow.run_stress_test)
        assert callable(stakeflow.load_preset)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
