"""Pydantic schema for staking model configuration.

A ``StakingModel`` is the single input record of the staking engine. It is
frozen: the engine reads it and stress tests derive new models from it with
``model_copy(update=...)`` instead of mutating it in place.

Value ranges are deliberately loose here. Plausibility of fractions, caps and
prices is reported by ``stakeflow.validation.sanity_checks`` rather than
enforced at construction time.
"""

import hashlib
import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Archetype = Literal["consensus", "defi", "liquid_staking", "restaking", "ve_governance"]
TimeStep = Literal["weekly", "monthly"]
ElasticityPreset = Literal["low", "medium", "high", "custom"]

STEPS_PER_YEAR = {"weekly": 52, "monthly": 12}


class FrozenModel(BaseModel):
    """Base for immutable configuration blocks."""
    model_config = ConfigDict(frozen=True, extra="forbid")


# ========== Price scenario ==========

class PriceScenarioFlat(FrozenModel):
    """Constant price for the whole horizon."""
    type: Literal["flat"] = "flat"
    price: float = Field(description="Constant token price (USD)")


class PriceScenarioBullBaseBear(FrozenModel):
    """Three equal phases, each a multiple of the initial price."""
    type: Literal["bull_base_bear"] = "bull_base_bear"
    bull_multiplier: float = Field(description="Price multiplier for the first third")
    base_multiplier: float = Field(description="Price multiplier for the second third")
    bear_multiplier: float = Field(description="Price multiplier for the final third")
    horizon_months: Optional[int] = Field(default=None, description="Informational only")


class PricePoint(FrozenModel):
    t: float = Field(description="Step index of the knot")
    price: float


class PriceScenarioCustom(FrozenModel):
    """User-supplied knots, linearly interpolated."""
    type: Literal["custom_series"] = "custom_series"
    series: List[PricePoint] = Field(default_factory=list)


PriceScenario = Annotated[
    Union[PriceScenarioFlat, PriceScenarioBullBaseBear, PriceScenarioCustom],
    Field(discriminator="type"),
]


# ========== Unlocks ==========

class UnlockEntry(FrozenModel):
    """One-time increase of circulating supply."""
    t: int = Field(ge=0, description="Step at which the unlock lands")
    amount: float = Field(description="Tokens unlocked")


# ========== Rewards ==========

class InflationScheduleEntry(FrozenModel):
    t: int = Field(ge=0, description="First step the rate applies")
    annual_rate: float


class InflationRewards(FrozenModel):
    """Inflation routed to stakers."""
    enabled: bool = True
    annual_inflation_rate: float = Field(description="Flat annual inflation rate (e.g., 0.06 = 6%)")
    distribution_to_stakers_pct: float = Field(description="Share of inflation paid to stakers (0-1)")
    inflation_schedule: Optional[List[InflationScheduleEntry]] = Field(
        default=None, description="Step-keyed rate overrides"
    )


class FeesPoint(FrozenModel):
    t: float
    fees: float


class FeesModelParams(FrozenModel):
    constant_fees: Optional[float] = Field(default=None, description="Fees per step (USD)")
    growth_rate: Optional[float] = Field(default=None, description="Per-step growth if type=grow")
    series: Optional[List[FeesPoint]] = Field(default=None, description="Knots if type=custom_series")


class FeesModel(FrozenModel):
    type: Literal["constant", "grow", "custom_series"]
    params: FeesModelParams = Field(default_factory=FeesModelParams)


class FeesRewards(FrozenModel):
    """Protocol fees shared with stakers. Amounts are USD per step."""
    enabled: bool = True
    fees_per_step: Optional[float] = Field(default=None, description="Flat fees per step (USD); overrides fees_model")
    fees_model: Optional[FeesModel] = None
    fee_share_to_stakers_pct: float = Field(description="Share of fees paid to stakers (0-1)")


class OtherReward(FrozenModel):
    """Any additional named reward stream."""
    name: str
    per_step_amount: float
    denom: Literal["token", "usd"] = "token"
    to_stakers_pct: float = 1.0


class RewardsSources(FrozenModel):
    inflation: InflationRewards
    fees: FeesRewards
    other: List[OtherReward] = Field(default_factory=list)


# ========== Staking mechanics ==========

class LockupOption(FrozenModel):
    lock_steps: int = Field(ge=0)
    boost: float = 1.0


class StakingMechanics(FrozenModel):
    """Protocol-side staking mechanics."""
    unbonding_steps: int = Field(default=0, description="Informational; does not gate flows")
    lockup_options: List[LockupOption] = Field(default_factory=list)
    reward_compounding: Literal["none", "auto"] = "none"
    operator_commission_pct: float = Field(default=0.0, description="Operator commission (0-1)")
    max_stake_pct_of_supply: Optional[float] = Field(default=None, description="Hard cap on stake ratio")


# ========== Demand ==========

class LockupPenaltyModel(FrozenModel):
    type: Literal["linear", "none"] = "none"
    penalty_per_lock_step: float = 0.0


class DemandModel(FrozenModel):
    """Participation response to net yield."""
    opportunity_cost_annual: float = Field(description="Yield stakers forgo elsewhere")
    elasticity_preset: ElasticityPreset = "medium"
    elasticity_k: Optional[float] = Field(default=None, description="Sigmoid steepness when preset is custom")
    base_participation: float = Field(description="Sticky stake ratio and starting ratio")
    max_participation: float = Field(description="Participation ceiling")
    adjustment_speed: float = Field(description="Fraction of gap to target closed per step")
    lockup_penalty_model: LockupPenaltyModel = Field(default_factory=LockupPenaltyModel)
    risk_penalty_annual: float = 0.0


# ========== Risk ==========

class ConcentrationModel(FrozenModel):
    top_n_share_pct: float = 0.0
    num_validators: int = 1


class RiskAssumptions(FrozenModel):
    slash_prob_annual: float = 0.0
    slash_severity_pct: float = 0.0
    smart_contract_risk_annual: float = 0.0
    liquidity_discount_pct: float = 0.0
    concentration_model: ConcentrationModel = Field(default_factory=ConcentrationModel)


# ========== Archetype blocks ==========

class RewardCurveSimple(FrozenModel):
    type: Literal["simple_inverse"] = "simple_inverse"
    target_stake_ratio: float
    apr_at_target: float
    apr_min: float
    apr_max: float


class RewardCurvePoint(FrozenModel):
    stake_ratio: float
    apr: float


class RewardCurveCustom(FrozenModel):
    type: Literal["custom"] = "custom"
    series: List[RewardCurvePoint] = Field(default_factory=list)


class ConsensusConfig(FrozenModel):
    """Base-layer consensus parameters (informational)."""
    reward_curve: Annotated[Union[RewardCurveSimple, RewardCurveCustom], Field(discriminator="type")]
    slashable_pct_of_stake: float = 1.0
    mev_per_step: Optional[float] = None


class TvlPoint(FrozenModel):
    t: float
    tvl: float


class BondRequiredConfig(FrozenModel):
    type: Literal["percent_of_tvl", "fixed_token", "custom_series"]
    tvl_series: Optional[List[TvlPoint]] = None
    fixed_bond_tokens: Optional[float] = None


class DeFiConfig(FrozenModel):
    """DeFi bonding parameters (informational)."""
    mode: Literal["emissions", "bond_required", "lp_staking", "hybrid"]
    bond_required_model: Optional[BondRequiredConfig] = None
    il_haircut_pct: Optional[float] = None


class LiquidStakingConfig(FrozenModel):
    enabled: bool = True
    type: Literal["rebase", "reward_bearing"] = "reward_bearing"
    adoption_max_pct_of_stakers: float = Field(description="Ceiling of LST share among stakers")
    adoption_speed: float = Field(description="Exponential-approach speed per step")
    extra_defi_yield_annual: float = 0.0
    exit_liquidity_limit_pct_per_step: Optional[float] = None
    expected_discount_band_pct: float = 0.0


class RestakingConfig(FrozenModel):
    enabled: bool = True
    max_restake_pct_of_stake: float
    incremental_yield_annual: float
    correlated_slash_prob_annual: float = 0.0
    correlated_slash_severity_pct: float = 0.0


class VELockDuration(FrozenModel):
    steps: int
    voting_power_multiplier: float = 1.0


class VEGovernanceConfig(FrozenModel):
    enabled: bool = True
    lock_durations: List[VELockDuration] = Field(default_factory=list)
    fee_share_to_lockers_pct: float = 0.0
    emissions_directed_by_gauges_pct: float = 0.0
    bribe_yield_annual: float = 0.0
    early_exit_penalty_pct: float = 0.0
    decay_model: Literal["linear", "none"] = "none"
    control_value_annual: Optional[float] = None
    lock_adoption_max_pct_of_supply: float = Field(
        default=0.0, description="Ceiling of vote-escrow locked share of circulating supply"
    )
    lock_adoption_speed: float = Field(
        default=0.0, description="Exponential-approach speed of the locked share per step"
    )


# ========== Top-level model ==========

class StakingModel(FrozenModel):
    """Complete staking dynamics configuration."""
    version: int = 1
    name: str
    description: Optional[str] = None

    archetype: Archetype
    hybrid_mode: bool = False

    token_symbol: str = "TOKEN"
    total_supply: float
    circulating_supply_0: float
    initial_price: float
    price_scenario: PriceScenario

    unlock_schedule: List[UnlockEntry] = Field(default_factory=list)

    time_step: TimeStep = "monthly"
    horizon_steps: int = Field(ge=0, description="Simulation covers steps 0..=horizon_steps")
    discount_rate_annual: Optional[float] = None

    rewards: RewardsSources
    staking: StakingMechanics = Field(default_factory=StakingMechanics)
    demand: DemandModel
    risk: RiskAssumptions = Field(default_factory=RiskAssumptions)

    consensus: Optional[ConsensusConfig] = None
    defi: Optional[DeFiConfig] = None
    liquid_staking: Optional[LiquidStakingConfig] = None
    restaking: Optional[RestakingConfig] = None
    ve_governance: Optional[VEGovernanceConfig] = None

    @field_validator("horizon_steps", mode="before")
    @classmethod
    def coerce_horizon_steps(cls, v):
        """Accept whole-number float horizons from JSON blobs."""
        if isinstance(v, float):
            if not v.is_integer():
                raise ValueError(f"horizon_steps must be a whole number of steps, got {v}")
            return int(v)
        return v

    @property
    def steps_per_year(self) -> int:
        return STEPS_PER_YEAR[self.time_step]

    def enabled_blocks(self) -> List[str]:
        """Names of archetype blocks that are present and enabled."""
        names = []
        if self.consensus is not None:
            names.append("consensus")
        if self.defi is not None:
            names.append("defi")
        if self.liquid_staking is not None and self.liquid_staking.enabled:
            names.append("liquid_staking")
        if self.restaking is not None and self.restaking.enabled:
            names.append("restaking")
        if self.ve_governance is not None and self.ve_governance.enabled:
            names.append("ve_governance")
        return names

    def compute_hash(self) -> str:
        """Compute model hash for reproducibility."""
        model_dict = self.model_dump(mode="json")
        model_str = json.dumps(model_dict, sort_keys=True)
        return hashlib.sha256(model_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StakingModel':
        """Create model from dictionary."""
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump(mode="json")
