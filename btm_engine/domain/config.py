"""Tariff, cost and advanced-modelling configuration.

Every default is resolved when a model is constructed; there is no global
settings lookup. Rates are fractions (0.10 means 10%).
"""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from btm_engine.domain.models import EnergyKWh, Fraction, PowerKW

Money = Annotated[float, Field(ge=0, description="Currency amount")]
Rate = Annotated[float, Field(ge=-0.99, description="Annual rate as a fraction")]

DEFAULT_IRRADIANCE_FACTORS: tuple[float, ...] = (
    1.15, 1.10, 1.05, 0.95, 0.85, 0.80, 0.82, 0.90, 1.00, 1.08, 1.15, 1.15,
)  # fmt: skip


# =============================================================================
# Tariff and Costs
# =============================================================================


class Tariff(BaseModel):
    """Electricity tariff seen by the site.

    ``hourly_rates`` optionally replaces the flat ``average_rate_per_kwh``
    with a 24-entry time-segmented energy rate.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "default"
    average_rate_per_kwh: Money = 2.50
    hourly_rates: tuple[float, ...] | None = None
    demand_charge_per_kva: Money = 0.0
    fixed_monthly_charge: Money = 0.0
    export_rate_per_kwh: Money = 0.0

    @field_validator("hourly_rates")
    @classmethod
    def _check_hourly_rates(
        cls, value: tuple[float, ...] | None
    ) -> tuple[float, ...] | None:
        if value is not None and len(value) != 24:
            raise ValueError(f"hourly_rates must have 24 entries, got {len(value)}")
        return value

    def rate_for_hour(self, hour: int) -> float:
        """Energy rate applicable at an hour of day."""
        if self.hourly_rates is None:
            return self.average_rate_per_kwh
        return self.hourly_rates[hour % 24]

    def blended_rate(self, hourly_kwh: list[float]) -> float:
        """Energy-weighted rate over a profile; the average rate if it has no energy."""
        if self.hourly_rates is None:
            return self.average_rate_per_kwh
        total = sum(hourly_kwh)
        if total <= 0:
            return self.average_rate_per_kwh
        weighted = sum(kwh * self.rate_for_hour(i) for i, kwh in enumerate(hourly_kwh))
        return weighted / total


class SystemCosts(BaseModel):
    """Installed cost structure and lifecycle cost assumptions."""

    model_config = ConfigDict(frozen=True)

    solar_cost_per_kwp: Money = 11000.0
    battery_cost_per_kwh: Money = 7500.0
    additional_fixed_costs: Money = 0.0

    # O&M: a fixed amount when given, otherwise a share of each capex
    maintenance_per_year: Money | None = None
    solar_maintenance_rate: Fraction = 0.035
    battery_maintenance_rate: Fraction = 0.015
    insurance_rate: Fraction = 0.01

    professional_fees_rate: Fraction = 0.05
    project_management_rate: Fraction = 0.03
    contingency_rate: Fraction = 0.05

    # Mid-life replacement
    replacement_year: Annotated[int, Field(ge=1)] = 10
    equipment_cost_share: Fraction = 0.45
    module_share: Fraction = 0.70
    inverter_share: Fraction = 0.30
    module_replacement_share: Fraction = 0.10
    inverter_replacement_share: Fraction = 0.50
    battery_replacement_share: Fraction = 0.30

    def solar_capex(self, solar_kwp: float) -> float:
        return solar_kwp * self.solar_cost_per_kwp

    def battery_capex(self, battery_kwh: float) -> float:
        return battery_kwh * self.battery_cost_per_kwh

    def annual_maintenance(self, solar_kwp: float, battery_kwh: float) -> float:
        """Year-one O&M cost."""
        if self.maintenance_per_year is not None:
            return self.maintenance_per_year
        return (
            self.solar_capex(solar_kwp) * self.solar_maintenance_rate
            + self.battery_capex(battery_kwh) * self.battery_maintenance_rate
        )


# =============================================================================
# Advanced Modelling
# =============================================================================


class DegradationMode(str, Enum):
    """How yearly degradation rates are specified."""

    SIMPLE = "simple"  # One constant rate per year
    YEARLY = "yearly"  # Explicit rate for each year


class SeasonalConfig(BaseModel):
    """Monthly irradiance and demand scaling."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    monthly_irradiance_factors: tuple[float, ...] = DEFAULT_IRRADIANCE_FACTORS
    high_demand_months: frozenset[int] = frozenset({6, 7, 8})  # 1-indexed
    high_demand_load_multiplier: Annotated[float, Field(gt=0)] = 1.05
    low_demand_load_multiplier: Annotated[float, Field(gt=0)] = 0.98

    @field_validator("monthly_irradiance_factors")
    @classmethod
    def _check_factors(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        if len(value) != 12:
            raise ValueError(f"expected 12 monthly factors, got {len(value)}")
        return value


class DegradationConfig(BaseModel):
    """Panel and battery performance loss over the project life."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False

    panel_mode: DegradationMode = DegradationMode.SIMPLE
    panel_simple_rate: Fraction = 0.005
    panel_yearly_rates: tuple[float, ...] = Field(
        default_factory=lambda: (0.02,) + (0.005,) * 19
    )

    battery_mode: DegradationMode = DegradationMode.SIMPLE
    battery_simple_rate: Fraction = 0.03
    battery_yearly_rates: tuple[float, ...] = Field(
        default_factory=lambda: (0.03,) * 20
    )
    battery_eol_capacity: Fraction = 0.70


class FinancialConfig(BaseModel):
    """Escalation, discounting and sensitivity assumptions."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    tariff_escalation_rate: Rate = 0.10
    inflation_rate: Rate = 0.06
    discount_rate: Rate = 0.09
    lcoe_discount_rate: Rate | None = None
    mirr_finance_rate: Rate = 0.09
    mirr_reinvestment_rate: Rate = 0.10
    project_lifetime_years: Annotated[int, Field(ge=1, le=50)] = 20

    sensitivity_enabled: bool = False
    sensitivity_variation: Fraction = 0.20

    insurance_enabled: bool = True
    base_insurance_cost: Money = 0.0
    insurance_escalation_rate: Rate | None = None

    @property
    def effective_lcoe_discount_rate(self) -> float:
        if self.lcoe_discount_rate is None:
            return self.discount_rate
        return self.lcoe_discount_rate

    @property
    def effective_insurance_escalation_rate(self) -> float:
        if self.insurance_escalation_rate is None:
            return self.inflation_rate
        return self.insurance_escalation_rate


class GridConstraintsConfig(BaseModel):
    """Utility limits on exporting surplus energy."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    max_export_kw: PowerKW = 100.0
    export_limit_enabled: bool = False
    restricted_export_hours: frozenset[int] = frozenset()
    export_restrictions_enabled: bool = False
    wheeling_charge_per_kwh: Money = 0.30
    wheeling_enabled: bool = False

    def export_allowance(self, hour: int) -> float | None:
        """Maximum export for an hour of day, or None when unconstrained."""
        if not self.enabled:
            return None
        if self.export_restrictions_enabled and hour in self.restricted_export_hours:
            return 0.0
        if self.export_limit_enabled:
            return self.max_export_kw
        return None


class LoadGrowthConfig(BaseModel):
    """Year-on-year consumption growth plus an optional new tenant."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    annual_growth_rate: Rate = 0.02
    new_tenant_enabled: bool = False
    new_tenant_year: Annotated[int, Field(ge=1)] = 3
    new_tenant_kwh_per_month: EnergyKWh = 5000.0


class AdvancedConfig(BaseModel):
    """Bundle of independently switchable modelling features."""

    model_config = ConfigDict(frozen=True)

    seasonal: SeasonalConfig = Field(default_factory=SeasonalConfig)
    degradation: DegradationConfig = Field(default_factory=DegradationConfig)
    financial: FinancialConfig = Field(default_factory=FinancialConfig)
    grid_constraints: GridConstraintsConfig = Field(
        default_factory=GridConstraintsConfig
    )
    load_growth: LoadGrowthConfig = Field(default_factory=LoadGrowthConfig)


# =============================================================================
# Presets
# =============================================================================


def conservative_preset() -> AdvancedConfig:
    """Higher degradation, slower escalation, expensive capital."""
    return AdvancedConfig(
        seasonal=SeasonalConfig(
            enabled=True,
            high_demand_load_multiplier=1.08,
            low_demand_load_multiplier=0.95,
        ),
        degradation=DegradationConfig(
            enabled=True,
            panel_simple_rate=0.007,
            battery_simple_rate=0.04,
            battery_eol_capacity=0.70,
        ),
        financial=FinancialConfig(
            tariff_escalation_rate=0.08,
            inflation_rate=0.065,
            discount_rate=0.12,
            project_lifetime_years=20,
            sensitivity_enabled=True,
            sensitivity_variation=0.25,
            insurance_enabled=False,
        ),
        load_growth=LoadGrowthConfig(enabled=True, annual_growth_rate=0.01),
    )


def optimistic_preset() -> AdvancedConfig:
    """Lower degradation, faster escalation, cheap capital, longer life."""
    return AdvancedConfig(
        seasonal=SeasonalConfig(
            enabled=True,
            high_demand_load_multiplier=1.03,
            low_demand_load_multiplier=0.98,
        ),
        degradation=DegradationConfig(
            enabled=True,
            panel_simple_rate=0.004,
            battery_simple_rate=0.025,
            battery_eol_capacity=0.75,
        ),
        financial=FinancialConfig(
            tariff_escalation_rate=0.12,
            inflation_rate=0.045,
            discount_rate=0.08,
            project_lifetime_years=30,
            sensitivity_enabled=True,
            sensitivity_variation=0.15,
            insurance_enabled=False,
        ),
        load_growth=LoadGrowthConfig(enabled=True, annual_growth_rate=0.03),
    )


def market_standard_preset() -> AdvancedConfig:
    """Typical South African market assumptions."""
    return AdvancedConfig(
        seasonal=SeasonalConfig(enabled=True),
        degradation=DegradationConfig(
            enabled=True,
            panel_simple_rate=0.005,
            battery_simple_rate=0.03,
            battery_eol_capacity=0.70,
        ),
        financial=FinancialConfig(
            tariff_escalation_rate=0.10,
            inflation_rate=0.055,
            discount_rate=0.10,
            project_lifetime_years=20,
            sensitivity_enabled=True,
            sensitivity_variation=0.20,
            insurance_enabled=False,
        ),
        grid_constraints=GridConstraintsConfig(enabled=True),
        load_growth=LoadGrowthConfig(enabled=True, annual_growth_rate=0.02),
    )


PRESETS = {
    "conservative": conservative_preset,
    "optimistic": optimistic_preset,
    "market_standard": market_standard_preset,
}


def get_preset(name: str) -> AdvancedConfig:
    """Build a fresh preset configuration by name.

    Raises:
        KeyError: If the preset is unknown.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise KeyError(
            f"Unknown preset {name!r}; choose from {sorted(PRESETS)}"
        ) from None
    return factory()
