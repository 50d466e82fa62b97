"""Core domain models for the behind-the-meter engine.

All models use Pydantic and are immutable. Units:
- Power: kW
- Energy: kWh (one simulated step is one hour, so kW and kWh per step coincide)
- Rates and percentages: fractions (0.09, not 9)
"""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Type Aliases with Validation
# =============================================================================

PowerKW = Annotated[float, Field(ge=0, description="Power in kilowatts (kW)")]
EnergyKWh = Annotated[float, Field(ge=0, description="Energy in kilowatt-hours")]
Fraction = Annotated[float, Field(ge=0, le=1, description="Fraction (0-1)")]
HourOfDay = Annotated[int, Field(ge=0, le=24, description="Hour boundary (0-24)")]


# =============================================================================
# Enums
# =============================================================================


class DispatchStrategy(str, Enum):
    """Battery operating strategies."""

    SELF_CONSUMPTION = "self_consumption"
    TOU_ARBITRAGE = "tou_arbitrage"
    PEAK_SHAVING = "peak_shaving"
    SCHEDULED = "scheduled"


# =============================================================================
# Battery
# =============================================================================


class BatteryConfig(BaseModel):
    """Behind-the-meter battery configuration.

    The battery is modelled as lossless: energy in equals energy stored.
    """

    model_config = ConfigDict(frozen=True)

    capacity_kwh: EnergyKWh = 0.0
    power_kw: PowerKW = 0.0
    min_soc_fraction: Fraction = 0.10
    max_soc_fraction: Fraction = 0.95
    initial_soc_fraction: Fraction = 0.50

    @property
    def usable_capacity_kwh(self) -> float:
        """Usable capacity accounting for SOC limits."""
        return max(
            0.0, self.capacity_kwh * (self.max_soc_fraction - self.min_soc_fraction)
        )


class BatteryState(BaseModel):
    """Battery state carried from one hour to the next.

    A new state is produced every hour; nothing mutates an existing one.
    """

    model_config = ConfigDict(frozen=True)

    level_kwh: float
    min_level_kwh: float
    max_level_kwh: float
    power_kw: float
    capacity_kwh: float = 0.0

    @property
    def charge_headroom_kwh(self) -> float:
        """Energy the battery can accept this hour (power and SOC limited)."""
        return max(0.0, min(self.max_level_kwh - self.level_kwh, self.power_kw))

    @property
    def discharge_headroom_kwh(self) -> float:
        """Energy the battery can deliver this hour (power and SOC limited)."""
        return max(0.0, min(self.level_kwh - self.min_level_kwh, self.power_kw))

    @property
    def soc_fraction(self) -> float:
        """State of charge as a fraction of nameplate capacity."""
        if self.capacity_kwh <= 0:
            return 0.0
        return self.level_kwh / self.capacity_kwh


# =============================================================================
# Dispatch
# =============================================================================


class TimeWindow(BaseModel):
    """An hour-of-day range ``[start, end)``; wraps midnight when start > end."""

    model_config = ConfigDict(frozen=True)

    start: HourOfDay
    end: HourOfDay

    @property
    def wraps_midnight(self) -> bool:
        return self.start > self.end


class DispatchConfig(BaseModel):
    """Per-run dispatch rules shared by every hour of a simulation."""

    model_config = ConfigDict(frozen=True)

    charge_windows: tuple[TimeWindow, ...] = ()
    discharge_windows: tuple[TimeWindow, ...] = ()
    allow_grid_charging: bool = False
    peak_shaving_target_kw: PowerKW | None = None


class HourlyResult(BaseModel):
    """Energy flows for a single simulated hour.

    ``battery_charge`` includes the grid-sourced part ``grid_to_battery``.
    ``unmet_load`` and ``curtailed`` are only non-zero when the grid is
    unavailable or export is constrained.
    """

    model_config = ConfigDict(frozen=True)

    hour: int
    load: float
    solar: float
    grid_import: float = 0.0
    grid_export: float = 0.0
    solar_used: float = 0.0
    battery_charge: float = 0.0
    battery_discharge: float = 0.0
    resulting_soc_kwh: float = 0.0
    net_load: float = 0.0
    grid_to_battery: float = 0.0
    unmet_load: float = 0.0
    curtailed: float = 0.0
    grid_available: bool = True

    @property
    def solar_to_battery(self) -> float:
        return self.battery_charge - self.grid_to_battery

    def load_balance_error(self) -> float:
        """Residual of the load-side energy balance (zero when conserved)."""
        supplied = (
            self.solar_used
            + self.battery_discharge
            + (self.grid_import - self.grid_to_battery)
            + self.unmet_load
        )
        return self.load - supplied

    def solar_balance_error(self) -> float:
        """Residual of the solar-side energy balance (zero when conserved)."""
        allocated = (
            self.solar_used + self.solar_to_battery + self.grid_export + self.curtailed
        )
        return self.solar - allocated


# =============================================================================
# Financial Projection
# =============================================================================


class YearlyProjection(BaseModel):
    """One row of the multi-year projection table.

    ``energy_income`` is the avoided purchase cost net of ``grid_charge_cost``,
    the grid energy bought to charge the battery.
    """

    model_config = ConfigDict(frozen=True)

    year: int
    panel_efficiency: float
    battery_capacity: float
    energy_yield_kwh: float
    load_kwh: float
    revenue_kwh: float
    export_kwh: float
    energy_rate: float
    demand_rate: float
    grid_charge_kwh: float = 0.0
    grid_charge_cost: float = 0.0
    energy_income: float
    demand_income: float
    export_income: float
    om_cost: float
    insurance_cost: float
    replacement_cost: float
    net_cashflow: float
    cumulative_cashflow: float
    pv_factor: float
    discounted_cashflow: float
    discounted_energy_yield_kwh: float

    @property
    def total_income(self) -> float:
        return self.energy_income + self.demand_income + self.export_income

    @property
    def total_cost(self) -> float:
        """Recurring costs; replacements are reported separately."""
        return self.om_cost + self.insurance_cost


class ColumnTotals(BaseModel):
    """Lifetime sums of the projection table columns."""

    model_config = ConfigDict(frozen=True)

    total_energy_yield_kwh: float = 0.0
    npv_energy_yield_kwh: float = 0.0
    total_income: float = 0.0
    total_insurance: float = 0.0
    total_om: float = 0.0
    total_replacements: float = 0.0
    total_costs: float = 0.0
    total_net_cashflow: float = 0.0

    @classmethod
    def from_projections(cls, projections: list[YearlyProjection]) -> "ColumnTotals":
        return cls(
            total_energy_yield_kwh=sum(p.energy_yield_kwh for p in projections),
            npv_energy_yield_kwh=sum(
                p.discounted_energy_yield_kwh for p in projections
            ),
            total_income=sum(p.total_income for p in projections),
            total_insurance=sum(p.insurance_cost for p in projections),
            total_om=sum(p.om_cost for p in projections),
            total_replacements=sum(p.replacement_cost for p in projections),
            total_costs=sum(p.total_cost for p in projections),
            total_net_cashflow=sum(p.net_cashflow for p in projections),
        )


class SensitivityCase(BaseModel):
    """Investment metrics for one income/cost scaling of the cash flows."""

    model_config = ConfigDict(frozen=True)

    name: str
    income_multiplier: float
    cost_multiplier: float
    npv: float
    irr: float
    payback_years: float


class SensitivityResult(BaseModel):
    """Expected, optimistic and pessimistic cases."""

    model_config = ConfigDict(frozen=True)

    expected: SensitivityCase
    best: SensitivityCase
    worst: SensitivityCase


class FinancialResult(BaseModel):
    """Aggregate investment metrics for a project."""

    model_config = ConfigDict(frozen=True)

    initial_cost: float
    npv: float
    irr: float
    mirr: float
    lcoe: float
    payback_years: float
    totals: ColumnTotals
    projections: tuple[YearlyProjection, ...] = ()
    sensitivity: SensitivityResult | None = None

    @property
    def cashflows(self) -> list[float]:
        """Cash flow vector with the capital outlay at t=0."""
        return [-self.initial_cost] + [p.net_cashflow for p in self.projections]
