"""Year-by-year projection of energy, income and cost.

Every row depends only on its year index and the static inputs; the running
cumulative cash flow is the one value carried from year to year.
"""

from dataclasses import dataclass

from btm_engine.battery.degradation import DegradationModel
from btm_engine.domain.config import AdvancedConfig, LoadGrowthConfig, SystemCosts
from btm_engine.domain.models import YearlyProjection

POWER_FACTOR = 0.9
EXPORT_HOURS_PER_DAY = 5
MONTHS_PER_YEAR = 12
DAYS_PER_YEAR = 365


def escalation_index(rate: float, year: int) -> float:
    """Compound escalation ``(1+rate)^(year-1)``; 1.0 in year 1."""
    return (1.0 + rate) ** max(0, year - 1)


def yearly_load(base_load_kwh: float, year: int, growth: LoadGrowthConfig) -> float:
    """Annual site load in a project year, including any new tenant."""
    if not growth.enabled:
        return base_load_kwh
    load = base_load_kwh * escalation_index(growth.annual_growth_rate, year)
    if growth.new_tenant_enabled and year >= growth.new_tenant_year:
        load += growth.new_tenant_kwh_per_month * MONTHS_PER_YEAR
    return load


def capital_cost(costs: SystemCosts, solar_kwp: float, battery_kwh: float) -> float:
    """Installed project cost including fees and contingency.

    Fees apply to equipment plus fixed costs; contingency applies on top of
    the fee-inclusive subtotal.
    """
    subtotal = (
        costs.solar_capex(solar_kwp)
        + costs.battery_capex(battery_kwh)
        + costs.additional_fixed_costs
    )
    fees = subtotal * (costs.professional_fees_rate + costs.project_management_rate)
    return (subtotal + fees) * (1.0 + costs.contingency_rate)


def replacement_cost(
    year: int,
    costs: SystemCosts,
    solar_kwp: float,
    battery_kwh: float,
    inflation_rate: float,
) -> float:
    """Mid-life module, inverter and battery replacement cost for a year.

    Non-zero only in the configured replacement year, escalated by CPI.
    """
    if year != costs.replacement_year:
        return 0.0

    equipment = costs.solar_capex(solar_kwp) * costs.equipment_cost_share
    modules = equipment * costs.module_share * costs.module_replacement_share
    inverters = equipment * costs.inverter_share * costs.inverter_replacement_share
    battery = costs.battery_capex(battery_kwh) * costs.battery_replacement_share

    return (modules + inverters + battery) * escalation_index(inflation_rate, year)


@dataclass
class BaseYear:
    """Year-one energy and demand quantities derived from a simulation.

    Attributes:
        energy_yield_kwh: Annual solar generation.
        load_kwh: Annual site load.
        solar_used_kwh: Solar consumed directly by the load.
        battery_discharge_kwh: Battery energy delivered to the load.
        export_kwh: Annual grid export.
        demand_saving_kva: Reduction in billed peak demand.
        energy_rate: Year-one energy rate per kWh.
        demand_rate: Year-one demand charge per kVA per month.
        export_rate: Year-one export rate per kWh.
        grid_charge_kwh: Grid energy bought to charge the battery.
        grid_charge_rate: Year-one rate paid for that grid energy.
    """

    energy_yield_kwh: float
    load_kwh: float
    solar_used_kwh: float
    battery_discharge_kwh: float
    export_kwh: float
    demand_saving_kva: float
    energy_rate: float
    demand_rate: float
    export_rate: float = 0.0
    grid_charge_kwh: float = 0.0
    grid_charge_rate: float = 0.0

    @staticmethod
    def demand_saving(peak_load_kw: float, peak_import_kw: float) -> float:
        return max(0.0, (peak_load_kw - peak_import_kw) / POWER_FACTOR)


class FinancialProjector:
    """Build the yearly projection table for a project.

    Args:
        base: Year-one energy and tariff quantities.
        costs: System cost structure.
        solar_kwp: Installed solar capacity.
        battery_kwh: Installed battery capacity.
        advanced: Advanced modelling configuration.
    """

    def __init__(
        self,
        base: BaseYear,
        costs: SystemCosts,
        solar_kwp: float,
        battery_kwh: float,
        advanced: AdvancedConfig | None = None,
    ) -> None:
        self.base = base
        self.costs = costs
        self.solar_kwp = solar_kwp
        self.battery_kwh = battery_kwh
        self.advanced = advanced or AdvancedConfig()
        self.degradation = DegradationModel(self.advanced.degradation)

    @property
    def initial_cost(self) -> float:
        return capital_cost(self.costs, self.solar_kwp, self.battery_kwh)

    @property
    def lifetime_years(self) -> int:
        return self.advanced.financial.project_lifetime_years

    def _rates(self) -> tuple[float, float, float]:
        """Tariff escalation, CPI and insurance escalation (zero when disabled)."""
        financial = self.advanced.financial
        if not financial.enabled:
            return 0.0, 0.0, 0.0
        return (
            financial.tariff_escalation_rate,
            financial.inflation_rate,
            financial.effective_insurance_escalation_rate,
        )

    def _base_insurance(self) -> float:
        financial = self.advanced.financial
        if not financial.insurance_enabled:
            return 0.0
        if financial.base_insurance_cost > 0:
            return financial.base_insurance_cost
        return self.initial_cost * self.costs.insurance_rate

    def _export_cap(self) -> float | None:
        constraints = self.advanced.grid_constraints
        if not (constraints.enabled and constraints.export_limit_enabled):
            return None
        return constraints.max_export_kw * DAYS_PER_YEAR * EXPORT_HOURS_PER_DAY

    def _wheeling_charge(self) -> float:
        constraints = self.advanced.grid_constraints
        if constraints.enabled and constraints.wheeling_enabled:
            return constraints.wheeling_charge_per_kwh
        return 0.0

    def project_year(self, year: int, previous_cumulative: float) -> YearlyProjection:
        """Project a single year given the cumulative cash flow before it."""
        base = self.base
        financial = self.advanced.financial
        tariff_rate, cpi_rate, insurance_rate = self._rates()

        panel = self.degradation.panel_efficiency(year)
        battery = self.degradation.battery_capacity(year)
        load = yearly_load(base.load_kwh, year, self.advanced.load_growth)

        storage = min(panel, battery)
        revenue_kwh = min(
            base.solar_used_kwh * panel + base.battery_discharge_kwh * storage,
            load,
        )
        # Grid charge shrinks with the battery's usable throughput
        grid_charge_kwh = base.grid_charge_kwh * storage
        export_kwh = base.export_kwh * panel
        cap = self._export_cap()
        if cap is not None:
            export_kwh = min(export_kwh, cap)

        tariff_index = escalation_index(tariff_rate, year)
        energy_rate = base.energy_rate * tariff_index
        demand_rate = base.demand_rate * tariff_index
        export_rate = base.export_rate * tariff_index

        grid_charge_cost = grid_charge_kwh * base.grid_charge_rate * tariff_index
        energy_income = revenue_kwh * energy_rate - grid_charge_cost
        demand_income = base.demand_saving_kva * demand_rate * MONTHS_PER_YEAR
        export_income = export_kwh * (export_rate - self._wheeling_charge())

        om_cost = self.costs.annual_maintenance(
            self.solar_kwp, self.battery_kwh
        ) * escalation_index(cpi_rate, year)
        insurance_cost = self._base_insurance() * escalation_index(insurance_rate, year)
        replacement = 0.0
        if self.advanced.degradation.enabled:
            replacement = replacement_cost(
                year, self.costs, self.solar_kwp, self.battery_kwh, cpi_rate
            )

        income = energy_income + demand_income + export_income
        net = income - om_cost - insurance_cost - replacement
        pv_factor = 1.0 / (1.0 + financial.discount_rate) ** year
        energy_yield = base.energy_yield_kwh * panel
        lcoe_factor = 1.0 / (1.0 + financial.effective_lcoe_discount_rate) ** year

        return YearlyProjection(
            year=year,
            panel_efficiency=panel,
            battery_capacity=battery,
            energy_yield_kwh=energy_yield,
            load_kwh=load,
            revenue_kwh=revenue_kwh,
            export_kwh=export_kwh,
            energy_rate=energy_rate,
            demand_rate=demand_rate,
            grid_charge_kwh=grid_charge_kwh,
            grid_charge_cost=grid_charge_cost,
            energy_income=energy_income,
            demand_income=demand_income,
            export_income=export_income,
            om_cost=om_cost,
            insurance_cost=insurance_cost,
            replacement_cost=replacement,
            net_cashflow=net,
            cumulative_cashflow=previous_cumulative + net,
            pv_factor=pv_factor,
            discounted_cashflow=net * pv_factor,
            discounted_energy_yield_kwh=energy_yield * lcoe_factor,
        )

    def project(self) -> list[YearlyProjection]:
        """Project years 1..N, starting the cumulative total at the capital outlay."""
        projections = []
        cumulative = -self.initial_cost
        for year in range(1, self.lifetime_years + 1):
            row = self.project_year(year, cumulative)
            cumulative = row.cumulative_cashflow
            projections.append(row)
        return projections
