"""Utility bill comparison: grid-only supply versus solar+battery supply."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from btm_engine.domain.config import Tariff
from btm_engine.finance.projector import POWER_FACTOR
from btm_engine.metrics.kpi import safe_ratio
from btm_engine.simulation.driver import SimulationResult

DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365


@dataclass
class DailyBill:
    """One day's electricity cost split by charge type."""

    energy_cost: float = 0.0
    demand_cost: float = 0.0
    fixed_cost: float = 0.0
    export_credit: float = 0.0

    @property
    def total(self) -> float:
        return self.energy_cost + self.demand_cost + self.fixed_cost - self.export_credit

    @classmethod
    def for_flows(
        cls,
        tariff: Tariff,
        hourly_kwh: list[float],
        peak_kw: float,
        export_kwh: float = 0.0,
    ) -> DailyBill:
        """Price one day of grid consumption.

        Args:
            tariff: Site tariff.
            hourly_kwh: Energy drawn from the grid per hour.
            peak_kw: Peak grid demand of the day.
            export_kwh: Energy exported during the day.
        """
        energy = sum(
            kwh * tariff.rate_for_hour(hour) for hour, kwh in enumerate(hourly_kwh)
        )
        demand = (peak_kw / POWER_FACTOR) * tariff.demand_charge_per_kva
        return cls(
            energy_cost=energy,
            demand_cost=demand / DAYS_PER_MONTH,
            fixed_cost=tariff.fixed_monthly_charge / DAYS_PER_MONTH,
            export_credit=export_kwh * tariff.export_rate_per_kwh,
        )


@dataclass
class BillComparison:
    """Bill savings from a simulated system on a given tariff."""

    tariff_name: str
    grid_only: DailyBill
    with_solar: DailyBill

    @property
    def daily_savings(self) -> float:
        return self.grid_only.total - self.with_solar.total

    @property
    def monthly_savings(self) -> float:
        return self.daily_savings * DAYS_PER_MONTH

    @property
    def annual_savings(self) -> float:
        return self.daily_savings * DAYS_PER_YEAR

    @property
    def savings_fraction(self) -> float:
        return safe_ratio(self.daily_savings, self.grid_only.total)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary."""
        return {
            "tariff_name": self.tariff_name,
            "grid_only": asdict(self.grid_only),
            "with_solar": asdict(self.with_solar),
            "daily_savings": self.daily_savings,
            "monthly_savings": self.monthly_savings,
            "annual_savings": self.annual_savings,
            "savings_fraction": self.savings_fraction,
        }


def compare_bills(simulation: SimulationResult, tariff: Tariff) -> BillComparison:
    """Compare an average day's bill with and without the system.

    Full-year simulations are averaged to a day; hourly rates still follow
    each hour of day.
    """
    days = max(1, len(simulation.hourly) // 24)
    load = [0.0] * 24
    imports = [0.0] * 24
    for i, h in enumerate(simulation.hourly):
        load[i % 24] += h.load / days
        imports[i % 24] += h.grid_import / days

    metrics = simulation.metrics
    grid_only = DailyBill.for_flows(tariff, load, metrics.peak_load_kw)
    with_solar = DailyBill.for_flows(
        tariff,
        imports,
        metrics.peak_grid_import_kw,
        export_kwh=metrics.total_grid_export_kwh / days,
    )
    return BillComparison(tariff.name, grid_only, with_solar)


def compare_tariffs(
    simulation: SimulationResult, tariffs: list[Tariff]
) -> list[BillComparison]:
    """Bill comparisons for several tariffs, best annual savings first."""
    comparisons = [compare_bills(simulation, t) for t in tariffs]
    return sorted(comparisons, key=lambda c: c.annual_savings, reverse=True)


def simple_payback(
    system_cost: float, annual_savings: float, annual_maintenance: float = 0.0
) -> float:
    """Undiscounted payback in years; infinite without net savings."""
    net = annual_savings - annual_maintenance
    if net <= 0:
        return float("inf")
    return system_cost / net


def simple_roi(
    system_cost: float, annual_savings: float, annual_maintenance: float = 0.0
) -> float:
    """Annual return on investment as a fraction of system cost."""
    if system_cost <= 0:
        return 0.0
    return (annual_savings - annual_maintenance) / system_cost
