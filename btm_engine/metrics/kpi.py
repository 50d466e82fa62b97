"""Energy KPIs aggregated from hourly dispatch results.

Key Metrics:
- Self-consumption rate
- Solar coverage rate
- Peak demand reduction
- Battery cycles and utilization
- Outage protection rate
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields

from btm_engine.domain.models import HourlyResult

HOURS_PER_YEAR = 8760


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, returning 0 for a non-positive denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


@dataclass
class EnergyMetrics:
    """Totals and efficiency ratios for one simulation run.

    Energy totals cover the simulated horizon (a day for 24-hour profiles,
    a year for 8760-hour profiles); use ``annualized`` for yearly figures.

    Attributes:
        hours: Number of simulated hours.
        total_load_kwh: Total site consumption.
        total_solar_kwh: Total solar generation.
        total_grid_import_kwh: Energy bought from the grid, including grid charging.
        total_grid_export_kwh: Energy exported to the grid.
        total_solar_used_kwh: Solar consumed directly by the load.
        total_battery_charge_kwh: Energy stored in the battery.
        total_battery_discharge_kwh: Energy delivered by the battery.
        total_grid_to_battery_kwh: Grid-sourced part of the battery charge.
        total_unmet_load_kwh: Load not served while the grid was down.
        total_curtailed_kwh: Solar that could be neither stored nor exported.
        peak_load_kw: Highest hourly load.
        peak_grid_import_kw: Highest hourly grid import.
        self_consumption_rate: Solar used on site / total solar.
        solar_coverage_rate: (Solar used + battery discharge) / total load.
        peak_reduction: (Peak load - peak import) / peak load.
        battery_cycles: Total discharge / battery capacity.
        battery_utilization: Mean of charge and discharge / battery capacity.
        outage_load_kwh: Load during grid-unavailable hours.
        outage_served_kwh: Part of the outage load served by solar and battery.
        outage_protection_rate: Served / outage load (1.0 without outages).
    """

    hours: int = 0
    total_load_kwh: float = 0.0
    total_solar_kwh: float = 0.0
    total_grid_import_kwh: float = 0.0
    total_grid_export_kwh: float = 0.0
    total_solar_used_kwh: float = 0.0
    total_battery_charge_kwh: float = 0.0
    total_battery_discharge_kwh: float = 0.0
    total_grid_to_battery_kwh: float = 0.0
    total_unmet_load_kwh: float = 0.0
    total_curtailed_kwh: float = 0.0
    peak_load_kw: float = 0.0
    peak_grid_import_kw: float = 0.0
    self_consumption_rate: float = 0.0
    solar_coverage_rate: float = 0.0
    peak_reduction: float = 0.0
    battery_cycles: float = 0.0
    battery_utilization: float = 0.0
    outage_load_kwh: float = 0.0
    outage_served_kwh: float = 0.0
    outage_protection_rate: float = 1.0

    @classmethod
    def from_hourly(
        cls,
        hourly: list[HourlyResult],
        battery_capacity_kwh: float,
    ) -> EnergyMetrics:
        """Aggregate a run's hourly results.

        Args:
            hourly: Ordered hourly results of the run.
            battery_capacity_kwh: Nameplate capacity used for cycle counts.

        Returns:
            EnergyMetrics with calculated values.
        """
        total_load = sum(h.load for h in hourly)
        total_solar = sum(h.solar for h in hourly)
        solar_used = sum(h.solar_used for h in hourly)
        charge = sum(h.battery_charge for h in hourly)
        discharge = sum(h.battery_discharge for h in hourly)
        peak_load = max((h.load for h in hourly), default=0.0)
        peak_import = max((h.grid_import for h in hourly), default=0.0)

        outage_hours = [h for h in hourly if not h.grid_available]
        outage_load = sum(h.load for h in outage_hours)
        outage_served = outage_load - sum(h.unmet_load for h in outage_hours)
        if outage_load > 0:
            protection = outage_served / outage_load
        else:
            protection = 1.0

        return cls(
            hours=len(hourly),
            total_load_kwh=total_load,
            total_solar_kwh=total_solar,
            total_grid_import_kwh=sum(h.grid_import for h in hourly),
            total_grid_export_kwh=sum(h.grid_export for h in hourly),
            total_solar_used_kwh=solar_used,
            total_battery_charge_kwh=charge,
            total_battery_discharge_kwh=discharge,
            total_grid_to_battery_kwh=sum(h.grid_to_battery for h in hourly),
            total_unmet_load_kwh=sum(h.unmet_load for h in hourly),
            total_curtailed_kwh=sum(h.curtailed for h in hourly),
            peak_load_kw=peak_load,
            peak_grid_import_kw=peak_import,
            self_consumption_rate=safe_ratio(solar_used, total_solar),
            solar_coverage_rate=safe_ratio(solar_used + discharge, total_load),
            peak_reduction=safe_ratio(peak_load - peak_import, peak_load),
            battery_cycles=safe_ratio(discharge, battery_capacity_kwh),
            battery_utilization=safe_ratio(
                (charge + discharge) / 2, battery_capacity_kwh
            ),
            outage_load_kwh=outage_load,
            outage_served_kwh=outage_served,
            outage_protection_rate=protection,
        )

    @property
    def annualization_factor(self) -> float:
        """Multiplier turning run totals into yearly totals (365 for one day)."""
        if self.hours <= 0:
            return 0.0
        return HOURS_PER_YEAR / self.hours

    def annualized(self) -> EnergyMetrics:
        """Scale energy totals and cycle counts to a full year.

        Peaks and ratios are intensive and stay unchanged.
        """
        factor = self.annualization_factor
        scaled = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.startswith("total_") or f.name in _EXTENSIVE_FIELDS:
                value = value * factor
            scaled[f.name] = value
        scaled["hours"] = HOURS_PER_YEAR if self.hours else 0
        return EnergyMetrics(**scaled)

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return asdict(self)


_EXTENSIVE_FIELDS = frozenset(
    {"battery_cycles", "outage_load_kwh", "outage_served_kwh"}
)
