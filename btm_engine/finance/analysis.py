"""Financial analysis of a simulated solar+battery system.

Combines the simulation's annual energy flows with tariff, cost and
advanced-modelling assumptions into a yearly projection, then solves NPV,
IRR, MIRR, LCOE and payback, optionally with best/worst sensitivity bands.
"""

import logging
from dataclasses import dataclass

from btm_engine.domain.config import AdvancedConfig, SystemCosts, Tariff
from btm_engine.domain.models import (
    ColumnTotals,
    FinancialResult,
    SensitivityCase,
    SensitivityResult,
    YearlyProjection,
)
from btm_engine.finance.metrics import irr, lcoe, mirr, npv, payback_period
from btm_engine.finance.projector import BaseYear, FinancialProjector
from btm_engine.parallel import map_independent
from btm_engine.simulation.driver import SimulationResult


@dataclass(frozen=True)
class SensitivityScenario:
    """Income and cost multipliers applied to every projected year."""

    name: str
    income_multiplier: float
    cost_multiplier: float


def sensitivity_scenarios(variation: float) -> list[SensitivityScenario]:
    """Expected, best and worst cases for a variation fraction."""
    return [
        SensitivityScenario("expected", 1.0, 1.0),
        SensitivityScenario("best", 1.0 + variation, 1.0 - variation / 2),
        SensitivityScenario("worst", 1.0 - variation, 1.0 + variation),
    ]


def base_year_from_simulation(
    simulation: SimulationResult, tariff: Tariff
) -> BaseYear:
    """Derive year-one quantities from a simulation run."""
    annual = simulation.annual_metrics
    offset = [h.solar_used + h.battery_discharge for h in simulation.hourly]
    grid_charge = [h.grid_to_battery for h in simulation.hourly]
    return BaseYear(
        energy_yield_kwh=annual.total_solar_kwh,
        load_kwh=annual.total_load_kwh,
        solar_used_kwh=annual.total_solar_used_kwh,
        battery_discharge_kwh=annual.total_battery_discharge_kwh,
        export_kwh=annual.total_grid_export_kwh,
        demand_saving_kva=BaseYear.demand_saving(
            annual.peak_load_kw, annual.peak_grid_import_kw
        ),
        energy_rate=tariff.blended_rate(offset),
        demand_rate=tariff.demand_charge_per_kva,
        export_rate=tariff.export_rate_per_kwh,
        grid_charge_kwh=annual.total_grid_to_battery_kwh,
        grid_charge_rate=tariff.blended_rate(grid_charge),
    )


def scaled_cashflows(
    projections: list[YearlyProjection],
    income_multiplier: float = 1.0,
    cost_multiplier: float = 1.0,
) -> list[float]:
    """Net yearly cash flows with income and all costs scaled."""
    return [
        p.total_income * income_multiplier
        - (p.total_cost + p.replacement_cost) * cost_multiplier
        for p in projections
    ]


def evaluate_scenario(
    scenario: SensitivityScenario,
    projections: list[YearlyProjection],
    initial_cost: float,
    discount_rate: float,
) -> SensitivityCase:
    """NPV, IRR and payback for one sensitivity scenario."""
    net = scaled_cashflows(
        projections, scenario.income_multiplier, scenario.cost_multiplier
    )
    flows = [-initial_cost] + net
    return SensitivityCase(
        name=scenario.name,
        income_multiplier=scenario.income_multiplier,
        cost_multiplier=scenario.cost_multiplier,
        npv=npv(flows, discount_rate),
        irr=irr(flows),
        payback_years=payback_period(initial_cost, net),
    )


def run_sensitivity(
    projections: list[YearlyProjection],
    initial_cost: float,
    discount_rate: float,
    variation: float,
    concurrency: str | None = "thread",
    max_workers: int | None = None,
) -> SensitivityResult:
    """Evaluate expected, best and worst cases independently.

    Args:
        projections: Expected-case yearly projections.
        initial_cost: Capital outlay (not scaled).
        discount_rate: NPV discount rate.
        variation: Income variation fraction (e.g. 0.20).
        concurrency: ``"thread"`` or ``None``.
        max_workers: Thread pool size.

    Returns:
        SensitivityResult with the three cases.
    """
    cases = map_independent(
        lambda s: evaluate_scenario(s, projections, initial_cost, discount_rate),
        sensitivity_scenarios(variation),
        concurrency=concurrency,
        max_workers=max_workers,
    )
    expected, best, worst = cases
    return SensitivityResult(expected=expected, best=best, worst=worst)


def summarize(
    projections: list[YearlyProjection],
    initial_cost: float,
    advanced: AdvancedConfig,
    sensitivity: SensitivityResult | None = None,
) -> FinancialResult:
    """Solve the investment metrics for a projection table."""
    financial = advanced.financial
    net = [p.net_cashflow for p in projections]
    flows = [-initial_cost] + net

    return FinancialResult(
        initial_cost=initial_cost,
        npv=npv(flows, financial.discount_rate),
        irr=irr(flows),
        mirr=mirr(
            flows, financial.mirr_finance_rate, financial.mirr_reinvestment_rate
        ),
        lcoe=lcoe(
            initial_cost,
            [p.total_cost for p in projections],
            [p.replacement_cost for p in projections],
            [p.discounted_energy_yield_kwh for p in projections],
        ),
        payback_years=payback_period(initial_cost, net),
        totals=ColumnTotals.from_projections(projections),
        projections=tuple(projections),
        sensitivity=sensitivity,
    )


def run_financial_analysis(
    simulation: SimulationResult,
    tariff: Tariff,
    costs: SystemCosts,
    solar_kwp: float,
    battery_kwh: float,
    advanced: AdvancedConfig | None = None,
    concurrency: str | None = "thread",
    max_workers: int | None = None,
) -> FinancialResult:
    """Project a simulated system over its lifetime and compute its metrics.

    Args:
        simulation: Dispatch simulation (24-hour or 8760-hour).
        tariff: Site tariff.
        costs: System cost structure.
        solar_kwp: Installed solar capacity (kWp).
        battery_kwh: Installed battery capacity (kWh).
        advanced: Advanced modelling configuration.
        concurrency: Executor for sensitivity cases, ``"thread"`` or ``None``.
        max_workers: Thread pool size.

    Returns:
        FinancialResult with projections, totals and optional sensitivity.
    """
    advanced = advanced or AdvancedConfig()
    base = base_year_from_simulation(simulation, tariff)
    projector = FinancialProjector(base, costs, solar_kwp, battery_kwh, advanced)
    projections = projector.project()
    initial_cost = projector.initial_cost

    sensitivity = None
    if advanced.financial.sensitivity_enabled:
        sensitivity = run_sensitivity(
            projections,
            initial_cost,
            advanced.financial.discount_rate,
            advanced.financial.sensitivity_variation,
            concurrency=concurrency,
            max_workers=max_workers,
        )

    result = summarize(projections, initial_cost, advanced, sensitivity)

    logging.getLogger(__name__).info(
        "Financial analysis over %d years: capex=%.0f npv=%.0f irr=%.4f "
        "lcoe=%.4f payback=%.2f",
        len(projections),
        initial_cost,
        result.npv,
        result.irr,
        result.lcoe,
        result.payback_years,
    )
    return result
