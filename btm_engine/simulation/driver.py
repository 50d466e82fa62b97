"""Simulation driver: folds a dispatch strategy over an hourly profile.

The battery state is threaded explicitly from hour to hour. Profiles are
24 hours (a representative day) or 8760 hours (a year); the hour of day of
index ``i`` is ``i % 24``.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from btm_engine.battery import physics
from btm_engine.controllers.strategies import default_dispatch_config, get_strategy
from btm_engine.domain.config import GridConstraintsConfig
from btm_engine.domain.models import (
    BatteryConfig,
    BatteryState,
    DispatchConfig,
    DispatchStrategy,
    HourlyResult,
)
from btm_engine.metrics.kpi import EnergyMetrics


@dataclass
class SimulationState:
    """State carried through the fold."""

    battery: BatteryState
    hourly: list[HourlyResult] = field(default_factory=list)


@dataclass
class SimulationResult:
    """Hourly results and aggregate metrics for one run."""

    strategy: DispatchStrategy
    dispatch: DispatchConfig
    battery_config: BatteryConfig
    hourly: list[HourlyResult]
    metrics: EnergyMetrics
    final_state: BatteryState
    outage_hours: frozenset[int] = frozenset()

    @property
    def annual_metrics(self) -> EnergyMetrics:
        return self.metrics.annualized()

    @property
    def is_representative_day(self) -> bool:
        return len(self.hourly) == 24


def apply_export_constraint(
    result: HourlyResult, constraints: GridConstraintsConfig
) -> HourlyResult:
    """Curtail export above the hour's allowance.

    Args:
        result: Balanced hour.
        constraints: Grid export rules.

    Returns:
        The same result, or a copy with the excess moved to ``curtailed``.
    """
    allowance = constraints.export_allowance(result.hour % 24)
    if allowance is None or result.grid_export <= allowance:
        return result
    excess = result.grid_export - allowance
    return result.model_copy(
        update={
            "grid_export": allowance,
            "curtailed": result.curtailed + excess,
        }
    )


def simulate(
    load: list[float],
    solar: list[float],
    battery_config: BatteryConfig,
    strategy: DispatchStrategy | str = DispatchStrategy.SELF_CONSUMPTION,
    dispatch: DispatchConfig | None = None,
    outage_hours: Iterable[int] | None = None,
    grid_constraints: GridConstraintsConfig | None = None,
) -> SimulationResult:
    """Run a dispatch strategy across an hourly profile.

    Args:
        load: Hourly site load (kWh).
        solar: Hourly solar generation (kWh).
        battery_config: Battery configuration.
        strategy: Dispatch strategy, resolved once for the whole run.
        dispatch: Dispatch rules; defaults to the strategy's default rules.
        outage_hours: Hours of day (0-23) with no grid, applied to every day.
        grid_constraints: Optional export limits.

    Returns:
        SimulationResult with hourly results and aggregate metrics.

    Raises:
        ValueError: If the load and solar profiles differ in length.
    """
    if len(load) != len(solar):
        raise ValueError(
            f"Load and solar profiles must have the same length, "
            f"got {len(load)} and {len(solar)}"
        )

    strategy = DispatchStrategy(strategy)
    if dispatch is None:
        dispatch = default_dispatch_config(strategy)
    balancer = get_strategy(strategy)
    outages = frozenset(h % 24 for h in outage_hours or ())

    state = SimulationState(battery=physics.initialize(battery_config))

    for i, (load_kwh, solar_kwh) in enumerate(zip(load, solar, strict=True)):
        hour = i % 24
        result, state.battery = balancer.balance(
            hour,
            load_kwh,
            solar_kwh,
            state.battery,
            dispatch,
            grid_available=hour not in outages,
        )
        if grid_constraints is not None:
            result = apply_export_constraint(result, grid_constraints)
        state.hourly.append(result)

    metrics = EnergyMetrics.from_hourly(state.hourly, battery_config.capacity_kwh)

    logging.getLogger(__name__).debug(
        "Simulated %d hours with %s: import=%.1f kWh export=%.1f kWh "
        "self-consumption=%.3f unmet=%.1f kWh",
        metrics.hours,
        strategy.value,
        metrics.total_grid_import_kwh,
        metrics.total_grid_export_kwh,
        metrics.self_consumption_rate,
        metrics.total_unmet_load_kwh,
    )

    return SimulationResult(
        strategy=strategy,
        dispatch=dispatch,
        battery_config=battery_config,
        hourly=state.hourly,
        metrics=metrics,
        final_state=state.battery,
        outage_hours=outages,
    )


def simulate_with_outages(
    load: list[float],
    solar: list[float],
    battery_config: BatteryConfig,
    outage_hours: Iterable[int],
    strategy: DispatchStrategy | str = DispatchStrategy.SELF_CONSUMPTION,
    dispatch: DispatchConfig | None = None,
) -> SimulationResult:
    """Run a simulation where the grid is down during ``outage_hours``.

    Deficits in those hours become unmet load and surplus solar the battery
    cannot absorb is curtailed.
    """
    return simulate(
        load,
        solar,
        battery_config,
        strategy=strategy,
        dispatch=dispatch,
        outage_hours=outage_hours,
    )
