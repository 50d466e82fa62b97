"""Rule-based hourly dispatch strategies.

Each strategy balances one hour: it splits load between solar, battery and
grid, routes surplus solar into the battery or the grid, and returns the
hour's HourlyResult together with the battery state for the next hour.

Strategies:
1. Self-consumption: battery absorbs surplus solar and covers deficits
2. TOU arbitrage: discharge in peak windows, charge (optionally from grid)
   in off-peak windows, self-consumption otherwise
3. Peak shaving: discharge only to keep grid import at or below a target
4. Scheduled: TOU mechanics on arbitrary user windows

When the grid is unavailable every strategy islands: self-consumption rules
apply, deficits become unmet load and unabsorbed surplus is curtailed.
"""

from typing import Protocol

from btm_engine.battery import physics
from btm_engine.controllers.windows import (
    DEFAULT_TOU_SCHEDULE,
    TouPeriod,
    TouSchedule,
    hour_in_windows,
)
from btm_engine.domain.models import (
    BatteryState,
    DispatchConfig,
    DispatchStrategy,
    HourlyResult,
    TimeWindow,
)

DEFAULT_PEAK_SHAVING_TARGET_KW = 150.0
OVERNIGHT_CHARGE_WINDOW = TimeWindow(start=22, end=6)
DAYTIME_DISCHARGE_WINDOW = TimeWindow(start=7, end=20)


class BalancingStrategy(Protocol):
    """Protocol for hourly dispatch strategies."""

    def balance(
        self,
        hour: int,
        load: float,
        solar: float,
        state: BatteryState,
        config: DispatchConfig,
        grid_available: bool = True,
    ) -> tuple[HourlyResult, BatteryState]:
        """Balance one hour and return its result plus the next battery state."""
        ...


def _settle(
    hour: int,
    load: float,
    solar: float,
    state: BatteryState,
    solar_used: float,
    solar_charge: float = 0.0,
    grid_charge: float = 0.0,
    discharge: float = 0.0,
    grid_available: bool = True,
) -> HourlyResult:
    """Send the remaining deficit and surplus to the grid, or drop them."""
    deficit = max(0.0, load - solar_used - discharge)
    surplus = max(0.0, solar - solar_used - solar_charge)

    if grid_available:
        grid_import, grid_export = deficit + grid_charge, surplus
        unmet, curtailed = 0.0, 0.0
    else:
        grid_import, grid_export = 0.0, 0.0
        unmet, curtailed = deficit, surplus

    return HourlyResult(
        hour=hour,
        load=load,
        solar=solar,
        grid_import=grid_import,
        grid_export=grid_export,
        solar_used=solar_used,
        battery_charge=solar_charge + grid_charge,
        battery_discharge=discharge,
        resulting_soc_kwh=state.level_kwh,
        net_load=load - solar,
        grid_to_battery=grid_charge,
        unmet_load=unmet,
        curtailed=curtailed,
        grid_available=grid_available,
    )


def _self_consume(
    hour: int,
    load: float,
    solar: float,
    state: BatteryState,
    grid_available: bool = True,
) -> tuple[HourlyResult, BatteryState]:
    solar_used = min(solar, load)
    solar_charge = 0.0
    discharge = 0.0

    if load > solar:
        state, discharge = physics.discharge(state, load - solar)
    elif solar > load:
        state, solar_charge = physics.charge(state, solar - load)

    result = _settle(
        hour,
        load,
        solar,
        state,
        solar_used,
        solar_charge=solar_charge,
        discharge=discharge,
        grid_available=grid_available,
    )
    return result, state


def _top_up_from_grid(
    state: BatteryState, solar_charge: float, limit: float | None = None
) -> tuple[BatteryState, float]:
    """Charge from the grid with whatever power the solar charge left over."""
    request = state.power_kw - solar_charge
    if limit is not None:
        request = min(request, limit)
    return physics.charge(state, request)


class SelfConsumptionStrategy:
    """Maximize on-site use of solar energy."""

    def balance(
        self,
        hour: int,
        load: float,
        solar: float,
        state: BatteryState,
        config: DispatchConfig,  # noqa: ARG002
        grid_available: bool = True,
    ) -> tuple[HourlyResult, BatteryState]:
        return _self_consume(hour, load, solar, state, grid_available)


class TouArbitrageStrategy:
    """Shift energy from off-peak (charge) windows into peak (discharge) windows.

    In a discharge window the battery serves load first, ahead of solar, and
    all excess solar is exported. In a charge window surplus solar charges
    the battery and the grid may top it up. Discharge windows take
    precedence where windows overlap.
    """

    def balance(
        self,
        hour: int,
        load: float,
        solar: float,
        state: BatteryState,
        config: DispatchConfig,
        grid_available: bool = True,
    ) -> tuple[HourlyResult, BatteryState]:
        if not grid_available:
            return _self_consume(hour, load, solar, state, grid_available=False)

        if hour_in_windows(hour, config.discharge_windows):
            state, discharge = physics.discharge(state, load)
            solar_used = min(solar, load - discharge)
            result = _settle(
                hour, load, solar, state, solar_used, discharge=discharge
            )
            return result, state

        if hour_in_windows(hour, config.charge_windows):
            solar_used = min(solar, load)
            state, solar_charge = physics.charge(state, solar - solar_used)
            grid_charge = 0.0
            if config.allow_grid_charging:
                state, grid_charge = _top_up_from_grid(state, solar_charge)
            result = _settle(
                hour,
                load,
                solar,
                state,
                solar_used,
                solar_charge=solar_charge,
                grid_charge=grid_charge,
            )
            return result, state

        return _self_consume(hour, load, solar, state)


class ScheduledStrategy(TouArbitrageStrategy):
    """TOU arbitrage mechanics on user-defined charge/discharge windows."""


class PeakShavingStrategy:
    """Cap grid import at a target demand.

    The battery discharges only the part of the hour's import above the
    target. Surplus solar always charges the battery. Inside a charge window
    the grid tops the battery up by at most the gap between the site's import
    and the target, so an hour already at or above the target gets no top-up.
    Without a target this is self-consumption.
    """

    def balance(
        self,
        hour: int,
        load: float,
        solar: float,
        state: BatteryState,
        config: DispatchConfig,
        grid_available: bool = True,
    ) -> tuple[HourlyResult, BatteryState]:
        target = config.peak_shaving_target_kw
        if target is None or not grid_available:
            return _self_consume(hour, load, solar, state, grid_available)

        solar_used = min(solar, load)
        net_import = load - solar_used

        discharge = 0.0
        if net_import > target:
            state, discharge = physics.discharge(state, net_import - target)

        state, solar_charge = physics.charge(state, solar - solar_used)

        grid_charge = 0.0
        if config.allow_grid_charging and hour_in_windows(hour, config.charge_windows):
            headroom_below_target = max(0.0, target - net_import)
            state, grid_charge = _top_up_from_grid(
                state, solar_charge, limit=headroom_below_target
            )

        result = _settle(
            hour,
            load,
            solar,
            state,
            solar_used,
            solar_charge=solar_charge,
            grid_charge=grid_charge,
            discharge=discharge,
        )
        return result, state


_STRATEGIES: dict[DispatchStrategy, BalancingStrategy] = {
    DispatchStrategy.SELF_CONSUMPTION: SelfConsumptionStrategy(),
    DispatchStrategy.TOU_ARBITRAGE: TouArbitrageStrategy(),
    DispatchStrategy.PEAK_SHAVING: PeakShavingStrategy(),
    DispatchStrategy.SCHEDULED: ScheduledStrategy(),
}


def get_strategy(strategy: DispatchStrategy | str) -> BalancingStrategy:
    """Resolve the balancing implementation for a strategy."""
    return _STRATEGIES[DispatchStrategy(strategy)]


def default_dispatch_config(
    strategy: DispatchStrategy | str,
    schedule: TouSchedule = DEFAULT_TOU_SCHEDULE,
) -> DispatchConfig:
    """Default dispatch rules for a strategy.

    TOU arbitrage derives its windows from the tariff schedule: off-peak
    hours charge, peak hours discharge.
    """
    strategy = DispatchStrategy(strategy)

    if strategy == DispatchStrategy.TOU_ARBITRAGE:
        return DispatchConfig(
            charge_windows=schedule.windows_for(TouPeriod.OFF_PEAK),
            discharge_windows=schedule.windows_for(TouPeriod.PEAK),
            allow_grid_charging=True,
        )
    elif strategy == DispatchStrategy.PEAK_SHAVING:
        return DispatchConfig(
            charge_windows=(OVERNIGHT_CHARGE_WINDOW,),
            allow_grid_charging=True,
            peak_shaving_target_kw=DEFAULT_PEAK_SHAVING_TARGET_KW,
        )
    elif strategy == DispatchStrategy.SCHEDULED:
        return DispatchConfig(
            charge_windows=(OVERNIGHT_CHARGE_WINDOW,),
            discharge_windows=(DAYTIME_DISCHARGE_WINDOW,),
        )
    else:  # Self-consumption
        return DispatchConfig()
