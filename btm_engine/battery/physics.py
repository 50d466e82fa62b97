"""Battery state transitions for hourly dispatch.

Implements:
- State initialization from a configured starting SOC
- Charge/discharge limited by power rating and SOC bounds
- Clamping of marginal configurations instead of failing

Every operation returns a new BatteryState; the input state is untouched.
"""

from btm_engine.domain.models import BatteryConfig, BatteryState


def initialize(config: BatteryConfig) -> BatteryState:
    """Create the starting state for a simulation run.

    The starting level is clamped into the SOC bounds. If the minimum SOC is
    above the maximum the level collapses onto the maximum and both
    headrooms become zero.

    Args:
        config: Battery configuration.

    Returns:
        Initial BatteryState.
    """
    min_level = config.capacity_kwh * config.min_soc_fraction
    max_level = config.capacity_kwh * config.max_soc_fraction
    level = config.capacity_kwh * config.initial_soc_fraction
    level = min(max(level, min_level), max_level)

    return BatteryState(
        level_kwh=level,
        min_level_kwh=min_level,
        max_level_kwh=max_level,
        power_kw=config.power_kw,
        capacity_kwh=config.capacity_kwh,
    )


def charge(state: BatteryState, energy_kwh: float) -> tuple[BatteryState, float]:
    """Charge the battery with up to ``energy_kwh`` for one hour.

    Args:
        state: Battery state at the start of the hour.
        energy_kwh: Energy offered to the battery.

    Returns:
        Tuple of (new state, energy actually accepted).
    """
    accepted = min(max(energy_kwh, 0.0), state.charge_headroom_kwh)
    if accepted <= 0:
        return state, 0.0
    return state.model_copy(update={"level_kwh": state.level_kwh + accepted}), accepted


def discharge(state: BatteryState, energy_kwh: float) -> tuple[BatteryState, float]:
    """Discharge up to ``energy_kwh`` from the battery for one hour.

    Args:
        state: Battery state at the start of the hour.
        energy_kwh: Energy requested from the battery.

    Returns:
        Tuple of (new state, energy actually delivered).
    """
    delivered = min(max(energy_kwh, 0.0), state.discharge_headroom_kwh)
    if delivered <= 0:
        return state, 0.0
    new_state = state.model_copy(update={"level_kwh": state.level_kwh - delivered})
    return new_state, delivered
