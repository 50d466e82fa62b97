"""Dispatch strategies and schedule windows."""

from btm_engine.controllers.strategies import (
    BalancingStrategy,
    PeakShavingStrategy,
    ScheduledStrategy,
    SelfConsumptionStrategy,
    TouArbitrageStrategy,
    default_dispatch_config,
    get_strategy,
)
from btm_engine.controllers.windows import (
    DEFAULT_TOU_SCHEDULE,
    TouPeriod,
    TouSchedule,
    hour_in_window,
    hour_in_windows,
    windows_from_hours,
)

__all__ = [
    "DEFAULT_TOU_SCHEDULE",
    "BalancingStrategy",
    "PeakShavingStrategy",
    "ScheduledStrategy",
    "SelfConsumptionStrategy",
    "TouArbitrageStrategy",
    "TouPeriod",
    "TouSchedule",
    "default_dispatch_config",
    "get_strategy",
    "hour_in_window",
    "hour_in_windows",
    "windows_from_hours",
]
