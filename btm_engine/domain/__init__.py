"""Domain models and configuration for the behind-the-meter engine."""

from btm_engine.domain.config import (
    AdvancedConfig,
    DegradationConfig,
    DegradationMode,
    FinancialConfig,
    GridConstraintsConfig,
    LoadGrowthConfig,
    SeasonalConfig,
    SystemCosts,
    Tariff,
    get_preset,
)
from btm_engine.domain.models import (
    BatteryConfig,
    BatteryState,
    ColumnTotals,
    DispatchConfig,
    DispatchStrategy,
    FinancialResult,
    HourlyResult,
    SensitivityCase,
    SensitivityResult,
    TimeWindow,
    YearlyProjection,
)

__all__ = [
    "AdvancedConfig",
    "BatteryConfig",
    "BatteryState",
    "ColumnTotals",
    "DegradationConfig",
    "DegradationMode",
    "DispatchConfig",
    "DispatchStrategy",
    "FinancialConfig",
    "FinancialResult",
    "GridConstraintsConfig",
    "HourlyResult",
    "LoadGrowthConfig",
    "SeasonalConfig",
    "SensitivityCase",
    "SensitivityResult",
    "SystemCosts",
    "Tariff",
    "TimeWindow",
    "YearlyProjection",
    "get_preset",
]
