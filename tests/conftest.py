"""Shared fixtures for dispatch, finance and load-shedding tests.

Provides a representative commercial site day:
- Load with morning and evening peaks (770 kWh/day)
- Solar bell curve peaking at midday (421 kWh/day)
- A 100 kWh / 25 kW battery
"""

import pytest

from btm_engine.domain.config import (
    AdvancedConfig,
    DegradationConfig,
    FinancialConfig,
    SystemCosts,
    Tariff,
)
from btm_engine.domain.models import BatteryConfig, BatteryState

DAY_LOAD = [
    20.0, 18.0, 17.0, 17.0, 18.0, 25.0, 35.0, 45.0, 40.0, 35.0, 30.0, 30.0,
    30.0, 30.0, 30.0, 32.0, 38.0, 48.0, 55.0, 50.0, 42.0, 35.0, 28.0, 22.0,
]  # fmt: skip
DAY_SOLAR = [
    0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 2.0, 10.0, 25.0, 40.0, 52.0, 60.0,
    62.0, 58.0, 48.0, 35.0, 20.0, 8.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0,
]  # fmt: skip


# =============================================================================
# Profile Fixtures
# =============================================================================


@pytest.fixture
def day_load() -> list[float]:
    """Representative day load profile (kWh per hour)."""
    return list(DAY_LOAD)


@pytest.fixture
def day_solar() -> list[float]:
    """Representative day solar profile (kWh per hour)."""
    return list(DAY_SOLAR)


@pytest.fixture
def year_load() -> list[float]:
    """The representative day repeated for 365 days."""
    return DAY_LOAD * 365


@pytest.fixture
def year_solar() -> list[float]:
    """The representative solar day repeated for 365 days."""
    return DAY_SOLAR * 365


# =============================================================================
# Battery Fixtures
# =============================================================================


@pytest.fixture
def battery_config() -> BatteryConfig:
    """Standard 100 kWh / 25 kW battery at 50% starting SOC."""
    return BatteryConfig(
        capacity_kwh=100.0,
        power_kw=25.0,
        min_soc_fraction=0.10,
        max_soc_fraction=0.95,
        initial_soc_fraction=0.50,
    )


@pytest.fixture
def no_battery() -> BatteryConfig:
    """Solar-only system."""
    return BatteryConfig(capacity_kwh=0.0, power_kw=0.0)


@pytest.fixture
def example_state() -> BatteryState:
    """Battery with min=2, max=18, current=10, power=5."""
    return BatteryState(
        level_kwh=10.0,
        min_level_kwh=2.0,
        max_level_kwh=18.0,
        power_kw=5.0,
        capacity_kwh=20.0,
    )


# =============================================================================
# Financial Fixtures
# =============================================================================


@pytest.fixture
def flat_tariff() -> Tariff:
    """Flat energy-only tariff."""
    return Tariff(name="flat", average_rate_per_kwh=2.50)


@pytest.fixture
def commercial_tariff() -> Tariff:
    """Tariff with demand and fixed charges plus an export rate."""
    return Tariff(
        name="commercial",
        average_rate_per_kwh=2.20,
        demand_charge_per_kva=250.0,
        fixed_monthly_charge=1500.0,
        export_rate_per_kwh=0.80,
    )


@pytest.fixture
def system_costs() -> SystemCosts:
    """Default cost structure."""
    return SystemCosts()


@pytest.fixture
def advanced_config() -> AdvancedConfig:
    """Degradation on, sensitivity on, 20-year horizon."""
    return AdvancedConfig(
        degradation=DegradationConfig(enabled=True),
        financial=FinancialConfig(sensitivity_enabled=True),
    )
