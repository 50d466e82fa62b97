"""Seasonal scaling of hourly load and solar profiles."""

from btm_engine.domain.config import SeasonalConfig

DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def month_of_hour(index: int) -> int:
    """Calendar month (1-12) of an hour index in a non-leap year."""
    day = (index // 24) % 365
    for month, days in enumerate(DAYS_IN_MONTH, start=1):
        if day < days:
            return month
        day -= days
    return 12


def seasonal_factors(month: int, config: SeasonalConfig) -> tuple[float, float]:
    """Irradiance and load multipliers for a month (1-12).

    Returns:
        Tuple of (solar factor, load factor); both 1.0 when disabled.
    """
    if not config.enabled:
        return 1.0, 1.0
    solar_factor = config.monthly_irradiance_factors[(month - 1) % 12]
    if month in config.high_demand_months:
        load_factor = config.high_demand_load_multiplier
    else:
        load_factor = config.low_demand_load_multiplier
    return solar_factor, load_factor


def apply_seasonal_variation(
    load: list[float],
    solar: list[float],
    config: SeasonalConfig,
    month: int | None = None,
) -> tuple[list[float], list[float]]:
    """Scale profiles by monthly irradiance and demand factors.

    Full-year profiles are scaled hour by hour using each hour's month. A
    representative day is scaled as the given ``month``.

    Args:
        load: Hourly load profile.
        solar: Hourly solar profile.
        config: Seasonal configuration.
        month: Month (1-12) a 24-hour profile represents.

    Returns:
        Tuple of (scaled load, scaled solar).

    Raises:
        ValueError: If a 24-hour profile is given without a month.
    """
    if not config.enabled:
        return list(load), list(solar)

    if len(load) == 24 and month is None:
        raise ValueError("A month is required to scale a 24-hour profile")

    scaled_load = []
    scaled_solar = []
    for i, (load_kwh, solar_kwh) in enumerate(zip(load, solar, strict=True)):
        m = month if month is not None else month_of_hour(i)
        solar_factor, load_factor = seasonal_factors(m, config)
        scaled_load.append(load_kwh * load_factor)
        scaled_solar.append(solar_kwh * solar_factor)
    return scaled_load, scaled_solar
