"""Panel and battery degradation over the project life.

Year 1 is the undegraded baseline; losses accumulate from year 2. Two modes
are supported:
- simple: one constant rate per year
- yearly: an explicit rate per year (e.g. a higher first-year loss)

Panel efficiency floors at zero, battery capacity at its end-of-life level.
"""

from collections.abc import Sequence

from btm_engine.domain.config import DegradationConfig, DegradationMode


def cumulative_loss(
    year: int, mode: DegradationMode, simple_rate: float, yearly_rates: Sequence[float]
) -> float:
    """Total fractional loss accrued before the start of ``year``.

    In yearly mode, years beyond the supplied rates add no further loss.
    """
    elapsed = max(0, year - 1)
    if elapsed == 0:
        return 0.0
    if mode == DegradationMode.SIMPLE:
        return simple_rate * elapsed
    return sum(yearly_rates[:elapsed])


class DegradationModel:
    """Year-indexed performance factors for panels and battery."""

    def __init__(self, config: DegradationConfig) -> None:
        """Initialize the degradation model.

        Args:
            config: Degradation configuration.
        """
        self.config = config

    def panel_efficiency(self, year: int) -> float:
        """Panel output relative to year 1 (0-1)."""
        if not self.config.enabled:
            return 1.0
        loss = cumulative_loss(
            year,
            self.config.panel_mode,
            self.config.panel_simple_rate,
            self.config.panel_yearly_rates,
        )
        return max(0.0, 1.0 - loss)

    def battery_capacity(self, year: int) -> float:
        """Remaining battery capacity relative to year 1, floored at end of life."""
        if not self.config.enabled:
            return 1.0
        loss = cumulative_loss(
            year,
            self.config.battery_mode,
            self.config.battery_simple_rate,
            self.config.battery_yearly_rates,
        )
        return max(self.config.battery_eol_capacity, 1.0 - loss)

    def schedule(self, years: int) -> list[tuple[int, float, float]]:
        """(year, panel efficiency, battery capacity) for years 1..N."""
        return [
            (y, self.panel_efficiency(y), self.battery_capacity(y))
            for y in range(1, years + 1)
        ]
