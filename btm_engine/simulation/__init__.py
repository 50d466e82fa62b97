"""Hourly simulation driver and profile scaling."""

from btm_engine.simulation.driver import (
    SimulationResult,
    simulate,
    simulate_with_outages,
)
from btm_engine.simulation.profiles import apply_seasonal_variation, seasonal_factors

__all__ = [
    "SimulationResult",
    "apply_seasonal_variation",
    "seasonal_factors",
    "simulate",
    "simulate_with_outages",
]
