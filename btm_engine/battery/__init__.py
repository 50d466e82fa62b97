"""Battery state transitions and degradation models."""

from btm_engine.battery.degradation import DegradationModel
from btm_engine.battery.physics import charge, discharge, initialize

__all__ = [
    "DegradationModel",
    "charge",
    "discharge",
    "initialize",
]
