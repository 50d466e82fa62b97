"""Behind-the-meter solar and battery engine.

Hourly dispatch simulation feeding a multi-year financial projection, plus a
load-shedding scenario sweep over the same dispatch core.
"""

__version__ = "0.1.0"
