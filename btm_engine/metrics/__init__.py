"""Energy KPIs for simulation runs."""

from btm_engine.metrics.kpi import EnergyMetrics, safe_ratio

__all__ = ["EnergyMetrics", "safe_ratio"]
