"""Multi-year projection and investment metrics."""

from btm_engine.finance.analysis import run_financial_analysis, run_sensitivity
from btm_engine.finance.bill import compare_bills, compare_tariffs
from btm_engine.finance.metrics import irr, lcoe, mirr, npv, payback_period
from btm_engine.finance.projector import FinancialProjector, capital_cost

__all__ = [
    "FinancialProjector",
    "capital_cost",
    "compare_bills",
    "compare_tariffs",
    "irr",
    "lcoe",
    "mirr",
    "npv",
    "payback_period",
    "run_financial_analysis",
    "run_sensitivity",
]
