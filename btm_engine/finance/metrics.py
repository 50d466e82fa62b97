"""Investment metrics on yearly cash-flow sequences.

Cash-flow vectors put the (negative) capital outlay at t=0 followed by one
net cash flow per project year. Degenerate inputs return 0 rather than
raising.
"""

import logging
from collections.abc import Sequence

import numpy as np

IRR_MAX_ITERATIONS = 100
IRR_TOLERANCE = 1e-4
IRR_MIN_DERIVATIVE = 1e-6
IRR_RATE_BOUNDS = (-0.99, 5.0)


def npv(cashflows: Sequence[float], rate: float) -> float:
    """Net present value, discounting flow ``t`` by ``(1+rate)^t``."""
    flows = np.asarray(cashflows, dtype=float)
    if flows.size == 0:
        return 0.0
    periods = np.arange(flows.size)
    return float(np.sum(flows / np.power(1.0 + rate, periods)))


def _npv_derivative(flows: np.ndarray, rate: float) -> float:
    periods = np.arange(flows.size)
    return float(np.sum(-periods * flows / np.power(1.0 + rate, periods + 1)))


def irr(cashflows: Sequence[float], guess: float = 0.1) -> float:
    """Internal rate of return via Newton-Raphson.

    The rate is clamped to [-99%, 500%] after each step. If the NPV slope
    flattens out the current estimate is returned as-is.

    Args:
        cashflows: Cash flows from t=0.
        guess: Starting rate.

    Returns:
        IRR as a fraction.
    """
    flows = np.asarray(cashflows, dtype=float)
    if flows.size < 2:
        return 0.0

    low, high = IRR_RATE_BOUNDS
    rate = guess
    for _ in range(IRR_MAX_ITERATIONS):
        value = npv(flows, rate)
        if abs(value) < IRR_TOLERANCE:
            return rate

        slope = _npv_derivative(flows, rate)
        if abs(slope) < IRR_MIN_DERIVATIVE:
            logging.getLogger(__name__).warning(
                "IRR stopped at %.6f: NPV slope %.2e too flat", rate, slope
            )
            return rate

        rate = min(max(rate - value / slope, low), high)

    logging.getLogger(__name__).warning(
        "IRR did not converge after %d iterations (rate=%.6f)",
        IRR_MAX_ITERATIONS,
        rate,
    )
    return rate


def mirr(
    cashflows: Sequence[float], finance_rate: float, reinvestment_rate: float
) -> float:
    """Modified internal rate of return.

    Negative flows are discounted to t=0 at the finance rate, positive flows
    compounded to t=n at the reinvestment rate, with ``n = len - 1``.

    Returns:
        MIRR as a fraction, or 0 if the flows lack either sign.
    """
    flows = np.asarray(cashflows, dtype=float)
    n = flows.size - 1
    if n < 1:
        return 0.0

    periods = np.arange(flows.size)
    negative = flows < 0
    positive = flows > 0
    if not negative.any() or not positive.any():
        return 0.0

    pv_negative = np.sum(
        flows[negative] / np.power(1.0 + finance_rate, periods[negative])
    )
    fv_positive = np.sum(
        flows[positive] * np.power(1.0 + reinvestment_rate, n - periods[positive])
    )
    return float(np.power(fv_positive / abs(pv_negative), 1.0 / n) - 1.0)


def lcoe(
    initial_cost: float,
    annual_costs: Sequence[float],
    replacement_costs: Sequence[float],
    discounted_energy: Sequence[float],
) -> float:
    """Levelized cost of energy.

    Args:
        initial_cost: Capital outlay.
        annual_costs: Escalated O&M plus insurance per year.
        replacement_costs: One-off replacement cost per year.
        discounted_energy: Discounted energy yield per year (kWh).

    Returns:
        Cost per kWh, or 0 with no energy.
    """
    energy = float(np.sum(discounted_energy))
    if energy <= 0:
        return 0.0
    total_cost = (
        initial_cost + float(np.sum(annual_costs)) + float(np.sum(replacement_costs))
    )
    return total_cost / energy


def payback_period(initial_cost: float, net_cashflows: Sequence[float]) -> float:
    """Years until cumulative cash flow turns non-negative.

    The crossing year is interpolated linearly. Returns ``horizon + 1`` when
    the investment is never recovered.
    """
    cumulative = -initial_cost
    if cumulative >= 0:
        return 0.0
    for year, flow in enumerate(net_cashflows, start=1):
        previous = cumulative
        cumulative += flow
        if cumulative >= 0:
            return (year - 1) + abs(previous) / flow
    return float(len(net_cashflows) + 1)
