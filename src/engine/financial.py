"""Spreadsheet-compatible time value of money functions: PMT, PV and RATE.

Pure functions, float in and float out. No I/O. Cash flows follow the
spreadsheet sign convention: money received is positive, money paid out is
negative, so a present value and its payment carry opposite signs.

timing: 0 = payments at the end of each period (arrears),
        1 = payments at the start of each period (advance).
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")
FOUR_PLACES = Decimal("0.0001")

MAX_ITERATIONS = 100
TOLERANCE = 1e-10
DERIVATIVE_STEP = 1e-8


@dataclass(frozen=True)
class RateSolution:
    rate: float
    converged: bool
    iterations: int


def periodic_payment(
    rate: float,
    periods: int,
    present_value: float,
    future_value: float = 0.0,
    timing: int = 0,
) -> float:
    """PMT: fixed payment per period that takes present_value to future_value.

    Example: PMT(0.10/12, 36, -50000, 0, 1) ~= 1600.03
    """
    if rate == 0:
        return -(present_value + future_value) / periods

    pvif = (1 + rate) ** periods
    payment = -(rate * (present_value * pvif + future_value)) / (pvif - 1)

    if timing == 1:
        payment /= 1 + rate

    return payment


def present_value(
    rate: float,
    periods: int,
    payment: float,
    future_value: float = 0.0,
    timing: int = 0,
) -> float:
    """PV: principal supported by a payment stream. Inverse of periodic_payment.

    Example: PV(0.10/12, 36, -1500, 0, 1) ~= 46874.19
    """
    if rate == 0:
        return -payment * periods - future_value

    pvif = (1 + rate) ** periods
    annuity = payment * (1 - pvif) / rate
    # Advance payments earn one extra period; the future value does not.
    if timing == 1:
        annuity *= 1 + rate

    return (annuity - future_value) / pvif


def solve_rate(
    periods: int,
    payment: float,
    target_pv: float,
    future_value: float = 0.0,
    timing: int = 0,
    initial_guess: float = 0.1,
) -> RateSolution:
    """RATE: per-period rate implied by a payment stream, via Newton-Raphson.

    Solves present_value(rate, ...) == target_pv. The derivative is taken
    numerically (central difference). Any step that leaves [0, 1] restarts
    from initial_guess.

    Never raises. If the iteration limit is hit, or PV overflows for the given
    cash flows, the last finite estimate is returned with converged=False and
    the caller decides whether that is acceptable.
    """
    rate = initial_guess
    iterations = 0

    for iterations in range(1, MAX_ITERATIONS + 1):
        if abs(rate) < TOLERANCE:
            rate = TOLERANCE

        f = present_value(rate, periods, payment, future_value, timing) - target_pv
        if not math.isfinite(f):
            break
        if abs(f) < TOLERANCE:
            return RateSolution(rate=rate, converged=True, iterations=iterations)

        pv_low = present_value(rate - DERIVATIVE_STEP, periods, payment, future_value, timing)
        pv_high = present_value(rate + DERIVATIVE_STEP, periods, payment, future_value, timing)
        derivative = (pv_high - pv_low) / (2 * DERIVATIVE_STEP)
        if derivative == 0 or not math.isfinite(derivative):
            break

        new_rate = rate - f / derivative
        if abs(new_rate - rate) < TOLERANCE:
            return RateSolution(rate=new_rate, converged=True, iterations=iterations)

        rate = new_rate
        if not math.isfinite(rate) or rate < 0 or rate > 1:
            rate = initial_guess

    return RateSolution(rate=rate, converged=False, iterations=iterations)


# ── Rounding and display ─────────────────────────────────────────

def round_currency(amount: float | Decimal) -> Decimal:
    return Decimal(str(amount)).quantize(TWO_PLACES, ROUND_HALF_UP)


def round_rate(rate: float | Decimal) -> Decimal:
    return Decimal(str(rate)).quantize(FOUR_PLACES, ROUND_HALF_UP)


def format_currency(amount: float | Decimal) -> str:
    """Format as Australian dollars, e.g. $50,495.00"""
    value = round_currency(amount)
    if value < 0:
        return f"-${-value:,.2f}"
    return f"${value:,.2f}"


def format_percentage(rate: float | Decimal) -> str:
    """0.1165 -> '11.65%'"""
    return f"{float(rate) * 100:.2f}%"


def parse_currency(value: str) -> Decimal:
    """Parse user-entered currency such as '$50,000.00' into a Decimal."""
    cleaned = re.sub(r"[^0-9.\-]+", "", value)
    if not cleaned or cleaned in {"-", ".", "-."}:
        raise ValueError(f"Not a currency amount: {value!r}")
    try:
        return Decimal(cleaned)
    except ArithmeticError as e:
        raise ValueError(f"Not a currency amount: {value!r}") from e
