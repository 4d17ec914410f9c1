"""
Decimal-precision mathematical primitives for finforecast.

Purpose
-------
Power, root, exponential and logarithm functions evaluated entirely in
``decimal`` arithmetic, plus the small set of closed-form finance formulas
built on them (compound growth, annuity factor, present value, CAGR).

Precision model
---------------
Every transcendental evaluation runs in a copy of the active decimal context
widened by ``GUARD_DIGITS`` and is rounded back to the caller's precision on
return. There is no float round trip.

nth-root strategies
-------------------
- ``"direct"`` (default): ``value ** (1/n)``, correctly rounded by the
  decimal module.
- ``"bisection"``: bounded bisection starting from the bracket
  ``[0.5, 2.0]`` with a fixed 20 iterations, returning the bracket midpoint.
  The result is accurate to about ``1.5 / 2**20`` (~1.4e-6) for roots inside
  the default bracket.

  Bound escape: when the true root lies outside ``[0.5, 2.0]`` (very high or
  very low ratios, e.g. a tripling over one year), the bracket is widened to
  ``[min(0.5, value), max(2.0, value)]``, which always contains the root for
  ``n >= 1``. Accuracy then degrades proportionally to the wider bracket.

Example
-------
>>> from decimal import Decimal
>>> from finforecast.mathematical import nth_root, compound_growth
>>> nth_root(Decimal("8"), 3).quantize(Decimal("0.0001"))
Decimal('2.0000')
>>> compound_growth(Decimal("1000"), Decimal("0.05"), 10).quantize(Decimal("0.01"))
Decimal('1628.89')
"""

from __future__ import annotations

import logging
from decimal import Decimal, getcontext, localcontext
from typing import Literal, Tuple

from .constants import GUARD_DIGITS, NTH_ROOT_BISECTION_BOUNDS, NTH_ROOT_BISECTION_ITERATIONS
from .exceptions import DivisionByZeroError, InvalidInputError, UndefinedRootError
from .utils import Number, ensure_decimal, safe_divide

logger = logging.getLogger(__name__)

__all__ = [
    "RootMethod",
    "power",
    "nth_root",
    "binary_search_nth_root",
    "exp",
    "ln",
    "compound_growth",
    "future_value_annuity",
    "present_value",
    "continuous_compound",
    "effective_annual_rate",
    "cagr",
    "rule_of_72",
]

RootMethod = Literal["direct", "bisection"]

ZERO = Decimal("0")
ONE = Decimal("1")
TWO = Decimal("2")


def _working_context():
    """Local context with guard digits on top of the caller's precision."""
    ctx = getcontext().copy()
    ctx.prec += GUARD_DIGITS
    return localcontext(ctx)


def _check_root_degree(n: int) -> int:
    if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
        raise InvalidInputError(f"Root degree must be a positive integer, got {n!r}.")
    return n


# ---------------------------------------------------------------------------
# Power and roots
# ---------------------------------------------------------------------------

def power(base: Number, exponent: Number) -> Decimal:
    """
    Compute ``base ** exponent`` in decimal arithmetic.

    Parameters
    ----------
    base : Number
        Base value.
    exponent : Number
        Integer exponents accept any base; negative ones invert the positive
        result. Non-integer exponents require ``base > 0`` (``base == 0``
        with a positive exponent yields zero).

    Raises
    ------
    DivisionByZeroError
        Zero base with a negative exponent.
    UndefinedRootError
        Negative base with a non-integer exponent.

    Examples
    --------
    >>> power(Decimal("1.05"), 10).quantize(Decimal("0.0001"))
    Decimal('1.6289')
    >>> power(2, -2)
    Decimal('0.25')
    """
    base = ensure_decimal(base)
    exponent = ensure_decimal(exponent)

    if exponent == exponent.to_integral_value():
        n = int(exponent)
        if n == 0:
            return ONE
        if base.is_zero():
            if n < 0:
                raise DivisionByZeroError("Zero cannot be raised to a negative power.")
            return ZERO
        with _working_context():
            positive = base ** abs(n)
            result = positive if n > 0 else ONE / positive
        return +result

    if base.is_zero():
        if exponent < 0:
            raise DivisionByZeroError("Zero cannot be raised to a negative power.")
        return ZERO
    if base < 0:
        raise UndefinedRootError(
            f"Non-integer power {exponent} of negative base {base} is undefined."
        )
    with _working_context():
        result = base ** exponent
    return +result


def nth_root(value: Number, n: int, method: RootMethod = "direct") -> Decimal:
    """
    Compute the real nth root of *value*.

    Parameters
    ----------
    value : Number
        Radicand. Negative values are accepted only for odd *n*.
    n : int
        Root degree, a positive integer.
    method : {"direct", "bisection"}, default "direct"
        Evaluation strategy, see module docstring.

    Returns
    -------
    Decimal

    Raises
    ------
    UndefinedRootError
        Even root of a negative value.
    InvalidInputError
        Non-positive or non-integer degree, or unknown method.

    Examples
    --------
    >>> nth_root(Decimal("100"), 2) == 10
    True
    """
    _check_root_degree(n)
    value = ensure_decimal(value)

    if value.is_zero():
        return ZERO
    if n == 1:
        return value
    if value < 0:
        if n % 2 == 0:
            raise UndefinedRootError(f"Even root ({n}) of negative value {value} is undefined.")
        return -nth_root(-value, n, method)

    if method == "direct":
        with _working_context():
            result = value ** (ONE / Decimal(n))
        return +result
    if method == "bisection":
        return binary_search_nth_root(value, n)
    raise InvalidInputError(f"Unknown nth-root method {method!r}; use 'direct' or 'bisection'.")


def binary_search_nth_root(
    target: Number,
    n: int,
    iterations: int = NTH_ROOT_BISECTION_ITERATIONS,
    bounds: Tuple[Decimal, Decimal] = NTH_ROOT_BISECTION_BOUNDS,
) -> Decimal:
    """
    Bisection nth root with a fixed iteration count.

    The bracket starts at *bounds* and is widened to
    ``[min(low, target), max(high, target)]`` when it does not contain the
    root. After *iterations* halvings the midpoint of the remaining bracket
    is returned, so the call always terminates.

    Invariant: ``low ** n <= target <= high ** n`` holds at every step.
    """
    _check_root_degree(n)
    target = ensure_decimal(target)
    if target < 0:
        raise UndefinedRootError(f"Bisection root requires a non-negative target, got {target}.")
    if target.is_zero():
        return ZERO

    low, high = ensure_decimal(bounds[0]), ensure_decimal(bounds[1])
    if power(low, n) > target or power(high, n) < target:
        widened = (min(low, target), max(high, target))
        logger.debug(
            "nth-root of %s (n=%d) outside bracket [%s, %s]; widening to [%s, %s]",
            target, n, low, high, widened[0], widened[1],
        )
        low, high = widened

    for _ in range(int(iterations)):
        mid = (low + high) / TWO
        mid_power = power(mid, n)
        if mid_power == target:
            return mid
        if mid_power > target:
            high = mid
        else:
            low = mid
    return (low + high) / TWO


# ---------------------------------------------------------------------------
# Exponential and logarithm
# ---------------------------------------------------------------------------

def exp(x: Number) -> Decimal:
    """Natural exponential e**x."""
    x = ensure_decimal(x)
    with _working_context():
        result = x.exp()
    return +result


def ln(x: Number) -> Decimal:
    """
    Natural logarithm.

    Raises
    ------
    UndefinedRootError
        ``x <= 0``. This is a fatal input error, never a silent NaN.
    """
    x = ensure_decimal(x)
    if x <= 0:
        raise UndefinedRootError(f"Natural logarithm undefined for x={x} (requires x > 0).")
    with _working_context():
        result = x.ln()
    return +result


# ---------------------------------------------------------------------------
# Closed-form finance helpers
# ---------------------------------------------------------------------------

def compound_growth(principal: Number, rate: Number, periods: int) -> Decimal:
    """principal * (1 + rate) ** periods."""
    principal = ensure_decimal(principal)
    rate = ensure_decimal(rate)
    if rate.is_zero():
        return principal
    return principal * power(ONE + rate, periods)


def future_value_annuity(payment: Number, rate: Number, periods: int) -> Decimal:
    """
    Future value of *periods* end-of-period payments.

    ``payment * ((1 + rate) ** periods - 1) / rate``; with a zero rate the
    payments simply add up.

    Examples
    --------
    >>> future_value_annuity(100, Decimal("0.05"), 12).quantize(Decimal("0.01"))
    Decimal('1591.71')
    """
    payment = ensure_decimal(payment)
    rate = ensure_decimal(rate)
    if rate.is_zero():
        return payment * Decimal(periods)
    return payment * (power(ONE + rate, periods) - ONE) / rate


def present_value(future_value: Number, rate: Number, periods: int) -> Decimal:
    """future_value / (1 + rate) ** periods."""
    future_value = ensure_decimal(future_value)
    rate = ensure_decimal(rate)
    if rate.is_zero():
        return future_value
    return safe_divide(future_value, power(ONE + rate, periods))


def continuous_compound(principal: Number, rate: Number, time: Number) -> Decimal:
    """principal * e ** (rate * time)."""
    return ensure_decimal(principal) * exp(ensure_decimal(rate) * ensure_decimal(time))


def effective_annual_rate(nominal_rate: Number, periods: int) -> Decimal:
    """(1 + nominal/periods) ** periods - 1; zero for zero periods or rate."""
    nominal_rate = ensure_decimal(nominal_rate)
    if periods == 0 or nominal_rate.is_zero():
        return ZERO
    period_rate = nominal_rate / Decimal(periods)
    return power(ONE + period_rate, periods) - ONE


def cagr(beginning_value: Number, ending_value: Number, years: int, method: RootMethod = "direct") -> Decimal:
    """
    Compound annual growth rate as a fraction.

    ``(ending / beginning) ** (1 / years) - 1``. Returns zero when the
    beginning value is zero or *years* is not positive, instead of an
    undefined ratio.
    """
    beginning_value = ensure_decimal(beginning_value)
    ending_value = ensure_decimal(ending_value)
    if beginning_value.is_zero() or years <= 0:
        return ZERO
    ratio = ending_value / beginning_value
    if ratio == ONE:
        return ZERO
    return nth_root(ratio, years, method) - ONE


def rule_of_72(annual_rate: Number) -> Decimal:
    """Approximate doubling time in years: 72 / (rate * 100)."""
    return safe_divide(Decimal("72"), ensure_decimal(annual_rate) * Decimal("100"))
