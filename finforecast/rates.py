"""
Rate conversion core (AER engine).

Purpose
-------
Converts between interest-rate conventions and compounds balances with an
Annual Equivalent Rate (AER), optionally with a fixed monthly contribution.

Conventions
-----------
- Rates are fractions: ``Decimal("0.07")`` means 7% per year.
- A rate of -1 or below (a loss of 100% per period or more) is rejected
  with ``InvalidRateError``.
- Nothing here rounds; presentation rounding happens in ``projection``.

Key functions
-------------
- monthly_to_aer / aer_to_monthly: ``(1+r)^12 - 1`` and its inverse
- effective_rate / nominal_rate: compounding-frequency conversions
- continuous_to_aer / aer_to_continuous: ``e^r - 1`` and ``ln(1+a)``
- compound_with_aer: balance after *years* with monthly contributions
- future_value_with_regular_deposits: same, for quarterly/annual deposits

Example
-------
>>> from decimal import Decimal
>>> from finforecast.rates import compound_with_aer
>>> compound_with_aer(Decimal("10000"), Decimal("0"), 10, Decimal("100"))
Decimal('22000')
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Literal

from .constants import MONTHS_PER_YEAR
from .exceptions import InvalidInputError, InvalidRateError, InvalidYearsError
from .mathematical import exp, ln, nth_root, power
from .utils import Number, ensure_decimal

logger = logging.getLogger(__name__)

__all__ = [
    "DepositFrequency",
    "PERIODS_PER_YEAR",
    "periods_per_year",
    "monthly_to_aer",
    "aer_to_monthly",
    "effective_rate",
    "nominal_rate",
    "continuous_to_aer",
    "aer_to_continuous",
    "compound_with_aer",
    "future_value_with_regular_deposits",
]

DepositFrequency = Literal["monthly", "quarterly", "annual"]

PERIODS_PER_YEAR: Dict[str, int] = {
    "monthly": 12,
    "quarterly": 4,
    "annual": 1,
}

ZERO = Decimal("0")
ONE = Decimal("1")
TWELVE = Decimal(MONTHS_PER_YEAR)


def _check_rate(rate: Number, name: str = "rate") -> Decimal:
    rate = ensure_decimal(rate)
    if rate <= -ONE:
        raise InvalidRateError(f"{name} must be greater than -1 (got {rate}).")
    return rate


def _check_periods(periods: int) -> int:
    if isinstance(periods, bool) or not isinstance(periods, int) or periods < 1:
        raise InvalidInputError(
            f"Compounding periods must be an integer >= 1 (got {periods!r}).",
            reason="invalid_periods",
        )
    return periods


def periods_per_year(frequency: str) -> int:
    """Number of deposits per year for *frequency*."""
    try:
        return PERIODS_PER_YEAR[frequency]
    except KeyError:
        raise InvalidInputError(
            f"Unknown deposit frequency {frequency!r}; expected one of {sorted(PERIODS_PER_YEAR)}.",
            reason="invalid_frequency",
        ) from None


# ---------------------------------------------------------------------------
# Monthly <-> annual
# ---------------------------------------------------------------------------

def monthly_to_aer(monthly_rate: Number) -> Decimal:
    """
    Annual Equivalent Rate of a monthly rate: ``(1 + r) ** 12 - 1``.

    Examples
    --------
    >>> monthly_to_aer(Decimal("0.01")).quantize(Decimal("0.000001"))
    Decimal('0.126825')
    """
    monthly_rate = _check_rate(monthly_rate, "monthly rate")
    if monthly_rate.is_zero():
        return ZERO
    return power(ONE + monthly_rate, MONTHS_PER_YEAR) - ONE


def aer_to_monthly(aer: Number) -> Decimal:
    """
    Monthly rate equivalent to an AER: ``(1 + aer) ** (1/12) - 1``.

    Inverse of :func:`monthly_to_aer` to within decimal precision.
    """
    aer = _check_rate(aer, "AER")
    if aer.is_zero():
        return ZERO
    return nth_root(ONE + aer, MONTHS_PER_YEAR) - ONE


# ---------------------------------------------------------------------------
# Nominal <-> effective
# ---------------------------------------------------------------------------

def effective_rate(nominal: Number, periods: int) -> Decimal:
    """Effective annual rate of *nominal* compounded *periods* times a year."""
    _check_periods(periods)
    nominal = ensure_decimal(nominal)
    if periods == 1:
        return nominal
    period_rate = _check_rate(nominal / Decimal(periods), "period rate")
    return power(ONE + period_rate, periods) - ONE


def nominal_rate(effective: Number, periods: int) -> Decimal:
    """Nominal annual rate that compounds to *effective* over *periods* periods."""
    _check_periods(periods)
    effective = ensure_decimal(effective)
    if periods == 1:
        return effective
    effective = _check_rate(effective, "effective rate")
    return Decimal(periods) * (nth_root(ONE + effective, periods) - ONE)


# ---------------------------------------------------------------------------
# Continuous <-> annual
# ---------------------------------------------------------------------------

def continuous_to_aer(continuous_rate: Number) -> Decimal:
    """AER of a continuously compounded rate: ``e ** r - 1``."""
    return exp(continuous_rate) - ONE


def aer_to_continuous(aer: Number) -> Decimal:
    """Continuously compounded rate equivalent to an AER: ``ln(1 + aer)``."""
    aer = _check_rate(aer, "AER")
    return ln(ONE + aer)


# ---------------------------------------------------------------------------
# Compounding
# ---------------------------------------------------------------------------

def compound_with_aer(
    principal: Number,
    aer: Number,
    years: int,
    monthly_contribution: Number = 0,
) -> Decimal:
    """
    Balance after *years* of growth at *aer* with an optional monthly deposit.

    Branches, evaluated in order:

    1. ``years == 0``: the principal, unchanged.
    2. ``aer == 0``: ``principal + contribution * 12 * years``.
    3. ``contribution == 0``: ``principal * (1 + aer) ** years``.
    4. otherwise monthly compounding at ``m = aer_to_monthly(aer)`` with
       end-of-month deposits::

           principal * (1+m)^(12y) + contribution * ((1+m)^(12y) - 1) / m

    Parameters
    ----------
    principal : Number
        Starting balance.
    aer : Number
        Annual Equivalent Rate as a fraction, > -1.
    years : int
        Non-negative whole years.
    monthly_contribution : Number, default 0
        Deposit at the end of every month.

    Returns
    -------
    Decimal
        Unrounded balance.

    Examples
    --------
    >>> compound_with_aer(Decimal("100000"), Decimal("0.07"), 10).quantize(Decimal("0.01"))
    Decimal('196715.14')
    """
    principal = ensure_decimal(principal)
    aer = _check_rate(aer, "AER")
    contribution = ensure_decimal(monthly_contribution)
    if isinstance(years, bool) or not isinstance(years, int) or years < 0:
        raise InvalidYearsError(f"Years must be a non-negative integer (got {years!r}).")

    if years == 0:
        return principal
    if aer.is_zero():
        return principal + contribution * TWELVE * Decimal(years)
    if contribution.is_zero():
        return principal * power(ONE + aer, years)

    monthly_rate = aer_to_monthly(aer)
    growth = power(ONE + monthly_rate, MONTHS_PER_YEAR * years)
    return principal * growth + contribution * (growth - ONE) / monthly_rate


def future_value_with_regular_deposits(
    principal: Number,
    deposit: Number,
    aer: Number,
    years: int,
    frequency: DepositFrequency = "monthly",
) -> Decimal:
    """
    Future value with deposits at a monthly, quarterly or annual frequency.

    The deposit is converted to its monthly equivalent
    (``deposit * periods_per_year / 12``) and compounded with
    :func:`compound_with_aer`.
    """
    per_year = periods_per_year(frequency)
    monthly_equivalent = ensure_decimal(deposit) * Decimal(per_year) / TWELVE
    logger.debug(
        "Deposits of %s %s -> %s monthly equivalent", deposit, frequency, monthly_equivalent
    )
    return compound_with_aer(principal, aer, years, monthly_equivalent)
