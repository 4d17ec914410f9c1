"""
Input validation for projection, search and analyzer entry points.

Each validator normalizes its argument (to ``Decimal`` or ``int``) and
returns it, or raises a typed ``ValidationError`` subclass whose ``reason``
names the failed check.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Tuple

from .constants import (
    MAX_ANNUAL_EXPENSES,
    MAX_GROWTH_RATE,
    MAX_PROJECTION_YEARS,
    MAX_TARGET_AMOUNT,
    MIN_GROWTH_RATE,
)
from .exceptions import (
    InvalidInputError,
    InvalidYearsError,
    NegativeValueError,
    UnrealisticRateError,
)
from .utils import Number, ensure_decimal

logger = logging.getLogger(__name__)

__all__ = [
    "validate_current_value",
    "validate_contribution",
    "validate_years",
    "validate_growth_rate",
    "validate_target",
    "validate_expenses",
    "validate_periods",
]


def validate_current_value(value: Number) -> Decimal:
    value = ensure_decimal(value)
    if value < 0:
        raise NegativeValueError(
            f"Current value cannot be negative (got {value}).",
            reason="negative_current_value",
        )
    return value


def validate_contribution(value: Number) -> Decimal:
    value = ensure_decimal(value)
    if value < 0:
        raise NegativeValueError(
            f"Contribution cannot be negative (got {value}).",
            reason="negative_contribution",
        )
    return value


def validate_years(years: int, min_years: int = 0, max_years: int = MAX_PROJECTION_YEARS) -> int:
    """
    Accept only integer horizons in ``[min_years, max_years]``.

    ``bool`` and integral floats are rejected: the horizon must already be
    an ``int``.
    """
    if isinstance(years, bool) or not isinstance(years, int):
        raise InvalidYearsError(f"Years must be an integer (got {years!r}).")
    if years < min_years or years > max_years:
        raise InvalidYearsError(
            f"Years must be between {min_years} and {max_years} (got {years})."
        )
    return years


def validate_growth_rate(rate: Number) -> Decimal:
    rate = ensure_decimal(rate)
    if rate < MIN_GROWTH_RATE or rate > MAX_GROWTH_RATE:
        raise UnrealisticRateError(
            f"Growth rate {rate} outside realistic range [{MIN_GROWTH_RATE}, {MAX_GROWTH_RATE}]."
        )
    return rate


def validate_target(target: Number) -> Decimal:
    """Goal targets must be positive and at most ``MAX_TARGET_AMOUNT``."""
    target = ensure_decimal(target)
    if target <= 0:
        raise InvalidInputError(f"Target must be positive (got {target}).", reason="invalid_target")
    if target > MAX_TARGET_AMOUNT:
        raise InvalidInputError(
            f"Target {target} exceeds maximum of {MAX_TARGET_AMOUNT}.",
            reason="unrealistic_target",
        )
    return target


def validate_expenses(annual_expenses: Number) -> Decimal:
    annual_expenses = ensure_decimal(annual_expenses)
    if annual_expenses <= 0:
        raise InvalidInputError(f"Annual expenses must be positive (got {annual_expenses}).")
    if annual_expenses > MAX_ANNUAL_EXPENSES:
        raise InvalidInputError(
            f"Annual expenses {annual_expenses} exceed maximum of {MAX_ANNUAL_EXPENSES}.",
            reason="unrealistic_expenses",
        )
    return annual_expenses


def validate_periods(periods: Iterable[int]) -> Tuple[int, ...]:
    """
    Validate a multi-period request: a non-empty sequence of non-negative ints.

    Individual horizons above the projection limit are not rejected here;
    the batch records them as per-period failures.
    """
    if isinstance(periods, (str, bytes)):
        raise InvalidInputError("Periods must be a sequence of integers.", reason="invalid_periods")
    try:
        items: List[int] = list(periods)
    except TypeError:
        raise InvalidInputError(
            f"Periods must be a sequence of integers (got {periods!r}).",
            reason="invalid_periods",
        ) from None
    if not items:
        raise InvalidInputError("Periods must not be empty.", reason="invalid_periods")
    for p in items:
        if isinstance(p, bool) or not isinstance(p, int) or p < 0:
            raise InvalidInputError(
                f"Every period must be a non-negative integer (got {p!r}).",
                reason="invalid_periods",
            )
    return tuple(items)
