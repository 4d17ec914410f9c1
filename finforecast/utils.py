"""General decimal utilities for finforecast

Contents
--------
- Conversion (ensure_decimal)
- Validation helpers (check_non_negative)
- Safe arithmetic (safe_divide, percentage_change, clamp, min/max)
- Unit conversions (percentages, monthly <-> annual amounts)
- Sign predicates (is_positive, is_negative, is_zero)
- Aggregation (decimal_sum, average)
- Rounding and formatting (round_to, format_currency)

Nothing here rounds unless explicitly asked to.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Union

from .constants import DISPLAY_PLACES, MONTHS_PER_YEAR
from .exceptions import DivisionByZeroError, InvalidInputError, NegativeValueError

__all__ = [
    "Number",
    # Conversion
    "ensure_decimal",
    # Validation
    "check_non_negative",
    # Arithmetic
    "safe_divide",
    "percentage_change",
    "decimal_max",
    "decimal_min",
    "clamp",
    # Units
    "to_percentage",
    "from_percentage",
    "monthly_to_annual",
    "annual_to_monthly",
    # Predicates
    "is_positive",
    "is_negative",
    "is_zero",
    # Aggregation
    "decimal_sum",
    "average",
    # Rounding / formatting
    "round_to",
    "format_currency",
]

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWELVE = Decimal(MONTHS_PER_YEAR)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

def ensure_decimal(value: Optional[Number]) -> Decimal:
    """Coerce *value* to a finite Decimal.

    ``None`` maps to zero. Floats go through ``str()`` so that ``0.07``
    becomes ``Decimal('0.07')`` rather than its binary expansion.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise InvalidInputError(f"Expected a number, got bool {value!r}.")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation:
            raise InvalidInputError(f"Cannot interpret {value!r} as a number.") from None
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise InvalidInputError(
            f"Expected Decimal, int, float or str, got {type(value).__name__}."
        )
    if not result.is_finite():
        raise InvalidInputError(f"Expected a finite number, got {value!r}.")
    return result


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_non_negative(name: str, value: Number) -> None:
    """Raise if *value* is negative (strict)."""
    if ensure_decimal(value) < 0:
        raise NegativeValueError(f"{name} must be non-negative (got {value}).")


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def safe_divide(dividend: Number, divisor: Number) -> Decimal:
    """Divide two decimals, raising DivisionByZeroError on a zero divisor.

    The decimal module's own trap is replaced by a typed error so callers
    can choose their fallback (commonly zero).

    Examples
    --------
    >>> safe_divide(10, 4)
    Decimal('2.5')
    """
    divisor = ensure_decimal(divisor)
    if divisor.is_zero():
        raise DivisionByZeroError(f"Cannot divide {dividend} by zero.")
    return ensure_decimal(dividend) / divisor


def percentage_change(start: Number, end: Number) -> Decimal:
    """Percentage change from *start* to *end*; zero when *start* is zero."""
    start = ensure_decimal(start)
    if start.is_zero():
        return ZERO
    return to_percentage((ensure_decimal(end) - start) / start)


def decimal_max(a: Number, b: Number) -> Decimal:
    a, b = ensure_decimal(a), ensure_decimal(b)
    return a if a > b else b


def decimal_min(a: Number, b: Number) -> Decimal:
    a, b = ensure_decimal(a), ensure_decimal(b)
    return a if a < b else b


def clamp(value: Number, lower: Number, upper: Number) -> Decimal:
    """Clamp *value* into ``[lower, upper]``."""
    return decimal_min(decimal_max(value, lower), upper)


# ---------------------------------------------------------------------------
# Unit conversions
# ---------------------------------------------------------------------------

def to_percentage(value: Number) -> Decimal:
    """Fraction to percentage: 0.075 -> 7.5."""
    return ensure_decimal(value) * HUNDRED


def from_percentage(value: Number) -> Decimal:
    """Percentage to fraction: 7.5 -> 0.075."""
    return ensure_decimal(value) / HUNDRED


def monthly_to_annual(value: Number) -> Decimal:
    """Monthly amount to annual amount (x12). Amounts, not rates."""
    return ensure_decimal(value) * TWELVE


def annual_to_monthly(value: Number) -> Decimal:
    """Annual amount to monthly amount (/12). Amounts, not rates."""
    return ensure_decimal(value) / TWELVE


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_positive(value: Number) -> bool:
    return ensure_decimal(value) > 0


def is_negative(value: Number) -> bool:
    return ensure_decimal(value) < 0


def is_zero(value: Number) -> bool:
    return ensure_decimal(value).is_zero()


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def decimal_sum(values: Iterable[Number]) -> Decimal:
    """Sum of *values* as a Decimal (empty -> 0)."""
    return sum((ensure_decimal(v) for v in values), ZERO)


def average(values: Iterable[Number]) -> Decimal:
    """Arithmetic mean of *values*; zero for an empty iterable."""
    items = [ensure_decimal(v) for v in values]
    if not items:
        return ZERO
    return decimal_sum(items) / Decimal(len(items))


# ---------------------------------------------------------------------------
# Rounding and formatting
# ---------------------------------------------------------------------------

def round_to(value: Number, places: int = DISPLAY_PLACES) -> Decimal:
    """Round half-up to *places* decimal places.

    Examples
    --------
    >>> round_to(Decimal("10.125"))
    Decimal('10.13')
    """
    exponent = Decimal(1).scaleb(-int(places))
    return ensure_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def format_currency(value: Number, decimals: int = DISPLAY_PLACES, symbol: str = "$") -> str:
    """
    Format a monetary amount with thousands separators.

    Parameters
    ----------
    value : Number
        Monetary amount.
    decimals : int, default 2
        Number of decimal places to display.
    symbol : str, default '$'
        Currency symbol prefix.

    Returns
    -------
    str
        Formatted string; negatives carry a leading minus sign.

    Examples
    --------
    >>> format_currency(Decimal("1234567.891"))
    '$1,234,567.89'
    >>> format_currency(-1000, decimals=0)
    '-$1,000'
    """
    amount = round_to(value, decimals)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{decimals}f}"
