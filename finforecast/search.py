"""
Bounded search engine for finforecast.

Purpose
-------
Inverts ``project_portfolio_growth`` by bisection:

- find_required_contribution: monthly contribution that reaches a target
  within a fixed horizon.
- find_required_years: smallest whole-year horizon at which a fixed monthly
  contribution reaches a target.

Both loops are explicit and iteration-capped, so every call terminates.
Both assume the projection is non-decreasing in the search variable, which
holds for rates in the realistic band; this is a precondition, not checked.

Units
-----
The contribution search variable is a *monthly* amount. Every probe projects
with ``monthly * 12`` as the annual contribution, and the result is a monthly
amount.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .constants import (
    CONTRIBUTION_BOUND_MULTIPLIER,
    DEFAULT_MAX_YEARS,
    DEFAULT_MIN_YEARS,
    DEFAULT_SEARCH_ITERATIONS,
    DEFAULT_SEARCH_TOLERANCE,
    MAX_PROJECTION_YEARS,
)
from .exceptions import InvalidInputError, InvalidYearsError
from .projection import project_portfolio_growth
from .utils import Number, ensure_decimal, monthly_to_annual
from .validation import (
    validate_contribution,
    validate_current_value,
    validate_growth_rate,
    validate_years,
)

logger = logging.getLogger(__name__)

__all__ = [
    "SearchBounds",
    "SearchResult",
    "contribution_bounds",
    "bisect_contribution",
    "find_required_contribution",
    "find_required_years",
]

ZERO = Decimal("0")
TWO = Decimal("2")


@dataclass(frozen=True)
class SearchBounds:
    """
    Bracket and stopping rules of a bisection.

    Attributes
    ----------
    lower, upper : Decimal
        Initial bracket, ``lower <= upper``.
    max_iterations : int
        Hard cap on projection probes.
    tolerance : Decimal
        Relative acceptance band: a probe within ``tolerance * target`` of
        the target is accepted.
    """
    lower: Decimal
    upper: Decimal
    max_iterations: int = DEFAULT_SEARCH_ITERATIONS
    tolerance: Decimal = DEFAULT_SEARCH_TOLERANCE

    def __post_init__(self):
        lower = ensure_decimal(self.lower)
        upper = ensure_decimal(self.upper)
        tolerance = ensure_decimal(self.tolerance)
        if lower > upper:
            raise InvalidInputError(f"Search bounds require lower <= upper (got [{lower}, {upper}]).")
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int) \
                or self.max_iterations < 1:
            raise InvalidInputError(
                f"max_iterations must be a positive integer (got {self.max_iterations!r})."
            )
        if tolerance < 0:
            raise InvalidInputError(f"Tolerance must be non-negative (got {tolerance}).")
        object.__setattr__(self, "lower", lower)
        object.__setattr__(self, "upper", upper)
        object.__setattr__(self, "tolerance", tolerance)

    @property
    def midpoint(self) -> Decimal:
        return (self.lower + self.upper) / TWO


@dataclass(frozen=True)
class SearchResult:
    """
    Outcome of a contribution bisection.

    ``converged`` is False when the iteration cap was hit; ``value`` is then
    the midpoint of the final bracket.
    """
    value: Decimal
    iterations: int
    converged: bool


def contribution_bounds(
    current_value: Number,
    target: Number,
    years: int,
    max_iterations: int = DEFAULT_SEARCH_ITERATIONS,
    tolerance: Number = DEFAULT_SEARCH_TOLERANCE,
) -> SearchBounds:
    """
    Default bracket of the contribution search.

    ``[0, 2 * (target - current) / years / 12]``: twice the straight-line
    monthly contribution, clamped at zero when the target is already met.

    Examples
    --------
    >>> contribution_bounds(0, 120000, 10).upper
    Decimal('2000')
    """
    if years <= 0:
        raise InvalidYearsError(f"Contribution search needs at least one year (got {years}).")
    gap = ensure_decimal(target) - ensure_decimal(current_value)
    straight_line = gap / Decimal(years) / Decimal(12)
    upper = max(CONTRIBUTION_BOUND_MULTIPLIER * straight_line, ZERO)
    return SearchBounds(
        lower=ZERO,
        upper=upper,
        max_iterations=max_iterations,
        tolerance=ensure_decimal(tolerance),
    )


def bisect_contribution(
    current_value: Number,
    target: Number,
    years: int,
    growth_rate: Number,
    bounds: SearchBounds,
) -> SearchResult:
    """
    Bisect the monthly contribution inside *bounds*.

    Each probe projects ``current_value`` over *years* with ``mid * 12`` per
    year. A probe within ``bounds.tolerance * target`` is accepted;
    undershoots raise the lower bound, overshoots lower the upper bound.
    """
    target = ensure_decimal(target)
    band = bounds.tolerance * target
    lower, upper = bounds.lower, bounds.upper

    for iteration in range(1, bounds.max_iterations + 1):
        mid = (lower + upper) / TWO
        projected = project_portfolio_growth(current_value, monthly_to_annual(mid), years, growth_rate)
        if abs(projected - target) <= band:
            logger.debug("Contribution search converged after %d iterations: %s", iteration, mid)
            return SearchResult(value=mid, iterations=iteration, converged=True)
        if projected < target:
            lower = mid
        else:
            upper = mid

    mid = (lower + upper) / TWO
    logger.debug(
        "Contribution search hit the %d-iteration cap; returning bracket midpoint %s",
        bounds.max_iterations, mid,
    )
    return SearchResult(value=mid, iterations=bounds.max_iterations, converged=False)


def find_required_contribution(
    current_value: Number,
    target: Number,
    years: int,
    growth_rate: Number,
    bounds: Optional[SearchBounds] = None,
) -> Decimal:
    """
    Monthly contribution needed to reach *target* in *years*.

    Parameters
    ----------
    current_value : Number
        Starting balance, >= 0.
    target : Number
        Amount to reach.
    years : int
        Horizon, integer in ``[1, 100]``.
    growth_rate : Number
        Annual rate in the realistic band.
    bounds : SearchBounds, optional
        Override of :func:`contribution_bounds`.

    Returns
    -------
    Decimal
        Monthly amount, unrounded. Zero when ``target <= current_value`` or
        when growth alone reaches the target.
    """
    logger.debug(
        "Finding required contribution - current: %s, target: %s, years: %s, rate: %s",
        current_value, target, years, growth_rate,
    )
    current_value = validate_current_value(current_value)
    target = ensure_decimal(target)
    years = validate_years(years, min_years=1)
    growth_rate = validate_growth_rate(growth_rate)

    if target <= current_value:
        return ZERO
    if project_portfolio_growth(current_value, ZERO, years, growth_rate) >= target:
        logger.debug("Growth alone reaches %s in %d years", target, years)
        return ZERO

    if bounds is None:
        bounds = contribution_bounds(current_value, target, years)
    result = bisect_contribution(current_value, target, years, growth_rate, bounds)
    if not result.converged:
        logger.warning(
            "Contribution search did not converge within %d iterations for target %s",
            bounds.max_iterations, target,
        )
    return result.value


def find_required_years(
    current_value: Number,
    monthly_contribution: Number,
    target: Number,
    growth_rate: Number,
    min_years: int = DEFAULT_MIN_YEARS,
    max_years: int = DEFAULT_MAX_YEARS,
    max_iterations: int = DEFAULT_SEARCH_ITERATIONS,
) -> int:
    """
    Smallest whole-year horizon in ``[min_years, max_years]`` that meets *target*.

    The bracket ``(lo, hi]`` starts at ``(min_years - 1, max_years]``: the
    lower end is exclusive, so a target met in ``min_years`` itself is found.
    Probes below the target raise ``lo``; probes meeting it lower ``hi``.
    The loop stops when ``hi - lo <= 1`` and returns ``hi``.

    When even ``max_years`` falls short, ``max_years`` is returned; compare
    the projection at that horizon with the target to detect it.

    Examples
    --------
    >>> find_required_years(100000, 0, 200000, "0.07")
    11
    """
    logger.debug(
        "Finding required years - current: %s, monthly: %s, target: %s, rate: %s",
        current_value, monthly_contribution, target, growth_rate,
    )
    current_value = validate_current_value(current_value)
    monthly_contribution = validate_contribution(monthly_contribution)
    target = ensure_decimal(target)
    growth_rate = validate_growth_rate(growth_rate)
    for name, value in (("min_years", min_years), ("max_years", max_years)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidYearsError(f"{name} must be an integer (got {value!r}).")
    if not 0 <= min_years <= max_years <= MAX_PROJECTION_YEARS:
        raise InvalidYearsError(
            f"Year bounds must satisfy 0 <= min <= max <= {MAX_PROJECTION_YEARS} "
            f"(got [{min_years}, {max_years}])."
        )

    annual_contribution = monthly_to_annual(monthly_contribution)
    lo, hi = min_years - 1, max_years

    for _ in range(max_iterations):
        if hi - lo <= 1:
            break
        mid = (lo + hi) // 2
        projected = project_portfolio_growth(current_value, annual_contribution, mid, growth_rate)
        if projected < target:
            lo = mid
        else:
            hi = mid

    logger.debug("Years search result: %d", hi)
    return hi
