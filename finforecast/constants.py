"""
Global constants for finforecast.

Purpose
-------
Centralizes default values and magic numbers used throughout the projection
engine. Every rate, weight and tolerance is a ``Decimal`` so that callers can
mix them with user inputs without float contamination.

Usage
-----
>>> from finforecast.constants import DEFAULT_SCENARIO_RATES, FI_MULTIPLIER
>>> DEFAULT_SCENARIO_RATES["realistic"]
Decimal('0.07')

Categories
----------
- Calendar: months per year
- Validation: realistic rate band, horizon limits
- Scenarios: standard rates and weights
- Search: iteration caps, tolerance, bound multiplier
- Root finding: bisection bounds and iteration count
- Retirement: 25x rule, safe withdrawal rate
- Analyzer: default variations, feasibility thresholds
"""

from decimal import Decimal
from typing import Dict, Tuple

__all__ = [
    # Calendar
    "MONTHS_PER_YEAR",
    "DISPLAY_PLACES",
    # Validation
    "MIN_GROWTH_RATE",
    "MAX_GROWTH_RATE",
    "MAX_PROJECTION_YEARS",
    "MAX_ANALYZER_YEARS",
    "MAX_ANNUAL_EXPENSES",
    "MAX_TARGET_AMOUNT",
    # Scenarios
    "DEFAULT_SCENARIO_RATES",
    "DEFAULT_SCENARIO_WEIGHTS",
    # Search
    "DEFAULT_SEARCH_ITERATIONS",
    "DEFAULT_SEARCH_TOLERANCE",
    "CONTRIBUTION_BOUND_MULTIPLIER",
    "DEFAULT_MIN_YEARS",
    "DEFAULT_MAX_YEARS",
    # Root finding
    "NTH_ROOT_BISECTION_BOUNDS",
    "NTH_ROOT_BISECTION_ITERATIONS",
    "GUARD_DIGITS",
    # Projection
    "BREAKDOWN_YEARS",
    # Retirement
    "FI_MULTIPLIER",
    "SAFE_WITHDRAWAL_RATE",
    # Analyzer
    "DEFAULT_CONTRIBUTION_VARIATIONS",
    "GOAL_CONTRIBUTION_BUFFER",
    "CHALLENGING_MONTHLY_CONTRIBUTION",
    "AMBITIOUS_MONTHLY_CONTRIBUTION",
    "MAX_REASONABLE_MONTHLY_CONTRIBUTION",
    "DEFAULT_EMERGENCY_FUND_MONTHS",
]


# =============================================================================
# Calendar
# =============================================================================

MONTHS_PER_YEAR: int = 12
"""Number of months in a year (compounding and contribution conversions)."""

DISPLAY_PLACES: int = 2
"""Decimal places used wherever a result is rounded for display."""


# =============================================================================
# Validation
# =============================================================================

MIN_GROWTH_RATE: Decimal = Decimal("-0.5")
"""Lowest annual rate accepted by projections (-50%)."""

MAX_GROWTH_RATE: Decimal = Decimal("0.5")
"""Highest annual rate accepted by projections (+50%)."""

MAX_PROJECTION_YEARS: int = 100
"""Longest horizon accepted by the projection engine."""

MAX_ANALYZER_YEARS: int = 50
"""Longest horizon accepted by the contribution analyzer."""

MAX_ANNUAL_EXPENSES: Decimal = Decimal("1000000")
"""Annual expenses above this are rejected as unrealistic in FI planning."""

MAX_TARGET_AMOUNT: Decimal = Decimal("50000000")
"""Goal targets above this are rejected as unrealistic."""


# =============================================================================
# Scenarios
# =============================================================================

DEFAULT_SCENARIO_RATES: Dict[str, Decimal] = {
    "pessimistic": Decimal("0.05"),
    "realistic": Decimal("0.07"),
    "optimistic": Decimal("0.10"),
}
"""Annual rates of the three standard scenarios."""

DEFAULT_SCENARIO_WEIGHTS: Dict[str, Decimal] = {
    "pessimistic": Decimal("0.20"),
    "realistic": Decimal("0.60"),
    "optimistic": Decimal("0.20"),
}
"""Probability weights of the three standard scenarios (sum to 1)."""


# =============================================================================
# Search
# =============================================================================

DEFAULT_SEARCH_ITERATIONS: int = 50
"""Hard iteration cap for both bisection searches."""

DEFAULT_SEARCH_TOLERANCE: Decimal = Decimal("0.001")
"""Relative acceptance band of the contribution search (0.1% of target)."""

CONTRIBUTION_BOUND_MULTIPLIER: Decimal = Decimal("2")
"""Upper bound = multiplier x straight-line monthly contribution."""

DEFAULT_MIN_YEARS: int = 1
"""Shortest horizon returned by the years search."""

DEFAULT_MAX_YEARS: int = 100
"""Longest horizon returned by the years search."""


# =============================================================================
# Root finding
# =============================================================================

NTH_ROOT_BISECTION_BOUNDS: Tuple[Decimal, Decimal] = (Decimal("0.5"), Decimal("2.0"))
"""Initial bracket of the bisection nth-root (typical financial ratios)."""

NTH_ROOT_BISECTION_ITERATIONS: int = 20
"""Fixed iteration count of the bisection nth-root."""

GUARD_DIGITS: int = 10
"""Extra precision carried inside transcendental computations."""


# =============================================================================
# Projection
# =============================================================================

BREAKDOWN_YEARS: int = 5
"""Number of leading years decomposed in multi-period projections."""


# =============================================================================
# Retirement
# =============================================================================

FI_MULTIPLIER: Decimal = Decimal("25")
"""Financial independence target = annual expenses x 25 (4% rule)."""

SAFE_WITHDRAWAL_RATE: Decimal = Decimal("0.04")
"""Annual safe withdrawal rate."""


# =============================================================================
# Analyzer
# =============================================================================

DEFAULT_CONTRIBUTION_VARIATIONS: Tuple[Decimal, ...] = (
    Decimal("-500"),
    Decimal("-100"),
    Decimal("100"),
    Decimal("500"),
    Decimal("1000"),
)
"""Monthly dollar deltas applied in contribution sensitivity analysis."""

GOAL_CONTRIBUTION_BUFFER: Decimal = Decimal("1.001")
"""Multiplier applied to a searched contribution so it lands on the target."""

CHALLENGING_MONTHLY_CONTRIBUTION: Decimal = Decimal("5000")
"""Monthly contribution above which a goal is rated challenging."""

AMBITIOUS_MONTHLY_CONTRIBUTION: Decimal = Decimal("2500")
"""Monthly contribution above which a goal is rated ambitious."""

MAX_REASONABLE_MONTHLY_CONTRIBUTION: Decimal = Decimal("3000")
"""Monthly contribution used to build an alternative timeline."""

DEFAULT_EMERGENCY_FUND_MONTHS: int = 6
"""Months of expenses held in a fully funded emergency fund."""
