"""
Projection engine for finforecast.

Purpose
-------
Forward projections of a portfolio under a fixed annual rate and a fixed
annual contribution, built on ``rates.compound_with_aer``:

- project_portfolio_growth: single horizon, validated
- project_multi_period_growth: several horizons, first-5-years breakdown, CAGR
- calculate_scenario_projections / calculate_custom_scenarios: same inputs
  under several named rates
- calculate_fi_timeline: years until the portfolio reaches 25x expenses

Rounding policy
---------------
Projections with a non-zero contribution are rounded to 2 places; growth-only
projections keep full decimal precision so that ``100000 at 7% for 10 years``
reads back as ``196715.135729...``.

Batch policy
------------
Multi-period and multi-scenario calls skip entries that fail and record them
in ``errors``; the rest of the batch is still returned.

Example
-------
>>> from decimal import Decimal
>>> from finforecast.projection import project_portfolio_growth
>>> project_portfolio_growth(Decimal("100000"), Decimal("0"), 10, Decimal("0.07")).quantize(Decimal("0.01"))
Decimal('196715.14')
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Sequence, Union

import pandas as pd

from .constants import (
    BREAKDOWN_YEARS,
    DEFAULT_MAX_YEARS,
    DEFAULT_MIN_YEARS,
    DEFAULT_SCENARIO_WEIGHTS,
    FI_MULTIPLIER,
    SAFE_WITHDRAWAL_RATE,
)
from .exceptions import ForecastError, IncompleteBatchError, InvalidInputError
from .mathematical import RootMethod, cagr
from .rates import compound_with_aer
from .scenario import (
    Scenario,
    ScenarioAnalysis,
    ScenarioProjection,
    scenario_from_mapping,
    standard_scenarios,
    weighted_average,
)
from .utils import Number, annual_to_monthly, ensure_decimal, round_to, to_percentage
from .validation import (
    validate_contribution,
    validate_current_value,
    validate_expenses,
    validate_growth_rate,
    validate_periods,
    validate_years,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ProjectionResult",
    "YearlyBreakdown",
    "MultiPeriodProjection",
    "FIScenario",
    "FITimeline",
    "project_portfolio_growth",
    "project_multi_period_growth",
    "calculate_cagr",
    "calculate_scenario_projections",
    "calculate_custom_scenarios",
    "calculate_fi_timeline",
]

ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectionResult:
    """
    Projected value at one horizon.

    Attributes
    ----------
    value : Decimal
        Portfolio value after ``years``.
    years : int
        Horizon in whole years.
    cagr : Decimal
        Compound annual growth rate of ``value`` over the starting balance,
        in percent with 2 places.
    """
    value: Decimal
    years: int
    cagr: Decimal


@dataclass(frozen=True)
class YearlyBreakdown:
    """Decomposition of one year's value into contributions and growth."""
    year: int
    portfolio_value: Decimal
    total_contributions: Decimal
    growth_amount: Decimal


@dataclass(frozen=True)
class MultiPeriodProjection:
    """
    Output of ``project_multi_period_growth``.

    Attributes
    ----------
    projections : dict[int, ProjectionResult]
        Horizon -> result, ascending, for every horizon that succeeded.
    yearly_breakdown : dict[int, YearlyBreakdown]
        Years 1-5 decomposed.
    errors : dict[int, ForecastError]
        Horizons that failed, with the reason.
    """
    current_value: Decimal
    annual_contribution: Decimal
    growth_rate: Decimal
    projections: Dict[int, ProjectionResult]
    yearly_breakdown: Dict[int, YearlyBreakdown]
    errors: Dict[int, ForecastError] = field(default_factory=dict)

    def __getitem__(self, years: int) -> ProjectionResult:
        return self.projections[years]

    @property
    def periods(self) -> List[int]:
        return list(self.projections)

    def values(self) -> Dict[int, Decimal]:
        return {y: r.value for y, r in self.projections.items()}

    def cagr(self) -> Dict[int, Decimal]:
        return {y: r.cagr for y, r in self.projections.items()}

    def raise_if_incomplete(self) -> "MultiPeriodProjection":
        if self.errors:
            failed = ", ".join(f"{y} ({e.reason})" for y, e in self.errors.items())
            raise IncompleteBatchError(f"Periods failed: {failed}", errors=self.errors)
        return self

    def to_frame(self) -> pd.DataFrame:
        """One row per successful horizon, indexed by ``years``."""
        rows = [
            {"years": r.years, "value": r.value, "cagr_pct": r.cagr}
            for r in self.projections.values()
        ]
        return pd.DataFrame(rows, columns=["years", "value", "cagr_pct"]).set_index("years")

    def breakdown_frame(self) -> pd.DataFrame:
        rows = [
            {
                "year": b.year,
                "portfolio_value": b.portfolio_value,
                "total_contributions": b.total_contributions,
                "growth_amount": b.growth_amount,
            }
            for b in self.yearly_breakdown.values()
        ]
        return pd.DataFrame(
            rows, columns=["year", "portfolio_value", "total_contributions", "growth_amount"]
        ).set_index("year")


@dataclass(frozen=True)
class FIScenario:
    """Years to financial independence under one scenario rate."""
    name: str
    rate: Decimal
    years_to_fi: int
    portfolio_value: Decimal


@dataclass(frozen=True)
class FITimeline:
    """
    Output of ``calculate_fi_timeline``.

    ``reachable`` is False when the target is not met even at the maximum
    horizon; ``years_to_fi`` then equals that maximum.
    """
    years_to_fi: int
    target_amount: Decimal
    portfolio_value: Decimal
    safe_withdrawal_rate: Decimal
    reachable: bool
    scenario_analysis: Dict[str, FIScenario]
    errors: Dict[str, ForecastError] = field(default_factory=dict)

    @property
    def already_independent(self) -> bool:
        return self.years_to_fi == 0


# ---------------------------------------------------------------------------
# Single projection
# ---------------------------------------------------------------------------

def project_portfolio_growth(
    current_value: Number,
    annual_contribution: Number,
    years: int,
    growth_rate: Number,
) -> Decimal:
    """
    Project a portfolio forward with compound growth and regular contributions.

    Parameters
    ----------
    current_value : Number
        Starting balance, >= 0.
    annual_contribution : Number
        Yearly contribution, >= 0. Deposited monthly (``/12``).
    years : int
        Horizon, integer in ``[0, 100]``.
    growth_rate : Number
        Annual rate (AER) in ``[-0.5, 0.5]``.

    Returns
    -------
    Decimal
        Projected value; rounded to 2 places only when a contribution is made.

    Raises
    ------
    NegativeValueError
        ``negative_current_value`` or ``negative_contribution``.
    InvalidYearsError
        Non-integer or out-of-range horizon.
    UnrealisticRateError
        Rate outside the realistic band.

    Examples
    --------
    >>> project_portfolio_growth(100000, 12000, 10, "0.07")
    Decimal('367766.87')
    """
    logger.debug(
        "Projecting portfolio growth - current: %s, contribution: %s, years: %s, rate: %s",
        current_value, annual_contribution, years, growth_rate,
    )
    try:
        current_value = validate_current_value(current_value)
        annual_contribution = validate_contribution(annual_contribution)
        years = validate_years(years)
        growth_rate = validate_growth_rate(growth_rate)
    except ForecastError as e:
        logger.warning("Portfolio projection failed: %s", e.reason)
        raise

    monthly_contribution = annual_to_monthly(annual_contribution)
    result = compound_with_aer(current_value, growth_rate, years, monthly_contribution)
    if not annual_contribution.is_zero():
        result = round_to(result)

    logger.debug("Portfolio projection calculated: %s", result)
    return result


def calculate_cagr(
    initial_value: Number,
    final_value: Number,
    years: int,
    method: RootMethod = "direct",
) -> Decimal:
    """
    CAGR in percent, rounded to 2 places.

    ``Decimal('0.00')`` when ``years == 0`` or ``initial_value == 0``.

    Examples
    --------
    >>> calculate_cagr(100000, 200000, 10)
    Decimal('7.18')
    >>> calculate_cagr(0, 5000, 10)
    Decimal('0.00')
    """
    initial_value = ensure_decimal(initial_value)
    if years == 0 or initial_value.is_zero():
        return round_to(ZERO)
    return round_to(to_percentage(cagr(initial_value, final_value, years, method)))


# ---------------------------------------------------------------------------
# Multi-period projection
# ---------------------------------------------------------------------------

def _yearly_breakdown(
    current_value: Decimal,
    annual_contribution: Decimal,
    growth_rate: Decimal,
) -> Dict[int, YearlyBreakdown]:
    breakdown: Dict[int, YearlyBreakdown] = {}
    for year in range(1, BREAKDOWN_YEARS + 1):
        value = project_portfolio_growth(current_value, annual_contribution, year, growth_rate)
        contributions = annual_contribution * Decimal(year)
        breakdown[year] = YearlyBreakdown(
            year=year,
            portfolio_value=value,
            total_contributions=contributions,
            growth_amount=round_to(value - current_value - contributions),
        )
    return breakdown


def project_multi_period_growth(
    current_value: Number,
    annual_contribution: Number,
    growth_rate: Number,
    periods: Iterable[int],
    method: RootMethod = "direct",
) -> MultiPeriodProjection:
    """
    Project the same inputs over several horizons.

    Parameters
    ----------
    current_value, annual_contribution, growth_rate : Number
        As in :func:`project_portfolio_growth`.
    periods : iterable of int
        Non-empty collection of non-negative horizons. Duplicates collapse;
        results are in ascending order.
    method : {"direct", "bisection"}
        nth-root strategy used for the CAGR column.

    Returns
    -------
    MultiPeriodProjection
        Horizons that fail individually (e.g. beyond 100 years) are left out
        of ``projections`` and listed in ``errors``.
    """
    logger.debug(
        "Projecting multi-period growth - current: %s, contribution: %s, rate: %s, periods: %s",
        current_value, annual_contribution, growth_rate, periods,
    )
    try:
        current_value = validate_current_value(current_value)
        annual_contribution = validate_contribution(annual_contribution)
        growth_rate = validate_growth_rate(growth_rate)
        periods = validate_periods(periods)
    except ForecastError as e:
        logger.warning("Multi-period projection failed: %s", e.reason)
        raise

    projections: Dict[int, ProjectionResult] = {}
    errors: Dict[int, ForecastError] = {}
    for years in sorted(set(periods)):
        try:
            value = project_portfolio_growth(current_value, annual_contribution, years, growth_rate)
        except ForecastError as e:
            errors[years] = e
            continue
        projections[years] = ProjectionResult(
            value=value,
            years=years,
            cagr=calculate_cagr(current_value, value, years, method),
        )

    if errors:
        logger.warning("Skipped %d period(s): %s", len(errors), sorted(errors))

    return MultiPeriodProjection(
        current_value=current_value,
        annual_contribution=annual_contribution,
        growth_rate=growth_rate,
        projections=projections,
        yearly_breakdown=_yearly_breakdown(current_value, annual_contribution, growth_rate),
        errors=errors,
    )


# ---------------------------------------------------------------------------
# Scenario projections
# ---------------------------------------------------------------------------

def _project_scenarios(
    current_value: Decimal,
    annual_contribution: Decimal,
    years: int,
    scenarios: Sequence[Scenario],
):
    projections: Dict[str, ScenarioProjection] = {}
    errors: Dict[str, ForecastError] = {}
    for scenario in scenarios:
        try:
            value = project_portfolio_growth(current_value, annual_contribution, years, scenario.rate)
        except ForecastError as e:
            logger.warning("Scenario %r skipped: %s", scenario.name, e.reason)
            errors[scenario.name] = e
            continue
        projections[scenario.name] = ScenarioProjection(scenario.name, scenario.rate, value)
    return projections, errors


def calculate_scenario_projections(
    current_value: Number,
    annual_contribution: Number,
    years: int,
) -> ScenarioAnalysis:
    """
    Project under the standard pessimistic/realistic/optimistic rates.

    The weighted average uses the 20/60/20 weights over the scenarios that
    succeeded; a failed scenario is dropped from the sum, not zero-filled.

    Examples
    --------
    >>> analysis = calculate_scenario_projections(100000, 12000, 10)
    >>> analysis["realistic"].value
    Decimal('367766.87')
    """
    logger.debug(
        "Calculating scenario projections - current: %s, contribution: %s, years: %s",
        current_value, annual_contribution, years,
    )
    try:
        current_value = validate_current_value(current_value)
        annual_contribution = validate_contribution(annual_contribution)
        years = validate_years(years)
    except ForecastError as e:
        logger.warning("Scenario projection failed: %s", e.reason)
        raise

    projections, errors = _project_scenarios(
        current_value, annual_contribution, years, standard_scenarios()
    )
    values = {name: p.value for name, p in projections.items()}
    return ScenarioAnalysis(
        projections=projections,
        weighted_average=weighted_average(values, DEFAULT_SCENARIO_WEIGHTS),
        weights=dict(DEFAULT_SCENARIO_WEIGHTS),
        errors=errors,
    )


def calculate_custom_scenarios(
    current_value: Number,
    annual_contribution: Number,
    years: int,
    scenarios: Sequence[Union[Scenario, Mapping[str, object]]],
) -> ScenarioAnalysis:
    """
    Project under caller-defined scenarios.

    Every scenario is checked up front: a malformed entry raises
    ``InvalidInputError`` (``invalid_scenario``) and an out-of-band rate
    raises ``UnrealisticRateError``. No weighted average is computed.
    """
    logger.debug(
        "Calculating custom scenarios - current: %s, contribution: %s, years: %s",
        current_value, annual_contribution, years,
    )
    try:
        current_value = validate_current_value(current_value)
        annual_contribution = validate_contribution(annual_contribution)
        years = validate_years(years)
        if isinstance(scenarios, (str, bytes, Mapping)):
            raise InvalidInputError("Scenarios must be a sequence.", reason="invalid_scenario")
        parsed = [s if isinstance(s, Scenario) else scenario_from_mapping(s) for s in scenarios]
        for scenario in parsed:
            validate_growth_rate(scenario.rate)
    except ForecastError as e:
        logger.warning("Custom scenario calculation failed: %s", e.reason)
        raise

    projections, errors = _project_scenarios(current_value, annual_contribution, years, parsed)
    return ScenarioAnalysis(projections=projections, errors=errors)


# ---------------------------------------------------------------------------
# Financial independence
# ---------------------------------------------------------------------------

def calculate_fi_timeline(
    current_value: Number,
    annual_contribution: Number,
    annual_expenses: Number,
    growth_rate: Number,
    max_years: int = DEFAULT_MAX_YEARS,
    min_years: int = DEFAULT_MIN_YEARS,
) -> FITimeline:
    """
    Years until the portfolio reaches 25x annual expenses.

    When the portfolio already meets the target, ``years_to_fi`` is 0 and no
    search runs. Otherwise the years search finds the first whole year whose
    projection meets the target, and the projection at that horizon is
    returned as ``portfolio_value``. The same is repeated for the three
    standard rates in ``scenario_analysis``. ``min_years`` and ``max_years``
    bound the years search.

    Raises
    ------
    InvalidInputError
        ``invalid_input`` when expenses are not positive,
        ``unrealistic_expenses`` when they exceed 1,000,000.
    """
    from .search import find_required_years

    logger.debug(
        "Calculating FI timeline - current: %s, contribution: %s, expenses: %s, rate: %s",
        current_value, annual_contribution, annual_expenses, growth_rate,
    )
    try:
        current_value = validate_current_value(current_value)
        annual_contribution = validate_contribution(annual_contribution)
        annual_expenses = validate_expenses(annual_expenses)
        growth_rate = validate_growth_rate(growth_rate)
    except ForecastError as e:
        logger.warning("FI timeline calculation failed: %s", e.reason)
        raise

    target = annual_expenses * FI_MULTIPLIER

    if current_value >= target:
        logger.debug("Already financially independent with %s", current_value)
        return FITimeline(
            years_to_fi=0,
            target_amount=target,
            portfolio_value=current_value,
            safe_withdrawal_rate=SAFE_WITHDRAWAL_RATE,
            reachable=True,
            scenario_analysis={
                s.name: FIScenario(s.name, s.rate, 0, current_value) for s in standard_scenarios()
            },
        )

    monthly_contribution = annual_to_monthly(annual_contribution)
    years_to_fi = find_required_years(
        current_value, monthly_contribution, target, growth_rate,
        min_years=min_years, max_years=max_years,
    )
    portfolio_value = project_portfolio_growth(current_value, annual_contribution, years_to_fi, growth_rate)

    scenario_analysis: Dict[str, FIScenario] = {}
    errors: Dict[str, ForecastError] = {}
    for scenario in standard_scenarios():
        try:
            years = find_required_years(
                current_value, monthly_contribution, target, scenario.rate,
                min_years=min_years, max_years=max_years,
            )
            value = project_portfolio_growth(current_value, annual_contribution, years, scenario.rate)
        except ForecastError as e:
            errors[scenario.name] = e
            continue
        scenario_analysis[scenario.name] = FIScenario(scenario.name, scenario.rate, years, value)

    logger.debug("FI timeline calculated: %d years to reach %s", years_to_fi, target)
    return FITimeline(
        years_to_fi=years_to_fi,
        target_amount=target,
        portfolio_value=portfolio_value,
        safe_withdrawal_rate=SAFE_WITHDRAWAL_RATE,
        reachable=portfolio_value >= target,
        scenario_analysis=scenario_analysis,
        errors=errors,
    )
