"""
Goal and contribution analyzer for finforecast.

Purpose
-------
Comparative reports composed from the projection and search engines:

- analyze_contribution_impact: sensitivity of the final value to +/- dollar
  changes in the monthly contribution
- optimize_contribution_for_goal: monthly contribution needed for a target,
  with feasibility, scenario confidence and an alternative timeline
- compare_contribution_strategies: named candidate contributions ranked
  against a target
- calculate_contribution_breakeven: contribution that keeps pace with
  inflation
- analyze_contribution_timing: lump sum vs dollar cost averaging under a
  volatility band

Horizons here are integers in ``[1, 50]``. Contributions are monthly
amounts; projections receive ``monthly * 12``.

Example
-------
>>> from decimal import Decimal
>>> from finforecast.analyzer import optimize_contribution_for_goal
>>> result = optimize_contribution_for_goal(100000, 1000000, 20, "0.07")
>>> result.goal_feasibility
'achievable'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from .constants import (
    AMBITIOUS_MONTHLY_CONTRIBUTION,
    CHALLENGING_MONTHLY_CONTRIBUTION,
    DEFAULT_CONTRIBUTION_VARIATIONS,
    DEFAULT_SCENARIO_WEIGHTS,
    GOAL_CONTRIBUTION_BUFFER,
    MAX_ANALYZER_YEARS,
    MAX_REASONABLE_MONTHLY_CONTRIBUTION,
)
from .exceptions import ForecastError, InvalidInputError, InvalidRateError, NegativeValueError
from .mathematical import power
from .projection import project_portfolio_growth
from .scenario import standard_scenarios
from .search import find_required_contribution, find_required_years
from .utils import Number, ensure_decimal, monthly_to_annual, round_to, safe_divide, to_percentage
from .validation import (
    validate_contribution,
    validate_current_value,
    validate_growth_rate,
    validate_target,
    validate_years,
)

logger = logging.getLogger(__name__)

__all__ = [
    # Results
    "BaseProjection",
    "ContributionVariation",
    "ContributionImpact",
    "ScenarioOutcome",
    "AlternativeTimeline",
    "GoalOptimization",
    "StrategyAnalysis",
    "StrategyComparison",
    "ContributionBreakeven",
    "LumpSumOutcome",
    "DollarCostAveragingOutcome",
    "TimingRecommendation",
    "TimingAnalysis",
    # Operations
    "analyze_contribution_impact",
    "optimize_contribution_for_goal",
    "compare_contribution_strategies",
    "calculate_contribution_breakeven",
    "analyze_contribution_timing",
    "assess_goal_feasibility",
    "assess_volatility_level",
]

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

LOW_VOLATILITY = Decimal("0.10")
MEDIUM_VOLATILITY = Decimal("0.20")
VOLATILITY_BAND_SIGMAS = Decimal("2")
DCA_VOLATILITY_REDUCTION = Decimal("0.7")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BaseProjection:
    monthly_contribution: Decimal
    annual_contribution: Decimal
    final_value: Decimal


@dataclass(frozen=True)
class ContributionVariation:
    """One row of a sensitivity analysis. ``percentage_impact`` is in percent."""
    monthly_contribution: Decimal
    annual_contribution: Decimal
    final_value: Decimal
    difference_from_base: Decimal
    percentage_impact: Decimal


@dataclass(frozen=True)
class ContributionImpact:
    base_projection: BaseProjection
    contribution_variations: List[ContributionVariation]

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "monthly_contribution": v.monthly_contribution,
                "annual_contribution": v.annual_contribution,
                "final_value": v.final_value,
                "difference_from_base": v.difference_from_base,
                "percentage_impact": v.percentage_impact,
            }
            for v in self.contribution_variations
        ]
        return pd.DataFrame(rows, columns=[
            "monthly_contribution", "annual_contribution", "final_value",
            "difference_from_base", "percentage_impact",
        ])


@dataclass(frozen=True)
class ScenarioOutcome:
    name: str
    rate: Decimal
    goal_met: bool
    final_value: Decimal


@dataclass(frozen=True)
class AlternativeTimeline:
    """Horizon needed at the maximum reasonable monthly contribution."""
    years_needed: int
    suggested_monthly_contribution: Decimal
    achievable_with_max_contribution: bool


@dataclass(frozen=True)
class GoalOptimization:
    """
    Output of ``optimize_contribution_for_goal``.

    Attributes
    ----------
    required_monthly_contribution : Decimal
        Searched contribution with the 0.1% buffer, 2 places.
    goal_feasibility : str
        "achievable", "ambitious" or "challenging".
    probability_of_success : Decimal
        Weighted share of standard scenarios meeting the goal, in percent
        with 1 place.
    alternative_timeline : AlternativeTimeline or None
        Present only when the goal is challenging.
    """
    required_monthly_contribution: Decimal
    required_annual_contribution: Decimal
    projected_final_value: Decimal
    goal_already_achieved: bool
    goal_feasibility: str
    probability_of_success: Decimal
    confidence_analysis: Dict[str, ScenarioOutcome]
    current_surplus: Decimal = ZERO
    alternative_timeline: Optional[AlternativeTimeline] = None


@dataclass(frozen=True)
class StrategyAnalysis:
    name: str
    monthly_contribution: Decimal
    total_contributions: Decimal
    final_value: Decimal
    goal_achieved: bool
    surplus_or_shortfall: Decimal
    years_to_goal: int
    contribution_efficiency: Decimal
    marginal_benefit: Decimal


@dataclass(frozen=True)
class StrategyComparison:
    strategies: List[StrategyAnalysis]
    recommended_strategy: Optional[str]
    minimum_required_contribution: Decimal
    strategies_achieving_goal: int
    success_rate: Decimal
    errors: Dict[str, ForecastError] = field(default_factory=dict)

    @property
    def total_strategies_analyzed(self) -> int:
        return len(self.strategies)

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "name": s.name,
                "monthly_contribution": s.monthly_contribution,
                "final_value": s.final_value,
                "goal_achieved": s.goal_achieved,
                "years_to_goal": s.years_to_goal,
                "contribution_efficiency": s.contribution_efficiency,
            }
            for s in self.strategies
        ]
        return pd.DataFrame(rows, columns=[
            "name", "monthly_contribution", "final_value", "goal_achieved",
            "years_to_goal", "contribution_efficiency",
        ]).set_index("name")


@dataclass(frozen=True)
class ContributionBreakeven:
    breakeven_monthly_contribution: Decimal
    real_return_rate: Decimal
    inflation_factor: Decimal
    inflation_adjusted_value: Decimal
    contribution_required_reason: str
    purchasing_power_maintained: bool = True


@dataclass(frozen=True)
class LumpSumOutcome:
    expected_value: Decimal
    best_case: Decimal
    worst_case: Decimal
    volatility_impact: Decimal


@dataclass(frozen=True)
class DollarCostAveragingOutcome:
    expected_value: Decimal
    monthly_amount: Decimal
    volatility_reduction: Decimal
    opportunity_cost: Decimal


@dataclass(frozen=True)
class TimingRecommendation:
    strategy: str
    volatility_assessment: str
    reasoning: str


@dataclass(frozen=True)
class TimingAnalysis:
    lump_sum: LumpSumOutcome
    dollar_cost_averaging: DollarCostAveragingOutcome
    recommendation: TimingRecommendation


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _validate_analyzer_years(years: int) -> int:
    return validate_years(years, min_years=1, max_years=MAX_ANALYZER_YEARS)


def _confidence_analysis(
    current_value: Decimal,
    annual_contribution: Decimal,
    target: Decimal,
    years: int,
) -> Dict[str, ScenarioOutcome]:
    outcomes: Dict[str, ScenarioOutcome] = {}
    for scenario in standard_scenarios():
        final_value = project_portfolio_growth(current_value, annual_contribution, years, scenario.rate)
        outcomes[scenario.name] = ScenarioOutcome(
            name=scenario.name,
            rate=scenario.rate,
            goal_met=final_value >= target,
            final_value=final_value,
        )
    return outcomes


def _success_probability(confidence: Mapping[str, ScenarioOutcome]) -> Decimal:
    weighted = sum(
        (weight for name, weight in DEFAULT_SCENARIO_WEIGHTS.items()
         if name in confidence and confidence[name].goal_met),
        ZERO,
    )
    return round_to(weighted * HUNDRED, 1)


def assess_goal_feasibility(required_monthly: Number) -> str:
    """Classify a monthly contribution: challenging > 5000 > ambitious > 2500."""
    required_monthly = ensure_decimal(required_monthly)
    if required_monthly > CHALLENGING_MONTHLY_CONTRIBUTION:
        return "challenging"
    if required_monthly > AMBITIOUS_MONTHLY_CONTRIBUTION:
        return "ambitious"
    return "achievable"


def assess_volatility_level(volatility: Number) -> str:
    volatility = ensure_decimal(volatility)
    if volatility > MEDIUM_VOLATILITY:
        return "high"
    if volatility > LOW_VOLATILITY:
        return "medium"
    return "low"


def _alternative_timeline(current_value: Decimal, target: Decimal, growth_rate: Decimal) -> AlternativeTimeline:
    monthly = MAX_REASONABLE_MONTHLY_CONTRIBUTION
    years_needed = find_required_years(
        current_value, monthly, target, growth_rate, min_years=1, max_years=MAX_ANALYZER_YEARS
    )
    projected = project_portfolio_growth(current_value, monthly_to_annual(monthly), years_needed, growth_rate)
    return AlternativeTimeline(
        years_needed=years_needed,
        suggested_monthly_contribution=monthly,
        achievable_with_max_contribution=projected >= target,
    )


def _marginal_benefit(monthly_contribution: Decimal) -> Decimal:
    if monthly_contribution <= 0:
        return Decimal("1.0")
    if monthly_contribution > Decimal("2500"):
        return Decimal("0.8")
    if monthly_contribution > Decimal("1500"):
        return Decimal("0.9")
    return Decimal("1.1")


def _parse_strategy(strategy: Union[Mapping[str, object], Tuple[str, Number]]) -> Tuple[str, Decimal]:
    if isinstance(strategy, Mapping):
        if "name" not in strategy or "monthly" not in strategy:
            raise InvalidInputError(
                f"Strategy must provide 'name' and 'monthly' (got {strategy!r}).",
                reason="invalid_strategy",
            )
        name, monthly = strategy["name"], strategy["monthly"]
    else:
        try:
            name, monthly = strategy
        except (TypeError, ValueError):
            raise InvalidInputError(
                f"Strategy must be a (name, monthly) pair (got {strategy!r}).",
                reason="invalid_strategy",
            ) from None
    return str(name), validate_contribution(monthly)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def analyze_contribution_impact(
    current_value: Number,
    base_monthly_contribution: Number,
    years: int,
    growth_rate: Number,
    variations: Optional[Sequence[Number]] = None,
) -> ContributionImpact:
    """
    Sensitivity of the final value to changes in the monthly contribution.

    Each variation is a dollar delta added to the base monthly contribution
    (default -500, -100, +100, +500, +1000). Variations that would make the
    contribution negative are dropped.

    Examples
    --------
    >>> impact = analyze_contribution_impact(100000, 1000, 10, "0.07")
    >>> impact.base_projection.final_value
    Decimal('367766.87')
    >>> len(impact.contribution_variations)
    5
    """
    logger.debug(
        "Analyzing contribution impact - base: %s, years: %s", base_monthly_contribution, years
    )
    try:
        current_value = validate_current_value(current_value)
        base_monthly = validate_contribution(base_monthly_contribution)
        years = _validate_analyzer_years(years)
        growth_rate = validate_growth_rate(growth_rate)
    except ForecastError as e:
        logger.warning("Contribution impact analysis validation failed: %s", e.reason)
        raise

    base_annual = monthly_to_annual(base_monthly)
    base_final = project_portfolio_growth(current_value, base_annual, years, growth_rate)

    deltas = DEFAULT_CONTRIBUTION_VARIATIONS if variations is None else variations
    amounts = [base_monthly + ensure_decimal(d) for d in deltas]
    results: List[ContributionVariation] = []
    for monthly in amounts:
        if monthly < 0:
            continue
        annual = monthly_to_annual(monthly)
        final_value = project_portfolio_growth(current_value, annual, years, growth_rate)
        difference = final_value - base_final
        if base_final > 0:
            impact = round_to(to_percentage(difference / base_final))
        else:
            impact = round_to(ZERO)
        results.append(ContributionVariation(monthly, annual, final_value, difference, impact))

    logger.debug("Contribution analysis completed with %d variations", len(results))
    return ContributionImpact(
        base_projection=BaseProjection(base_monthly, base_annual, base_final),
        contribution_variations=results,
    )


def optimize_contribution_for_goal(
    current_value: Number,
    target_amount: Number,
    years: int,
    growth_rate: Number,
) -> GoalOptimization:
    """
    Monthly contribution that reaches *target_amount* in *years*.

    The searched contribution is raised by 0.1% so the projection lands on
    or above the target, then rated for feasibility. Challenging goals
    (more than 5000/month) also get the horizon needed at 3000/month.

    When the current value already meets the target, every figure is zero,
    probability is 100 and no search runs.
    """
    logger.debug("Optimizing contribution for goal - target: %s, years: %s", target_amount, years)
    try:
        current_value = validate_current_value(current_value)
        target_amount = validate_target(target_amount)
        years = _validate_analyzer_years(years)
        growth_rate = validate_growth_rate(growth_rate)
    except ForecastError as e:
        logger.warning("Goal optimization validation failed: %s", e.reason)
        raise

    if current_value >= target_amount:
        logger.debug("Goal already achieved with surplus: %s", current_value - target_amount)
        return GoalOptimization(
            required_monthly_contribution=ZERO,
            required_annual_contribution=ZERO,
            projected_final_value=current_value,
            goal_already_achieved=True,
            goal_feasibility="achievable",
            probability_of_success=Decimal("100.0"),
            confidence_analysis={
                s.name: ScenarioOutcome(s.name, s.rate, True, current_value)
                for s in standard_scenarios()
            },
            current_surplus=current_value - target_amount,
        )

    monthly = find_required_contribution(current_value, target_amount, years, growth_rate)
    required_monthly = round_to(monthly * GOAL_CONTRIBUTION_BUFFER)
    required_annual = monthly_to_annual(required_monthly)
    projected = project_portfolio_growth(current_value, required_annual, years, growth_rate)

    confidence = _confidence_analysis(current_value, required_annual, target_amount, years)
    feasibility = assess_goal_feasibility(required_monthly)
    alternative = None
    if feasibility == "challenging":
        alternative = _alternative_timeline(current_value, target_amount, growth_rate)

    logger.debug("Optimization complete - required monthly: %s", required_monthly)
    return GoalOptimization(
        required_monthly_contribution=required_monthly,
        required_annual_contribution=required_annual,
        projected_final_value=projected,
        goal_already_achieved=False,
        goal_feasibility=feasibility,
        probability_of_success=_success_probability(confidence),
        confidence_analysis=confidence,
        alternative_timeline=alternative,
    )


def compare_contribution_strategies(
    current_value: Number,
    target_amount: Number,
    years: int,
    growth_rate: Number,
    strategies: Sequence[Union[Mapping[str, object], Tuple[str, Number]]],
) -> StrategyComparison:
    """
    Rank named monthly contributions against a target.

    Parameters
    ----------
    strategies : sequence
        ``{"name": ..., "monthly": ...}`` mappings or ``(name, monthly)``
        pairs. Malformed entries are skipped and listed in ``errors``.

    Returns
    -------
    StrategyComparison
        The recommendation is the cheapest strategy that meets the target and
        is at least the minimum required contribution. If none meets the
        target, the largest contribution is recommended.
    """
    logger.debug("Comparing %d contribution strategies", len(strategies))
    try:
        current_value = validate_current_value(current_value)
        target_amount = validate_target(target_amount)
        years = _validate_analyzer_years(years)
        growth_rate = validate_growth_rate(growth_rate)
    except ForecastError as e:
        logger.warning("Strategy comparison validation failed: %s", e.reason)
        raise

    analyzed: List[StrategyAnalysis] = []
    errors: Dict[str, ForecastError] = {}
    for index, strategy in enumerate(strategies):
        try:
            name, monthly = _parse_strategy(strategy)
        except ForecastError as e:
            errors[f"#{index}"] = e
            continue
        annual = monthly_to_annual(monthly)
        final_value = project_portfolio_growth(current_value, annual, years, growth_rate)
        total = annual * Decimal(years)
        achieved = final_value >= target_amount
        if achieved:
            years_to_goal = find_required_years(
                current_value, monthly, target_amount, growth_rate, min_years=1, max_years=years
            )
        else:
            years_to_goal = find_required_years(
                current_value, monthly, target_amount, growth_rate,
                min_years=years, max_years=MAX_ANALYZER_YEARS,
            )
        efficiency = round_to(final_value / total) if total > 0 else Decimal("1.0")
        analyzed.append(StrategyAnalysis(
            name=name,
            monthly_contribution=monthly,
            total_contributions=total,
            final_value=final_value,
            goal_achieved=achieved,
            surplus_or_shortfall=final_value - target_amount,
            years_to_goal=years_to_goal,
            contribution_efficiency=efficiency,
            marginal_benefit=_marginal_benefit(monthly),
        ))

    minimum = optimize_contribution_for_goal(
        current_value, target_amount, years, growth_rate
    ).required_monthly_contribution

    recommended: Optional[str] = None
    achieving = [s for s in analyzed if s.goal_achieved]
    if achieving:
        eligible = [s for s in achieving if s.monthly_contribution >= minimum]
        recommended = (
            min(eligible, key=lambda s: s.monthly_contribution).name if eligible else achieving[0].name
        )
    elif analyzed:
        recommended = max(analyzed, key=lambda s: s.monthly_contribution).name

    success_rate = (
        round_to(Decimal(len(achieving)) / Decimal(len(analyzed)) * HUNDRED, 1)
        if analyzed else round_to(ZERO, 1)
    )
    return StrategyComparison(
        strategies=analyzed,
        recommended_strategy=recommended,
        minimum_required_contribution=minimum,
        strategies_achieving_goal=len(achieving),
        success_rate=success_rate,
        errors=errors,
    )


def calculate_contribution_breakeven(
    current_value: Number,
    inflation_rate: Number,
    growth_rate: Number,
    years: int,
) -> ContributionBreakeven:
    """
    Monthly contribution that keeps the portfolio's purchasing power.

    The target is ``current * (1 + inflation) ** years``, fed to the
    contribution search. A real return (growth minus inflation) below zero
    is reported as ``negative_real_returns``.

    Examples
    --------
    >>> b = calculate_contribution_breakeven(100000, "0.03", "0.07", 10)
    >>> b.breakeven_monthly_contribution
    Decimal('0')
    >>> b.contribution_required_reason
    'maintain_purchasing_power'
    """
    logger.debug("Calculating contribution breakeven against %s inflation", inflation_rate)
    try:
        current_value = validate_current_value(current_value)
        growth_rate = validate_growth_rate(growth_rate)
        years = _validate_analyzer_years(years)
        inflation_rate = ensure_decimal(inflation_rate)
        if inflation_rate <= -ONE:
            raise InvalidRateError(f"Inflation rate must be greater than -1 (got {inflation_rate}).")
    except ForecastError as e:
        logger.warning("Contribution breakeven validation failed: %s", e.reason)
        raise

    real_return = growth_rate - inflation_rate
    inflation_factor = power(ONE + inflation_rate, years)
    adjusted = current_value * inflation_factor
    monthly = find_required_contribution(current_value, adjusted, years, growth_rate)

    return ContributionBreakeven(
        breakeven_monthly_contribution=monthly,
        real_return_rate=real_return,
        inflation_factor=inflation_factor,
        inflation_adjusted_value=adjusted,
        contribution_required_reason=(
            "negative_real_returns" if real_return < 0 else "maintain_purchasing_power"
        ),
    )


_TIMING_REASONS: Dict[Tuple[str, str], str] = {
    ("lump_sum", "low"): "Low volatility favors lump sum investment",
    ("dollar_cost_averaging", "high"): "High volatility makes DCA less risky",
    ("lump_sum", "medium"): "Lump sum provides higher expected returns",
    ("dollar_cost_averaging", "medium"): "DCA provides better risk-adjusted returns",
}


def analyze_contribution_timing(
    current_value: Number,
    available_amount: Number,
    years: int,
    growth_rate: Number,
    volatility: Number,
) -> TimingAnalysis:
    """
    Compare investing *available_amount* now against spreading it monthly.

    Lump sum projects ``current + available`` with no contributions. DCA
    projects ``current`` with ``available / (years * 12)`` per month. The
    lump-sum band is ``expected * (1 +/- 2 * volatility)`` with the worst
    case clamped at zero.

    Recommendation: high volatility (> 0.20) favors DCA, low (<= 0.10)
    favors the lump sum, medium picks whichever expected value is larger.
    """
    logger.debug("Analyzing contribution timing with %s volatility", volatility)
    try:
        current_value = validate_current_value(current_value)
        available_amount = validate_contribution(available_amount)
        growth_rate = validate_growth_rate(growth_rate)
        years = _validate_analyzer_years(years)
        volatility = ensure_decimal(volatility)
        if volatility < 0:
            raise NegativeValueError(f"Volatility cannot be negative (got {volatility}).")
    except ForecastError as e:
        logger.warning("Contribution timing validation failed: %s", e.reason)
        raise

    lump_sum_value = project_portfolio_growth(current_value + available_amount, ZERO, years, growth_rate)
    monthly_dca = safe_divide(available_amount, Decimal(years * 12))
    dca_value = project_portfolio_growth(current_value, monthly_to_annual(monthly_dca), years, growth_rate)

    swing = lump_sum_value * volatility * VOLATILITY_BAND_SIGMAS
    level = assess_volatility_level(volatility)
    if level == "high":
        strategy = "dollar_cost_averaging"
    elif level == "low":
        strategy = "lump_sum"
    else:
        strategy = "lump_sum" if lump_sum_value > dca_value else "dollar_cost_averaging"

    return TimingAnalysis(
        lump_sum=LumpSumOutcome(
            expected_value=lump_sum_value,
            best_case=lump_sum_value + swing,
            worst_case=max(lump_sum_value - swing, ZERO),
            volatility_impact=volatility,
        ),
        dollar_cost_averaging=DollarCostAveragingOutcome(
            expected_value=dca_value,
            monthly_amount=monthly_dca,
            volatility_reduction=round_to(volatility * DCA_VOLATILITY_REDUCTION, 3),
            opportunity_cost=lump_sum_value - dca_value,
        ),
        recommendation=TimingRecommendation(
            strategy=strategy,
            volatility_assessment=level,
            reasoning=_TIMING_REASONS.get((strategy, level), "Hybrid approach may be optimal"),
        ),
    )
