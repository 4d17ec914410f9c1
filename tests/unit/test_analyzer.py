"""
Unit tests for analyzer.py module.

Tests contribution sensitivity, goal optimization, strategy comparison,
inflation breakeven and lump sum vs DCA timing.
"""

from decimal import Decimal

import pandas as pd
import pytest

from finforecast.analyzer import (
    analyze_contribution_impact,
    analyze_contribution_timing,
    assess_goal_feasibility,
    assess_volatility_level,
    calculate_contribution_breakeven,
    compare_contribution_strategies,
    optimize_contribution_for_goal,
)
from finforecast.exceptions import (
    InvalidInputError,
    InvalidRateError,
    InvalidYearsError,
    NegativeValueError,
)


# ============================================================================
# CONTRIBUTION IMPACT
# ============================================================================

class TestContributionImpact:
    """Test sensitivity of the final value to the monthly contribution."""

    def test_base_projection(self):
        impact = analyze_contribution_impact(100000, 1000, 10, "0.07")
        assert impact.base_projection.monthly_contribution == Decimal("1000")
        assert impact.base_projection.annual_contribution == Decimal("12000")
        assert impact.base_projection.final_value == Decimal("367766.87")

    def test_default_variations(self):
        impact = analyze_contribution_impact(100000, 1000, 10, "0.07")
        monthly = [v.monthly_contribution for v in impact.contribution_variations]
        assert monthly == [Decimal("500"), Decimal("900"), Decimal("1100"),
                           Decimal("1500"), Decimal("2000")]

    def test_impact_signs(self):
        impact = analyze_contribution_impact(100000, 1000, 10, "0.07")
        diffs = [v.difference_from_base for v in impact.contribution_variations]
        assert diffs[0] < 0 < diffs[-1]
        assert impact.contribution_variations[0].percentage_impact < 0

    def test_negative_variations_dropped(self):
        impact = analyze_contribution_impact(100000, 200, 10, "0.07")
        assert all(v.monthly_contribution >= 0 for v in impact.contribution_variations)
        assert len(impact.contribution_variations) == 4

    def test_custom_variations(self):
        impact = analyze_contribution_impact(0, 0, 10, 0, variations=[100])
        [variation] = impact.contribution_variations
        assert variation.final_value == Decimal("12000.00")
        assert variation.percentage_impact == Decimal("0.00")

    def test_to_frame(self):
        frame = analyze_contribution_impact(100000, 1000, 10, "0.07").to_frame()
        assert isinstance(frame, pd.DataFrame)
        assert len(frame) == 5

    @pytest.mark.parametrize("years", [0, 51])
    def test_analyzer_horizon(self, years):
        with pytest.raises(InvalidYearsError):
            analyze_contribution_impact(100000, 1000, years, "0.07")


# ============================================================================
# GOAL OPTIMIZATION
# ============================================================================

class TestOptimizeContribution:
    """Test the monthly contribution needed for a goal."""

    def test_achievable_goal(self):
        result = optimize_contribution_for_goal(100000, 1000000, 20, "0.07")
        assert Decimal("1195") < result.required_monthly_contribution < Decimal("1225")
        assert result.required_annual_contribution == result.required_monthly_contribution * 12
        assert result.goal_feasibility == "achievable"
        assert not result.goal_already_achieved
        assert result.alternative_timeline is None

    def test_confidence_analysis(self):
        result = optimize_contribution_for_goal(100000, 1000000, 20, "0.07")
        assert result.confidence_analysis["optimistic"].goal_met
        assert not result.confidence_analysis["pessimistic"].goal_met
        assert result.probability_of_success in (Decimal("20.0"), Decimal("80.0"))

    def test_goal_already_achieved(self):
        result = optimize_contribution_for_goal(600000, 500000, 10, "0.07")
        assert result.goal_already_achieved
        assert result.required_monthly_contribution == Decimal("0")
        assert result.probability_of_success == Decimal("100.0")
        assert result.current_surplus == Decimal("100000")
        assert all(o.goal_met for o in result.confidence_analysis.values())

    def test_challenging_goal_gets_alternative(self):
        result = optimize_contribution_for_goal(0, 2000000, 10, "0.07")
        assert result.goal_feasibility == "challenging"
        alt = result.alternative_timeline
        assert alt is not None
        assert alt.suggested_monthly_contribution == Decimal("3000")
        assert alt.years_needed == 24
        assert alt.achievable_with_max_contribution

    @pytest.mark.parametrize("target,reason", [(0, "invalid_target"), (60000000, "unrealistic_target")])
    def test_invalid_target(self, target, reason):
        with pytest.raises(InvalidInputError) as exc_info:
            optimize_contribution_for_goal(0, target, 10, "0.07")
        assert exc_info.value.reason == reason

    @pytest.mark.parametrize("amount,expected", [
        (1000, "achievable"),
        (2500, "achievable"),
        ("2500.01", "ambitious"),
        (5000, "ambitious"),
        (5001, "challenging"),
    ])
    def test_feasibility_bands(self, amount, expected):
        assert assess_goal_feasibility(amount) == expected


# ============================================================================
# STRATEGY COMPARISON
# ============================================================================

class TestCompareStrategies:
    """Test ranking of named monthly contributions."""

    @pytest.fixture
    def comparison(self):
        return compare_contribution_strategies(
            100000, 500000, 15, "0.07",
            [
                {"name": "low", "monthly": 500},
                ("mid", 1000),
                {"name": "high", "monthly": "2000"},
            ],
        )

    def test_goal_achievement(self, comparison):
        achieved = {s.name: s.goal_achieved for s in comparison.strategies}
        assert achieved == {"low": False, "mid": True, "high": True}
        assert comparison.strategies_achieving_goal == 2
        assert comparison.success_rate == Decimal("66.7")
        assert comparison.total_strategies_analyzed == 3

    def test_recommends_cheapest_sufficient(self, comparison):
        assert Decimal("715") < comparison.minimum_required_contribution < Decimal("730")
        assert comparison.recommended_strategy == "mid"

    def test_years_to_goal(self, comparison):
        by_name = {s.name: s for s in comparison.strategies}
        assert by_name["high"].years_to_goal < by_name["mid"].years_to_goal <= 15
        assert by_name["low"].years_to_goal > 15

    def test_none_achieve_recommends_largest(self):
        result = compare_contribution_strategies(0, 5000000, 10, "0.07", [("a", 100), ("b", 200)])
        assert result.strategies_achieving_goal == 0
        assert result.recommended_strategy == "b"
        assert result.success_rate == Decimal("0.0")

    def test_malformed_entries_recorded(self):
        result = compare_contribution_strategies(
            100000, 500000, 15, "0.07",
            [{"name": "no-amount"}, ("neg", -5), ("ok", 1000)],
        )
        assert [s.name for s in result.strategies] == ["ok"]
        assert set(result.errors) == {"#0", "#1"}
        assert result.errors["#0"].reason == "invalid_strategy"
        assert result.errors["#1"].reason == "negative_contribution"

    def test_to_frame(self, comparison):
        frame = comparison.to_frame()
        assert list(frame.index) == ["low", "mid", "high"]


# ============================================================================
# BREAKEVEN AND TIMING
# ============================================================================

class TestBreakeven:
    """Test the inflation breakeven contribution."""

    def test_growth_beats_inflation(self):
        result = calculate_contribution_breakeven(100000, "0.03", "0.07", 10)
        assert result.breakeven_monthly_contribution == Decimal("0")
        assert result.real_return_rate == Decimal("0.04")
        assert result.contribution_required_reason == "maintain_purchasing_power"
        assert result.inflation_adjusted_value.quantize(Decimal("0.01")) == Decimal("134391.64")

    def test_negative_real_returns(self):
        result = calculate_contribution_breakeven(100000, "0.05", "0.02", 10)
        assert result.contribution_required_reason == "negative_real_returns"
        assert result.breakeven_monthly_contribution > 0

    def test_invalid_inflation(self):
        with pytest.raises(InvalidRateError):
            calculate_contribution_breakeven(100000, "-1", "0.07", 10)


class TestTiming:
    """Test lump sum vs dollar cost averaging."""

    def test_medium_volatility_prefers_higher_expected_value(self):
        result = analyze_contribution_timing(100000, 50000, 10, "0.07", "0.15")
        assert result.lump_sum.expected_value.quantize(Decimal("0.01")) == Decimal("295072.70")
        assert result.dollar_cost_averaging.expected_value == Decimal("267986.69")
        assert result.recommendation.volatility_assessment == "medium"
        assert result.recommendation.strategy == "lump_sum"

    def test_band(self):
        result = analyze_contribution_timing(100000, 50000, 10, "0.07", "0.15")
        ls = result.lump_sum
        upside = ls.best_case - ls.expected_value
        downside = ls.expected_value - ls.worst_case
        assert abs(upside - downside) < Decimal("1e-10")
        assert result.dollar_cost_averaging.volatility_reduction == Decimal("0.105")

    def test_high_volatility(self):
        result = analyze_contribution_timing(100000, 50000, 10, "0.07", "0.6")
        assert result.recommendation.strategy == "dollar_cost_averaging"
        assert result.lump_sum.worst_case == Decimal("0")

    def test_low_volatility(self):
        result = analyze_contribution_timing(100000, 50000, 10, "0.07", "0.05")
        assert result.recommendation.strategy == "lump_sum"
        assert result.recommendation.reasoning == "Low volatility favors lump sum investment"

    def test_negative_volatility(self):
        with pytest.raises(NegativeValueError):
            analyze_contribution_timing(100000, 50000, 10, "0.07", "-0.1")

    @pytest.mark.parametrize("volatility,level", [("0.1", "low"), ("0.2", "medium"), ("0.21", "high")])
    def test_volatility_levels(self, volatility, level):
        assert assess_volatility_level(volatility) == level
