"""
Unit tests for search.py module.

Tests bisection of the monthly contribution and of the whole-year horizon.
"""

import logging
from decimal import Decimal

import pytest

from finforecast.exceptions import InvalidInputError, InvalidYearsError, UnrealisticRateError
from finforecast.projection import project_portfolio_growth
from finforecast.search import (
    SearchBounds,
    bisect_contribution,
    contribution_bounds,
    find_required_contribution,
    find_required_years,
)


# ============================================================================
# BOUNDS
# ============================================================================

class TestSearchBounds:
    """Test bracket construction."""

    def test_default_bounds(self):
        bounds = contribution_bounds(0, 120000, 10)
        assert bounds.lower == Decimal("0")
        assert bounds.upper == Decimal("2000")
        assert bounds.max_iterations == 50
        assert bounds.tolerance == Decimal("0.001")

    def test_bounds_clamped_when_target_met(self):
        assert contribution_bounds(200000, 100000, 10).upper == Decimal("0")

    def test_zero_years(self):
        with pytest.raises(InvalidYearsError):
            contribution_bounds(0, 1000, 0)

    def test_midpoint(self):
        assert SearchBounds(Decimal("0"), Decimal("10")).midpoint == Decimal("5")

    @pytest.mark.parametrize("kwargs", [
        {"lower": 10, "upper": 0},
        {"lower": 0, "upper": 10, "max_iterations": 0},
        {"lower": 0, "upper": 10, "max_iterations": True},
        {"lower": 0, "upper": 10, "tolerance": "-0.1"},
    ])
    def test_invalid_bounds(self, kwargs):
        with pytest.raises(InvalidInputError):
            SearchBounds(**kwargs)


# ============================================================================
# CONTRIBUTION SEARCH
# ============================================================================

class TestFindRequiredContribution:
    """Test the monthly contribution search."""

    def test_converges_within_tolerance(self):
        target = Decimal("1000000")
        monthly = find_required_contribution(100000, target, 20, "0.07")
        projected = project_portfolio_growth(100000, monthly * 12, 20, "0.07")
        assert abs(projected - target) <= target * Decimal("0.001")
        assert Decimal("1195") < monthly < Decimal("1220")

    def test_reaches_exact_reference_contribution(self):
        """367766.87 at 7% over 10 years needs 1000/month on 100,000."""
        monthly = find_required_contribution(100000, Decimal("367766.87"), 10, "0.07")
        assert abs(monthly - Decimal("1000")) < Decimal("2.5")

    def test_target_already_met(self):
        assert find_required_contribution(500000, 400000, 10, "0.07") == Decimal("0")
        assert find_required_contribution(500000, 500000, 10, "0.07") == Decimal("0")

    def test_growth_alone_reaches_target(self):
        assert find_required_contribution(100000, 150000, 10, "0.07") == Decimal("0")

    def test_zero_rate(self):
        monthly = find_required_contribution(0, 120000, 10, 0)
        assert abs(monthly - Decimal("1000")) <= Decimal("1")

    @pytest.mark.parametrize("years", [0, 101, 2.5])
    def test_invalid_years(self, years):
        with pytest.raises(InvalidYearsError):
            find_required_contribution(0, 1000, years, "0.07")

    def test_invalid_rate(self):
        with pytest.raises(UnrealisticRateError):
            find_required_contribution(0, 1000, 10, "0.8")

    def test_iteration_cap_returns_midpoint(self, caplog):
        bounds = SearchBounds(Decimal("0"), Decimal("4000"), max_iterations=1, tolerance=Decimal("0"))
        with caplog.at_level(logging.WARNING, logger="finforecast.search"):
            monthly = find_required_contribution(0, 120000, 10, 0, bounds=bounds)
        # First probe at 2000 overshoots; the bracket becomes [0, 2000]
        assert monthly == Decimal("1000")
        assert "did not converge" in caplog.text


class TestBisectContribution:
    """Test the raw bisection loop."""

    def test_reports_iterations(self):
        bounds = contribution_bounds(0, 120000, 10)
        result = bisect_contribution(0, 120000, 10, 0, bounds)
        # Bracket [0, 2000]: first probe at 1000 lands exactly on the target
        assert result.converged
        assert result.iterations == 1
        assert result.value == Decimal("1000")

    def test_not_converged(self):
        bounds = SearchBounds(Decimal("0"), Decimal("100"), max_iterations=5)
        result = bisect_contribution(0, 120000, 10, 0, bounds)
        assert not result.converged
        assert result.iterations == 5
        assert result.value <= Decimal("100")


# ============================================================================
# YEARS SEARCH
# ============================================================================

class TestFindRequiredYears:
    """Test the whole-year horizon search."""

    def test_doubling_at_seven_percent(self):
        assert find_required_years(100000, 0, 200000, "0.07") == 11

    def test_with_contribution(self):
        years = find_required_years(100000, 1000, 1000000, "0.07")
        assert years == 22
        assert project_portfolio_growth(100000, 12000, years, "0.07") >= 1000000
        assert project_portfolio_growth(100000, 12000, years - 1, "0.07") < 1000000

    def test_target_met_at_min_years(self):
        """The exclusive lower sentinel lets min_years itself be returned."""
        assert find_required_years(500000, 0, 100000, "0.07") == 1
        assert find_required_years(500000, 0, 100000, "0.07", min_years=0) == 0

    def test_unreachable_returns_max_years(self):
        assert find_required_years(1000, 0, 1000000, "0.01", max_years=40) == 40

    @pytest.mark.parametrize("kwargs", [
        {"min_years": 10, "max_years": 5},
        {"min_years": -1},
        {"max_years": 101},
        {"max_years": 10.0},
    ])
    def test_invalid_bracket(self, kwargs):
        with pytest.raises(InvalidYearsError):
            find_required_years(1000, 0, 2000, "0.07", **kwargs)

    def test_monotone_in_contribution(self):
        slow = find_required_years(10000, 200, 500000, "0.06")
        fast = find_required_years(10000, 2000, 500000, "0.06")
        assert fast < slow
