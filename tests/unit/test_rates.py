"""
Unit tests for rates.py module.

Tests rate convention conversions and compounding with monthly deposits.
"""

from decimal import Decimal

import pytest

from finforecast.exceptions import InvalidInputError, InvalidRateError, InvalidYearsError
from finforecast.rates import (
    aer_to_continuous,
    aer_to_monthly,
    compound_with_aer,
    continuous_to_aer,
    effective_rate,
    future_value_with_regular_deposits,
    monthly_to_aer,
    nominal_rate,
    periods_per_year,
)


def close(a, b, tol="1e-10"):
    return abs(Decimal(a) - Decimal(b)) <= Decimal(tol)


class TestMonthlyAnnual:
    """Test monthly <-> AER conversions."""

    def test_monthly_to_aer(self):
        assert close(monthly_to_aer("0.01"), "0.12682503013197")

    def test_aer_to_monthly(self):
        assert close(aer_to_monthly("0.12"), "0.0094887929345")

    def test_zero(self):
        assert monthly_to_aer(0) == Decimal("0")
        assert aer_to_monthly(0) == Decimal("0")

    @pytest.mark.parametrize("rate", ["0.03", "0.07", "-0.2", "0.5"])
    def test_inverse(self, rate):
        """AER -> monthly -> AER returns the input."""
        assert close(monthly_to_aer(aer_to_monthly(rate)), rate, "1e-20")

    @pytest.mark.parametrize("rate", ["-1", "-1.5"])
    def test_rate_at_or_below_minus_one(self, rate):
        with pytest.raises(InvalidRateError) as exc_info:
            aer_to_monthly(rate)
        assert exc_info.value.reason == "invalid_rate"
        with pytest.raises(InvalidRateError):
            monthly_to_aer(rate)


class TestNominalEffective:
    """Test nominal <-> effective conversions."""

    def test_effective_rate_quarterly(self):
        assert close(effective_rate("0.12", 4), "0.12550881")

    def test_single_period_is_identity(self):
        assert effective_rate("0.12", 1) == Decimal("0.12")
        assert nominal_rate("0.12", 1) == Decimal("0.12")

    def test_nominal_inverts_effective(self):
        assert close(nominal_rate(effective_rate("0.08", 12), 12), "0.08", "1e-20")

    @pytest.mark.parametrize("periods", [0, -4, 2.5, True])
    def test_invalid_periods(self, periods):
        with pytest.raises(InvalidInputError) as exc_info:
            effective_rate("0.12", periods)
        assert exc_info.value.reason == "invalid_periods"


class TestContinuous:
    """Test continuous <-> AER conversions."""

    def test_continuous_to_aer(self):
        assert close(continuous_to_aer("0.12"), "0.127496851579")

    def test_inverse(self):
        assert close(continuous_to_aer(aer_to_continuous("0.07")), "0.07", "1e-20")

    def test_aer_to_continuous_invalid(self):
        with pytest.raises(InvalidRateError):
            aer_to_continuous(-1)


class TestCompoundWithAer:
    """Test the four compounding branches."""

    def test_zero_years(self):
        assert compound_with_aer(100000, "0.07", 0, 1000) == Decimal("100000")

    def test_zero_rate_is_linear(self):
        assert compound_with_aer(10000, 0, 1, 1000) == Decimal("22000")

    def test_growth_only(self):
        assert compound_with_aer(100000, "0.07", 10).quantize(Decimal("0.01")) == Decimal("196715.14")
        assert close(compound_with_aer(100000, "0.05", 10), "162889.462677744", "1e-6")

    def test_with_contributions(self):
        assert compound_with_aer(100000, "0.07", 10, 1000).quantize(Decimal("0.01")) == Decimal("367766.87")

    def test_contributions_compound_monthly_at_aer(self):
        """Deposits of 500/month at 8% AER for 20 years on 10,000."""
        assert close(compound_with_aer(10000, "0.08", 20, 500), "331109.106", "0.001")

    @pytest.mark.parametrize("years", [-1, 2.5, True])
    def test_invalid_years(self, years):
        with pytest.raises(InvalidYearsError):
            compound_with_aer(1000, "0.07", years)


class TestRegularDeposits:
    """Test deposit frequencies."""

    def test_periods_per_year(self):
        assert periods_per_year("monthly") == 12
        assert periods_per_year("quarterly") == 4
        assert periods_per_year("annual") == 1

    def test_unknown_frequency(self):
        with pytest.raises(InvalidInputError) as exc_info:
            periods_per_year("weekly")
        assert exc_info.value.reason == "invalid_frequency"

    def test_quarterly_equals_monthly_equivalent(self):
        quarterly = future_value_with_regular_deposits(10000, 1500, "0.08", 20, "quarterly")
        monthly = compound_with_aer(10000, "0.08", 20, 500)
        assert close(quarterly, monthly, "1e-12")

    def test_annual_deposit(self):
        annual = future_value_with_regular_deposits(0, 12000, "0.07", 10, "annual")
        assert annual.quantize(Decimal("0.01")) == Decimal("171051.73")
