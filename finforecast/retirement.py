"""
Retirement helpers built on the 25x expenses rule and the 4% withdrawal rule.

These consume scalars supplied by the expense aggregator (annual expenses)
and the portfolio (current value). Time estimates here are straight-line,
ignoring growth; use ``projection.calculate_fi_timeline`` for compounded
estimates.
"""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, Decimal
from typing import Tuple, Union

from .constants import FI_MULTIPLIER, MONTHS_PER_YEAR, SAFE_WITHDRAWAL_RATE
from .exceptions import ForecastError, NegativeValueError
from .types import RetirementProgressDict, RiskLevel, TimeEstimateDict, WithdrawalSustainabilityDict
from .utils import Number, decimal_max, ensure_decimal, round_to, to_percentage
from .validation import validate_years

logger = logging.getLogger(__name__)

__all__ = [
    "calculate_retirement_target",
    "calculate_retirement_progress",
    "estimate_time_to_goal",
    "calculate_required_monthly_savings",
    "calculate_safe_withdrawal_amount",
    "calculate_withdrawal_sustainability",
    "calculate_monthly_withdrawal_budget",
]

ZERO = Decimal("0")


def _non_negative(value: Number, reason: str, label: str) -> Decimal:
    value = ensure_decimal(value)
    if value < 0:
        raise NegativeValueError(f"{label} cannot be negative (got {value}).", reason=reason)
    return value


def calculate_retirement_target(annual_expenses: Number) -> Decimal:
    """
    Portfolio needed to retire: annual expenses x 25.

    Examples
    --------
    >>> calculate_retirement_target(Decimal("50000"))
    Decimal('1250000')
    """
    annual_expenses = _non_negative(annual_expenses, "negative_expenses", "Annual expenses")
    target = annual_expenses * FI_MULTIPLIER
    logger.debug("25x retirement target calculated: %s", target)
    return target


def calculate_retirement_progress(annual_expenses: Number, current_portfolio_value: Number) -> RetirementProgressDict:
    logger.debug(
        "Calculating retirement progress - expenses: %s, portfolio: %s",
        annual_expenses, current_portfolio_value,
    )
    try:
        target = calculate_retirement_target(annual_expenses)
        current = _non_negative(current_portfolio_value, "negative_portfolio_value", "Portfolio value")
    except ForecastError as e:
        logger.warning("Failed to calculate retirement progress: %s", e.reason)
        raise

    percentage = round_to(ZERO) if target.is_zero() else round_to(to_percentage(current / target))
    return {
        "target_amount": target,
        "current_amount": current,
        "progress_percentage": percentage,
        "amount_remaining": decimal_max(target - current, ZERO),
        "is_complete": current >= target,
    }


def estimate_time_to_goal(
    annual_expenses: Number,
    current_portfolio_value: Number,
    monthly_savings: Number,
) -> TimeEstimateDict:
    """
    Months and whole years of saving needed to close the 25x gap.

    Straight-line, rounded up to whole months so the goal is met at
    ``months_to_goal``. Zero savings with a remaining gap is reported as
    infeasible.

    Examples
    --------
    >>> estimate_time_to_goal(50000, 500000, 4000)["months_to_goal"]
    188
    """
    monthly_savings = _non_negative(monthly_savings, "negative_contribution", "Monthly savings")
    progress = calculate_retirement_progress(annual_expenses, current_portfolio_value)

    if progress["is_complete"]:
        return {
            "months_to_goal": 0,
            "years_to_goal": 0,
            "monthly_savings_needed": monthly_savings,
            "amount_remaining": ZERO,
            "feasible": True,
        }

    remaining = progress["amount_remaining"]
    if monthly_savings.is_zero():
        return {
            "months_to_goal": None,
            "years_to_goal": None,
            "monthly_savings_needed": monthly_savings,
            "amount_remaining": remaining,
            "feasible": False,
        }

    months = int((remaining / monthly_savings).to_integral_value(rounding=ROUND_CEILING))
    return {
        "months_to_goal": months,
        "years_to_goal": months // MONTHS_PER_YEAR,
        "monthly_savings_needed": monthly_savings,
        "amount_remaining": remaining,
        "feasible": True,
    }


def calculate_required_monthly_savings(
    annual_expenses: Number,
    current_portfolio_value: Number,
    target_years: int,
) -> Decimal:
    """
    Straight-line monthly savings that close the 25x gap in *target_years*.

    Examples
    --------
    >>> calculate_required_monthly_savings(50000, 250000, 10)
    Decimal('8333.33')
    """
    target_years = validate_years(target_years, min_years=1)
    progress = calculate_retirement_progress(annual_expenses, current_portfolio_value)
    if progress["is_complete"]:
        return ZERO
    months = Decimal(target_years * MONTHS_PER_YEAR)
    return round_to(progress["amount_remaining"] / months)


def calculate_safe_withdrawal_amount(portfolio_value: Number) -> Decimal:
    """4% of the portfolio, 2 places."""
    portfolio_value = _non_negative(portfolio_value, "negative_portfolio_value", "Portfolio value")
    return round_to(portfolio_value * SAFE_WITHDRAWAL_RATE)


def _withdrawal_risk(rate_pct: Decimal) -> Tuple[bool, RiskLevel, Union[int, str]]:
    if rate_pct <= Decimal("4.0"):
        return True, "low", "indefinite"
    if rate_pct <= Decimal("5.0"):
        years = 25 - int(round_to(rate_pct - 4, 0)) * 3
        return False, "moderate", max(years, 15)
    if rate_pct > Decimal("8.0"):
        return False, "high", 8
    years = 20 - int(round_to(rate_pct - 5, 0)) * 2
    return False, "high", max(years, 5)


def calculate_withdrawal_sustainability(
    portfolio_value: Number,
    annual_withdrawal: Number,
) -> WithdrawalSustainabilityDict:
    """
    Risk band of withdrawing *annual_withdrawal* from *portfolio_value*.

    Bands by withdrawal rate:

    - <= 4%: sustainable, low risk, indefinite
    - <= 5%: moderate risk, at least 15 years
    - <= 8%: high risk, at least 5 years
    - > 8%: high risk, 8 years
    """
    portfolio_value = _non_negative(portfolio_value, "negative_portfolio_value", "Portfolio value")
    annual_withdrawal = _non_negative(annual_withdrawal, "negative_withdrawal", "Annual withdrawal")

    if portfolio_value.is_zero():
        rate_pct = round_to(ZERO)
    else:
        rate_pct = round_to(to_percentage(annual_withdrawal / portfolio_value))

    sustainable, risk, years = _withdrawal_risk(rate_pct)
    logger.debug("Withdrawal sustainability analyzed: %s%% - %s", rate_pct, risk)
    return {
        "withdrawal_rate": rate_pct,
        "is_sustainable": sustainable,
        "risk_level": risk,
        "years_sustainable": years,
    }


def calculate_monthly_withdrawal_budget(portfolio_value: Number) -> Decimal:
    """
    Monthly spending budget under the 4% rule, 2 places.

    Examples
    --------
    >>> calculate_monthly_withdrawal_budget(1200000)
    Decimal('4000.00')
    """
    annual = calculate_safe_withdrawal_amount(portfolio_value)
    return round_to(annual / Decimal(MONTHS_PER_YEAR))
