"""
Goal-record and emergency-fund helpers for finforecast.

Purpose
-------
The goal store supplies records of ``(target_amount, current_amount,
monthly_contribution, target_date)``; this module turns them into progress
dicts the store can persist. Emergency-fund helpers consume the
``monthly_expenses`` scalar from the expense aggregator.

Key components
--------------
- GoalRecord: immutable goal snapshot
- goal_progress: progress of one record as of a date
- goals_summary: aggregate over several records
- emergency_fund_target / emergency_fund_status: months-of-expenses coverage

Example
-------
>>> from datetime import date
>>> from decimal import Decimal
>>> from finforecast.goals import GoalRecord, goal_progress
>>> rec = GoalRecord(Decimal("10000"), Decimal("2500"), Decimal("500"), date(2026, 1, 1))
>>> goal_progress(rec, as_of=date(2025, 1, 1))["progress_percentage"]
Decimal('25.00')
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_CEILING, Decimal
from typing import Iterable, Optional

from .constants import DEFAULT_EMERGENCY_FUND_MONTHS, MAX_PROJECTION_YEARS, MONTHS_PER_YEAR
from .exceptions import InvalidInputError, NegativeValueError
from .search import find_required_contribution
from .types import EmergencyFundStatusDict, GoalProgressDict, GoalSummaryDict
from .utils import Number, decimal_max, ensure_decimal, round_to, to_percentage

logger = logging.getLogger(__name__)

__all__ = [
    "GoalRecord",
    "goal_progress",
    "goals_summary",
    "months_between",
    "emergency_fund_target",
    "emergency_fund_status",
]

ZERO = Decimal("0")
ADEQUATE_MONTHS = Decimal("6")
PARTIAL_MONTHS = Decimal("3")


@dataclass(frozen=True)
class GoalRecord:
    """
    Snapshot of one stored goal.

    Attributes
    ----------
    target_amount : Decimal
        Amount to reach, >= 0.
    current_amount : Decimal
        Amount saved so far, >= 0.
    monthly_contribution : Decimal
        Planned monthly saving, >= 0.
    target_date : date, optional
        Deadline, if any.
    name : str
        Display label.
    """
    target_amount: Decimal
    current_amount: Decimal
    monthly_contribution: Decimal = ZERO
    target_date: Optional[date] = None
    name: str = ""

    def __post_init__(self):
        for attr in ("target_amount", "current_amount", "monthly_contribution"):
            value = ensure_decimal(getattr(self, attr))
            if value < 0:
                raise NegativeValueError(f"{attr} cannot be negative (got {value}).")
            object.__setattr__(self, attr, value)
        if self.target_date is not None and not isinstance(self.target_date, date):
            raise InvalidInputError(f"target_date must be a date (got {self.target_date!r}).")

    @property
    def remaining(self) -> Decimal:
        return decimal_max(self.target_amount - self.current_amount, ZERO)

    @property
    def is_complete(self) -> bool:
        return self.current_amount >= self.target_amount


def months_between(start: date, end: date) -> int:
    """Whole calendar months from *start* to *end* (negative if end is earlier)."""
    return (end.year - start.year) * MONTHS_PER_YEAR + (end.month - start.month)


def _progress_percentage(current: Decimal, target: Decimal) -> Decimal:
    if target.is_zero():
        return round_to(ZERO)
    return round_to(to_percentage(current / target))


def goal_progress(
    record: GoalRecord,
    as_of: Optional[date] = None,
    growth_rate: Optional[Number] = None,
) -> GoalProgressDict:
    """
    Progress of *record* as of *as_of* (default: today).

    Parameters
    ----------
    record : GoalRecord
        Goal snapshot.
    as_of : date, optional
        Reference date for the deadline arithmetic.
    growth_rate : Number, optional
        Annual rate. When given, ``required_monthly_contribution`` comes from
        the contribution search over the whole years left until the target
        date; otherwise it is the straight-line amount.

    Returns
    -------
    GoalProgressDict
        ``months_to_goal`` is straight-line at the record's monthly
        contribution (None when that is zero and the goal is open).
        ``on_track`` is None when the record has no target date.
    """
    as_of = as_of or date.today()
    remaining = record.remaining
    complete = record.is_complete

    if complete:
        months_to_goal: Optional[int] = 0
    elif record.monthly_contribution > 0:
        months = remaining / record.monthly_contribution
        months_to_goal = int(months.to_integral_value(rounding=ROUND_CEILING))
    else:
        months_to_goal = None

    months_left: Optional[int] = None
    on_track: Optional[bool] = None
    if record.target_date is not None:
        months_left = max(months_between(as_of, record.target_date), 0)
        on_track = complete or (months_to_goal is not None and months_to_goal <= months_left)

    result: GoalProgressDict = {
        "target_amount": record.target_amount,
        "current_amount": record.current_amount,
        "progress_percentage": _progress_percentage(record.current_amount, record.target_amount),
        "amount_remaining": remaining,
        "is_complete": complete,
        "months_to_goal": months_to_goal,
        "months_until_target_date": months_left,
        "on_track": on_track,
    }

    if not complete and months_left:
        if growth_rate is not None:
            years = min(max(months_left // MONTHS_PER_YEAR, 1), MAX_PROJECTION_YEARS)
            required = find_required_contribution(
                record.current_amount, record.target_amount, years, growth_rate
            )
        else:
            required = remaining / Decimal(months_left)
        result["required_monthly_contribution"] = round_to(required)

    logger.debug("Goal %r progress: %s%%", record.name, result["progress_percentage"])
    return result


def goals_summary(records: Iterable[GoalRecord]) -> GoalSummaryDict:
    """Totals and overall progress across *records*."""
    records = list(records)
    total_target = sum((r.target_amount for r in records), ZERO)
    total_current = sum((r.current_amount for r in records), ZERO)
    return {
        "total_goals": len(records),
        "completed_goals": sum(1 for r in records if r.is_complete),
        "total_target": total_target,
        "total_current": total_current,
        "overall_progress_percentage": _progress_percentage(total_current, total_target),
    }


def emergency_fund_target(monthly_expenses: Number, months: int = DEFAULT_EMERGENCY_FUND_MONTHS) -> Decimal:
    """
    Emergency fund size: monthly expenses x *months*, 2 places.

    Examples
    --------
    >>> emergency_fund_target(Decimal("3500"))
    Decimal('21000.00')
    """
    monthly_expenses = ensure_decimal(monthly_expenses)
    if monthly_expenses < 0:
        raise NegativeValueError(
            f"Monthly expenses cannot be negative (got {monthly_expenses}).",
            reason="negative_expenses",
        )
    if isinstance(months, bool) or not isinstance(months, int) or months <= 0:
        raise InvalidInputError(f"Coverage months must be a positive integer (got {months!r}).")
    return round_to(monthly_expenses * Decimal(months))


def emergency_fund_status(
    current_amount: Number,
    monthly_expenses: Number,
    months: int = DEFAULT_EMERGENCY_FUND_MONTHS,
) -> EmergencyFundStatusDict:
    """
    Coverage of *current_amount* in months of expenses.

    Status: ``adequate`` at 6 or more months, ``partial`` at 3 or more,
    ``insufficient`` below (including zero expenses).
    """
    current_amount = ensure_decimal(current_amount)
    if current_amount < 0:
        raise NegativeValueError(f"Current amount cannot be negative (got {current_amount}).")
    target = emergency_fund_target(monthly_expenses, months)
    monthly_expenses = ensure_decimal(monthly_expenses)

    coverage = current_amount / monthly_expenses if monthly_expenses > 0 else ZERO
    if coverage >= ADEQUATE_MONTHS:
        status = "adequate"
    elif coverage >= PARTIAL_MONTHS:
        status = "partial"
    else:
        status = "insufficient"

    return {
        "current_amount": current_amount,
        "target_amount": target,
        "months_covered": round_to(coverage, 1),
        "progress_percentage": _progress_percentage(current_amount, target),
        "status": status,
    }
