"""
Type definitions for finforecast.

Purpose
-------
TypedDict definitions for the dictionary-shaped results handed to external
collaborators (goal store, reporting). Core projection results are frozen
dataclasses; these dicts cover the retirement and goal helpers whose output
is persisted or rendered as-is.

Usage
-----
>>> from finforecast.types import RetirementProgressDict
>>> progress: RetirementProgressDict = calculate_retirement_progress(50000, 625000)
>>> progress["progress_percentage"]
Decimal('50.00')

Type Definitions
----------------
RetirementProgressDict
    25x target progress: {"target_amount", "current_amount", "progress_percentage", ...}

TimeEstimateDict
    Linear time-to-goal estimate: {"months_to_goal", "years_to_goal", "feasible", ...}

WithdrawalSustainabilityDict
    Withdrawal-rate risk band: {"withdrawal_rate", "is_sustainable", "risk_level", ...}

GoalProgressDict
    Progress of one stored goal record.

GoalSummaryDict
    Aggregate over several goal records.

EmergencyFundStatusDict
    Coverage of an emergency fund in months of expenses.
"""

from decimal import Decimal
from typing import Optional, Union

from typing_extensions import Literal, NotRequired, TypedDict

__all__ = [
    "RiskLevel",
    "EmergencyFundLevel",
    "RetirementProgressDict",
    "TimeEstimateDict",
    "WithdrawalSustainabilityDict",
    "GoalProgressDict",
    "GoalSummaryDict",
    "EmergencyFundStatusDict",
]

RiskLevel = Literal["low", "moderate", "high"]
EmergencyFundLevel = Literal["adequate", "partial", "insufficient"]


class RetirementProgressDict(TypedDict):
    """
    Progress toward the 25x retirement target.

    Attributes
    ----------
    target_amount : Decimal
        Annual expenses x 25.
    current_amount : Decimal
        Current portfolio value.
    progress_percentage : Decimal
        current / target x 100, 2 places (0.00 when the target is zero).
    amount_remaining : Decimal
        Target minus current, clamped at zero.
    is_complete : bool
        Current value meets the target.
    """

    target_amount: Decimal
    current_amount: Decimal
    progress_percentage: Decimal
    amount_remaining: Decimal
    is_complete: bool


class TimeEstimateDict(TypedDict):
    """
    Straight-line estimate of the time needed to close a gap (no growth).

    ``months_to_goal`` and ``years_to_goal`` are None when the monthly
    savings are zero (``feasible`` is then False).
    """

    months_to_goal: Optional[int]
    years_to_goal: Optional[int]
    monthly_savings_needed: Decimal
    amount_remaining: Decimal
    feasible: bool


class WithdrawalSustainabilityDict(TypedDict):
    """
    Risk band of an annual withdrawal.

    Attributes
    ----------
    withdrawal_rate : Decimal
        Withdrawal / portfolio x 100, 2 places.
    is_sustainable : bool
        True only at or below 4%.
    risk_level : {"low", "moderate", "high"}
    years_sustainable : int or "indefinite"
    """

    withdrawal_rate: Decimal
    is_sustainable: bool
    risk_level: RiskLevel
    years_sustainable: Union[int, str]


class GoalProgressDict(TypedDict):
    """
    Progress of one goal record as of a given date.

    ``required_monthly_contribution`` is only present when a growth rate was
    supplied and the target date lies in the future.
    """

    target_amount: Decimal
    current_amount: Decimal
    progress_percentage: Decimal
    amount_remaining: Decimal
    is_complete: bool
    months_to_goal: Optional[int]
    months_until_target_date: Optional[int]
    on_track: Optional[bool]
    required_monthly_contribution: NotRequired[Decimal]


class GoalSummaryDict(TypedDict):
    total_goals: int
    completed_goals: int
    total_target: Decimal
    total_current: Decimal
    overall_progress_percentage: Decimal


class EmergencyFundStatusDict(TypedDict):
    """Emergency fund coverage: months covered (1 place) and status band."""

    current_amount: Decimal
    target_amount: Decimal
    months_covered: Decimal
    progress_percentage: Decimal
    status: EmergencyFundLevel
