"""
Custom exceptions for finforecast.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all finforecast modules. All exceptions inherit from ForecastError,
enabling catch-all handling when needed. Every exception carries a short
machine-readable ``reason`` (e.g. ``"negative_current_value"``) next to the
human-readable message.

Exception Hierarchy
-------------------
ForecastError (base)
├── ValidationError - Input validation failures (also ValueError)
│   ├── InvalidInputError - Wrong shape/type or out-of-domain input
│   ├── NegativeValueError - Amount < 0 where disallowed
│   ├── InvalidYearsError - Non-integer or out-of-range horizon
│   ├── UnrealisticRateError - Rate outside the realistic band
│   └── InvalidRateError - Rate <= -100%
├── MathDomainError - Arithmetic domain violations (also ArithmeticError)
│   ├── DivisionByZeroError - Zero denominator
│   └── UndefinedRootError - Root/log of a non-positive value
└── IncompleteBatchError - Some entries of a batch computation failed

Usage
-----
>>> from finforecast.exceptions import ForecastError, NegativeValueError
>>>
>>> try:
...     project_portfolio_growth(-1, 0, 10, "0.07")
... except NegativeValueError as e:
...     e.reason
'negative_current_value'
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ForecastError(Exception):
    """
    Base exception for all finforecast errors.

    Parameters
    ----------
    message : str
        Human-readable description.
    reason : str, optional
        Machine-readable reason code. Defaults to the class-level reason.

    Examples
    --------
    >>> try:
    ...     calculate_fi_timeline(current, contribution, expenses, rate)
    ... except ForecastError as e:
    ...     logger.warning("FI timeline failed: %s", e.reason)
    """

    reason: str = "forecast_error"

    def __init__(self, message: str = "", *, reason: Optional[str] = None):
        super().__init__(message or self.reason)
        if reason is not None:
            self.reason = reason


class ValidationError(ForecastError, ValueError):
    """
    Input validation failures.

    Raised when a caller-supplied value fails validation. The projection and
    analyzer layers raise one of the subclasses below.
    """

    reason = "invalid_input"


class InvalidInputError(ValidationError):
    """
    Wrong shape/type or out-of-domain input.

    Reasons used: ``invalid_input``, ``invalid_periods``, ``invalid_scenario``,
    ``invalid_target``, ``unrealistic_target``, ``unrealistic_expenses``,
    ``invalid_frequency``.
    """

    reason = "invalid_input"


class NegativeValueError(ValidationError):
    """
    Amount < 0 where a balance or contribution is expected.

    Reasons used: ``negative_current_value``, ``negative_contribution``,
    ``negative_value``.
    """

    reason = "negative_value"


class InvalidYearsError(ValidationError):
    """Horizon is not an integer or falls outside the accepted range."""

    reason = "invalid_years"


class UnrealisticRateError(ValidationError):
    """
    Growth rate outside the realistic band.

    Examples
    --------
    >>> raise UnrealisticRateError("Growth rate 0.75 outside [-0.5, 0.5]")
    """

    reason = "unrealistic_growth"


class InvalidRateError(ValidationError):
    """Rate <= -1, i.e. a loss of 100% or more per compounding period."""

    reason = "invalid_rate"


class MathDomainError(ForecastError, ArithmeticError):
    """
    Arithmetic domain violation inside a primitive.

    These are fatal: the caller could not have validated them away.
    """

    reason = "math_domain"


class DivisionByZeroError(MathDomainError):
    """Zero denominator in a decimal division."""

    reason = "division_by_zero"


class UndefinedRootError(MathDomainError):
    """Root or logarithm of a value outside its domain."""

    reason = "undefined_root"


class IncompleteBatchError(ForecastError):
    """
    Some entries of a batch (multi-period or multi-scenario) computation failed.

    Batch operations never raise this on their own; they return partial
    results with an ``errors`` mapping. Call ``raise_if_incomplete()`` on the
    result to opt into this exception.

    Attributes
    ----------
    errors : dict
        Failed entry key -> the ForecastError that was swallowed.
    """

    reason = "incomplete_batch"

    def __init__(self, message: str = "", *, errors: Optional[Dict[Any, ForecastError]] = None):
        super().__init__(message)
        self.errors: Dict[Any, ForecastError] = dict(errors or {})
