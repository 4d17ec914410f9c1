"""
Pytest configuration and fixtures for the finforecast test suite.

Fixtures hold the reference portfolio used across modules: 100,000 current
value, 12,000 yearly contribution, 7% growth over 10 years.
"""

from datetime import date
from decimal import Decimal

import pytest

from finforecast.config import GoalConfig, ProjectionConfig, ScenarioConfig
from finforecast.goals import GoalRecord


# ---------------------------------------------------------------------------
# Portfolio Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def current_value() -> Decimal:
    return Decimal("100000")


@pytest.fixture
def annual_contribution() -> Decimal:
    return Decimal("12000")


@pytest.fixture
def growth_rate() -> Decimal:
    return Decimal("0.07")


@pytest.fixture
def years() -> int:
    return 10


@pytest.fixture
def cent() -> Decimal:
    """Tolerance used when comparing rounded money amounts."""
    return Decimal("0.01")


# ---------------------------------------------------------------------------
# Goal Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def as_of() -> date:
    """Reference date for goal deadline arithmetic."""
    return date(2025, 1, 1)


@pytest.fixture
def vacation_goal() -> GoalRecord:
    """
    Short-term goal, a quarter funded.

    Target: 10,000 by 2026-01-01
    Saved: 2,500 with 500/month
    """
    return GoalRecord(
        target_amount=Decimal("10000"),
        current_amount=Decimal("2500"),
        monthly_contribution=Decimal("500"),
        target_date=date(2026, 1, 1),
        name="vacation",
    )


@pytest.fixture
def completed_goal() -> GoalRecord:
    return GoalRecord(
        target_amount=Decimal("5000"),
        current_amount=Decimal("5200"),
        name="laptop",
    )


# ---------------------------------------------------------------------------
# Config Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def projection_config() -> ProjectionConfig:
    """What-if with custom scenarios and a goal."""
    return ProjectionConfig(
        name="base-case",
        description="Reference portfolio",
        current_value=Decimal("100000"),
        annual_contribution=Decimal("12000"),
        growth_rate=Decimal("0.07"),
        years=10,
        periods=[5, 10, 20],
        scenarios=[
            ScenarioConfig(name="bear", rate=Decimal("0.03")),
            ScenarioConfig(name="bull", rate=Decimal("0.12")),
        ],
        goal=GoalConfig(
            target_amount=Decimal("1000000"),
            annual_expenses=Decimal("40000"),
            target_years=20,
        ),
    )
