"""
Configuration management module for finforecast.

Purpose
-------
Centralized configuration using Pydantic models for type-safe parameter
management, validation, and serialization. A ``ProjectionConfig`` is a
complete what-if input file; ``AppSettings`` reads environment variables.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Serializable: Easy conversion to/from JSON for config files
- Environment-aware: Supports .env files and FINFORECAST_ variables
- Defaults: Every default comes from ``finforecast.constants``

Example
-------
>>> from finforecast.config import ProjectionConfig, SearchConfig
>>> cfg = ProjectionConfig(current_value="100000", annual_contribution="12000",
...                        growth_rate="0.07", years=10)
>>> cfg.search.max_iterations
50
>>> loaded = ProjectionConfig.model_validate_json(cfg.model_dump_json())
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_EMERGENCY_FUND_MONTHS,
    DEFAULT_MAX_YEARS,
    DEFAULT_MIN_YEARS,
    DEFAULT_SCENARIO_RATES,
    DEFAULT_SCENARIO_WEIGHTS,
    DEFAULT_SEARCH_ITERATIONS,
    DEFAULT_SEARCH_TOLERANCE,
    MAX_ANNUAL_EXPENSES,
    MAX_GROWTH_RATE,
    MAX_PROJECTION_YEARS,
    MIN_GROWTH_RATE,
)
from .scenario import Scenario

__all__ = [
    "SearchConfig",
    "ScenarioConfig",
    "ProjectionConfig",
    "GoalConfig",
    "AppSettings",
]


# ---------------------------------------------------------------------------
# Search Configuration
# ---------------------------------------------------------------------------

class SearchConfig(BaseModel):
    """
    Stopping rules of the bisection searches.

    Attributes
    ----------
    max_iterations : int
        Hard cap on probes per search (1-500).
    tolerance : Decimal
        Relative acceptance band of the contribution search.
    min_years, max_years : int
        Bracket of the years search.

    Examples
    --------
    >>> SearchConfig(tolerance="0.005").tolerance
    Decimal('0.005')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_iterations: int = Field(
        default=DEFAULT_SEARCH_ITERATIONS,
        ge=1,
        le=500,
        description="Iteration cap per search"
    )
    tolerance: Decimal = Field(
        default=DEFAULT_SEARCH_TOLERANCE,
        gt=0,
        le=Decimal("0.05"),
        description="Relative tolerance of the contribution search"
    )
    min_years: int = Field(
        default=DEFAULT_MIN_YEARS,
        ge=0,
        le=MAX_PROJECTION_YEARS,
        description="Lower end of the years search"
    )
    max_years: int = Field(
        default=DEFAULT_MAX_YEARS,
        ge=0,
        le=MAX_PROJECTION_YEARS,
        description="Upper end of the years search"
    )

    @model_validator(mode="after")
    def validate_year_bracket(self) -> "SearchConfig":
        if self.min_years > self.max_years:
            raise ValueError(
                f"min_years ({self.min_years}) must not exceed max_years ({self.max_years})"
            )
        return self


# ---------------------------------------------------------------------------
# Scenario Configuration
# ---------------------------------------------------------------------------

class ScenarioConfig(BaseModel):
    """
    One named growth scenario.

    Attributes
    ----------
    name : str
        Identifier (e.g. "conservative").
    rate : Decimal
        Annual rate within the realistic band [-0.5, 0.5].
    weight : Decimal, optional
        Probability weight; informative only for custom scenarios.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(
        min_length=1,
        max_length=50,
        description="Scenario name"
    )
    rate: Decimal = Field(
        ge=MIN_GROWTH_RATE,
        le=MAX_GROWTH_RATE,
        description="Annual growth rate"
    )
    weight: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=1,
        description="Probability weight"
    )

    def to_scenario(self) -> Scenario:
        return Scenario(name=self.name, rate=self.rate)

    @classmethod
    def standard(cls) -> List["ScenarioConfig"]:
        """The pessimistic/realistic/optimistic triple with its weights."""
        return [
            cls(name=name, rate=rate, weight=DEFAULT_SCENARIO_WEIGHTS[name])
            for name, rate in DEFAULT_SCENARIO_RATES.items()
        ]


# ---------------------------------------------------------------------------
# Goal Configuration
# ---------------------------------------------------------------------------

class GoalConfig(BaseModel):
    """
    Target for the inverse searches and FI planning.

    Either ``target_amount`` or ``annual_expenses`` (25x rule) may be given.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target_amount: Optional[Decimal] = Field(
        default=None,
        gt=0,
        description="Amount to reach"
    )
    annual_expenses: Optional[Decimal] = Field(
        default=None,
        gt=0,
        le=MAX_ANNUAL_EXPENSES,
        description="Annual expenses for the 25x target"
    )
    target_years: Optional[int] = Field(
        default=None,
        ge=1,
        le=MAX_PROJECTION_YEARS,
        description="Horizon for the contribution search"
    )
    emergency_fund_months: int = Field(
        default=DEFAULT_EMERGENCY_FUND_MONTHS,
        ge=1,
        le=24,
        description="Months of expenses in the emergency fund"
    )


# ---------------------------------------------------------------------------
# Projection Configuration
# ---------------------------------------------------------------------------

class ProjectionConfig(BaseModel):
    """
    Complete what-if input: portfolio, horizons, scenarios and search rules.

    Attributes
    ----------
    name : str
        Label of the what-if.
    current_value : Decimal
        Starting balance.
    annual_contribution : Decimal
        Yearly contribution (deposited monthly).
    growth_rate : Decimal
        Base annual rate.
    years : int
        Main horizon.
    periods : list[int]
        Extra horizons for multi-period projection.
    scenarios : list[ScenarioConfig]
        Custom scenarios; empty means the standard triple.
    goal : GoalConfig, optional
        Target for FI / contribution searches.
    search : SearchConfig
        Search stopping rules.

    Examples
    --------
    >>> cfg = ProjectionConfig(current_value=100000, annual_contribution=12000,
    ...                        growth_rate="0.07", years=10, periods=[5, 10, 20])
    >>> cfg.periods
    [5, 10, 20]
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(
        default="default",
        min_length=1,
        max_length=100,
        description="What-if name"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="What-if description"
    )
    current_value: Decimal = Field(
        ge=0,
        description="Current portfolio value"
    )
    annual_contribution: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Annual contribution"
    )
    growth_rate: Decimal = Field(
        default=DEFAULT_SCENARIO_RATES["realistic"],
        ge=MIN_GROWTH_RATE,
        le=MAX_GROWTH_RATE,
        description="Annual growth rate (AER)"
    )
    years: int = Field(
        default=10,
        ge=0,
        le=MAX_PROJECTION_YEARS,
        description="Projection horizon in years"
    )
    periods: List[int] = Field(
        default_factory=lambda: [5, 10, 15, 20, 25, 30],
        description="Horizons for multi-period projection"
    )
    scenarios: List[ScenarioConfig] = Field(
        default_factory=list,
        description="Custom scenarios (empty: standard triple)"
    )
    goal: Optional[GoalConfig] = Field(
        default=None,
        description="Target for inverse searches"
    )
    search: SearchConfig = Field(
        default_factory=SearchConfig,
        description="Search parameters"
    )

    @field_validator("periods")
    @classmethod
    def validate_periods(cls, v: List[int]) -> List[int]:
        if not v:
            raise ValueError("periods must not be empty")
        if any(p < 0 for p in v):
            raise ValueError(f"periods must be non-negative (got {v})")
        return v

    @field_validator("scenarios")
    @classmethod
    def validate_unique_scenarios(cls, v: List[ScenarioConfig]) -> List[ScenarioConfig]:
        names = [s.name for s in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate scenario names: {duplicates}")
        return v


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    are prefixed with FINFORECAST_ (e.g., FINFORECAST_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode (forces DEBUG logging).
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR".
    decimal_precision : int
        Significant digits of the decimal context used by the CLI.
    nth_root_method : str
        nth-root strategy for CAGR: "direct" or "bisection".

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.nth_root_method
    'direct'
    """

    model_config = SettingsConfigDict(
        env_prefix="FINFORECAST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    decimal_precision: int = Field(
        default=28,
        ge=10,
        le=100,
        description="Decimal context precision"
    )
    nth_root_method: Literal["direct", "bisection"] = Field(
        default="direct",
        description="nth-root strategy"
    )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level
