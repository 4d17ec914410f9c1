"""
finforecast: Decimal-precision portfolio projection engine

Projects portfolio growth under compound interest with regular
contributions, compares growth scenarios, estimates time to financial
independence and inverts projections to find the contribution or horizon
that reaches a target.

Modules
-------
- mathematical : Decimal power, nth root, exp/ln, compound primitives
- rates        : Monthly/annual/continuous rate conversions
- projection   : Single- and multi-period projections, scenarios, FI timeline
- search       : Bounded bisection for contributions and years
- analyzer     : Contribution impact, goal optimization, strategy comparison
- retirement   : 25x target and 4% withdrawal helpers
- goals        : Goal-record progress and emergency fund
- config       : Pydantic what-if configs and environment settings
- utils        : Shared Decimal helpers

"""

import logging

from .exceptions import (
    ForecastError,
    IncompleteBatchError,
    InvalidInputError,
    InvalidRateError,
    InvalidYearsError,
    MathDomainError,
    NegativeValueError,
    UnrealisticRateError,
    ValidationError,
)
from .projection import (
    calculate_cagr,
    calculate_custom_scenarios,
    calculate_fi_timeline,
    calculate_scenario_projections,
    project_multi_period_growth,
    project_portfolio_growth,
)
from .scenario import Scenario, ScenarioAnalysis
from .search import find_required_contribution, find_required_years
from . import utils

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
