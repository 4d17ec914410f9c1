"""
Scenario definitions and multi-scenario results for finforecast.

Purpose
-------
A scenario is a named annual growth rate. The three standard scenarios
(pessimistic 5%, realistic 7%, optimistic 10%) carry probability weights of
20/60/20 and are reused by projections, FI timelines and the contribution
analyzer.

Results
-------
``ScenarioAnalysis`` collects one ``ScenarioProjection`` per scenario that
succeeded, the failures in ``errors``, and (for the standard run) the
probability-weighted value. Failed scenarios never abort the batch; call
``raise_if_incomplete()`` to treat them as fatal.

Example
-------
>>> from finforecast.scenario import standard_scenarios
>>> [s.name for s in standard_scenarios()]
['pessimistic', 'realistic', 'optimistic']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from .constants import DEFAULT_SCENARIO_RATES, DEFAULT_SCENARIO_WEIGHTS
from .exceptions import ForecastError, IncompleteBatchError, InvalidInputError
from .utils import Number, ensure_decimal, round_to

logger = logging.getLogger(__name__)

__all__ = [
    "Scenario",
    "ScenarioProjection",
    "ScenarioAnalysis",
    "standard_scenarios",
    "scenario_from_mapping",
    "weighted_average",
]


# ---------------------------------------------------------------------------
# Scenario definition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Scenario:
    """
    Named annual growth rate.

    Attributes
    ----------
    name : str
        Identifier used as key in results (e.g. "realistic").
    rate : Decimal
        Annual rate as a fraction.
    """
    name: str
    rate: Decimal

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise InvalidInputError(
                f"Scenario name must be a non-empty string (got {self.name!r}).",
                reason="invalid_scenario",
            )
        object.__setattr__(self, "rate", ensure_decimal(self.rate))


def standard_scenarios() -> Tuple[Scenario, ...]:
    """The pessimistic/realistic/optimistic triple, in that order."""
    return tuple(Scenario(name, rate) for name, rate in DEFAULT_SCENARIO_RATES.items())


def scenario_from_mapping(data: Mapping[str, object]) -> Scenario:
    """Build a Scenario from ``{"name": ..., "rate": ...}``."""
    if not isinstance(data, Mapping) or "name" not in data or "rate" not in data:
        raise InvalidInputError(
            f"Scenario must provide 'name' and 'rate' (got {data!r}).",
            reason="invalid_scenario",
        )
    return Scenario(name=data["name"], rate=ensure_decimal(data["rate"]))


def weighted_average(
    values: Mapping[str, Number],
    weights: Mapping[str, Number] = DEFAULT_SCENARIO_WEIGHTS,
) -> Decimal:
    """
    Sum of ``value * weight`` over the scenarios present in *values*.

    Weights of missing scenarios are dropped, not renormalized. The result is
    rounded to 2 places.

    Examples
    --------
    >>> weighted_average({"pessimistic": 100, "realistic": 200, "optimistic": 300})
    Decimal('200.00')
    """
    total = sum(
        (ensure_decimal(values[name]) * ensure_decimal(weight)
         for name, weight in weights.items() if name in values),
        Decimal("0"),
    )
    return round_to(total)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScenarioProjection:
    """Projected value of one scenario."""
    name: str
    rate: Decimal
    value: Decimal


@dataclass(frozen=True)
class ScenarioAnalysis:
    """
    Outcome of projecting the same inputs under several scenarios.

    Attributes
    ----------
    projections : dict[str, ScenarioProjection]
        Successful scenarios keyed by name, in input order.
    weighted_average : Decimal or None
        Probability-weighted value (standard run only).
    weights : dict[str, Decimal]
        Weights used for ``weighted_average`` (empty for custom runs).
    errors : dict[str, ForecastError]
        Scenarios that failed, keyed by name.
    """
    projections: Dict[str, ScenarioProjection]
    weighted_average: Optional[Decimal] = None
    weights: Dict[str, Decimal] = field(default_factory=dict)
    errors: Dict[str, ForecastError] = field(default_factory=dict)

    def __getitem__(self, name: str) -> ScenarioProjection:
        return self.projections[name]

    def __contains__(self, name: object) -> bool:
        return name in self.projections

    def __iter__(self) -> Iterator[str]:
        return iter(self.projections)

    def __len__(self) -> int:
        return len(self.projections)

    @property
    def complete(self) -> bool:
        return not self.errors

    def values(self) -> Dict[str, Decimal]:
        """Scenario name -> projected value."""
        return {name: p.value for name, p in self.projections.items()}

    def raise_if_incomplete(self) -> "ScenarioAnalysis":
        if self.errors:
            failed = ", ".join(f"{k} ({e.reason})" for k, e in self.errors.items())
            raise IncompleteBatchError(f"Scenarios failed: {failed}", errors=self.errors)
        return self

    def to_frame(self) -> pd.DataFrame:
        """
        One row per successful scenario: rate, value and weight.

        Decimal cells are kept as-is (object dtype) so no precision is lost.
        """
        rows: List[dict] = [
            {
                "scenario": p.name,
                "rate": p.rate,
                "value": p.value,
                "weight": self.weights.get(p.name),
            }
            for p in self.projections.values()
        ]
        return pd.DataFrame(rows, columns=["scenario", "rate", "value", "weight"]).set_index("scenario")
