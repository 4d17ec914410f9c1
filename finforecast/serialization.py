"""
Serialization module for finforecast.

Purpose
-------
JSON persistence of what-if inputs (``ProjectionConfig``) and of computed
results (projections, scenario analyses, FI timelines, analyzer reports),
so they can be shared, versioned and reloaded.

Design Principles
-----------------
- Lossless: Decimals are written as strings, never floats
- Human-readable: indented JSON
- Validated: configs are re-validated by Pydantic on load
- Backward compatible: schema versions are checked on load

Example
-------
>>> from pathlib import Path
>>> from finforecast.config import ProjectionConfig
>>> from finforecast.serialization import save_projection_config, load_projection_config
>>> cfg = ProjectionConfig(current_value="100000", annual_contribution="12000")
>>> save_projection_config(cfg, Path("whatif.json"))
>>> load_projection_config(Path("whatif.json")) == cfg
True
"""

from __future__ import annotations

import dataclasses
import json
import warnings
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel

from .config import ProjectionConfig
from .exceptions import ForecastError

__all__ = [
    "SCHEMA_VERSION",
    "to_jsonable",
    "save_result",
    "load_result",
    "save_projection_config",
    "load_projection_config",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"


def _check_schema(data: Dict[str, Any], path: Path) -> None:
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    schema_version = data.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"{path} schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

def to_jsonable(obj: Any) -> Any:
    """
    Convert a result object into JSON-compatible primitives.

    - dataclasses -> dict of their fields
    - Decimal -> str (exact)
    - date -> ISO string
    - ForecastError -> {"reason", "message"}
    - Pydantic models -> ``model_dump(mode="json")``
    - mappings -> dict with string keys; sequences -> list

    Examples
    --------
    >>> to_jsonable({"value": Decimal("1.50"), 10: [Decimal("2")]})
    {'value': '1.50', '10': ['2']}
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, ForecastError):
        return {"reason": obj.reason, "message": str(obj)}
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in obj]
    raise TypeError(f"Object of type {type(obj).__name__} is not serializable")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

def save_result(result: Any, path: Path, **metadata: Any) -> None:
    """
    Save a computed result to a JSON file.

    Parameters
    ----------
    result : Any
        Result dataclass, TypedDict or Decimal.
    path : Path
        Output file path.
    **metadata
        Extra top-level keys (e.g. the inputs that produced the result).

    Examples
    --------
    >>> save_result(calculate_scenario_projections(100000, 12000, 10),
    ...             Path("scenarios.json"), years=10)
    """
    payload = {
        "schema_version": SCHEMA_VERSION,
        "kind": type(result).__name__,
        "metadata": to_jsonable(metadata),
        "result": to_jsonable(result),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)


def load_result(path: Path) -> Dict[str, Any]:
    """
    Load a result file written by :func:`save_result`.

    Returns the raw payload; numeric fields are strings and can be turned
    back into Decimals with ``Decimal(value)``.
    """
    with open(path, "r") as f:
        payload = json.load(f)
    _check_schema(payload, path)
    return payload


# ---------------------------------------------------------------------------
# ProjectionConfig
# ---------------------------------------------------------------------------

def save_projection_config(config: ProjectionConfig, path: Path) -> None:
    payload = {"schema_version": SCHEMA_VERSION, **config.model_dump(mode="json")}
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)


def load_projection_config(path: Path) -> ProjectionConfig:
    """
    Load and validate a ``ProjectionConfig`` JSON file.

    Raises
    ------
    pydantic.ValidationError
        When the file content does not satisfy the config model.
    """
    with open(path, "r") as f:
        payload = json.load(f)
    _check_schema(payload, path)
    payload.pop("schema_version", None)
    return ProjectionConfig.model_validate(payload)
