"""
Command-Line Interface for finforecast.

Purpose
-------
Runs projections, scenario analyses, FI timelines and the inverse searches
from the shell, without writing Python code.

Commands
--------
- project: Single-horizon projection
- multi: Multi-period projection with breakdown and CAGR
- scenarios: Standard or custom scenario projections
- fi: Financial independence timeline (25x rule)
- contribution: Monthly contribution needed for a target
- years: Years needed to reach a target
- convert: Rate convention conversions
- run: Evaluate a what-if config file
- config: Create, show and validate what-if config files
- info: Version and dependency information

Example Usage
-------------
    # Project 100k with 12k/year at 7% for 10 years
    $ finforecast project -c 100000 -a 12000 -y 10 -r 0.07

    # Scenario table as CSV
    $ finforecast scenarios -c 100000 -a 12000 -y 10 --csv scenarios.csv

    # Years to financial independence
    $ finforecast fi -c 100000 -a 24000 -e 40000 -r 0.07

    # Show version
    $ finforecast --version
"""

from __future__ import annotations

import logging
import sys
from decimal import Decimal, getcontext
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config import AppSettings, GoalConfig, ProjectionConfig
from .exceptions import ForecastError
from .utils import ensure_decimal, format_currency

logger = logging.getLogger(__name__)

# Version
__version__ = "0.1.0"


class DecimalParamType(click.ParamType):
    """Click parameter parsed into a finite Decimal."""

    name = "decimal"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            return ensure_decimal(value)
        except ForecastError:
            self.fail(f"{value!r} is not a valid number", param, ctx)


DECIMAL = DecimalParamType()


def configure_logging(level: str) -> None:
    """Route package logs through a Rich handler on stderr."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    root = logging.getLogger("finforecast")
    root.handlers = [h for h in root.handlers if not isinstance(h, RichHandler)]
    root.addHandler(handler)
    root.setLevel(level)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _fail_forecast(e: ForecastError) -> None:
    _fail(f"{e} [{e.reason}]")


def _emit(ctx: click.Context, title: str, rows) -> None:
    """Print label/value rows as a Rich table, or plain lines when quiet."""
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)
    if console and not quiet:
        table = Table(title=title, show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green", justify="right")
        for label, value in rows:
            table.add_row(label, value)
        console.print(table)
    else:
        for label, value in rows:
            click.echo(f"{label}: {value}")


def _save(result, output: Optional[Path], quiet: bool, **metadata) -> None:
    if output is None:
        return
    from .serialization import save_result

    save_result(result, output, **metadata)
    if not quiet:
        click.echo(f"Results saved to {output}")


def _pct(value: Decimal) -> str:
    return f"{value * 100:.2f}%"


@click.group()
@click.version_option(version=__version__, prog_name="finforecast")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def main(ctx: click.Context, quiet: bool) -> None:
    """
    finforecast - Decimal-precision portfolio projection engine.

    Projects portfolio growth, compares scenarios and solves for the
    contribution or horizon needed to reach a target.

    Use 'finforecast COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    configure_logging(settings.effective_log_level)
    getcontext().prec = settings.decimal_precision

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["console"] = Console()
    ctx.obj["settings"] = settings


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

@main.command()
@click.option("--current", "-c", type=DECIMAL, required=True, help="Current portfolio value")
@click.option("--contribution", "-a", type=DECIMAL, default=Decimal("0"), show_default=True,
              help="Annual contribution")
@click.option("--years", "-y", type=int, required=True, help="Projection horizon in years")
@click.option("--rate", "-r", type=DECIMAL, default=Decimal("0.07"), show_default=True,
              help="Annual growth rate (e.g. 0.07)")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Write the result as JSON")
@click.pass_context
def project(
    ctx: click.Context,
    current: Decimal,
    contribution: Decimal,
    years: int,
    rate: Decimal,
    output: Optional[Path],
) -> None:
    """
    Project a portfolio over one horizon.

    Example:
        finforecast project -c 100000 -a 12000 -y 10 -r 0.07
    """
    from .projection import calculate_cagr, project_portfolio_growth

    try:
        value = project_portfolio_growth(current, contribution, years, rate)
    except ForecastError as e:
        _fail_forecast(e)

    _emit(ctx, "Projection", [
        ("Horizon", f"{years} years"),
        ("Growth Rate", _pct(rate)),
        ("Projected Value", format_currency(value)),
        ("CAGR", f"{calculate_cagr(current, value, years, ctx.obj['settings'].nth_root_method)}%"),
    ])
    _save(value, output, ctx.obj["quiet"], current=current, contribution=contribution,
          years=years, rate=rate)


@main.command()
@click.option("--current", "-c", type=DECIMAL, required=True, help="Current portfolio value")
@click.option("--contribution", "-a", type=DECIMAL, default=Decimal("0"), show_default=True,
              help="Annual contribution")
@click.option("--rate", "-r", type=DECIMAL, default=Decimal("0.07"), show_default=True,
              help="Annual growth rate")
@click.option("--periods", "-p", type=str, default="5,10,15,20,25,30", show_default=True,
              help="Comma-separated horizons in years")
@click.option("--csv", "csv_path", type=click.Path(path_type=Path), default=None,
              help="Write the period table as CSV")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Write the result as JSON")
@click.pass_context
def multi(
    ctx: click.Context,
    current: Decimal,
    contribution: Decimal,
    rate: Decimal,
    periods: str,
    csv_path: Optional[Path],
    output: Optional[Path],
) -> None:
    """
    Project over several horizons with CAGR and a 5-year breakdown.

    Example:
        finforecast multi -c 100000 -a 12000 -p 5,10,20
    """
    from .projection import project_multi_period_growth

    try:
        period_list = [int(p.strip()) for p in periods.split(",") if p.strip()]
    except ValueError:
        _fail(f"Periods must be comma-separated integers (got {periods!r})")

    try:
        result = project_multi_period_growth(
            current, contribution, rate, period_list, ctx.obj["settings"].nth_root_method
        )
    except ForecastError as e:
        _fail_forecast(e)

    rows = [
        (f"Year {y}", f"{format_currency(r.value)}  (CAGR {r.cagr}%)")
        for y, r in result.projections.items()
    ]
    for y, err in result.errors.items():
        rows.append((f"Year {y}", f"skipped: {err.reason}"))
    _emit(ctx, "Multi-Period Projection", rows)

    if csv_path:
        result.to_frame().to_csv(csv_path)
        if not ctx.obj["quiet"]:
            click.echo(f"CSV report saved to {csv_path}")
    _save(result, output, ctx.obj["quiet"])


def _parse_scenario(spec: str) -> Tuple[str, Decimal]:
    name, sep, rate = spec.partition("=")
    if not sep or not name.strip():
        raise click.BadParameter(f"Scenario must look like name=rate (got {spec!r})")
    try:
        return name.strip(), ensure_decimal(rate)
    except ForecastError:
        raise click.BadParameter(f"Invalid rate in scenario {spec!r}") from None


@main.command()
@click.option("--current", "-c", type=DECIMAL, required=True, help="Current portfolio value")
@click.option("--contribution", "-a", type=DECIMAL, default=Decimal("0"), show_default=True,
              help="Annual contribution")
@click.option("--years", "-y", type=int, required=True, help="Projection horizon in years")
@click.option("--scenario", "-s", "scenario_specs", multiple=True,
              help="Custom scenario as name=rate (repeatable); default is the standard triple")
@click.option("--csv", "csv_path", type=click.Path(path_type=Path), default=None,
              help="Write the scenario table as CSV")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Write the result as JSON")
@click.pass_context
def scenarios(
    ctx: click.Context,
    current: Decimal,
    contribution: Decimal,
    years: int,
    scenario_specs: Tuple[str, ...],
    csv_path: Optional[Path],
    output: Optional[Path],
) -> None:
    """
    Compare projections under several growth scenarios.

    Example:
        finforecast scenarios -c 100000 -a 12000 -y 10 -s low=0.03 -s high=0.12
    """
    from .projection import calculate_custom_scenarios, calculate_scenario_projections

    try:
        if scenario_specs:
            parsed = [_parse_scenario(s) for s in scenario_specs]
            result = calculate_custom_scenarios(
                current, contribution, years, [{"name": n, "rate": r} for n, r in parsed]
            )
        else:
            result = calculate_scenario_projections(current, contribution, years)
    except click.BadParameter as e:
        _fail(e.format_message())
    except ForecastError as e:
        _fail_forecast(e)

    rows = [(f"{p.name} ({_pct(p.rate)})", format_currency(p.value)) for p in result.projections.values()]
    if result.weighted_average is not None:
        rows.append(("Weighted Average", format_currency(result.weighted_average)))
    for name, err in result.errors.items():
        rows.append((name, f"skipped: {err.reason}"))
    _emit(ctx, "Scenario Projections", rows)

    if csv_path:
        result.to_frame().to_csv(csv_path)
        if not ctx.obj["quiet"]:
            click.echo(f"CSV report saved to {csv_path}")
    _save(result, output, ctx.obj["quiet"])


@main.command()
@click.option("--current", "-c", type=DECIMAL, required=True, help="Current portfolio value")
@click.option("--contribution", "-a", type=DECIMAL, default=Decimal("0"), show_default=True,
              help="Annual contribution")
@click.option("--expenses", "-e", type=DECIMAL, required=True, help="Annual expenses in retirement")
@click.option("--rate", "-r", type=DECIMAL, default=Decimal("0.07"), show_default=True,
              help="Annual growth rate")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Write the result as JSON")
@click.pass_context
def fi(
    ctx: click.Context,
    current: Decimal,
    contribution: Decimal,
    expenses: Decimal,
    rate: Decimal,
    output: Optional[Path],
) -> None:
    """
    Years to financial independence (25x annual expenses).

    Example:
        finforecast fi -c 100000 -a 24000 -e 40000
    """
    from .projection import calculate_fi_timeline

    try:
        timeline = calculate_fi_timeline(current, contribution, expenses, rate)
    except ForecastError as e:
        _fail_forecast(e)

    rows = [
        ("FI Target", format_currency(timeline.target_amount)),
        ("Years to FI", str(timeline.years_to_fi) if timeline.reachable else f">{timeline.years_to_fi}"),
        ("Portfolio at FI", format_currency(timeline.portfolio_value)),
        ("Safe Withdrawal Rate", _pct(timeline.safe_withdrawal_rate)),
    ]
    for s in timeline.scenario_analysis.values():
        rows.append((f"{s.name} ({_pct(s.rate)})", f"{s.years_to_fi} years"))
    _emit(ctx, "Financial Independence", rows)
    _save(timeline, output, ctx.obj["quiet"])


# ---------------------------------------------------------------------------
# Inverse searches
# ---------------------------------------------------------------------------

@main.command()
@click.option("--current", "-c", type=DECIMAL, required=True, help="Current portfolio value")
@click.option("--target", "-t", type=DECIMAL, required=True, help="Target portfolio value")
@click.option("--years", "-y", type=int, required=True, help="Years to reach the target (1-50)")
@click.option("--rate", "-r", type=DECIMAL, default=Decimal("0.07"), show_default=True,
              help="Annual growth rate")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Write the result as JSON")
@click.pass_context
def contribution(
    ctx: click.Context,
    current: Decimal,
    target: Decimal,
    years: int,
    rate: Decimal,
    output: Optional[Path],
) -> None:
    """
    Monthly contribution needed to reach a target.

    Example:
        finforecast contribution -c 100000 -t 1000000 -y 20
    """
    from .analyzer import optimize_contribution_for_goal

    try:
        result = optimize_contribution_for_goal(current, target, years, rate)
    except ForecastError as e:
        _fail_forecast(e)

    rows = [
        ("Required Monthly", format_currency(result.required_monthly_contribution)),
        ("Required Annual", format_currency(result.required_annual_contribution)),
        ("Projected Value", format_currency(result.projected_final_value)),
        ("Feasibility", result.goal_feasibility),
        ("Probability of Success", f"{result.probability_of_success}%"),
    ]
    if result.alternative_timeline is not None:
        alt = result.alternative_timeline
        rows.append((
            "Alternative",
            f"{alt.years_needed} years at {format_currency(alt.suggested_monthly_contribution)}/month",
        ))
    _emit(ctx, "Required Contribution", rows)
    _save(result, output, ctx.obj["quiet"])


@main.command()
@click.option("--current", "-c", type=DECIMAL, required=True, help="Current portfolio value")
@click.option("--monthly", "-m", type=DECIMAL, default=Decimal("0"), show_default=True,
              help="Monthly contribution")
@click.option("--target", "-t", type=DECIMAL, required=True, help="Target portfolio value")
@click.option("--rate", "-r", type=DECIMAL, default=Decimal("0.07"), show_default=True,
              help="Annual growth rate")
@click.option("--max-years", type=int, default=100, show_default=True,
              help="Upper end of the search")
@click.pass_context
def years(
    ctx: click.Context,
    current: Decimal,
    monthly: Decimal,
    target: Decimal,
    rate: Decimal,
    max_years: int,
) -> None:
    """
    Years needed to reach a target with a fixed monthly contribution.

    Example:
        finforecast years -c 100000 -m 1000 -t 1000000
    """
    from .projection import project_portfolio_growth
    from .search import find_required_years

    try:
        needed = find_required_years(current, monthly, target, rate, max_years=max_years)
        value = project_portfolio_growth(current, monthly * 12, needed, rate)
    except ForecastError as e:
        _fail_forecast(e)

    reached = value >= target
    _emit(ctx, "Required Years", [
        ("Years", str(needed) if reached else f">{needed}"),
        ("Projected Value", format_currency(value)),
        ("Target Reached", "yes" if reached else "no"),
    ])


@main.command()
@click.argument("rate", type=DECIMAL)
@click.option(
    "--kind", "-k",
    type=click.Choice([
        "monthly-to-aer", "aer-to-monthly",
        "continuous-to-aer", "aer-to-continuous",
        "nominal-to-effective", "effective-to-nominal",
    ]),
    default="monthly-to-aer",
    show_default=True,
    help="Conversion to apply"
)
@click.option("--periods", "-n", type=int, default=12, show_default=True,
              help="Compounding periods for nominal/effective conversions")
@click.pass_context
def convert(ctx: click.Context, rate: Decimal, kind: str, periods: int) -> None:
    """
    Convert a rate between conventions.

    Example:
        finforecast convert 0.01 --kind monthly-to-aer
    """
    from . import rates

    conversions = {
        "monthly-to-aer": lambda: rates.monthly_to_aer(rate),
        "aer-to-monthly": lambda: rates.aer_to_monthly(rate),
        "continuous-to-aer": lambda: rates.continuous_to_aer(rate),
        "aer-to-continuous": lambda: rates.aer_to_continuous(rate),
        "nominal-to-effective": lambda: rates.effective_rate(rate, periods),
        "effective-to-nominal": lambda: rates.nominal_rate(rate, periods),
    }
    try:
        converted = conversions[kind]()
    except ForecastError as e:
        _fail_forecast(e)

    _emit(ctx, "Rate Conversion", [
        ("Input", str(rate)),
        ("Conversion", kind),
        ("Result", f"{converted:.10f}"),
        ("Result (%)", f"{converted * 100:.4f}%"),
    ])


# ---------------------------------------------------------------------------
# What-if config files
# ---------------------------------------------------------------------------

@main.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Write the multi-period result as JSON")
@click.option("--csv", "csv_path", type=click.Path(path_type=Path), default=None,
              help="Write the year-by-year breakdown as CSV")
@click.pass_context
def run(
    ctx: click.Context,
    config_file: Path,
    output: Optional[Path],
    csv_path: Optional[Path],
) -> None:
    """
    Evaluate a what-if config: periods, scenarios and the goal if present.

    Example:
        finforecast run whatif.json --csv breakdown.csv
    """
    from pydantic import ValidationError
    from .goals import emergency_fund_target
    from .projection import (
        calculate_custom_scenarios,
        calculate_fi_timeline,
        calculate_scenario_projections,
        project_multi_period_growth,
    )
    from .search import contribution_bounds, find_required_contribution
    from .serialization import load_projection_config
    from .utils import annual_to_monthly

    try:
        cfg = load_projection_config(config_file)
    except ValidationError as e:
        _fail(f"Invalid config: {e}")
    except ValueError as e:
        _fail(f"Cannot read {config_file}: {e}")

    method = ctx.obj["settings"].nth_root_method
    try:
        multi_result = project_multi_period_growth(
            cfg.current_value, cfg.annual_contribution, cfg.growth_rate, cfg.periods, method
        )
        if cfg.scenarios:
            scenario_result = calculate_custom_scenarios(
                cfg.current_value, cfg.annual_contribution, cfg.years,
                [s.to_scenario() for s in cfg.scenarios],
            )
        else:
            scenario_result = calculate_scenario_projections(
                cfg.current_value, cfg.annual_contribution, cfg.years
            )
    except ForecastError as e:
        _fail_forecast(e)

    rows = [(f"Year {y}", format_currency(v)) for y, v in multi_result.values().items()]
    rows += [(p.name, format_currency(p.value)) for p in scenario_result.projections.values()]
    if scenario_result.weighted_average is not None:
        rows.append(("Weighted Average", format_currency(scenario_result.weighted_average)))

    goal: Optional[GoalConfig] = cfg.goal
    try:
        if goal is not None and goal.annual_expenses is not None:
            timeline = calculate_fi_timeline(
                cfg.current_value, cfg.annual_contribution, goal.annual_expenses, cfg.growth_rate,
                min_years=cfg.search.min_years, max_years=cfg.search.max_years,
            )
            rows.append(("Years to FI", str(timeline.years_to_fi)))
            fund = emergency_fund_target(
                annual_to_monthly(goal.annual_expenses), goal.emergency_fund_months
            )
            rows.append((f"Emergency Fund ({goal.emergency_fund_months} months)", format_currency(fund)))
        if goal is not None and goal.target_amount is not None and goal.target_years:
            bounds = contribution_bounds(
                cfg.current_value, goal.target_amount, goal.target_years,
                max_iterations=cfg.search.max_iterations, tolerance=cfg.search.tolerance,
            )
            monthly = find_required_contribution(
                cfg.current_value, goal.target_amount, goal.target_years, cfg.growth_rate,
                bounds=bounds,
            )
            rows.append(("Required Monthly", format_currency(monthly)))
    except ForecastError as e:
        _fail_forecast(e)

    _emit(ctx, f"What-if: {cfg.name}", rows)
    if csv_path is not None:
        multi_result.breakdown_frame().to_csv(csv_path)
        if not ctx.obj["quiet"]:
            click.echo(f"Breakdown saved to {csv_path}")
    _save(multi_result, output, ctx.obj["quiet"], config=cfg)


@main.command()
@click.argument("result_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def report(ctx: click.Context, result_file: Path) -> None:
    """
    Summarize a result file written with --output.

    Example:
        finforecast report results/multi.json
    """
    from .serialization import load_result

    try:
        payload = load_result(result_file)
    except ValueError as e:
        _fail(f"Cannot read {result_file}: {e}")

    kind = payload.get("kind", "unknown")
    result = payload.get("result")
    rows = [("Kind", kind)]
    if isinstance(result, dict):
        label = "Year {}" if kind == "MultiPeriodProjection" else "{}"
        for key, projection in result.get("projections", {}).items():
            rows.append((label.format(key), format_currency(Decimal(projection["value"]))))
        if result.get("weighted_average") is not None:
            rows.append(("Weighted Average", format_currency(Decimal(result["weighted_average"]))))
        for key, error in result.get("errors", {}).items():
            rows.append((label.format(key), f"skipped: {error['reason']}"))
    elif result is not None:
        rows.append(("Result", str(result)))

    _emit(ctx, f"Report: {result_file.name}", rows)


@main.group()
def config() -> None:
    """Create, show and validate what-if config files."""


@config.command("create")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--current", "-c", type=DECIMAL, required=True, help="Current portfolio value")
@click.option("--contribution", "-a", type=DECIMAL, default=Decimal("0"), show_default=True,
              help="Annual contribution")
@click.option("--rate", "-r", type=DECIMAL, default=Decimal("0.07"), show_default=True,
              help="Annual growth rate")
@click.option("--years", "-y", type=int, default=10, show_default=True, help="Main horizon")
@click.option("--name", type=str, default="default", show_default=True, help="What-if name")
@click.pass_context
def config_create(
    ctx: click.Context,
    path: Path,
    current: Decimal,
    contribution: Decimal,
    rate: Decimal,
    years: int,
    name: str,
) -> None:
    """Write a new what-if config file with default periods and search rules."""
    from pydantic import ValidationError
    from .serialization import save_projection_config

    try:
        cfg = ProjectionConfig(
            name=name, current_value=current, annual_contribution=contribution,
            growth_rate=rate, years=years,
        )
    except ValidationError as e:
        _fail(f"Invalid config: {e}")

    save_projection_config(cfg, path)
    if not ctx.obj["quiet"]:
        click.echo(f"Config saved to {path}")


@config.command("show")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def config_show(ctx: click.Context, path: Path) -> None:
    """Display a what-if config file."""
    from pydantic import ValidationError
    from .serialization import load_projection_config

    try:
        cfg = load_projection_config(path)
    except ValidationError as e:
        _fail(f"Invalid config: {e}")

    console = ctx.obj.get("console")
    body = cfg.model_dump_json(indent=2)
    if console and not ctx.obj.get("quiet"):
        console.print(Panel(body, title=f"Config: {cfg.name}"))
    else:
        click.echo(body)


@config.command("validate")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def config_validate(path: Path) -> None:
    """Validate a what-if config file."""
    from pydantic import ValidationError
    from .serialization import load_projection_config

    try:
        load_projection_config(path)
    except ValidationError as e:
        _fail(f"Invalid config: {e}")
    except ValueError as e:
        _fail(f"Cannot read {path}: {e}")
    click.echo(f"Config {path} is valid")


@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display system and package information.

    Shows version numbers, installed dependencies and the active settings.
    """
    from importlib.metadata import PackageNotFoundError, version

    settings: AppSettings = ctx.obj["settings"]
    info_lines = [
        f"finforecast Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
        f"Decimal precision: {settings.decimal_precision}",
        f"nth-root method: {settings.nth_root_method}",
        f"Log level: {settings.effective_log_level}",
    ]
    for dist in ("pandas", "pydantic", "pydantic-settings", "click", "rich"):
        try:
            info_lines.append(f"{dist}: {version(dist)}")
        except PackageNotFoundError:
            info_lines.append(f"{dist}: not installed")

    console = ctx.obj.get("console")
    if console and not ctx.obj.get("quiet"):
        console.print(Panel("\n".join(info_lines), title="System Information"))
    else:
        for line in info_lines:
            click.echo(line)


if __name__ == "__main__":
    main()
