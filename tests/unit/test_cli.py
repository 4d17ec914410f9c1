"""
Unit tests for CLI module.

Tests command-line interface functionality using Click's testing utilities.
Most commands run with --quiet so output is plain "Label: value" lines.
"""

import json

import pandas as pd
import pytest
from click.testing import CliRunner

from finforecast.cli import main, __version__
from finforecast.config import SearchConfig
from finforecast.serialization import save_projection_config


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_config(tmp_path, projection_config):
    """Create temporary what-if config file."""
    config_file = tmp_path / "whatif.json"
    save_projection_config(projection_config, config_file)
    return config_file


def _write_config(tmp_path, cfg, filename="whatif.json"):
    path = tmp_path / filename
    save_projection_config(cfg, path)
    return path


# ============================================================================
# MAIN COMMAND TESTS
# ============================================================================

class TestMainCommand:
    """Test main CLI entry point."""

    def test_main_help(self, runner):
        """Test main --help shows help message."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "finforecast" in result.output
        for command in ("project", "multi", "scenarios", "fi", "contribution", "years", "convert"):
            assert command in result.output

    def test_main_version(self, runner):
        """Test main --version shows version."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_main_quiet_option(self, runner):
        """Test --quiet option is accepted."""
        result = runner.invoke(main, ["--quiet", "--help"])
        assert result.exit_code == 0


# ============================================================================
# PROJECTION COMMAND TESTS
# ============================================================================

class TestProjectCommand:
    """Test project command."""

    def test_project(self, runner):
        result = runner.invoke(main, ["-q", "project", "-c", "100000", "-a", "12000", "-y", "10", "-r", "0.07"])
        assert result.exit_code == 0, result.output
        assert "Projected Value: $367,766.87" in result.output
        assert "CAGR: 13.91%" in result.output

    def test_project_rich_table(self, runner):
        result = runner.invoke(main, ["project", "-c", "100000", "-a", "12000", "-y", "10"])
        assert result.exit_code == 0, result.output
        assert "Projection" in result.output
        assert "$367,766.87" in result.output

    def test_project_unrealistic_rate(self, runner):
        result = runner.invoke(main, ["project", "-c", "100000", "-y", "10", "-r", "0.9"])
        assert result.exit_code == 1
        assert "unrealistic_growth" in result.output

    def test_project_not_a_number(self, runner):
        result = runner.invoke(main, ["project", "-c", "lots", "-y", "10"])
        assert result.exit_code == 2
        assert "not a valid number" in result.output

    def test_project_output_json(self, runner, tmp_path):
        output = tmp_path / "result.json"
        result = runner.invoke(main, ["-q", "project", "-c", "100000", "-a", "12000", "-y", "10", "-o", str(output)])
        assert result.exit_code == 0, result.output
        payload = json.loads(output.read_text())
        assert payload["result"] == "367766.87"
        assert payload["metadata"]["years"] == 10


class TestMultiCommand:
    """Test multi command."""

    def test_multi(self, runner):
        result = runner.invoke(main, ["-q", "multi", "-c", "100000", "-a", "12000", "-p", "10,5"])
        assert result.exit_code == 0, result.output
        assert "Year 5:" in result.output
        assert "Year 10: $367,766.87  (CAGR 13.91%)" in result.output

    def test_multi_csv(self, runner, tmp_path):
        csv_path = tmp_path / "multi.csv"
        result = runner.invoke(main, ["-q", "multi", "-c", "100000", "-a", "12000", "-p", "5,10", "--csv", str(csv_path)])
        assert result.exit_code == 0, result.output
        frame = pd.read_csv(csv_path, index_col="years")
        assert list(frame.index) == [5, 10]
        assert frame.loc[10, "value"] == pytest.approx(367766.87)

    def test_multi_skipped_period(self, runner):
        result = runner.invoke(main, ["-q", "multi", "-c", "100000", "-p", "10,150"])
        assert result.exit_code == 0
        assert "Year 150: skipped: invalid_years" in result.output

    def test_multi_bad_periods(self, runner):
        result = runner.invoke(main, ["multi", "-c", "100000", "-p", "five,ten"])
        assert result.exit_code == 1
        assert "comma-separated integers" in result.output


class TestScenariosCommand:
    """Test scenarios command."""

    def test_standard(self, runner):
        result = runner.invoke(main, ["-q", "scenarios", "-c", "100000", "-a", "12000", "-y", "10"])
        assert result.exit_code == 0, result.output
        assert "realistic (7.00%): $367,766.87" in result.output
        assert "Weighted Average: $375,958.27" in result.output

    def test_custom(self, runner):
        result = runner.invoke(main, [
            "-q", "scenarios", "-c", "100000", "-a", "12000", "-y", "10",
            "-s", "bear=0.05", "-s", "bull=0.10",
        ])
        assert result.exit_code == 0, result.output
        assert "bear (5.00%): $317,252.62" in result.output
        assert "Weighted Average" not in result.output

    def test_bad_scenario(self, runner):
        result = runner.invoke(main, ["scenarios", "-c", "100000", "-y", "10", "-s", "bear"])
        assert result.exit_code == 1
        assert "name=rate" in result.output

    def test_csv(self, runner, tmp_path):
        csv_path = tmp_path / "scenarios.csv"
        result = runner.invoke(main, ["-q", "scenarios", "-c", "100000", "-y", "10", "--csv", str(csv_path)])
        assert result.exit_code == 0
        frame = pd.read_csv(csv_path, index_col="scenario")
        assert list(frame.index) == ["pessimistic", "realistic", "optimistic"]


class TestFICommand:
    """Test fi command."""

    def test_fi(self, runner):
        result = runner.invoke(main, ["-q", "fi", "-c", "100000", "-a", "24000", "-e", "40000"])
        assert result.exit_code == 0, result.output
        assert "FI Target: $1,000,000.00" in result.output
        assert "Years to FI: 17" in result.output

    def test_fi_bad_expenses(self, runner):
        result = runner.invoke(main, ["fi", "-c", "100000", "-e", "0"])
        assert result.exit_code == 1
        assert "invalid_input" in result.output

    def test_fi_unrealistic_expenses(self, runner):
        result = runner.invoke(main, ["fi", "-c", "100000", "-e", "2000000"])
        assert result.exit_code == 1
        assert "unrealistic_expenses" in result.output


# ============================================================================
# SEARCH COMMAND TESTS
# ============================================================================

class TestSearchCommands:
    """Test contribution and years commands."""

    def test_contribution(self, runner):
        result = runner.invoke(main, ["-q", "contribution", "-c", "100000", "-t", "1000000", "-y", "20"])
        assert result.exit_code == 0, result.output
        assert "Feasibility: achievable" in result.output
        assert "Required Monthly: $1,2" in result.output

    def test_contribution_challenging(self, runner):
        result = runner.invoke(main, ["-q", "contribution", "-c", "0", "-t", "2000000", "-y", "10"])
        assert result.exit_code == 0, result.output
        assert "Feasibility: challenging" in result.output
        assert "Alternative: 24 years at $3,000.00/month" in result.output

    def test_contribution_horizon_limit(self, runner):
        result = runner.invoke(main, ["contribution", "-c", "0", "-t", "1000", "-y", "60"])
        assert result.exit_code == 1
        assert "invalid_years" in result.output

    def test_years(self, runner):
        result = runner.invoke(main, ["-q", "years", "-c", "100000", "-m", "1000", "-t", "1000000"])
        assert result.exit_code == 0, result.output
        assert "Years: 22" in result.output
        assert "Target Reached: yes" in result.output

    def test_years_unreachable(self, runner):
        result = runner.invoke(main, ["-q", "years", "-c", "1000", "-t", "1000000", "-r", "0.01", "--max-years", "30"])
        assert result.exit_code == 0, result.output
        assert "Years: >30" in result.output
        assert "Target Reached: no" in result.output


class TestConvertCommand:
    """Test convert command."""

    def test_monthly_to_aer(self, runner):
        result = runner.invoke(main, ["-q", "convert", "0.01"])
        assert result.exit_code == 0, result.output
        assert "Result: 0.1268250301" in result.output

    def test_nominal_to_effective(self, runner):
        result = runner.invoke(main, ["-q", "convert", "0.12", "-k", "nominal-to-effective", "-n", "4"])
        assert result.exit_code == 0, result.output
        assert "Result: 0.1255088100" in result.output

    def test_invalid_rate(self, runner):
        result = runner.invoke(main, ["convert", "-k", "aer-to-monthly", "--", "-1"])
        assert result.exit_code == 1
        assert "invalid_rate" in result.output


# ============================================================================
# CONFIG COMMAND TESTS
# ============================================================================

class TestConfigCommands:
    """Test config create/show/validate and run."""

    def test_create_and_validate(self, runner, tmp_path):
        path = tmp_path / "new.json"
        result = runner.invoke(main, ["config", "create", str(path), "-c", "50000", "-a", "6000"])
        assert result.exit_code == 0, result.output
        assert path.exists()

        result = runner.invoke(main, ["config", "validate", str(path)])
        assert result.exit_code == 0
        assert "is valid" in result.output

    def test_create_invalid(self, runner, tmp_path):
        result = runner.invoke(main, ["config", "create", str(tmp_path / "x.json"), "-c", "-5"])
        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_show(self, runner, temp_config):
        result = runner.invoke(main, ["-q", "config", "show", str(temp_config)])
        assert result.exit_code == 0, result.output
        assert '"name": "base-case"' in result.output

    def test_validate_invalid(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"current_value": 1, "periods": []}))
        result = runner.invoke(main, ["config", "validate", str(path)])
        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_run(self, runner, temp_config, tmp_path):
        output = tmp_path / "run.json"
        result = runner.invoke(main, ["-q", "run", str(temp_config), "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert "Year 10: $367,766.87" in result.output
        assert "bear:" in result.output
        assert "Years to FI: 22" in result.output
        assert "Required Monthly:" in result.output
        payload = json.loads(output.read_text())
        assert payload["metadata"]["config"]["name"] == "base-case"

    def test_run_emergency_fund_months(self, runner, tmp_path, projection_config):
        """The configured coverage months size the emergency fund."""
        assert "Emergency Fund (6 months): $20,000.00" in runner.invoke(
            main, ["-q", "run", str(_write_config(tmp_path, projection_config))]
        ).output

        goal = projection_config.goal.model_copy(update={"emergency_fund_months": 3})
        path = _write_config(tmp_path, projection_config.model_copy(update={"goal": goal}), "short.json")
        result = runner.invoke(main, ["-q", "run", str(path)])
        assert result.exit_code == 0, result.output
        assert "Emergency Fund (3 months): $10,000.00" in result.output

    def test_run_min_years(self, runner, tmp_path, projection_config):
        """The search floor from the config bounds the years to FI."""
        cfg = projection_config.model_copy(update={"search": SearchConfig(min_years=25)})
        result = runner.invoke(main, ["-q", "run", str(_write_config(tmp_path, cfg))])
        assert result.exit_code == 0, result.output
        assert "Years to FI: 25" in result.output

    def test_run_breakdown_csv(self, runner, temp_config, tmp_path):
        csv_path = tmp_path / "breakdown.csv"
        result = runner.invoke(main, ["-q", "run", str(temp_config), "--csv", str(csv_path)])
        assert result.exit_code == 0, result.output
        frame = pd.read_csv(csv_path, index_col="year")
        assert list(frame.index) == [1, 2, 3, 4, 5]
        assert frame.loc[1, "portfolio_value"] == pytest.approx(119380.30)
        assert frame.loc[1, "growth_amount"] == pytest.approx(7380.30)

    def test_run_malformed_json(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        result = runner.invoke(main, ["run", str(path)])
        assert result.exit_code == 1
        assert "Cannot read" in result.output
        assert isinstance(result.exception, SystemExit)

    def test_run_invalid_config(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"current_value": -1}))
        result = runner.invoke(main, ["run", str(path)])
        assert result.exit_code == 1
        assert "Invalid config" in result.output


# ============================================================================
# REPORT COMMAND TESTS
# ============================================================================

class TestReportCommand:
    """Test report command over saved result files."""

    def test_multi_period_report(self, runner, tmp_path):
        output = tmp_path / "multi.json"
        runner.invoke(main, ["-q", "multi", "-c", "100000", "-a", "12000", "-p", "10,150", "-o", str(output)])

        result = runner.invoke(main, ["-q", "report", str(output)])
        assert result.exit_code == 0, result.output
        assert "Kind: MultiPeriodProjection" in result.output
        assert "Year 10: $367,766.87" in result.output
        assert "Year 150: skipped: invalid_years" in result.output

    def test_scenario_report(self, runner, tmp_path):
        output = tmp_path / "scenarios.json"
        runner.invoke(main, ["-q", "scenarios", "-c", "100000", "-a", "12000", "-y", "10", "-o", str(output)])

        result = runner.invoke(main, ["-q", "report", str(output)])
        assert result.exit_code == 0, result.output
        assert "realistic: $367,766.87" in result.output
        assert "Weighted Average: $375,958.27" in result.output

    def test_single_value_report(self, runner, tmp_path):
        output = tmp_path / "value.json"
        runner.invoke(main, ["-q", "project", "-c", "100000", "-a", "12000", "-y", "10", "-o", str(output)])

        result = runner.invoke(main, ["-q", "report", str(output)])
        assert result.exit_code == 0, result.output
        assert "Result: 367766.87" in result.output

    @pytest.mark.parametrize("content", ["[", "[1, 2]"])
    def test_malformed_report(self, runner, tmp_path, content):
        path = tmp_path / "broken.json"
        path.write_text(content)
        result = runner.invoke(main, ["report", str(path)])
        assert result.exit_code == 1
        assert "Cannot read" in result.output


class TestInfoCommand:
    """Test info command."""

    def test_info(self, runner):
        result = runner.invoke(main, ["-q", "info"])
        assert result.exit_code == 0
        assert f"finforecast Version: {__version__}" in result.output
        assert "pandas:" in result.output
        assert "nth-root method:" in result.output
