"""
Integration tests for the command line
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from element_ordering import __version__
from element_ordering.cli import cli
from element_ordering.core.config import Config


class TestCliIntegration:
    """Integration tests for the element-ordering commands"""

    @pytest.fixture
    def runner(self) -> CliRunner:
        return CliRunner()

    def test_version(self, runner: CliRunner):
        """Test the version option"""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_check_reports_violations(
        self, runner: CliRunner, sample_config_file: Path, sample_elements_file: Path
    ):
        """Test check exits with 1 and lists violations"""
        result = runner.invoke(
            cli, ["-c", str(sample_config_file), "check", str(sample_elements_file)]
        )

        assert result.exit_code == 1
        assert "dependency-order" in result.output
        assert "violation(s) in 1 construct(s)" in result.output

    def test_check_ordered(
        self, runner: CliRunner, sample_config_file: Path, ordered_elements_file: Path
    ):
        """Test check exits with 0 on an ordered construct"""
        result = runner.invoke(
            cli, ["-c", str(sample_config_file), "check", str(ordered_elements_file)]
        )

        assert result.exit_code == 0
        assert "Basket: ordered" in result.output
        assert "0 violation(s) in 1 construct(s)" in result.output

    def test_check_json(
        self, runner: CliRunner, sample_config_file: Path, sample_elements_file: Path
    ):
        """Test the JSON report"""
        result = runner.invoke(
            cli,
            ["-c", str(sample_config_file), "check", str(sample_elements_file), "--json"],
        )

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data[0]["construct"] == "Basket"
        assert data[0]["target_order"] == ["MAX_ITEMS", "items", "total", "add"]
        assert {violation["kind"] for violation in data[0]["violations"]} >= {
            "dependency-order",
            "group-order",
        }

    def test_check_quiet(
        self, runner: CliRunner, sample_config_file: Path, sample_elements_file: Path
    ):
        """Test quiet mode keeps the exit status without output"""
        result = runner.invoke(
            cli, ["-c", str(sample_config_file), "-q", "check", str(sample_elements_file)]
        )

        assert result.exit_code == 1
        assert result.output == ""

    def test_order(
        self, runner: CliRunner, sample_config_file: Path, sample_elements_file: Path
    ):
        """Test the target order listing with resolved blank lines"""
        result = runner.invoke(
            cli, ["-c", str(sample_config_file), "order", str(sample_elements_file)]
        )

        assert result.exit_code == 0
        assert result.output == "Basket:\n  MAX_ITEMS\n\n  items\n  total\n\n  add\n"

    def test_order_keeps_partition_comments(self, runner: CliRunner, temp_dir: Path):
        """Test a partition comment stays above the element opening its partition"""
        config_file = temp_dir / "partitions.yaml"
        config_file.write_text(
            "partition_by_comment: true\ngroups:\n  - static-property\n  - property\n"
        )
        elements_file = temp_dir / "partitioned.yaml"
        elements_file.write_text(
            """
construct: Shelf
elements:
  - name: h
  - name: e
    comments: ["Part 2"]
  - name: d
    modifiers: [static]
"""
        )

        result = runner.invoke(cli, ["-c", str(config_file), "order", str(elements_file)])

        assert result.exit_code == 0
        assert result.output == "Shelf:\n  h\n  # Part 2\n  d\n  e\n"

    def test_invalid_element_file(
        self, runner: CliRunner, sample_config_file: Path, temp_dir: Path
    ):
        """Test malformed element documents exit with 2"""
        elements_file = temp_dir / "broken.yaml"
        elements_file.write_text("elements:\n  - selector: method\n")

        result = runner.invoke(
            cli, ["-c", str(sample_config_file), "check", str(elements_file)]
        )

        assert result.exit_code == 2
        assert "Element without name" in result.output

    def test_validate_config(self, runner: CliRunner, sample_config_file: Path):
        """Test a valid configuration file"""
        result = runner.invoke(
            cli,
            ["-c", str(sample_config_file), "validate-config", str(sample_config_file)],
        )

        assert result.exit_code == 0
        assert "Configuration is valid (1 profile(s))" in result.output
        assert "static-property, property, method" in result.output

    def test_validate_invalid_config(
        self, runner: CliRunner, sample_config_file: Path, temp_dir: Path
    ):
        """Test an invalid configuration exits with 2"""
        config_file = temp_dir / "invalid.yaml"
        config_file.write_text("groups:\n  - property\n  - property\n")

        result = runner.invoke(
            cli, ["-c", str(sample_config_file), "validate-config", str(config_file)]
        )

        assert result.exit_code == 2
        assert "Duplicated group(s): property" in result.output

    def test_invalid_global_config(
        self, runner: CliRunner, temp_dir: Path, sample_elements_file: Path
    ):
        """Test an invalid -c configuration stops before the command runs"""
        config_file = temp_dir / "invalid.yaml"
        config_file.write_text("type: shuffled\n")

        result = runner.invoke(
            cli, ["-c", str(config_file), "check", str(sample_elements_file)]
        )

        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_configuration_hierarchy_by_default(
        self, runner: CliRunner, mocker, ordered_elements_file: Path
    ):
        """Test the configuration hierarchy is loaded without -c"""
        load = mocker.patch(
            "element_ordering.cli.Config.load_hierarchy", return_value=Config()
        )

        result = runner.invoke(cli, ["check", str(ordered_elements_file)])

        load.assert_called_once()
        # Default profile: alphabetical, no groups
        assert result.exit_code == 1
