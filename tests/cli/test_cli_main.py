"""
Tests for the dbcube command-line interface.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
import yaml
from typer.testing import CliRunner

from dbcube.cli.main import app
from dbcube.engine.schema_engine import EngineResponse, SchemaEngine


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(temp_project_dir, users_table, orders_table):
    """Project with two valid, dependent table cubes."""
    cubes = temp_project_dir / "dbcube"
    (cubes / "orders.table.cube").write_text(orders_table, encoding="utf-8")
    (cubes / "users.table.cube").write_text(users_table, encoding="utf-8")
    return temp_project_dir


class TestHelp:
    """Tests for help output."""

    def test_no_command_shows_help(self, runner):
        """Test running without a command prints help."""
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "validate" in result.stdout
        assert "order" in result.stdout

    @pytest.mark.parametrize("command", ["validate", "order", "fresh", "seed"])
    def test_missing_project_folder_shows_help(self, runner, command):
        """Test commands without a project folder print their help."""
        result = runner.invoke(app, [command])
        assert result.exit_code == 0
        assert "Usage" in result.stdout

    def test_invalid_format(self, runner, project):
        """Test an unknown output format is rejected."""
        result = runner.invoke(app, ["validate", str(project), "--format", "xml"])
        assert result.exit_code != 0


class TestValidateCommand:
    """Tests for `dbcube validate`."""

    def test_valid_project(self, runner, project):
        """Test a valid project exits with 0."""
        result = runner.invoke(app, ["validate", str(project)])

        assert result.exit_code == 0
        assert "Validating 2 cube file(s)" in result.stdout
        assert "All cube files are valid!" in result.stdout

    def test_invalid_project(self, runner, project):
        """Test validation errors are printed and exit with 1."""
        (project / "dbcube" / "products.table.cube").write_text(
            '@database("main");\n@table("products");\n', encoding="utf-8"
        )

        result = runner.invoke(app, ["validate", str(project)])

        assert result.exit_code == 1
        assert "ERRORS FOUND" in result.stdout
        assert "Table cube files require @columns annotation" in result.stdout
        assert "products.table.cube:1:7" in result.stdout

    def test_symlinked_cube(self, runner, project, users_table):
        """Test a cube linked in from outside the cubes folder is listed by its link name."""
        (project / "dbcube" / "users.table.cube").unlink()
        shared = project / "shared"
        shared.mkdir()
        (shared / "users.table.cube").write_text(users_table, encoding="utf-8")
        (project / "dbcube" / "users.table.cube").symlink_to(shared / "users.table.cube")

        result = runner.invoke(app, ["validate", str(project)])

        assert result.exit_code == 0
        assert "users.table.cube" in result.stdout
        assert "All cube files are valid!" in result.stdout

    def test_json_output(self, runner, project):
        """Test the JSON report lists every file."""
        result = runner.invoke(app, ["validate", str(project), "--format", "json"])

        assert result.exit_code == 0
        report = json.loads(result.stdout)
        assert report["valid"] == 2
        assert report["invalid"] == 0
        assert all(entry["is_valid"] for entry in report["files"])

    def test_yaml_output(self, runner, project):
        """Test the YAML report."""
        result = runner.invoke(app, ["validate", str(project), "-f", "yaml"])

        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)["valid"] == 2

    def test_missing_project_toml(self, runner, temp_dir):
        """Test a folder without project.toml is an error."""
        result = runner.invoke(app, ["validate", str(temp_dir)])

        assert result.exit_code == 1
        assert "project.toml not found" in result.output


class TestOrderCommand:
    """Tests for `dbcube order`."""

    def test_order_text(self, runner, project):
        """Test the order is printed and saved."""
        result = runner.invoke(app, ["order", str(project)])

        assert result.exit_code == 0
        assert "1. users" in result.stdout
        assert "2. orders" in result.stdout
        saved = json.loads((project / ".dbcube" / "orderexecute.json").read_text(encoding="utf-8"))
        assert saved["tables"] == ["users", "orders"]

    def test_unwritable_state_folder(self, runner, project):
        """Test the order is still printed when it cannot be saved."""
        (project / ".dbcube").write_text("not a folder", encoding="utf-8")

        result = runner.invoke(app, ["order", str(project)])

        assert result.exit_code == 0
        assert "1. users" in result.stdout
        assert "Saved to" not in result.stdout
        assert "execution order could not be saved" in result.output

    def test_order_json(self, runner, project):
        """Test the structured order output."""
        result = runner.invoke(app, ["order", str(project), "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["tables"] == ["users", "orders"]
        assert data["cycle_nodes"] == []

    def test_cycle_is_a_warning(self, runner, temp_project_dir, make_table_cube):
        """Test a cycle is reported but only fails with --strict."""
        cubes = temp_project_dir / "dbcube"
        (cubes / "a.table.cube").write_text(make_table_cube("a", ["b"]), encoding="utf-8")
        (cubes / "b.table.cube").write_text(make_table_cube("b", ["a"]), encoding="utf-8")

        relaxed = runner.invoke(app, ["order", str(temp_project_dir)])
        strict = runner.invoke(app, ["order", str(temp_project_dir), "--strict"])

        assert relaxed.exit_code == 0
        assert "circular dependency between: a, b" in relaxed.output
        assert strict.exit_code == 1


class TestRunCommands:
    """Tests for the commands that call the schema engine."""

    @pytest.fixture
    def engine(self):
        engine = MagicMock(spec=SchemaEngine)
        engine.parse_table.return_value = EngineResponse(status=200, data={"actions": []})
        engine.generate.return_value = EngineResponse(status=200, data={"regular_queries": []})
        engine.execute.return_value = EngineResponse(status=200)
        engine.create_database.return_value = EngineResponse(status=200)
        return engine

    def test_fresh(self, runner, project, engine):
        """Test fresh runs every table and prints a summary."""
        with patch("dbcube.engine.orchestrator.SubprocessSchemaEngine", return_value=engine):
            result = runner.invoke(app, ["fresh", str(project)])

        assert result.exit_code == 0
        assert engine.parse_table.call_count == 2
        assert "EXECUTING FRESH TABLES" in result.stdout
        assert "Items processed: 2" in result.stdout

    def test_fresh_failure_exits_with_error(self, runner, project, engine):
        """Test a halted run exits with 1."""
        engine.parse_table.return_value = EngineResponse(status=500, message="engine said no")
        with patch("dbcube.engine.orchestrator.SubprocessSchemaEngine", return_value=engine):
            result = runner.invoke(app, ["fresh", str(project)])

        assert result.exit_code == 1
        assert "engine said no" in result.stdout

    def test_create_database(self, runner, project, engine):
        """Test the database is created through the engine."""
        with patch("dbcube.engine.orchestrator.SubprocessSchemaEngine", return_value=engine) as engine_class:
            result = runner.invoke(app, ["create-database", str(project), "--database", "main"])

        assert result.exit_code == 0
        assert engine_class.call_args.args[0] == "main"
        engine.create_database.assert_called_once()

    def test_seed_without_seeders(self, runner, project, engine):
        """Test seeding without seeder cubes is an error."""
        with patch("dbcube.engine.orchestrator.SubprocessSchemaEngine", return_value=engine):
            result = runner.invoke(app, ["seed", str(project)])

        assert result.exit_code == 1
        assert "There are no seeder cubes" in result.output

    def test_ambiguous_database(self, runner, project):
        """Test several configured databases require --database."""
        with open(project / "project.toml", "a", encoding="utf-8") as f:
            f.write('\n[databases.analytics]\ntype = "postgres"\n')

        result = runner.invoke(app, ["fresh", str(project)])

        assert result.exit_code == 1
        assert "choose one with --database" in result.output
