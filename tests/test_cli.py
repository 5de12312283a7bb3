"""Tests for CLI commands."""

import json

import pytest
from click.testing import CliRunner

from schemaforge import __version__
from schemaforge.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def schema_file(tmp_path, blog_sql):
    path = tmp_path / "schema.sql"
    path.write_text(blog_sql)
    return path


class TestGroup:

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("parse", "diagram", "extract", "stream", "config"):
            assert command in result.output

    def test_missing_explicit_config(self, runner, schema_file):
        result = runner.invoke(cli, ["--config", "missing.toml", "parse", str(schema_file)])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_debug_logs(self, runner, schema_file):
        result = runner.invoke(cli, ["--log-level", "debug", "parse", str(schema_file)])

        assert result.exit_code == 0
        assert "schema_parsed" in result.output


class TestParseCommand:

    def test_table_output(self, runner, schema_file):
        result = runner.invoke(cli, ["parse", str(schema_file)])

        assert result.exit_code == 0
        assert "users" in result.output
        assert "posts.user_id → users.id" in result.output
        assert "2 table(s), 1 relation(s)" in result.output

    def test_json_from_stdin(self, runner, blog_sql):
        result = runner.invoke(cli, ["parse", "--json"], input=blog_sql)

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["relations"][0]["toTable"] == "users"

    def test_nothing_found(self, runner):
        result = runner.invoke(cli, ["parse", "-"], input="SELECT 1;")

        assert result.exit_code == 0
        assert "No schema to display." in result.output

    def test_missing_file(self, runner):
        result = runner.invoke(cli, ["parse", "missing.sql"])

        assert result.exit_code == 1
        assert "Cannot read" in result.output

    def test_from_response(self, runner, blog_sql):
        response = f"Here is your schema:\n```sql\n{blog_sql}\n```\nAnything else?"

        result = runner.invoke(cli, ["parse", "--response", "--json"], input=response)

        assert result.exit_code == 0
        assert len(json.loads(result.output)["tables"]) == 2


class TestDiagramCommand:

    def test_mermaid_default(self, runner, schema_file):
        result = runner.invoke(cli, ["diagram", str(schema_file)])

        assert result.exit_code == 0
        assert result.output.startswith("erDiagram")

    def test_format_and_title(self, runner, schema_file):
        result = runner.invoke(cli, ["diagram", str(schema_file), "-f", "plantuml", "-t", "Blog"])

        assert result.exit_code == 0
        assert "@startuml\ntitle Blog" in result.output

    def test_no_types(self, runner, schema_file):
        result = runner.invoke(cli, ["diagram", str(schema_file), "--no-types"])

        assert "INTEGER" not in result.output

    def test_output_file(self, runner, schema_file, tmp_path):
        result = runner.invoke(cli, ["diagram", str(schema_file), "-f", "d2", "-o", "erd.d2"])

        assert result.exit_code == 0
        assert "Diagram saved to" in result.output
        assert "shape: sql_table" in (tmp_path / "erd.d2").read_text()

    def test_no_tables(self, runner):
        result = runner.invoke(cli, ["diagram", "-"], input="CREATE TABLE broken (id INT")

        assert result.exit_code == 1
        assert "No tables found" in result.output

    def test_invalid_format(self, runner, schema_file):
        result = runner.invoke(cli, ["diagram", str(schema_file), "-f", "graphviz"])

        assert result.exit_code == 2

    def test_format_from_config(self, runner, schema_file, tmp_path):
        (tmp_path / "schemaforge.toml").write_text('[diagram]\nformat = "d2"\ntitle = "Blog"\n')

        result = runner.invoke(cli, ["diagram", str(schema_file)])

        assert result.exit_code == 0
        assert result.output.startswith("title: Blog")


class TestExtractCommand:

    def test_tool_call(self, runner):
        response = json.dumps({
            "name": "execute_sql",
            "arguments": {"sql": "CREATE TABLE t (\n  id INT\n);"},
        })

        result = runner.invoke(cli, ["extract"], input=response)

        assert result.exit_code == 0
        assert result.output == "CREATE TABLE t (\n  id INT\n);\n"

    def test_dialect_fence(self, runner):
        result = runner.invoke(cli, ["extract"], input="```sqlite\nCREATE TABLE a (\n id INT\n);\n```\n")

        assert result.exit_code == 0
        assert result.output == "CREATE TABLE a (\n id INT\n);\n"

    def test_no_sql(self, runner):
        result = runner.invoke(cli, ["extract"], input="Which tables do you want?")

        assert result.exit_code == 1
        assert "No SQL found" in result.output


class TestStreamCommand:

    def test_reports_revisions(self, runner, blog_sql):
        result = runner.invoke(cli, ["stream"], input=f"```sql\n{blog_sql}```\n")

        assert result.exit_code == 0
        assert "rev 1:" in result.output
        assert "2 table(s), 1 relation(s)" in result.output

    def test_json(self, runner, blog_sql):
        result = runner.invoke(cli, ["stream", "--json"], input=blog_sql)

        assert result.exit_code == 0
        assert "rev" not in result.output
        assert len(json.loads(result.output)["tables"]) == 2

    def test_quiet_empty(self, runner):
        result = runner.invoke(cli, ["stream", "-q"], input="just chatting\n")

        assert result.exit_code == 0
        assert "No schema to display." in result.output


class TestConfigCommand:

    def test_show(self, runner):
        result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0
        assert "[diagram]" in result.output
        assert "format = 'mermaid'" in result.output
        assert "Configuration OK" in result.output

    def test_warnings(self, runner, tmp_path):
        (tmp_path / "schemaforge.toml").write_text("[layout]\nx_spacing = 100\n")

        result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0
        assert "Warnings:" in result.output

    def test_init(self, runner, tmp_path):
        result = runner.invoke(cli, ["config", "--init", "out.toml"])

        assert result.exit_code == 0
        assert "Wrote default config" in result.output
        assert "[diagram]" in (tmp_path / "out.toml").read_text()

    def test_init_refuses_overwrite(self, runner, tmp_path):
        (tmp_path / "out.toml").write_text("# mine\n")

        result = runner.invoke(cli, ["config", "--init", "out.toml"])

        assert result.exit_code == 1
        assert (tmp_path / "out.toml").read_text() == "# mine\n"

    def test_init_force(self, runner, tmp_path):
        (tmp_path / "out.toml").write_text("# mine\n")

        result = runner.invoke(cli, ["config", "--init", "out.toml", "--force"])

        assert result.exit_code == 0
        assert "[diagram]" in (tmp_path / "out.toml").read_text()
