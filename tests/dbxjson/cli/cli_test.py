"""Tests for the top-level dbxjson CLI (version, help)."""

from click.testing import CliRunner

from dbxjson.cli import cli


class TestCliVersionFlag:
    """--version prints just the version number."""

    def test_prints_version_number(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "dbxjson" not in result.output.lower()
        assert result.output.strip() != ""


class TestCliVersionSubcommand:
    """dbxjson version prints just the version number."""

    def test_same_as_flag(self):
        runner = CliRunner()
        flag_result = runner.invoke(cli, ["--version"])
        cmd_result = runner.invoke(cli, ["version"])
        assert cmd_result.exit_code == 0
        assert flag_result.output.strip() == cmd_result.output.strip()


class TestCliHelpSubcommand:
    """dbxjson help prints guidance to use --help."""

    def test_prints_guidance(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["help"])
        assert result.exit_code == 0
        assert "--help" in result.output
        assert "<command> --help" in result.output

    def test_lists_commands(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "cache" in result.output
        assert "watch" in result.output
