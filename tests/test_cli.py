"""Smoke tests for the CLI entrypoint."""

from click.testing import CliRunner

from smart_organizer.cli import cli


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Smart File Organizer sorts directories" in result.output
    assert "org" in result.output
    assert "config" in result.output


def test_org_help_lists_modes() -> None:
    result = CliRunner().invoke(cli, ["org", "--help"])

    assert result.exit_code == 0
    for mode in ("extension", "date", "duplicate", "temp", "size", "archive", "rename", "ai"):
        assert mode in result.output
