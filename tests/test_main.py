"""Tests for the main entry point."""

from typer.testing import CliRunner

from plansync_cli import __version__
from plansync_cli.main import app

runner = CliRunner()


def test_help_lists_command_groups():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for group in ("auth", "projects", "config", "version"):
        assert group in result.output


def test_version_without_store(tmp_config):
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
    assert "No store configured" in result.output
    assert "Not signed in" in result.output


def test_version_with_store(tmp_config, monkeypatch):
    monkeypatch.setenv("PLANSYNC_STORE_URL", "https://store.test")

    result = runner.invoke(app, ["version"])

    assert "Store: https://store.test" in result.output


def test_typo_suggests_command():
    result = runner.invoke(app, ["projcts"])

    assert result.exit_code == 1
    assert "projects" in result.output
