"""Tests for sshdash.testcli."""

from __future__ import annotations

from typer.testing import CliRunner

from sshdash.testcli import app

runner = CliRunner()


def test_output_renders_everything() -> None:
    result = runner.invoke(app, ["output"])
    assert result.exit_code == 0
    assert "[192.168.1.50]" in result.output
    assert "Should you be connected to the VPN?" in result.output


def test_steps() -> None:
    result = runner.invoke(app, ["steps"])
    assert result.exit_code == 0
    assert "Checking Inventory..." in result.output
