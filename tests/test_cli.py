"""Tests for the typer command line."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from sky_pathfinder.cli import cli
from sky_pathfinder.config import get_settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def small_grid(monkeypatch):
    monkeypatch.setenv("SKYPATH_GRID_SIZE", "12")
    monkeypatch.setenv("SKYPATH_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_plan_prints_route_and_costs() -> None:
    result = runner.invoke(cli, ["plan", "0,0", "5,5", "--seed", "1"])

    assert result.exit_code == 0, result.output
    assert "(0,0) -> " in result.output
    assert "(5,5)" in result.output
    assert "cost=" in result.output and "climb_penalty=" in result.output


def test_plan_with_overrides() -> None:
    result = runner.invoke(
        cli, ["plan", "0,0", "20,20", "--size", "8", "--fly-cost", "0", "--corner-rule", "both"]
    )

    assert result.exit_code == 0, result.output
    assert "(7,7)" in result.output


def test_plan_without_clamping_fails_out_of_range() -> None:
    result = runner.invoke(cli, ["plan", "0,0", "20,20", "--no-clamp"])

    assert result.exit_code == 1


def test_plan_rejects_malformed_cells() -> None:
    result = runner.invoke(cli, ["plan", "zero", "5,5"])

    assert result.exit_code != 0


def test_plan_rejects_unknown_corner_rule() -> None:
    result = runner.invoke(cli, ["plan", "0,0", "5,5", "--corner-rule", "sideways"])

    assert result.exit_code != 0


def test_plan_on_pooled_terrain() -> None:
    result = runner.invoke(cli, ["plan", "0,0", "9,9", "--pool", "4"])

    assert result.exit_code == 0, result.output
    assert "(3,3)" in result.output
