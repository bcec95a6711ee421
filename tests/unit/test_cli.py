"""Unit tests for Lifemap CLI commands."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from lifemap.cli.main import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def store(initialized_db, monkeypatch):
    """CLI runs against the temporary store with no LLM credentials."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    return initialized_db


@pytest.mark.parametrize(
    "command",
    ["import", "import-journal", "log", "map", "classify-tags", "connections", "graph", "trajectory", "trend", "analytics", "info"],
)
def test_command_exists(runner, command):
    """lifemap <command> --help succeeds."""
    result = runner.invoke(main, [command, "--help"])
    assert result.exit_code == 0


def test_log_and_connections(runner, store):
    """Two logged entries sharing a tag show up as connections."""
    result = runner.invoke(main, ["log", "Lifted with Sam", "-t", "gym", "-t", "friends"])
    assert result.exit_code == 0, result.output
    assert "Logged" in result.output
    runner.invoke(main, ["log", "Morning session", "-t", "Gym", "-t", "coffee"])

    result = runner.invoke(main, ["connections", "gym"])
    assert result.exit_code == 0
    assert "#coffee" in result.output
    assert "#friends" in result.output


def test_connections_empty(runner, store):
    result = runner.invoke(main, ["connections"])
    assert result.exit_code == 0
    assert "No connections yet" in result.output


def test_log_bad_date(runner, store):
    result = runner.invoke(main, ["log", "x", "-t", "a", "--date", "last tuesday"])
    assert result.exit_code == 1
    assert "Could not parse date" in result.output


def test_map_requires_an_option(runner, store):
    result = runner.invoke(main, ["map", "gym"])
    assert result.exit_code == 1
    assert "--dimension" in result.output


def test_map_tag(runner, store):
    result = runner.invoke(main, ["map", "Coffee", "--dimension", "social", "--type", "Project"])
    assert result.exit_code == 0, result.output
    assert "#coffee" in result.output
    assert "Social" in result.output
    assert "diamond" in result.output


def test_graph_json_to_stdout(runner, store):
    runner.invoke(main, ["log", "Lifted", "-t", "gym", "-t", "friends"])
    result = runner.invoke(main, ["graph", "--min-frequency", "1"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    ids = {node["id"] for node in data["nodes"]}
    assert {"gym", "friends", "health", "social"} <= ids


def test_graph_to_file(runner, store, tmp_path):
    runner.invoke(main, ["log", "Lifted", "-t", "gym", "-t", "friends"])
    out = tmp_path / "graph.json"
    result = runner.invoke(main, ["graph", "--min-frequency", "1", "--out", str(out)])
    assert result.exit_code == 0
    assert "Wrote" in result.output
    assert json.loads(out.read_text())["edges"]


def test_trajectory_no_data(runner, store):
    result = runner.invoke(main, ["trajectory"])
    assert result.exit_code == 0
    assert "No data available" in result.output


def test_trajectory_with_entries(runner, store):
    for _ in range(3):
        runner.invoke(main, ["log", "Run", "-t", "running"])
    result = runner.invoke(main, ["trajectory", "--days", "7"])
    assert result.exit_code == 0
    assert "Health" in result.output
    assert "100%" in result.output
    assert "heavily focused on Health" in result.output


def test_trend_not_enough_data(runner, store):
    result = runner.invoke(main, ["trend"])
    assert result.exit_code == 0
    assert "Not enough data" in result.output


def test_import_offline(runner, store, watch_history_file):
    result = runner.invoke(main, ["import", str(watch_history_file), "--offline"])
    assert result.exit_code == 0, result.output
    assert "Import Summary" in result.output
    assert "Top keywords" in result.output


def test_import_unrecognized_file(runner, store, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"nope": 1}')
    result = runner.invoke(main, ["import", str(path), "--offline"])
    assert result.exit_code == 1
    assert "Unrecognized JSON structure" in result.output


def test_import_without_api_key(runner, store, watch_history_file):
    """Online import with no key fails with a hint instead of a traceback."""
    result = runner.invoke(main, ["import", str(watch_history_file)])
    assert result.exit_code == 1
    assert "No API key" in result.output


def test_analytics(runner, store, journal_file):
    runner.invoke(main, ["import-journal", str(journal_file)])
    result = runner.invoke(main, ["analytics"])
    assert result.exit_code == 0
    assert "Warrior" in result.output
    assert "Mar 2024" in result.output


def test_info(runner, store):
    result = runner.invoke(main, ["info"])
    assert result.exit_code == 0
    assert "Storage" in result.output
    assert "not set" in result.output
