import json

import pytest
from typer.testing import CliRunner

from cadence.main import cli

runner = CliRunner()


def test_version():
    result = runner.invoke(cli, ["version"])
    assert result.exit_code == 0
    assert "Cadence" in result.stdout


def test_streaks_command(snapshot_file):
    result = runner.invoke(cli, ["streaks", str(snapshot_file), "--as-of", "2024-06-15"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"series_id": "h-read", "length": 3, "longest": 3}]


def test_streaks_include_inactive(snapshot_file):
    result = runner.invoke(cli, ["streaks", str(snapshot_file), "--as-of", "2024-06-15", "--include-inactive"])
    assert [r["series_id"] for r in json.loads(result.stdout)] == ["h-read", "h-run"]


def test_heatmap_command_with_export(snapshot_file, tmp_path):
    target = tmp_path / "heatmap.xlsx"
    result = runner.invoke(cli, ["heatmap", str(snapshot_file), "--year", "2024", "--export", str(target)])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["series_ids"] == ["h-read"]
    assert payload["perfect_days"] == 3
    assert payload["exported"] == str(target)
    assert target.exists()


def test_weekly_command(snapshot_file):
    result = runner.invoke(cli, ["weekly", str(snapshot_file), "--as-of", "2024-06-15"])
    payload = json.loads(result.stdout)
    assert payload["week_start"] == "2024-06-09"
    assert payload["entries"][0]["completed_days"] == 3


def test_trends_command(snapshot_file):
    result = runner.invoke(cli, ["trends", str(snapshot_file)])
    [trend] = json.loads(result.stdout)
    assert trend["series_id"] == "b-coffee"
    assert trend["percent_change"] == pytest.approx(60)
    assert trend["status"] == "improving"


def test_impact_command(snapshot_file):
    result = runner.invoke(
        cli, ["impact", str(snapshot_file), "--window", "7", "--cost", "2", "--as-of", "2024-06-15"]
    )
    assert result.exit_code == 0, result.output
    overview = json.loads(result.stdout)
    [impact] = overview["impacts"]
    assert impact["window_total"] == 14
    assert impact["monthly_projection"] == pytest.approx(120)
    assert overview["improving_count"] == 1


def test_missing_file_exits_with_error(tmp_path):
    result = runner.invoke(cli, ["streaks", str(tmp_path / "missing.json")])
    assert result.exit_code == 2


def test_trends_command_with_points(snapshot_file):
    result = runner.invoke(cli, ["trends", str(snapshot_file), "--points"])
    [trend] = json.loads(result.stdout)
    assert len(trend["points"]) == 14
    assert trend["points"][-1]["date"] == "2024-06-15"
    assert trend["points"][0]["value"] == 5


def test_compare_command(snapshot_file):
    result = runner.invoke(cli, ["compare", str(snapshot_file), "--weeks", "2", "--as-of", "2024-06-15"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["series_ids"] == ["h-read"]
    assert [w["completed_days"]["h-read"] for w in payload["weeks"]] == [0, 3]


def test_performance_command(snapshot_file):
    result = runner.invoke(
        cli,
        ["performance", str(snapshot_file), "--start", "2024-06-09", "--end", "2024-06-15",
         "--as-of", "2024-06-15", "--days"],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["habits"][0]["completed"] == 3
    assert len(payload["daily"]) == 7
    assert payload["daily"][-1]["completed"] == 1


def test_performance_command_rejects_reversed_range(snapshot_file):
    result = runner.invoke(
        cli, ["performance", str(snapshot_file), "--start", "2024-06-15", "--end", "2024-06-09"]
    )
    assert result.exit_code == 2
