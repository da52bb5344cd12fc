"""Tests for the taskmetrics command line interface."""

import json

import pytest
from click.testing import CliRunner

from taskmetrics.cli.analytics_commands import analytics_cli, format_metric, format_table

NOW_ARG = "2026-06-15T12:00:00Z"

SNAPSHOT = {
    "members": [
        {"id": "m1", "name": "Alex Rivera", "email": "alex@example.com"},
        {"id": "m2", "name": "Sam Chen", "email": "sam@example.com"},
    ],
    "tasks": [
        {
            "id": "done",
            "title": "Write release notes",
            "status": "completed",
            "priority": "high",
            "primaryAssignee": "m1",
            "supportingMembers": ["m2"],
            "createdAt": "2026-06-01T12:00:00Z",
            "completedAt": "2026-06-11T12:00:00Z",
            "dueDate": "2026-06-12T00:00:00Z",
        },
        {
            "id": "stuck",
            "title": "Migrate billing",
            "status": "blocked",
            "priority": "critical",
            "primaryAssignee": "m2",
            "createdAt": "2026-05-20T12:00:00Z",
            "dueDate": "2026-06-10T00:00:00Z",
            "statusHistory": [
                {"from": "pending", "to": "blocked", "changedAt": "2026-06-05T12:00:00Z", "changedBy": "m2"},
            ],
        },
        {
            "id": "active",
            "title": "Design onboarding",
            "status": "in-progress",
            "priority": "high",
            "primaryAssignee": "m1",
            "supportingMembers": ["m2"],
            "createdAt": "2026-06-10T12:00:00Z",
            "dueDate": "2026-07-01T00:00:00Z",
        },
    ],
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def snapshot_path(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(SNAPSHOT))
    return str(path)


def run_json(runner, *args):
    result = runner.invoke(analytics_cli, [*args, "--now", NOW_ARG, "--format", "json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestAnalyticsCommands:
    """Test CLI commands end to end over a JSON snapshot."""

    def test_team(self, runner, snapshot_path):
        data = run_json(runner, "team", snapshot_path)

        assert data["totalCompleted"] == 1
        assert data["totalBlocked"] == 1
        assert data["onTimeCompletionRate"] == 100
        assert data["period"]["end"] == "2026-06-15T12:00:00+00:00"

    def test_team_window_options(self, runner, snapshot_path):
        data = run_json(runner, "team", snapshot_path,
                        "--start", "2026-06-09T00:00:00Z", "--end", "2026-06-15T00:00:00Z")

        assert data["totalInProgress"] == 1
        assert data["totalCompleted"] == 0

    def test_members(self, runner, snapshot_path):
        data = run_json(runner, "members", snapshot_path)

        assert [r["member"]["id"] for r in data] == ["m1", "m2"]
        assert data[0]["tasksCompleted"] == 1

    def test_health(self, runner, snapshot_path):
        data = run_json(runner, "health", snapshot_path)

        assert data["blockersCount"] == 1
        assert data["overdueActions"] == 1
        assert data["riskLevel"] == "medium"

    def test_bottlenecks(self, runner, snapshot_path):
        data = run_json(runner, "bottlenecks", snapshot_path)

        assert [b["taskId"] for b in data] == ["stuck"]
        assert data[0]["daysInStatus"] == 10
        assert data[0]["riskScore"] == 100

    def test_trends_granularity(self, runner, snapshot_path):
        data = run_json(runner, "trends", snapshot_path, "-g", "weekly")

        assert data["period"] == "weekly"
        assert len(data["data"]) == 12
        assert data["currentPeriod"]["value"] == 1

    def test_cycle_time(self, runner, snapshot_path):
        data = run_json(runner, "cycle-time", snapshot_path)

        assert data["averageCycleTime"] == 10
        assert data["byPriority"]["high"] == 10

    def test_forecast(self, runner, snapshot_path):
        data = run_json(runner, "forecast", snapshot_path)

        by_id = {f["taskId"]: f for f in data}
        assert set(by_id) == {"stuck", "active"}
        assert by_id["active"]["daysRemaining"] == 7
        assert by_id["active"]["confidence"] == "high"
        assert by_id["stuck"]["confidence"] == "low"

    def test_dashboard_and_workload(self, runner, snapshot_path):
        dashboard = run_json(runner, "dashboard", snapshot_path)
        workload = run_json(runner, "workload", snapshot_path)

        assert dashboard["completionRate"] == 33
        assert dashboard["averageCompletionTime"] == 10
        assert workload["totalMembers"] == 2
        assert workload["tasksByStatus"]["blocked"] == 1

    def test_report(self, runner, snapshot_path):
        data = run_json(runner, "report", snapshot_path)

        assert len(data["individualReports"]) == 2
        assert data["bottlenecks"][0]["taskId"] == "stuck"

    @pytest.mark.parametrize("output_format", ["text", "plain"])
    def test_human_formats(self, runner, snapshot_path, output_format):
        result = runner.invoke(analytics_cli, ["health", snapshot_path, "--now", NOW_ARG,
                                               "--format", output_format])

        assert result.exit_code == 0, result.output
        assert "Project Health" in result.stdout

    def test_invalid_dataset_exits_with_error(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"tasks": [{"id": "x", "createdAt": "2026-01-01", "status": "done?"}]}))

        result = runner.invoke(analytics_cli, ["health", str(path)])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_config_exits_with_error(self, runner, snapshot_path, tmp_path):
        config_path = tmp_path / "analytics.yaml"
        config_path.write_text("daily_periods: lots\n")

        result = runner.invoke(analytics_cli, ["--config", str(config_path), "health", snapshot_path])

        assert result.exit_code == 1

    @pytest.mark.parametrize("document", [
        {"tasks": [42]},
        {"tasks": {"id": "t1"}},
        {"members": ["m1"], "tasks": []},
        [1, 2, 3],
    ])
    def test_malformed_records_exit_with_error(self, runner, tmp_path, document):
        path = tmp_path / "odd.json"
        path.write_text(json.dumps(document))

        result = runner.invoke(analytics_cli, ["health", str(path)])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert not isinstance(result.exception, AttributeError)

    def test_empty_series_config_exits_with_error(self, runner, snapshot_path, tmp_path):
        config_path = tmp_path / "analytics.yaml"
        config_path.write_text("daily_periods: 0\n")

        result = runner.invoke(analytics_cli, ["--config", str(config_path), "trends",
                                               snapshot_path, "-g", "daily"])

        assert result.exit_code == 1
        assert "daily_periods" in result.output

    def test_config_file_is_applied(self, runner, snapshot_path, tmp_path):
        config_path = tmp_path / "analytics.yaml"
        config_path.write_text("bottleneck_threshold_days: 20\n")

        result = runner.invoke(analytics_cli, ["--config", str(config_path), "bottlenecks",
                                               snapshot_path, "--now", NOW_ARG, "-f", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == []

    def test_bad_now_is_rejected(self, runner, snapshot_path):
        result = runner.invoke(analytics_cli, ["health", snapshot_path, "--now", "noon"])
        assert result.exit_code == 2


class TestFormatting:

    def test_format_metric(self):
        assert format_metric(66.666, "%") == "66.7%"
        assert format_metric(3) == "3.0"

    def test_format_table(self):
        assert format_table([]) == "No data available"
        assert "Metric" in format_table([{"Metric": "a", "Value": 1}])
