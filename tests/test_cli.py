from __future__ import annotations

import json
import logging
import os

import pytest
from click.testing import CliRunner

from commit_lens.cli import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("COMMIT_LENS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("commit_lens").setLevel(logging.NOTSET)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def dataset_file(write_dataset, sample_commits):
    return str(write_dataset("commits.json", sample_commits, repo_name="api"))


@pytest.fixture
def state_args(tmp_path):
    return ["--state-file", str(tmp_path / "state.json")]


def test_report(runner, dataset_file, state_args, tmp_path):
    output = tmp_path / "out.json"
    result = runner.invoke(main, [*state_args, "report", dataset_file, "--output", str(output), "--utc", "--seed", "1"])
    assert result.exit_code == 0, result.output
    assert "5 commits loaded" in result.output
    assert "Report written to" in result.output
    data = json.loads(output.read_text())
    assert data["view_level"] == "developer"
    assert data["metadata"] == {"repo_name": "api"}
    assert len(data["commits"]) == 5


def test_report_respects_persisted_filters(runner, dataset_file, state_args, tmp_path):
    result = runner.invoke(main, [*state_args, "filters", "set", "repo", "api"])
    assert result.exit_code == 0, result.output
    output = tmp_path / "out.json"
    result = runner.invoke(main, [*state_args, "report", dataset_file, "--output", str(output), "--view", "executive"])
    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text())
    assert data["view_level"] == "executive"
    assert data["summary"]["total_commits"] == 3
    assert data["commits"] is None


def test_report_rejects_bad_dataset(runner, state_args, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{nope")
    result = runner.invoke(main, [*state_args, "report", str(bad)])
    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_report_needs_files(runner, state_args):
    result = runner.invoke(main, [*state_args, "report"])
    assert result.exit_code == 2
    assert "No dataset files given" in result.output


def test_detail_json(runner, dataset_file, state_args):
    result = runner.invoke(main, [*state_args, "detail", "tag", "bugfix", "--data", dataset_file, "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["title"] == "Tag: bugfix"
    assert payload["subtitle"] == "1 commit"
    assert [c["sha"] for c in payload["commits"]] == ["c2"]


def test_detail_summary(runner, dataset_file, state_args):
    result = runner.invoke(
        main, [*state_args, "detail", "all", "--data", dataset_file, "--view", "management", "--json"]
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["summary"]["total_commits"] == 5
    assert "commits" not in payload


def test_detail_text(runner, dataset_file, state_args):
    result = runner.invoke(main, [*state_args, "detail", "urgency", "reactive", "--data", dataset_file, "--utc"])
    assert result.exit_code == 0, result.output
    assert "Urgency: Reactive (2 commits)" in result.output
    assert "c4" in result.output


def test_detail_unknown_value(runner, dataset_file, state_args):
    result = runner.invoke(main, [*state_args, "detail", "urgency", "panic", "--data", dataset_file])
    assert result.exit_code == 1
    assert "Unknown detail value" in result.output


def test_filters_round_trip(runner, state_args):
    result = runner.invoke(main, [*state_args, "filters", "set", "tag", "bugfix", "--mode", "include"])
    assert result.exit_code == 0, result.output
    result = runner.invoke(main, [*state_args, "filters", "dates", "--from", "2024-03-01"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(main, [*state_args, "filters", "show"])
    assert '"bugfix"' in result.output
    assert "Link: ?tag=bugfix&from=2024-03-01" in result.output

    runner.invoke(main, [*state_args, "filters", "clear"])
    result = runner.invoke(main, [*state_args, "filters", "show"])
    assert '"bugfix"' not in result.output
    assert "Link: ?tag=%21merge" in result.output


def test_filters_link(runner, state_args, tmp_path):
    result = runner.invoke(main, [*state_args, "filters", "link", "https://example.com/?repo=api&urgency=!planned"])
    assert result.exit_code == 0, result.output
    assert "2 active filter(s)" in result.output
    state = json.loads((tmp_path / "state.json").read_text())
    assert state["filters"]["urgency"] == {"values": ["planned"], "mode": "exclude"}
    assert state["filters"]["tag"]["values"] == []


def test_filters_reject_bad_date(runner, state_args):
    result = runner.invoke(main, [*state_args, "filters", "dates", "--to", "tomorrow"])
    assert result.exit_code == 1
    assert "YYYY-MM-DD" in result.output


def test_settings(runner, state_args):
    result = runner.invoke(main, [*state_args, "settings", "--view", "management", "--utc", "--work-start", "9"])
    assert result.exit_code == 0, result.output
    assert "View: management" in result.output
    assert "Timezone: UTC" in result.output
    assert "Work hours: 9:00-17:00" in result.output

    result = runner.invoke(main, [*state_args, "settings"])
    assert "View: management" in result.output


def test_settings_reject_empty_work_day(runner, state_args):
    result = runner.invoke(main, [*state_args, "settings", "--work-start", "18", "--work-end", "9"])
    assert result.exit_code == 2
