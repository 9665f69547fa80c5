from __future__ import annotations

import json

from commit_lens.filters import default_filter_spec, with_dimension
from commit_lens.models import EXCLUDE, Settings
from commit_lens.state import SessionState, load_state, save_state, state_from_dict


def test_missing_file_gives_defaults(tmp_path):
    assert load_state(tmp_path / "state.json") == SessionState()


def test_missing_file_uses_given_defaults(tmp_path):
    defaults = SessionState(view_level="executive", use_utc=True)
    assert load_state(tmp_path / "state.json", defaults) == defaults


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{oops")
    assert load_state(path) == SessionState()


def test_round_trip(tmp_path):
    path = tmp_path / "nested" / "state.json"
    state = SessionState(
        filters=with_dimension(default_filter_spec(), "repo", ["web"], EXCLUDE),
        view_level="management",
        use_utc=True,
        work_hour_start=9,
        work_hour_end=18,
    )
    save_state(state, path)
    assert load_state(path) == state


def test_invalid_fields_fall_back_one_by_one():
    state = state_from_dict(
        {
            "filters": {"tag": {"values": ["wip"], "mode": "sometimes"}},
            "view_level": "ceo",
            "use_utc": "yes",
            "work_hour_start": True,
            "work_hour_end": 20,
        }
    )
    assert state.filters == default_filter_spec()
    assert state.view_level == "developer"
    assert state.use_utc is False
    assert (state.work_hour_start, state.work_hour_end) == (8, 20)


def test_empty_work_day_falls_back():
    state = state_from_dict({"work_hour_start": 18, "work_hour_end": 9})
    assert (state.work_hour_start, state.work_hour_end) == (8, 17)


def test_camel_case_keys(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps({"viewLevel": "executive", "useUTC": True, "workHourStart": 7, "workHourEnd": 15,
                    "filters": {"dateFrom": "2024-01-01"}})
    )
    state = load_state(path)
    assert (state.view_level, state.use_utc, state.work_hour_start, state.work_hour_end) == ("executive", True, 7, 15)
    assert state.filters.date_from == "2024-01-01"


def test_not_an_object():
    assert state_from_dict([1, 2]) == SessionState()


def test_settings():
    state = SessionState(use_utc=True, work_hour_start=6, work_hour_end=14)
    assert state.settings(sanitize=True) == Settings(use_utc=True, work_hour_start=6, work_hour_end=14, sanitize=True)
