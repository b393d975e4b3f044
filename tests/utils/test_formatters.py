"""Tests for output formatters."""

import json
from datetime import UTC, date, datetime, timedelta

import pytest

from plansync_cli.utils.ui.formatters import (
    format_error,
    format_output,
    format_projects_table,
    format_relative_time,
    format_target_date,
)


class TestFormatTargetDate:
    def test_date(self):
        assert format_target_date(date(2025, 3, 1)) == "01 Mar 2025"

    def test_iso_string(self):
        assert format_target_date("2025-12-31") == "31 Dec 2025"

    def test_missing(self):
        assert format_target_date(None) == "-"

    def test_unparseable_is_shown_as_is(self):
        assert format_target_date("someday") == "someday"


class TestFormatRelativeTime:
    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(seconds=10), "just now"),
            (timedelta(minutes=5), "5m ago"),
            (timedelta(hours=3), "3h ago"),
            (timedelta(days=2), "2d ago"),
        ],
    )
    def test_buckets(self, delta, expected):
        moment = datetime.now(UTC) - delta - timedelta(seconds=1)

        assert format_relative_time(moment.isoformat()) == expected

    def test_invalid(self):
        assert format_relative_time("yesterday") == ""
        assert format_relative_time(None) == ""


def test_json_output(capsys):
    format_output({"goal": "G", "target_date": date(2025, 3, 1)}, "json")

    assert json.loads(capsys.readouterr().out) == {"goal": "G", "target_date": "2025-03-01"}


def test_yaml_output(capsys):
    format_output({"goal": "G", "target_date": date(2025, 3, 1)}, "yaml")

    out = capsys.readouterr().out
    assert "goal: G" in out
    assert "target_date: '2025-03-01'" in out


def test_projects_table_marks_ownership(capsys):
    projects = [
        {"id": "p1", "title": "Mine", "created_by": "me", "tasks": [1, 2]},
        {"id": "p2", "title": "Theirs", "created_by": "them", "tasks": []},
    ]

    format_projects_table(projects, "me")

    out = capsys.readouterr().out
    assert "Mine" in out
    assert "owner" in out
    assert "shared" in out


def test_empty_projects_table(capsys):
    format_projects_table([])

    assert "No projects found" in capsys.readouterr().out


def test_error(capsys):
    format_error("boom")

    assert "Error: boom" in capsys.readouterr().out
