"""Tests for the interactive day-wise grid screen."""

from types import SimpleNamespace

import pytest

from progress_modules.daywise import DayWiseUpdateService
from scripts.cli.views.daywise import show_daywise

TASK = 5
ROWS_PATH = f"/api/task-updates/task/{TASK}"


def _rows() -> list[dict]:
    return [
        {"updateDate": "2025-11-01", "planQty": 10, "actualQty": 0, "canEdit": True},
        {"updateDate": "2025-11-02", "planQty": 5, "actualQty": 0, "canEdit": True},
    ]


@pytest.fixture
def ctx(backend, api_client):
    backend.route("GET", ROWS_PATH, (200, _rows()))
    return SimpleNamespace(
        task=SimpleNamespace(task_id=TASK, label="T-5 Excavation"),
        updates=DayWiseUpdateService(api_client),
    )


@pytest.fixture
def answers(monkeypatch):
    """Feed scripted answers to ``input()``."""
    def _feed(*values: str) -> None:
        remaining = iter(values)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(remaining))
    return _feed


class TestDayWiseView:
    def test_invalid_quantity_shows_field_message(self, ctx, answers, capsys):
        answers("E", "0", "abc", "Q")
        show_daywise(ctx)
        assert "  ! actual_qty: Enter a number" in capsys.readouterr().out

    def test_unknown_row_number(self, ctx, answers, capsys):
        answers("E", "9", "1", "Q")
        show_daywise(ctx)
        assert "No row 9." in capsys.readouterr().out

    def test_repeated_bulk_index_selects_row_once(self, ctx, answers, capsys):
        answers("B", "0,0", "2", "Q", "y")
        show_daywise(ctx)
        assert "Applied to 1 row(s)." in capsys.readouterr().out

    def test_error_state_offers_retry_only(self, backend, ctx, answers, capsys):
        backend.route("GET", ROWS_PATH, (500, {"message": "db down"}))
        answers("E", "Q")
        show_daywise(ctx)
        out = capsys.readouterr().out
        assert "! db down" in out
        assert "Nothing loaded; R to retry." in out

    def test_saved_updates_listed(self, backend, ctx, answers, capsys):
        backend.route(
            "GET",
            f"{ROWS_PATH}/list",
            (200, [{"updateId": 3, "updateDate": "2025-11-01", "actualQty": 6, "remarks": "crew A"}]),
        )
        answers("H", "Q")
        show_daywise(ctx)
        out = capsys.readouterr().out
        assert "2025-11-01" in out
        assert "crew A" in out

    def test_single_date_save_reloads_grid(self, backend, ctx, answers, capsys):
        backend.route(
            "POST",
            "/api/task-updates",
            (200, {"updateId": 9, "updateDate": "2025-11-03", "actualQty": "7"}),
        )
        answers("A", "2025-11-03", "", "7", "", "Q")
        show_daywise(ctx)
        assert "Saved update 9 for 2025-11-03." in capsys.readouterr().out
        assert backend.calls_to("POST", "/api/task-updates")[0].json == {
            "taskId": TASK,
            "updateDate": "2025-11-03",
            "actualQty": "7",
        }
        assert len(backend.calls_to("GET", ROWS_PATH)) == 2

    def test_single_date_save_blocked_with_unsaved_edits(self, backend, ctx, answers, capsys):
        answers("E", "0", "3", "A", "Q", "y")
        show_daywise(ctx)
        assert "Save or reload the grid first." in capsys.readouterr().out
        assert backend.calls_to("POST", "/api/task-updates") == []
