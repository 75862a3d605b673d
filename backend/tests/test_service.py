"""Tests for habitstreak/services/habits/service.py with the repository mocked."""

from __future__ import annotations

import threading
import time
from datetime import date, timedelta
from typing import Any
from unittest.mock import patch

import pytest

from habitstreak.core.exceptions import (
    BackdatedCompletionError,
    DatabaseError,
    DuplicateCompletionError,
    HabitNotFoundError,
    InvalidHabitDataError,
    StreakConflictError,
)
from habitstreak.models.streak import HabitStreakState
from habitstreak.services.habits import points, service

TODAY = date(2026, 3, 1)
REPO = "habitstreak.services.habits.repository"


def _habit(**overrides: Any) -> dict[str, Any]:
    habit = {
        "id": "h1",
        "user_id": "u1",
        "title": "Meditate",
        "difficulty_level": 3,
        "current_streak": 6,
        "longest_streak": 10,
        "last_completed_date": str(TODAY - timedelta(days=1)),
        "is_active": True,
    }
    habit.update(overrides)
    return habit


# ---------------------------------------------------------------------------
# complete_habit
# ---------------------------------------------------------------------------


def test_complete_habit_persists_streak_completion_and_points() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak", return_value=_habit(current_streak=7)) as mock_update,
        patch(f"{REPO}.create_completion", return_value={"id": "c1"}) as mock_completion,
        patch.object(points, "add_user_points") as mock_points,
    ):
        result = service.complete_habit("u1", "h1", notes="calm", completion_date=TODAY)

    assert result["status"] == "success"
    assert result["current_streak"] == 7
    assert result["longest_streak"] == 10
    assert result["points_earned"] == 35
    assert result["completion"] == {"id": "c1"}

    prior, new = mock_update.call_args[0][1:]
    assert prior == HabitStreakState(current_streak=6, longest_streak=10, last_completed_date=TODAY - timedelta(days=1))
    assert new == HabitStreakState(current_streak=7, longest_streak=10, last_completed_date=TODAY)

    kwargs = mock_completion.call_args.kwargs
    assert kwargs["points_earned"] == 35
    assert kwargs["streak_length"] == 7
    assert kwargs["completion_method"] == "manual"
    assert kwargs["notes"] == "calm"
    mock_points.assert_called_once_with("u1", 35)


def test_complete_habit_defaults_to_today() -> None:
    with (
        patch("habitstreak.services.habits.service.get_today_date", return_value=TODAY),
        patch(f"{REPO}.get_habit_by_id", return_value=_habit(last_completed_date=None, current_streak=0, longest_streak=0)),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None) as mock_existing,
        patch(f"{REPO}.update_habit_streak", return_value=_habit()),
        patch(f"{REPO}.create_completion", return_value={"id": "c1"}),
        patch.object(points, "add_user_points"),
    ):
        result = service.complete_habit("u1", "h1")

    mock_existing.assert_called_once_with("h1", TODAY)
    assert result["current_streak"] == 1


def test_complete_habit_not_found() -> None:
    with patch(f"{REPO}.get_habit_by_id", return_value=None):
        with pytest.raises(HabitNotFoundError):
            service.complete_habit("u1", "missing", completion_date=TODAY)


def test_complete_habit_existing_record_is_duplicate() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value={"id": "c0"}),
        patch(f"{REPO}.update_habit_streak") as mock_update,
    ):
        with pytest.raises(DuplicateCompletionError):
            service.complete_habit("u1", "h1", completion_date=TODAY)

    mock_update.assert_not_called()


def test_complete_habit_same_day_as_last_completion_persists_nothing() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit(last_completed_date=str(TODAY))),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak") as mock_update,
        patch(f"{REPO}.create_completion") as mock_completion,
    ):
        with pytest.raises(DuplicateCompletionError):
            service.complete_habit("u1", "h1", completion_date=TODAY)

    mock_update.assert_not_called()
    mock_completion.assert_not_called()


def test_complete_habit_backdated_rejected() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak") as mock_update,
    ):
        with pytest.raises(BackdatedCompletionError):
            service.complete_habit("u1", "h1", completion_date=TODAY - timedelta(days=5))

    mock_update.assert_not_called()


def test_complete_habit_conflict_propagates_without_writes() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak", side_effect=StreakConflictError("raced")),
        patch(f"{REPO}.create_completion") as mock_completion,
    ):
        with pytest.raises(StreakConflictError):
            service.complete_habit("u1", "h1", completion_date=TODAY)

    mock_completion.assert_not_called()


def test_completion_insert_failure_restores_streak() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak", return_value=_habit()) as mock_update,
        patch(f"{REPO}.create_completion", side_effect=DatabaseError("insert failed")),
        patch(f"{REPO}.delete_completion") as mock_delete,
    ):
        with pytest.raises(DatabaseError, match="insert failed"):
            service.complete_habit("u1", "h1", completion_date=TODAY)

    assert mock_update.call_count == 2
    applied_prior, applied_new = mock_update.call_args_list[0][0][1:]
    undo_prior, undo_new = mock_update.call_args_list[1][0][1:]
    assert (undo_prior, undo_new) == (applied_new, applied_prior)
    mock_delete.assert_not_called()


def test_points_failure_removes_completion_and_restores_streak() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak", return_value=_habit()) as mock_update,
        patch(f"{REPO}.create_completion", return_value={"id": "c9"}),
        patch(f"{REPO}.delete_completion") as mock_delete,
        patch.object(points, "add_user_points", side_effect=DatabaseError("points down")),
    ):
        with pytest.raises(DatabaseError, match="points down"):
            service.complete_habit("u1", "h1", completion_date=TODAY)

    mock_delete.assert_called_once_with("c9")
    assert mock_update.call_count == 2


def test_rollback_failure_still_raises_original_error() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(
            f"{REPO}.update_habit_streak",
            side_effect=[_habit(), StreakConflictError("moved")],
        ),
        patch(f"{REPO}.create_completion", side_effect=DatabaseError("insert failed")),
    ):
        with pytest.raises(DatabaseError, match="insert failed"):
            service.complete_habit("u1", "h1", completion_date=TODAY)


def test_unexpected_points_error_still_rolls_back() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak", return_value=_habit()) as mock_update,
        patch(f"{REPO}.create_completion", return_value={"id": "c9"}),
        patch(f"{REPO}.delete_completion") as mock_delete,
        patch.object(points, "add_user_points", side_effect=TypeError("bad points row")),
    ):
        with pytest.raises(TypeError, match="bad points row"):
            service.complete_habit("u1", "h1", completion_date=TODAY)

    mock_delete.assert_called_once_with("c9")
    assert mock_update.call_count == 2
    undo_prior, undo_new = mock_update.call_args_list[1][0][1:]
    assert undo_new.current_streak == 6
    assert undo_prior.current_streak == 7


def test_null_points_columns_are_awarded_from_zero() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak", return_value=_habit(current_streak=7)) as mock_update,
        patch(f"{REPO}.create_completion", return_value={"id": "c1"}),
        patch(f"{REPO}.delete_completion") as mock_delete,
        patch(f"{REPO}.get_user_points", return_value={"user_id": "u1", "total_points": None, "level": None}),
        patch(f"{REPO}.update_user_points", return_value={}) as mock_points,
    ):
        result = service.complete_habit("u1", "h1", completion_date=TODAY)

    assert result["points_earned"] == 35
    assert mock_points.call_args[0][1]["total_points"] == 35
    assert mock_update.call_count == 1
    mock_delete.assert_not_called()


def test_corrupt_stored_streak_rejected_before_writes() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit(current_streak=12, longest_streak=10)),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak") as mock_update,
    ):
        with pytest.raises(InvalidHabitDataError, match="Corrupt streak state"):
            service.complete_habit("u1", "h1", completion_date=TODAY)

    mock_update.assert_not_called()


def test_unknown_habits_leave_no_lock_entries() -> None:
    with patch(f"{REPO}.get_habit_by_id", return_value=None):
        for i in range(50):
            with pytest.raises(HabitNotFoundError):
                service.complete_habit("u1", f"missing-{i}", completion_date=TODAY)

    assert len(service._habit_locks) == 0


def test_lock_entries_released_after_completion() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completion_for_habit_and_date", return_value=None),
        patch(f"{REPO}.update_habit_streak", return_value=_habit(current_streak=7)),
        patch(f"{REPO}.create_completion", return_value={"id": "c1"}),
        patch(f"{REPO}.get_user_points", return_value=None),
        patch(f"{REPO}.create_user_points", return_value={}),
    ):
        service.complete_habit("u1", "h1", completion_date=TODAY)

    assert len(service._habit_locks) == 0
    assert len(points._user_locks) == 0


# ---------------------------------------------------------------------------
# create / delete / history
# ---------------------------------------------------------------------------


def test_create_habit_maps_color_column() -> None:
    with patch(f"{REPO}.create_habit", return_value={"id": "h1"}) as mock_create:
        result = service.create_habit("u1", {"title": "  Run  ", "difficulty_level": 4, "color": "#fff"})

    assert result["status"] == "success"
    user_id, columns = mock_create.call_args[0]
    assert user_id == "u1"
    assert columns["title"] == "Run"
    assert columns["color_theme"] == "#fff"
    assert "color" not in columns
    assert columns["category"] == "other"
    assert columns["target_frequency"] == "daily"


@pytest.mark.parametrize(
    "data",
    [
        {"title": ""},
        {"title": "Run", "difficulty_level": 0},
        {"title": "Run", "difficulty_level": 6},
        {"title": "Run", "category": "gaming"},
        {"title": "Run", "target_frequency": "hourly"},
    ],
)
def test_create_habit_rejects_invalid_data(data: dict[str, Any]) -> None:
    with patch(f"{REPO}.create_habit") as mock_create:
        with pytest.raises(InvalidHabitDataError):
            service.create_habit("u1", data)
    mock_create.assert_not_called()


def test_delete_habit_soft_deletes() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.deactivate_habit") as mock_deactivate,
    ):
        result = service.delete_habit("u1", "h1")

    mock_deactivate.assert_called_once_with("h1", "u1")
    assert result["habit_id"] == "h1"


def test_delete_habit_not_owned() -> None:
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=None),
        patch(f"{REPO}.deactivate_habit") as mock_deactivate,
    ):
        with pytest.raises(HabitNotFoundError):
            service.delete_habit("u2", "h1")
    mock_deactivate.assert_not_called()


def test_get_completion_history() -> None:
    completions = [{"id": "c2", "completion_date": "2026-03-01"}, {"id": "c1", "completion_date": "2026-02-28"}]
    with (
        patch(f"{REPO}.get_habit_by_id", return_value=_habit()),
        patch(f"{REPO}.get_completions_for_habit", return_value=completions) as mock_history,
    ):
        result = service.get_completion_history("u1", "h1", limit=10)

    mock_history.assert_called_once_with("h1", 10)
    assert result["completions"] == completions
    assert result["current_streak"] == 6


# ---------------------------------------------------------------------------
# Per-habit serialization
# ---------------------------------------------------------------------------


def test_concurrent_completions_record_exactly_once() -> None:
    stored = _habit()
    completions: list[dict[str, Any]] = []
    outcomes: list[str] = []
    barrier = threading.Barrier(2)

    def fake_update(habit_id: str, prior: HabitStreakState, new: HabitStreakState) -> dict[str, Any]:
        time.sleep(0.05)
        stored.update(new.to_record())
        return dict(stored)

    def fake_completion_lookup(habit_id: str, target_date: date) -> dict[str, Any] | None:
        return next((c for c in completions if c["completion_date"] == str(target_date)), None)

    def fake_create_completion(**kwargs: Any) -> dict[str, Any]:
        record = {"id": f"c{len(completions)}", "completion_date": str(kwargs["completion_date"])}
        completions.append(record)
        return record

    def attempt() -> None:
        barrier.wait()
        try:
            service.complete_habit("u1", "h1", completion_date=TODAY)
            outcomes.append("ok")
        except DuplicateCompletionError:
            outcomes.append("duplicate")

    with (
        patch(f"{REPO}.get_habit_by_id", side_effect=lambda habit_id, user_id: dict(stored)),
        patch(f"{REPO}.get_completion_for_habit_and_date", side_effect=fake_completion_lookup),
        patch(f"{REPO}.update_habit_streak", side_effect=fake_update),
        patch(f"{REPO}.create_completion", side_effect=fake_create_completion),
        patch.object(points, "add_user_points"),
    ):
        threads = [threading.Thread(target=attempt) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert sorted(outcomes) == ["duplicate", "ok"]
    assert stored["current_streak"] == 7
    assert len(completions) == 1
