"""Tests for habitstreak/services/habits/points.py: per-user running totals."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from habitstreak.services.habits import points

REPO = "habitstreak.services.habits.repository"


@pytest.mark.parametrize("total,level", [(0, 1), (999, 1), (1000, 2), (2500, 3)])
def test_calculate_level(total: int, level: int) -> None:
    assert points.calculate_level(total) == level


def test_first_award_creates_row() -> None:
    with (
        patch(f"{REPO}.get_user_points", return_value=None),
        patch(f"{REPO}.create_user_points", return_value={"user_id": "u1"}) as mock_create,
        patch(f"{REPO}.update_user_points") as mock_update,
    ):
        points.add_user_points("u1", 35)

    user_id, data = mock_create.call_args[0]
    assert user_id == "u1"
    assert data == {
        "total_points": 35,
        "points_this_week": 35,
        "points_this_month": 35,
        "experience_points": 35,
        "level": 1,
    }
    mock_update.assert_not_called()


def test_award_increments_totals_and_levels_up() -> None:
    current = {
        "user_id": "u1",
        "total_points": 980,
        "points_this_week": 100,
        "points_this_month": 400,
        "experience_points": 980,
        "level": 1,
    }
    with (
        patch(f"{REPO}.get_user_points", return_value=current),
        patch(f"{REPO}.update_user_points", return_value={}) as mock_update,
    ):
        points.add_user_points("u1", 40)

    user_id, data = mock_update.call_args[0]
    assert user_id == "u1"
    assert data["total_points"] == 1020
    assert data["points_this_week"] == 140
    assert data["points_this_month"] == 440
    assert data["experience_points"] == 1020
    assert data["level"] == 2


def test_get_user_points_without_row() -> None:
    with patch(f"{REPO}.get_user_points", return_value=None):
        summary = points.get_user_points("u1")

    assert summary["total_points"] == 0
    assert summary["level"] == 1
    assert summary["points_to_next_level"] == 1000


def test_get_user_points_with_row() -> None:
    row = {"total_points": 1250, "points_this_week": 50, "points_this_month": 300, "level": 2}
    with patch(f"{REPO}.get_user_points", return_value=row):
        summary = points.get_user_points("u1")

    assert summary["level"] == 2
    assert summary["points_this_week"] == 50
    assert summary["points_to_next_level"] == 750


def test_period_resets_target_columns() -> None:
    with patch(f"{REPO}.reset_points_column", return_value=3) as mock_reset:
        assert points.reset_weekly_points() == 3
        assert points.reset_monthly_points() == 3

    assert [c[0][0] for c in mock_reset.call_args_list] == ["points_this_week", "points_this_month"]


def test_null_columns_count_as_zero() -> None:
    current = {"user_id": "u1", "total_points": None, "points_this_week": None, "points_this_month": None, "level": None}
    with (
        patch(f"{REPO}.get_user_points", return_value=current),
        patch(f"{REPO}.update_user_points", return_value={}) as mock_update,
    ):
        points.add_user_points("u1", 20)

    data = mock_update.call_args[0][1]
    assert data["total_points"] == 20
    assert data["points_this_week"] == 20
    assert data["points_this_month"] == 20
    assert data["level"] == 1


def test_summary_with_null_columns() -> None:
    with patch(f"{REPO}.get_user_points", return_value={"total_points": None, "level": None}):
        summary = points.get_user_points("u1")

    assert summary["total_points"] == 0
    assert summary["level"] == 1
    assert summary["points_to_next_level"] == 1000
