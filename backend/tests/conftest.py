"""Shared fixtures: a fluent stand-in for the Supabase query builder."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest

_BUILDER_METHODS = ("select", "insert", "update", "delete", "eq", "is_", "gt", "lt", "order", "limit")


class FakeSupabase:
    """Records table() calls; every builder method returns the same query mock."""

    def __init__(self) -> None:
        self.query = MagicMock()
        for name in _BUILDER_METHODS:
            getattr(self.query, name).return_value = self.query
        self.client = MagicMock()
        self.client.table.return_value = self.query
        self.returns([])

    def returns(self, data: list[dict[str, Any]]) -> None:
        self.query.execute.return_value = MagicMock(data=data)

    def fails(self, exc: Exception) -> None:
        self.query.execute.side_effect = exc


@pytest.fixture
def supabase() -> FakeSupabase:
    fake = FakeSupabase()
    with patch("habitstreak.services.habits.repository.get_supabase_client", return_value=fake.client):
        yield fake
