"""Shared fixtures for sqlserver_connect tests."""

from __future__ import annotations

import os
from typing import Any, List, Optional, Tuple
from unittest.mock import patch

import pytest


class FakeDriverError(Exception):
    """Stand-in for ``pyodbc.Error``: ``args`` is ``(sqlstate, message)``."""


class FakeCursor:
    """Lightweight stand-in for a DB-API 2.0 cursor.

    Supply ``results`` as a list of lists -- each inner list is a set of rows
    returned by one successive ``execute()`` call.  ``events`` (if given)
    receives ``"cursor.close"`` when the cursor is closed.
    """

    def __init__(
        self,
        results: Optional[List[List[Tuple[Any, ...]]]] = None,
        events: Optional[List[str]] = None,
    ) -> None:
        self._results = list(results or [])
        self._call_idx = -1
        self._rows: List[Tuple[Any, ...]] = []
        self.executed: List[str] = []
        self.closed = False
        self._events = events

    def execute(self, sql: str, params: Any = None) -> None:
        self.executed.append(sql)
        self._call_idx += 1
        if self._call_idx < len(self._results):
            self._rows = list(self._results[self._call_idx])
        else:
            self._rows = []

    def fetchone(self) -> Optional[Tuple[Any, ...]]:
        return self._rows[0] if self._rows else None

    def close(self) -> None:
        self.closed = True
        if self._events is not None:
            self._events.append("cursor.close")


@pytest.fixture()
def fake_cursor():
    """Return the ``FakeCursor`` *class* so tests can instantiate with custom data."""
    return FakeCursor


@pytest.fixture()
def driver_error():
    """Return the ``FakeDriverError`` *class* installed as ``pyodbc.Error``."""
    return FakeDriverError


@pytest.fixture()
def login_failed():
    """A driver error as raised for a rejected SQL login."""
    return FakeDriverError(
        "28000",
        "[28000] [Microsoft][ODBC Driver 18 for SQL Server][SQL Server]"
        "Login failed for user 'sa'. (18456) (SQLDriverConnect)",
    )


@pytest.fixture()
def mock_pyodbc():
    """Patch the driver module used by ``sqlserver_connect.connection``."""
    with patch("sqlserver_connect.connection.pyodbc") as mod:
        mod.Error = FakeDriverError
        yield mod


@pytest.fixture()
def clean_env(tmp_path, monkeypatch):
    """Empty environment, run from a directory with no ``.env`` file."""
    monkeypatch.chdir(tmp_path)
    with patch.dict(os.environ, {}, clear=True):
        yield tmp_path
