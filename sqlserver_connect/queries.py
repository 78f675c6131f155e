"""SQL and driver-metadata helpers for the connectivity check.

Everything here takes a DB-API cursor or a ``pyodbc.Connection`` so it can be
tested with fakes, independently of connection handling.
"""

from __future__ import annotations

from typing import Any, Dict

import pyodbc

from ._constants import TEST_QUERY

# (result key, pyodbc getinfo code)
SERVER_INFO_FIELDS = (
    ("product_name", pyodbc.SQL_DBMS_NAME),
    ("product_version", pyodbc.SQL_DBMS_VER),
    ("driver_name", pyodbc.SQL_DRIVER_NAME),
    ("driver_version", pyodbc.SQL_DRIVER_VER),
    ("catalog", pyodbc.SQL_DATABASE_NAME),
)


def select_test_value(cursor: Any) -> Any:
    """Run the fixed test query and return its single scalar (``None`` if no row)."""
    cursor.execute(TEST_QUERY)
    row = cursor.fetchone()
    return row[0] if row else None


def server_info(conn: Any) -> Dict[str, Any]:
    """Return product and driver metadata reported by the ODBC driver."""
    return {key: conn.getinfo(code) for key, code in SERVER_INFO_FIELDS}
