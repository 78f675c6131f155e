"""Connectivity check: connect, run the test query, collect server metadata."""

from __future__ import annotations

import logging
import time
from contextlib import closing
from typing import Any, Dict

from . import queries
from .connection import ConnectionDescriptor, SQLServerConnection, driver_errors

logger = logging.getLogger(__name__)


def run_check(descriptor: ConnectionDescriptor) -> Dict[str, Any]:
    """Open one connection described by *descriptor* and verify it.

    Returns a dict with ``test_value`` (the scalar from ``SELECT 1``), the
    :func:`~sqlserver_connect.queries.server_info` fields, the target
    ``server``/``database``/``user`` and ``duration_seconds``.

    The cursor and the connection are closed on every exit path, cursor
    first.  Driver failures are raised as
    :class:`~sqlserver_connect.errors.ConnectionCheckError`.
    """
    t0 = time.monotonic()
    with driver_errors(descriptor.password):
        with SQLServerConnection(descriptor) as conn:
            logger.debug("Connected to %s", descriptor.address)
            with closing(conn.cursor()) as cur:
                value = queries.select_test_value(cur)
            info = queries.server_info(conn)

    result: Dict[str, Any] = {
        "server": descriptor.address,
        "database": descriptor.database,
        "user": descriptor.effective_user,
        "test_value": value,
    }
    result.update(info)
    result["duration_seconds"] = round(time.monotonic() - t0, 3)
    logger.debug(
        "Check of %s finished in %.3fs", descriptor.address, result["duration_seconds"],
    )
    return result
