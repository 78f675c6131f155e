#!/usr/bin/env python3
"""Verify connectivity to SQL Server using the HOST/PORT/DATABASE/USERNAME/
PASSWORD/DOMAIN environment variables (or a .env file).

Usage:
    python scripts/connect.py
"""

from sqlserver_connect import ConfigurationError, ConnectionDescriptor, SQLServerConnection

try:
    d = ConnectionDescriptor.from_env()
except ConfigurationError as exc:
    print(f"ERROR: {exc}")
    raise SystemExit(1)

if SQLServerConnection(d).test_connectivity():
    print(f"Connected to {d.address} as {d.effective_user}.")
else:
    print(f"FAILED to connect to {d.address} as {d.effective_user}.")
    raise SystemExit(1)
