#!/usr/bin/env python3
"""Example: connect with domain-qualified credentials and print server info.

Usage:
    # Set credentials in .env or as environment variables, then:
    DOMAIN=CORP USERNAME=alice PASSWORD=... python examples/connect.py

Needs the Microsoft ODBC Driver for SQL Server (``msodbcsql18``) and
``pip install pyodbc``.
"""

import logging
import sys

from sqlserver_connect import (
    ConfigurationError,
    ConnectionCheckError,
    ConnectionDescriptor,
    run_check,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

try:
    descriptor = ConnectionDescriptor.from_env(encrypt=True, trust_server_certificate=False)
except ConfigurationError as exc:
    print(f"ERROR: {exc}")
    sys.exit(1)

print(f"Connecting: {descriptor.sanitized_connection_string}")

try:
    result = run_check(descriptor)
except ConnectionCheckError as exc:
    print(f"FAILED to connect to {descriptor.address} as {descriptor.effective_user}.")
    print(f"  SQL state  : {exc.sqlstate}")
    print(f"  Error code : {exc.native_code}")
    print(f"  Detail     : {exc.message}")
    sys.exit(1)

for key, value in result.items():
    print(f"{key:>18}: {value}")
