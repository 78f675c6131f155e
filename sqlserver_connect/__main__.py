"""CLI entry-point:  python -m sqlserver_connect [OPTIONS]

Examples:
    USERNAME=sa PASSWORD=secret python -m sqlserver_connect
    python -m sqlserver_connect --env-file prod.env --encrypt --validate-certificate -v
"""

import argparse
import json
import logging
import sys
import traceback

from ._constants import TEST_COLUMN, TEST_QUERY
from .check import run_check
from .connection import ConnectionDescriptor
from .errors import ConfigurationError, ConnectionCheckError, mask_password

logger = logging.getLogger(__name__)

_INFO_LABELS = (
    ("product_name", "Product Name"),
    ("product_version", "Product Version"),
    ("driver_name", "Driver Name"),
    ("driver_version", "Driver Version"),
    ("catalog", "Catalog"),
)


def _print_configuration(d: ConnectionDescriptor) -> None:
    print("Configuration:")
    print(f"  Host: {d.host}")
    print(f"  Port: {d.port}")
    print(f"  Database: {d.database}")
    print(f"  User: {d.user}")
    print(f"  Domain: {d.domain if d.domain else '(not set)'}")
    print()


def _print_result(result: dict) -> None:
    print("Successfully connected to SQL Server!")
    print()
    print(f"Executing test query: {TEST_QUERY}")
    print("Query executed successfully!")
    print(f"  Result: {TEST_COLUMN} = {result['test_value']}")
    print()
    print("Database Information:")
    for key, label in _INFO_LABELS:
        print(f"  {label}: {result.get(key)}")
    print()
    print("=== Connection Demo Completed Successfully ===")


def _print_failure(exc: ConnectionCheckError, password: str) -> None:
    err = sys.stderr
    print("Failed to connect to SQL Server!", file=err)
    print(file=err)
    print("Error Details:", file=err)
    print(f"  Message: {mask_password(exc.message, password)}", file=err)
    print(f"  SQL State: {exc.sqlstate}", file=err)
    print(f"  Error Code: {exc.native_code}", file=err)
    cause = exc.__cause__
    if cause is not None:
        detail = mask_password(str(cause), password)
        print(f"  Cause: {type(cause).__name__}: {detail}", file=err)
    print(file=err)
    print("Stack Trace:", file=err)
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    print(mask_password(trace, password), file=err, end="")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="sqlserver_connect",
        description=(
            "Verify connectivity to SQL Server. Connection settings come from "
            "HOST, PORT, DATABASE, USERNAME, PASSWORD and DOMAIN."
        ),
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file to load (default: ./.env)",
    )
    parser.add_argument(
        "--driver",
        default=None,
        help="ODBC driver name (overrides ODBC_DRIVER)",
    )
    parser.add_argument(
        "--encrypt",
        action="store_true",
        default=None,
        help="Require an encrypted connection (overrides ENCRYPT)",
    )
    parser.add_argument(
        "--validate-certificate",
        action="store_true",
        help="Validate the server certificate (overrides TRUST_SERVER_CERTIFICATE)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Also print the check result as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug-level logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=== SQL Server Connection Demo ===")
    print()

    try:
        descriptor = ConnectionDescriptor.from_env(
            driver=args.driver,
            encrypt=args.encrypt,
            trust_server_certificate=False if args.validate_certificate else None,
            dotenv_path=args.env_file,
        )
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    logger.debug("Resolved %r", descriptor)
    _print_configuration(descriptor)

    print("Connecting to SQL Server...")
    print(f"Connection string: {descriptor.sanitized_connection_string}")
    print()

    try:
        result = run_check(descriptor)
    except ConnectionCheckError as exc:
        _print_failure(exc, descriptor.password)
        sys.exit(1)

    _print_result(result)

    if args.json:
        print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
