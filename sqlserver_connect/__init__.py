"""sqlserver_connect -- SQL Server connectivity check."""

from .check import run_check
from .connection import (
    ConnectionDescriptor,
    SQLServerConnection,
    load_dotenv,
    qualify_username,
)
from .errors import ConfigurationError, ConnectionCheckError

__all__ = [
    "ConnectionDescriptor",
    "SQLServerConnection",
    "load_dotenv",
    "qualify_username",
    "run_check",
    "ConfigurationError",
    "ConnectionCheckError",
]
