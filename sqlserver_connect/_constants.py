"""Shared constants for the sqlserver_connect package."""

ENV_HOST = "HOST"
ENV_PORT = "PORT"
ENV_DATABASE = "DATABASE"
ENV_USER = "USERNAME"
ENV_PASSWORD = "PASSWORD"
ENV_DOMAIN = "DOMAIN"
ENV_DRIVER = "ODBC_DRIVER"
ENV_ENCRYPT = "ENCRYPT"
ENV_TRUST_SERVER_CERTIFICATE = "TRUST_SERVER_CERTIFICATE"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = "1433"
DEFAULT_DATABASE = "master"
DEFAULT_DRIVER = "ODBC Driver 18 for SQL Server"

# Demo transport defaults: no TLS, server certificate trusted blindly.
DEFAULT_ENCRYPT = False
DEFAULT_TRUST_SERVER_CERTIFICATE = True

PASSWORD_MASK = "***"
# Used when the password is made of mask characters.
ALT_PASSWORD_MASK = "(hidden)"
DOMAIN_SEPARATOR = "\\"

TEST_QUERY = "SELECT 1 AS TestValue"
TEST_COLUMN = "TestValue"

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off"})
