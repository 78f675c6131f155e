"""SQL Server connection helpers.

Provides :class:`ConnectionDescriptor`, which resolves and validates the
connection settings and renders the ODBC connection string, and
:class:`SQLServerConnection`, a context manager around one ``pyodbc``
connection.

Configuration is resolved in order: explicit arguments > environment variables >
built-in defaults.  An empty environment variable counts as unset.  A ``.env``
file is loaded first (if present) via :func:`load_dotenv`.

Env vars:
    HOST                      -- Server hostname (default: localhost)
    PORT                      -- Server port (default: 1433)
    DATABASE                  -- Target database (default: master)
    USERNAME                  -- Login name (**required**)
    PASSWORD                  -- Login password (**required**)
    DOMAIN                    -- Optional AD domain; qualifies USERNAME as DOMAIN\\USERNAME
    ODBC_DRIVER               -- ODBC driver name (default: ODBC Driver 18 for SQL Server)
    ENCRYPT                   -- yes/no (default: no)
    TRUST_SERVER_CERTIFICATE  -- yes/no (default: yes)
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from types import TracebackType
from typing import Iterator, List, Optional, Tuple, Type

import pyodbc

from ._constants import (
    DEFAULT_DATABASE,
    DEFAULT_DRIVER,
    DEFAULT_ENCRYPT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TRUST_SERVER_CERTIFICATE,
    DOMAIN_SEPARATOR,
    ENV_DATABASE,
    ENV_DOMAIN,
    ENV_DRIVER,
    ENV_ENCRYPT,
    ENV_HOST,
    ENV_PASSWORD,
    ENV_PORT,
    ENV_TRUST_SERVER_CERTIFICATE,
    ENV_USER,
    FALSE_VALUES,
    PASSWORD_MASK,
    TRUE_VALUES,
)
from .errors import ConfigurationError, ConnectionCheckError, mask_password

logger = logging.getLogger(__name__)

__all__ = [
    "ConnectionDescriptor",
    "SQLServerConnection",
    "driver_errors",
    "load_dotenv",
    "mask_password",
    "qualify_username",
]

_ODBC_SPECIAL = frozenset(";{}=")

_dotenv_loaded: set = set()


def load_dotenv(path: Optional[str] = None) -> None:
    """Read a simple key=value .env file into ``os.environ`` (no dependencies).

    Defaults to ``.env`` in the current directory.  Variables already present
    in the environment win.  Subsequent calls with the same resolved *path*
    are no-ops.
    """
    if path is None:
        path = os.path.join(os.getcwd(), ".env")
    resolved = os.path.abspath(path)
    if resolved in _dotenv_loaded:
        return
    if not os.path.isfile(resolved):
        return
    with open(resolved) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                os.environ.setdefault(k.strip(), v.strip().strip("'\""))
    _dotenv_loaded.add(resolved)
    logger.debug("Loaded environment from %s", resolved)


def qualify_username(user: str, domain: Optional[str]) -> str:
    """Return *user* prefixed with ``domain\\`` for domain authentication.

    The name is returned unchanged when *domain* is empty or when *user*
    is already qualified (UPN ``user@realm`` or ``DOMAIN\\user``).
    """
    if not domain:
        return user
    if "@" in user or DOMAIN_SEPARATOR in user:
        return user
    return f"{domain}{DOMAIN_SEPARATOR}{user}"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name) or default


def _parse_flag(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{name} must be one of {sorted(TRUE_VALUES | FALSE_VALUES)}, got {raw!r}"
    )


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if not raw:
        return default
    return _parse_flag(name, raw)


def _odbc_value(value: str) -> str:
    """Brace-quote *value* if it would otherwise break the ODBC key/value syntax."""
    if value != value.strip() or any(c in _ODBC_SPECIAL for c in value):
        return "{" + value.replace("}", "}}") + "}"
    return value


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


class ConnectionDescriptor:
    """Resolved settings for one SQL Server connection.

    Raises :class:`~sqlserver_connect.errors.ConfigurationError` when *user*
    or *password* is missing or empty.  Host, port and database fall back to
    ``localhost``, ``1433`` and ``master``.

    When *domain* is set, :attr:`effective_user` is the domain-qualified name
    used for Windows / Active Directory style logins.
    """

    def __init__(
        self,
        user: Optional[str],
        password: Optional[str],
        host: Optional[str] = None,
        port: Optional[str] = None,
        database: Optional[str] = None,
        domain: Optional[str] = None,
        *,
        driver: Optional[str] = None,
        encrypt: bool = DEFAULT_ENCRYPT,
        trust_server_certificate: bool = DEFAULT_TRUST_SERVER_CERTIFICATE,
    ) -> None:
        if not user:
            raise ConfigurationError(f"{ENV_USER} environment variable is required")
        if not password:
            raise ConfigurationError(f"{ENV_PASSWORD} environment variable is required")

        self.host = host or DEFAULT_HOST
        self.port = str(port or DEFAULT_PORT)
        self.database = database or DEFAULT_DATABASE
        self.user = user
        self.domain = domain or None
        self.driver = driver or DEFAULT_DRIVER
        self.encrypt = encrypt
        self.trust_server_certificate = trust_server_certificate
        self._password = password

    # -- factory ------------------------------------------------------------

    @classmethod
    def from_env(
        cls,
        *,
        host: Optional[str] = None,
        port: Optional[str] = None,
        database: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        domain: Optional[str] = None,
        driver: Optional[str] = None,
        encrypt: Optional[bool] = None,
        trust_server_certificate: Optional[bool] = None,
        dotenv_path: Optional[str] = None,
    ) -> "ConnectionDescriptor":
        """Build a descriptor from explicit values, then env vars, then defaults."""
        load_dotenv(dotenv_path)

        if encrypt is None:
            encrypt = _env_flag(ENV_ENCRYPT, DEFAULT_ENCRYPT)
        if trust_server_certificate is None:
            trust_server_certificate = _env_flag(
                ENV_TRUST_SERVER_CERTIFICATE, DEFAULT_TRUST_SERVER_CERTIFICATE
            )

        return cls(
            user=user or _env(ENV_USER),
            password=password or _env(ENV_PASSWORD),
            host=host or _env(ENV_HOST, DEFAULT_HOST),
            port=port or _env(ENV_PORT, DEFAULT_PORT),
            database=database or _env(ENV_DATABASE, DEFAULT_DATABASE),
            domain=domain or _env(ENV_DOMAIN),
            driver=driver or _env(ENV_DRIVER, DEFAULT_DRIVER),
            encrypt=encrypt,
            trust_server_certificate=trust_server_certificate,
        )

    # -- derived values -----------------------------------------------------

    @property
    def password(self) -> str:
        return self._password

    @property
    def effective_user(self) -> str:
        return qualify_username(self.user, self.domain)

    @property
    def address(self) -> str:
        """``host,port`` as the SQL Server ODBC driver expects it."""
        return f"{self.host},{self.port}"

    @property
    def is_insecure(self) -> bool:
        return not self.encrypt or self.trust_server_certificate

    def _parts(self, password: str) -> List[Tuple[str, str]]:
        parts = [
            ("Driver", "{" + self.driver.replace("}", "}}") + "}"),
            ("Server", _odbc_value(self.address)),
            ("Database", _odbc_value(self.database)),
            ("Encrypt", _yes_no(self.encrypt)),
            ("TrustServerCertificate", _yes_no(self.trust_server_certificate)),
        ]
        if self.domain:
            parts.append(("Trusted_Connection", "no"))
        parts.append(("Uid", _odbc_value(self.effective_user)))
        parts.append(("Pwd", password))
        return parts

    @property
    def connection_string(self) -> str:
        """The ODBC connection string, password included."""
        parts = self._parts(_odbc_value(self._password))
        return "".join(f"{k}={v};" for k, v in parts)

    @property
    def sanitized_connection_string(self) -> str:
        """The connection string with the password masked wherever it appears."""
        parts = self._parts(PASSWORD_MASK)
        rendered = "".join(f"{k}={v};" for k, v in parts)
        return mask_password(rendered, self._password)

    def __repr__(self) -> str:
        return (
            f"ConnectionDescriptor(host={self.host!r}, port={self.port!r}, "
            f"database={self.database!r}, user={self.effective_user!r})"
        )


@contextmanager
def driver_errors(password: Optional[str] = None) -> Iterator[None]:
    """Re-raise any ``pyodbc.Error`` in the block as :class:`ConnectionCheckError`."""
    try:
        yield
    except pyodbc.Error as exc:
        raise ConnectionCheckError.from_driver_error(exc, password) from exc


class SQLServerConnection:
    """Managed connection to a SQL Server database.

    Usage as a context manager::

        descriptor = ConnectionDescriptor.from_env()
        with SQLServerConnection(descriptor) as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1")

    The connection is closed when the block exits, whether normally or by an
    exception.  ``pyodbc.Connection.__exit__`` only commits; it never closes.
    """

    def __init__(self, descriptor: ConnectionDescriptor) -> None:
        self.descriptor = descriptor
        self._conn: Optional[pyodbc.Connection] = None

    def connect(self) -> pyodbc.Connection:
        """Open and return a ``pyodbc.Connection``.

        Subsequent calls return the same connection unless :meth:`close` has
        been called.
        """
        if self._conn is not None:
            return self._conn
        d = self.descriptor
        logger.debug("Connecting to %s/%s as %s", d.address, d.database, d.effective_user)
        if d.is_insecure:
            logger.warning(
                "Connecting with Encrypt=%s, TrustServerCertificate=%s; "
                "not suitable for production",
                _yes_no(d.encrypt), _yes_no(d.trust_server_certificate),
            )
        self._conn = pyodbc.connect(d.connection_string)
        return self._conn

    def close(self) -> None:
        """Close the underlying connection if open."""
        if self._conn is not None:
            logger.debug("Closing connection to %s", self.descriptor.address)
            self._conn.close()
            self._conn = None

    def test_connectivity(self) -> bool:
        """Run ``SELECT 1`` and return ``True`` on success, ``False`` on driver failure."""
        try:
            conn = self.connect()
            cur = conn.cursor()
            try:
                cur.execute("SELECT 1")
                cur.fetchone()
            finally:
                cur.close()
            return True
        except pyodbc.Error as exc:
            logger.debug(
                "Connectivity check failed: %s",
                mask_password(str(exc), self.descriptor.password),
            )
            return False

    def __enter__(self) -> pyodbc.Connection:
        return self.connect()

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SQLServerConnection({self.descriptor!r})"
