"""Exception types raised by sqlserver_connect."""

from __future__ import annotations

import re
from typing import Optional

from ._constants import ALT_PASSWORD_MASK, PASSWORD_MASK

_NATIVE_CODE_RE = re.compile(r"\((\d+)\)")


def mask_password(text: str, password: Optional[str]) -> str:
    """Replace every occurrence of *password* in *text* with the mask.

    The result never contains *password*, including when the password is part
    of the mask itself or reappears where a mask meets the surrounding text.
    """
    if not password:
        return text
    mask = PASSWORD_MASK if password not in PASSWORD_MASK else ALT_PASSWORD_MASK
    while password in text:
        text = text.replace(password, mask)
    return text


class ConfigurationError(ValueError):
    """A required setting is missing or a setting has an invalid value."""


class ConnectionCheckError(RuntimeError):
    """The driver failed while connecting or running the test query.

    Attributes:
        message:     Driver message, with the password masked.
        sqlstate:    Five-character ODBC SQLSTATE, if the driver reported one.
        native_code: Vendor error number (e.g. ``18456`` for a failed login).
    """

    def __init__(
        self,
        message: str,
        sqlstate: Optional[str] = None,
        native_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.sqlstate = sqlstate
        self.native_code = native_code

    @classmethod
    def from_driver_error(
        cls, exc: BaseException, password: Optional[str] = None
    ) -> "ConnectionCheckError":
        """Build from a ``pyodbc.Error``, whose args are ``(sqlstate, message)``."""
        args = getattr(exc, "args", ())
        if len(args) >= 2 and isinstance(args[0], str) and isinstance(args[1], str):
            sqlstate: Optional[str] = args[0]
            message = args[1]
        else:
            sqlstate = None
            message = str(exc)

        m = _NATIVE_CODE_RE.search(message)
        native_code = int(m.group(1)) if m else None

        message = mask_password(message, password)
        return cls(message, sqlstate=sqlstate, native_code=native_code)

    def __str__(self) -> str:
        return self.message
