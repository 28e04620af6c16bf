# -*- coding: utf-8 -*-
"""
This module defines tbdb's error classes. It should be kept free of memory heavy
imports.

All errors inherit from :class:`TbdbError` which has title and message attributes
to display the error to the user. The four direct subclasses split errors by who is
at fault: the configuration, the caller, the data or the database itself.
"""

from typing import Any, Optional


class TbdbError(Exception):
    """Base class for tbdb errors

    :param title: A short description of the error type. This can be used in a CLI to
        give a short error summary.
    :param message: A more verbose description which can include instructions on how to
        proceed to fix the error.
    """

    def __init__(self, title: str, message: str = "") -> None:
        super().__init__(title, message)
        self.title = title
        self.message = message

    def __str__(self) -> str:
        return ". ".join(part for part in (self.title, self.message) if part)


# ==== configuration ===================================================================


class ConfigurationError(TbdbError):
    """Base class for invalid connection settings."""


class InvalidOptionError(ConfigurationError):
    """Raised when an unknown option or an option value of the wrong type is passed
    to :func:`tbdb.database.init`, or when the configured driver cannot be used."""


# ==== usage ===========================================================================


class UsageError(TbdbError):
    """Base class for errors caused by calling the API incorrectly."""


class ArgumentError(UsageError):
    """Raised when an operation receives arguments it cannot use, for instance
    substitutions for a query which was not prepared."""


class UninitializedError(UsageError):
    """Raised when a data operation is called without a live connection."""


# ==== conversion ======================================================================


class ConversionError(TbdbError):
    """Base class for errors converting query results."""


class InvalidConversionError(ConversionError):
    """Raised when a query result cannot be converted to the requested type.

    :param kind: The requested :class:`tbdb.database.types.DbType`.
    :param message: Description of the value which failed to convert.
    """

    def __init__(self, kind: Any, message: str = "") -> None:
        super().__init__("Cannot convert value", message)
        self.kind = kind


# ==== storage =========================================================================


class StorageError(TbdbError):
    """Base class for failures reported by the database driver."""


class DatabaseError(StorageError):
    """Raised when the database driver reports that a statement failed.

    :param message: Message reported by the driver.
    :param code: Driver specific error code, -1 if unknown.
    :param sqlstate: SQLSTATE reported by the driver, if any.
    """

    def __init__(
        self, message: str, code: Any = -1, sqlstate: Optional[str] = None
    ) -> None:
        super().__init__("Database error", message)
        self.code = code
        self.sqlstate = sqlstate
