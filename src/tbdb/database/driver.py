"""
This module wraps PEP 249 database modules in a small execution primitive. Driver
errors raised by data calls are recorded on the connection and reported through the
return value instead of being raised. Callers inspect :meth:`Connection.error_info`
to translate them.
"""

from __future__ import annotations

import importlib
import logging
from types import ModuleType
from typing import Any, Mapping, NamedTuple, Optional, Sequence, Union

from .options import ConnectionOptions
from ..errors import ArgumentError, DatabaseError, InvalidOptionError


__all__ = [
    "Params",
    "ErrorInfo",
    "Driver",
    "SqliteDriver",
    "MysqlDriver",
    "PgsqlDriver",
    "DRIVERS",
    "get_driver",
    "Connection",
    "Statement",
]

logger = logging.getLogger(__name__)

Params = Union[Sequence[Any], Mapping[str, Any]]

_UNSET = object()


class ErrorInfo(NamedTuple):
    """Error details of the last failed call, any of which may be unknown."""

    sqlstate: Optional[str] = None
    code: Any = None
    message: Optional[str] = None


# ==== drivers =========================================================================


class Driver:
    """Base class for DB-API drivers

    Subclasses open connections in autocommit mode so that transactions are only
    ever started explicitly through :meth:`begin`.
    """

    name = ""
    module_name = ""
    requirement = ""

    _module: Optional[ModuleType] = None

    @property
    def module(self) -> ModuleType:
        """The DB-API module, imported on first use."""
        if self._module is None:
            try:
                self._module = importlib.import_module(self.module_name)
            except ImportError as exc:
                raise InvalidOptionError(
                    f"Driver '{self.name}' is not available",
                    f"Please install {self.requirement} to use it.",
                ) from exc
        return self._module

    def connect(self, options: ConnectionOptions) -> Any:
        raise NotImplementedError()

    def begin(self, raw: Any) -> None:
        raw.cursor().execute("BEGIN")

    def commit(self, raw: Any) -> None:
        raw.commit()

    def rollback(self, raw: Any) -> None:
        raw.rollback()

    def last_insert_id(self, cursor: Any) -> Any:
        return cursor.lastrowid

    def error_info(self, exc: Exception) -> ErrorInfo:
        return ErrorInfo(message=str(exc) or None)


class SqliteDriver(Driver):
    """SQLite through the standard library. ``dbname`` is the database file, an
    empty name opens an in-memory database."""

    name = "sqlite"
    module_name = "sqlite3"
    requirement = "Python with sqlite3 support"

    def connect(self, options: ConnectionOptions) -> Any:
        return self.module.connect(options.dbname or ":memory:", isolation_level=None)

    def error_info(self, exc: Exception) -> ErrorInfo:
        return ErrorInfo(
            sqlstate=getattr(exc, "sqlite_errorname", None),
            code=getattr(exc, "sqlite_errorcode", None),
            message=str(exc) or None,
        )


class MysqlDriver(Driver):
    """MySQL and MariaDB through PyMySQL."""

    name = "mysql"
    module_name = "pymysql"
    requirement = "PyMySQL"

    def connect(self, options: ConnectionOptions) -> Any:
        return self.module.connect(
            host=options.host,
            port=options.port,
            user=options.user,
            password=options.password,
            database=options.dbname or None,
            charset=options.charset,
            autocommit=True,
        )

    def begin(self, raw: Any) -> None:
        raw.begin()

    def error_info(self, exc: Exception) -> ErrorInfo:
        if len(exc.args) >= 2 and isinstance(exc.args[0], int):
            return ErrorInfo(code=exc.args[0], message=str(exc.args[1]))
        return super().error_info(exc)


class PgsqlDriver(Driver):
    """PostgreSQL through psycopg2. Generated ids are read from the first column of
    an ``INSERT ... RETURNING`` statement."""

    name = "pgsql"
    module_name = "psycopg2"
    requirement = "psycopg2"

    def connect(self, options: ConnectionOptions) -> Any:
        raw = self.module.connect(
            host=options.host,
            port=options.port,
            dbname=options.dbname,
            user=options.user,
            password=options.password,
        )
        raw.autocommit = True
        raw.set_client_encoding(options.charset)
        return raw

    # psycopg2 ignores commit() and rollback() in autocommit mode
    def commit(self, raw: Any) -> None:
        raw.cursor().execute("COMMIT")

    def rollback(self, raw: Any) -> None:
        raw.cursor().execute("ROLLBACK")

    def last_insert_id(self, cursor: Any) -> Any:
        if cursor.description:
            row = cursor.fetchone()
            return row[0] if row else None
        return None

    def error_info(self, exc: Exception) -> ErrorInfo:
        pgcode = getattr(exc, "pgcode", None)
        pgerror = getattr(exc, "pgerror", None)
        return ErrorInfo(
            sqlstate=pgcode, code=pgcode, message=(pgerror or str(exc) or None)
        )


DRIVERS: dict[str, Driver] = {
    driver.name: driver for driver in (SqliteDriver(), MysqlDriver(), PgsqlDriver())
}


def get_driver(name: str) -> Driver:
    """
    :param name: Driver name as given in the connection options.
    :returns: The registered driver.
    :raises InvalidOptionError: if no such driver exists.
    """
    try:
        return DRIVERS[name]
    except KeyError:
        raise InvalidOptionError(
            f"Unknown driver '{name}'",
            f"Supported drivers are: {', '.join(DRIVERS)}.",
        )


# ==== connection ======================================================================


class Connection:
    """A live database session

    :param driver: Driver which opened the session.
    :param raw: The DB-API connection.
    """

    def __init__(self, driver: Driver, raw: Any) -> None:
        self.driver = driver
        self._raw = raw
        self._error: Optional[ErrorInfo] = None
        self._last_cursor: Any = None
        self._last_id: Any = _UNSET

    @classmethod
    def open(cls, options: ConnectionOptions) -> Connection:
        """
        Opens a connection with the given options.

        :param options: Connection options.
        :returns: The new connection.
        :raises InvalidOptionError: if the driver is unknown or not installed.
        :raises DatabaseError: if the driver refuses to connect.
        """
        driver = get_driver(options.driver)
        module = driver.module

        try:
            raw = driver.connect(options)
        except module.Error as exc:
            info = driver.error_info(exc)
            raise DatabaseError(
                info.message or "Could not connect", info.code, info.sqlstate
            ) from exc

        logger.debug("Connected to %s", options.dsn)
        return cls(driver, raw)

    @property
    def closed(self) -> bool:
        return self._raw is None

    def _record(self, exc: Exception) -> None:
        self._error = self.driver.error_info(exc)
        logger.debug("Driver error: %s", self._error)

    def _executed(self, cursor: Any) -> None:
        self._error = None
        self._last_cursor = cursor
        self._last_id = _UNSET

    def cursor(self) -> Any:
        if self.closed:
            raise DatabaseError("Connection is closed")
        return self._raw.cursor()

    def prepare(
        self, sql: str, driver_options: Optional[Mapping[str, Any]] = None
    ) -> Statement:
        return Statement(self, sql, driver_options)

    def query(self, sql: str) -> Optional[Statement]:
        """Executes ``sql`` once. Returns the executed statement or ``None``. The
        statement's cursor is closed once its rows have been fetched."""
        statement = Statement(self, sql, one_shot=True)

        if statement.execute():
            return statement

        statement.close()
        return None

    def exec(self, sql: str) -> bool:
        """Executes ``sql`` once, discarding any result rows."""
        statement = self.prepare(sql)

        try:
            if not statement.execute():
                return False
            # read the id before its cursor goes away
            self.last_insert_id()
            return True
        finally:
            statement.close()

    def last_insert_id(self) -> Any:
        """The id generated by the last executed statement, if the driver reports one."""
        if self._last_id is _UNSET:
            if self._last_cursor is None:
                return None
            self._last_id = self.driver.last_insert_id(self._last_cursor)
        return self._last_id

    def begin_transaction(self) -> bool:
        try:
            self.driver.begin(self._raw)
        except self.driver.module.Error as exc:
            self._record(exc)
            return False
        return True

    def commit(self) -> bool:
        try:
            self.driver.commit(self._raw)
        except self.driver.module.Error as exc:
            self._record(exc)
            return False
        return True

    def rollback(self) -> bool:
        try:
            self.driver.rollback(self._raw)
        except self.driver.module.Error as exc:
            self._record(exc)
            return False
        return True

    def error_info(self) -> ErrorInfo:
        """Error details of the last failed call or an empty :class:`ErrorInfo`."""
        return self._error or ErrorInfo()

    def close(self) -> None:
        """Closes the DB-API connection. Safe to call more than once."""
        if self._raw is not None:
            self._raw.close()
            self._raw = None
            self._last_cursor = None
            self._last_id = _UNSET


class Statement:
    """A query bound to a connection which can be executed repeatedly

    :param connection: Connection to execute on.
    :param sql: Query text in the paramstyle of the driver.
    :param driver_options: Attributes to set on the driver cursor.
    :param one_shot: Whether to close the cursor after the rows have been fetched.
    """

    def __init__(
        self,
        connection: Connection,
        sql: str,
        driver_options: Optional[Mapping[str, Any]] = None,
        one_shot: bool = False,
    ) -> None:
        self.connection = connection
        self.sql = sql
        self.one_shot = one_shot
        self._cursor = connection.cursor()

        for key, value in (driver_options or {}).items():
            if not hasattr(self._cursor, key):
                raise ArgumentError(
                    "Invalid driver option",
                    f"The {connection.driver.name} driver has no option '{key}'.",
                )
            setattr(self._cursor, key, value)

    def execute(self, params: Optional[Params] = None) -> bool:
        """
        Executes the statement.

        :param params: Values to bind to the placeholders of the statement.
        :returns: Whether execution succeeded.
        """
        try:
            if params is None:
                self._cursor.execute(self.sql)
            else:
                self._cursor.execute(self.sql, params)
        except self.connection.driver.module.Error as exc:
            self.connection._record(exc)
            return False

        self.connection._executed(self._cursor)
        return True

    def column_names(self) -> list[str]:
        return [column[0] for column in self._cursor.description or ()]

    def _fetch(self) -> list[Any]:
        try:
            return list(self._cursor.fetchall()) if self._cursor.description else []
        finally:
            if self.one_shot:
                self.close()

    def fetch_all(self) -> list[dict[str, Any]]:
        """Remaining rows as dictionaries of column name to value."""
        names = self.column_names()
        return [dict(zip(names, row)) for row in self._fetch()]

    def fetch_column(self, index: int = 0) -> list[Any]:
        """Remaining values of a single column."""
        return [row[index] for row in self._fetch()]

    def close(self) -> None:
        self._cursor.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.sql!r})>"
