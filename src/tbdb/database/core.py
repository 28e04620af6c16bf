"""
This module defines the database facade and the process-wide instance returned by
:func:`get_instance`.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Any, Iterator, Mapping, NoReturn, Optional, Sequence, Union

from .driver import Connection, Params, Statement
from .options import ConnectionOptions
from .query import Prepared, Query, as_query
from .types import DbType, convert
from ..config import TbdbConfig
from ..constants import DEFAULT_ERROR_CODE, DEFAULT_ERROR_MESSAGE
from ..errors import DatabaseError, UninitializedError
from ..logging import scoped_logger


__all__ = ["Database", "init", "get_instance", "close", "get_options"]


class Database:
    """Facade over a single database connection

    Instances are created without a connection. Call :meth:`connect` before using any
    data operation or use :func:`get_instance` to share one connected instance in the
    process.

    :param options: Connection options. Defaults are used if not given.
    :param logger: Logger to use. Defaults to the module logger.
    """

    def __init__(
        self,
        options: Optional[ConnectionOptions] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.options = options or ConnectionOptions()
        self.connection: Optional[Connection] = None
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config_name: str) -> Database:
        """
        Creates an instance with the connection options stored for a config.

        :param config_name: Name of the tbdb configuration.
        :returns: Unconnected instance.
        """
        options = ConnectionOptions.from_config(TbdbConfig(config_name))
        return cls(options, logger=scoped_logger(__name__, config_name))

    # ---- lifecycle -------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self.connection is not None

    def connect(self) -> None:
        """Opens the connection if it is not open yet."""
        if self.connection is None:
            self._logger.debug("Connecting to %s", self.options.dsn)
            self.connection = Connection.open(self.options)

    def close(self) -> None:
        """Closes the connection. Data operations fail until :meth:`connect` is
        called again."""
        if self.connection is not None:
            self.connection.close()
            self.connection = None
            self._logger.debug("Closed connection to %s", self.options.dsn)

    def __enter__(self) -> Database:
        self.connect()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _require_connection(self) -> Connection:
        if self.connection is None:
            raise UninitializedError(
                "Database not initialized",
                "Connect before running queries, for instance with get_instance().",
            )
        return self.connection

    # ---- data operations -------------------------------------------------------------

    def prepare(
        self, query: str, driver_options: Optional[Mapping[str, Any]] = None
    ) -> Prepared:
        """
        Prepares a query for execution with substitutions.

        :param query: SQL text with placeholders in the paramstyle of the driver.
        :param driver_options: Attributes to set on the driver cursor.
        :returns: Prepared statement bound to the current connection.
        """
        connection = self._require_connection()
        return Prepared(connection.prepare(query, driver_options))

    def get_results(
        self, query: Union[str, Query], substitutions: Optional[Params] = None
    ) -> list[dict[str, Any]]:
        """
        Returns all result rows of a query.

        :param query: SQL text or a statement returned by :meth:`prepare`.
        :param substitutions: Values for the placeholders of a prepared statement.
        :returns: Rows as dictionaries of column name to value.
        :raises ArgumentError: if substitutions are given for SQL text.
        :raises DatabaseError: if the database reports an error.
        """
        return self._execute(query, substitutions).fetch_all()

    def get_var(
        self,
        query: Union[str, Query],
        substitutions: Optional[Params] = None,
        db_type: DbType = DbType.STRING,
    ) -> Any:
        """
        Returns the first column of the first result row, converted to ``db_type``.

        :param query: SQL text or a statement returned by :meth:`prepare`.
        :param substitutions: Values for the placeholders of a prepared statement.
        :param db_type: Type to convert the value to.
        :returns: Converted value or ``None`` if there are no rows.
        :raises ArgumentError: if substitutions are given for SQL text.
        :raises DatabaseError: if the database reports an error.
        :raises InvalidConversionError: if the value cannot be converted.
        """
        values = self._execute(query, substitutions).fetch_column()

        if len(values) == 0:
            return None

        return convert(values[0], db_type)

    def insert(
        self,
        query: str,
        substitutions: Optional[Union[Params, Sequence[Params]]] = None,
        multiple: bool = False,
    ) -> list[Any]:
        """
        Inserts rows and returns their generated ids.

        :param query: SQL text, with placeholders if substitutions are given.
        :param substitutions: Values for the placeholders. If ``multiple`` is
            ``True``, a sequence of such values, one for each row.
        :param multiple: Whether to insert one row per entry of ``substitutions``.
            All rows are inserted in a single transaction which is rolled back if
            any row fails.
        :returns: Generated ids in insertion order.
        :raises DatabaseError: if the database reports an error.
        """
        connection = self._require_connection()

        if multiple and substitutions is not None:
            statement = connection.prepare(query)
            insert_ids = []

            try:
                with self._transaction(connection):
                    for substitution in substitutions:
                        if not statement.execute(substitution):
                            self._handle_query_error()

                        insert_ids.append(connection.last_insert_id())
            finally:
                statement.close()

            self._logger.debug("Inserted %s rows", len(insert_ids))
            return insert_ids

        if substitutions is not None:
            statement = connection.prepare(query)

            try:
                if not statement.execute(substitutions):
                    self._handle_query_error()

                return [connection.last_insert_id()]
            finally:
                statement.close()

        if not connection.exec(query):
            self._handle_query_error()

        return [connection.last_insert_id()]

    # ---- helpers ---------------------------------------------------------------------

    def _execute(
        self, query: Union[str, Query], substitutions: Optional[Params]
    ) -> Statement:
        connection = self._require_connection()
        typed_query = as_query(query)

        self._logger.debug("Executing %r", typed_query)
        statement = typed_query.execute(connection, substitutions)

        if statement is None:
            self._handle_query_error()

        return statement

    @contextlib.contextmanager
    def _transaction(self, connection: Connection) -> Iterator[None]:
        if not connection.begin_transaction():
            self._handle_query_error()

        try:
            yield
            if not connection.commit():
                self._handle_query_error()
        except BaseException:
            if not connection.rollback():
                self._logger.warning("Rollback failed: %s", connection.error_info())
            else:
                self._logger.warning("Rolled back transaction")
            raise

    def _handle_query_error(self) -> NoReturn:
        info = self._require_connection().error_info()

        message = info.message or DEFAULT_ERROR_MESSAGE
        code = info.code if info.code is not None else DEFAULT_ERROR_CODE

        raise DatabaseError(message, code, info.sqlstate)

    def __repr__(self) -> str:
        state = "connected" if self.connected else "closed"
        return f"<{self.__class__.__name__}({self.options.dsn}, {state})>"


# ==== process-wide instance ===========================================================

_options = ConnectionOptions()
_instance: Optional[Database] = None
_instance_lock = threading.Lock()


def init(options: Mapping[str, Any]) -> None:
    """
    Configures the process-wide instance. Options are validated before any of them
    is applied. Changes do not affect an instance which is already connected.

    :param options: Mapping of option names to values. Accepted options are driver,
        host, port, dbname, charset, user and password.
    :raises InvalidOptionError: if an option is unknown or has the wrong type.
    """
    global _options

    with _instance_lock:
        _options = _options.updated(options)


def get_options() -> ConnectionOptions:
    """Returns the options used for the next instance created by get_instance()."""
    return _options


def get_instance() -> Database:
    """
    Returns the process-wide instance, connecting it on first use.

    :returns: Connected database facade.
    :raises DatabaseError: if the connection cannot be established.
    """
    global _instance

    with _instance_lock:
        if _instance is None:
            db = Database(_options)
            db.connect()
            _instance = db

        return _instance


def close() -> None:
    """Closes and forgets the process-wide instance."""
    global _instance

    with _instance_lock:
        if _instance is not None:
            _instance.close()
            _instance = None
