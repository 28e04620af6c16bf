"""
Query definitions accepted by the database facade. A query is either raw SQL text,
executed once as is, or a statement prepared on the connection which can take
substitutions.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from .driver import Connection, Params, Statement
from ..errors import ArgumentError


__all__ = ["Query", "RawQuery", "Prepared", "as_query"]


class Query:
    """Base type for query"""

    def execute(
        self, connection: Connection, substitutions: Optional[Params] = None
    ) -> Optional[Statement]:
        """
        Execute the query on the given connection.

        :param connection: Live connection to execute on.
        :param substitutions: Values to bind to placeholders.
        :returns: The executed statement or ``None`` if the driver reported an error.
        """
        raise NotImplementedError()


class RawQuery(Query):
    """
    SQL text which is executed once without placeholders.

    :param text: SQL text.
    """

    def __init__(self, text: str) -> None:
        self.text = text

    def execute(
        self, connection: Connection, substitutions: Optional[Params] = None
    ) -> Optional[Statement]:
        if substitutions is not None:
            raise ArgumentError(
                "Substitutions require a prepared statement",
                "Did you forget a call to Database.prepare()?",
            )
        return connection.query(self.text)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.text!r})>"


class Prepared(Query):
    """
    A statement returned by :meth:`tbdb.database.Database.prepare`.

    :param statement: Statement bound to the connection which prepared it.
    """

    def __init__(self, statement: Statement) -> None:
        self.statement = statement

    @property
    def connection(self) -> Connection:
        return self.statement.connection

    def execute(
        self, connection: Connection, substitutions: Optional[Params] = None
    ) -> Optional[Statement]:
        if connection is not self.statement.connection:
            raise ArgumentError(
                "Statement belongs to another connection",
                "Prepare the statement again after reconnecting.",
            )
        return self.statement if self.statement.execute(substitutions) else None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.statement.sql!r})>"


def as_query(query: Union[str, Query]) -> Query:
    """Wraps SQL text in a :class:`RawQuery`, other queries are returned as is."""
    if isinstance(query, str):
        return RawQuery(query)
    return query
