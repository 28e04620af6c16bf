"""
This module provides functions for formatted output to stdout, including tables of
query results.
"""

from __future__ import annotations

import enum
import json
from typing import Any, Iterable

import click
from rich.console import Console
from rich.table import Table


# ==== printing structured data to console =============================================


def rich_table(*headers: str) -> Table:
    return Table(*headers, padding=(0, 2, 0, 0), box=None, show_header=len(headers) > 0)


def format_value(value: Any) -> str:
    """Formats a query result for display. NULL values are shown as "NULL"."""
    if value is None:
        return "NULL"
    elif isinstance(value, str):
        return value
    elif isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    else:
        return json.dumps(value, default=repr)


def print_rows(rows: Iterable[dict[str, Any]]) -> None:
    """
    Prints query results as a table.

    :param rows: Rows as returned by :meth:`tbdb.database.Database.get_results`.
    """
    rows = list(rows)

    if len(rows) == 0:
        echo("No rows.")
        return

    table = rich_table(*rows[0].keys())

    for row in rows:
        table.add_row(*(format_value(value) for value in row.values()))

    Console().print(table)


# ==== printing messages to console ====================================================


class Prefix(enum.Enum):
    """Prefix for command line output"""

    Info = 0
    Ok = 1
    Warn = 2
    NONE = 3


def echo(message: str, nl: bool = True, prefix: Prefix = Prefix.NONE) -> None:
    """
    Print a message to stdout.

    :param message: The string to output.
    :param nl: Whether to end with a new line.
    :param prefix: Any prefix to output before the message,
    """
    if prefix is Prefix.Ok:
        pre = click.style("✓", fg="green") + " "
    elif prefix is Prefix.Warn:
        pre = click.style("!", fg="red") + " "
    elif prefix is Prefix.Info:
        pre = "- "
    else:
        pre = ""

    click.echo(f"{pre}{message}", nl=nl)


def warn(message: str, nl: bool = True) -> None:
    """
    Print a warning to stdout. Will be prefixed with an exclamation mark.

    :param message: The string to output.
    :param nl: Whether to end with a new line.
    """
    echo(message, nl=nl, prefix=Prefix.Warn)


def ok(message: str, nl: bool = True) -> None:
    """
    Print a confirmation to stdout. Will be prefixed with a checkmark.

    :param message: The string to output.
    :param nl: Whether to end with a new line.
    """
    echo(message, nl=nl, prefix=Prefix.Ok)
