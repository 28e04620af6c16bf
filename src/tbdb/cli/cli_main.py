from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

# external imports
import click

from .. import __version__
from .common import (
    config_option,
    convert_db_errors,
    inject_database,
    parse_row,
    parse_value,
)
from .output import echo, format_value, ok, print_rows

if TYPE_CHECKING:
    from ..database import Database


DB_TYPE_NAMES = ["STRING", "NUMBER", "FLOAT", "SERIALIZED", "JSON", "BOOL"]

param_option = click.option(
    "-p",
    "--param",
    "params",
    multiple=True,
    help="Value for the next placeholder. Parsed as JSON where possible.",
)


def _substitutions(params: Sequence[str]) -> list[Any] | None:
    return [parse_value(p) for p in params] if params else None


@click.group(help="Query relational databases from the command line.")
@click.version_option(version=__version__, message="%(version)s")
def main() -> None:
    pass


@main.command(help="Run a query and print all result rows.")
@click.argument("sql")
@param_option
@convert_db_errors
@inject_database
def query(db: Database, sql: str, params: Sequence[str]) -> None:
    substitutions = _substitutions(params)

    if substitutions is None:
        rows = db.get_results(sql)
    else:
        rows = db.get_results(db.prepare(sql), substitutions)

    print_rows(rows)


@main.command(help="Run a query and print the first value of the first row.")
@click.argument("sql")
@param_option
@click.option(
    "-t",
    "--type",
    "type_name",
    type=click.Choice(DB_TYPE_NAMES, case_sensitive=False),
    default="STRING",
    show_default=True,
    help="Type to convert the value to.",
)
@convert_db_errors
@inject_database
def var(db: Database, sql: str, params: Sequence[str], type_name: str) -> None:
    from ..database import DbType

    substitutions = _substitutions(params)
    db_type = DbType[type_name.upper()]

    if substitutions is None:
        value = db.get_var(sql, db_type=db_type)
    else:
        value = db.get_var(db.prepare(sql), substitutions, db_type)

    echo(format_value(value))


@main.command(
    help="""
Insert rows and print the generated ids.

Use --param for the placeholders of a single row or give one JSON array per row with
--row to insert several rows in a single transaction.
""",
)
@click.argument("sql")
@param_option
@click.option(
    "-r",
    "--row",
    "rows",
    multiple=True,
    help="JSON array with the values of one row.",
)
@convert_db_errors
@inject_database
def insert(db: Database, sql: str, params: Sequence[str], rows: Sequence[str]) -> None:
    if params and rows:
        raise click.UsageError("Use either --param or --row, not both.")

    if rows:
        ids = db.insert(sql, [parse_row(r) for r in rows], multiple=True)
    else:
        ids = db.insert(sql, _substitutions(params))

    for insert_id in ids:
        echo(format_value(insert_id))

    ok(f"Inserted {len(ids)} row(s).")


@main.group(help="View and change connection settings.")
def config() -> None:
    pass


@config.command(name="show", help="Print the connection settings.")
@config_option
@convert_db_errors
def config_show(config_name: str) -> None:
    from ..config import TbdbConfig
    from ..database.options import ConnectionOptions

    options = ConnectionOptions.from_config(TbdbConfig(config_name))

    for key, value in options.as_dict().items():
        if key == "password" and value:
            value = "********"
        echo(f"{key} = {value}")


@config.command(name="set", help="Change a connection setting.")
@click.argument("key")
@click.argument("value")
@config_option
def config_set(key: str, value: str, config_name: str) -> None:
    from ..config import TbdbConfig
    from ..database.options import OPTION_TYPES

    if key not in OPTION_TYPES:
        raise click.BadParameter(
            f"Must be one of {', '.join(OPTION_TYPES)}.", param_hint="key"
        )

    new_value: Any = value

    if OPTION_TYPES[key] is int:
        try:
            new_value = int(value)
        except ValueError:
            raise click.BadParameter(f"'{value}' is not a number.", param_hint="value")

    TbdbConfig(config_name).set("database", key, new_value)
    ok(f"Set {key}.")


@config.command(name="path", help="Print the path of the config file.")
@config_option
def config_path(config_name: str) -> None:
    from ..config import TbdbConfig

    echo(TbdbConfig(config_name).config_path)
