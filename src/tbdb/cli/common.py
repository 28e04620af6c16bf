from __future__ import annotations

import functools
import json
import logging
import sys
from typing import Any, Callable, Sequence, TypeVar

import click

from .output import warn
from ..constants import DEFAULT_CONFIG_NAME


F = TypeVar("F", bound=Callable[..., Any])


def convert_db_errors(func: F) -> F:
    """
    Decorator that catches a TbdbError and prints a formatted error message to
    stdout before exiting. Calls ``sys.exit(1)`` after printing the error to stdout.
    """

    from ..errors import TbdbError

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TbdbError as exc:
            warn(str(exc))
            sys.exit(1)

    return wrapper  # type: ignore


def validate_config_name(ctx: click.Context, param: click.Parameter, value: str) -> str:
    from ..config import validate_config_name as validate

    try:
        return validate(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


config_option = click.option(
    "-c",
    "--config-name",
    default=DEFAULT_CONFIG_NAME,
    callback=validate_config_name,
    is_eager=True,
    expose_value=True,
    help="Run command with the given configuration.",
)
verbose_option = click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Print debug logs to stderr.",
)


def parse_value(value: str) -> Any:
    """Parses a command line value as JSON, falling back to the string itself."""
    try:
        return json.loads(value)
    except ValueError:
        return value


def parse_row(value: str) -> Sequence[Any]:
    """Parses a JSON array of values for a single row."""
    try:
        row = json.loads(value)
    except ValueError as exc:
        raise click.BadParameter(f"Invalid JSON: {exc}")

    if not isinstance(row, list):
        raise click.BadParameter(f"Expected a JSON array, got {value}")

    return row


def remove_handlers(config_name: str, handlers: Sequence[logging.Handler]) -> None:
    from ..constants import APP_NAME
    from ..logging import scoped_logger

    root_logger = scoped_logger(APP_NAME, config_name)

    for handler in handlers:
        root_logger.removeHandler(handler)
        handler.close()


def inject_database(f: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that adds config and verbosity options to a command and passes a
    connected :class:`tbdb.database.Database` as first argument. The connection is
    closed when the command exits.
    """

    def wrapper(*args: Any, **kwargs: Any) -> Any:
        from ..database import Database
        from ..logging import setup_logging

        ctx = click.get_current_context()

        config_name = kwargs.pop("config_name")
        verbose = kwargs.pop("verbose")

        handlers = setup_logging(
            config_name, stderr=verbose, level=logging.DEBUG if verbose else None
        )
        ctx.call_on_close(functools.partial(remove_handlers, config_name, handlers))

        db = ctx.with_resource(Database.from_config(config_name))
        return f(db, *args, **kwargs)

    f = config_option(verbose_option(f))

    return functools.update_wrapper(wrapper, f)
