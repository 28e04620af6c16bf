import logging
import sqlite3

import pytest
from click.testing import CliRunner

from tbdb import __version__
from tbdb.cli import main
from tbdb.config import TbdbConfig
from tbdb.logging import scoped_logger
from tbdb.utils.appdirs import get_log_path


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def sqlite_config(config_name, db_path):
    conf = TbdbConfig(config_name)
    conf.set("database", "driver", "sqlite")
    conf.set("database", "dbname", db_path)
    return config_name


def test_help(runner) -> None:
    """Test help output with --help arg."""

    result = runner.invoke(main, ["--help"])

    assert result.exit_code == 0, result.output
    assert result.output.startswith("Usage: main [OPTIONS] COMMAND [ARGS]")

    for command in ("query", "var", "insert", "config"):
        assert command in result.output


def test_version(runner):
    result = runner.invoke(main, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_query(runner, sqlite_config):
    result = runner.invoke(
        main, ["query", "SELECT key, value FROM settings", "-c", sqlite_config]
    )

    assert result.exit_code == 0, result.output
    assert "flag_on" in result.output
    assert "hello" in result.output


def test_query_with_params(runner, sqlite_config):
    result = runner.invoke(
        main,
        [
            "query",
            "SELECT value FROM settings WHERE key = ?",
            "-p",
            "title",
            "-c",
            sqlite_config,
        ],
    )

    assert result.exit_code == 0, result.output
    assert "hello" in result.output
    assert "flag_on" not in result.output


def test_query_no_rows(runner, sqlite_config):
    result = runner.invoke(main, ["query", "SELECT * FROM items", "-c", sqlite_config])

    assert result.exit_code == 0, result.output
    assert "No rows." in result.output


def test_query_logs_to_file(runner, sqlite_config):
    TbdbConfig(sqlite_config).set("app", "log_level", logging.DEBUG)

    result = runner.invoke(main, ["query", "SELECT 1", "-c", sqlite_config])
    assert result.exit_code == 0, result.output
    assert "Executing" not in result.output

    with open(get_log_path("tbdb", f"{sqlite_config}.log")) as f:
        log = f.read()

    assert "Executing <RawQuery" in log

    # handlers are removed when the command exits
    assert scoped_logger("tbdb", sqlite_config).handlers == []


def test_query_verbose(runner, sqlite_config):
    assert TbdbConfig(sqlite_config).get("app", "log_level") == logging.INFO

    result = runner.invoke(main, ["query", "SELECT 1", "-v", "-c", sqlite_config])

    assert result.exit_code == 0, result.output
    assert "Executing <RawQuery" in result.output


def test_query_error(runner, sqlite_config):
    result = runner.invoke(main, ["query", "SELECT * FROM nope", "-c", sqlite_config])

    assert result.exit_code == 1
    assert "Database error" in result.output
    assert "no such table" in result.output


def test_var(runner, sqlite_config):
    result = runner.invoke(
        main,
        [
            "var",
            "SELECT value FROM settings WHERE key = ?",
            "-p",
            "payload",
            "-t",
            "json",
            "-c",
            sqlite_config,
        ],
    )

    assert result.exit_code == 0, result.output
    assert result.output.strip() == '{"a": 1}'


def test_var_conversion_error(runner, sqlite_config):
    result = runner.invoke(
        main,
        [
            "var",
            "SELECT value FROM settings WHERE key = 'flag_unsure'",
            "-t",
            "BOOL",
            "-c",
            sqlite_config,
        ],
    )

    assert result.exit_code == 1
    assert "Cannot convert value" in result.output


def test_var_null(runner, sqlite_config):
    result = runner.invoke(
        main, ["var", "SELECT value FROM items", "-c", sqlite_config]
    )

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "NULL"


def test_insert_rows(runner, sqlite_config, db_path):
    result = runner.invoke(
        main,
        [
            "insert",
            "INSERT INTO items (value) VALUES (?)",
            "-r",
            "[5]",
            "-r",
            "[6]",
            "-c",
            sqlite_config,
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Inserted 2 row(s)." in result.output

    with sqlite3.connect(db_path) as conn:
        values = [r[0] for r in conn.execute("SELECT value FROM items ORDER BY id")]

    assert values == [5, 6]


def test_insert_rows_rollback(runner, sqlite_config, db_path):
    result = runner.invoke(
        main,
        [
            "insert",
            "INSERT INTO items (value) VALUES (?)",
            "-r",
            "[1]",
            "-r",
            "[2]",
            "-c",
            sqlite_config,
        ],
    )

    assert result.exit_code == 1

    with sqlite3.connect(db_path) as conn:
        assert conn.execute("SELECT COUNT(*) FROM items").fetchone()[0] == 0


def test_insert_param_and_row(runner, sqlite_config):
    result = runner.invoke(
        main,
        [
            "insert",
            "INSERT INTO items (value) VALUES (?)",
            "-p",
            "1",
            "-r",
            "[1]",
            "-c",
            sqlite_config,
        ],
    )

    assert result.exit_code == 2


def test_invalid_driver(runner, config_name):
    TbdbConfig(config_name).set("database", "driver", "oracle")

    result = runner.invoke(main, ["query", "SELECT 1", "-c", config_name])

    assert result.exit_code == 1
    assert "Unknown driver 'oracle'" in result.output


def test_config_set_and_show(runner, config_name):
    result = runner.invoke(main, ["config", "set", "port", "5432", "-c", config_name])
    assert result.exit_code == 0, result.output

    result = runner.invoke(
        main, ["config", "set", "password", "secret", "-c", config_name]
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(main, ["config", "show", "-c", config_name])

    assert result.exit_code == 0, result.output
    assert "port = 5432" in result.output
    assert "secret" not in result.output
    assert TbdbConfig(config_name).get("database", "port") == 5432


def test_config_set_invalid(runner, config_name):
    result = runner.invoke(main, ["config", "set", "colour", "blue", "-c", config_name])
    assert result.exit_code == 2

    result = runner.invoke(main, ["config", "set", "port", "abc", "-c", config_name])
    assert result.exit_code == 2


def test_config_path(runner, config_name):
    result = runner.invoke(main, ["config", "path", "-c", config_name])

    assert result.exit_code == 0
    assert result.output.strip() == TbdbConfig(config_name).config_path


def test_invalid_config_name(runner):
    result = runner.invoke(main, ["config", "show", "-c", "my config"])

    assert result.exit_code == 2
