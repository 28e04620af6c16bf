import sqlite3

import pytest

from tbdb import database
from tbdb.database import Database, DbType, Prepared, RawQuery
from tbdb.database.options import ConnectionOptions
from tbdb.errors import (
    ArgumentError,
    ConfigurationError,
    ConversionError,
    DatabaseError,
    InvalidOptionError,
    StorageError,
    UninitializedError,
    UsageError,
)
from tbdb.utils import serializer


INSERT_ITEM = "INSERT INTO items (value) VALUES (?)"


def count_items(db_path: str) -> int:
    with sqlite3.connect(db_path) as conn:
        return conn.execute("SELECT COUNT(*) FROM items").fetchone()[0]


# ==== init ============================================================================


def test_init_applies_options(sqlite_options):
    database.init(sqlite_options)

    options = database.get_options()
    assert options.driver == "sqlite"
    assert options.dbname == sqlite_options["dbname"]
    assert options.host == "localhost"
    assert options.port == 3306


def test_init_unknown_option_applies_nothing():
    """A failing call leaves all options untouched, including valid ones before the
    unknown key."""

    with pytest.raises(ConfigurationError):
        database.init({"host": "db.example.com", "colour": "blue", "port": 5432})

    assert database.get_options() == ConnectionOptions()


def test_init_wrong_type():
    with pytest.raises(InvalidOptionError):
        database.init({"port": "3306"})

    assert database.get_options().port == 3306


# ==== lifecycle =======================================================================


def test_get_instance_is_singleton(db):
    other = database.get_instance()

    assert other is db
    assert other.connection is db.connection


def test_init_after_connect_does_not_reconnect(db, tmp_path):
    connection = db.connection

    database.init({"dbname": str(tmp_path / "other.db")})

    assert database.get_instance().connection is connection


def test_close_and_reconnect(db):
    database.close()

    with pytest.raises(UninitializedError):
        db.get_results("SELECT 1")

    new_db = database.get_instance()
    assert new_db is not db
    assert new_db.get_var("SELECT 1", db_type=DbType.NUMBER) == 1


@pytest.mark.parametrize(
    "call",
    [
        lambda db: db.prepare("SELECT 1"),
        lambda db: db.get_results("SELECT 1"),
        lambda db: db.get_var("SELECT 1"),
        lambda db: db.insert(INSERT_ITEM, [1]),
    ],
)
def test_uninitialized(call, sqlite_options):
    db = Database(ConnectionOptions().updated(sqlite_options))

    with pytest.raises(UninitializedError):
        call(db)


def test_context_manager(sqlite_options):
    with Database(ConnectionOptions().updated(sqlite_options)) as db:
        assert db.connected
        assert db.get_var("SELECT 'x'") == "x"

    assert not db.connected


def test_unknown_driver():
    database.init({"driver": "oracle"})

    with pytest.raises(InvalidOptionError):
        database.get_instance()


def test_connect_failure(tmp_path):
    database.init({"driver": "sqlite", "dbname": str(tmp_path / "missing" / "x.db")})

    with pytest.raises(DatabaseError):
        database.get_instance()


# ==== get_results =====================================================================


def test_get_results_raw(db):
    rows = db.get_results("SELECT key, value FROM settings WHERE key = 'title'")
    assert rows == [{"key": "title", "value": "hello"}]


def test_get_results_empty(db):
    assert db.get_results("SELECT * FROM items") == []


def test_get_results_prepared(db):
    statement = db.prepare("SELECT key FROM settings WHERE key IN (?, ?) ORDER BY key")
    assert isinstance(statement, Prepared)

    rows = db.get_results(statement, ["ratio", "limit"])
    assert rows == [{"key": "limit"}, {"key": "ratio"}]

    # statements can be executed again with other values
    rows = db.get_results(statement, ["title", "nothing"])
    assert rows == [{"key": "title"}]


def test_get_results_named_placeholders(db):
    statement = db.prepare("SELECT value FROM settings WHERE key = :key")
    assert db.get_results(statement, {"key": "title"}) == [{"value": "hello"}]


def test_get_results_explicit_raw_query(db):
    assert db.get_results(RawQuery("SELECT 1 AS one")) == [{"one": 1}]


def test_substitutions_require_prepared_statement(db):
    with pytest.raises(UsageError):
        db.get_results("SELECT * FROM settings WHERE key = ?", ["title"])

    with pytest.raises(ArgumentError):
        db.get_var("SELECT * FROM settings WHERE key = ?", ["title"])


def test_get_results_error(db):
    with pytest.raises(StorageError) as exc_info:
        db.get_results("SELECT * FROM no_such_table")

    assert "no_such_table" in exc_info.value.message


def test_prepared_error(db):
    statement = db.prepare("SELECT * FROM settings WHERE key = ?")

    with pytest.raises(DatabaseError):
        db.get_results(statement, ["a", "b"])


def test_prepare_driver_options(db):
    statement = db.prepare("SELECT * FROM settings", {"arraysize": 2})
    assert len(db.get_results(statement)) == 7

    with pytest.raises(ArgumentError):
        db.prepare("SELECT * FROM settings", {"no_such_option": 1})


def test_statement_from_closed_connection(db):
    statement = db.prepare("SELECT 1")
    database.close()

    new_db = database.get_instance()

    with pytest.raises(ArgumentError):
        new_db.get_results(statement)


# ==== get_var =========================================================================


def select_setting(db, key, db_type=DbType.STRING):
    return db.get_var(db.prepare("SELECT value FROM settings WHERE key = ?"), [key], db_type)


def test_get_var_string(db):
    assert select_setting(db, "title") == "hello"
    assert db.get_var("SELECT value FROM settings WHERE key = 'title'") == "hello"


def test_get_var_no_rows(db):
    assert select_setting(db, "missing", DbType.NUMBER) is None


def test_get_var_bool(db):
    assert select_setting(db, "flag_on", DbType.BOOL) is True

    with pytest.raises(ConversionError) as exc_info:
        select_setting(db, "flag_unsure", DbType.BOOL)

    assert exc_info.value.kind is DbType.BOOL


def test_get_var_number(db):
    assert select_setting(db, "limit", DbType.NUMBER) == 42
    assert select_setting(db, "title", DbType.NUMBER) == 0


def test_get_var_float(db):
    assert select_setting(db, "ratio", DbType.FLOAT) == 0.75
    assert select_setting(db, "title", DbType.FLOAT) == 0.0


def test_get_var_json_decodes_once(db):
    """'{"a":1}' decodes to a dict. The value is decoded exactly once, a second
    decode of the resulting dict would fail."""

    assert select_setting(db, "payload", DbType.JSON) == {"a": 1}

    with pytest.raises(ConversionError):
        select_setting(db, "null_json", DbType.JSON)

    with pytest.raises(ConversionError):
        select_setting(db, "title", DbType.JSON)


def test_get_var_serialized(db):
    value = {"tags": ["a", "b"], "count": 3}

    db.insert(
        "INSERT INTO settings (key, value) VALUES (?, ?)",
        ["blob", serializer.dumps(value)],
    )
    db.insert(
        "INSERT INTO settings (key, value) VALUES (?, ?)",
        ["text", serializer.dumps(value, text=True)],
    )

    assert select_setting(db, "blob", DbType.SERIALIZED) == value
    assert select_setting(db, "text", DbType.SERIALIZED) == value

    with pytest.raises(ConversionError):
        select_setting(db, "title", DbType.SERIALIZED)


def test_get_var_first_row_only(db):
    assert db.get_var("SELECT key FROM settings ORDER BY key") == "flag_on"


# ==== insert ==========================================================================


def test_insert_single(db, db_path):
    ids = db.insert(INSERT_ITEM, [5])

    assert len(ids) == 1
    assert db.get_var("SELECT id FROM items WHERE value = 5") == ids[0]
    assert count_items(db_path) == 1


def test_insert_without_substitutions(db, db_path):
    ids = db.insert("INSERT INTO items (value) VALUES (7)")

    assert len(ids) == 1
    assert db.get_var("SELECT id FROM items WHERE value = 7") == ids[0]
    assert count_items(db_path) == 1


def test_insert_multiple(db, db_path):
    ids = db.insert(INSERT_ITEM, [[1], [3], [4]], multiple=True)

    assert len(ids) == 3
    assert ids == sorted(ids)

    rows = db.get_results("SELECT id, value FROM items ORDER BY id")
    assert [row["id"] for row in rows] == ids
    assert [row["value"] for row in rows] == [1, 3, 4]
    assert count_items(db_path) == 3


def test_insert_multiple_rolls_back(db, db_path):
    """The second row violates a CHECK constraint. No row may be committed."""

    with pytest.raises(StorageError) as exc_info:
        db.insert(INSERT_ITEM, [[1], [2], [3]], multiple=True)

    assert "CHECK constraint failed" in exc_info.value.message
    assert count_items(db_path) == 0

    # the connection is usable after the rollback
    assert db.insert(INSERT_ITEM, [[8], [9]], multiple=True)
    assert count_items(db_path) == 2


def test_insert_multiple_rolls_back_on_bad_row(db, db_path):
    with pytest.raises(DatabaseError):
        db.insert(INSERT_ITEM, [[1], [3, 4]], multiple=True)

    assert count_items(db_path) == 0


def test_insert_errors(db, db_path):
    with pytest.raises(DatabaseError):
        db.insert(INSERT_ITEM, [2])

    with pytest.raises(DatabaseError):
        db.insert("INSERT INTO items (value) VALUES (2)")

    assert count_items(db_path) == 0


# ==== error translation ===============================================================


def test_error_fallback(db):
    """Without error details from the driver, a generic error is raised."""

    with pytest.raises(DatabaseError) as exc_info:
        db._handle_query_error()

    assert exc_info.value.message == "Unexpected database error"
    assert exc_info.value.code == -1
