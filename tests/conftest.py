# -*- coding: utf-8 -*-

import logging
import sqlite3

import pytest

from tbdb import database
from tbdb.config import list_configs, remove_configuration
from tbdb.database import core
from tbdb.database.options import ConnectionOptions


logging.getLogger("tbdb").setLevel(logging.DEBUG)


SCHEMA = """
CREATE TABLE items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    value INTEGER NOT NULL CHECK (value != 2)
);
CREATE TABLE settings (
    key TEXT PRIMARY KEY,
    value
);
INSERT INTO settings (key, value) VALUES
    ('flag_on', 'true'),
    ('flag_unsure', 'maybe'),
    ('limit', '42 items'),
    ('ratio', '0.75'),
    ('payload', '{"a":1}'),
    ('null_json', 'null'),
    ('title', 'hello');
"""


@pytest.fixture(autouse=True)
def reset_instance(monkeypatch):
    monkeypatch.setattr(core, "_options", ConnectionOptions())
    yield
    database.close()


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "test.db"
    conn = sqlite3.connect(path)
    try:
        conn.executescript(SCHEMA)
    finally:
        conn.close()
    return str(path)


@pytest.fixture
def sqlite_options(db_path):
    return {"driver": "sqlite", "dbname": db_path}


@pytest.fixture
def db(sqlite_options):
    database.init(sqlite_options)
    return database.get_instance()


@pytest.fixture
def config_name(prefix: str = "test-config"):

    i = 0
    config_name = f"{prefix}-{i}"

    while config_name in list_configs():
        i += 1
        config_name = f"{prefix}-{i}"

    yield config_name

    remove_configuration(config_name)
