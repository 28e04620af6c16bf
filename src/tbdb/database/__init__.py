"""
Database facade with typed scalar extraction and transactional batch inserts.

Typical use::

    from tbdb import database
    from tbdb.database import DbType

    database.init({"driver": "sqlite", "dbname": "app.db"})
    db = database.get_instance()

    rows = db.get_results("SELECT id, name FROM users")
    active = db.get_var(db.prepare("SELECT active FROM users WHERE id = ?"), [1], DbType.BOOL)
    ids = db.insert("INSERT INTO users (name) VALUES (?)", [["a"], ["b"]], multiple=True)

    database.close()
"""

from .core import Database, close, get_instance, get_options, init
from .options import ConnectionOptions
from .query import Prepared, Query, RawQuery
from .types import DbType


__all__ = [
    "Database",
    "DbType",
    "ConnectionOptions",
    "Query",
    "RawQuery",
    "Prepared",
    "init",
    "get_instance",
    "get_options",
    "close",
]
