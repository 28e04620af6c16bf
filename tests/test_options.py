import pytest

from tbdb.config import TbdbConfig
from tbdb.database.options import ConnectionOptions
from tbdb.errors import InvalidOptionError


def test_defaults():
    options = ConnectionOptions()

    assert options.as_dict() == {
        "driver": "mysql",
        "host": "localhost",
        "port": 3306,
        "dbname": "",
        "charset": "utf8",
        "user": "",
        "password": "",
    }


def test_updated_returns_copy():
    options = ConnectionOptions()
    new_options = options.updated({"host": "db.local", "port": 3307})

    assert new_options.host == "db.local"
    assert new_options.port == 3307
    assert options.host == "localhost"


@pytest.mark.parametrize(
    "update",
    [
        {"hostname": "db.local"},
        {"host": "db.local", "timeout": 5},
        {"port": "3306"},
        {"port": True},
        {"user": None},
        {"password": 1234},
    ],
)
def test_updated_rejects(update):
    with pytest.raises(InvalidOptionError):
        ConnectionOptions().updated(update)


def test_dsn_hides_password():
    options = ConnectionOptions(dbname="shop", user="admin", password="secret")

    assert options.dsn == "mysql:host=localhost;port=3306;dbname=shop;charset=utf8"
    assert "secret" not in repr(options)


def test_from_config(config_name):
    conf = TbdbConfig(config_name)
    conf.set("database", "driver", "sqlite")
    conf.set("database", "port", 1234)

    options = ConnectionOptions.from_config(conf)

    assert options.driver == "sqlite"
    assert options.port == 1234
    assert options.host == "localhost"
