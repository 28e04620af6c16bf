"""
This module contains the default configuration values and a function to return
existing config instances for a specified config_name.
"""

from __future__ import annotations

import threading

from packaging.version import Version

from .user import UserConfig, _DefaultsType
from ..constants import (
    APP_NAME,
    DEFAULT_CHARSET,
    DEFAULT_DRIVER,
    DEFAULT_HOST,
    DEFAULT_PORT,
)
from ..utils.appdirs import get_conf_path


CONFIG_DIR_NAME = APP_NAME


# =============================================================================
#  Defaults
# =============================================================================

DEFAULTS_CONFIG: _DefaultsType = {
    "database": {
        "driver": DEFAULT_DRIVER,  # sqlite, mysql or pgsql
        "host": DEFAULT_HOST,
        "port": DEFAULT_PORT,
        "dbname": "",  # database name, or file path for sqlite
        "charset": DEFAULT_CHARSET,
        "user": "",
        "password": "",
    },
    "app": {
        "log_level": 20,  # log level for file and stderr, default: INFO
    },
}


# IMPORTANT NOTES:
# 1. If you want to *change* the default value of a current option, you need to
#    do a MINOR update in config version, e.g. from 1.0 to 1.1
# 2. If you want to *remove* or *rename* options, you need to do a MAJOR update in
#    version, e.g. from 1.0 to 2.0
# 3. You don't need to touch this value if you're just adding a new option
CONF_VERSION = Version("1.0")


# =============================================================================
# Factories
# =============================================================================

_config_instances: dict[str, UserConfig] = {}
_config_lock = threading.Lock()


def TbdbConfig(config_name: str) -> UserConfig:
    """
    Returns an existing config instance or creates a new one.

    :param config_name: Name of the tbdb configuration. A new config file will be
        created if none exists for the given config_name.
    :return: Config instance which saves any changes to the drive.
    """

    global _config_instances

    with _config_lock:
        try:
            return _config_instances[config_name]
        except KeyError:
            config_path = get_conf_path(CONFIG_DIR_NAME, f"{config_name}.ini")

            try:
                conf = UserConfig(
                    config_path, defaults=DEFAULTS_CONFIG, version=CONF_VERSION
                )
            except OSError:
                conf = UserConfig(
                    config_path,
                    defaults=DEFAULTS_CONFIG,
                    version=CONF_VERSION,
                    load=False,
                )

            _config_instances[config_name] = conf
            return conf
