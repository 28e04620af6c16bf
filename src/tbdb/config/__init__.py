# -*- coding: utf-8 -*-

import os
from typing import List, TypeVar

from .main import TbdbConfig, CONFIG_DIR_NAME, _config_instances, _config_lock
from ..utils.appdirs import get_conf_path


__all__ = [
    "TbdbConfig",
    "list_configs",
    "remove_configuration",
    "validate_config_name",
]


_C = TypeVar("_C", bound=str)


def list_configs() -> List[str]:
    """
    Lists all tbdb configs.

    :returns: A list of all currently existing config files.
    """
    configs = []
    for file in os.listdir(get_conf_path(CONFIG_DIR_NAME)):
        if file.endswith(".ini"):
            configs.append(os.path.splitext(os.path.basename(file))[0])

    return configs


def remove_configuration(config_name: str) -> None:
    """
    Removes the config file associated with the given configuration and forgets the
    cached instance.

    :param config_name: The configuration to remove.
    """
    TbdbConfig(config_name).cleanup()

    with _config_lock:
        _config_instances.pop(config_name, None)


def validate_config_name(string: _C) -> _C:
    """
    Validates that the config name does not contain any whitespace.

    :param string: String to validate.
    :returns: The input value.
    :raises ValueError: if the config name contains whitespace.
    """
    if len(string.split()) > 1:
        raise ValueError("Config name may not contain any whitespace")

    return string
