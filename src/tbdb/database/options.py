"""
Connection options for the database facade.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from ..config.user import UserConfig
from ..constants import DEFAULT_CHARSET, DEFAULT_DRIVER, DEFAULT_HOST, DEFAULT_PORT
from ..errors import InvalidOptionError


__all__ = ["ConnectionOptions", "OPTION_TYPES"]


OPTION_TYPES: dict[str, type] = {
    "driver": str,
    "host": str,
    "port": int,
    "dbname": str,
    "charset": str,
    "user": str,
    "password": str,
}


@dataclass(frozen=True)
class ConnectionOptions:
    """Settings used to open a connection

    Instances are immutable. Use :meth:`updated` to derive new options from a
    mapping of option names to values.
    """

    driver: str = DEFAULT_DRIVER
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    dbname: str = ""
    charset: str = DEFAULT_CHARSET
    user: str = ""
    password: str = ""

    def updated(self, options: Mapping[str, Any]) -> ConnectionOptions:
        """
        Returns a copy with the given options applied. All options are validated
        before any of them is applied.

        :param options: Mapping of option names to new values.
        :returns: New connection options.
        :raises InvalidOptionError: if an option is unknown or has the wrong type.
        """
        unknown = sorted(str(key) for key in options if key not in OPTION_TYPES)

        if unknown:
            raise InvalidOptionError(
                "Invalid option provided",
                f"Unknown option(s): {', '.join(unknown)}. Accepted options are: "
                f"{', '.join(OPTION_TYPES)}.",
            )

        for key, value in options.items():
            expected = OPTION_TYPES[key]
            # bool is a subclass of int but never a valid port
            if not isinstance(value, expected) or isinstance(value, bool):
                raise InvalidOptionError(
                    "Invalid option provided",
                    f"Option '{key}' must be of type {expected.__name__}, "
                    f"got {type(value).__name__}.",
                )

        return dataclasses.replace(self, **options)

    @classmethod
    def from_config(cls, conf: UserConfig) -> ConnectionOptions:
        """
        Reads options from the ``database`` section of a config.

        :param conf: Config instance, see :func:`tbdb.config.TbdbConfig`.
        :returns: Connection options.
        :raises InvalidOptionError: if a stored value has the wrong type.
        """
        section = "database"
        return cls().updated(
            {key: conf.get(section, key) for key in OPTION_TYPES}
        )

    def as_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @property
    def dsn(self) -> str:
        """A data source name for display purposes. Never includes the password."""
        return (
            f"{self.driver}:host={self.host};port={self.port};"
            f"dbname={self.dbname};charset={self.charset}"
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.dsn}, user='{self.user}')>"
