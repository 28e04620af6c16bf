"""
Scalar result types, including conversion rules from values returned by the database
driver to Python types.
"""

from __future__ import annotations

import json
import math
import re
from enum import Enum
from typing import Any, Generic, TypeVar

from ..errors import InvalidConversionError
from ..utils import serializer


__all__ = [
    "DbType",
    "SqlType",
    "SqlString",
    "SqlBool",
    "SqlNumber",
    "SqlFloat",
    "SqlSerialized",
    "SqlJson",
    "SQL_TYPES",
    "convert",
]

T = TypeVar("T")

_NUMERIC_PREFIX = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_INTEGER = re.compile(r"[+-]?\d+")

_TRUE_STRINGS = frozenset({"1", "true", "on", "yes"})
_FALSE_STRINGS = frozenset({"0", "false", "off", "no", ""})


class DbType(Enum):
    """Target type for a scalar query result"""

    STRING = 100
    NUMBER = 200
    FLOAT = 300
    SERIALIZED = 400
    JSON = 500
    BOOL = 600


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _numeric_prefix(value: Any) -> str:
    match = _NUMERIC_PREFIX.match(_as_text(value))
    return match.group(1) if match else ""


class SqlType(Generic[T]):
    """Base class for conversions of scalar results"""

    db_type = DbType.STRING

    def sql_to_py(self, value: Any) -> T:
        """Converts the return value of the driver to the target Python type."""
        return value


class SqlString(SqlType[Any]):
    """Returns values unchanged"""


class SqlBool(SqlType[bool]):
    """
    Recognizes "1", "true", "on" and "yes" as ``True`` and "0", "false", "off", "no"
    and the empty string as ``False``, ignoring case and surrounding whitespace.
    """

    db_type = DbType.BOOL

    def sql_to_py(self, value: Any) -> bool:
        if value is None:
            return False

        if isinstance(value, bool):
            return value

        if isinstance(value, (int, float)):
            if value in (0, 1):
                return bool(value)
        else:
            text = _as_text(value).strip().lower()

            if text in _TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False

        raise InvalidConversionError(self.db_type, f"Cannot convert {value!r} to bool")


class SqlNumber(SqlType[int]):
    """
    Parses the leading number of a value and truncates it towards zero. Never raises:
    values without a leading number and non-finite values give 0.
    """

    db_type = DbType.NUMBER

    def sql_to_py(self, value: Any) -> int:
        if value is None:
            return 0

        if isinstance(value, (bool, int)):
            return int(value)

        if isinstance(value, float):
            return int(value) if math.isfinite(value) else 0

        prefix = _numeric_prefix(value)

        if not prefix:
            return 0

        if _INTEGER.fullmatch(prefix):
            return int(prefix)

        number = float(prefix)
        return int(number) if math.isfinite(number) else 0


class SqlFloat(SqlType[float]):
    """Parses the leading number of a value as float. Never raises."""

    db_type = DbType.FLOAT

    def sql_to_py(self, value: Any) -> float:
        if value is None:
            return 0.0

        if isinstance(value, (bool, int, float)):
            return float(value)

        prefix = _numeric_prefix(value)
        return float(prefix) if prefix else 0.0


class SqlSerialized(SqlType[Any]):
    """Deserializes values written with :func:`tbdb.utils.serializer.dumps`."""

    db_type = DbType.SERIALIZED

    def sql_to_py(self, value: Any) -> Any:
        try:
            return serializer.loads(value)
        except serializer.SerializationError as exc:
            raise InvalidConversionError(
                self.db_type, f"Cannot unserialize {value!r}: {exc}"
            ) from exc


class SqlJson(SqlType[Any]):
    """Decodes JSON text. A literal ``null`` is treated as a failure."""

    db_type = DbType.JSON

    def sql_to_py(self, value: Any) -> Any:
        if value is None:
            raise InvalidConversionError(self.db_type, "Cannot decode NULL")

        text = value if isinstance(value, str) else _as_text(value)

        try:
            decoded = json.loads(text)
        except ValueError as exc:
            raise InvalidConversionError(
                self.db_type, f"Cannot decode {value!r}: {exc}"
            ) from exc

        if decoded is None:
            raise InvalidConversionError(self.db_type, f"Cannot decode {value!r}")

        return decoded


SQL_TYPES: dict[DbType, SqlType[Any]] = {
    sql_type.db_type: sql_type
    for sql_type in (
        SqlString(),
        SqlBool(),
        SqlNumber(),
        SqlFloat(),
        SqlSerialized(),
        SqlJson(),
    )
}


def convert(value: Any, db_type: Any = DbType.STRING) -> Any:
    """
    Converts a scalar query result.

    :param value: Value returned by the driver.
    :param db_type: Target type. Values which are not a known :class:`DbType` are
        returned unchanged.
    :returns: Converted value.
    :raises InvalidConversionError: if the value cannot be converted.
    """
    try:
        sql_type = SQL_TYPES[db_type]
    except (KeyError, TypeError):
        return value

    return sql_type.sql_to_py(value)
