"""
This module defines the encoding of values stored for
:attr:`tbdb.database.types.DbType.SERIALIZED` columns.

Values are pickled. Binary columns hold the pickle itself, text columns hold the
pickle encoded as base64. Only load values from databases you trust: unpickling can
execute arbitrary code.
"""

# system imports
import base64
import binascii
import pickle
from typing import Any, Union


__all__ = ["dumps", "loads", "SerializationError"]


class SerializationError(ValueError):
    """Raised when a value cannot be decoded."""


def dumps(value: Any, text: bool = False) -> Union[bytes, str]:
    """
    Serializes a Python value for storage.

    :param value: Value to serialize. Must be picklable.
    :param text: Whether to return base64 text for storage in text columns.
    :returns: Serialized value.
    """
    data = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    if text:
        return base64.b64encode(data).decode("ascii")

    return data


def loads(data: Union[bytes, bytearray, memoryview, str]) -> Any:
    """
    Restores a value serialized with :func:`dumps`.

    :param data: Pickle bytes or base64 text.
    :returns: Deserialized value.
    :raises SerializationError: if the data cannot be decoded.
    """
    if isinstance(data, str):
        try:
            data = base64.b64decode(data.encode("ascii"), validate=True)
        except (UnicodeEncodeError, binascii.Error) as exc:
            raise SerializationError(f"Not base64 encoded: {exc}") from exc
    elif isinstance(data, (bytearray, memoryview)):
        data = bytes(data)
    elif not isinstance(data, bytes):
        raise SerializationError(f"Cannot deserialize {type(data).__name__}")

    try:
        return pickle.loads(data)
    # unpickling raises a wide range of exceptions for corrupt input
    except Exception as exc:
        raise SerializationError(f"Corrupt pickle data: {exc}") from exc
