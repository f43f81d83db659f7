"""
Native views of decoded values.

``to_native`` flattens a Value into plain Python data (ints, str, bytes,
lists, dicts, None), the shape business code usually wants. Maps become
dicts keyed by the native form of their keys; nested maps become nested
dicts.
"""

from __future__ import annotations

from typing import Any

from stellar_sdk import xdr as stellar_xdr

from ..errors import DecodeError
from .codec import decode
from .values import (
    INTEGER_TYPES,
    Address,
    Bool,
    Bytes,
    Enum,
    Map,
    String,
    Symbol,
    Value,
    Vec,
    Void,
)


def to_native(value: Value) -> Any:
    """
    Convert a Value to plain Python data.

    Raises:
        DecodeError: If a map key has no hashable native form
    """
    if isinstance(value, Void):
        return None
    if isinstance(value, Bool):
        return value.value
    if isinstance(value, INTEGER_TYPES):
        return value.value
    if isinstance(value, (Symbol, String, Address)):
        return value.value
    if isinstance(value, Bytes):
        return value.value
    if isinstance(value, Vec):
        return [to_native(item) for item in value.items]
    if isinstance(value, Enum):
        return [value.variant, *(to_native(item) for item in value.payload)]
    if isinstance(value, Map):
        return _map_to_dict(value)
    raise DecodeError(f"Not a Value: {value!r}")


def _map_to_dict(value: Map) -> dict[Any, Any]:
    result: dict[Any, Any] = {}
    for key, val in value.entries:
        native_key = to_native(key)
        if isinstance(native_key, list):
            native_key = tuple(native_key)
        try:
            result[native_key] = to_native(val)
        except TypeError as exc:
            raise DecodeError(f"Map key {key!r} has no hashable native form") from exc
    return result


def decode_native(wire: stellar_xdr.SCVal) -> Any:
    return to_native(decode(wire))
