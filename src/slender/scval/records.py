"""
Key-addressed decoding of contract maps.

Contract structs arrive as maps keyed by symbols. Two views are offered:

- ``decode_record``: a typed record, either a caller-supplied dataclass or a
  read-only ``Record`` with attribute access.
- ``decode_mapping``: a plain ``dict`` of native keys to native values.

Both ignore the order of entries on the wire.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Iterator, Mapping, Optional, TypeVar, Union, overload

from stellar_sdk import xdr as stellar_xdr

from ..errors import DecodeError
from .codec import decode
from .native import to_native
from .values import Map, Symbol, Value

T = TypeVar("T")

WireOrValue = Union[stellar_xdr.SCVal, Value]


class Record(Mapping[str, Any]):
    """Read-only struct view: ``record.debt`` and ``record["debt"]`` both work."""

    __slots__ = ("_fields",)

    def __init__(self, fields: dict[str, Any]) -> None:
        object.__setattr__(self, "_fields", dict(fields))

    def __getattr__(self, name: str) -> Any:
        try:
            return self._fields[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Record is read-only")

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._fields.items())
        return f"Record({inner})"


def _as_map(source: WireOrValue) -> Map:
    value = decode(source) if isinstance(source, stellar_xdr.SCVal) else source
    if not isinstance(value, Map):
        raise DecodeError(f"Expected a map, got {type(value).__name__}")
    return value


def _symbol_fields(value: Map) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key, val in value.entries:
        if not isinstance(key, Symbol):
            raise DecodeError(f"Record keys must be symbols, got {type(key).__name__}")
        fields[key.value] = to_native(val)
    return fields


@overload
def decode_record(source: WireOrValue) -> Record: ...


@overload
def decode_record(source: WireOrValue, cls: type[T]) -> T: ...


def decode_record(source: WireOrValue, cls: Optional[type] = None) -> Any:
    """
    Decode a symbol-keyed map into a typed record.

    Args:
        source: Wire SCVal or an already decoded Map
        cls: Optional dataclass; its fields are looked up by name

    Raises:
        DecodeError: If the value is not a symbol-keyed map, or a field of
            ``cls`` without a default is missing from it
    """
    fields = _symbol_fields(_as_map(source))
    if cls is None:
        return Record(fields)

    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls!r} is not a dataclass")

    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if f.name in fields:
            kwargs[f.name] = fields[f.name]
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            raise DecodeError(f"Field {f.name!r} missing from {cls.__name__} record")
    return cls(**kwargs)


def decode_mapping(source: WireOrValue) -> dict[Any, Any]:
    """Decode any map into a ``dict`` of native keys and values."""
    return to_native(_as_map(source))
