"""
Value - the in-memory form of every datum exchanged with a contract.

A closed union of frozen dataclasses. Integer variants hold Python ints, so
64/128/256-bit quantities keep full precision end-to-end. Range checks happen
in the codec when a value is encoded, not at construction.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Iterator, Optional, Union


@dataclass(frozen=True)
class Void:
    pass


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class U32:
    value: int


@dataclass(frozen=True)
class I32:
    value: int


@dataclass(frozen=True)
class U64:
    value: int


@dataclass(frozen=True)
class I64:
    value: int


@dataclass(frozen=True)
class U128:
    value: int


@dataclass(frozen=True)
class I128:
    value: int


@dataclass(frozen=True)
class U256:
    value: int


@dataclass(frozen=True)
class I256:
    value: int


@dataclass(frozen=True)
class Timepoint:
    value: int


@dataclass(frozen=True)
class Duration:
    value: int


@dataclass(frozen=True)
class Symbol:
    value: str


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Bytes:
    value: bytes

    @classmethod
    def from_encoded(cls, text: str, encoding: str = "hex") -> "Bytes":
        """
        Build a byte buffer from text in an explicit source encoding.

        Args:
            text: Encoded payload
            encoding: "hex", "base64" or "utf-8"

        Raises:
            ValueError: If the encoding is unknown or the text is malformed
        """
        if encoding == "hex":
            if text.startswith("0x"):
                text = text[2:]
            return cls(bytes.fromhex(text))
        if encoding == "base64":
            return cls(base64.b64decode(text, validate=True))
        if encoding in ("utf-8", "utf8"):
            return cls(text.encode("utf-8"))
        raise ValueError(f"Unsupported byte encoding: {encoding}")

    def hex(self) -> str:
        return self.value.hex()


@dataclass(frozen=True)
class Address:
    """Account (G...) or contract (C...) identity, kept as its strkey."""

    value: str


@dataclass(frozen=True)
class Vec:
    items: tuple["Value", ...] = ()

    def __iter__(self) -> Iterator["Value"]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> "Value":
        return self.items[index]


@dataclass(frozen=True)
class Map:
    """Ordered key/value entries; order is kept on encode, lookups are by key."""

    entries: tuple[tuple["Value", "Value"], ...] = ()

    @classmethod
    def of_symbols(cls, fields: dict[str, "Value"]) -> "Map":
        """Map keyed by symbols, the shape of a contract struct."""
        return cls(tuple((Symbol(name), val) for name, val in fields.items()))

    def get(self, key: Union["Value", str], default: Optional["Value"] = None) -> Optional["Value"]:
        if isinstance(key, str):
            key = Symbol(key)
        for entry_key, entry_val in self.entries:
            if entry_key == key:
                return entry_val
        return default

    def keys(self) -> list["Value"]:
        return [k for k, _ in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class Enum:
    """Tagged variant: a symbol naming the case plus its payload values."""

    variant: str
    payload: tuple["Value", ...] = ()


Value = Union[
    Void,
    Bool,
    U32,
    I32,
    U64,
    I64,
    U128,
    I128,
    U256,
    I256,
    Timepoint,
    Duration,
    Symbol,
    String,
    Bytes,
    Address,
    Vec,
    Map,
    Enum,
]

INTEGER_TYPES = (U32, I32, U64, I64, U128, I128, U256, I256, Timepoint, Duration)


def vec(*items: Value) -> Vec:
    return Vec(tuple(items))


def enum(variant: str, *payload: Value) -> Enum:
    return Enum(variant, tuple(payload))
