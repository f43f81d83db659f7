"""
JSON notation for typed values, used by the CLI.

Each argument is a one-key object naming the variant::

    {"address": "GABC..."}        {"i128": "100000000000"}
    {"u32": 9}                    {"symbol": "XLM"}
    {"bytes": "00ff"}             {"bytes": {"base64": "AP8="}}
    {"vec": [{"u32": 1}]}         {"map": {"discount": {"u32": 6000}}}
    {"enum": ["Variant", {"u32": 1}]}
    {"void": null}

Bare JSON scalars are shorthands: ``true``/``false`` → Bool, integers → I128,
strings → String, ``null`` → Void, arrays → Vec. Integers may be given as
strings so that 128-bit values survive JSON tooling that uses doubles.
"""

from __future__ import annotations

from typing import Any, Callable

from .values import (
    Address,
    Bool,
    Bytes,
    Duration,
    Enum,
    I32,
    I64,
    I128,
    I256,
    INTEGER_TYPES,
    Map,
    String,
    Symbol,
    Timepoint,
    U32,
    U64,
    U128,
    U256,
    Value,
    Vec,
    Void,
)

_INT_TAGS: dict[str, type] = {
    "u32": U32,
    "i32": I32,
    "u64": U64,
    "i64": I64,
    "u128": U128,
    "i128": I128,
    "u256": U256,
    "i256": I256,
    "timepoint": Timepoint,
    "duration": Duration,
}

_TAG_OF: dict[type, str] = {cls: tag for tag, cls in _INT_TAGS.items()}


def _parse_int(raw: Any, tag: str) -> int:
    if isinstance(raw, bool):
        raise ValueError(f"{tag} expects an integer, got a boolean")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        return int(raw.replace("_", ""), 0)
    raise ValueError(f"{tag} expects an integer, got {raw!r}")


def _parse_bool(raw: Any) -> Bool:
    if not isinstance(raw, bool):
        raise ValueError(f"bool expects true or false, got {raw!r}")
    return Bool(raw)


def _parse_bytes(raw: Any) -> Bytes:
    if isinstance(raw, str):
        return Bytes.from_encoded(raw, "hex")
    if isinstance(raw, dict) and len(raw) == 1:
        encoding, text = next(iter(raw.items()))
        return Bytes.from_encoded(text, encoding)
    raise ValueError(f"bytes expects a hex string or {{encoding: text}}, got {raw!r}")


def _parse_map(raw: Any) -> Map:
    if isinstance(raw, dict):
        return Map(tuple((Symbol(k), value_from_json(v)) for k, v in raw.items()))
    if isinstance(raw, list):
        entries = []
        for pair in raw:
            if not isinstance(pair, list) or len(pair) != 2:
                raise ValueError(f"map entries must be [key, value] pairs, got {pair!r}")
            entries.append((value_from_json(pair[0]), value_from_json(pair[1])))
        return Map(tuple(entries))
    raise ValueError(f"map expects an object or a list of pairs, got {raw!r}")


def _parse_enum(raw: Any) -> Enum:
    if isinstance(raw, str):
        return Enum(raw)
    if isinstance(raw, list) and raw and isinstance(raw[0], str):
        return Enum(raw[0], tuple(value_from_json(item) for item in raw[1:]))
    raise ValueError(f"enum expects [variant, ...payload], got {raw!r}")


_TAGGED: dict[str, Callable[[Any], Value]] = {
    "void": lambda raw: Void(),
    "bool": _parse_bool,
    "symbol": lambda raw: Symbol(str(raw)),
    "string": lambda raw: String(str(raw)),
    "address": lambda raw: Address(str(raw)),
    "bytes": _parse_bytes,
    "vec": lambda raw: Vec(tuple(value_from_json(item) for item in raw)),
    "map": _parse_map,
    "enum": _parse_enum,
}


def value_from_json(raw: Any) -> Value:
    """
    Parse one argument from its JSON notation.

    Raises:
        ValueError: If the notation is not recognised
    """
    if raw is None:
        return Void()
    if isinstance(raw, bool):
        return Bool(raw)
    if isinstance(raw, int):
        return I128(raw)
    if isinstance(raw, str):
        return String(raw)
    if isinstance(raw, list):
        return Vec(tuple(value_from_json(item) for item in raw))
    if isinstance(raw, dict) and len(raw) == 1:
        tag, payload = next(iter(raw.items()))
        tag = tag.lower()
        if tag in _INT_TAGS:
            return _INT_TAGS[tag](_parse_int(payload, tag))
        if tag in _TAGGED:
            return _TAGGED[tag](payload)
        raise ValueError(f"Unknown value tag: {tag!r}")
    raise ValueError(f"Cannot interpret {raw!r} as a value")


def args_from_json(raw: Any) -> list[Value]:
    if not isinstance(raw, list):
        raise ValueError("Args must be a JSON array")
    return [value_from_json(item) for item in raw]


def value_to_json(value: Value) -> Any:
    """Render a Value in the same tagged notation (integers as strings)."""
    if isinstance(value, Void):
        return {"void": None}
    if isinstance(value, Bool):
        return {"bool": value.value}
    if isinstance(value, INTEGER_TYPES):
        return {_TAG_OF[type(value)]: str(value.value)}
    if isinstance(value, Symbol):
        return {"symbol": value.value}
    if isinstance(value, String):
        return {"string": value.value}
    if isinstance(value, Address):
        return {"address": value.value}
    if isinstance(value, Bytes):
        return {"bytes": value.value.hex()}
    if isinstance(value, Vec):
        return {"vec": [value_to_json(item) for item in value.items]}
    if isinstance(value, Map):
        return {"map": [[value_to_json(k), value_to_json(v)] for k, v in value.entries]}
    if isinstance(value, Enum):
        return {"enum": [value.variant, *(value_to_json(item) for item in value.payload)]}
    raise ValueError(f"Not a Value: {value!r}")
