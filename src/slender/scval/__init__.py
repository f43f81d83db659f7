"""
SCVal - Typed values and their XDR wire codec.

The codec is pure: it never touches the network. Contract arguments are
built from the Value dataclasses, encoded with ``encode`` and results are
read back with ``decode`` / ``decode_record`` / ``decode_mapping``.
"""

from .codec import as_enum, decode, decode_enum, encode, from_xdr, to_xdr
from .native import decode_native, to_native
from .notation import args_from_json, value_from_json, value_to_json
from .records import Record, decode_mapping, decode_record
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
    enum,
    vec,
)

__all__ = [
    "Address",
    "Bool",
    "Bytes",
    "Duration",
    "Enum",
    "I32",
    "I64",
    "I128",
    "I256",
    "Map",
    "Record",
    "String",
    "Symbol",
    "Timepoint",
    "U32",
    "U64",
    "U128",
    "U256",
    "Value",
    "Vec",
    "Void",
    "args_from_json",
    "as_enum",
    "decode",
    "decode_enum",
    "decode_mapping",
    "decode_native",
    "decode_record",
    "encode",
    "enum",
    "from_xdr",
    "to_native",
    "to_xdr",
    "value_from_json",
    "value_to_json",
    "vec",
]
