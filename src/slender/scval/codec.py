"""
SCVal Codec - Convert between Value and the host's XDR wire value.

Pure functions, no I/O. Every Value variant has an encode and a decode path;
an unknown wire tag is a DecodeError, never a silent default.

128/256-bit integers travel as 64-bit words. The high word is signed for the
signed variants, so two's-complement reassembly with ``(hi << 64) | lo``
restores negative values exactly.
"""

from __future__ import annotations

import re
from typing import Callable

from stellar_sdk import Address as StellarAddress
from stellar_sdk import xdr as stellar_xdr

from ..errors import DecodeError, EncodeError
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
)

MASK64 = (1 << 64) - 1

SYMBOL_MAX_LEN = 32
_SYMBOL_RE = re.compile(r"^[A-Za-z0-9_]*$")

# (min, max) inclusive
_RANGES: dict[type, tuple[int, int]] = {
    U32: (0, (1 << 32) - 1),
    I32: (-(1 << 31), (1 << 31) - 1),
    U64: (0, (1 << 64) - 1),
    I64: (-(1 << 63), (1 << 63) - 1),
    Timepoint: (0, (1 << 64) - 1),
    Duration: (0, (1 << 64) - 1),
    U128: (0, (1 << 128) - 1),
    I128: (-(1 << 127), (1 << 127) - 1),
    U256: (0, (1 << 256) - 1),
    I256: (-(1 << 255), (1 << 255) - 1),
}

_T = stellar_xdr.SCValType


def _checked_int(value: Value) -> int:
    raw = value.value
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise EncodeError(f"{type(value).__name__} requires an int, got {type(raw).__name__}")
    low, high = _RANGES[type(value)]
    if not low <= raw <= high:
        raise EncodeError(f"{raw} does not fit {type(value).__name__} [{low}, {high}]")
    return raw


def _check_symbol(name: str) -> bytes:
    if len(name) > SYMBOL_MAX_LEN or not _SYMBOL_RE.match(name):
        raise EncodeError(f"Invalid symbol {name!r}: expected up to 32 chars of [A-Za-z0-9_]")
    return name.encode("ascii")


# ---------------------------------------------------------------------------
# Wide integers
# ---------------------------------------------------------------------------

def split_u128(value: int) -> tuple[int, int]:
    return (value >> 64) & MASK64, value & MASK64


def split_i128(value: int) -> tuple[int, int]:
    # Arithmetic shift keeps the sign in the high word.
    return value >> 64, value & MASK64


def join128(hi: int, lo: int) -> int:
    return (hi << 64) | lo


def split_256(value: int, signed: bool) -> tuple[int, int, int, int]:
    hi_hi = value >> 192 if signed else (value >> 192) & MASK64
    return hi_hi, (value >> 128) & MASK64, (value >> 64) & MASK64, value & MASK64


def join256(hi_hi: int, hi_lo: int, lo_hi: int, lo_lo: int) -> int:
    return (hi_hi << 192) | (hi_lo << 128) | (lo_hi << 64) | lo_lo


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------

def encode(value: Value) -> stellar_xdr.SCVal:
    """
    Encode a Value as an XDR SCVal.

    Raises:
        EncodeError: If an integer is out of range for its variant, a symbol
            is malformed, an address is not a valid strkey, or the object is
            not a Value at all
    """
    encoder = _ENCODERS.get(type(value))
    if encoder is None:
        raise EncodeError(f"Not an encodable Value: {value!r}")
    return encoder(value)


def _encode_void(value: Void) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(_T.SCV_VOID)


def _encode_bool(value: Bool) -> stellar_xdr.SCVal:
    if not isinstance(value.value, bool):
        raise EncodeError(f"Bool requires a bool, got {type(value.value).__name__}")
    return stellar_xdr.SCVal(_T.SCV_BOOL, b=value.value)


def _encode_u32(value: U32) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(_T.SCV_U32, u32=stellar_xdr.Uint32(_checked_int(value)))


def _encode_i32(value: I32) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(_T.SCV_I32, i32=stellar_xdr.Int32(_checked_int(value)))


def _encode_u64(value: U64) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(_T.SCV_U64, u64=stellar_xdr.Uint64(_checked_int(value)))


def _encode_i64(value: I64) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(_T.SCV_I64, i64=stellar_xdr.Int64(_checked_int(value)))


def _encode_timepoint(value: Timepoint) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(
        _T.SCV_TIMEPOINT,
        timepoint=stellar_xdr.TimePoint(stellar_xdr.Uint64(_checked_int(value))),
    )


def _encode_duration(value: Duration) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(
        _T.SCV_DURATION,
        duration=stellar_xdr.Duration(stellar_xdr.Uint64(_checked_int(value))),
    )


def _encode_u128(value: U128) -> stellar_xdr.SCVal:
    hi, lo = split_u128(_checked_int(value))
    parts = stellar_xdr.UInt128Parts(hi=stellar_xdr.Uint64(hi), lo=stellar_xdr.Uint64(lo))
    return stellar_xdr.SCVal(_T.SCV_U128, u128=parts)


def _encode_i128(value: I128) -> stellar_xdr.SCVal:
    hi, lo = split_i128(_checked_int(value))
    parts = stellar_xdr.Int128Parts(hi=stellar_xdr.Int64(hi), lo=stellar_xdr.Uint64(lo))
    return stellar_xdr.SCVal(_T.SCV_I128, i128=parts)


def _encode_u256(value: U256) -> stellar_xdr.SCVal:
    hi_hi, hi_lo, lo_hi, lo_lo = split_256(_checked_int(value), signed=False)
    parts = stellar_xdr.UInt256Parts(
        hi_hi=stellar_xdr.Uint64(hi_hi),
        hi_lo=stellar_xdr.Uint64(hi_lo),
        lo_hi=stellar_xdr.Uint64(lo_hi),
        lo_lo=stellar_xdr.Uint64(lo_lo),
    )
    return stellar_xdr.SCVal(_T.SCV_U256, u256=parts)


def _encode_i256(value: I256) -> stellar_xdr.SCVal:
    hi_hi, hi_lo, lo_hi, lo_lo = split_256(_checked_int(value), signed=True)
    parts = stellar_xdr.Int256Parts(
        hi_hi=stellar_xdr.Int64(hi_hi),
        hi_lo=stellar_xdr.Uint64(hi_lo),
        lo_hi=stellar_xdr.Uint64(lo_hi),
        lo_lo=stellar_xdr.Uint64(lo_lo),
    )
    return stellar_xdr.SCVal(_T.SCV_I256, i256=parts)


def _encode_symbol(value: Symbol) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(_T.SCV_SYMBOL, sym=stellar_xdr.SCSymbol(_check_symbol(value.value)))


def _encode_string(value: String) -> stellar_xdr.SCVal:
    # surrogateescape writes non-UTF-8 wire bytes back out unchanged
    try:
        raw = value.value.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError as exc:
        raise EncodeError(f"String cannot be encoded: {exc}") from exc
    return stellar_xdr.SCVal(_T.SCV_STRING, str=stellar_xdr.SCString(raw))


def _encode_bytes(value: Bytes) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(_T.SCV_BYTES, bytes=stellar_xdr.SCBytes(bytes(value.value)))


def _encode_address(value: Address) -> stellar_xdr.SCVal:
    try:
        sc_address = StellarAddress(value.value).to_xdr_sc_address()
    except ValueError as exc:
        raise EncodeError(f"Invalid address {value.value!r}: {exc}") from exc
    return stellar_xdr.SCVal(_T.SCV_ADDRESS, address=sc_address)


def _encode_vec(value: Vec) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(_T.SCV_VEC, vec=stellar_xdr.SCVec([encode(item) for item in value.items]))


def _encode_map(value: Map) -> stellar_xdr.SCVal:
    entries = [stellar_xdr.SCMapEntry(key=encode(k), val=encode(v)) for k, v in value.entries]
    return stellar_xdr.SCVal(_T.SCV_MAP, map=stellar_xdr.SCMap(entries))


def _encode_enum(value: Enum) -> stellar_xdr.SCVal:
    items = [_encode_symbol(Symbol(value.variant))]
    items.extend(encode(item) for item in value.payload)
    return stellar_xdr.SCVal(_T.SCV_VEC, vec=stellar_xdr.SCVec(items))


_ENCODERS: dict[type, Callable[..., stellar_xdr.SCVal]] = {
    Void: _encode_void,
    Bool: _encode_bool,
    U32: _encode_u32,
    I32: _encode_i32,
    U64: _encode_u64,
    I64: _encode_i64,
    Timepoint: _encode_timepoint,
    Duration: _encode_duration,
    U128: _encode_u128,
    I128: _encode_i128,
    U256: _encode_u256,
    I256: _encode_i256,
    Symbol: _encode_symbol,
    String: _encode_string,
    Bytes: _encode_bytes,
    Address: _encode_address,
    Vec: _encode_vec,
    Map: _encode_map,
    Enum: _encode_enum,
}


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------

def decode(wire: stellar_xdr.SCVal) -> Value:
    """
    Decode an XDR SCVal into a Value.

    Enum variants come back as a Vec whose first item is a Symbol; use
    ``decode_enum`` when the caller knows the value is a variant.

    Raises:
        DecodeError: If the wire tag is not supported
    """
    if wire is None:
        raise DecodeError("Cannot decode a missing wire value")
    decoder = _DECODERS.get(wire.type)
    if decoder is None:
        raise DecodeError(f"Unsupported wire tag: {_tag_name(wire.type)}")
    return decoder(wire)


def _tag_name(tag: object) -> str:
    return getattr(tag, "name", str(tag))


def _decode_vec(wire: stellar_xdr.SCVal) -> Vec:
    items = wire.vec.sc_vec if wire.vec is not None else []
    return Vec(tuple(decode(item) for item in items))


def _decode_map(wire: stellar_xdr.SCVal) -> Map:
    entries = wire.map.sc_map if wire.map is not None else []
    return Map(tuple((decode(e.key), decode(e.val)) for e in entries))


def _decode_symbol(wire: stellar_xdr.SCVal) -> Symbol:
    try:
        return Symbol(wire.sym.sc_symbol.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise DecodeError(f"SCV_SYMBOL is not valid UTF-8: {exc}") from exc


def _decode_string(wire: stellar_xdr.SCVal) -> String:
    return String(wire.str.sc_string.decode("utf-8", errors="surrogateescape"))


def _decode_address(wire: stellar_xdr.SCVal) -> Address:
    return Address(StellarAddress.from_xdr_sc_address(wire.address).address)


_DECODERS: dict[object, Callable[[stellar_xdr.SCVal], Value]] = {
    _T.SCV_VOID: lambda w: Void(),
    _T.SCV_BOOL: lambda w: Bool(bool(w.b)),
    _T.SCV_U32: lambda w: U32(w.u32.uint32),
    _T.SCV_I32: lambda w: I32(w.i32.int32),
    _T.SCV_U64: lambda w: U64(w.u64.uint64),
    _T.SCV_I64: lambda w: I64(w.i64.int64),
    _T.SCV_TIMEPOINT: lambda w: Timepoint(w.timepoint.time_point.uint64),
    _T.SCV_DURATION: lambda w: Duration(w.duration.duration.uint64),
    _T.SCV_U128: lambda w: U128(join128(w.u128.hi.uint64, w.u128.lo.uint64)),
    _T.SCV_I128: lambda w: I128(join128(w.i128.hi.int64, w.i128.lo.uint64)),
    _T.SCV_U256: lambda w: U256(
        join256(w.u256.hi_hi.uint64, w.u256.hi_lo.uint64, w.u256.lo_hi.uint64, w.u256.lo_lo.uint64)
    ),
    _T.SCV_I256: lambda w: I256(
        join256(w.i256.hi_hi.int64, w.i256.hi_lo.uint64, w.i256.lo_hi.uint64, w.i256.lo_lo.uint64)
    ),
    _T.SCV_SYMBOL: _decode_symbol,
    _T.SCV_STRING: _decode_string,
    _T.SCV_BYTES: lambda w: Bytes(bytes(w.bytes.sc_bytes)),
    _T.SCV_ADDRESS: _decode_address,
    _T.SCV_VEC: _decode_vec,
    _T.SCV_MAP: _decode_map,
}


def decode_enum(wire: stellar_xdr.SCVal) -> Enum:
    """
    Decode a tagged variant encoded as ``vec[symbol, *payload]``.

    Raises:
        DecodeError: If the wire value is not a vec led by a symbol
    """
    value = decode(wire)
    return as_enum(value)


def as_enum(value: Value) -> Enum:
    if isinstance(value, Enum):
        return value
    if not isinstance(value, Vec) or len(value.items) == 0 or not isinstance(value.items[0], Symbol):
        raise DecodeError(f"Expected an enum variant (vec led by a symbol), got {type(value).__name__}")
    return Enum(value.items[0].value, tuple(value.items[1:]))


# ---------------------------------------------------------------------------
# Base64 XDR helpers
# ---------------------------------------------------------------------------

def to_xdr(value: Value) -> str:
    """Encode a Value to base64 XDR."""
    return encode(value).to_xdr()


def from_xdr(data: str) -> Value:
    """Decode base64 XDR into a Value."""
    try:
        wire = stellar_xdr.SCVal.from_xdr(data)
    except Exception as exc:
        raise DecodeError(f"Malformed SCVal XDR: {exc}") from exc
    return decode(wire)
