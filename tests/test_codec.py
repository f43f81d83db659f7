"""Unit tests for the SCVal codec."""

from __future__ import annotations

import pytest
from stellar_sdk import Keypair
from stellar_sdk import xdr as stellar_xdr

from slender.errors import DecodeError, EncodeError
from slender.scval import (
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
    Vec,
    Void,
    as_enum,
    decode,
    decode_enum,
    encode,
    from_xdr,
    to_xdr,
)
from slender.scval.codec import join128, split_i128


ACCOUNT = Keypair.from_raw_ed25519_seed(bytes(32)).public_key


class TestRoundTrip:
    """decode(encode(v)) == v, including the edges of every range."""

    @pytest.mark.parametrize(
        "value",
        [
            Void(),
            Bool(True),
            Bool(False),
            U32(0),
            U32(2**32 - 1),
            I32(-(2**31)),
            I32(2**31 - 1),
            U64(2**64 - 1),
            I64(-(2**63)),
            I64(2**63 - 1),
            U128(2**128 - 1),
            I128(-(2**127)),
            I128(2**127 - 1),
            I128(100_000_000_000),
            U256(2**256 - 1),
            I256(-(2**255)),
            I256(2**255 - 1),
            I256(-12345678901234567890123456789),
            Timepoint(1_700_000_000),
            Duration(86_400),
            Symbol("XLM"),
            Symbol(""),
            String("héllo"),
            Bytes(b""),
            Bytes(b"\x00\xff\x10"),
            Address(ACCOUNT),
            Vec(),
            Vec((U32(1), Symbol("a"), Vec((Bool(False),)))),
            Map(),
            Map(((Symbol("b"), U32(2)), (Symbol("a"), U32(1)))),
        ],
    )
    def test_round_trip(self, value) -> None:
        assert decode(encode(value)) == value

    def test_contract_address_round_trip(self, contract_id: str) -> None:
        assert decode(encode(Address(contract_id))) == Address(contract_id)

    def test_base64_round_trip(self) -> None:
        value = Map.of_symbols({"debt": I128(5), "npv": I128(-3)})
        assert from_xdr(to_xdr(value)) == value

    def test_map_keeps_entry_order(self) -> None:
        value = Map(((Symbol("z"), U32(1)), (Symbol("a"), U32(2))))
        assert decode(encode(value)).keys() == [Symbol("z"), Symbol("a")]


class TestWideIntegers:
    def test_minus_one_i128(self) -> None:
        wire = encode(I128(-1))
        assert wire.i128.hi.int64 == -1
        assert wire.i128.lo.uint64 == 2**64 - 1
        assert decode(wire) == I128(-1)

    def test_split_keeps_sign_in_high_word(self) -> None:
        hi, lo = split_i128(-(2**64))
        assert (hi, lo) == (-1, 0)
        assert join128(hi, lo) == -(2**64)

    def test_u128_words(self) -> None:
        wire = encode(U128(2**64 + 7))
        assert wire.u128.hi.uint64 == 1
        assert wire.u128.lo.uint64 == 7

    def test_minus_one_i256(self) -> None:
        assert decode(encode(I256(-1))) == I256(-1)


class TestEncodeErrors:
    @pytest.mark.parametrize(
        "value",
        [
            U32(-1),
            U32(2**32),
            I32(2**31),
            U64(2**64),
            I64(-(2**63) - 1),
            U128(-1),
            I128(2**127),
            U256(2**256),
            I256(-(2**255) - 1),
            Timepoint(-1),
        ],
    )
    def test_out_of_range(self, value) -> None:
        with pytest.raises(EncodeError):
            encode(value)

    def test_bool_is_not_an_integer(self) -> None:
        with pytest.raises(EncodeError):
            encode(U32(True))

    def test_symbol_too_long(self) -> None:
        with pytest.raises(EncodeError):
            encode(Symbol("x" * 33))

    def test_symbol_bad_chars(self) -> None:
        with pytest.raises(EncodeError):
            encode(Symbol("not a symbol"))

    def test_bad_address(self) -> None:
        with pytest.raises(EncodeError):
            encode(Address("GNOTANADDRESS"))

    def test_not_a_value(self) -> None:
        with pytest.raises(EncodeError):
            encode(42)

    def test_encode_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            encode(U32(-1))


class TestDecodeErrors:
    def test_unsupported_tag(self) -> None:
        wire = stellar_xdr.SCVal(stellar_xdr.SCValType.SCV_LEDGER_KEY_CONTRACT_INSTANCE)
        with pytest.raises(DecodeError, match="SCV_LEDGER_KEY_CONTRACT_INSTANCE"):
            decode(wire)

    def test_non_utf8_string_is_kept(self) -> None:
        wire = stellar_xdr.SCVal(stellar_xdr.SCValType.SCV_STRING, str=stellar_xdr.SCString(b"\xff\xfe"))
        value = decode(wire)
        assert isinstance(value, String)
        assert encode(value).str.sc_string == b"\xff\xfe"

    def test_non_utf8_symbol(self) -> None:
        wire = stellar_xdr.SCVal(stellar_xdr.SCValType.SCV_SYMBOL, sym=stellar_xdr.SCSymbol(b"\xff"))
        with pytest.raises(DecodeError, match="SCV_SYMBOL"):
            decode(wire)

    def test_malformed_base64(self) -> None:
        with pytest.raises(DecodeError):
            from_xdr("not-xdr")


class TestEnum:
    """
    Enums have no wire tag of their own: ``vec[symbol, *payload]`` is also a
    plain Vec. Generic ``decode`` therefore yields a Vec on purpose, and
    ``decode_enum`` / ``as_enum`` give back the Enum.
    """

    def test_unit_variant(self) -> None:
        value = Enum("Active")
        assert decode_enum(encode(value)) == value

    def test_payload_variant(self) -> None:
        value = Enum("Liquidate", (Address(ACCOUNT), I128(-1), Bytes(b"\x01")))
        assert decode_enum(encode(value)) == value

    def test_generic_decode_yields_vec(self) -> None:
        value = Enum("Frozen", (U32(1),))
        decoded = decode(encode(value))
        assert decoded != value
        assert decoded == Vec((Symbol("Frozen"), U32(1)))
        assert as_enum(decoded) == Enum("Frozen", (U32(1),))

    def test_not_an_enum(self) -> None:
        with pytest.raises(DecodeError):
            decode_enum(encode(Vec((U32(1),))))
        with pytest.raises(DecodeError):
            as_enum(Vec())
