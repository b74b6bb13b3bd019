"""
Unit tests for the seed and field encoders.
"""

import pytest

from miya_sdk.core.errors import EncodingError, InvalidFieldError, InvalidLengthError
from miya_sdk.core.seeds import (
    U16_MAX,
    U64_MAX,
    amount_seed,
    chain_id_seed,
    encode_bool,
    encode_bytes,
    encode_fixed,
    encode_u8,
    encode_u16,
    encode_u32,
    encode_u64,
)


class TestIntegers:

    def test_little_endian_widths(self):
        assert encode_u8(0xAB) == b"\xab"
        assert encode_u16(0x0102) == b"\x02\x01"
        assert encode_u32(0x01020304) == b"\x04\x03\x02\x01"
        assert encode_u64(1) == b"\x01" + b"\x00" * 7

    def test_u64_max_round_trips(self):
        assert encode_u64(U64_MAX) == b"\xff" * 8
        assert int.from_bytes(encode_u64(U64_MAX), "little") == U64_MAX

    def test_u64_overflow_rejected(self):
        with pytest.raises(InvalidFieldError) as exc:
            encode_u64(U64_MAX + 1, "deposit_amount")
        assert exc.value.field == "deposit_amount"

    def test_u16_overflow_rejected(self):
        with pytest.raises(InvalidFieldError):
            encode_u16(U16_MAX + 1)

    def test_negative_rejected(self):
        with pytest.raises(InvalidFieldError):
            encode_u32(-1)

    def test_bool_is_not_an_amount(self):
        with pytest.raises(InvalidFieldError):
            encode_u64(True)

    def test_float_rejected(self):
        with pytest.raises(InvalidFieldError):
            encode_u64(1.5)

    def test_encoding_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            encode_u8(256)


def test_encode_bool():
    assert encode_bool(True) == b"\x01"
    assert encode_bool(False) == b"\x00"
    with pytest.raises(InvalidFieldError):
        encode_bool(1)


class TestVariableLength:

    def test_length_prefix(self):
        assert encode_bytes(b"abc") == b"\x03\x00\x00\x00abc"

    def test_empty(self):
        assert encode_bytes(b"") == b"\x00\x00\x00\x00"

    def test_declared_length_mismatch(self):
        with pytest.raises(InvalidLengthError) as exc:
            encode_bytes(b"\x00" * 10, declared_length=12, field="proof")
        assert exc.value.expected == 12
        assert exc.value.actual == 10

    def test_declared_length_match(self):
        assert encode_bytes(b"\x00" * 12, declared_length=12)[:4] == b"\x0c\x00\x00\x00"

    def test_max_length(self):
        encode_bytes(b"a" * 64, max_length=64)
        with pytest.raises(InvalidLengthError):
            encode_bytes(b"a" * 65, max_length=64)

    def test_str_rejected(self):
        with pytest.raises(EncodingError):
            encode_bytes("abc")


def test_encode_fixed():
    assert encode_fixed(bytearray(32), 32, "commitment") == b"\x00" * 32
    with pytest.raises(InvalidLengthError):
        encode_fixed(b"\x00" * 31, 32, "commitment")


def test_seed_helpers():
    assert chain_id_seed(1) == b"\x01\x00"
    assert chain_id_seed(U16_MAX) == b"\xff\xff"
    assert amount_seed(1_000_000_000) == (1_000_000_000).to_bytes(8, "little")
    with pytest.raises(InvalidFieldError):
        chain_id_seed(65536)
