"""
Canonical byte encodings for derivation seeds and instruction fields.

Integers are little-endian at their declared width. Variable-length byte
strings are written as `u32 length || bytes` inside instruction and account
payloads, but are used raw as derivation seeds: a seed's boundary is fixed by
its position in the seed list, not by its content.
"""

from __future__ import annotations

from miya_sdk.core.errors import InvalidFieldError, InvalidLengthError

PUBKEY_LENGTH = 32
HASH_LENGTH = 32

U8_MAX = 0xFF
U16_MAX = 0xFFFF
U32_MAX = 0xFFFF_FFFF
U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


def _encode_uint(value: int, width: int, field: str) -> bytes:
    # bool is an int subclass; a flag passed where an amount belongs is a bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(field, f"expected an integer, got {type(value).__name__}")
    limit = (1 << (8 * width)) - 1
    if value < 0 or value > limit:
        raise InvalidFieldError(field, f"{value} is outside [0, {limit}]")
    return value.to_bytes(width, "little")


def encode_u8(value: int, field: str = "u8") -> bytes:
    return _encode_uint(value, 1, field)


def encode_u16(value: int, field: str = "u16") -> bytes:
    """Encode a 16-bit value such as a chain id or a fee in basis points."""
    return _encode_uint(value, 2, field)


def encode_u32(value: int, field: str = "u32") -> bytes:
    return _encode_uint(value, 4, field)


def encode_u64(value: int, field: str = "u64") -> bytes:
    """Encode a 64-bit amount or counter."""
    return _encode_uint(value, 8, field)


def encode_bool(value: bool, field: str = "bool") -> bytes:
    if not isinstance(value, bool):
        raise InvalidFieldError(field, f"expected a bool, got {type(value).__name__}")
    return b"\x01" if value else b"\x00"


def encode_bytes(
    data: bytes,
    declared_length: int | None = None,
    field: str = "bytes",
    max_length: int | None = None,
) -> bytes:
    """
    Encode a variable-length byte string as `u32 length || data`.

    Args:
        data: the raw bytes to embed.
        declared_length: if given, the length the caller claims `data` has.
            A mismatch is rejected rather than silently re-measured.
        field: field name used in error messages.
        max_length: optional upper bound enforced by the remote program.

    Raises:
        InvalidLengthError: if the declared length is wrong or the bound is exceeded.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidFieldError(field, f"expected bytes, got {type(data).__name__}")
    data = bytes(data)
    if declared_length is not None and declared_length != len(data):
        raise InvalidLengthError(field, declared_length, len(data))
    if max_length is not None and len(data) > max_length:
        raise InvalidLengthError(field, f"at most {max_length}", len(data))
    return encode_u32(len(data), field=f"{field}.length") + data


def encode_fixed(data: bytes, width: int, field: str) -> bytes:
    """Check that `data` is exactly `width` bytes and return it as bytes."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidFieldError(field, f"expected bytes, got {type(data).__name__}")
    data = bytes(data)
    if len(data) != width:
        raise InvalidLengthError(field, width, len(data))
    return data


def chain_id_seed(chain_id: int, field: str = "chain_id") -> bytes:
    """Seed bytes for a 16-bit chain id (2 bytes LE)."""
    return encode_u16(chain_id, field=field)


def amount_seed(amount: int, field: str = "deposit_amount") -> bytes:
    """Seed bytes for a 64-bit amount (8 bytes LE)."""
    return encode_u64(amount, field=field)
