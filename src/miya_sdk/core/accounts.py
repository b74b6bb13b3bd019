"""
Decoders (and matching encoders) for persisted MIYA account layouts.

Every account starts with an 8-byte discriminator, `sha256("account:<Name>")[:8]`,
followed by its fields in declaration order. Integers are little-endian;
variable-length fields are `u32 length || bytes`; booleans are a single 0/1 byte.

    Pool            authority[32] token_mint[32] deposit_amount u64 total_deposits u64
                    is_active bool bump u8
    Bridge          authority[32] is_active bool supported_chain_count u16
                    total_locked_tokens u64 total_released_tokens u64 bump u8
    SupportedChain  chain_id u16 chain_name string adapter_program[32] is_active bool
                    total_volume u64
    TokenPair       source_chain_id u16 target_chain_id u16 source_token_address vec
                    target_token_mint[32] fee_percentage u16 is_active bool
                    total_locked u64 total_released u64 bump u8

Accounts are allocated at their maximum size, so trailing zero bytes after the
last field are normal and ignored. Every read is bounds-checked; a short or
inconsistent buffer raises MalformedAccountError instead of reading past the end.
"""

from __future__ import annotations

import hashlib
from typing import Callable

from pydantic import BaseModel

from miya_sdk.core.address import b58encode, to_pubkey_bytes
from miya_sdk.core.errors import MalformedAccountError, MiyaError
from miya_sdk.core.models import BridgeState, Pool, SupportedChain, TokenPair
from miya_sdk.core.seeds import (
    PUBKEY_LENGTH,
    encode_bool,
    encode_bytes,
    encode_u8,
    encode_u16,
    encode_u64,
)

DISCRIMINATOR_SIZE = 8


def account_discriminator(name: str) -> bytes:
    """The 8-byte header the programs write at the front of `name` accounts."""
    return hashlib.sha256(f"account:{name}".encode()).digest()[:DISCRIMINATOR_SIZE]


POOL_DISCRIMINATOR = account_discriminator("Pool")
BRIDGE_DISCRIMINATOR = account_discriminator("Bridge")
SUPPORTED_CHAIN_DISCRIMINATOR = account_discriminator("SupportedChain")
TOKEN_PAIR_DISCRIMINATOR = account_discriminator("TokenPair")

# Allocated sizes, header included
POOL_SPACE = DISCRIMINATOR_SIZE + 32 + 32 + 8 + 8 + 1 + 1
BRIDGE_SPACE = DISCRIMINATOR_SIZE + 32 + 1 + 2 + 8 + 8 + 1
SUPPORTED_CHAIN_SPACE = DISCRIMINATOR_SIZE + 2 + (4 + 32) + 32 + 1 + 8
TOKEN_PAIR_SPACE = DISCRIMINATOR_SIZE + 2 + 2 + (4 + 64) + 32 + 2 + 1 + 8 + 8 + 1


class AccountReader:
    """Bounds-checked cursor over raw account bytes."""

    error: type[MiyaError] = MalformedAccountError

    def __init__(self, data: bytes, kind: str) -> None:
        self._data = bytes(data)
        self._pos = 0
        self.kind = kind

    @property
    def offset(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def take(self, n: int, field: str) -> bytes:
        if n > self.remaining:
            raise self.error(
                self.kind,
                f"{field} needs {n} bytes at offset {self._pos}, "
                f"only {self.remaining} remain",
            )
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def u8(self, field: str) -> int:
        return self.take(1, field)[0]

    def u16(self, field: str) -> int:
        return int.from_bytes(self.take(2, field), "little")

    def u32(self, field: str) -> int:
        return int.from_bytes(self.take(4, field), "little")

    def u64(self, field: str) -> int:
        return int.from_bytes(self.take(8, field), "little")

    def boolean(self, field: str) -> bool:
        value = self.u8(field)
        if value not in (0, 1):
            raise self.error(self.kind, f"{field} is {value}, expected 0 or 1")
        return value == 1

    def pubkey(self, field: str) -> str:
        return b58encode(self.take(PUBKEY_LENGTH, field))

    def vec(self, field: str) -> bytes:
        length = self.u32(f"{field}.length")
        # check before slicing so a corrupt prefix never drives the read
        if length > self.remaining:
            raise self.error(
                self.kind,
                f"{field} declares {length} bytes but only {self.remaining} remain",
            )
        return self.take(length, field)

    def string(self, field: str) -> str:
        raw = self.vec(field)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise self.error(self.kind, f"{field} is not valid UTF-8: {e}") from None

    def header(self, expected: bytes, strict: bool) -> None:
        found = self.take(DISCRIMINATOR_SIZE, "discriminator")
        if strict and found != expected:
            raise self.error(
                self.kind,
                f"discriminator {found.hex()} does not match {expected.hex()}",
            )


# ==============================================================================
# Decoders
# ==============================================================================


def decode_pool(data: bytes, address: str | None = None, strict: bool = True) -> Pool:
    """
    Decode a Pool account.

    Raises:
        MalformedAccountError: on a short buffer, bad flag byte, or (strict) wrong header.
    """
    r = AccountReader(data, "Pool")
    r.header(POOL_DISCRIMINATOR, strict)
    authority = r.pubkey("authority")
    token_mint = r.pubkey("token_mint")
    deposit_amount = r.u64("deposit_amount")
    total_deposits = r.u64("total_deposits")
    is_active = r.boolean("is_active")
    bump = r.u8("bump") if r.remaining else None
    return Pool(
        address=address,
        authority=authority,
        token_mint=token_mint,
        deposit_amount=deposit_amount,
        total_deposits=total_deposits,
        is_active=is_active,
        bump=bump,
    )


def decode_bridge(data: bytes, address: str | None = None, strict: bool = True) -> BridgeState:
    r = AccountReader(data, "Bridge")
    r.header(BRIDGE_DISCRIMINATOR, strict)
    authority = r.pubkey("authority")
    is_active = r.boolean("is_active")
    chain_count = r.u16("supported_chain_count")
    total_locked = r.u64("total_locked_tokens")
    total_released = r.u64("total_released_tokens")
    bump = r.u8("bump") if r.remaining else None
    return BridgeState(
        address=address,
        authority=authority,
        is_active=is_active,
        supported_chain_count=chain_count,
        total_locked_tokens=total_locked,
        total_released_tokens=total_released,
        bump=bump,
    )


def decode_supported_chain(
    data: bytes, address: str | None = None, strict: bool = True
) -> SupportedChain:
    r = AccountReader(data, "SupportedChain")
    r.header(SUPPORTED_CHAIN_DISCRIMINATOR, strict)
    chain_id = r.u16("chain_id")
    chain_name = r.string("chain_name")
    adapter_program = r.pubkey("adapter_program")
    is_active = r.boolean("is_active")
    total_volume = r.u64("total_volume")
    return SupportedChain(
        address=address,
        chain_id=chain_id,
        chain_name=chain_name,
        adapter_program=adapter_program,
        is_active=is_active,
        total_volume=total_volume,
    )


def decode_token_pair(data: bytes, address: str | None = None, strict: bool = True) -> TokenPair:
    r = AccountReader(data, "TokenPair")
    r.header(TOKEN_PAIR_DISCRIMINATOR, strict)
    source_chain_id = r.u16("source_chain_id")
    target_chain_id = r.u16("target_chain_id")
    source_token_address = r.vec("source_token_address")
    target_token_mint = r.pubkey("target_token_mint")
    fee_percentage = r.u16("fee_percentage")
    is_active = r.boolean("is_active")
    total_locked = r.u64("total_locked")
    total_released = r.u64("total_released")
    bump = r.u8("bump") if r.remaining else None
    return TokenPair(
        address=address,
        source_chain_id=source_chain_id,
        target_chain_id=target_chain_id,
        source_token_address=source_token_address,
        target_token_mint=target_token_mint,
        fee_percentage=fee_percentage,
        is_active=is_active,
        total_locked=total_locked,
        total_released=total_released,
        bump=bump,
    )


DECODERS: dict[str, Callable[..., BaseModel]] = {
    "pool": decode_pool,
    "bridge": decode_bridge,
    "supported_chain": decode_supported_chain,
    "token_pair": decode_token_pair,
}


def decode_account(kind: str, data: bytes, address: str | None = None, strict: bool = True):
    """Decode `data` with the decoder registered for `kind`."""
    if kind not in DECODERS:
        raise ValueError(f"Unknown account kind: {kind}. Available: {list(DECODERS)}")
    return DECODERS[kind](data, address=address, strict=strict)


# ==============================================================================
# Encoders (mirror the program's own writes; used for fixtures and checks)
# ==============================================================================


def _pad(body: bytes, space: int | None) -> bytes:
    if space is None or len(body) >= space:
        return body
    return body + b"\x00" * (space - len(body))


def encode_pool(pool: Pool, space: int | None = None) -> bytes:
    body = b"".join([
        POOL_DISCRIMINATOR,
        to_pubkey_bytes(pool.authority, "authority"),
        to_pubkey_bytes(pool.token_mint, "token_mint"),
        encode_u64(pool.deposit_amount, "deposit_amount"),
        encode_u64(pool.total_deposits, "total_deposits"),
        encode_bool(pool.is_active, "is_active"),
        encode_u8(pool.bump, "bump") if pool.bump is not None else b"",
    ])
    return _pad(body, space)


def encode_bridge(bridge: BridgeState, space: int | None = None) -> bytes:
    body = b"".join([
        BRIDGE_DISCRIMINATOR,
        to_pubkey_bytes(bridge.authority, "authority"),
        encode_bool(bridge.is_active, "is_active"),
        encode_u16(bridge.supported_chain_count, "supported_chain_count"),
        encode_u64(bridge.total_locked_tokens, "total_locked_tokens"),
        encode_u64(bridge.total_released_tokens, "total_released_tokens"),
        encode_u8(bridge.bump, "bump") if bridge.bump is not None else b"",
    ])
    return _pad(body, space)


def encode_supported_chain(chain: SupportedChain, space: int | None = None) -> bytes:
    body = b"".join([
        SUPPORTED_CHAIN_DISCRIMINATOR,
        encode_u16(chain.chain_id, "chain_id"),
        encode_bytes(chain.chain_name.encode("utf-8"), field="chain_name"),
        to_pubkey_bytes(chain.adapter_program, "adapter_program"),
        encode_bool(chain.is_active, "is_active"),
        encode_u64(chain.total_volume, "total_volume"),
    ])
    return _pad(body, space)


def encode_token_pair(pair: TokenPair, space: int | None = None) -> bytes:
    body = b"".join([
        TOKEN_PAIR_DISCRIMINATOR,
        encode_u16(pair.source_chain_id, "source_chain_id"),
        encode_u16(pair.target_chain_id, "target_chain_id"),
        encode_bytes(pair.source_token_address, field="source_token_address"),
        to_pubkey_bytes(pair.target_token_mint, "target_token_mint"),
        encode_u16(pair.fee_percentage, "fee_percentage"),
        encode_bool(pair.is_active, "is_active"),
        encode_u64(pair.total_locked, "total_locked"),
        encode_u64(pair.total_released, "total_released"),
        encode_u8(pair.bump, "bump") if pair.bump is not None else b"",
    ])
    return _pad(body, space)
