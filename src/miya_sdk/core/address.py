"""
Ledger address utilities: base58 keys and program-owned address derivation.

Keys are 32 bytes, shown to humans as Base58 (Bitcoin alphabet). A
program-owned address is a 32-byte SHA-256 digest that is deliberately NOT a
valid ed25519 point, so no private key can ever sign for it:

    candidate = sha256(seed_0 || ... || seed_n || bump || program_id || "ProgramDerivedAddress")

`find_program_address` scans bump 255 down to 0 and returns the first
off-curve candidate. That first bump is canonical; the remote programs store it
and re-derive with it.

Seed families used by the MIYA programs:

    pool        "miya_pool", token_mint (32), deposit_amount (u64 LE)
    bridge      "miya_bridge"
    chain       "miya_chain", chain_id (u16 LE)
    token pair  "miya_token_pair", source_chain_id (u16 LE), target_chain_id (u16 LE), target_token_mint (32)
"""

from __future__ import annotations

import hashlib
import logging
from typing import Sequence

from ecdsa.eddsa import curve_ed25519
from ecdsa.ellipticcurve import PointEdwards
from ecdsa.errors import MalformedPointError

from miya_sdk.core.errors import (
    AddressError,
    InvalidFieldError,
    InvalidLengthError,
    InvalidSeedsError,
    NoValidAddressError,
)
from miya_sdk.core.seeds import PUBKEY_LENGTH, amount_seed, chain_id_seed, encode_fixed

logger = logging.getLogger("miya_sdk.address")

# Base58 alphabet (same as Bitcoin)
_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_ALPHABET_MAP = {char: i for i, char in enumerate(_ALPHABET)}

PDA_MARKER = b"ProgramDerivedAddress"
MAX_SEEDS = 16
MAX_SEED_LENGTH = 32

POOL_SEED = b"miya_pool"
BRIDGE_SEED = b"miya_bridge"
CHAIN_SEED = b"miya_chain"
TOKEN_PAIR_SEED = b"miya_token_pair"


# ------------------------------------------------------------------
# Base58 keys
# ------------------------------------------------------------------


def b58encode(data: bytes) -> str:
    """Encode bytes to a Base58 string."""
    n = int.from_bytes(data, "big")
    result = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_ALPHABET[remainder:remainder + 1])
    result.reverse()

    # Preserve leading zeros
    pad_size = 0
    for byte in data:
        if byte == 0:
            pad_size += 1
        else:
            break

    return (b"1" * pad_size + b"".join(result)).decode("ascii")


def b58decode(s: str) -> bytes:
    """
    Decode a Base58 string to bytes.

    Raises:
        AddressError: if the string contains a character outside the alphabet.
    """
    try:
        encoded = s.encode("ascii")
        n = 0
        for char in encoded:
            n = n * 58 + _ALPHABET_MAP[char]
    except (KeyError, UnicodeEncodeError):
        raise AddressError(f"Invalid Base58 string: {s!r}") from None

    if n == 0:
        result = b""
    else:
        byte_length = (n.bit_length() + 7) // 8
        result = n.to_bytes(byte_length, "big")

    # Each leading '1' in Base58 is a 0x00 byte
    pad_size = 0
    for char in encoded:
        if char == _ALPHABET[0]:
            pad_size += 1
        else:
            break

    return b"\x00" * pad_size + result


def validate_pubkey(key: str) -> bytes:
    """
    Validate a Base58 public key and return its 32 raw bytes.

    Raises:
        AddressError: if the key is not Base58 or is not 32 bytes long.
    """
    raw = b58decode(key)
    if len(raw) != PUBKEY_LENGTH:
        raise AddressError(f"Public key must be {PUBKEY_LENGTH} bytes, got {len(raw)}: {key}")
    return raw


def is_valid_pubkey(key: str) -> bool:
    """Check a Base58 public key without raising."""
    try:
        validate_pubkey(key)
        return True
    except AddressError:
        return False


def to_pubkey_bytes(key: str | bytes, field: str = "pubkey") -> bytes:
    """
    Coerce a Base58 string or raw 32-byte key into its 32 raw bytes.

    Raises:
        InvalidFieldError: if the string is not valid Base58.
        InvalidLengthError: if the key is not 32 bytes.
    """
    if isinstance(key, str):
        try:
            raw = b58decode(key)
        except AddressError as e:
            raise InvalidFieldError(field, str(e)) from None
    else:
        raw = key
    return encode_fixed(raw, PUBKEY_LENGTH, field)


def to_pubkey_str(key: str | bytes, field: str = "pubkey") -> str:
    """Normalize a key to its Base58 form."""
    return b58encode(to_pubkey_bytes(key, field))


# ------------------------------------------------------------------
# Program-owned address derivation
# ------------------------------------------------------------------


def is_on_curve(candidate: bytes) -> bool:
    """True if `candidate` decodes as a compressed ed25519 point."""
    try:
        PointEdwards.from_bytes(curve_ed25519, candidate)
    except MalformedPointError:
        return False
    return True


def _check_seeds(seeds: Sequence[bytes]) -> None:
    if len(seeds) > MAX_SEEDS:
        raise InvalidLengthError("seeds", f"at most {MAX_SEEDS} seeds", len(seeds))
    for i, seed in enumerate(seeds):
        if len(seed) > MAX_SEED_LENGTH:
            raise InvalidLengthError(f"seeds[{i}]", f"at most {MAX_SEED_LENGTH}", len(seed))


def create_program_address(seeds: Sequence[bytes], program_id: str | bytes) -> bytes:
    """
    Hash seeds and a program id into a program-owned address.

    The bump, if any, must already be the last element of `seeds`.

    Raises:
        InvalidSeedsError: if the hash lands on the ed25519 curve.
        InvalidLengthError: on too many or oversized seeds.
    """
    _check_seeds(seeds)
    program = to_pubkey_bytes(program_id, "program_id")

    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(program)
    hasher.update(PDA_MARKER)
    candidate = hasher.digest()

    if is_on_curve(candidate):
        raise InvalidSeedsError("Derived address is on the ed25519 curve")
    return candidate


def find_program_address(seeds: Sequence[bytes], program_id: str | bytes) -> tuple[str, int]:
    """
    Find the canonical program-owned address for `seeds`.

    Args:
        seeds: ordered seed byte strings, used raw (no length prefix).
        program_id: the owning program, Base58 or raw bytes.

    Returns:
        (address, bump): the Base58 address and the highest bump in [0, 255]
        whose candidate is off-curve.

    Raises:
        NoValidAddressError: if every bump yields an on-curve candidate.
    """
    seeds = [bytes(s) for s in seeds]
    # the bump is one more seed, so the caller may supply one fewer than the limit
    _check_seeds(seeds + [b"\x00"])
    for bump in range(255, -1, -1):
        try:
            address = create_program_address(seeds + [bytes([bump])], program_id)
        except InvalidSeedsError:
            continue
        encoded = b58encode(address)
        logger.debug(f"Derived {encoded} with bump {bump}")
        return encoded, bump
    raise NoValidAddressError(
        f"No off-curve address for {len(seeds)} seeds under program {to_pubkey_str(program_id)}"
    )


def find_pool_address(
    program_id: str | bytes, token_mint: str | bytes, deposit_amount: int
) -> tuple[str, int]:
    """Pool address for one (token, fixed deposit amount) pair."""
    return find_program_address(
        [POOL_SEED, to_pubkey_bytes(token_mint, "token_mint"), amount_seed(deposit_amount)],
        program_id,
    )


def find_bridge_address(program_id: str | bytes) -> tuple[str, int]:
    """The bridge's singleton state address."""
    return find_program_address([BRIDGE_SEED], program_id)


def find_chain_address(program_id: str | bytes, chain_id: int) -> tuple[str, int]:
    """Supported-chain address for a 16-bit chain id."""
    return find_program_address([CHAIN_SEED, chain_id_seed(chain_id)], program_id)


def find_token_pair_address(
    program_id: str | bytes,
    source_chain_id: int,
    target_chain_id: int,
    target_token_mint: str | bytes,
) -> tuple[str, int]:
    """Token-pair address for a (source chain, target chain, target mint) triple."""
    return find_program_address(
        [
            TOKEN_PAIR_SEED,
            chain_id_seed(source_chain_id, "source_chain_id"),
            chain_id_seed(target_chain_id, "target_chain_id"),
            to_pubkey_bytes(target_token_mint, "target_token_mint"),
        ],
        program_id,
    )


# Well-known programs referenced in instruction account lists
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
