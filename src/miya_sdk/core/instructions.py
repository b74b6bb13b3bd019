"""
Instruction payloads for the MIYA mixer and bridge programs.

Every instruction is a frozen dataclass that validates its fields on
construction and serializes to:

    byte 0       discriminant (unique within its program, stable across versions)
    bytes 1..7   zero padding (the programs expect an 8-byte header)
    bytes 8..    fields in declaration order; integers little-endian at their
                 width, variable-length byte strings as `u32 length || bytes`

The buffer size is computed from each struct's own field widths before any
byte is written, and the writer refuses to under- or over-fill it.

Mixer program                      Bridge program
    0  InitializePool                  0  InitializeBridge
    1  Deposit                         1  AddSupportedChain
    2  Withdraw                        2  UpdateChainStatus
    3  PausePool                       3  RegisterTokenPair
    4  ResumePool                      4  LockTokens
                                       5  ReleaseTokens
                                       6  PauseBridge
                                       7  ResumeBridge

Withdraw carries two optional trailing fields (relayer, fee). With
`OptionalFieldEncoding.BITMASK` a presence byte (bit 0 relayer, bit 1 fee)
precedes them. `OptionalFieldEncoding.LEGACY_LENGTH` appends them bare for
deployments that infer presence from the buffer length; in that mode both must
be supplied or neither.

`decode_instruction` parses data back into the matching struct, for checking
built instructions or inspecting ones pulled from the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar

from miya_sdk.core.accounts import AccountReader
from miya_sdk.core.address import to_pubkey_bytes
from miya_sdk.core.errors import InvalidFieldError, InvalidLengthError, MalformedInstructionError
from miya_sdk.core.seeds import (
    HASH_LENGTH,
    PUBKEY_LENGTH,
    encode_bool,
    encode_bytes,
    encode_fixed,
    encode_u16,
    encode_u64,
)

HEADER_SIZE = 8
LENGTH_PREFIX_SIZE = 4

MAX_CHAIN_NAME_LENGTH = 32
MAX_SOURCE_TOKEN_ADDRESS_LENGTH = 64
MAX_RECIPIENT_ADDRESS_LENGTH = 64
MAX_FEE_BPS = 10_000

RELAYER_PRESENT = 0x01
FEE_PRESENT = 0x02


class Program(str, Enum):
    MIXER = "mixer"
    BRIDGE = "bridge"


class OptionalFieldEncoding(str, Enum):
    """How Withdraw signals its optional relayer/fee tail."""
    BITMASK = "bitmask"
    LEGACY_LENGTH = "legacy_length"


class _Writer:
    """Fixed-capacity little-endian writer."""

    def __init__(self, size: int) -> None:
        self._buf = bytearray(size)
        self._pos = 0

    def write(self, chunk: bytes) -> None:
        end = self._pos + len(chunk)
        if end > len(self._buf):
            raise InvalidLengthError("instruction", len(self._buf), end)
        self._buf[self._pos:end] = chunk
        self._pos = end

    def skip_to(self, offset: int) -> None:
        self._pos = offset

    def finish(self) -> bytes:
        if self._pos != len(self._buf):
            raise InvalidLengthError("instruction", len(self._buf), self._pos)
        return bytes(self._buf)


def _check_bytes(value: bytes, field: str) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidFieldError(field, f"expected bytes, got {type(value).__name__}")
    return bytes(value)


@dataclass(frozen=True)
class InstructionData:
    """Base of the instruction union. Subclasses set PROGRAM and DISCRIMINANT."""

    PROGRAM: ClassVar[Program]
    DISCRIMINANT: ClassVar[int]

    def body_size(self) -> int:
        return 0

    def encoded_size(self) -> int:
        return HEADER_SIZE + self.body_size()

    def _write_body(self, w: _Writer) -> None:
        pass

    def serialize(self) -> bytes:
        w = _Writer(self.encoded_size())
        w.write(bytes([self.DISCRIMINANT]))
        w.skip_to(HEADER_SIZE)
        self._write_body(w)
        return w.finish()

    def __bytes__(self) -> bytes:
        return self.serialize()

    def _set(self, name: str, value: object) -> None:
        object.__setattr__(self, name, value)


# ==============================================================================
# Mixer instructions
# ==============================================================================


@dataclass(frozen=True)
class InitializePool(InstructionData):
    PROGRAM: ClassVar[Program] = Program.MIXER
    DISCRIMINANT: ClassVar[int] = 0

    token_mint: str | bytes
    deposit_amount: int

    def __post_init__(self) -> None:
        self._set("token_mint", to_pubkey_bytes(self.token_mint, "token_mint"))
        encode_u64(self.deposit_amount, "deposit_amount")

    def body_size(self) -> int:
        return PUBKEY_LENGTH + 8

    def _write_body(self, w: _Writer) -> None:
        w.write(self.token_mint)
        w.write(encode_u64(self.deposit_amount, "deposit_amount"))


@dataclass(frozen=True)
class Deposit(InstructionData):
    PROGRAM: ClassVar[Program] = Program.MIXER
    DISCRIMINANT: ClassVar[int] = 1

    commitment: bytes
    nullifier_hash: bytes

    def __post_init__(self) -> None:
        self._set("commitment", encode_fixed(self.commitment, HASH_LENGTH, "commitment"))
        self._set(
            "nullifier_hash", encode_fixed(self.nullifier_hash, HASH_LENGTH, "nullifier_hash")
        )

    def body_size(self) -> int:
        return HASH_LENGTH * 2

    def _write_body(self, w: _Writer) -> None:
        w.write(self.commitment)
        w.write(self.nullifier_hash)


@dataclass(frozen=True)
class Withdraw(InstructionData):
    """
    Spend one deposit. `proof` and `nullifier` come from the proving
    collaborator; this struct never sees note secrets.
    """

    PROGRAM: ClassVar[Program] = Program.MIXER
    DISCRIMINANT: ClassVar[int] = 2

    proof: bytes
    nullifier: bytes
    recipient: str | bytes
    relayer: str | bytes | None = None
    fee: int | None = None
    optional_encoding: OptionalFieldEncoding = OptionalFieldEncoding.BITMASK
    proof_length: int | None = None

    def __post_init__(self) -> None:
        self._set("proof", _check_bytes(self.proof, "proof"))
        if self.proof_length is not None and self.proof_length != len(self.proof):
            raise InvalidLengthError("proof", self.proof_length, len(self.proof))
        self._set("nullifier", encode_fixed(self.nullifier, HASH_LENGTH, "nullifier"))
        self._set("recipient", to_pubkey_bytes(self.recipient, "recipient"))
        if self.relayer is not None:
            self._set("relayer", to_pubkey_bytes(self.relayer, "relayer"))
        if self.fee is not None:
            encode_u64(self.fee, "fee")
        self._set("optional_encoding", OptionalFieldEncoding(self.optional_encoding))
        if self.optional_encoding is OptionalFieldEncoding.LEGACY_LENGTH and (
            (self.relayer is None) != (self.fee is None)
        ):
            raise InvalidFieldError(
                "relayer/fee",
                "length-inferred encoding needs both relayer and fee, or neither",
            )

    @property
    def presence_flags(self) -> int:
        flags = 0
        if self.relayer is not None:
            flags |= RELAYER_PRESENT
        if self.fee is not None:
            flags |= FEE_PRESENT
        return flags

    def body_size(self) -> int:
        size = LENGTH_PREFIX_SIZE + len(self.proof) + HASH_LENGTH + PUBKEY_LENGTH
        if self.optional_encoding is OptionalFieldEncoding.BITMASK:
            size += 1
        if self.relayer is not None:
            size += PUBKEY_LENGTH
        if self.fee is not None:
            size += 8
        return size

    def _write_body(self, w: _Writer) -> None:
        w.write(encode_bytes(self.proof, field="proof"))
        w.write(self.nullifier)
        w.write(self.recipient)
        if self.optional_encoding is OptionalFieldEncoding.BITMASK:
            w.write(bytes([self.presence_flags]))
        if self.relayer is not None:
            w.write(self.relayer)
        if self.fee is not None:
            w.write(encode_u64(self.fee, "fee"))


@dataclass(frozen=True)
class PausePool(InstructionData):
    PROGRAM: ClassVar[Program] = Program.MIXER
    DISCRIMINANT: ClassVar[int] = 3


@dataclass(frozen=True)
class ResumePool(InstructionData):
    PROGRAM: ClassVar[Program] = Program.MIXER
    DISCRIMINANT: ClassVar[int] = 4


# ==============================================================================
# Bridge instructions
# ==============================================================================


@dataclass(frozen=True)
class InitializeBridge(InstructionData):
    PROGRAM: ClassVar[Program] = Program.BRIDGE
    DISCRIMINANT: ClassVar[int] = 0


@dataclass(frozen=True)
class AddSupportedChain(InstructionData):
    PROGRAM: ClassVar[Program] = Program.BRIDGE
    DISCRIMINANT: ClassVar[int] = 1

    chain_id: int
    chain_name: str
    adapter_program: str | bytes

    def __post_init__(self) -> None:
        encode_u16(self.chain_id, "chain_id")
        if not isinstance(self.chain_name, str):
            raise InvalidFieldError(
                "chain_name", f"expected str, got {type(self.chain_name).__name__}"
            )
        name_len = len(self.chain_name.encode("utf-8"))
        if name_len > MAX_CHAIN_NAME_LENGTH:
            raise InvalidLengthError("chain_name", f"at most {MAX_CHAIN_NAME_LENGTH}", name_len)
        self._set("adapter_program", to_pubkey_bytes(self.adapter_program, "adapter_program"))

    @property
    def name_bytes(self) -> bytes:
        return self.chain_name.encode("utf-8")

    def body_size(self) -> int:
        return 2 + LENGTH_PREFIX_SIZE + len(self.name_bytes) + PUBKEY_LENGTH

    def _write_body(self, w: _Writer) -> None:
        w.write(encode_u16(self.chain_id, "chain_id"))
        w.write(encode_bytes(self.name_bytes, field="chain_name"))
        w.write(self.adapter_program)


@dataclass(frozen=True)
class UpdateChainStatus(InstructionData):
    PROGRAM: ClassVar[Program] = Program.BRIDGE
    DISCRIMINANT: ClassVar[int] = 2

    is_active: bool

    def __post_init__(self) -> None:
        encode_bool(self.is_active, "is_active")

    def body_size(self) -> int:
        return 1

    def _write_body(self, w: _Writer) -> None:
        w.write(encode_bool(self.is_active, "is_active"))


@dataclass(frozen=True)
class RegisterTokenPair(InstructionData):
    PROGRAM: ClassVar[Program] = Program.BRIDGE
    DISCRIMINANT: ClassVar[int] = 3

    source_chain_id: int
    target_chain_id: int
    source_token_address: bytes
    fee_percentage: int

    def __post_init__(self) -> None:
        encode_u16(self.source_chain_id, "source_chain_id")
        encode_u16(self.target_chain_id, "target_chain_id")
        self._set(
            "source_token_address",
            _check_bytes(self.source_token_address, "source_token_address"),
        )
        if len(self.source_token_address) > MAX_SOURCE_TOKEN_ADDRESS_LENGTH:
            raise InvalidLengthError(
                "source_token_address",
                f"at most {MAX_SOURCE_TOKEN_ADDRESS_LENGTH}",
                len(self.source_token_address),
            )
        encode_u16(self.fee_percentage, "fee_percentage")
        if self.fee_percentage > MAX_FEE_BPS:
            raise InvalidFieldError(
                "fee_percentage", f"{self.fee_percentage} bps exceeds {MAX_FEE_BPS}"
            )

    def body_size(self) -> int:
        return 2 + 2 + LENGTH_PREFIX_SIZE + len(self.source_token_address) + 2

    def _write_body(self, w: _Writer) -> None:
        w.write(encode_u16(self.source_chain_id, "source_chain_id"))
        w.write(encode_u16(self.target_chain_id, "target_chain_id"))
        w.write(encode_bytes(self.source_token_address, field="source_token_address"))
        w.write(encode_u16(self.fee_percentage, "fee_percentage"))


@dataclass(frozen=True)
class LockTokens(InstructionData):
    PROGRAM: ClassVar[Program] = Program.BRIDGE
    DISCRIMINANT: ClassVar[int] = 4

    amount: int
    target_chain_id: int
    recipient_address: bytes
    commitment: bytes

    def __post_init__(self) -> None:
        encode_u64(self.amount, "amount")
        encode_u16(self.target_chain_id, "target_chain_id")
        self._set(
            "recipient_address", _check_bytes(self.recipient_address, "recipient_address")
        )
        if not 0 < len(self.recipient_address) <= MAX_RECIPIENT_ADDRESS_LENGTH:
            raise InvalidLengthError(
                "recipient_address",
                f"1..{MAX_RECIPIENT_ADDRESS_LENGTH}",
                len(self.recipient_address),
            )
        self._set("commitment", encode_fixed(self.commitment, HASH_LENGTH, "commitment"))

    def body_size(self) -> int:
        return 8 + 2 + LENGTH_PREFIX_SIZE + len(self.recipient_address) + HASH_LENGTH

    def _write_body(self, w: _Writer) -> None:
        w.write(encode_u64(self.amount, "amount"))
        w.write(encode_u16(self.target_chain_id, "target_chain_id"))
        w.write(encode_bytes(self.recipient_address, field="recipient_address"))
        w.write(self.commitment)


@dataclass(frozen=True)
class ReleaseTokens(InstructionData):
    PROGRAM: ClassVar[Program] = Program.BRIDGE
    DISCRIMINANT: ClassVar[int] = 5

    amount: int
    source_chain_id: int
    proof: bytes
    nullifier: bytes
    proof_length: int | None = None

    def __post_init__(self) -> None:
        encode_u64(self.amount, "amount")
        encode_u16(self.source_chain_id, "source_chain_id")
        self._set("proof", _check_bytes(self.proof, "proof"))
        if self.proof_length is not None and self.proof_length != len(self.proof):
            raise InvalidLengthError("proof", self.proof_length, len(self.proof))
        self._set("nullifier", encode_fixed(self.nullifier, HASH_LENGTH, "nullifier"))

    def body_size(self) -> int:
        return 8 + 2 + LENGTH_PREFIX_SIZE + len(self.proof) + HASH_LENGTH

    def _write_body(self, w: _Writer) -> None:
        w.write(encode_u64(self.amount, "amount"))
        w.write(encode_u16(self.source_chain_id, "source_chain_id"))
        w.write(encode_bytes(self.proof, field="proof"))
        w.write(self.nullifier)


@dataclass(frozen=True)
class PauseBridge(InstructionData):
    PROGRAM: ClassVar[Program] = Program.BRIDGE
    DISCRIMINANT: ClassVar[int] = 6


@dataclass(frozen=True)
class ResumeBridge(InstructionData):
    PROGRAM: ClassVar[Program] = Program.BRIDGE
    DISCRIMINANT: ClassVar[int] = 7


MIXER_INSTRUCTIONS: dict[int, type[InstructionData]] = {
    cls.DISCRIMINANT: cls
    for cls in (InitializePool, Deposit, Withdraw, PausePool, ResumePool)
}

BRIDGE_INSTRUCTIONS: dict[int, type[InstructionData]] = {
    cls.DISCRIMINANT: cls
    for cls in (
        InitializeBridge,
        AddSupportedChain,
        UpdateChainStatus,
        RegisterTokenPair,
        LockTokens,
        ReleaseTokens,
        PauseBridge,
        ResumeBridge,
    )
}


# ==============================================================================
# Decoding (parse instruction data back into its struct)
# ==============================================================================


class _InstructionReader(AccountReader):
    error = MalformedInstructionError


def _read_initialize_pool(r: _InstructionReader) -> InitializePool:
    return InitializePool(
        token_mint=r.take(PUBKEY_LENGTH, "token_mint"),
        deposit_amount=r.u64("deposit_amount"),
    )


def _read_deposit(r: _InstructionReader) -> Deposit:
    return Deposit(
        commitment=r.take(HASH_LENGTH, "commitment"),
        nullifier_hash=r.take(HASH_LENGTH, "nullifier_hash"),
    )


def _read_withdraw(r: _InstructionReader, optional_encoding: OptionalFieldEncoding) -> Withdraw:
    proof = r.vec("proof")
    nullifier = r.take(HASH_LENGTH, "nullifier")
    recipient = r.take(PUBKEY_LENGTH, "recipient")
    relayer = fee = None
    if optional_encoding is OptionalFieldEncoding.BITMASK:
        flags = r.u8("presence_flags")
        if flags & ~(RELAYER_PRESENT | FEE_PRESENT):
            raise MalformedInstructionError("Withdraw", f"unknown presence bits {flags:#04x}")
        if flags & RELAYER_PRESENT:
            relayer = r.take(PUBKEY_LENGTH, "relayer")
        if flags & FEE_PRESENT:
            fee = r.u64("fee")
    elif r.remaining:
        relayer = r.take(PUBKEY_LENGTH, "relayer")
        fee = r.u64("fee")
    return Withdraw(
        proof=proof,
        nullifier=nullifier,
        recipient=recipient,
        relayer=relayer,
        fee=fee,
        optional_encoding=optional_encoding,
    )


def _read_add_supported_chain(r: _InstructionReader) -> AddSupportedChain:
    return AddSupportedChain(
        chain_id=r.u16("chain_id"),
        chain_name=r.string("chain_name"),
        adapter_program=r.take(PUBKEY_LENGTH, "adapter_program"),
    )


def _read_update_chain_status(r: _InstructionReader) -> UpdateChainStatus:
    return UpdateChainStatus(is_active=r.boolean("is_active"))


def _read_register_token_pair(r: _InstructionReader) -> RegisterTokenPair:
    return RegisterTokenPair(
        source_chain_id=r.u16("source_chain_id"),
        target_chain_id=r.u16("target_chain_id"),
        source_token_address=r.vec("source_token_address"),
        fee_percentage=r.u16("fee_percentage"),
    )


def _read_lock_tokens(r: _InstructionReader) -> LockTokens:
    return LockTokens(
        amount=r.u64("amount"),
        target_chain_id=r.u16("target_chain_id"),
        recipient_address=r.vec("recipient_address"),
        commitment=r.take(HASH_LENGTH, "commitment"),
    )


def _read_release_tokens(r: _InstructionReader) -> ReleaseTokens:
    return ReleaseTokens(
        amount=r.u64("amount"),
        source_chain_id=r.u16("source_chain_id"),
        proof=r.vec("proof"),
        nullifier=r.take(HASH_LENGTH, "nullifier"),
    )


_READERS: dict[type[InstructionData], Callable[[_InstructionReader], InstructionData]] = {
    InitializePool: _read_initialize_pool,
    Deposit: _read_deposit,
    AddSupportedChain: _read_add_supported_chain,
    UpdateChainStatus: _read_update_chain_status,
    RegisterTokenPair: _read_register_token_pair,
    LockTokens: _read_lock_tokens,
    ReleaseTokens: _read_release_tokens,
}


def decode_instruction(
    program: Program | str,
    data: bytes,
    optional_encoding: OptionalFieldEncoding = OptionalFieldEncoding.BITMASK,
) -> InstructionData:
    """
    Parse instruction data for `program` back into its struct.

    Args:
        program: which program's discriminant space `data[0]` belongs to.
        data: the full instruction data, header included.
        optional_encoding: how a Withdraw tail was written.

    Raises:
        MalformedInstructionError: on an unknown program, a short or padded-wrong
            header, an unknown discriminant, a truncated field or trailing bytes.
        EncodingError: if a decoded field breaks a limit the encoder enforces.
    """
    try:
        program = Program(program)
    except ValueError:
        raise MalformedInstructionError(str(program), "unknown program") from None
    registry = MIXER_INSTRUCTIONS if program is Program.MIXER else BRIDGE_INSTRUCTIONS
    data = bytes(data)
    if len(data) < HEADER_SIZE:
        raise MalformedInstructionError(program.value, f"{len(data)} bytes is shorter than the header")
    cls = registry.get(data[0])
    if cls is None:
        raise MalformedInstructionError(program.value, f"unknown discriminant {data[0]}")
    if any(data[1:HEADER_SIZE]):
        raise MalformedInstructionError(cls.__name__, "header padding is not zero")

    r = _InstructionReader(data[HEADER_SIZE:], cls.__name__)
    if cls is Withdraw:
        instruction = _read_withdraw(r, OptionalFieldEncoding(optional_encoding))
    elif cls in _READERS:
        instruction = _READERS[cls](r)
    else:
        instruction = cls()
    if r.remaining:
        raise MalformedInstructionError(cls.__name__, f"{r.remaining} trailing bytes")
    return instruction
