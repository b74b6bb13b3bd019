"""
Deposit notes: the client-held secret material behind every mixer deposit.

    commitment      32 random bytes, published in the Deposit instruction
    secret          32 random bytes, never leaves the client
    nullifier_hash  sha256(commitment || secret), published in the Deposit instruction

At withdrawal the prover reveals a nullifier derived from the retained secret
under its own domain tag:

    nullifier       sha256("miya_nullifier" || secret), revealed in the Withdraw instruction

It shares no published input with the deposit, so the program can reject a
second spend without learning which deposit is being spent. The raw secret is never placed in any instruction.

Note lifecycle:

    UNUSED --(deposit confirmed)--> DEPOSITED --(withdrawal confirmed)--> WITHDRAWN
                                              \\--(given up)-----------> ABANDONED

DEPOSITED -> WITHDRAWN is the only nullifier-consuming transition. It is
irreversible and must not be repeated; the ledger enforces "only once", the
client only refuses to help a caller try.

SECURITY: a DepositNote must be stored securely by the caller.
          Loss = loss of funds. Disclosure = loss of privacy.
"""

from __future__ import annotations

import hashlib
import secrets
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from miya_sdk.core.errors import NoteStateError
from miya_sdk.core.seeds import encode_fixed

COMMITMENT_LENGTH = 32
SECRET_LENGTH = 32
NULLIFIER_DOMAIN = b"miya_nullifier"


class NoteStatus(str, Enum):
    UNUSED = "unused"
    DEPOSITED = "deposited"
    WITHDRAWN = "withdrawn"
    ABANDONED = "abandoned"


_TRANSITIONS: dict[NoteStatus, frozenset[NoteStatus]] = {
    NoteStatus.UNUSED: frozenset({NoteStatus.DEPOSITED}),
    NoteStatus.DEPOSITED: frozenset({NoteStatus.WITHDRAWN, NoteStatus.ABANDONED}),
    NoteStatus.WITHDRAWN: frozenset(),
    NoteStatus.ABANDONED: frozenset(),
}


def generate_commitment() -> bytes:
    """32 bytes from the OS CSPRNG."""
    return secrets.token_bytes(COMMITMENT_LENGTH)


def generate_secret() -> bytes:
    """32 bytes from the OS CSPRNG; the half of a note that stays client-side."""
    return secrets.token_bytes(SECRET_LENGTH)


def generate_nullifier_hash(commitment: bytes, secret: bytes) -> bytes:
    """
    One-way hash binding a commitment to its secret.

    Deterministic, so a withdrawer holding (commitment, secret) can always
    reproduce it later without reading ledger state.

    Raises:
        InvalidLengthError: if either input is not 32 bytes.
    """
    commitment = encode_fixed(commitment, COMMITMENT_LENGTH, "commitment")
    secret = encode_fixed(secret, SECRET_LENGTH, "secret")
    return hashlib.sha256(commitment + secret).digest()


def generate_withdrawal_nullifier(secret: bytes) -> bytes:
    """
    The nullifier a withdrawal reveals. Never equal to the nullifier hash
    published at deposit, and not computable from anything the ledger saw.

    Raises:
        InvalidLengthError: if `secret` is not 32 bytes.
    """
    secret = encode_fixed(secret, SECRET_LENGTH, "secret")
    return hashlib.sha256(NULLIFIER_DOMAIN + secret).digest()


@dataclass(frozen=True)
class DepositNote:
    """
    A deposit note. Immutable: status transitions return a new note.

    `pool_address` and `signature` are filled in as the note moves through
    its lifecycle; they are bookkeeping, not secrets.
    """
    commitment: bytes
    secret: bytes
    nullifier_hash: bytes
    timestamp: int
    """Creation time, milliseconds since the Unix epoch."""

    pool_address: str | None = None
    status: NoteStatus = NoteStatus.UNUSED
    signature: str | None = None

    def __repr__(self) -> str:
        # never echo the secret into logs or tracebacks
        return (
            f"DepositNote(commitment={self.commitment.hex()}, "
            f"nullifier_hash={self.nullifier_hash.hex()}, "
            f"pool_address={self.pool_address}, status={self.status.value})"
        )

    def verify(self) -> bool:
        """True if nullifier_hash really is H(commitment || secret)."""
        return generate_nullifier_hash(self.commitment, self.secret) == self.nullifier_hash

    @property
    def withdrawal_nullifier(self) -> bytes:
        return generate_withdrawal_nullifier(self.secret)

    def transition(self, new_status: NoteStatus, signature: str | None = None) -> DepositNote:
        """
        Move the note to `new_status`.

        Raises:
            NoteStateError: if the lifecycle does not allow the move.
        """
        new_status = NoteStatus(new_status)
        if new_status not in _TRANSITIONS[self.status]:
            raise NoteStateError(
                f"Cannot move note from {self.status.value} to {new_status.value}"
            )
        return replace(self, status=new_status, signature=signature or self.signature)

    def mark_deposited(self, signature: str | None = None) -> DepositNote:
        return self.transition(NoteStatus.DEPOSITED, signature)

    def mark_withdrawn(self, signature: str | None = None) -> DepositNote:
        return self.transition(NoteStatus.WITHDRAWN, signature)

    def abandon(self) -> DepositNote:
        return self.transition(NoteStatus.ABANDONED)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dict (for encrypted storage)."""
        return {
            "commitment": self.commitment.hex(),
            "secret": self.secret.hex(),
            "nullifier_hash": self.nullifier_hash.hex(),
            "timestamp": self.timestamp,
            "pool_address": self.pool_address,
            "status": self.status.value,
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DepositNote:
        """
        Deserialize from a dict.

        Raises:
            ValueError: if the stored nullifier hash does not match the stored secret.
        """
        note = cls(
            commitment=bytes.fromhex(d["commitment"]),
            secret=bytes.fromhex(d["secret"]),
            nullifier_hash=bytes.fromhex(d["nullifier_hash"]),
            timestamp=int(d["timestamp"]),
            pool_address=d.get("pool_address"),
            status=NoteStatus(d.get("status", NoteStatus.UNUSED.value)),
            signature=d.get("signature"),
        )
        if not note.verify():
            raise ValueError(
                "Note integrity check failed: nullifier hash doesn't match (commitment, secret)"
            )
        return note


class NoteManager:
    """
    Mints deposit notes.

    Usage:
        notes = NoteManager()
        note = notes.create_note(pool_address)
        # publish note.commitment and note.nullifier_hash; keep note.secret
    """

    @staticmethod
    def generate_commitment() -> bytes:
        return generate_commitment()

    @staticmethod
    def generate_nullifier_hash(commitment: bytes, secret: bytes) -> bytes:
        return generate_nullifier_hash(commitment, secret)

    def create_note(self, pool_address: str | None = None) -> DepositNote:
        """Generate a fresh, UNUSED note."""
        commitment = generate_commitment()
        secret = generate_secret()
        return DepositNote(
            commitment=commitment,
            secret=secret,
            nullifier_hash=generate_nullifier_hash(commitment, secret),
            timestamp=int(time.time() * 1000),
            pool_address=pool_address,
        )
