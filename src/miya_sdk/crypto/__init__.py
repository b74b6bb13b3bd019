"""
miya_sdk.crypto: client-side secret material for the mixer.

Provides:
- Deposit notes (commitment, secret, nullifier hash) and their lifecycle
- The Prover interface for the external zero-knowledge proving system
"""

from miya_sdk.crypto.notes import (
    COMMITMENT_LENGTH,
    SECRET_LENGTH,
    DepositNote,
    NoteManager,
    NoteStatus,
    generate_commitment,
    generate_nullifier_hash,
    generate_secret,
    generate_withdrawal_nullifier,
)
from miya_sdk.crypto.prover import Prover, PublicInputs

__all__ = [
    "COMMITMENT_LENGTH",
    "SECRET_LENGTH",
    "DepositNote",
    "NoteManager",
    "NoteStatus",
    "Prover",
    "PublicInputs",
    "generate_commitment",
    "generate_nullifier_hash",
    "generate_secret",
    "generate_withdrawal_nullifier",
]
