"""
Interface to the external zero-knowledge proving system.

The SDK does not generate or check proofs. A withdrawal needs proof bytes
and a nullifier from a real prover; the clients call it through this
interface and embed whatever bytes it returns. Supplying an implementation
(a circuit, a proving service, a hardware signer) is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class PublicInputs:
    """The values a withdrawal proof is checked against."""
    nullifier: bytes
    recipient: str
    pool_address: str | None = None
    relayer: str | None = None
    fee: int | None = None


@runtime_checkable
class Prover(Protocol):
    def prove(self, commitment: bytes, nullifier: bytes, recipient: str) -> bytes:
        """Return proof bytes binding `nullifier` to a known commitment and to `recipient`."""
        ...

    def verify(self, proof: bytes, public_inputs: PublicInputs) -> bool:
        """Check `proof` against `public_inputs`."""
        ...
