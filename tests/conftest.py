"""
Shared fixtures: in-memory stand-ins for the ledger, the submitter and the prover.
No network is touched anywhere in the unit suite.
"""

from __future__ import annotations

import pytest

from miya_sdk.core.address import b58encode
from miya_sdk.core.errors import LedgerRpcError
from miya_sdk.crypto.prover import PublicInputs

# Program ids used across the suite; both decode to 32 bytes
MIXER_PROGRAM_ID = "Mixer11111111111111111111111111111111111111"
BRIDGE_PROGRAM_ID = "Bridge1111111111111111111111111111111111111"

ZERO_MINT = "11111111111111111111111111111111"


def key(n: int) -> str:
    """A deterministic, valid 32-byte base58 key."""
    return b58encode(bytes([n]) * 32)


class FakeAccountSource:
    """Dict-backed AccountSource; records every address it is asked for."""

    def __init__(self, accounts: dict[str, bytes] | None = None):
        self.accounts = dict(accounts or {})
        self.requests: list[str] = []

    def get_account_data(self, address: str) -> bytes | None:
        self.requests.append(address)
        return self.accounts.get(address)


class FakeSubmitter:
    """Returns sequential signatures, or raises `error` if one is set."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.submitted = []

    def submit(self, instruction, signers=()) -> str:
        if self.error is not None:
            raise self.error
        self.submitted.append((instruction, tuple(signers)))
        return f"sig{len(self.submitted)}"


class FakeProver:
    """Proof = recipient || nullifier, so tests can check what was proven."""

    def __init__(self):
        self.calls = []

    def prove(self, commitment: bytes, nullifier: bytes, recipient: str) -> bytes:
        self.calls.append((commitment, nullifier, recipient))
        return recipient.encode("ascii") + nullifier

    def verify(self, proof: bytes, public_inputs: PublicInputs) -> bool:
        return proof == public_inputs.recipient.encode("ascii") + public_inputs.nullifier


@pytest.fixture
def source():
    return FakeAccountSource()


@pytest.fixture
def submitter():
    return FakeSubmitter()


@pytest.fixture
def prover():
    return FakeProver()


@pytest.fixture
def rejecting_submitter():
    return FakeSubmitter(error=LedgerRpcError("nullifier already spent", "sendTransaction", -32002))
