"""
Unit tests for deposit notes and their lifecycle.
"""

import hashlib

import pytest

from miya_sdk.core.errors import InvalidLengthError, NoteStateError
from miya_sdk.crypto.notes import (
    DepositNote,
    NoteManager,
    NoteStatus,
    generate_commitment,
    generate_nullifier_hash,
    generate_withdrawal_nullifier,
)


# --- Generation ---

def test_commitment_is_32_bytes():
    assert len(generate_commitment()) == 32


def test_commitments_are_distinct():
    seen = {generate_commitment() for _ in range(10_000)}
    assert len(seen) == 10_000


def test_nullifier_hash_is_deterministic():
    commitment, secret = b"\x01" * 32, b"\x02" * 32
    first = generate_nullifier_hash(commitment, secret)
    assert first == generate_nullifier_hash(commitment, secret)
    assert first == hashlib.sha256(commitment + secret).digest()


def test_nullifier_hash_depends_on_both_inputs():
    base = generate_nullifier_hash(b"\x01" * 32, b"\x02" * 32)
    assert base != generate_nullifier_hash(b"\x01" * 32, b"\x03" * 32)
    assert base != generate_nullifier_hash(b"\x04" * 32, b"\x02" * 32)


def test_nullifier_hash_rejects_short_inputs():
    with pytest.raises(InvalidLengthError):
        generate_nullifier_hash(b"\x01" * 31, b"\x02" * 32)


def test_withdrawal_nullifier_is_domain_separated():
    commitment, secret = b"\x01" * 32, b"\x02" * 32
    nullifier = generate_withdrawal_nullifier(secret)
    assert nullifier == generate_withdrawal_nullifier(secret)
    assert nullifier == hashlib.sha256(b"miya_nullifier" + secret).digest()
    assert nullifier != generate_nullifier_hash(commitment, secret)
    assert nullifier != generate_withdrawal_nullifier(b"\x03" * 32)


def test_withdrawal_nullifier_rejects_short_secret():
    with pytest.raises(InvalidLengthError):
        generate_withdrawal_nullifier(b"\x02" * 31)


def test_manager_static_helpers():
    assert len(NoteManager.generate_commitment()) == 32
    assert NoteManager.generate_nullifier_hash(b"\x01" * 32, b"\x02" * 32) == \
        generate_nullifier_hash(b"\x01" * 32, b"\x02" * 32)


# --- DepositNote ---

class TestDepositNote:

    def test_fresh_note(self):
        note = NoteManager().create_note(pool_address="PoolAddr")
        assert note.status is NoteStatus.UNUSED
        assert note.pool_address == "PoolAddr"
        assert note.timestamp > 0
        assert note.commitment != note.secret
        assert note.verify()

    def test_repr_hides_secret(self):
        note = NoteManager().create_note()
        assert note.secret.hex() not in repr(note)
        assert note.commitment.hex() in repr(note)

    def test_dict_round_trip(self):
        note = NoteManager().create_note(pool_address="PoolAddr").mark_deposited("sig1")
        restored = DepositNote.from_dict(note.to_dict())
        assert restored == note

    def test_tampered_dict_rejected(self):
        d = NoteManager().create_note().to_dict()
        d["secret"] = "00" * 32
        with pytest.raises(ValueError, match="integrity"):
            DepositNote.from_dict(d)


# --- Lifecycle ---

class TestLifecycle:

    def test_deposit_then_withdraw(self):
        note = NoteManager().create_note()
        deposited = note.mark_deposited("sig-deposit")
        assert deposited.status is NoteStatus.DEPOSITED
        assert deposited.signature == "sig-deposit"
        withdrawn = deposited.mark_withdrawn("sig-withdraw")
        assert withdrawn.status is NoteStatus.WITHDRAWN
        assert withdrawn.signature == "sig-withdraw"

    def test_transitions_do_not_mutate(self):
        note = NoteManager().create_note()
        note.mark_deposited("sig")
        assert note.status is NoteStatus.UNUSED

    def test_withdraw_is_not_repeatable(self):
        note = NoteManager().create_note().mark_deposited().mark_withdrawn()
        with pytest.raises(NoteStateError):
            note.mark_withdrawn()

    def test_cannot_withdraw_before_deposit(self):
        with pytest.raises(NoteStateError):
            NoteManager().create_note().mark_withdrawn()

    def test_unused_note_cannot_be_abandoned(self):
        with pytest.raises(NoteStateError):
            NoteManager().create_note().abandon()

    def test_abandoned_is_terminal(self):
        note = NoteManager().create_note().mark_deposited().abandon()
        assert note.status is NoteStatus.ABANDONED
        for target in NoteStatus:
            with pytest.raises(NoteStateError):
                note.transition(target)

    def test_transition_accepts_string_status(self):
        note = NoteManager().create_note().transition("deposited")
        assert note.status is NoteStatus.DEPOSITED
