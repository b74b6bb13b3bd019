"""
MixerProtocolClient: fixed-denomination privacy pool flows.

    deposit     mint a fresh note, publish (commitment, nullifier_hash)
    withdraw    spend with a proof + withdrawal nullifier from the prover
    read        decode the Pool account at its derived address

Instruction builders are pure and return an `Instruction` for the caller's
submitter. The `submit_*` helpers only advance a note after the submitter
reports finality; an abandoned or failed submission leaves the note untouched.

SECURITY: the note returned by `deposit` is the only way to recover the funds.
          Persist it before submitting the instruction.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from miya_sdk.core.address import (
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    find_pool_address,
)
from miya_sdk.core.accounts import decode_pool
from miya_sdk.core.errors import InvalidFieldError, LedgerRpcError, NoteStateError
from miya_sdk.core.instructions import (
    Deposit,
    InitializePool,
    OptionalFieldEncoding,
    PausePool,
    Program,
    ResumePool,
    Withdraw,
)
from miya_sdk.core.models import Instruction, Pool, VerificationResult
from miya_sdk.core.rpc import AccountSource, InstructionSubmitter
from miya_sdk.crypto.notes import DepositNote, NoteManager, NoteStatus
from miya_sdk.crypto.prover import Prover
from miya_sdk.protocol.base import ProtocolClient, meta

logger = logging.getLogger("miya_sdk.mixer")


class MixerProtocolClient(ProtocolClient):
    """
    Client for the mixer program.

    Usage:
        mixer = MixerProtocolClient(config.mixer_program_id, source=rpc, submitter=wallet)
        note, ix = mixer.deposit(user, mint, 1_000_000_000, user_ata, pool_ata)
        save_encrypted(note.to_dict())
        note = mixer.submit_deposit(note, ix, signers=[keypair])
    """

    PROGRAM = Program.MIXER

    def __init__(
        self,
        program_id: str,
        source: AccountSource | None = None,
        submitter: InstructionSubmitter | None = None,
        prover: Prover | None = None,
        notes: NoteManager | None = None,
        optional_encoding: OptionalFieldEncoding = OptionalFieldEncoding.BITMASK,
    ) -> None:
        super().__init__(program_id, source, submitter)
        self.prover = prover
        self.notes = notes or NoteManager()
        self.optional_encoding = OptionalFieldEncoding(optional_encoding)

    def pool_address(self, token_mint: str | bytes, deposit_amount: int) -> tuple[str, int]:
        """(address, bump) of the pool for this token and denomination."""
        return find_pool_address(self.program_id, token_mint, deposit_amount)

    # ------------------------------------------------------------------
    # Instruction builders
    # ------------------------------------------------------------------

    def initialize_pool(
        self, authority: str, token_mint: str | bytes, deposit_amount: int
    ) -> Instruction:
        """Create the pool account for (token_mint, deposit_amount); `authority` pays and signs."""
        data = InitializePool(token_mint=token_mint, deposit_amount=deposit_amount)
        pool, _ = self.pool_address(token_mint, deposit_amount)
        return self._build(data, [
            meta(pool, writable=True),
            meta(authority, signer=True, writable=True),
            meta(token_mint),
            meta(SYSTEM_PROGRAM_ID),
        ])

    def deposit(
        self,
        user: str,
        token_mint: str | bytes,
        deposit_amount: int,
        user_token_account: str,
        pool_token_account: str,
    ) -> tuple[DepositNote, Instruction]:
        """
        Mint a fresh note and build the Deposit instruction that publishes it.

        Returns:
            (note, instruction): the UNUSED note, already bound to the pool
            address, and the instruction carrying its commitment and
            nullifier hash. The note's secret is not in the instruction.
        """
        pool, _ = self.pool_address(token_mint, deposit_amount)
        note = self.notes.create_note(pool_address=pool)
        data = Deposit(commitment=note.commitment, nullifier_hash=note.nullifier_hash)
        instruction = self._build(data, [
            meta(pool, writable=True),
            meta(user, signer=True),
            meta(user_token_account, writable=True),
            meta(pool_token_account, writable=True),
            meta(TOKEN_PROGRAM_ID),
        ])
        logger.debug(f"Minted note {note.commitment.hex()[:16]}... for pool {pool}")
        return note, instruction

    def withdraw(
        self,
        token_mint: str | bytes,
        deposit_amount: int,
        proof: bytes,
        nullifier: bytes,
        recipient: str,
        pool_token_account: str,
        recipient_token_account: str,
        relayer: str | None = None,
        relayer_token_account: str | None = None,
        fee: int | None = None,
    ) -> Instruction:
        """
        Build a Withdraw instruction from prover output.

        Args:
            proof:      proof bytes from the prover, embedded verbatim
            nullifier:  32-byte nullifier the proof reveals
            recipient:  account credited with the withdrawal
            relayer:    optional relayer paid `fee` out of the denomination

        Raises:
            InvalidFieldError: if `fee` exceeds the denomination, or a relayer
                and its token account are not given together.
        """
        if fee is not None and fee > deposit_amount:
            raise InvalidFieldError("fee", f"{fee} exceeds deposit amount {deposit_amount}")
        if relayer is not None and relayer_token_account is None:
            raise InvalidFieldError("relayer_token_account", "required when a relayer is set")
        if relayer is None and relayer_token_account is not None:
            raise InvalidFieldError("relayer_token_account", "given without a relayer")

        data = Withdraw(
            proof=proof,
            nullifier=nullifier,
            recipient=recipient,
            relayer=relayer,
            fee=fee,
            optional_encoding=self.optional_encoding,
        )
        pool, _ = self.pool_address(token_mint, deposit_amount)
        accounts = [
            meta(pool, writable=True),
            meta(pool_token_account, writable=True),
            meta(recipient_token_account, writable=True),
        ]
        if relayer is not None:
            accounts.append(meta(relayer_token_account, writable=True))
        accounts.append(meta(TOKEN_PROGRAM_ID))
        return self._build(data, accounts)

    def pause_pool(self, authority: str, token_mint: str | bytes, deposit_amount: int) -> Instruction:
        pool, _ = self.pool_address(token_mint, deposit_amount)
        return self._build(PausePool(), [meta(pool, writable=True), meta(authority, signer=True)])

    def resume_pool(self, authority: str, token_mint: str | bytes, deposit_amount: int) -> Instruction:
        pool, _ = self.pool_address(token_mint, deposit_amount)
        return self._build(ResumePool(), [meta(pool, writable=True), meta(authority, signer=True)])

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def get_pool_info(self, token_mint: str | bytes, deposit_amount: int) -> Pool | None:
        """Decoded Pool for (token_mint, deposit_amount), or None if not initialized."""
        pool, _ = self.pool_address(token_mint, deposit_amount)
        return self._fetch("pool", pool, decode_pool)

    # ------------------------------------------------------------------
    # Proving and submission
    # ------------------------------------------------------------------

    def prepare_proof(self, note: DepositNote, recipient: str) -> tuple[bytes, bytes]:
        """
        Ask the prover for a withdrawal proof for a deposited note.

        Returns:
            (proof, nullifier) ready for `withdraw`. The nullifier is the
            note's withdrawal nullifier, never the hash published at deposit.

        Raises:
            RuntimeError: if no prover was supplied.
            NoteStateError: if the note is not DEPOSITED.
        """
        if self.prover is None:
            raise RuntimeError("Prover required to build withdrawal proofs")
        if note.status is not NoteStatus.DEPOSITED:
            raise NoteStateError(f"Only deposited notes can be withdrawn, note is {note.status.value}")
        nullifier = note.withdrawal_nullifier
        proof = self.prover.prove(note.commitment, nullifier, recipient)
        return proof, nullifier

    def submit_deposit(
        self, note: DepositNote, instruction: Instruction, signers: Sequence[Any] = ()
    ) -> DepositNote:
        """
        Submit a Deposit and return the note moved to DEPOSITED.

        The note is only advanced once the submitter returns a signature; any
        exception leaves the caller's note exactly as it was.
        """
        if note.status is not NoteStatus.UNUSED:
            raise NoteStateError(f"Note already {note.status.value}")
        signature = self.submit(instruction, signers)
        return note.mark_deposited(signature)

    def submit_withdrawal(
        self, instruction: Instruction, signers: Sequence[Any] = ()
    ) -> VerificationResult:
        """
        Submit a Withdraw and report the outcome.

        A ledger rejection (spent nullifier, bad proof, paused pool) comes back
        as `success=False` with the node's message. On success the caller
        should `mark_withdrawn` the note it spent.
        """
        try:
            signature = self.submit(instruction, signers)
        except LedgerRpcError as e:
            logger.warning(f"Withdrawal rejected: {e}")
            return VerificationResult(success=False, error=str(e))
        return VerificationResult(success=True, signature=signature)
