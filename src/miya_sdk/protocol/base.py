"""
Shared plumbing for the mixer and bridge clients: account reads, instruction
assembly and submission through the caller's collaborators.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence, TypeVar

from miya_sdk.core.address import to_pubkey_str, validate_pubkey
from miya_sdk.core.errors import MalformedAccountError
from miya_sdk.core.instructions import InstructionData, Program
from miya_sdk.core.models import AccountMeta, Instruction
from miya_sdk.core.rpc import AccountSource, InstructionSubmitter

logger = logging.getLogger("miya_sdk.protocol")

T = TypeVar("T")


def meta(pubkey: str | bytes, signer: bool = False, writable: bool = False) -> AccountMeta:
    return AccountMeta(pubkey=to_pubkey_str(pubkey), is_signer=signer, is_writable=writable)


class ProtocolClient:
    """
    Base for the program clients. Holds nothing but the program id and the
    collaborators it was given; every call is independent.
    """

    PROGRAM: Program

    def __init__(
        self,
        program_id: str,
        source: AccountSource | None = None,
        submitter: InstructionSubmitter | None = None,
    ) -> None:
        validate_pubkey(program_id)
        self.program_id = program_id
        self.source = source
        self.submitter = submitter

    def _build(self, data: InstructionData, accounts: list[AccountMeta]) -> Instruction:
        if data.PROGRAM is not self.PROGRAM:
            raise TypeError(
                f"{type(data).__name__} belongs to the {data.PROGRAM.value} program, "
                f"not {self.PROGRAM.value}"
            )
        instruction = Instruction(
            program_id=self.program_id,
            accounts=accounts,
            data=data.serialize(),
        )
        logger.debug(
            f"Built {type(data).__name__} ({len(instruction.data)} bytes, {len(accounts)} accounts)"
        )
        return instruction

    def _fetch(
        self,
        kind: str,
        address: str,
        decoder: Callable[..., T],
    ) -> T | None:
        """
        Read and decode one account.

        Returns:
            The decoded view, or None if no account lives at `address`.

        Raises:
            RuntimeError: if the client was built without an account source.
            MalformedAccountError: if the bytes do not match the layout.
        """
        if self.source is None:
            raise RuntimeError("Account source required for state queries")
        data = self.source.get_account_data(address)
        if data is None:
            logger.debug(f"No {kind} account at {address}")
            return None
        try:
            return decoder(data, address=address)
        except MalformedAccountError as e:
            logger.warning(f"Could not decode {kind} account at {address}: {e}")
            raise

    def submit(self, instruction: Instruction, signers: Sequence[Any] = ()) -> str:
        """
        Hand `instruction` to the submitter and wait for finality.

        Raises:
            RuntimeError: if the client was built without a submitter.
        """
        if self.submitter is None:
            raise RuntimeError("Instruction submitter required for submission")
        signature = self.submitter.submit(instruction, signers)
        logger.info(
            f"Confirmed {self.PROGRAM.value} instruction {instruction.discriminant}: {signature}"
        )
        return signature
