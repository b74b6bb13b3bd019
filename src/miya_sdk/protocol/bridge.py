"""
BridgeProtocolClient: cross-chain lock/release flows and bridge administration.

Lock side: tokens move from the user into the bridge vault and a fresh
commitment is published for the relayers watching the target chain.

Release side: a proof from the source chain releases tokens from the vault,
minus the token pair's fee (basis points, rounded down).

Fees and active flags can change between a read and a submission. Use
`quote_release` right before submitting and re-quote if time has passed.
"""

from __future__ import annotations

import logging

from miya_sdk.core.accounts import decode_bridge, decode_supported_chain, decode_token_pair
from miya_sdk.core.address import (
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    find_bridge_address,
    find_chain_address,
    find_token_pair_address,
)
from miya_sdk.core.instructions import (
    AddSupportedChain,
    InitializeBridge,
    LockTokens,
    PauseBridge,
    Program,
    RegisterTokenPair,
    ReleaseTokens,
    ResumeBridge,
    UpdateChainStatus,
)
from miya_sdk.core.models import (
    BridgeState,
    Instruction,
    ReleaseQuote,
    SupportedChain,
    TokenPair,
)
from miya_sdk.crypto.notes import generate_commitment
from miya_sdk.protocol.base import ProtocolClient, meta

logger = logging.getLogger("miya_sdk.bridge")


class BridgeProtocolClient(ProtocolClient):
    """
    Client for the bridge program.

    Usage:
        bridge = BridgeProtocolClient(config.bridge_program_id, source=rpc)
        commitment, ix = bridge.lock_tokens(user, user_ata, vault, 1, 2, b"0xabc...", mint, 5_000)
        quote = bridge.quote_release(1, 2, mint, 5_000)
    """

    PROGRAM = Program.BRIDGE

    def bridge_address(self) -> tuple[str, int]:
        return find_bridge_address(self.program_id)

    def chain_address(self, chain_id: int) -> tuple[str, int]:
        return find_chain_address(self.program_id, chain_id)

    def token_pair_address(
        self, source_chain_id: int, target_chain_id: int, target_token_mint: str | bytes
    ) -> tuple[str, int]:
        return find_token_pair_address(
            self.program_id, source_chain_id, target_chain_id, target_token_mint
        )

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def initialize_bridge(self, authority: str) -> Instruction:
        bridge, _ = self.bridge_address()
        return self._build(InitializeBridge(), [
            meta(bridge, writable=True),
            meta(authority, signer=True, writable=True),
            meta(SYSTEM_PROGRAM_ID),
        ])

    def add_supported_chain(
        self, authority: str, chain_id: int, chain_name: str, adapter_program: str
    ) -> Instruction:
        """Register an external chain. `chain_name` is at most 32 UTF-8 bytes."""
        data = AddSupportedChain(
            chain_id=chain_id, chain_name=chain_name, adapter_program=adapter_program
        )
        bridge, _ = self.bridge_address()
        chain, _ = self.chain_address(chain_id)
        return self._build(data, [
            meta(bridge),
            meta(chain, writable=True),
            meta(authority, signer=True, writable=True),
            meta(SYSTEM_PROGRAM_ID),
        ])

    def update_chain_status(self, authority: str, chain_id: int, is_active: bool) -> Instruction:
        data = UpdateChainStatus(is_active=is_active)
        bridge, _ = self.bridge_address()
        chain, _ = self.chain_address(chain_id)
        return self._build(data, [
            meta(bridge),
            meta(chain, writable=True),
            meta(authority, signer=True, writable=True),
            meta(SYSTEM_PROGRAM_ID),
        ])

    def register_token_pair(
        self,
        authority: str,
        source_chain_id: int,
        target_chain_id: int,
        source_token_address: bytes,
        target_token_mint: str,
        fee_percentage: int,
    ) -> Instruction:
        """
        Map a source-chain token onto a local mint.

        Args:
            source_token_address: raw address bytes on the source chain (at most 64)
            fee_percentage:       release fee in basis points, 0..10000
        """
        data = RegisterTokenPair(
            source_chain_id=source_chain_id,
            target_chain_id=target_chain_id,
            source_token_address=source_token_address,
            fee_percentage=fee_percentage,
        )
        bridge, _ = self.bridge_address()
        pair, _ = self.token_pair_address(source_chain_id, target_chain_id, target_token_mint)
        source_chain, _ = self.chain_address(source_chain_id)
        target_chain, _ = self.chain_address(target_chain_id)
        return self._build(data, [
            meta(bridge),
            meta(pair, writable=True),
            meta(source_chain),
            meta(target_chain),
            meta(target_token_mint),
            meta(authority, signer=True, writable=True),
            meta(SYSTEM_PROGRAM_ID),
        ])

    def pause_bridge(self, authority: str) -> Instruction:
        bridge, _ = self.bridge_address()
        return self._build(PauseBridge(), [meta(bridge, writable=True), meta(authority, signer=True)])

    def resume_bridge(self, authority: str) -> Instruction:
        bridge, _ = self.bridge_address()
        return self._build(ResumeBridge(), [meta(bridge, writable=True), meta(authority, signer=True)])

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def lock_tokens(
        self,
        user: str,
        user_token_account: str,
        bridge_vault: str,
        source_chain_id: int,
        target_chain_id: int,
        recipient_address: bytes,
        token_mint: str,
        amount: int,
    ) -> tuple[bytes, Instruction]:
        """
        Build a LockTokens instruction with a freshly minted commitment.

        Returns:
            (commitment, instruction). Keep the commitment: the target chain
            release is matched against it.
        """
        commitment = generate_commitment()
        data = LockTokens(
            amount=amount,
            target_chain_id=target_chain_id,
            recipient_address=recipient_address,
            commitment=commitment,
        )
        bridge, _ = self.bridge_address()
        pair, _ = self.token_pair_address(source_chain_id, target_chain_id, token_mint)
        instruction = self._build(data, [
            meta(bridge, writable=True),
            meta(pair, writable=True),
            meta(user, signer=True, writable=True),
            meta(user_token_account, writable=True),
            meta(bridge_vault, writable=True),
            meta(TOKEN_PROGRAM_ID),
        ])
        return commitment, instruction

    def release_tokens(
        self,
        recipient: str,
        recipient_token_account: str,
        bridge_vault: str,
        fee_account: str,
        source_chain_id: int,
        target_chain_id: int,
        token_mint: str,
        amount: int,
        proof: bytes,
        nullifier: bytes,
    ) -> Instruction:
        """Build a ReleaseTokens instruction from caller-supplied proof and nullifier."""
        data = ReleaseTokens(
            amount=amount,
            source_chain_id=source_chain_id,
            proof=proof,
            nullifier=nullifier,
        )
        bridge, _ = self.bridge_address()
        pair, _ = self.token_pair_address(source_chain_id, target_chain_id, token_mint)
        return self._build(data, [
            meta(bridge, writable=True),
            meta(pair, writable=True),
            meta(recipient, signer=True, writable=True),
            meta(recipient_token_account, writable=True),
            meta(bridge_vault, writable=True),
            meta(fee_account, writable=True),
            meta(TOKEN_PROGRAM_ID),
        ])

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def get_bridge_info(self) -> BridgeState | None:
        bridge, _ = self.bridge_address()
        return self._fetch("bridge", bridge, decode_bridge)

    def get_chain_info(self, chain_id: int) -> SupportedChain | None:
        chain, _ = self.chain_address(chain_id)
        return self._fetch("supported_chain", chain, decode_supported_chain)

    def get_token_pair_info(
        self, source_chain_id: int, target_chain_id: int, target_token_mint: str
    ) -> TokenPair | None:
        pair, _ = self.token_pair_address(source_chain_id, target_chain_id, target_token_mint)
        return self._fetch("token_pair", pair, decode_token_pair)

    def quote_release(
        self, source_chain_id: int, target_chain_id: int, target_token_mint: str, amount: int
    ) -> ReleaseQuote | None:
        """
        Quote a release against a fresh read of the token pair.

        Returns:
            The quote, or None if the pair is not registered.
        """
        pair = self.get_token_pair_info(source_chain_id, target_chain_id, target_token_mint)
        if pair is None:
            return None
        fee = pair.fee_for(amount)
        if not pair.is_active:
            logger.warning(f"Token pair {pair.address} is inactive; release would be rejected")
        return ReleaseQuote(
            amount=amount,
            fee=fee,
            net_amount=amount - fee,
            fee_percentage=pair.fee_percentage,
            pair_active=pair.is_active,
        )
