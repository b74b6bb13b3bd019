"""
MiyaClient: one entry point wiring both program clients to a shared config.
"""

from __future__ import annotations

import logging

from miya_sdk.config import ProtocolConfig
from miya_sdk.core.rpc import AccountSource, InstructionSubmitter, LedgerRpc
from miya_sdk.crypto.notes import NoteManager
from miya_sdk.crypto.prover import Prover
from miya_sdk.protocol.bridge import BridgeProtocolClient
from miya_sdk.protocol.mixer import MixerProtocolClient

logger = logging.getLogger("miya_sdk.client")


class MiyaClient:
    """
    Mixer and bridge clients built from one ProtocolConfig.

    If no account source is given, a LedgerRpc is opened on `config.rpc_url`
    and closed again by `close()`.

    Usage:
        config = ProtocolConfig(mixer_program_id=..., bridge_program_id=...)
        with MiyaClient(config, submitter=wallet) as client:
            pool = client.mixer.get_pool_info(mint, 1_000_000_000)
            quote = client.bridge.quote_release(1, 2, mint, 5_000)
    """

    def __init__(
        self,
        config: ProtocolConfig,
        source: AccountSource | None = None,
        submitter: InstructionSubmitter | None = None,
        prover: Prover | None = None,
        notes: NoteManager | None = None,
    ) -> None:
        self.config = config
        self._owned_rpc: LedgerRpc | None = None
        if source is None:
            self._owned_rpc = LedgerRpc(
                rpc_url=config.rpc_url,
                commitment=config.commitment,
                timeout=config.timeout,
            )
            source = self._owned_rpc
            logger.debug(f"Opened ledger RPC at {config.rpc_url}")
        self.source = source
        self.submitter = submitter

        self.mixer = MixerProtocolClient(
            config.mixer_program_id,
            source=source,
            submitter=submitter,
            prover=prover,
            notes=notes,
            optional_encoding=config.withdraw_optional_encoding,
        )
        self.bridge = BridgeProtocolClient(
            config.bridge_program_id,
            source=source,
            submitter=submitter,
        )

    def close(self) -> None:
        if self._owned_rpc is not None:
            self._owned_rpc.close()
            self._owned_rpc = None

    def __enter__(self) -> MiyaClient:
        return self

    def __exit__(self, *_) -> None:
        self.close()
