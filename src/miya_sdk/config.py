"""
Client configuration.

Program ids are always explicit: there is no process-wide default program,
so two clients pointed at different deployments never share state.
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator

from miya_sdk.core.address import validate_pubkey
from miya_sdk.core.instructions import OptionalFieldEncoding
from miya_sdk.core.rpc import COMMITMENT_LEVELS, LOCALNET_RPC_URL


class ProtocolConfig(BaseModel):
    """
    Configuration for the MIYA protocol clients.

    Args:
        mixer_program_id:            Base58 id of the deployed mixer program
        bridge_program_id:           Base58 id of the deployed bridge program
        rpc_url:                     JSON-RPC endpoint used by LedgerRpc
        commitment:                  node commitment level for reads and preflight
        timeout:                     HTTP timeout in seconds
        withdraw_optional_encoding:  how Withdraw marks its relayer/fee tail;
                                     LEGACY_LENGTH only for programs that infer
                                     presence from buffer length
    """
    mixer_program_id: str
    bridge_program_id: str
    rpc_url: str = LOCALNET_RPC_URL
    commitment: str = "confirmed"
    timeout: float = 15.0
    withdraw_optional_encoding: OptionalFieldEncoding = OptionalFieldEncoding.BITMASK

    @field_validator("mixer_program_id", "bridge_program_id")
    @classmethod
    def _check_program_id(cls, value: str) -> str:
        validate_pubkey(value)
        return value

    @field_validator("commitment")
    @classmethod
    def _check_commitment(cls, value: str) -> str:
        if value not in COMMITMENT_LEVELS:
            raise ValueError(f"Unknown commitment: {value}. Available: {list(COMMITMENT_LEVELS)}")
        return value

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value
