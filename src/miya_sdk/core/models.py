"""
Typed views of MIYA program state and instructions.
All token amounts are raw integer base units (u64) as stored on the ledger.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

BPS_DENOMINATOR = 10_000


class Pool(BaseModel):
    """One fixed-denomination privacy pool for a single token."""
    address: str | None = None
    authority: str
    token_mint: str
    deposit_amount: int
    total_deposits: int = 0
    is_active: bool = True
    bump: int | None = None


class BridgeState(BaseModel):
    """The bridge's singleton accounting account."""
    address: str | None = None
    authority: str
    is_active: bool = True
    supported_chain_count: int = 0
    total_locked_tokens: int = 0
    total_released_tokens: int = 0
    bump: int | None = None


class SupportedChain(BaseModel):
    """An external chain registered with the bridge."""
    address: str | None = None
    chain_id: int
    chain_name: str
    adapter_program: str
    is_active: bool = True
    total_volume: int = 0


class TokenPair(BaseModel):
    """A cross-chain token mapping with its fee and running totals."""
    address: str | None = None
    source_chain_id: int
    target_chain_id: int
    source_token_address: bytes
    target_token_mint: str
    fee_percentage: int  # basis points
    is_active: bool = True
    total_locked: int = 0
    total_released: int = 0
    bump: int | None = None

    @property
    def fee_pct(self) -> float:
        """Fee as a percentage (basis points / 100)."""
        return self.fee_percentage / 100

    def fee_for(self, amount: int) -> int:
        """Fee charged on release of `amount`, rounded down like the program does."""
        return amount * self.fee_percentage // BPS_DENOMINATOR


class ReleaseQuote(BaseModel):
    """What a recipient receives for a release, from one read of the token pair."""
    amount: int
    fee: int
    net_amount: int
    fee_percentage: int
    pair_active: bool


class VerificationResult(BaseModel):
    """Outcome of a withdrawal or verification attempt. Not persisted."""
    success: bool
    signature: str | None = None
    error: str | None = None


class AccountMeta(BaseModel):
    """One account reference in an instruction's account list."""
    model_config = ConfigDict(frozen=True)

    pubkey: str
    is_signer: bool = False
    is_writable: bool = False


class Instruction(BaseModel):
    """A built instruction, ready to be placed in a transaction and signed."""
    program_id: str
    accounts: list[AccountMeta] = Field(default_factory=list)
    data: bytes

    @property
    def discriminant(self) -> int:
        return self.data[0]

    @property
    def signers(self) -> list[str]:
        return [a.pubkey for a in self.accounts if a.is_signer]
