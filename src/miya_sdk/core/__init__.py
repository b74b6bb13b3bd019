"""core module init"""
from miya_sdk.core.accounts import (
    decode_account,
    decode_bridge,
    decode_pool,
    decode_supported_chain,
    decode_token_pair,
)
from miya_sdk.core.address import (
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    b58decode,
    b58encode,
    create_program_address,
    find_bridge_address,
    find_chain_address,
    find_pool_address,
    find_program_address,
    find_token_pair_address,
    is_valid_pubkey,
    validate_pubkey,
)
from miya_sdk.core.errors import (
    AddressError,
    EncodingError,
    InvalidFieldError,
    InvalidLengthError,
    InvalidSeedsError,
    LedgerRpcError,
    MalformedAccountError,
    MalformedInstructionError,
    MiyaError,
    NoteStateError,
    NoValidAddressError,
)
from miya_sdk.core.instructions import (
    AddSupportedChain,
    Deposit,
    InitializeBridge,
    InitializePool,
    InstructionData,
    LockTokens,
    OptionalFieldEncoding,
    PauseBridge,
    PausePool,
    RegisterTokenPair,
    ReleaseTokens,
    ResumeBridge,
    ResumePool,
    UpdateChainStatus,
    Withdraw,
    decode_instruction,
)
from miya_sdk.core.models import (
    AccountMeta,
    BridgeState,
    Instruction,
    Pool,
    ReleaseQuote,
    SupportedChain,
    TokenPair,
    VerificationResult,
)
from miya_sdk.core.rpc import AccountSource, InstructionSubmitter, LedgerRpc

__all__ = [
    "AccountMeta",
    "AccountSource",
    "AddSupportedChain",
    "AddressError",
    "BridgeState",
    "Deposit",
    "EncodingError",
    "InitializeBridge",
    "InitializePool",
    "Instruction",
    "InstructionData",
    "InstructionSubmitter",
    "InvalidFieldError",
    "InvalidLengthError",
    "InvalidSeedsError",
    "LedgerRpc",
    "LedgerRpcError",
    "LockTokens",
    "MalformedAccountError",
    "MalformedInstructionError",
    "MiyaError",
    "NoValidAddressError",
    "NoteStateError",
    "OptionalFieldEncoding",
    "PauseBridge",
    "PausePool",
    "Pool",
    "RegisterTokenPair",
    "ReleaseQuote",
    "ReleaseTokens",
    "ResumeBridge",
    "ResumePool",
    "SYSTEM_PROGRAM_ID",
    "SupportedChain",
    "TOKEN_PROGRAM_ID",
    "TokenPair",
    "UpdateChainStatus",
    "VerificationResult",
    "Withdraw",
    "b58decode",
    "b58encode",
    "create_program_address",
    "decode_account",
    "decode_bridge",
    "decode_instruction",
    "decode_pool",
    "decode_supported_chain",
    "decode_token_pair",
    "find_bridge_address",
    "find_chain_address",
    "find_pool_address",
    "find_program_address",
    "find_token_pair_address",
    "is_valid_pubkey",
    "validate_pubkey",
]
