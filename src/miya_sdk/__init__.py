"""
miya-sdk: Python client SDK for the MIYA privacy mixer and cross-chain bridge programs.

Usage:
    from miya_sdk import MiyaClient, ProtocolConfig
    from miya_sdk.core import find_pool_address, Withdraw
"""

from miya_sdk.client import MiyaClient
from miya_sdk.config import ProtocolConfig
from miya_sdk.core.errors import MiyaError
from miya_sdk.core.rpc import LedgerRpc
from miya_sdk.crypto.notes import DepositNote, NoteManager, NoteStatus
from miya_sdk.protocol.bridge import BridgeProtocolClient
from miya_sdk.protocol.mixer import MixerProtocolClient

__version__ = "0.1.0"
__all__ = [
    "MiyaClient",
    "ProtocolConfig",
    "MiyaError",
    "LedgerRpc",
    "DepositNote",
    "NoteManager",
    "NoteStatus",
    "MixerProtocolClient",
    "BridgeProtocolClient",
]
