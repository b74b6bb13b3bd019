"""protocol module init"""
from miya_sdk.protocol.base import ProtocolClient
from miya_sdk.protocol.bridge import BridgeProtocolClient
from miya_sdk.protocol.mixer import MixerProtocolClient

__all__ = [
    "BridgeProtocolClient",
    "MixerProtocolClient",
    "ProtocolClient",
]
