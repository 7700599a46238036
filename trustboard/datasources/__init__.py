from .base import ScriptGateway, TrustOracle
from .flow import FlowScriptGateway
from .evm import EvmRpcClient
from .hyperion import HyperionOracle, identity_key
from .relayer import Relayer

__all__ = [
    "ScriptGateway",
    "TrustOracle",
    "FlowScriptGateway",
    "EvmRpcClient",
    "HyperionOracle",
    "identity_key",
    "Relayer",
]
