"""Chain registry and home-chain to foreign-chain bridge resolution."""

from .chain_registry import ChainRegistry, get_chain_registry
from .models import BridgeRecord, ChainContractInfo, ChainDescriptor, ForeignProxyInfo
from .resolver import BridgeResolver, load_bridge_resolver

__all__ = [
    "BridgeRecord",
    "BridgeResolver",
    "ChainContractInfo",
    "ChainDescriptor",
    "ChainRegistry",
    "ForeignProxyInfo",
    "get_chain_registry",
    "load_bridge_resolver",
]
