"""External collaborators: wallet gateway and bridge registry feed."""

from .bridge_registry import BridgeRegistryError, BridgeRegistryProvider
from .wallet import (
    USER_REJECTED_CODE,
    JsonRpcWalletGateway,
    TransactionGateway,
    WalletGateway,
    WalletRpcError,
)

__all__ = [
    "BridgeRegistryError",
    "BridgeRegistryProvider",
    "JsonRpcWalletGateway",
    "TransactionGateway",
    "USER_REJECTED_CODE",
    "WalletGateway",
    "WalletRpcError",
]
