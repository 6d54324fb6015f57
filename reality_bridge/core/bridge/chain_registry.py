"""Static chain registry: chain names, hex chain ids and known contract addresses."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from ..chain_types import DEFAULT_CHAIN_ID, RawChainId, to_hex_chain_id
from .constants import (
    CHAIN_METADATA,
    DEFAULT_ARBITRATOR_CHAIN,
    DEFAULT_ARBITRATORS,
    KNOWN_ORACLE_ADDRESSES,
)
from .models import ChainDescriptor


class ChainRegistry:
    """Chain metadata lookups keyed by case-insensitive chain name.

    The registry is read-only after construction and safe to share across
    pipelines. Lookups never raise; unknown names resolve to the documented
    fallbacks (Ethereum mainnet for chain ids, empty string for addresses).

    Usage:
        registry = get_chain_registry()
        registry.chain_id_for_name("Gnosis")        # "0x64"
        registry.known_oracle_address("polygon")    # "0x6057..."
    """

    def __init__(
        self,
        *,
        chains: Optional[Mapping[str, Dict[str, Any]]] = None,
        oracle_addresses: Optional[Mapping[str, str]] = None,
        default_arbitrators: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._chains: Dict[str, Dict[str, Any]] = {
            key.lower(): details for key, details in (chains or CHAIN_METADATA).items()
        }
        self._name_to_id: Dict[str, str] = {}
        for key, details in self._chains.items():
            for alias in [key, *details.get("aliases", [])]:
                self._name_to_id.setdefault(alias.lower(), to_hex_chain_id(details["chain_id"]))
        self._oracle_addresses = {
            key.lower(): address
            for key, address in (oracle_addresses or KNOWN_ORACLE_ADDRESSES).items()
        }
        self._default_arbitrators = {
            key.lower(): address
            for key, address in (default_arbitrators or DEFAULT_ARBITRATORS).items()
        }

    @staticmethod
    def _key(name: Optional[str]) -> str:
        return (name or "").strip().lower()

    def chain_id_for_name(self, name: Optional[str]) -> str:
        """Hex chain id for a chain name, Ethereum mainnet when unknown."""
        return self._name_to_id.get(self._key(name), DEFAULT_CHAIN_ID)

    def is_known_chain(self, name: Optional[str]) -> bool:
        return self._key(name) in self._name_to_id

    def known_oracle_address(self, chain_name: Optional[str]) -> str:
        """Fallback oracle address for a chain, empty when none is known."""
        return self._oracle_addresses.get(self._key(chain_name), "")

    def default_arbitrator(self, chain_name: Optional[str]) -> str:
        """Default arbitrator for new questions on a chain (Ethereum's when unknown)."""
        return self._default_arbitrators.get(
            self._key(chain_name),
            self._default_arbitrators.get(DEFAULT_ARBITRATOR_CHAIN, ""),
        )

    def descriptor_for_name(self, name: Optional[str]) -> Optional[ChainDescriptor]:
        chain_id = self._name_to_id.get(self._key(name))
        if chain_id is None:
            return None
        return self.descriptor_for_chain_id(chain_id)

    def descriptor_for_chain_id(self, chain_id: RawChainId) -> Optional[ChainDescriptor]:
        try:
            wanted = to_hex_chain_id(chain_id)
        except ValueError:
            return None
        for details in self._chains.values():
            if to_hex_chain_id(details["chain_id"]) == wanted:
                return ChainDescriptor(
                    id=wanted,
                    name=details.get("name", ""),
                    native_currency_symbol=details.get("native_symbol", "ETH"),
                )
        return None

    def name_for_chain_id(self, chain_id: RawChainId) -> Optional[str]:
        """Human-readable chain name for a chain id."""
        descriptor = self.descriptor_for_chain_id(chain_id)
        return descriptor.name if descriptor else None

    def native_symbol(self, chain_name: Optional[str]) -> str:
        descriptor = self.descriptor_for_name(chain_name)
        return descriptor.native_currency_symbol if descriptor else "ETH"


@lru_cache
def get_chain_registry() -> ChainRegistry:
    """Process-wide registry built from the static chain table."""
    return ChainRegistry()
