"""
Bridge resolution: match a question's home chain and arbitrator against the
bridge registry and derive the foreign-chain routing needed to request
arbitration.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ...providers.bridge_registry import BridgeRegistryProvider
from ..questions.models import QuestionRecord
from .chain_registry import ChainRegistry, get_chain_registry
from .models import BridgeRecord, ChainContractInfo, ForeignProxyInfo


class BridgeResolver:
    """Lookups over an immutable set of bridge records.

    Matching on chain names and proxy addresses is case-insensitive. When the
    feed holds more than one record for a (home chain, home proxy) pair, the
    feed's own ordering decides: the first record wins.
    """

    def __init__(
        self,
        records: Iterable[BridgeRecord],
        *,
        chain_registry: Optional[ChainRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._records: tuple[BridgeRecord, ...] = tuple(records)
        self._chains = chain_registry or get_chain_registry()
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_feed(
        cls,
        rows: Iterable[Mapping[str, Any]],
        *,
        chain_registry: Optional[ChainRegistry] = None,
    ) -> "BridgeResolver":
        return cls(
            (BridgeRecord.from_feed(row) for row in rows),
            chain_registry=chain_registry,
        )

    @property
    def records(self) -> Sequence[BridgeRecord]:
        return self._records

    @property
    def chain_registry(self) -> ChainRegistry:
        return self._chains

    def find_bridge(self, home_chain_name: str, home_proxy_address: str) -> Optional[BridgeRecord]:
        """First bridge record registered for a home chain and home proxy."""
        if not home_chain_name or not home_proxy_address:
            return None
        for record in self._records:
            if record.matches(home_chain_name, home_proxy_address):
                return record
        return None

    def resolve_foreign_proxy_info(self, question: Optional[QuestionRecord]) -> Optional[ForeignProxyInfo]:
        """
        Derive foreign-chain routing for a question.

        Returns None, without raising, when the question lacks a chain name or
        an arbitrator, or when no bridge serves its arbitrator. Those are
        ordinary questions that simply cannot be arbitrated through a bridge.
        """
        chain_name = question.chain.name if question and question.chain else None
        arbitrator = question.arbitrator if question else None
        if not chain_name or not arbitrator:
            self._logger.info(
                "Foreign proxy lookup skipped: missing question data (chain=%s, arbitrator=%s)",
                chain_name,
                arbitrator,
            )
            return None

        bridge = self.find_bridge(chain_name, arbitrator)
        if bridge is None:
            self._logger.info(
                "Foreign proxy lookup: no bridge for chain=%s arbitrator=%s",
                chain_name,
                arbitrator,
            )
            return None

        info = ForeignProxyInfo(
            foreign_proxy_address=bridge.foreign_proxy,
            foreign_chain=bridge.foreign_chain,
            foreign_chain_id=self._chains.chain_id_for_name(bridge.foreign_chain),
            home_chain=bridge.home_chain,
            home_chain_id=self._chains.chain_id_for_name(bridge.home_chain),
            bridge_name=bridge.name,
            is_testnet=bridge.is_testnet,
        )
        self._logger.debug("Foreign proxy resolved: %s", info)
        return info

    def list_contracts_for_chain(self, chain_name: str) -> List[BridgeRecord]:
        """All bridge records whose home chain is ``chain_name``."""
        wanted = (chain_name or "").lower()
        return [record for record in self._records if record.home_chain.lower() == wanted]

    def primary_oracle_address(self, chain_name: str) -> str:
        """Oracle contract used for new questions on a chain.

        Prefers the first non-testnet bridge record, then the registry's
        known-address table. Empty when neither knows the chain.
        """
        for record in self.list_contracts_for_chain(chain_name):
            if not record.is_testnet and record.oracle_address:
                return record.oracle_address
        return self._chains.known_oracle_address(chain_name)

    def arbitrator_proxy_address(self, chain_name: str, arbitrator_address: Optional[str]) -> str:
        """Registered home proxy matching an arbitrator, empty when unregistered."""
        if not arbitrator_address:
            return ""
        wanted = arbitrator_address.lower()
        for record in self.list_contracts_for_chain(chain_name):
            if record.home_proxy.lower() == wanted:
                return record.home_proxy
        return ""

    def chain_contract_info(self, chain_name: str) -> ChainContractInfo:
        contracts = self.list_contracts_for_chain(chain_name)
        return ChainContractInfo(
            chain_name=chain_name,
            primary_oracle_address=self.primary_oracle_address(chain_name),
            mainnet_contracts=[c for c in contracts if not c.is_testnet],
            testnet_contracts=[c for c in contracts if c.is_testnet],
        )


async def load_bridge_resolver(
    provider: Optional[BridgeRegistryProvider] = None,
    *,
    chain_registry: Optional[ChainRegistry] = None,
) -> BridgeResolver:
    """Load the bridge feed once and build a resolver over it."""
    provider = provider or BridgeRegistryProvider()
    rows = await provider.fetch_rows()
    return BridgeResolver.from_feed(rows, chain_registry=chain_registry)
