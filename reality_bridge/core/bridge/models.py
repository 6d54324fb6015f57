"""Typed models used by the bridge subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping

from ..chain_types import to_hex_chain_id
from .constants import (
    FEED_APPEALS,
    FEED_FOREIGN_CHAIN,
    FEED_FOREIGN_PROXY,
    FEED_HOME_CHAIN,
    FEED_HOME_PROXY,
    FEED_NAME,
    FEED_ORACLE,
    FEED_TESTNET,
    FEED_TESTNET_YES,
)


@dataclass(frozen=True)
class ChainDescriptor:
    """A chain known to the registry."""

    id: str
    name: str
    native_currency_symbol: str = "ETH"

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", to_hex_chain_id(self.id))


def _feed_text(row: Mapping[str, Any], column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True)
class BridgeRecord:
    """One row of the bridge registry feed."""

    name: str
    home_chain: str
    home_proxy: str
    foreign_chain: str
    foreign_proxy: str
    oracle_address: str
    is_testnet: bool = False
    appeals: str = ""

    @classmethod
    def from_feed(cls, row: Mapping[str, Any]) -> "BridgeRecord":
        """Build a record from a feed row keyed by the feed's column names."""
        return cls(
            name=_feed_text(row, FEED_NAME),
            home_chain=_feed_text(row, FEED_HOME_CHAIN),
            home_proxy=_feed_text(row, FEED_HOME_PROXY),
            foreign_chain=_feed_text(row, FEED_FOREIGN_CHAIN),
            foreign_proxy=_feed_text(row, FEED_FOREIGN_PROXY),
            oracle_address=_feed_text(row, FEED_ORACLE),
            is_testnet=_feed_text(row, FEED_TESTNET) == FEED_TESTNET_YES,
            appeals=_feed_text(row, FEED_APPEALS),
        )

    def matches(self, home_chain: str, home_proxy: str) -> bool:
        return (
            self.home_chain.lower() == home_chain.lower()
            and self.home_proxy.lower() == home_proxy.lower()
        )


@dataclass(frozen=True)
class ForeignProxyInfo:
    """Routing information for requesting arbitration of a question.

    Derived from a question and the bridge feed; never persisted.
    """

    foreign_proxy_address: str
    foreign_chain: str
    foreign_chain_id: str
    home_chain: str
    home_chain_id: str
    bridge_name: str
    is_testnet: bool


@dataclass(frozen=True)
class ChainContractInfo:
    """Summary of the bridge records registered for a home chain."""

    chain_name: str
    primary_oracle_address: str
    mainnet_contracts: List[BridgeRecord] = field(default_factory=list)
    testnet_contracts: List[BridgeRecord] = field(default_factory=list)

    @property
    def has_contracts(self) -> bool:
        return bool(self.mainnet_contracts or self.testnet_contracts)

    @property
    def total_bridges(self) -> int:
        return len(self.mainnet_contracts) + len(self.testnet_contracts)
