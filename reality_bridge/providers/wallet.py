"""
Wallet gateway contracts and a JSON-RPC implementation.

The pipelines depend only on the two abstract gateways below. In a browser
they wrap the injected EIP-1193 provider; here ``JsonRpcWalletGateway``
forwards the same EIP-1193 methods over HTTP with httpx.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.chain_types import to_hex_chain_id


logger = logging.getLogger(__name__)

USER_REJECTED_CODE = 4001


class WalletRpcError(Exception):
    """Error object returned by a wallet or node (EIP-1193 / JSON-RPC)."""

    def __init__(self, message: str, code: Any = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    @property
    def user_rejected(self) -> bool:
        return self.code == USER_REJECTED_CODE


class WalletGateway(ABC):
    """Account and network surface of the user's wallet."""

    @abstractmethod
    async def get_accounts(self) -> List[str]:
        """Accounts already exposed to this client (may be empty)."""

    @abstractmethod
    async def get_chain_id(self) -> str:
        """Hex chain id the wallet is currently connected to."""

    @abstractmethod
    async def request_accounts(self) -> List[str]:
        """Ask the user to expose accounts; raises if the user declines."""

    @abstractmethod
    async def switch_chain(self, chain_id: str) -> None:
        """Ask the wallet to switch networks; raises ``WalletRpcError`` code 4001 on rejection."""


class TransactionGateway(ABC):
    """Contract read, simulation and broadcast surface of the wallet."""

    @abstractmethod
    async def call(self, tx: Dict[str, Any], chain_id: Optional[str] = None) -> str:
        """Read-only ``eth_call``; returns the hex-encoded return data."""

    @abstractmethod
    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        """Gas units the transaction would consume."""

    @abstractmethod
    async def gas_price(self) -> int:
        """Current network gas price in wei."""

    @abstractmethod
    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        """Sign and broadcast through the wallet; returns the transaction hash."""

    @abstractmethod
    async def wait_for_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Block until the transaction is mined and return its raw receipt."""


class JsonRpcWalletGateway(WalletGateway, TransactionGateway):
    """
    EIP-1193 wallet reached through a JSON-RPC endpoint.

    Read-only calls that must target a specific chain (e.g. a dispute fee on
    the foreign chain) go to ``rpc_urls[chain_id]`` when configured, and to
    the wallet endpoint otherwise. Receipt polling has no deadline.
    """

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        rpc_urls: Optional[Dict[str, str]] = None,
        timeout_s: Optional[float] = None,
        poll_interval_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url or settings.wallet_rpc_url
        # Explicit endpoints replace the configured ones entirely
        self._rpc_urls: Optional[Dict[str, str]] = None
        if rpc_urls is not None:
            self._rpc_urls = {to_hex_chain_id(chain_id): endpoint for chain_id, endpoint in rpc_urls.items()}
        self._poll_interval = (
            poll_interval_s if poll_interval_s is not None else settings.receipt_poll_interval_seconds
        )
        self._client = httpx.AsyncClient(
            timeout=timeout_s or settings.request_timeout_seconds,
            transport=transport,
        )
        self._ids = itertools.count(1)

    async def _rpc_call(
        self,
        method: str,
        params: List[Any],
        *,
        url: Optional[str] = None,
    ) -> Any:
        """Make a JSON-RPC call and unwrap the result."""
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }

        response = await self._client.post(url or self.url, json=payload)
        response.raise_for_status()
        result = response.json()

        error = result.get("error")
        if error:
            raise WalletRpcError(
                error.get("message", "RPC error"),
                code=error.get("code"),
                data=error.get("data"),
            )

        return result.get("result")

    async def get_accounts(self) -> List[str]:
        return list(await self._rpc_call("eth_accounts", []) or [])

    async def get_chain_id(self) -> str:
        return to_hex_chain_id(await self._rpc_call("eth_chainId", []))

    async def request_accounts(self) -> List[str]:
        return list(await self._rpc_call("eth_requestAccounts", []) or [])

    async def switch_chain(self, chain_id: str) -> None:
        await self._rpc_call(
            "wallet_switchEthereumChain",
            [{"chainId": to_hex_chain_id(chain_id)}],
        )

    def rpc_url_for_chain(self, chain_id: str) -> Optional[str]:
        if self._rpc_urls is None:
            return settings.rpc_url_for_chain(chain_id)
        return self._rpc_urls.get(to_hex_chain_id(chain_id))

    async def call(self, tx: Dict[str, Any], chain_id: Optional[str] = None) -> str:
        url = self.rpc_url_for_chain(chain_id) if chain_id else None
        return await self._rpc_call("eth_call", [tx, "latest"], url=url)

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        return int(await self._rpc_call("eth_estimateGas", [tx]), 16)

    async def gas_price(self) -> int:
        return int(await self._rpc_call("eth_gasPrice", []), 16)

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        tx_hash = await self._rpc_call("eth_sendTransaction", [tx])
        logger.info("Transaction submitted: %s", tx_hash)
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        while True:
            try:
                receipt = await self._rpc_call("eth_getTransactionReceipt", [tx_hash])
            except httpx.HTTPError as exc:
                logger.warning("Error checking transaction status: %s", exc)
                receipt = None
            if receipt:
                return receipt
            await asyncio.sleep(self._poll_interval)

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()
