"""Tests for the JSON-RPC wallet gateway and the bridge registry provider."""

import json

import httpx
import pytest

from reality_bridge.config import settings
from reality_bridge.providers import (
    BridgeRegistryError,
    BridgeRegistryProvider,
    JsonRpcWalletGateway,
    WalletRpcError,
)

from tests.fakes import BRIDGE_ROWS, TX_HASH


WALLET_URL = "http://wallet.test"
GNOSIS_RPC = "http://gnosis.test"


class RpcRecorder:
    """MockTransport handler answering JSON-RPC calls from a script."""

    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append((str(request.url).rstrip("/"), body))
        answer = self.responses[body["method"]]
        if callable(answer):
            answer = answer()
        if isinstance(answer, dict) and "error" in answer:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **answer})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": answer})


def _gateway(recorder: RpcRecorder) -> JsonRpcWalletGateway:
    return JsonRpcWalletGateway(
        url=WALLET_URL,
        rpc_urls={"100": GNOSIS_RPC},
        poll_interval_s=0,
        transport=httpx.MockTransport(recorder),
    )


# =============================================================================
# JsonRpcWalletGateway
# =============================================================================

class TestJsonRpcWalletGateway:
    """EIP-1193 methods over JSON-RPC."""

    @pytest.mark.asyncio
    async def test_accounts_and_chain(self):
        recorder = RpcRecorder({"eth_accounts": ["0xabc"], "eth_chainId": "0x064"})
        gateway = _gateway(recorder)

        assert await gateway.get_accounts() == ["0xabc"]
        assert await gateway.get_chain_id() == "0x64"
        await gateway.close()

    @pytest.mark.asyncio
    async def test_switch_chain_payload(self):
        recorder = RpcRecorder({"wallet_switchEthereumChain": None})
        gateway = _gateway(recorder)

        await gateway.switch_chain("100")

        _, body = recorder.requests[0]
        assert body["params"] == [{"chainId": "0x64"}]
        await gateway.close()

    @pytest.mark.asyncio
    async def test_rejection_raises_wallet_error(self):
        recorder = RpcRecorder({
            "wallet_switchEthereumChain": {"error": {"code": 4001, "message": "User rejected the request."}},
        })
        gateway = _gateway(recorder)

        with pytest.raises(WalletRpcError) as excinfo:
            await gateway.switch_chain("0x1")

        assert excinfo.value.code == 4001
        assert excinfo.value.user_rejected is True
        await gateway.close()

    @pytest.mark.asyncio
    async def test_call_routes_to_chain_endpoint(self):
        recorder = RpcRecorder({"eth_call": "0x01"})
        gateway = _gateway(recorder)

        await gateway.call({"to": "0x1", "data": "0x"}, chain_id="0x64")
        await gateway.call({"to": "0x1", "data": "0x"}, chain_id="0x1")

        assert [url for url, _ in recorder.requests] == [GNOSIS_RPC, WALLET_URL]
        assert recorder.requests[0][1]["params"][1] == "latest"
        await gateway.close()

    @pytest.mark.asyncio
    async def test_call_uses_configured_chain_endpoints(self, monkeypatch):
        monkeypatch.setattr(settings, "rpc_urls", {"0x64": GNOSIS_RPC})
        recorder = RpcRecorder({"eth_call": "0x01"})
        gateway = JsonRpcWalletGateway(
            url=WALLET_URL,
            poll_interval_s=0,
            transport=httpx.MockTransport(recorder),
        )

        await gateway.call({"to": "0x1", "data": "0x"}, chain_id=100)
        await gateway.call({"to": "0x1", "data": "0x"}, chain_id="0xa4b1")

        assert [url for url, _ in recorder.requests] == [GNOSIS_RPC, WALLET_URL]
        await gateway.close()

    @pytest.mark.asyncio
    async def test_gas_values_are_decoded(self):
        recorder = RpcRecorder({"eth_estimateGas": "0x5208", "eth_gasPrice": "0x3b9aca00"})
        gateway = _gateway(recorder)

        assert await gateway.estimate_gas({}) == 21000
        assert await gateway.gas_price() == 10**9
        await gateway.close()

    @pytest.mark.asyncio
    async def test_send_and_wait_for_receipt(self):
        receipts = iter([None, None, {"transactionHash": TX_HASH, "status": "0x1"}])
        recorder = RpcRecorder({
            "eth_sendTransaction": TX_HASH,
            "eth_getTransactionReceipt": lambda: next(receipts),
        })
        gateway = _gateway(recorder)

        tx_hash = await gateway.send_transaction({"to": "0x1"})
        receipt = await gateway.wait_for_receipt(tx_hash)

        assert receipt["status"] == "0x1"
        methods = [body["method"] for _, body in recorder.requests]
        assert methods.count("eth_getTransactionReceipt") == 3
        await gateway.close()


# =============================================================================
# BridgeRegistryProvider
# =============================================================================

class TestBridgeRegistryProvider:
    """Feed loading from HTTP and files."""

    @pytest.mark.asyncio
    async def test_fetch_list_feed(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=BRIDGE_ROWS))
        provider = BridgeRegistryProvider(url="http://feed.test/bridges.json", transport=transport)

        rows = await provider.fetch_rows()

        assert rows == BRIDGE_ROWS

    @pytest.mark.asyncio
    async def test_fetch_wrapped_feed(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"bridges": BRIDGE_ROWS[:1]}))
        provider = BridgeRegistryProvider(url="http://feed.test", transport=transport)

        assert len(await provider.fetch_rows()) == 1

    @pytest.mark.asyncio
    async def test_http_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        provider = BridgeRegistryProvider(url="http://feed.test", transport=transport)

        with pytest.raises(BridgeRegistryError):
            await provider.fetch_rows()

    @pytest.mark.asyncio
    async def test_malformed_feed(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json="nope"))
        provider = BridgeRegistryProvider(url="http://feed.test", transport=transport)

        with pytest.raises(BridgeRegistryError):
            await provider.fetch_rows()

    @pytest.mark.asyncio
    async def test_unreadable_file(self, tmp_path):
        provider = BridgeRegistryProvider(path=tmp_path / "missing.json")

        with pytest.raises(BridgeRegistryError):
            await provider.fetch_rows()

    @pytest.mark.asyncio
    async def test_unconfigured_feed_is_empty(self):
        provider = BridgeRegistryProvider(url="", path=None)
        provider.path = None

        assert await provider.fetch_rows() == []
