"""
Tests for the arbitration request pipeline

Dispute fee loading, foreign-chain routing and the request commit path.
"""

import asyncio

import pytest
import pytest_asyncio
from eth_abi import decode
from eth_utils import decode_hex

from reality_bridge.core.execution import (
    ArbitrationRequestPipeline,
    ArbitrationRequestResult,
    PipelineBusyError,
    PipelineErrorKind,
    PipelinePhase,
)
from reality_bridge.core.questions import QuestionChain, QuestionRecord
from reality_bridge.providers.wallet import WalletRpcError

from tests.fakes import (
    FOREIGN_PROXY,
    OTHER_QUESTION_ID,
    QUESTION_ID,
    TX_HASH,
    arbitration_receipt,
    until_called,
    user_rejected,
)


DISPUTE_FEE_WEI = 10**17
FEE_RESULT = "0x" + DISPUTE_FEE_WEI.to_bytes(32, "big").hex()


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def arb_wallet(wallet):
    """Wallet on Ethereum (the foreign chain) returning a 0.1 ETH fee."""
    wallet.chain_id = "0x1"
    wallet.call_result = FEE_RESULT
    wallet.receipt = arbitration_receipt()
    return wallet


@pytest.fixture
def pipeline(question, resolver, arb_wallet) -> ArbitrationRequestPipeline:
    return ArbitrationRequestPipeline(question, resolver, arb_wallet)


@pytest_asyncio.fixture
async def loaded_pipeline(pipeline) -> ArbitrationRequestPipeline:
    await pipeline.load_dispute_fee()
    return pipeline


def _decode_request(data: str):
    return decode(["bytes32", "uint256"], decode_hex(data)[4:])


# =============================================================================
# Routing and dispute fee
# =============================================================================

class TestDisputeFee:
    """Foreign proxy routing and fee loading."""

    def test_foreign_proxy_info(self, pipeline):
        info = pipeline.foreign_proxy_info

        assert info.foreign_proxy_address == FOREIGN_PROXY
        assert info.foreign_chain_id == "0x1"
        assert info.home_chain_id == "0x64"

    @pytest.mark.asyncio
    async def test_load_dispute_fee_queries_foreign_chain(self, pipeline, arb_wallet):
        fee = await pipeline.load_dispute_fee()

        assert fee == DISPUTE_FEE_WEI
        assert pipeline.dispute_fee == "0.1"
        assert pipeline.has_required_data is True
        assert pipeline.can_request is True

        (tx, chain_id) = arb_wallet.calls[0][1]
        assert arb_wallet.calls[0][0] == "call"
        assert chain_id == "0x1"
        assert tx["to"] == FOREIGN_PROXY
        assert decode(["bytes32"], decode_hex(tx["data"])[4:])[0] == decode_hex(QUESTION_ID)

    @pytest.mark.asyncio
    async def test_fee_query_failure(self, pipeline, arb_wallet):
        arb_wallet.call_error = WalletRpcError("execution reverted", code=3)

        fee = await pipeline.load_dispute_fee()

        assert fee is None
        assert pipeline.dispute_fee is None
        assert pipeline.phase == PipelinePhase.IDLE
        assert pipeline.state.error.kind == PipelineErrorKind.MISSING_CONTRACT_DATA
        assert pipeline.state.error.message == "Failed to load contract data"

    @pytest.mark.asyncio
    async def test_no_bridge_for_arbitrator(self, resolver, arb_wallet):
        unbridged = QuestionRecord(
            id=QUESTION_ID,
            chain=QuestionChain(name="Gnosis"),
            arbitrator="0x0000000000000000000000000000000000000001",
        )
        pipeline = ArbitrationRequestPipeline(unbridged, resolver, arb_wallet)

        assert pipeline.foreign_proxy_info is None
        assert await pipeline.load_dispute_fee() is None
        assert pipeline.state.error.kind == PipelineErrorKind.MISSING_CONTRACT_DATA
        assert arb_wallet.calls == []

    @pytest.mark.asyncio
    async def test_can_request_respects_question_status(self, question, resolver, arb_wallet):
        requested = QuestionRecord(
            id=question.id,
            chain=question.chain,
            arbitrator=question.arbitrator,
            arbitration_requested_by="0x1234567890123456789012345678901234567890",
        )
        pipeline = ArbitrationRequestPipeline(requested, resolver, arb_wallet)
        await pipeline.load_dispute_fee()

        assert pipeline.has_required_data is True
        assert pipeline.can_request is False


# =============================================================================
# Commit path
# =============================================================================

class TestRequestArbitration:
    """Submission, confirmation and failure handling."""

    @pytest.mark.asyncio
    async def test_missing_fee_fails_without_wallet_calls(self, pipeline, arb_wallet):
        state = await pipeline.request_arbitration()

        assert state.phase == PipelinePhase.FAILED
        assert state.error.kind == PipelineErrorKind.MISSING_CONTRACT_DATA
        assert arb_wallet.calls == []

    @pytest.mark.asyncio
    async def test_missing_fee_estimation_makes_no_calls(self, pipeline, arb_wallet):
        estimate = await pipeline.estimate_gas()

        assert estimate is None
        assert pipeline.phase == PipelinePhase.IDLE
        assert pipeline.state.error.kind == PipelineErrorKind.MISSING_CONTRACT_DATA
        assert arb_wallet.calls == []

    @pytest.mark.asyncio
    async def test_successful_request(self, loaded_pipeline, arb_wallet):
        state = await loaded_pipeline.request_arbitration("0.5")
        assert state.phase == PipelinePhase.CONFIRMING
        assert state.tx_hash == TX_HASH

        state = await loaded_pipeline.wait_until_settled()

        assert state.phase == PipelinePhase.SUCCEEDED
        assert state.result == ArbitrationRequestResult(
            question_id=QUESTION_ID,
            tx_hash=TX_HASH,
            foreign_chain_id="0x1",
            block_number=32,
            event_observed=True,
        )

        (tx,) = [arg for name, arg in arb_wallet.calls if name == "send_transaction"]
        assert tx["to"] == FOREIGN_PROXY
        assert tx["value"] == hex(DISPUTE_FEE_WEI)
        question_id, max_previous = _decode_request(tx["data"])
        assert question_id == decode_hex(QUESTION_ID)
        assert max_previous == 5 * 10**17

    @pytest.mark.asyncio
    async def test_absent_max_previous_means_no_ceiling(self, loaded_pipeline, arb_wallet):
        await loaded_pipeline.request_arbitration()
        await loaded_pipeline.wait_until_settled()

        (tx,) = [arg for name, arg in arb_wallet.calls if name == "send_transaction"]
        assert _decode_request(tx["data"])[1] == 0

    @pytest.mark.asyncio
    async def test_invalid_max_previous_raises(self, loaded_pipeline):
        with pytest.raises(ValueError):
            await loaded_pipeline.request_arbitration("not a number")
        assert loaded_pipeline.phase == PipelinePhase.IDLE

    @pytest.mark.asyncio
    async def test_switches_to_foreign_chain(self, loaded_pipeline, arb_wallet):
        arb_wallet.chain_id = "0x64"

        state = await loaded_pipeline.request_arbitration()

        assert ("switch_chain", "0x1") in arb_wallet.calls
        assert state.phase == PipelinePhase.CONFIRMING

    @pytest.mark.asyncio
    async def test_wrong_network_when_switch_rejected(self, loaded_pipeline, arb_wallet):
        arb_wallet.chain_id = "0x89"
        arb_wallet.switch_error = user_rejected()

        state = await loaded_pipeline.request_arbitration()

        assert state.phase == PipelinePhase.FAILED
        assert state.error.kind == PipelineErrorKind.WRONG_NETWORK
        assert "send_transaction" not in arb_wallet.methods()

    @pytest.mark.asyncio
    async def test_revert_reason_is_surfaced(self, loaded_pipeline, arb_wallet):
        arb_wallet.send_error = WalletRpcError("execution reverted: Arbitration already requested", code=3)

        state = await loaded_pipeline.request_arbitration()

        assert state.error.kind == PipelineErrorKind.SUBMISSION_FAILED
        assert state.error.revert_reason == "Arbitration already requested"
        assert state.error.message == "Transaction failed: Arbitration already requested"

    @pytest.mark.asyncio
    async def test_generic_failure_message(self, loaded_pipeline, arb_wallet):
        arb_wallet.send_error = RuntimeError("socket closed")

        state = await loaded_pipeline.request_arbitration()

        assert state.error.message == "Failed to request arbitration"

    @pytest.mark.asyncio
    async def test_event_for_other_question_not_observed(self, loaded_pipeline, arb_wallet):
        arb_wallet.receipt = arbitration_receipt(OTHER_QUESTION_ID)

        await loaded_pipeline.request_arbitration()
        state = await loaded_pipeline.wait_until_settled()

        assert state.phase == PipelinePhase.SUCCEEDED
        assert state.result.event_observed is False

    @pytest.mark.asyncio
    async def test_busy_while_confirming(self, loaded_pipeline, arb_wallet):
        arb_wallet.hold_receipt = True
        await loaded_pipeline.request_arbitration()

        with pytest.raises(PipelineBusyError):
            await loaded_pipeline.request_arbitration()
        with pytest.raises(PipelineBusyError):
            await loaded_pipeline.load_dispute_fee()

        arb_wallet.release_receipt()
        state = await loaded_pipeline.wait_until_settled()
        assert state.phase == PipelinePhase.SUCCEEDED

    @pytest.mark.asyncio
    async def test_busy_while_fee_query_pending(self, pipeline, arb_wallet):
        arb_wallet.hold_call = True

        loading = asyncio.create_task(pipeline.load_dispute_fee())
        await until_called(arb_wallet, "call")

        assert pipeline.phase == PipelinePhase.IDLE
        assert pipeline.is_busy is True
        with pytest.raises(PipelineBusyError):
            await pipeline.request_arbitration()
        with pytest.raises(PipelineBusyError):
            await pipeline.load_dispute_fee()

        arb_wallet.release_call()
        assert await loading == DISPUTE_FEE_WEI
        assert pipeline.is_busy is False

    @pytest.mark.asyncio
    async def test_busy_while_wallet_check_pending(self, loaded_pipeline, arb_wallet):
        arb_wallet.accounts = []
        arb_wallet.hold_accounts = True

        first = asyncio.create_task(loaded_pipeline.request_arbitration())
        await until_called(arb_wallet, "request_accounts")

        with pytest.raises(PipelineBusyError):
            await loaded_pipeline.request_arbitration()

        arb_wallet.release_accounts()
        state = await first

        assert state.phase == PipelinePhase.CONFIRMING
        assert arb_wallet.methods().count("send_transaction") == 1
        await loaded_pipeline.wait_until_settled()


# =============================================================================
# Reset and question changes
# =============================================================================

class TestResetAndQuestionChange:
    """Reset clears operation data."""

    @pytest.mark.asyncio
    async def test_reset_during_fee_query_discards_fee(self, pipeline, arb_wallet):
        arb_wallet.hold_call = True

        loading = asyncio.create_task(pipeline.load_dispute_fee())
        await until_called(arb_wallet, "call")
        pipeline.reset()
        arb_wallet.release_call()

        assert await loading is None
        assert pipeline.dispute_fee_wei is None
        assert pipeline.state.error is None

    @pytest.mark.asyncio
    async def test_reset_clears_fee(self, loaded_pipeline):
        loaded_pipeline.reset()

        assert loaded_pipeline.dispute_fee_wei is None
        assert loaded_pipeline.phase == PipelinePhase.IDLE

    @pytest.mark.asyncio
    async def test_set_question_resets_state(self, loaded_pipeline, question):
        other = QuestionRecord(
            id=OTHER_QUESTION_ID,
            chain=question.chain,
            arbitrator=question.arbitrator,
        )

        loaded_pipeline.set_question(other)

        assert loaded_pipeline.question is other
        assert loaded_pipeline.dispute_fee_wei is None
        assert loaded_pipeline.foreign_proxy_info.foreign_proxy_address == FOREIGN_PROXY

    @pytest.mark.asyncio
    async def test_estimate_with_loaded_fee(self, loaded_pipeline, arb_wallet):
        estimate = await loaded_pipeline.estimate_gas("0.5")

        assert estimate.estimated_cost_wei == 21000 * 10**9
        assert loaded_pipeline.state.gas_estimate is estimate
