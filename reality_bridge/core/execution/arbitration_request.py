"""
Arbitration request: pay the dispute fee to a question's foreign arbitrator
proxy, routed through the bridge registry.
"""

import logging
from typing import Optional

from ...providers.wallet import TransactionGateway, WalletGateway
from ..bridge.chain_registry import ChainRegistry
from ..bridge.models import ForeignProxyInfo
from ..bridge.resolver import BridgeResolver
from ..contracts.arbitrator_proxy import (
    decode_dispute_fee,
    encode_get_dispute_fee,
    encode_request_arbitration,
    find_arbitration_requested,
)
from ..questions.models import QuestionRecord, can_request_arbitration
from .errors import MissingContractDataError, PipelineErrorKind, PipelineFailure
from .models import (
    ArbitrationRequestResult,
    GasEstimate,
    PipelinePhase,
    PipelineState,
    PreparedCall,
    TransactionReceipt,
)
from .pipeline import TransactionPipeline
from .units import format_ether, parse_optional_ether

LOAD_CONTRACT_DATA_MESSAGE = "Failed to load contract data"


class ArbitrationRequestPipeline(TransactionPipeline):
    """
    Request arbitration for one question on its bridge's foreign chain.

    The dispute fee must be loaded with ``load_dispute_fee()`` before
    estimating or submitting; without it both fail with
    ``MissingContractData`` and no wallet or network call is made.
    """

    fallback_message = "Failed to request arbitration"
    operation = "request-arbitration"

    def __init__(
        self,
        question: Optional[QuestionRecord],
        resolver: BridgeResolver,
        wallet: WalletGateway,
        transactions: Optional[TransactionGateway] = None,
        *,
        chain_registry: Optional[ChainRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(
            wallet,
            transactions,
            chain_registry=chain_registry or resolver.chain_registry,
            logger=logger,
        )
        self._resolver = resolver
        self._question = question
        self._dispute_fee_wei: Optional[int] = None

    @property
    def question(self) -> Optional[QuestionRecord]:
        return self._question

    @property
    def foreign_proxy_info(self) -> Optional[ForeignProxyInfo]:
        """Routing for the current question, recomputed on every access."""
        return self._resolver.resolve_foreign_proxy_info(self._question)

    @property
    def dispute_fee_wei(self) -> Optional[int]:
        return self._dispute_fee_wei

    @property
    def dispute_fee(self) -> Optional[str]:
        """Dispute fee in the foreign chain's native currency."""
        if self._dispute_fee_wei is None:
            return None
        return format_ether(self._dispute_fee_wei)

    @property
    def has_required_data(self) -> bool:
        return self._dispute_fee_wei is not None and self.foreign_proxy_info is not None

    @property
    def can_request(self) -> bool:
        return can_request_arbitration(self._question) and self.has_required_data

    def set_question(self, question: Optional[QuestionRecord]) -> None:
        """Point the pipeline at another question, discarding all state."""
        self.reset()
        self._question = question

    def _on_reset(self) -> None:
        self._dispute_fee_wei = None

    async def load_dispute_fee(self) -> Optional[int]:
        """
        Query ``getDisputeFee`` on the foreign proxy.

        Returns the fee in wei, or None with a ``MissingContractData`` error
        recorded in state when no bridge serves the question or the query
        fails.
        """
        self._ensure_idle(PipelinePhase.IDLE, "load the dispute fee")
        info = self.foreign_proxy_info
        if info is None or not self._question:
            self._update(error=PipelineFailure(
                PipelineErrorKind.MISSING_CONTRACT_DATA,
                LOAD_CONTRACT_DATA_MESSAGE,
            ))
            return None

        epoch = self._epoch
        self._in_flight = True
        try:
            data = await self._transactions.call(
                {
                    "to": info.foreign_proxy_address,
                    "data": encode_get_dispute_fee(self._question.id),
                },
                chain_id=info.foreign_chain_id,
            )
            fee = decode_dispute_fee(data)
        except Exception as exc:
            if self._is_current(epoch):
                self._in_flight = False
                self._logger.warning(
                    "Dispute fee query failed on %s (%s): %s",
                    info.foreign_chain,
                    info.foreign_proxy_address,
                    exc,
                )
                self._update(error=PipelineFailure(
                    PipelineErrorKind.MISSING_CONTRACT_DATA,
                    LOAD_CONTRACT_DATA_MESSAGE,
                ))
            return None

        if not self._is_current(epoch):
            return None
        self._in_flight = False
        self._dispute_fee_wei = fee
        self._logger.info(
            "Dispute fee for %s on %s: %s wei",
            self._question.id,
            info.foreign_chain,
            fee,
        )
        self._update(error=None)
        return fee

    def _prepare_call(self, max_previous_wei: int) -> PreparedCall:
        if self._dispute_fee_wei is None:
            raise MissingContractDataError("Dispute fee not loaded")
        info = self.foreign_proxy_info
        if info is None or not self._question:
            raise MissingContractDataError("No arbitration bridge found for this question")
        try:
            data = encode_request_arbitration(self._question.id, max_previous_wei)
        except ValueError as exc:
            raise MissingContractDataError(f"Invalid question id: {self._question.id}") from exc
        return PreparedCall(
            chain_id=info.foreign_chain_id,
            to_address=info.foreign_proxy_address,
            data=data,
            value=self._dispute_fee_wei,
            description=f"requestArbitration on {info.foreign_chain}",
        )

    def _build_result(
        self,
        receipt: TransactionReceipt,
        call: PreparedCall,
        max_previous_wei: int,
    ) -> ArbitrationRequestResult:
        question_id = self._question.id if self._question else ""
        observed = find_arbitration_requested(receipt.logs, question_id)
        if not observed:
            self._logger.info("ArbitrationRequested event not found in receipt %s", receipt.transaction_hash)
        return ArbitrationRequestResult(
            question_id=question_id,
            tx_hash=self._state.tx_hash or receipt.transaction_hash,
            foreign_chain_id=call.chain_id,
            block_number=receipt.block_number,
            event_observed=observed,
        )

    async def estimate_gas(self, max_previous: Optional[str] = None) -> Optional[GasEstimate]:
        """Estimate ``requestArbitration``; failures are recorded, not raised."""
        return await self._estimate(parse_optional_ether(max_previous))

    async def request_arbitration(self, max_previous: Optional[str] = None) -> PipelineState:
        """
        Submit ``requestArbitration`` paying the loaded dispute fee.

        ``max_previous`` is the highest bond (native currency) the request is
        willing to contest; when absent no ceiling applies.

        Raises:
            ValueError: If ``max_previous`` is not a valid amount.
            PipelineBusyError: If an attempt is already in progress or a
                finished one has not been reset.
        """
        return await self._submit(parse_optional_ether(max_previous))
