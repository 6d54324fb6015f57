"""
Question creation: ask a new Reality.eth question on a home chain, paying
the bounty as the call value.
"""

import logging
import secrets
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from eth_utils import is_address
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...config import settings as default_settings
from ...providers.wallet import TransactionGateway, WalletGateway
from ..bridge.chain_registry import ChainRegistry
from ..bridge.resolver import BridgeResolver
from ..contracts.reality import AskQuestionCall, extract_question_id, format_question_text
from .errors import ConfirmationFailedError, MissingContractDataError
from .models import (
    GasEstimate,
    PipelineState,
    PreparedCall,
    QuestionCreationResult,
    TransactionReceipt,
)
from .pipeline import TransactionPipeline
from .units import parse_ether

MIN_TIMEOUT_SECONDS = 3600          # 1 hour
MAX_TIMEOUT_SECONDS = 2592000       # 30 days
NONCE_RANGE = 1_000_000


def _draw_nonce() -> int:
    return secrets.randbelow(NONCE_RANGE)


def _now() -> int:
    return int(time.time())


class QuestionParams(BaseModel):
    """
    Inputs of a question creation attempt.

    The nonce and the default opening time are fixed when the object is
    built, so estimating and then submitting the same params sends identical
    arguments.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    title: str = Field(..., min_length=10, max_length=200)
    description: str = Field(default="", max_length=500)
    category: str = Field(..., min_length=1)
    outcomes: List[str] = Field(default_factory=lambda: ["Yes", "No"], min_length=2, max_length=10)
    timeout: int = Field(default=86400, ge=MIN_TIMEOUT_SECONDS, le=MAX_TIMEOUT_SECONDS)
    bounty: str = Field(..., description="Bounty in the home chain's native currency, e.g. \"0.01\"")
    opening_ts: int = Field(default_factory=_now, ge=0)
    arbitrator: Optional[str] = None
    nonce: int = Field(default_factory=_draw_nonce, ge=0)

    @field_validator("outcomes")
    @classmethod
    def _outcomes_not_blank(cls, value: List[str]) -> List[str]:
        cleaned = [outcome.strip() for outcome in value]
        if any(not outcome for outcome in cleaned):
            raise ValueError("Outcomes must not be empty")
        return cleaned

    @field_validator("bounty")
    @classmethod
    def _positive_bounty(cls, value: str) -> str:
        if parse_ether(value) <= 0:
            raise ValueError("Bounty must be greater than zero")
        return value

    @field_validator("arbitrator")
    @classmethod
    def _arbitrator_address(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if not is_address(value):
            raise ValueError(f"Invalid arbitrator address: {value}")
        return value

    @property
    def bounty_wei(self) -> int:
        return parse_ether(self.bounty)


ParamsInput = Union[QuestionParams, Mapping[str, Any]]


class QuestionCreationPipeline(TransactionPipeline):
    """
    Create a question on ``chain_name`` through the user's wallet.

    The oracle address comes from the bridge feed (first mainnet record for
    the chain) with the registry's known address as fallback. The wallet must
    be on the home chain; it is asked to switch when it is not.

    Usage:
        pipeline = QuestionCreationPipeline("gnosis", resolver, wallet)
        params = QuestionParams(title=..., category="sports", bounty="0.01")
        await pipeline.estimate_gas(params)
        state = await pipeline.create_question(params)   # CONFIRMING, tx hash known
        state = await pipeline.wait_until_settled()       # SUCCEEDED or FAILED
    """

    fallback_message = "Failed to create question"
    operation = "create-question"

    def __init__(
        self,
        chain_name: str,
        resolver: BridgeResolver,
        wallet: WalletGateway,
        transactions: Optional[TransactionGateway] = None,
        *,
        chain_registry: Optional[ChainRegistry] = None,
        template_id: Optional[int] = None,
        language: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(
            wallet,
            transactions,
            chain_registry=chain_registry or resolver.chain_registry,
            logger=logger,
        )
        self.chain_name = chain_name
        self._resolver = resolver
        self._template_id = default_settings.question_template_id if template_id is None else template_id
        self._language = language or default_settings.question_language
        # Last validated mapping and the params built from it
        self._validated: Optional[Tuple[Dict[str, Any], QuestionParams]] = None

    @property
    def chain_id(self) -> str:
        """Home chain the question is created on."""
        return self._chains.chain_id_for_name(self.chain_name)

    @property
    def oracle_address(self) -> str:
        return self._resolver.primary_oracle_address(self.chain_name)

    @property
    def question_id(self) -> Optional[str]:
        result = self._state.result
        return result.question_id if isinstance(result, QuestionCreationResult) else None

    def _coerce(self, params: ParamsInput) -> QuestionParams:
        """
        Validate mapping input once per attempt.

        The same mapping passed again before a reset yields the same
        ``QuestionParams``, so its nonce and default opening time do not
        change between estimation and submission.
        """
        if isinstance(params, QuestionParams):
            return params
        source = dict(params)
        if self._validated is not None and self._validated[0] == source:
            return self._validated[1]
        validated = QuestionParams.model_validate(source)
        self._validated = (source, validated)
        return validated

    def _on_reset(self) -> None:
        self._validated = None

    def _prepare_call(self, params: QuestionParams) -> PreparedCall:
        oracle = self.oracle_address
        if not oracle:
            raise MissingContractDataError(f"No Reality.eth contract found for {self.chain_name}")

        arbitrator = params.arbitrator or self._chains.default_arbitrator(self.chain_name)
        if not arbitrator:
            raise MissingContractDataError(f"No arbitrator available for {self.chain_name}")

        ask = AskQuestionCall(
            template_id=self._template_id,
            question=format_question_text(params.title, params.category, self._language),
            arbitrator=arbitrator,
            timeout=params.timeout,
            opening_ts=params.opening_ts,
            nonce=params.nonce,
        )
        return PreparedCall(
            chain_id=self.chain_id,
            to_address=oracle,
            data=ask.encode(),
            value=params.bounty_wei,
            description=f"askQuestion on {self.chain_name}",
        )

    def _build_result(
        self,
        receipt: TransactionReceipt,
        call: PreparedCall,
        params: QuestionParams,
    ) -> QuestionCreationResult:
        question_id = extract_question_id(receipt.logs)
        if not question_id:
            raise ConfirmationFailedError("Question ID not found in transaction receipt")
        self._logger.info("Question created: %s (tx=%s)", question_id, receipt.transaction_hash)
        return QuestionCreationResult(
            question_id=question_id,
            tx_hash=self._state.tx_hash or receipt.transaction_hash,
            block_number=receipt.block_number,
        )

    async def estimate_gas(self, params: ParamsInput) -> Optional[GasEstimate]:
        """Estimate the cost of ``askQuestion``; failures are recorded, not raised."""
        return await self._estimate(self._coerce(params))

    async def create_question(self, params: ParamsInput) -> PipelineState:
        """
        Submit ``askQuestion`` with the bounty as value.

        Raises:
            pydantic.ValidationError: If ``params`` is a mapping that does not
                validate.
            PipelineBusyError: If an attempt is already in progress or a
                finished one has not been reset.
        """
        return await self._submit(self._coerce(params))
