"""
Transaction Pipeline

One state machine shared by every wallet-driven contract operation:

    IDLE -> ESTIMATING -> IDLE                         (gas estimation side branch)
    IDLE -> SUBMITTING -> CONFIRMING -> SUCCEEDED      (commit path)

Any active phase may fall to FAILED. SUCCEEDED and FAILED are terminal for
an attempt; ``reset()`` re-arms the pipeline. Each instance owns its state,
so independent flows never share a pipeline.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Set

from ...providers.wallet import TransactionGateway, WalletGateway
from ..bridge.chain_registry import ChainRegistry, get_chain_registry
from ..chain_types import same_chain
from .errors import (
    ConfirmationFailedError,
    InvalidTransitionError,
    PipelineBusyError,
    PipelineError,
    PipelineErrorKind,
    PipelineFailure,
    SimulationFailedError,
    SubmissionFailedError,
    WalletNotConnectedError,
    WrongNetworkError,
    classify_error,
)
from .models import (
    GasEstimate,
    PipelinePhase,
    PipelineResult,
    PipelineState,
    PreparedCall,
    TransactionReceipt,
)
from .units import format_ether

StateCallback = Callable[[PipelineState], None]


class TransactionPipeline(ABC):
    """
    Base class for a single-attempt transaction flow.

    Subclasses describe *what* to send (``_prepare_call``) and how to read the
    outcome from a receipt (``_build_result``); the base class owns wallet
    preconditions, the phase machine, background confirmation and reset.

    Attempt failures are recorded in ``state`` and returned, never raised.
    Starting an attempt while another one is in progress, or before a
    finished one has been reset, raises ``PipelineBusyError`` and leaves the
    state untouched.
    """

    TRANSITIONS: Dict[PipelinePhase, Set[PipelinePhase]] = {
        PipelinePhase.IDLE: {
            PipelinePhase.ESTIMATING,
            PipelinePhase.SUBMITTING,
            PipelinePhase.FAILED,       # Preconditions or missing contract data
        },
        PipelinePhase.ESTIMATING: {
            PipelinePhase.IDLE,         # Estimation never leaves the pipeline failed
            PipelinePhase.FAILED,
        },
        PipelinePhase.SUBMITTING: {
            PipelinePhase.CONFIRMING,
            PipelinePhase.FAILED,
        },
        PipelinePhase.CONFIRMING: {
            PipelinePhase.SUCCEEDED,
            PipelinePhase.FAILED,
        },
        PipelinePhase.SUCCEEDED: {
            PipelinePhase.IDLE,
        },
        PipelinePhase.FAILED: {
            PipelinePhase.IDLE,
        },
    }

    # Message used when a submission failure carries no better detail
    fallback_message: str = "Transaction failed"
    operation: str = "transaction"

    def __init__(
        self,
        wallet: WalletGateway,
        transactions: Optional[TransactionGateway] = None,
        *,
        chain_registry: Optional[ChainRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if transactions is None:
            if not isinstance(wallet, TransactionGateway):
                raise TypeError("A TransactionGateway is required when the wallet does not implement one")
            transactions = wallet
        self._wallet = wallet
        self._transactions = transactions
        self._chains = chain_registry or get_chain_registry()
        self._logger = logger or logging.getLogger(__name__)

        self._state = PipelineState()
        self._epoch = 0
        self._in_flight = False
        self._confirmation_task: Optional[asyncio.Task] = None
        self._subscribers: List[StateCallback] = []

    # =========================================================================
    # State surface
    # =========================================================================

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def phase(self) -> PipelinePhase:
        return self._state.phase

    @property
    def is_busy(self) -> bool:
        return self._in_flight or self._state.phase != PipelinePhase.IDLE

    def can_transition_to(self, target: PipelinePhase) -> bool:
        return target in self.TRANSITIONS.get(self._state.phase, set())

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        """
        Register a callback notified with a snapshot on every state change.

        Returns a function that removes the callback.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self._state
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                self._logger.exception("Pipeline state subscriber failed")

    def _update(self, **changes: Any) -> None:
        """Change state fields without changing phase."""
        self._state = self._state.evolve(**changes)
        self._notify()

    def _log_fields(self, **fields: Any) -> Dict[str, Any]:
        return {"operation": self.operation, "tx_hash": self._state.tx_hash, **fields}

    def _transition(self, target: PipelinePhase, **changes: Any) -> None:
        current = self._state.phase
        if not self.can_transition_to(target):
            raise InvalidTransitionError(current, target)

        self._state = self._state.evolve(phase=target, **changes)
        self._logger.info(
            "%s pipeline: %s -> %s (tx=%s)",
            self.operation,
            current.value,
            target.value,
            self._state.tx_hash,
            extra=self._log_fields(phase=target.value),
        )
        self._notify()

    def _fail(self, failure: PipelineFailure) -> None:
        self._logger.warning(
            "%s pipeline failed [%s]: %s",
            self.operation,
            failure.kind.value,
            failure.message,
            extra=self._log_fields(phase=PipelinePhase.FAILED.value, error_kind=failure.kind.value),
        )
        self._transition(PipelinePhase.FAILED, error=failure)

    def _ensure_idle(self, target: PipelinePhase, action: str) -> None:
        if self.is_busy:
            raise PipelineBusyError(
                self._state.phase,
                target,
                f"Cannot {action} while the {self.operation} pipeline is {self._state.phase.value}",
            )

    def _is_current(self, epoch: int) -> bool:
        """False once a reset has discarded the attempt started at ``epoch``."""
        return epoch == self._epoch

    # =========================================================================
    # Operation hooks
    # =========================================================================

    @abstractmethod
    def _prepare_call(self, params: Any) -> PreparedCall:
        """
        Build the contract call for an attempt.

        Raises:
            MissingContractDataError: When a contract address, fee or other
                input the call depends on is not available.
        """

    @abstractmethod
    def _build_result(self, receipt: TransactionReceipt, call: PreparedCall, params: Any) -> PipelineResult:
        """Read the operation's outcome from a successful receipt."""

    def _on_reset(self) -> None:
        """Hook for subclasses to clear operation-specific data."""

    # =========================================================================
    # Wallet preconditions
    # =========================================================================

    async def _ensure_wallet_ready(self, required_chain_id: str) -> str:
        """
        Make sure an account is exposed and the wallet is on ``required_chain_id``.

        Returns the sending account. Never returns while the wallet reports a
        different chain.
        """
        try:
            accounts = await self._wallet.get_accounts()
        except Exception as exc:
            raise WalletNotConnectedError() from exc

        if not accounts:
            self._logger.info("No connected account, requesting wallet access")
            try:
                accounts = await self._wallet.request_accounts()
            except Exception as exc:
                raise WalletNotConnectedError() from exc
            if not accounts:
                raise WalletNotConnectedError()

        chain_label = self._chains.name_for_chain_id(required_chain_id) or required_chain_id
        wrong_network = f"Please switch your wallet to {chain_label} ({required_chain_id})"

        try:
            current_chain = await self._wallet.get_chain_id()
        except Exception as exc:
            raise WrongNetworkError(wrong_network) from exc

        if not same_chain(current_chain, required_chain_id):
            self._logger.info(
                "Wallet on chain %s, switching to %s",
                current_chain,
                required_chain_id,
            )
            try:
                await self._wallet.switch_chain(required_chain_id)
                current_chain = await self._wallet.get_chain_id()
            except Exception as exc:
                raise WrongNetworkError(wrong_network) from exc
            if not same_chain(current_chain, required_chain_id):
                raise WrongNetworkError(wrong_network)

        return accounts[0]

    # =========================================================================
    # Gas estimation
    # =========================================================================

    async def _estimate(self, params: Any) -> Optional[GasEstimate]:
        """
        Simulate the call and price it at the current gas price.

        Failures land back in IDLE with the error recorded and never block a
        later submission.
        """
        self._ensure_idle(PipelinePhase.ESTIMATING, "estimate gas")
        epoch = self._epoch
        self._transition(PipelinePhase.ESTIMATING, error=None, gas_estimate=None)

        try:
            call = self._prepare_call(params)
            accounts = await self._wallet.get_accounts()
            tx = call.to_dict(accounts[0] if accounts else None)
            gas_limit = await self._transactions.estimate_gas(tx)
            gas_price = await self._transactions.gas_price()
        except PipelineError as exc:
            failure = exc.to_failure()
        except Exception as exc:
            failure = classify_error(
                exc,
                fallback_kind=PipelineErrorKind.SIMULATION_FAILED,
                fallback_message=SimulationFailedError().message,
            )
            if failure.kind != PipelineErrorKind.SIMULATION_FAILED:
                failure = PipelineFailure(
                    PipelineErrorKind.SIMULATION_FAILED,
                    failure.message,
                    failure.revert_reason,
                )
        else:
            if not self._is_current(epoch):
                return None
            estimate = GasEstimate(gas_limit=gas_limit, gas_price_wei=gas_price)
            estimate.estimated_cost = format_ether(estimate.estimated_cost_wei)
            self._logger.info(
                "%s gas estimate: %s units at %s wei (%s)",
                self.operation,
                gas_limit,
                gas_price,
                estimate.estimated_cost,
            )
            self._transition(PipelinePhase.IDLE, gas_estimate=estimate)
            return estimate

        if self._is_current(epoch):
            self._logger.warning("%s gas estimation failed: %s", self.operation, failure.message)
            self._transition(PipelinePhase.IDLE, error=failure)
        return None

    # =========================================================================
    # Submission and confirmation
    # =========================================================================

    async def _submit(self, params: Any) -> PipelineState:
        """
        Run preconditions, broadcast and hand off to background confirmation.

        Returns as soon as the transaction hash is known (phase CONFIRMING)
        or the attempt has failed.
        """
        self._ensure_idle(PipelinePhase.SUBMITTING, "submit")
        epoch = self._epoch
        self._in_flight = True
        try:
            call = self._prepare_call(params)
            account = await self._ensure_wallet_ready(call.chain_id)
        except PipelineError as exc:
            failure = exc.to_failure()
        except Exception as exc:
            failure = classify_error(exc, fallback_message=self.fallback_message)
        else:
            failure = None
        finally:
            if self._is_current(epoch):
                self._in_flight = False

        if not self._is_current(epoch):
            return self._state
        if failure is not None:
            self._fail(failure)
            return self._state

        self._transition(PipelinePhase.SUBMITTING, error=None, result=None, tx_hash=None)
        try:
            tx_hash = await self._transactions.send_transaction(call.to_dict(account))
        except Exception as exc:
            if self._is_current(epoch):
                self._fail(classify_error(exc, fallback_message=self.fallback_message))
            return self._state

        if not self._is_current(epoch):
            return self._state

        self._transition(PipelinePhase.CONFIRMING, tx_hash=tx_hash)
        self._confirmation_task = asyncio.create_task(
            self._confirm(epoch, tx_hash, call, params)
        )
        return self._state

    async def _confirm(self, epoch: int, tx_hash: str, call: PreparedCall, params: Any) -> None:
        try:
            raw_receipt = await self._transactions.wait_for_receipt(tx_hash)
            if raw_receipt is None:
                raise ConfirmationFailedError("Transaction receipt not available")
            receipt = TransactionReceipt.from_rpc(raw_receipt)
            if not receipt.succeeded:
                raise SubmissionFailedError("Transaction reverted")
            result = self._build_result(receipt, call, params)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if self._is_current(epoch):
                self._fail(classify_error(
                    exc,
                    fallback_kind=PipelineErrorKind.CONFIRMATION_FAILED,
                    fallback_message=self.fallback_message,
                ))
            return

        if self._is_current(epoch):
            self._transition(PipelinePhase.SUCCEEDED, result=result)

    async def wait_until_settled(self) -> PipelineState:
        """Wait for a background confirmation (if any) and return the state."""
        task = self._confirmation_task
        if task is not None and not task.done():
            await asyncio.wait({task})
        return self._state

    # =========================================================================
    # Reset and lifecycle
    # =========================================================================

    def reset(self) -> None:
        """
        Return to IDLE unconditionally.

        Results of any attempt still in progress are discarded. A transaction
        already broadcast stays on-chain; only local tracking stops.
        """
        previous = self._state.phase
        self._epoch += 1
        self._in_flight = False

        task = self._confirmation_task
        self._confirmation_task = None
        if task is not None and not task.done():
            task.cancel()

        self._on_reset()
        self._state = PipelineState()
        self._logger.info("%s pipeline reset from %s", self.operation, previous.value)
        self._notify()

    async def close(self) -> None:
        task = self._confirmation_task
        self.reset()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def __aenter__(self) -> "TransactionPipeline":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
