"""
Transaction pipeline models and types.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import PipelineFailure


class PipelinePhase(str, Enum):
    """Pipeline lifecycle phase."""
    IDLE = "idle"                # Ready for a new attempt
    ESTIMATING = "estimating"    # Gas simulation in flight (side branch)
    SUBMITTING = "submitting"    # Waiting for broadcast acknowledgment
    CONFIRMING = "confirming"    # Broadcast, waiting for the receipt
    SUCCEEDED = "succeeded"      # Confirmed
    FAILED = "failed"            # Attempt failed; reset before retrying


ACTIVE_PHASES = frozenset({
    PipelinePhase.ESTIMATING,
    PipelinePhase.SUBMITTING,
    PipelinePhase.CONFIRMING,
})

TERMINAL_PHASES = frozenset({PipelinePhase.SUCCEEDED, PipelinePhase.FAILED})


@dataclass
class GasEstimate:
    """Gas estimation for a pipeline call."""
    gas_limit: int
    gas_price_wei: int
    estimated_cost_wei: int = 0
    estimated_cost: str = ""                    # Native currency, human decimal

    def __post_init__(self):
        if self.estimated_cost_wei == 0:
            self.estimated_cost_wei = self.gas_limit * self.gas_price_wei


@dataclass(frozen=True)
class PreparedCall:
    """A contract call ready to be simulated or sent through the wallet."""
    chain_id: str                               # Chain the call must execute on
    to_address: str
    data: str                                   # Encoded calldata (hex)
    value: int = 0                              # Wei to send
    description: str = ""

    def to_dict(self, from_address: Optional[str] = None) -> Dict[str, Any]:
        """Convert to an ``eth_sendTransaction`` / ``eth_estimateGas`` object."""
        tx = {
            "to": self.to_address,
            "data": self.data,
            "value": hex(self.value),
            "chainId": self.chain_id,
        }
        if from_address:
            tx["from"] = from_address
        return tx


@dataclass(frozen=True)
class ReceiptLog:
    address: str
    topics: List[str]
    data: str = "0x"


def _to_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.lower().startswith("0x") else int(text)


@dataclass(frozen=True)
class TransactionReceipt:
    """Decoded subset of an ``eth_getTransactionReceipt`` result."""
    transaction_hash: str
    status: int
    block_number: Optional[int] = None
    logs: List[ReceiptLog] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_rpc(cls, receipt: Mapping[str, Any]) -> "TransactionReceipt":
        block = receipt.get("blockNumber")
        return cls(
            transaction_hash=str(receipt.get("transactionHash") or ""),
            # Pre-Byzantium receipts carry no status; treat them as success
            status=_to_int(receipt.get("status"), default=1),
            block_number=_to_int(block) if block is not None else None,
            logs=[
                ReceiptLog(
                    address=str(log.get("address") or ""),
                    topics=[str(topic) for topic in (log.get("topics") or [])],
                    data=str(log.get("data") or "0x"),
                )
                for log in (receipt.get("logs") or [])
            ],
        )


@dataclass(frozen=True)
class QuestionCreationResult:
    question_id: str
    tx_hash: str
    block_number: Optional[int] = None


@dataclass(frozen=True)
class ArbitrationRequestResult:
    question_id: str
    tx_hash: str
    foreign_chain_id: str
    block_number: Optional[int] = None
    event_observed: bool = False                # ArbitrationRequested seen in the receipt


PipelineResult = Union[QuestionCreationResult, ArbitrationRequestResult]


@dataclass(frozen=True)
class PipelineState:
    """Snapshot of one pipeline's status surface."""
    phase: PipelinePhase = PipelinePhase.IDLE
    error: Optional[PipelineFailure] = None
    tx_hash: Optional[str] = None
    result: Optional[PipelineResult] = None
    gas_estimate: Optional[GasEstimate] = None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @property
    def is_success(self) -> bool:
        return self.phase == PipelinePhase.SUCCEEDED

    @property
    def is_active(self) -> bool:
        return self.phase in ACTIVE_PHASES

    @property
    def is_final(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def is_confirming(self) -> bool:
        return self.phase == PipelinePhase.CONFIRMING

    def evolve(self, **changes: Any) -> "PipelineState":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "error": self.error.to_dict() if self.error else None,
            "txHash": self.tx_hash,
            "gasEstimate": self.gas_estimate.estimated_cost if self.gas_estimate else None,
        }
