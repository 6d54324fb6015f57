"""
Pipeline Error Classification

Every failed attempt is reported with a kind from a fixed taxonomy and a
stable, human-readable message. Wallet and transport exceptions are mapped
onto the taxonomy by ``classify_error``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class PipelineErrorKind(str, Enum):
    """Categories of pipeline failures."""

    USER_REJECTED = "user_rejected"                 # User declined in the wallet
    INSUFFICIENT_FUNDS = "insufficient_funds"       # Not enough balance for value + gas
    WRONG_NETWORK = "wrong_network"                 # Wallet not on (and not switched to) the required chain
    WALLET_NOT_CONNECTED = "wallet_not_connected"   # No account exposed
    MISSING_CONTRACT_DATA = "missing_contract_data"  # No bridge, oracle or fee data
    SIMULATION_FAILED = "simulation_failed"         # Gas estimation only, non-fatal
    SUBMISSION_FAILED = "submission_failed"         # Broadcast or on-chain revert
    CONFIRMATION_FAILED = "confirmation_failed"     # Receipt missing or expected event absent


USER_REJECTED_MESSAGE = "Transaction was rejected by user"
INSUFFICIENT_FUNDS_MESSAGE = "Insufficient funds for transaction"


@dataclass(frozen=True)
class PipelineFailure:
    """Failure recorded in pipeline state."""

    kind: PipelineErrorKind
    message: str
    revert_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "revertReason": self.revert_reason,
        }


class PipelineError(Exception):
    """Base exception for pipeline failures."""

    kind: PipelineErrorKind = PipelineErrorKind.SUBMISSION_FAILED

    def __init__(self, message: str, revert_reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.revert_reason = revert_reason

    def to_failure(self) -> PipelineFailure:
        return PipelineFailure(kind=self.kind, message=self.message, revert_reason=self.revert_reason)


class UserRejectedError(PipelineError):
    kind = PipelineErrorKind.USER_REJECTED

    def __init__(self, message: str = USER_REJECTED_MESSAGE):
        super().__init__(message)


class InsufficientFundsError(PipelineError):
    kind = PipelineErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, message: str = INSUFFICIENT_FUNDS_MESSAGE):
        super().__init__(message)


class WrongNetworkError(PipelineError):
    kind = PipelineErrorKind.WRONG_NETWORK


class WalletNotConnectedError(PipelineError):
    kind = PipelineErrorKind.WALLET_NOT_CONNECTED

    def __init__(self, message: str = "Wallet not connected"):
        super().__init__(message)


class MissingContractDataError(PipelineError):
    kind = PipelineErrorKind.MISSING_CONTRACT_DATA


class SimulationFailedError(PipelineError):
    kind = PipelineErrorKind.SIMULATION_FAILED

    def __init__(self, message: str = "Failed to estimate gas"):
        super().__init__(message)


class SubmissionFailedError(PipelineError):
    kind = PipelineErrorKind.SUBMISSION_FAILED


class ConfirmationFailedError(PipelineError):
    kind = PipelineErrorKind.CONFIRMATION_FAILED


class InvalidTransitionError(Exception):
    """Raised when a pipeline phase change is not allowed."""

    def __init__(self, from_phase: Any, to_phase: Any, message: Optional[str] = None):
        self.from_phase = from_phase
        self.to_phase = to_phase
        super().__init__(message or f"Invalid transition from {from_phase} to {to_phase}")


class PipelineBusyError(InvalidTransitionError):
    """An attempt was started while the pipeline was not idle."""


_REVERT_PATTERN = re.compile(r"execution reverted:?\s*(.*)", re.IGNORECASE)


def _revert_reason(error: Exception) -> Optional[str]:
    reason = getattr(error, "reason", None) or getattr(error, "revert_reason", None)
    if reason:
        return str(reason)
    message = getattr(error, "message", None) or str(error)
    match = _REVERT_PATTERN.search(message)
    if match:
        return match.group(1).strip() or None
    return None


def is_user_rejection(error: Exception) -> bool:
    code = getattr(error, "code", None)
    if code in (4001, "ACTION_REJECTED"):
        return True
    return "user rejected" in str(error).lower()


def classify_error(
    error: Exception,
    fallback_kind: PipelineErrorKind = PipelineErrorKind.SUBMISSION_FAILED,
    fallback_message: str = "Transaction failed",
) -> PipelineFailure:
    """
    Map an exception raised by a wallet or transport onto the taxonomy.

    Already classified ``PipelineError`` instances keep their own kind and
    message. A revert reason, when one can be found, is kept and surfaced in
    the message.
    """
    if isinstance(error, PipelineError):
        return error.to_failure()

    if is_user_rejection(error):
        return UserRejectedError().to_failure()

    code = getattr(error, "code", None)
    if code == "INSUFFICIENT_FUNDS" or "insufficient funds" in str(error).lower():
        return InsufficientFundsError().to_failure()

    reason = _revert_reason(error)
    if reason:
        return PipelineFailure(fallback_kind, f"Transaction failed: {reason}", revert_reason=reason)

    return PipelineFailure(fallback_kind, fallback_message)


__all__ = [
    "ConfirmationFailedError",
    "InsufficientFundsError",
    "InvalidTransitionError",
    "MissingContractDataError",
    "PipelineBusyError",
    "PipelineError",
    "PipelineErrorKind",
    "PipelineFailure",
    "SimulationFailedError",
    "SubmissionFailedError",
    "UserRejectedError",
    "WalletNotConnectedError",
    "WrongNetworkError",
    "classify_error",
    "is_user_rejection",
]
