"""Wallet-driven transaction pipelines: question creation and arbitration requests."""

from .arbitration_request import ArbitrationRequestPipeline
from .errors import (
    ConfirmationFailedError,
    InsufficientFundsError,
    InvalidTransitionError,
    MissingContractDataError,
    PipelineBusyError,
    PipelineError,
    PipelineErrorKind,
    PipelineFailure,
    SimulationFailedError,
    SubmissionFailedError,
    UserRejectedError,
    WalletNotConnectedError,
    WrongNetworkError,
    classify_error,
)
from .models import (
    ArbitrationRequestResult,
    GasEstimate,
    PipelinePhase,
    PipelineState,
    PreparedCall,
    QuestionCreationResult,
    TransactionReceipt,
)
from .pipeline import TransactionPipeline
from .question_creation import QuestionCreationPipeline, QuestionParams
from .units import format_ether, parse_ether, parse_optional_ether

__all__ = [
    "ArbitrationRequestPipeline",
    "ArbitrationRequestResult",
    "ConfirmationFailedError",
    "GasEstimate",
    "InsufficientFundsError",
    "InvalidTransitionError",
    "MissingContractDataError",
    "PipelineBusyError",
    "PipelineError",
    "PipelineErrorKind",
    "PipelineFailure",
    "PipelinePhase",
    "PipelineState",
    "PreparedCall",
    "QuestionCreationPipeline",
    "QuestionCreationResult",
    "QuestionParams",
    "SimulationFailedError",
    "SubmissionFailedError",
    "TransactionPipeline",
    "TransactionReceipt",
    "UserRejectedError",
    "WalletNotConnectedError",
    "WrongNetworkError",
    "classify_error",
    "format_ether",
    "parse_ether",
    "parse_optional_ether",
]
