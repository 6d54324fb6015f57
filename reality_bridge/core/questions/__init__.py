"""Question records and arbitration eligibility checks."""

from .models import (
    QuestionChain,
    QuestionRecord,
    can_request_arbitration,
    is_arbitration_requested,
)

__all__ = [
    "QuestionChain",
    "QuestionRecord",
    "can_request_arbitration",
    "is_arbitration_requested",
]
