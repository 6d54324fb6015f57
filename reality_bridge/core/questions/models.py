"""
Question records consumed from the question/dispute data feed.

Records are read-only: the pipelines never rewrite a question, and the
question ``id`` is the on-chain bytes32 identifier passed through unchanged
to every contract call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

FINALIZED_PHASE = "finalized"


@dataclass(frozen=True)
class QuestionChain:
    """Home chain of a question as reported by the data feed."""

    id: Optional[str] = None
    name: Optional[str] = None
    native_currency: Optional[str] = None


@dataclass(frozen=True)
class QuestionRecord:
    """A Reality.eth question as seen by the pipelines."""

    id: str
    chain: QuestionChain
    arbitrator: Optional[str] = None
    current_bond: str = "0"
    phase: str = ""
    arbitration_requested_by: Optional[str] = None
    title: str = ""

    @classmethod
    def from_feed(cls, data: Mapping[str, Any]) -> "QuestionRecord":
        """Build a record from the data feed's camelCase payload."""
        chain = data.get("chain") or {}
        return cls(
            id=str(data.get("id") or ""),
            chain=QuestionChain(
                id=chain.get("id"),
                name=chain.get("name"),
                native_currency=chain.get("native_currency"),
            ),
            arbitrator=data.get("arbitrator") or None,
            current_bond=str(data.get("currentBond") or "0"),
            phase=str(data.get("phase") or ""),
            arbitration_requested_by=data.get("arbitrationRequestedBy") or None,
            title=str(data.get("title") or ""),
        )


def is_arbitration_requested(question: Optional[QuestionRecord]) -> bool:
    return bool(question and question.arbitration_requested_by)


def can_request_arbitration(question: Optional[QuestionRecord]) -> bool:
    """Whether arbitration may still be requested for a question."""
    if question is None:
        return False
    if is_arbitration_requested(question):
        return False
    if question.phase == FINALIZED_PHASE:
        return False
    if not question.arbitrator:
        return False
    if not question.chain.name:
        return False
    return True
