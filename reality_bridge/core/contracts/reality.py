"""Reality.eth oracle calls: question text, askQuestion calldata, LogNewQuestion scanning."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence

from .abis import ASK_QUESTION_SIGNATURE, ASK_QUESTION_TYPES, LOG_NEW_QUESTION_SIGNATURE
from .encoding import checksum_address, encode_call, event_topic

# Reality.eth question fields are delimited by the unit separator control
# character (0x1F). U+241F is only its printable symbol.
QUESTION_FIELD_SEPARATOR = "\x1f"

LOG_NEW_QUESTION_TOPIC = event_topic(LOG_NEW_QUESTION_SIGNATURE)


class LogLike(Protocol):
    topics: Sequence[str]


def format_question_text(title: str, category: str, language: str = "en") -> str:
    """``title<US>category<US>language`` as stored by the oracle."""
    return QUESTION_FIELD_SEPARATOR.join([title, category, language])


@dataclass(frozen=True)
class AskQuestionCall:
    """Arguments of ``askQuestion``; the bounty travels as the call value."""

    template_id: int
    question: str
    arbitrator: str
    timeout: int
    opening_ts: int
    nonce: int

    def encode(self) -> str:
        return encode_call(
            ASK_QUESTION_SIGNATURE,
            ASK_QUESTION_TYPES,
            [
                self.template_id,
                self.question,
                checksum_address(self.arbitrator),
                self.timeout,
                self.opening_ts,
                self.nonce,
            ],
        )


def extract_question_id(logs: Iterable[LogLike]) -> Optional[str]:
    """
    Question id from the first ``LogNewQuestion`` entry of a receipt.

    Logs are scanned in receipt order; later matches are ignored. The id is
    the event's first indexed argument (topic 1).
    """
    for log in logs:
        topics = list(log.topics or [])
        if len(topics) < 2:
            continue
        if str(topics[0]).lower() == LOG_NEW_QUESTION_TOPIC:
            return str(topics[1]).lower()
    return None
