"""Foreign arbitrator proxy calls: dispute fee query and arbitration request."""

from __future__ import annotations

from typing import Iterable

from .abis import (
    ARBITRATION_REQUESTED_SIGNATURE,
    GET_DISPUTE_FEE_SIGNATURE,
    GET_DISPUTE_FEE_TYPES,
    REQUEST_ARBITRATION_SIGNATURE,
    REQUEST_ARBITRATION_TYPES,
)
from .encoding import decode_uint256, encode_call, event_topic, question_id_to_bytes32
from .reality import LogLike

ARBITRATION_REQUESTED_TOPIC = event_topic(ARBITRATION_REQUESTED_SIGNATURE)


def encode_get_dispute_fee(question_id: str) -> str:
    return encode_call(
        GET_DISPUTE_FEE_SIGNATURE,
        GET_DISPUTE_FEE_TYPES,
        [question_id_to_bytes32(question_id)],
    )


def decode_dispute_fee(data: str) -> int:
    """Dispute fee in wei from ``getDisputeFee`` return data."""
    return decode_uint256(data)


def encode_request_arbitration(question_id: str, max_previous: int) -> str:
    """
    Calldata for ``requestArbitration(questionId, maxPrevious)``.

    ``max_previous`` of 0 means no ceiling on the bond being contested.
    """
    if max_previous < 0:
        raise ValueError("max_previous must not be negative")
    return encode_call(
        REQUEST_ARBITRATION_SIGNATURE,
        REQUEST_ARBITRATION_TYPES,
        [question_id_to_bytes32(question_id), max_previous],
    )


def find_arbitration_requested(logs: Iterable[LogLike], question_id: str) -> bool:
    """Whether a receipt carries ``ArbitrationRequested`` for ``question_id``."""
    wanted = question_id.lower()
    for log in logs:
        topics = [str(topic).lower() for topic in (log.topics or [])]
        if len(topics) >= 2 and topics[0] == ARBITRATION_REQUESTED_TOPIC and topics[1] == wanted:
            return True
    return False
