"""Calldata encoding and receipt decoding for the oracle and arbitrator proxy."""

from .arbitrator_proxy import (
    ARBITRATION_REQUESTED_TOPIC,
    decode_dispute_fee,
    encode_get_dispute_fee,
    encode_request_arbitration,
    find_arbitration_requested,
)
from .encoding import question_id_to_bytes32
from .reality import (
    LOG_NEW_QUESTION_TOPIC,
    QUESTION_FIELD_SEPARATOR,
    AskQuestionCall,
    extract_question_id,
    format_question_text,
)

__all__ = [
    "ARBITRATION_REQUESTED_TOPIC",
    "AskQuestionCall",
    "LOG_NEW_QUESTION_TOPIC",
    "QUESTION_FIELD_SEPARATOR",
    "decode_dispute_fee",
    "encode_get_dispute_fee",
    "encode_request_arbitration",
    "extract_question_id",
    "find_arbitration_requested",
    "format_question_text",
    "question_id_to_bytes32",
]
