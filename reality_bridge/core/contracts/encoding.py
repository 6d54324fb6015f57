"""ABI helpers shared by the contract wrappers."""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode, encode
from eth_utils import (
    decode_hex,
    encode_hex,
    event_signature_to_log_topic,
    function_signature_to_4byte_selector,
    is_address,
    to_checksum_address,
)


def encode_call(signature: str, types: Sequence[str], args: Sequence[Any]) -> str:
    """Selector plus ABI-encoded arguments, as a 0x-prefixed hex string."""
    selector = function_signature_to_4byte_selector(signature)
    return encode_hex(selector + encode(list(types), list(args)))


def event_topic(signature: str) -> str:
    return encode_hex(event_signature_to_log_topic(signature))


def question_id_to_bytes32(question_id: str) -> bytes:
    """
    Raw bytes of an on-chain question identifier.

    The identifier is already the contract's bytes32 key; it is decoded from
    hex as-is and never hashed.
    """
    try:
        raw = decode_hex(question_id)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Question id is not hex: {question_id!r}") from exc
    if len(raw) != 32:
        raise ValueError(f"Question id must be 32 bytes, got {len(raw)}: {question_id!r}")
    return raw


def checksum_address(address: str) -> str:
    if not address or not is_address(address.lower()):
        raise ValueError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


def decode_uint256(data: str) -> int:
    """Decode a single uint256 return value from ``eth_call`` output."""
    raw = decode_hex(data or "0x")
    if len(raw) < 32:
        raise ValueError(f"Return data too short for uint256: {data!r}")
    (value,) = decode(["uint256"], raw)
    return int(value)
