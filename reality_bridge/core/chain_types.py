"""
Chain identification types and utilities.

Wallets and the bridge feed report chain ids as EIP-155 hex strings
("0x1", "0x64", ...). Every comparison between chain ids goes through
``to_hex_chain_id`` so that "0x01", "0X1" and 1 all compare equal.
"""

from __future__ import annotations

from typing import Union

# A chain id as received from a wallet or typed by a caller
RawChainId = Union[int, str]

# Default chain when a name is not recognised
DEFAULT_CHAIN_ID: str = "0x1"  # Ethereum mainnet


def to_hex_chain_id(chain_id: RawChainId) -> str:
    """
    Convert a chain id to its canonical hex form.

    Args:
        chain_id: Integer id, decimal string or hex string.

    Returns:
        Lower-case hex string without leading zeros (e.g. ``"0xa4b1"``).

    Raises:
        ValueError: If the value is not a non-negative integer id.

    Examples:
        >>> to_hex_chain_id(137)
        '0x89'
        >>> to_hex_chain_id("0x01")
        '0x1'
    """
    if isinstance(chain_id, bool):
        raise ValueError(f"Invalid chain id: {chain_id!r}")
    if isinstance(chain_id, int):
        value = chain_id
    else:
        text = str(chain_id).strip().lower()
        try:
            value = int(text, 16) if text.startswith("0x") else int(text)
        except ValueError as exc:
            raise ValueError(f"Invalid chain id: {chain_id!r}") from exc
    if value < 0:
        raise ValueError(f"Invalid chain id: {chain_id!r}")
    return hex(value)


def same_chain(left: RawChainId, right: RawChainId) -> bool:
    """Check whether two chain ids refer to the same chain."""
    try:
        return to_hex_chain_id(left) == to_hex_chain_id(right)
    except ValueError:
        return False
