"""Conversion between human-decimal native amounts and 18-decimal base units."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Optional, Union

from eth_utils import from_wei, to_wei

ETHER_DECIMALS = 18


def parse_ether(amount: Union[str, Decimal, int]) -> int:
    """
    Convert a decimal amount (e.g. ``"0.01"``) to wei.

    Raises:
        ValueError: If the amount is not a finite, non-negative decimal with
            at most 18 fractional digits.
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid amount: {amount!r}")
    if value.as_tuple().exponent < -ETHER_DECIMALS:
        raise ValueError(f"Too many decimals in amount: {amount!r}")
    return int(to_wei(value, "ether"))


def parse_optional_ether(amount: Optional[str]) -> int:
    """Like ``parse_ether`` but an absent or blank amount is zero."""
    if amount is None or not str(amount).strip():
        return 0
    return parse_ether(amount)


def format_ether(wei: int) -> str:
    """Wei as a decimal string, always with a fractional part (``"1.0"``, ``"0.01"``)."""
    with localcontext() as ctx:
        ctx.prec = 78
        value = Decimal(from_wei(int(wei), "ether"))
        text = format(value.normalize(), "f")
    if "." not in text:
        text += ".0"
    return text
