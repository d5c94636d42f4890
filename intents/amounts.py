from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

MAX_UINT256 = (1 << 256) - 1

# native transfers and custom-call values are entered in whole native units (wei = 10**-18)
NATIVE_DECIMALS = 18

# ERC-20 decimals() is a uint8
MAX_DECIMALS = 255

# anything with its leading digit at 10**78 or above cannot fit in uint256
_MAX_ADJUSTED_EXPONENT = 77

_PLAIN_NUMBER = re.compile(r"[0-9]*\.?[0-9]*(?:[eE][+-]?[0-9]+)?")


class InvalidAmountError(ValueError):
    pass


def _parse_amount(amount_str: str) -> Decimal:
    """
    Validate a user-entered decimal ("1.5", ".5", "1e-3") and parse it.

    Only ASCII digits, one optional point and an optional exponent are accepted.
    """
    text = (amount_str or "").strip()
    if text.startswith("-"):
        raise InvalidAmountError(f"amount must not be negative: {amount_str}")
    if not _PLAIN_NUMBER.fullmatch(text):
        raise InvalidAmountError(f"invalid amount: {amount_str}")
    try:
        dec = Decimal(text)
    except InvalidOperation as exc:
        raise InvalidAmountError(f"invalid amount: {amount_str}") from exc
    if dec and dec.adjusted() > _MAX_ADJUSTED_EXPONENT:
        raise InvalidAmountError("amount exceeds uint256")
    return dec


def _scale_down_exact(dec: Decimal, decimals: int) -> int:
    # floor(dec * 10**decimals) from the coefficient digits, so no context rounding applies
    _, digits, exponent = dec.as_tuple()
    shift = exponent + decimals
    if shift >= 0:
        return int("".join(map(str, digits))) * 10 ** shift
    kept = digits[: len(digits) + shift]
    return int("".join(map(str, kept))) if kept else 0


def to_scaled_integer(amount_str: str, decimals: int, *, allow_zero: bool = False) -> int:
    """
    Convert a decimal string into an integer scaled by 10**decimals.

    Digits beyond `decimals` are truncated, never rounded.
    Raises InvalidAmountError for non-numbers, negatives, values above uint256
    and (unless allow_zero) values that are zero after parsing.
    """
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"decimals must be between 0 and {MAX_DECIMALS}, got {decimals}")

    dec = _parse_amount(amount_str)
    scaled = _scale_down_exact(dec, decimals) if dec else 0

    if scaled == 0 and not allow_zero:
        if dec > 0:
            raise InvalidAmountError("amount too small after decimals conversion")
        raise InvalidAmountError(f"amount must be positive: {amount_str}")
    if scaled > MAX_UINT256:
        raise InvalidAmountError("amount exceeds uint256")
    return scaled


def is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()
