from __future__ import annotations

import logging
import re
from typing import Callable, Dict

from intents.amounts import (
    MAX_UINT256,
    NATIVE_DECIMALS,
    InvalidAmountError,
    is_blank,
    to_scaled_integer,
)
from intents.calldata import encode_approve, encode_transfer
from intents.types import Call, CustomCall, Erc20Approve, Erc20Transfer, NativeTransfer

logger = logging.getLogger(__name__)

ADDRESS_LEN = 42
_HEX_BODY = re.compile(r"^[0-9a-fA-F]*$")


class IntentValidationError(ValueError):
    """Bad user input for one intent field. Never reaches submission."""

    REQUIRED = "required"
    INVALID_ADDRESS = "invalid_address"
    INVALID_DATA = "invalid_data"
    INVALID_AMOUNT = "invalid_amount"

    def __init__(self, field: str, code: str, message: str):
        self.field = field
        self.code = code
        self.message = message
        super().__init__(f"{field}: {message}")


def is_address(value: str) -> bool:
    # shape only: 0x + 40 hex chars, case is left as entered
    return (
        isinstance(value, str)
        and len(value) == ADDRESS_LEN
        and value.startswith("0x")
        and bool(_HEX_BODY.match(value[2:]))
    )


def is_hex_data(value: str) -> bool:
    return (
        isinstance(value, str)
        and value.startswith("0x")
        and len(value) % 2 == 0
        and bool(_HEX_BODY.match(value[2:]))
    )


# ---------------------------
# Validation steps (presence -> format -> range)
# ---------------------------

def _require(field: str, value: str | None, label: str) -> None:
    if is_blank(value):
        raise IntentValidationError(field, IntentValidationError.REQUIRED, f"please enter {label}")


def _require_address(field: str, value: str, label: str) -> None:
    if not is_address(value):
        raise IntentValidationError(
            field,
            IntentValidationError.INVALID_ADDRESS,
            f"{label} must be 0x followed by 40 hex characters",
        )


def _scaled(field: str, amount: str, decimals: int, *, allow_zero: bool) -> int:
    try:
        return to_scaled_integer(amount, decimals, allow_zero=allow_zero)
    except InvalidAmountError as e:
        raise IntentValidationError(field, IntentValidationError.INVALID_AMOUNT, str(e)) from e


def _encoded_target(user_value: str, override: str | None) -> str:
    if override and override.lower() != user_value.lower():
        logger.warning(
            "encoded recipient overridden: entered=%s encoded=%s", user_value, override
        )
        return override
    return user_value


# ---------------------------
# Per-kind builders
# ---------------------------

def build_native_transfer(intent: NativeTransfer, *, recipient_override: str | None = None) -> Call:
    _require("to", intent.to, "a recipient address")
    _require("amount", intent.amount, "an amount")
    _require_address("to", intent.to, "recipient address")
    value = _scaled("amount", intent.amount, NATIVE_DECIMALS, allow_zero=False)

    return Call(to=_encoded_target(intent.to, recipient_override), value=value, data="0x")


def build_erc20_transfer(intent: Erc20Transfer, *, recipient_override: str | None = None) -> Call:
    _require("token", intent.token, "a token address")
    _require("to", intent.to, "a recipient address")
    _require("amount", intent.amount, "an amount")
    _require_address("token", intent.token, "token address")
    _require_address("to", intent.to, "recipient address")
    amount = _scaled("amount", intent.amount, intent.decimals, allow_zero=False)

    recipient = _encoded_target(intent.to, recipient_override)
    return Call(to=intent.token, value=0, data=encode_transfer(recipient, amount))


def build_erc20_approve(intent: Erc20Approve, *, recipient_override: str | None = None) -> Call:
    _require("token", intent.token, "a token address")
    _require("spender", intent.spender, "a spender address")
    _require_address("token", intent.token, "token address")
    _require_address("spender", intent.spender, "spender address")

    if is_blank(intent.amount):
        amount = MAX_UINT256
    else:
        amount = _scaled("amount", intent.amount, intent.decimals, allow_zero=True)

    spender = _encoded_target(intent.spender, recipient_override)
    return Call(to=intent.token, value=0, data=encode_approve(spender, amount))


def build_custom_call(intent: CustomCall, *, recipient_override: str | None = None) -> Call:
    # raw calls are sent exactly as entered; the override does not apply
    _require("to", intent.to, "a target address")
    _require("data", intent.data, "the data field")
    _require_address("to", intent.to, "target address")
    if not is_hex_data(intent.data):
        raise IntentValidationError(
            "data",
            IntentValidationError.INVALID_DATA,
            "data must start with 0x and contain an even number of hex characters",
        )

    value = 0
    if not is_blank(intent.value):
        value = _scaled("value", intent.value, NATIVE_DECIMALS, allow_zero=True)

    return Call(to=intent.to, value=value, data=intent.data)


_BUILDERS: Dict[str, Callable[..., Call]] = {
    "native_transfer": build_native_transfer,
    "erc20_transfer": build_erc20_transfer,
    "erc20_approve": build_erc20_approve,
    "custom_call": build_custom_call,
}


def build_call(intent, *, recipient_override: str | None = None) -> Call:
    """
    Validate one intent and normalize it into a Call.

    Raises IntentValidationError on the first failing check.
    """
    builder = _BUILDERS.get(intent.kind)
    if builder is None:
        raise ValueError(f"unknown intent kind: {intent.kind}")
    return builder(intent, recipient_override=recipient_override)
