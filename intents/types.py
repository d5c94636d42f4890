from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from intents.amounts import MAX_DECIMALS


class IntentKind(str, Enum):
    NATIVE_TRANSFER = "native_transfer"
    ERC20_TRANSFER = "erc20_transfer"
    ERC20_APPROVE = "erc20_approve"
    CUSTOM_CALL = "custom_call"


class _Intent(BaseModel):
    # raw user input; validated by intents.builder, frozen once created
    model_config = ConfigDict(frozen=True)


class NativeTransfer(_Intent):
    kind: Literal["native_transfer"] = "native_transfer"
    to: str = ""
    amount: str = ""


class Erc20Transfer(_Intent):
    kind: Literal["erc20_transfer"] = "erc20_transfer"
    token: str = ""
    to: str = ""
    amount: str = ""
    decimals: int = Field(default=18, ge=0, le=MAX_DECIMALS)


class Erc20Approve(_Intent):
    kind: Literal["erc20_approve"] = "erc20_approve"
    token: str = ""
    spender: str = ""
    amount: str | None = None  # blank => unlimited
    decimals: int = Field(default=18, ge=0, le=MAX_DECIMALS)


class CustomCall(_Intent):
    kind: Literal["custom_call"] = "custom_call"
    to: str = ""
    value: str | None = None  # blank => 0, in native units
    data: str = ""


CallIntent = Annotated[
    Union[NativeTransfer, Erc20Transfer, Erc20Approve, CustomCall],
    Field(discriminator="kind"),
]


class Call(BaseModel):
    """Wire-ready unit of a batch: one intent maps to exactly one Call."""

    model_config = ConfigDict(frozen=True)

    to: str
    value: int = Field(default=0, ge=0)
    data: str = "0x"

    def to_wire(self) -> Dict[str, Any]:
        """EIP-5792 call object. Empty calldata is omitted."""
        wire: Dict[str, Any] = {"to": self.to, "value": hex(self.value)}
        if self.data and self.data != "0x":
            wire["data"] = self.data
        return wire


class PendingCall(BaseModel):
    model_config = ConfigDict(frozen=True)

    intent: CallIntent
    call: Call


class IntentForm(BaseModel):
    """
    Draft input for the intent being composed.

    Mirrors the fields a user types; `to_intent()` picks the ones that matter
    for the selected kind.
    """

    kind: IntentKind = IntentKind.NATIVE_TRANSFER
    to: str = ""
    amount: str = ""
    token: str = ""
    recipient: str = ""
    spender: str = ""
    decimals: int = Field(default=18, ge=0, le=MAX_DECIMALS)
    data: str = ""

    def to_intent(self):
        if self.kind == IntentKind.NATIVE_TRANSFER:
            return NativeTransfer(to=self.to, amount=self.amount)
        if self.kind == IntentKind.ERC20_TRANSFER:
            return Erc20Transfer(
                token=self.token,
                to=self.recipient,
                amount=self.amount,
                decimals=self.decimals,
            )
        if self.kind == IntentKind.ERC20_APPROVE:
            return Erc20Approve(
                token=self.token,
                spender=self.spender,
                amount=self.amount or None,
                decimals=self.decimals,
            )
        return CustomCall(to=self.to, value=self.amount or None, data=self.data)

    def cleared(self) -> "IntentForm":
        # kind and decimals survive a successful add
        return IntentForm(kind=self.kind, decimals=self.decimals)


__all__ = [
    "IntentKind",
    "NativeTransfer",
    "Erc20Transfer",
    "Erc20Approve",
    "CustomCall",
    "CallIntent",
    "Call",
    "PendingCall",
    "IntentForm",
]
