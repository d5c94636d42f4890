from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from intents.amounts import MAX_DECIMALS
from intents.types import CallIntent, IntentKind


class WalletConnectRequest(BaseModel):
    address: str = Field(..., min_length=3, max_length=64)
    chainId: int | None = Field(default=None, ge=1)


class ChainChangedRequest(BaseModel):
    chainId: int = Field(..., ge=1)


class AddIntentRequest(BaseModel):
    intent: CallIntent


class IntentFormUpdate(BaseModel):
    kind: IntentKind | None = None
    to: str | None = None
    amount: str | None = None
    token: str | None = None
    recipient: str | None = None
    spender: str | None = None
    decimals: int | None = Field(default=None, ge=0, le=MAX_DECIMALS)
    data: str | None = None


class BatchLimitSummary(BaseModel):
    truncated: bool
    originalCount: int
    sentCount: int
    discardedCount: int


class BatchSnapshotResponse(BaseModel):
    ok: bool = True
    state: dict[str, Any]
    pending: list[dict[str, Any]]
    totalValue: int = 0
    form: dict[str, Any]
    account: str | None = None
    chainId: int | None = None
    chainName: str
    nativeCurrency: str
    maxBatchSize: int
    truncation: dict[str, Any] | None = None
    explorerUrl: str | None = None
    batch: BatchLimitSummary | None = None


class ChainRead(BaseModel):
    chainId: int
    name: str
    nativeCurrency: str
    explorerUrl: str
