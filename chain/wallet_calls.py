from __future__ import annotations

import logging
from typing import Any, List, Literal, Optional, Protocol, Sequence

from pydantic import BaseModel, Field
from web3 import AsyncWeb3
from web3.types import RPCEndpoint

from intents.types import Call

logger = logging.getLogger(__name__)

CALLS_API_VERSION = "2.0.0"

CallsStatusValue = Literal["pending", "success", "failure"]


class WalletRPCError(RuntimeError):
    def __init__(self, message: str, code: int | None = None):
        self.code = code
        super().__init__(message)


class CallsReceipt(BaseModel):
    transactionHash: str
    status: Optional[str] = None
    blockNumber: Optional[str] = None


class CallsStatus(BaseModel):
    status: CallsStatusValue
    receipts: List[CallsReceipt] = Field(default_factory=list)

    @property
    def first_tx_hash(self) -> str | None:
        for r in self.receipts:
            if r.transactionHash:
                return r.transactionHash
        return None


class CallsTransport(Protocol):
    async def submit_batch(self, chain_id: int, calls: Sequence[Call], *, sender: str | None = None) -> str:
        ...

    async def get_status(self, bundle_id: str) -> CallsStatus:
        ...


def normalize_calls_status(raw: Any) -> CallsStatusValue:
    """
    Map a wallet_getCallsStatus status to pending/success/failure.

    EIP-5792 v2 uses numeric codes (1xx pending, 2xx confirmed, 4xx/5xx/6xx
    failed); older wallets return strings such as "PENDING" / "CONFIRMED".
    """
    if isinstance(raw, bool):
        raise WalletRPCError(f"malformed calls status: {raw!r}")
    if isinstance(raw, int):
        if 100 <= raw < 200:
            return "pending"
        if 200 <= raw < 300:
            return "success"
        if raw >= 400:
            return "failure"
        raise WalletRPCError(f"unknown calls status code: {raw}")
    if isinstance(raw, str):
        value = raw.strip().lower()
        if value in ("pending",):
            return "pending"
        if value in ("success", "confirmed"):
            return "success"
        if value in ("failure", "failed", "reverted"):
            return "failure"
    raise WalletRPCError(f"malformed calls status: {raw!r}")


class Web3CallsTransport:
    """
    EIP-5792 batch transport over a JSON-RPC wallet endpoint.

    - wallet_sendCalls   -> bundle id
    - wallet_getCallsStatus -> CallsStatus
    """

    def __init__(self, rpc_url: str, *, timeout: float = 30.0, w3: AsyncWeb3 | None = None):
        if w3 is None:
            if not rpc_url:
                raise ValueError("wallet rpc_url is required")
            w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        self.w3 = w3

    async def _request(self, method: str, params: list[Any]) -> Any:
        try:
            response = await self.w3.provider.make_request(RPCEndpoint(method), params)
        except Exception as e:
            raise WalletRPCError(f"{method} failed: {e}") from e

        error = response.get("error") if isinstance(response, dict) else None
        if error:
            if isinstance(error, dict):
                raise WalletRPCError(str(error.get("message") or error), error.get("code"))
            raise WalletRPCError(str(error))
        if not isinstance(response, dict) or "result" not in response:
            raise WalletRPCError(f"{method} returned a malformed response")
        return response["result"]

    async def submit_batch(self, chain_id: int, calls: Sequence[Call], *, sender: str | None = None) -> str:
        payload: dict[str, Any] = {
            "version": CALLS_API_VERSION,
            "chainId": hex(chain_id),
            "atomicRequired": True,
            "calls": [c.to_wire() for c in calls],
        }
        if sender:
            payload["from"] = sender

        logger.debug("wallet_sendCalls chain_id=%s calls=%d", chain_id, len(calls))
        result = await self._request("wallet_sendCalls", [payload])

        bundle_id = result.get("id") if isinstance(result, dict) else result
        if not isinstance(bundle_id, str) or not bundle_id:
            raise WalletRPCError("wallet_sendCalls returned no bundle id")
        return bundle_id

    async def get_status(self, bundle_id: str) -> CallsStatus:
        result = await self._request("wallet_getCallsStatus", [bundle_id])
        if not isinstance(result, dict):
            raise WalletRPCError("wallet_getCallsStatus returned a malformed response")

        receipts = []
        for r in result.get("receipts") or []:
            if isinstance(r, dict) and r.get("transactionHash"):
                receipts.append(
                    CallsReceipt(
                        transactionHash=str(r["transactionHash"]),
                        status=None if r.get("status") is None else str(r.get("status")),
                        blockNumber=None if r.get("blockNumber") is None else str(r.get("blockNumber")),
                    )
                )
        return CallsStatus(status=normalize_calls_status(result.get("status")), receipts=receipts)
