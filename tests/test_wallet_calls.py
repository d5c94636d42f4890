from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from chain.wallet_calls import Web3CallsTransport, WalletRPCError, normalize_calls_status
from intents.types import Call

TARGET = "0x" + "2" * 40


def _transport(response=None, side_effect=None):
    make_request = AsyncMock(return_value=response, side_effect=side_effect)
    w3 = SimpleNamespace(provider=SimpleNamespace(make_request=make_request))
    return Web3CallsTransport("", w3=w3), make_request


@pytest.mark.asyncio
async def test_submit_batch_builds_wallet_send_calls_payload():
    transport, make_request = _transport({"jsonrpc": "2.0", "id": 1, "result": {"id": "0xbundle"}})
    calls = [
        Call(to=TARGET, value=10**16, data="0x"),
        Call(to=TARGET, value=0, data="0xa9059cbb" + "0" * 128),
    ]

    bundle_id = await transport.submit_batch(8453, calls, sender="0x" + "1" * 40)

    assert bundle_id == "0xbundle"
    method, params = make_request.await_args.args
    assert method == "wallet_sendCalls"
    payload = params[0]
    assert payload["chainId"] == "0x2105"
    assert payload["atomicRequired"] is True
    assert payload["from"] == "0x" + "1" * 40
    assert payload["calls"][0] == {"to": TARGET, "value": hex(10**16)}
    assert payload["calls"][1]["data"].startswith("0xa9059cbb")
    assert payload["calls"][1]["value"] == "0x0"


@pytest.mark.asyncio
async def test_submit_batch_accepts_bare_string_id():
    transport, _ = _transport({"result": "0xabc"})
    assert await transport.submit_batch(1, [Call(to=TARGET)]) == "0xabc"


@pytest.mark.asyncio
async def test_rpc_error_is_raised_with_provider_message():
    transport, _ = _transport({"error": {"code": -32000, "message": "gas limit too high"}})
    with pytest.raises(WalletRPCError) as exc:
        await transport.submit_batch(1, [Call(to=TARGET)])
    assert str(exc.value) == "gas limit too high"
    assert exc.value.code == -32000


@pytest.mark.asyncio
async def test_transport_exceptions_are_wrapped():
    transport, _ = _transport(side_effect=ConnectionError("connection refused"))
    with pytest.raises(WalletRPCError, match="connection refused"):
        await transport.get_status("0xbundle")


@pytest.mark.asyncio
async def test_missing_bundle_id_is_an_error():
    transport, _ = _transport({"result": {}})
    with pytest.raises(WalletRPCError):
        await transport.submit_batch(1, [Call(to=TARGET)])


@pytest.mark.asyncio
async def test_get_status_maps_receipts():
    tx_hash = "0x" + "cd" * 32
    transport, make_request = _transport(
        {"result": {"status": 200, "receipts": [{"transactionHash": tx_hash, "status": "0x1"}]}}
    )
    status = await transport.get_status("0xbundle")

    assert make_request.await_args.args == ("wallet_getCallsStatus", ["0xbundle"])
    assert status.status == "success"
    assert status.first_tx_hash == tx_hash


@pytest.mark.asyncio
async def test_get_status_malformed_result():
    transport, _ = _transport({"result": None})
    with pytest.raises(WalletRPCError):
        await transport.get_status("0xbundle")


@pytest.mark.parametrize(
    "raw,expected",
    [
        (100, "pending"),
        (200, "success"),
        (400, "failure"),
        (500, "failure"),
        (600, "failure"),
        ("PENDING", "pending"),
        ("CONFIRMED", "success"),
        ("success", "success"),
        ("failure", "failure"),
    ],
)
def test_normalize_calls_status(raw, expected):
    assert normalize_calls_status(raw) == expected


@pytest.mark.parametrize("raw", [None, True, 300, "weird"])
def test_normalize_calls_status_rejects_unknown(raw):
    with pytest.raises(WalletRPCError):
        normalize_calls_status(raw)


def test_transport_requires_url_without_injected_client():
    with pytest.raises(ValueError):
        Web3CallsTransport("")
