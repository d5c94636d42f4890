from __future__ import annotations

import inspect

from api.v1.batch import router as batch_router
from chain.wallet_calls import WalletRPCError


VALID_WALLET = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x" + "3" * 40
TOKEN = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


def _connect(client, chain_id=1):
    r = client.post("/v1/batch/wallet", json={"address": VALID_WALLET, "chainId": chain_id})
    assert r.status_code == 200, r.text
    return r.json()


def _add_native(client, amount="0.01"):
    r = client.post(
        "/v1/batch/intents",
        json={"intent": {"kind": "native_transfer", "to": RECIPIENT, "amount": amount}},
    )
    assert r.status_code == 200, r.text
    return r.json()


def test_healthz_and_chains(client):
    h = client.get("/healthz")
    assert h.status_code == 200
    assert h.json()["ok"] is True

    c = client.get("/v1/chains")
    assert c.status_code == 200
    assert {x["chainId"] for x in c.json()} == {1, 56, 137, 8453, 42161}


def test_initial_snapshot_is_idle(client):
    body = client.get("/v1/batch").json()
    assert body["state"] == {"status": "IDLE"}
    assert body["pending"] == []
    assert body["maxBatchSize"] == 10
    assert body["nativeCurrency"] == "ETH"


def test_add_intent_returns_encoded_call(client):
    _connect(client, chain_id=56)
    body = client.post(
        "/v1/batch/intents",
        json={"intent": {"kind": "erc20_approve", "token": TOKEN, "spender": RECIPIENT, "decimals": 6}},
    ).json()

    assert body["nativeCurrency"] == "BNB"
    call = body["pending"][0]["call"]
    assert call["to"] == TOKEN
    assert call["value"] == 0
    assert call["data"].endswith("f" * 64)
    assert body["pending"][0]["intent"]["spender"] == RECIPIENT


def test_validation_error_is_422_with_field(client):
    r = client.post(
        "/v1/batch/intents",
        json={"intent": {"kind": "native_transfer", "to": "0x123", "amount": "1"}},
    )
    assert r.status_code == 422
    assert r.json()["detail"] == {
        "field": "to",
        "code": "invalid_address",
        "message": "recipient address must be 0x followed by 40 hex characters",
    }
    assert client.get("/v1/batch").json()["pending"] == []


def test_unknown_kind_is_rejected(client):
    r = client.post("/v1/batch/intents", json={"intent": {"kind": "swap", "to": RECIPIENT}})
    assert r.status_code == 422


def test_remove_and_clear(client):
    _add_native(client, "1")
    _add_native(client, "2")

    r = client.delete("/v1/batch/intents/0")
    assert r.status_code == 200
    assert [p["intent"]["amount"] for p in r.json()["pending"]] == ["2"]

    assert client.delete("/v1/batch/intents/7").status_code == 404

    r = client.delete("/v1/batch/intents")
    assert r.json()["pending"] == []


def test_form_flow(client):
    r = client.put(
        "/v1/batch/form",
        json={"kind": "custom_call", "to": RECIPIENT, "data": "0xdeadbeef"},
    )
    assert r.status_code == 200
    assert r.json()["form"]["kind"] == "custom_call"

    r = client.post("/v1/batch/form/add")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["pending"][0]["call"]["data"] == "0xdeadbeef"
    assert body["form"]["to"] == "" and body["form"]["data"] == ""

    r = client.post("/v1/batch/form/add")
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "required"


def test_submit_guard_is_409(client):
    r = client.post("/v1/batch/submit")
    assert r.status_code == 409

    _connect(client)
    r = client.post("/v1/batch/submit")
    assert r.status_code == 409
    assert "at least one" in r.json()["detail"]


def test_submit_and_poll(client, transport):
    _connect(client)
    for i in range(12):
        _add_native(client, str(i + 1))

    r = client.post("/v1/batch/submit")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["state"] == {"status": "SUBMITTED", "bundle_id": "0xbundle1"}
    assert body["batch"] == {"truncated": True, "originalCount": 12, "sentCount": 10, "discardedCount": 2}
    assert body["truncation"]["discarded_count"] == 2
    assert len(transport.submitted[0]["calls"]) == 10

    r = client.post("/v1/batch/status")
    assert r.status_code == 200
    body = r.json()
    assert body["state"]["status"] == "CONFIRMED"
    assert body["explorerUrl"].startswith("https://etherscan.io/tx/0x")

    # confirmed bundles are not polled again
    assert client.post("/v1/batch/status").status_code == 409


def test_submit_failure_is_a_state_not_an_http_error(client, transport):
    transport.submit_error = WalletRPCError("gas limit too high")
    _connect(client)
    _add_native(client)

    r = client.post("/v1/batch/submit")
    assert r.status_code == 200
    state = r.json()["state"]
    assert state["status"] == "SUBMIT_FAILED"
    assert state["error"] == "gas limit too high"
    assert state["failure"]["category"] == "GAS_LIMIT_EXCEEDED"


def test_chain_change_resets_batch(client):
    _connect(client)
    _add_native(client)

    same = client.post("/v1/batch/chain", json={"chainId": 1}).json()
    assert len(same["pending"]) == 1

    changed = client.post("/v1/batch/chain", json={"chainId": 137}).json()
    assert changed["pending"] == []
    assert changed["state"] == {"status": "IDLE"}
    assert changed["chainName"] == "Polygon"


def test_disconnect_and_reset(client):
    _connect(client)
    _add_native(client)

    r = client.post("/v1/batch/reset")
    assert r.json()["pending"] == []
    assert r.json()["account"] == VALID_WALLET

    _add_native(client)
    r = client.delete("/v1/batch/wallet")
    body = r.json()
    assert body["account"] is None
    assert body["pending"] == []


def test_oversized_amounts_are_422_not_500(client):
    for amount in ("1e5000", "1" + "0" * 5000, "1e-999999999"):
        r = client.post(
            "/v1/batch/intents",
            json={"intent": {"kind": "native_transfer", "to": RECIPIENT, "amount": amount}},
        )
        assert r.status_code == 422, amount
        assert r.json()["detail"]["code"] == "invalid_amount"

    r = client.post(
        "/v1/batch/intents",
        json={"intent": {"kind": "erc20_transfer", "token": TOKEN, "to": RECIPIENT, "amount": "1", "decimals": 5000}},
    )
    assert r.status_code == 422
    assert client.put("/v1/batch/form", json={"decimals": 256}).status_code == 422
    assert client.get("/v1/batch").json()["pending"] == []


def test_snapshot_reports_exact_total_value(client):
    assert client.get("/v1/batch").json()["totalValue"] == 0
    _add_native(client, "0.1")
    body = _add_native(client, "0.2")
    assert body["totalValue"] == 3 * 10**17

    r = client.post(
        "/v1/batch/intents",
        json={"intent": {"kind": "erc20_transfer", "token": TOKEN, "to": RECIPIENT, "amount": "5", "decimals": 6}},
    )
    assert r.json()["totalValue"] == 3 * 10**17


def test_session_routes_run_on_the_event_loop():
    for route in batch_router.routes:
        assert inspect.iscoroutinefunction(route.endpoint), route.path
