import pytest
from fastapi.testclient import TestClient

from app.config import get_settings
from app.main import create_app
from app.services.batch_session import BatchSession, get_batch_session
from chain.wallet_calls import CallsStatus, CallsReceipt


VALID_WALLET = "0x1111111111111111111111111111111111111111"


class FakeTransport:
    """
    In-memory CallsTransport.

    Set `submit_error` / `status_error` to make a call raise, or a `*_gate`
    asyncio.Event to hold the response until the test releases it.
    """

    def __init__(self):
        self.bundle_ids = iter(f"0xbundle{i}" for i in range(1, 100))
        self.submitted = []
        self.polled = []
        self.status = CallsStatus(
            status="success",
            receipts=[CallsReceipt(transactionHash="0x" + "ab" * 32)],
        )
        self.submit_error = None
        self.status_error = None
        self.submit_gate = None
        self.status_gate = None

    async def submit_batch(self, chain_id, calls, *, sender=None):
        self.submitted.append({"chain_id": chain_id, "calls": list(calls), "sender": sender})
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.submit_error is not None:
            raise self.submit_error
        return next(self.bundle_ids)

    async def get_status(self, bundle_id):
        self.polled.append(bundle_id)
        if self.status_gate is not None:
            await self.status_gate.wait()
        if self.status_error is not None:
            raise self.status_error
        return self.status


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    get_batch_session.cache_clear()
    yield
    get_settings.cache_clear()
    get_batch_session.cache_clear()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def session(transport):
    s = BatchSession(transport)
    s.connect(VALID_WALLET, 1)
    return s


@pytest.fixture
def client(transport):
    app = create_app()
    shared = BatchSession(transport)
    app.dependency_overrides[get_batch_session] = lambda: shared
    with TestClient(app) as client:
        yield client
