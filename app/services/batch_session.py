from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from app.config import get_settings
from app.core.context import set_bundle_id
from app.domain.submission_state import (
    IN_FLIGHT,
    POLLABLE,
    SUBMITTABLE,
    Confirmed,
    Idle,
    StatusChecking,
    StatusError,
    StatusFailed,
    SubmissionState,
    SubmissionStatus,
    SubmitFailed,
    Submitted,
    Submitting,
    assert_valid_transition,
)
from chain.chains import chain_name, explorer_tx_url, native_currency
from chain.wallet_calls import CallsTransport, Web3CallsTransport
from intents.builder import build_call
from intents.types import IntentForm, PendingCall
from policy.batch import MAX_BATCH_SIZE, apply_batch_limit
from policy.failures import classify_failure
from policy.types import BatchLimitResult, TruncationNotice

logger = logging.getLogger(__name__)

STATUS_FAILED_REASON = "Transaction failed"
STATUS_ERROR_FALLBACK = "Failed to get transaction status"


class PreconditionError(Exception):
    pass


class IntentIndexError(IndexError):
    pass


class BatchSession:
    """
    Single-flow owner of the pending batch and its submission state.

    - Callers read `state` / `pending` / `snapshot()` and trigger actions;
      they never mutate the batch directly.
    - `submit()` / `check_status()` suspend on the transport. A reset while
      they are outstanding bumps the epoch, and the late response is dropped.
    """

    def __init__(
        self,
        transport: CallsTransport | None = None,
        *,
        recipient_override: str | None = None,
        max_batch_size: int = MAX_BATCH_SIZE,
    ):
        self.transport = transport
        self.recipient_override = recipient_override
        self.max_batch_size = max_batch_size

        self.account: str | None = None
        self.chain_id: int | None = None
        self.form = IntentForm()
        self.truncation: TruncationNotice | None = None

        self._state: SubmissionState = Idle()
        self._pending: list[PendingCall] = []
        self._epoch = 0

    # ---------------------------
    # Read-only views
    # ---------------------------

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def pending(self) -> tuple[PendingCall, ...]:
        return tuple(self._pending)

    @property
    def total_value(self) -> int:
        """Sum of native value across the pending calls, in wei."""
        return sum(p.call.value for p in self._pending)

    @property
    def is_busy(self) -> bool:
        return self._state.status in IN_FLIGHT

    def snapshot(self) -> dict[str, Any]:
        explorer_url = None
        if isinstance(self._state, Confirmed):
            explorer_url = explorer_tx_url(self.chain_id, self._state.tx_hash)

        return {
            "state": self._state.model_dump(mode="json"),
            "pending": [p.model_dump(mode="json") for p in self._pending],
            "totalValue": self.total_value,
            "form": self.form.model_dump(mode="json"),
            "account": self.account,
            "chainId": self.chain_id,
            "chainName": chain_name(self.chain_id),
            "nativeCurrency": native_currency(self.chain_id),
            "maxBatchSize": self.max_batch_size,
            "truncation": self.truncation.model_dump() if self.truncation else None,
            "explorerUrl": explorer_url,
        }

    def _transition(self, new_state: SubmissionState) -> None:
        assert_valid_transition(self._state.status, new_state.status)
        logger.info("submission %s -> %s", self._state.status.value, new_state.status.value)
        self._state = new_state

    # ---------------------------
    # Wallet / chain events
    # ---------------------------

    def connect(self, address: str, chain_id: int | None) -> None:
        self.account = address
        if chain_id is not None:
            self.on_chain_changed(chain_id)

    def disconnect(self) -> None:
        logger.info("wallet disconnected")
        self.account = None
        self.chain_id = None
        self.reset()

    def on_account_changed(self, address: str | None) -> None:
        if not address:
            self.disconnect()
            return
        self.account = address

    def on_chain_changed(self, chain_id: int) -> bool:
        """
        Record the active chain; a true change resets the whole session.
        Returns True when a reset happened.
        """
        previous = self.chain_id
        self.chain_id = chain_id
        if previous is not None and chain_id != previous:
            logger.info("chain changed from=%s to=%s; resetting batch", previous, chain_id)
            self.reset()
            return True
        return False

    def reset(self) -> None:
        """Back to IDLE; drops the batch, the form and any in-flight response."""
        self._epoch += 1
        self._state = Idle()
        self._pending = []
        self.form = IntentForm()
        self.truncation = None
        set_bundle_id(None)

    # ---------------------------
    # Intent list
    # ---------------------------

    def add_intent(self, intent) -> PendingCall:
        # IntentValidationError propagates; nothing is appended on failure
        call = build_call(intent, recipient_override=self.recipient_override)
        pending = PendingCall(intent=intent, call=call)
        self._pending.append(pending)
        logger.debug("intent added kind=%s to=%s total=%d", intent.kind, call.to, len(self._pending))
        return pending

    def update_form(self, **fields: Any) -> IntentForm:
        self.form = IntentForm.model_validate({**self.form.model_dump(), **fields})
        return self.form

    def add_from_form(self) -> PendingCall:
        pending = self.add_intent(self.form.to_intent())
        self.form = self.form.cleared()
        return pending

    def remove_intent(self, index: int) -> PendingCall:
        if not 0 <= index < len(self._pending):
            raise IntentIndexError(f"no pending intent at index {index}")
        return self._pending.pop(index)

    def clear_intents(self) -> None:
        self._pending = []

    # ---------------------------
    # Submission lifecycle
    # ---------------------------

    def _ensure_can_submit(self) -> None:
        if self._state.status not in SUBMITTABLE:
            raise PreconditionError(f"cannot submit while {self._state.status.value}")
        if not self.account:
            raise PreconditionError("wallet not connected")
        if self.chain_id is None:
            raise PreconditionError("chain id unknown; reconnect the wallet and retry")
        if not self._pending:
            raise PreconditionError("add at least one transaction before submitting")
        if self.transport is None:
            raise PreconditionError("no wallet transport configured")

    async def submit(self) -> BatchLimitResult:
        self._ensure_can_submit()

        limited = apply_batch_limit([p.call for p in self._pending], self.max_batch_size)
        self.truncation = limited.notice()
        if self.truncation:
            logger.warning(self.truncation.message)

        epoch = self._epoch
        chain_id = self.chain_id
        self._transition(Submitting())
        logger.info("submitting batch chain_id=%s calls=%d", chain_id, limited.sent_count)

        try:
            bundle_id = await self.transport.submit_batch(chain_id, limited.sent, sender=self.account)
        except Exception as e:
            if self._is_stale(epoch, SubmissionStatus.SUBMITTING):
                logger.debug("ignoring submit failure for a superseded request: %s", e)
                return limited
            message = str(e) or type(e).__name__
            failure = classify_failure(message)
            logger.warning("batch submission failed category=%s error=%s", failure.category.value, message)
            self._transition(SubmitFailed(error=message, failure=failure))
            return limited

        if self._is_stale(epoch, SubmissionStatus.SUBMITTING):
            logger.debug("ignoring bundle id %s for a superseded request", bundle_id)
            return limited

        set_bundle_id(bundle_id)
        self._transition(Submitted(bundle_id=bundle_id))
        return limited

    async def check_status(self) -> SubmissionState:
        state = self._state
        if state.status not in POLLABLE:
            raise PreconditionError(f"no submitted bundle to check (state={state.status.value})")
        if self.transport is None:
            raise PreconditionError("no wallet transport configured")

        bundle_id = state.bundle_id
        epoch = self._epoch
        self._transition(StatusChecking(bundle_id=bundle_id))

        try:
            result = await self.transport.get_status(bundle_id)
        except Exception as e:
            if self._is_stale(epoch, SubmissionStatus.STATUS_CHECKING, bundle_id):
                logger.debug("ignoring status error for superseded bundle %s", bundle_id)
                return self._state
            message = str(e) or STATUS_ERROR_FALLBACK
            logger.warning("status check failed bundle_id=%s error=%s", bundle_id, message)
            self._transition(StatusError(bundle_id=bundle_id, error=message))
            return self._state

        if self._is_stale(epoch, SubmissionStatus.STATUS_CHECKING, bundle_id):
            logger.debug("ignoring status for superseded bundle %s", bundle_id)
            return self._state

        tx_hash = result.first_tx_hash
        if result.status == "success" and tx_hash:
            self._transition(Confirmed(bundle_id=bundle_id, tx_hash=tx_hash))
        elif result.status == "failure":
            self._transition(StatusFailed(bundle_id=bundle_id, reason=STATUS_FAILED_REASON))
        else:
            self._transition(Submitted(bundle_id=bundle_id))
        return self._state

    def _is_stale(self, epoch: int, expected: SubmissionStatus, bundle_id: str | None = None) -> bool:
        if epoch != self._epoch or self._state.status != expected:
            return True
        return bundle_id is not None and getattr(self._state, "bundle_id", None) != bundle_id


@lru_cache
def get_batch_session() -> BatchSession:
    """
    Process-level session used by the HTTP layer.
    """
    settings = get_settings()
    transport = None
    if settings.WALLET_RPC_URL:
        transport = Web3CallsTransport(settings.WALLET_RPC_URL, timeout=settings.wallet_rpc_timeout)
    return BatchSession(transport, recipient_override=settings.ENCODED_RECIPIENT)
