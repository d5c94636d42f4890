from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from policy.types import FailureClassification


class SubmissionStatus(str, Enum):
    IDLE = "IDLE"
    SUBMITTING = "SUBMITTING"
    SUBMITTED = "SUBMITTED"
    SUBMIT_FAILED = "SUBMIT_FAILED"
    STATUS_CHECKING = "STATUS_CHECKING"
    CONFIRMED = "CONFIRMED"
    STATUS_FAILED = "STATUS_FAILED"
    STATUS_ERROR = "STATUS_ERROR"


class _State(BaseModel):
    model_config = ConfigDict(frozen=True)


class Idle(_State):
    status: Literal[SubmissionStatus.IDLE] = SubmissionStatus.IDLE


class Submitting(_State):
    status: Literal[SubmissionStatus.SUBMITTING] = SubmissionStatus.SUBMITTING


class Submitted(_State):
    status: Literal[SubmissionStatus.SUBMITTED] = SubmissionStatus.SUBMITTED
    bundle_id: str


class SubmitFailed(_State):
    status: Literal[SubmissionStatus.SUBMIT_FAILED] = SubmissionStatus.SUBMIT_FAILED
    error: str
    failure: Optional[FailureClassification] = None


class StatusChecking(_State):
    status: Literal[SubmissionStatus.STATUS_CHECKING] = SubmissionStatus.STATUS_CHECKING
    bundle_id: str


class Confirmed(_State):
    status: Literal[SubmissionStatus.CONFIRMED] = SubmissionStatus.CONFIRMED
    bundle_id: str
    tx_hash: str


class StatusFailed(_State):
    status: Literal[SubmissionStatus.STATUS_FAILED] = SubmissionStatus.STATUS_FAILED
    bundle_id: str
    reason: str


class StatusError(_State):
    status: Literal[SubmissionStatus.STATUS_ERROR] = SubmissionStatus.STATUS_ERROR
    bundle_id: str
    error: str


SubmissionState = Annotated[
    Union[Idle, Submitting, Submitted, SubmitFailed, StatusChecking, Confirmed, StatusFailed, StatusError],
    Field(discriminator="status"),
]

IN_FLIGHT = {SubmissionStatus.SUBMITTING, SubmissionStatus.STATUS_CHECKING}

# states a user may (re)submit from
SUBMITTABLE = {
    SubmissionStatus.IDLE,
    SubmissionStatus.SUBMITTED,
    SubmissionStatus.SUBMIT_FAILED,
    SubmissionStatus.CONFIRMED,
    SubmissionStatus.STATUS_FAILED,
    SubmissionStatus.STATUS_ERROR,
}

# states that still know a bundle id worth polling
POLLABLE = {
    SubmissionStatus.SUBMITTED,
    SubmissionStatus.STATUS_FAILED,
    SubmissionStatus.STATUS_ERROR,
}

# reset to IDLE is allowed from anywhere and is not listed here
ALLOWED = {
    SubmissionStatus.IDLE: {SubmissionStatus.SUBMITTING},
    SubmissionStatus.SUBMITTING: {SubmissionStatus.SUBMITTED, SubmissionStatus.SUBMIT_FAILED},
    SubmissionStatus.SUBMITTED: {SubmissionStatus.STATUS_CHECKING, SubmissionStatus.SUBMITTING},
    SubmissionStatus.SUBMIT_FAILED: {SubmissionStatus.SUBMITTING},
    SubmissionStatus.STATUS_CHECKING: {
        SubmissionStatus.CONFIRMED,
        SubmissionStatus.STATUS_FAILED,
        SubmissionStatus.STATUS_ERROR,
        SubmissionStatus.SUBMITTED,
    },
    SubmissionStatus.CONFIRMED: {SubmissionStatus.SUBMITTING},
    SubmissionStatus.STATUS_FAILED: {SubmissionStatus.SUBMITTING, SubmissionStatus.STATUS_CHECKING},
    SubmissionStatus.STATUS_ERROR: {SubmissionStatus.SUBMITTING, SubmissionStatus.STATUS_CHECKING},
}


def assert_valid_transition(frm: SubmissionStatus, to: SubmissionStatus) -> None:
    if to == SubmissionStatus.IDLE:
        return
    if to not in ALLOWED.get(frm, set()):
        raise ValueError(f"Invalid submission transition: {frm.value} -> {to.value}")
