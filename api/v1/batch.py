# api/v1/batch.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.schemas.batch import (
    AddIntentRequest,
    BatchLimitSummary,
    BatchSnapshotResponse,
    ChainChangedRequest,
    ChainRead,
    IntentFormUpdate,
    WalletConnectRequest,
)
from app.services.batch_session import (
    BatchSession,
    IntentIndexError,
    PreconditionError,
    get_batch_session,
)
from chain.chains import list_supported_chains
from intents.builder import IntentValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/batch", tags=["batch"])
chains_router = APIRouter(prefix="/chains", tags=["chains"])


def _snapshot(session: BatchSession, **extra) -> BatchSnapshotResponse:
    return BatchSnapshotResponse(**session.snapshot(), **extra)


def _validation_http_error(e: IntentValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"field": e.field, "code": e.code, "message": e.message},
    )


@chains_router.get("", response_model=list[ChainRead])
def list_chains_endpoint() -> list[ChainRead]:
    return [
        ChainRead(
            chainId=c.chain_id,
            name=c.name,
            nativeCurrency=c.native_currency,
            explorerUrl=c.explorer_url,
        )
        for c in list_supported_chains()
    ]


@router.get("", response_model=BatchSnapshotResponse)
async def get_batch(session: BatchSession = Depends(get_batch_session)) -> BatchSnapshotResponse:
    return _snapshot(session)


@router.post("/wallet", response_model=BatchSnapshotResponse)
async def connect_wallet(
    payload: WalletConnectRequest,
    session: BatchSession = Depends(get_batch_session),
) -> BatchSnapshotResponse:
    if not payload.address.startswith("0x"):
        raise HTTPException(status_code=422, detail="address must start with '0x'")
    session.connect(payload.address, payload.chainId)
    return _snapshot(session)


@router.delete("/wallet", response_model=BatchSnapshotResponse)
async def disconnect_wallet(session: BatchSession = Depends(get_batch_session)) -> BatchSnapshotResponse:
    session.disconnect()
    return _snapshot(session)


@router.post("/chain", response_model=BatchSnapshotResponse)
async def chain_changed(
    payload: ChainChangedRequest,
    session: BatchSession = Depends(get_batch_session),
) -> BatchSnapshotResponse:
    session.on_chain_changed(payload.chainId)
    return _snapshot(session)


@router.post("/reset", response_model=BatchSnapshotResponse)
async def reset_batch(session: BatchSession = Depends(get_batch_session)) -> BatchSnapshotResponse:
    session.reset()
    return _snapshot(session)


@router.post("/intents", response_model=BatchSnapshotResponse)
async def add_intent(
    payload: AddIntentRequest,
    session: BatchSession = Depends(get_batch_session),
) -> BatchSnapshotResponse:
    try:
        session.add_intent(payload.intent)
    except IntentValidationError as e:
        raise _validation_http_error(e)
    return _snapshot(session)


@router.delete("/intents/{index}", response_model=BatchSnapshotResponse)
async def remove_intent(index: int, session: BatchSession = Depends(get_batch_session)) -> BatchSnapshotResponse:
    try:
        session.remove_intent(index)
    except IntentIndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _snapshot(session)


@router.delete("/intents", response_model=BatchSnapshotResponse)
async def clear_intents(session: BatchSession = Depends(get_batch_session)) -> BatchSnapshotResponse:
    session.clear_intents()
    return _snapshot(session)


@router.put("/form", response_model=BatchSnapshotResponse)
async def update_form(
    payload: IntentFormUpdate,
    session: BatchSession = Depends(get_batch_session),
) -> BatchSnapshotResponse:
    session.update_form(**payload.model_dump(exclude_none=True))
    return _snapshot(session)


@router.post("/form/add", response_model=BatchSnapshotResponse)
async def add_from_form(session: BatchSession = Depends(get_batch_session)) -> BatchSnapshotResponse:
    try:
        session.add_from_form()
    except IntentValidationError as e:
        raise _validation_http_error(e)
    return _snapshot(session)


@router.post("/submit", response_model=BatchSnapshotResponse)
async def submit_batch(session: BatchSession = Depends(get_batch_session)) -> BatchSnapshotResponse:
    logger.info("submit_batch called")
    try:
        limited = await session.submit()
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    summary = BatchLimitSummary(
        truncated=limited.truncated,
        originalCount=limited.original_count,
        sentCount=limited.sent_count,
        discardedCount=limited.discarded_count,
    )
    return _snapshot(session, batch=summary)


@router.post("/status", response_model=BatchSnapshotResponse)
async def check_status(session: BatchSession = Depends(get_batch_session)) -> BatchSnapshotResponse:
    logger.info("check_status called")
    try:
        await session.check_status()
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(session)
