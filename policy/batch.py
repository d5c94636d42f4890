from __future__ import annotations

import logging
from typing import Sequence, TypeVar

from policy.types import BatchLimitResult

logger = logging.getLogger(__name__)

# wallet_sendCalls bundles are capped at 10 calls by the smart-account wallet
MAX_BATCH_SIZE = 10

T = TypeVar("T")


def apply_batch_limit(calls: Sequence[T], max_size: int = MAX_BATCH_SIZE) -> BatchLimitResult:
    """
    Keep the first `max_size` calls in their original order.

    Never reorders or picks; anything past the cap is reported, not sent.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be >= 1, got {max_size}")

    original_count = len(calls)
    sent = list(calls[:max_size])
    truncated = original_count > max_size

    if truncated:
        logger.info(
            "batch truncated: original=%d sent=%d discarded=%d",
            original_count,
            len(sent),
            original_count - len(sent),
        )

    return BatchLimitResult(
        sent=sent,
        truncated=truncated,
        original_count=original_count,
        sent_count=len(sent),
        max_size=max_size,
    )
