# policy/types.py
from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class TruncationNotice(BaseModel):
    original_count: int
    sent_count: int
    discarded_count: int
    message: str


class BatchLimitResult(BaseModel):
    sent: List[Any] = Field(default_factory=list)
    truncated: bool = False
    original_count: int = 0
    sent_count: int = 0
    max_size: int

    @property
    def discarded_count(self) -> int:
        return self.original_count - self.sent_count

    def notice(self) -> Optional[TruncationNotice]:
        if not self.truncated:
            return None
        return TruncationNotice(
            original_count=self.original_count,
            sent_count=self.sent_count,
            discarded_count=self.discarded_count,
            message=(
                f"Batch has {self.original_count} transactions; only the first "
                f"{self.sent_count} are sent (limit {self.max_size}). "
                f"{self.discarded_count} transactions were not processed."
            ),
        )


class FailureCategory(str, Enum):
    SMART_ACCOUNT_UPGRADE_REQUIRED = "SMART_ACCOUNT_UPGRADE_REQUIRED"
    GAS_LIMIT_EXCEEDED = "GAS_LIMIT_EXCEEDED"
    UNCLASSIFIED = "UNCLASSIFIED"


class FailureClassification(BaseModel):
    category: FailureCategory
    raw_message: str
    title: Optional[str] = None
    remediation: List[str] = Field(default_factory=list)
