from __future__ import annotations

from contextvars import ContextVar
from typing import Optional

bundle_id_ctx: ContextVar[Optional[str]] = ContextVar("bundle_id", default=None)


def set_bundle_id(bundle_id: Optional[str]) -> None:
    bundle_id_ctx.set(bundle_id)


def get_bundle_id() -> Optional[str]:
    return bundle_id_ctx.get()
