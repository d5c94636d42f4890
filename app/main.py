from fastapi import FastAPI

from api.v1.batch import chains_router, router as batch_router
from app.config import get_settings
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Atomic Batch Calls", version="0.1.0")

    @app.get("/healthz")
    async def healthz():
        s = get_settings()
        return {
            "ok": True,
            "wallet_configured": bool(s.WALLET_RPC_URL),
            "recipient_override": bool(s.ENCODED_RECIPIENT),
        }

    app.include_router(batch_router, prefix="/v1")
    app.include_router(chains_router, prefix="/v1")
    return app
app = create_app()
