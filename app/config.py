from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # wallet provider speaking EIP-5792 (wallet_sendCalls / wallet_getCallsStatus)
    wallet_rpc_url: str = ""
    wallet_rpc_timeout: float = 30.0

    # optional address that replaces the encoded recipient/spender of every intent
    encoded_recipient: str | None = None

    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def WALLET_RPC_URL(self) -> str:
        return self.wallet_rpc_url

    @property
    def ENCODED_RECIPIENT(self) -> str | None:
        return self.encoded_recipient or None


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader (process-level).
    """
    return Settings()
