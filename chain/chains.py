from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


class UnsupportedChainError(ValueError):
    pass


@dataclass(frozen=True)
class ChainInfo:
    chain_id: int
    name: str
    native_currency: str
    explorer_url: str


SUPPORTED_CHAINS: Dict[int, ChainInfo] = {
    1: ChainInfo(1, "Ethereum", "ETH", "https://etherscan.io"),
    137: ChainInfo(137, "Polygon", "POL", "https://polygonscan.com"),
    56: ChainInfo(56, "BNB Smart Chain", "BNB", "https://bscscan.com"),
    42161: ChainInfo(42161, "Arbitrum", "ETH", "https://arbiscan.io"),
    8453: ChainInfo(8453, "Base", "ETH", "https://basescan.org"),
}

DEFAULT_EXPLORER = "https://etherscan.io"


def get_chain(chain_id: int) -> ChainInfo:
    info = SUPPORTED_CHAINS.get(chain_id)
    if info is None:
        raise UnsupportedChainError(f"Unsupported chain_id: {chain_id}")
    return info


def list_supported_chains() -> list[ChainInfo]:
    return [SUPPORTED_CHAINS[k] for k in sorted(SUPPORTED_CHAINS)]


def native_currency(chain_id: int | None) -> str:
    info = SUPPORTED_CHAINS.get(chain_id) if chain_id else None
    return info.native_currency if info else "ETH"


def chain_name(chain_id: int | None) -> str:
    info = SUPPORTED_CHAINS.get(chain_id) if chain_id else None
    return info.name if info else "Unknown chain"


def explorer_tx_url(chain_id: int | None, tx_hash: str) -> str:
    info = SUPPORTED_CHAINS.get(chain_id) if chain_id else None
    base = info.explorer_url if info else DEFAULT_EXPLORER
    return f"{base}/tx/{tx_hash}"
