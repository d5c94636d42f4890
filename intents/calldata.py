"""
Calldata for the two ERC-20 calls the batch builder emits.

Arguments are ABI-encoded with eth_abi and split into 32-byte words, which
`pack_call` joins behind the 4-byte selector. Addresses are lowercased before
encoding, so any 0x + 40 hex address the intent builder accepted produces a
word regardless of its checksum casing.
"""
from __future__ import annotations

import re

from eth_abi import encode as abi_encode
from web3 import Web3

from intents.amounts import MAX_UINT256

WORD_HEX_LEN = 64
SELECTOR_HEX_LEN = 8
ADDRESS_HEX_LEN = 40

TRANSFER_SIGNATURE = "transfer(address,uint256)"
APPROVE_SIGNATURE = "approve(address,uint256)"

TRANSFER_SELECTOR = "a9059cbb"
APPROVE_SELECTOR = "095ea7b3"

UNLIMITED_WORD = "f" * WORD_HEX_LEN

_HEX = re.compile(r"[0-9a-fA-F]+")


def function_selector(signature: str) -> str:
    """First 4 bytes of keccak(signature), as 8 lowercase hex chars."""
    return bytes(Web3.keccak(text=signature)[:4]).hex()


def _is_hex(s: str) -> bool:
    return bool(_HEX.fullmatch(s))


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def _abi_words(types: list[str], args: list) -> list[str]:
    encoded = abi_encode(types, args).hex()
    return [encoded[i : i + WORD_HEX_LEN] for i in range(0, len(encoded), WORD_HEX_LEN)]


def _abi_address(address: str) -> str:
    raw = _strip_0x(address)
    assert len(raw) == ADDRESS_HEX_LEN and _is_hex(raw), f"malformed address: {address!r}"
    return "0x" + raw.lower()


def address_word(address: str) -> str:
    return _abi_words(["address"], [_abi_address(address)])[0]


def uint256_word(value: int) -> str:
    assert 0 <= value <= MAX_UINT256, f"uint256 out of range: {value}"
    return _abi_words(["uint256"], [value])[0]


def pack_call(selector: str, params: list[str]) -> str:
    selector = _strip_0x(selector)
    assert len(selector) == SELECTOR_HEX_LEN and _is_hex(selector), f"malformed selector: {selector!r}"
    for word in params:
        assert len(word) == WORD_HEX_LEN and _is_hex(word), f"malformed word: {word!r}"
    return "0x" + selector + "".join(params)


def _encode_address_amount(selector: str, address: str, amount: int) -> str:
    assert 0 <= amount <= MAX_UINT256, f"uint256 out of range: {amount}"
    return pack_call(selector, _abi_words(["address", "uint256"], [_abi_address(address), amount]))


def encode_transfer(to: str, amount: int) -> str:
    return _encode_address_amount(TRANSFER_SELECTOR, to, amount)


def encode_approve(spender: str, amount: int) -> str:
    return _encode_address_amount(APPROVE_SELECTOR, spender, amount)
