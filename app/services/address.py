"""Helpers for validating Solana wallet and mint addresses."""

from __future__ import annotations

from functools import lru_cache

import base58

from ..core.swap.errors import InvalidAddressError

_BASE58_ALPHABET = set("123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz")

PUBKEY_LENGTH = 32


@lru_cache(maxsize=128)
def is_valid_solana_address(address: str) -> bool:
    """Return True if ``address`` is base58 for exactly 32 bytes."""

    if not address or not isinstance(address, str):
        return False
    length = len(address)
    if length < 32 or length > 44:
        return False
    if not all(ch in _BASE58_ALPHABET for ch in address):
        return False
    try:
        decoded = base58.b58decode(address)
    except ValueError:
        return False
    return len(decoded) == PUBKEY_LENGTH


def validate_solana_address(address: str) -> str:
    """Return the stripped address or raise ``InvalidAddressError``."""

    candidate = (address or "").strip()
    if not is_valid_solana_address(candidate):
        raise InvalidAddressError()
    return candidate


__all__ = [
    "PUBKEY_LENGTH",
    "is_valid_solana_address",
    "validate_solana_address",
]
