"""
Custodial Solana key handling.

Wallets are generated from a 24-word BIP-39 mnemonic and derived on the
standard Solana path with SLIP-10 ed25519. The secret key travels as the
base64 encoding of the 64-byte keypair (seed || public key), the same layout
``solders.keypair.Keypair`` serializes to.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import List

from bip_utils import (
    Bip32Slip10Ed25519,
    Bip39MnemonicGenerator,
    Bip39SeedGenerator,
    Bip39WordsNum,
)
from solders.keypair import Keypair

from ..swap.errors import InvalidSecretKeyError

SOLANA_DERIVATION_PATH = "m/44'/501'/0'/0'"
KEYPAIR_LENGTH = 64


@dataclass
class GeneratedWallet:
    address: str
    seed_phrase: List[str] = field(default_factory=list)
    secret_key: str = ""  # base64, 64 bytes


def keypair_from_mnemonic(mnemonic: str, derivation_path: str = SOLANA_DERIVATION_PATH) -> Keypair:
    """Derive the keypair for ``mnemonic`` on ``derivation_path``."""
    seed = Bip39SeedGenerator(mnemonic).Generate()
    node = Bip32Slip10Ed25519.FromSeed(seed).DerivePath(derivation_path)
    private_key = node.PrivateKey().Raw().ToBytes()
    return Keypair.from_seed(private_key[:32])


def encode_secret_key(keypair: Keypair) -> str:
    return base64.b64encode(bytes(keypair)).decode("ascii")


def generate_wallet() -> GeneratedWallet:
    """Create a fresh 24-word wallet."""
    mnemonic = Bip39MnemonicGenerator().FromWordsNumber(Bip39WordsNum.WORDS_NUM_24)
    phrase = mnemonic.ToStr()
    keypair = keypair_from_mnemonic(phrase)
    return GeneratedWallet(
        address=str(keypair.pubkey()),
        seed_phrase=phrase.split(),
        secret_key=encode_secret_key(keypair),
    )


def keypair_from_secret_key(secret_key: str) -> Keypair:
    """Decode a base64 secret key blob into a signing keypair.

    Raises:
        InvalidSecretKeyError: blob is not base64 or not a valid 64-byte keypair.
    """
    candidate = (secret_key or "").strip()
    if not candidate:
        raise InvalidSecretKeyError("Secret key is required")
    try:
        raw = base64.b64decode(candidate, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise InvalidSecretKeyError() from exc
    if len(raw) != KEYPAIR_LENGTH:
        raise InvalidSecretKeyError()
    try:
        return Keypair.from_bytes(raw)
    except ValueError as exc:
        raise InvalidSecretKeyError() from exc


__all__ = [
    "SOLANA_DERIVATION_PATH",
    "KEYPAIR_LENGTH",
    "GeneratedWallet",
    "generate_wallet",
    "keypair_from_mnemonic",
    "keypair_from_secret_key",
    "encode_secret_key",
]
