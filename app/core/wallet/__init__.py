"""
Wallet Key Module

Custodial Solana key material:
- generate_wallet: 24-word mnemonic derived on m/44'/501'/0'/0'
- keypair_from_secret_key: load a base64 64-byte keypair for signing

Usage:
    from app.core.wallet import generate_wallet, keypair_from_secret_key

    wallet = generate_wallet()
    keypair = keypair_from_secret_key(wallet.secret_key)
    assert str(keypair.pubkey()) == wallet.address
"""

from .keys import (
    KEYPAIR_LENGTH,
    SOLANA_DERIVATION_PATH,
    GeneratedWallet,
    encode_secret_key,
    generate_wallet,
    keypair_from_mnemonic,
    keypair_from_secret_key,
)

__all__ = [
    "KEYPAIR_LENGTH",
    "SOLANA_DERIVATION_PATH",
    "GeneratedWallet",
    "encode_secret_key",
    "generate_wallet",
    "keypair_from_mnemonic",
    "keypair_from_secret_key",
]
