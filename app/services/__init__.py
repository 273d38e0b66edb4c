"""Service layer helpers"""

from .address import is_valid_solana_address, validate_solana_address

__all__ = [
    "is_valid_solana_address",
    "validate_solana_address",
]
