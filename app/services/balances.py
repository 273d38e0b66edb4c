"""Wallet balance lookups backed by the ledger RPC."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from ..core.swap.constants import LAMPORTS_PER_SOL, NATIVE_SOL_MINT, symbol_for_mint, to_ui_amount
from ..providers.solana import SolanaRpcProvider, get_solana_rpc_provider
from ..types.portfolio import TokenBalance
from .address import validate_solana_address

logger = logging.getLogger(__name__)


async def get_wallet_balance(address: str, rpc: Optional[SolanaRpcProvider] = None) -> Decimal:
    """Native balance of ``address`` in SOL."""
    validate_solana_address(address)
    rpc = rpc or get_solana_rpc_provider()
    lamports = await rpc.get_balance(address)
    return Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)


async def get_token_balances(address: str, rpc: Optional[SolanaRpcProvider] = None) -> List[TokenBalance]:
    """
    Native SOL plus every SPL token account owned by ``address``.

    Zero-balance token accounts are kept; the UI decides what to hide.
    """
    validate_solana_address(address)
    rpc = rpc or get_solana_rpc_provider()

    lamports = await rpc.get_balance(address)
    balances = [
        TokenBalance(
            mint=NATIVE_SOL_MINT,
            owner=address,
            symbol="SOL",
            amount=str(lamports),
            decimals=9,
            ui_amount=to_ui_amount(lamports, 9),
            is_native=True,
        )
    ]

    for account in await rpc.get_token_accounts(address):
        mint = account.get("mint")
        if not mint:
            continue
        decimals = account.get("decimals", 0)
        balances.append(
            TokenBalance(
                mint=mint,
                owner=account.get("owner") or address,
                symbol=symbol_for_mint(mint),
                account=account.get("address"),
                amount=str(account.get("amount", 0)),
                decimals=decimals,
                ui_amount=to_ui_amount(account.get("amount", 0), decimals),
            )
        )

    logger.info("Fetched %d balances for %s", len(balances), address)
    return balances


__all__ = ["get_wallet_balance", "get_token_balances"]
