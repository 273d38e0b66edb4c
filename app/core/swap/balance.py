"""
Swap amount resolution.

Works out how many base units to swap when the caller asks for "everything":
balance (UI-confirmed, aggregator, or ledger, in that order) minus the
token's fee reserve, with a zero remainder handled by the configured policy.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ...config import settings
from ...providers.jupiter import JupiterSwapProvider
from ...providers.solana import SolanaRpcError, SolanaRpcProvider
from .constants import TokenInfo
from .errors import BalanceLookupError, ZeroAmountError
from .models import ResolvedAmount

logger = logging.getLogger(__name__)

# Key of the native entry in the aggregator balance map
NATIVE_BALANCE_KEY = "SOL"


class BalanceResolver:
    """Resolve the base-unit amount to swap for an address and input token."""

    def __init__(
        self,
        jupiter: JupiterSwapProvider,
        rpc: SolanaRpcProvider,
        *,
        min_amount: Optional[int] = None,
        non_native_amount: Optional[int] = None,
        zero_amount_policy: Optional[str] = None,
    ) -> None:
        self._jupiter = jupiter
        self._rpc = rpc
        self.min_amount = min_amount or settings.min_swap_amount_lamports
        self.non_native_amount = non_native_amount or settings.non_native_default_amount
        self.zero_amount_policy = zero_amount_policy or settings.zero_amount_policy

    async def resolve(
        self,
        address: str,
        token: TokenInfo,
        known_balance: Optional[int] = None,
    ) -> ResolvedAmount:
        """
        Args:
            address: Wallet that will sign the swap.
            token: Input token.
            known_balance: Balance the UI already confirmed, in base units.
                Skips the remote lookups when present.

        Raises:
            BalanceLookupError: no balance source answered.
            ZeroAmountError: remainder is zero and the policy is ``reject``.
        """
        if not token.is_native:
            # Non-native balances are not looked up; amounts must be explicit to be meaningful
            logger.info("Using placeholder amount %s for non-native %s", self.non_native_amount, token.symbol)
            return ResolvedAmount(amount=self.non_native_amount, source="placeholder")

        if known_balance is not None:
            balance, source = int(known_balance), "confirmed"
        else:
            balance, source = await self._fetch_native_balance(address)

        remainder = max(0, balance - token.fee_reserve)
        logger.info(
            "Resolved %s balance=%s source=%s reserve=%s remainder=%s",
            token.symbol, balance, source, token.fee_reserve, remainder,
        )

        if remainder > 0:
            return ResolvedAmount(amount=remainder, source=source, balance=balance, reserve=token.fee_reserve)

        if self.zero_amount_policy == "reject":
            raise ZeroAmountError(
                f"Cannot swap zero amount: balance {balance} does not cover the {token.fee_reserve} fee reserve"
            )

        logger.warning("Remainder is zero, substituting minimum amount %s", self.min_amount)
        return ResolvedAmount(
            amount=self.min_amount,
            source=source,
            balance=balance,
            reserve=token.fee_reserve,
            clamped=True,
        )

    async def _fetch_native_balance(self, address: str) -> tuple[int, str]:
        try:
            balances = await self._jupiter.get_balances(address)
            native = balances.get(NATIVE_BALANCE_KEY) or {}
            return int(native["amount"]), "aggregator"
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning("Aggregator balance lookup failed for %s, falling back to RPC: %s", address, e)

        try:
            return await self._rpc.get_balance(address), "ledger"
        except SolanaRpcError as e:
            raise BalanceLookupError(f"Failed to get wallet balance: {e.message}") from e


__all__ = ["BalanceResolver", "NATIVE_BALANCE_KEY"]
