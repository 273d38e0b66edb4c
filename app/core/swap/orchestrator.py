"""SwapOrchestrator sequences balance, quote, build and submission for one swap."""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

import structlog

from ...config import settings
from ...providers.jupiter import JupiterSwapProvider, get_jupiter_swap_provider
from ...providers.solana import SolanaRpcProvider, get_solana_rpc_provider
from ..wallet.keys import keypair_from_secret_key
from .balance import BalanceResolver
from .constants import TOKEN_REGISTRY, TokenInfo, resolve_token
from .errors import SwapError, ZeroAmountError, classify_error_code
from .models import SwapResult
from .submitter import TransactionSubmitter

_slog = structlog.stdlib.get_logger("swap")


class SwapOrchestrator:
    """
    Runs Quote -> Build -> Submit for one keypair and token pair.

    ``execute_swap`` never raises: every failure, expected or not, comes back
    as ``SwapResult(success=False)`` with an ``error_code``.

    When the requested output has an entry in ``fallback_routes`` and the flow
    fails, it is re-run once with the stable output. The result then reports
    the token actually received with ``degraded=True`` and the original
    request in ``requested_output_token``.
    """

    def __init__(
        self,
        *,
        jupiter: Optional[JupiterSwapProvider] = None,
        rpc: Optional[SolanaRpcProvider] = None,
        balance_resolver: Optional[BalanceResolver] = None,
        submitter: Optional[TransactionSubmitter] = None,
        token_registry: Optional[Mapping[str, TokenInfo]] = None,
        fallback_routes: Optional[Dict[str, str]] = None,
        slippage_bps: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._jupiter = jupiter or get_jupiter_swap_provider()
        rpc = rpc or get_solana_rpc_provider()
        self._balances = balance_resolver or BalanceResolver(self._jupiter, rpc)
        self._submitter = submitter or TransactionSubmitter(rpc)
        self._registry = TOKEN_REGISTRY if token_registry is None else token_registry
        routes = settings.swap_fallback_routes if fallback_routes is None else fallback_routes
        self._fallback_routes = {k.upper(): v.upper() for k, v in routes.items()}
        self._slippage_bps = settings.default_slippage_bps if slippage_bps is None else slippage_bps
        self._logger = logger or logging.getLogger(__name__)

    async def execute_swap(
        self,
        secret_key: str,
        input_token: str,
        output_token: str,
        use_max_amount: bool = True,
        explicit_amount: Optional[int] = None,
        known_balance: Optional[int] = None,
    ) -> SwapResult:
        """
        Swap ``input_token`` for ``output_token`` from the wallet behind ``secret_key``.

        Args:
            secret_key: Base64 64-byte keypair.
            input_token / output_token: Symbol or mint address.
            use_max_amount: Resolve the amount from the wallet balance.
            explicit_amount: Base units; used as-is and wins over ``use_max_amount``.
            known_balance: UI-confirmed balance in base units for the resolver.
        """
        result = await self._attempt(
            secret_key, input_token, output_token, use_max_amount, explicit_amount, known_balance
        )
        if result.success:
            return result

        fallback = self._fallback_for(output_token)
        if fallback is None or result.error_code in ("invalid_secret_key", "unknown_token", "zero_amount"):
            return result

        _slog.warning(
            "swap_fallback",
            requested_output=result.output_token,
            fallback_output=fallback,
            error=result.error,
        )
        retry = await self._attempt(
            secret_key, input_token, fallback, use_max_amount, explicit_amount, known_balance
        )
        if not retry.success:
            # Report the original failure; the fallback was a best effort
            return result

        return SwapResult(
            success=True,
            input_token=retry.input_token,
            output_token=retry.output_token,
            input_amount=retry.input_amount,
            output_amount=retry.output_amount,
            tx_signature=retry.tx_signature,
            degraded=True,
            requested_output_token=result.output_token,
        )

    def _fallback_for(self, output_token: str) -> Optional[str]:
        try:
            symbol = resolve_token(output_token, registry=self._registry).symbol
        except SwapError:
            return None
        return self._fallback_routes.get(symbol.upper())

    async def _attempt(
        self,
        secret_key: str,
        input_token: str,
        output_token: str,
        use_max_amount: bool,
        explicit_amount: Optional[int],
        known_balance: Optional[int],
    ) -> SwapResult:
        input_label = _label(input_token)
        output_label = _label(output_token)
        try:
            token_in = resolve_token(input_token, registry=self._registry)
            token_out = resolve_token(output_token, registry=self._registry)
            input_label, output_label = token_in.symbol, token_out.symbol

            keypair = keypair_from_secret_key(secret_key)
            owner = str(keypair.pubkey())

            amount = await self._resolve_amount(owner, token_in, use_max_amount, explicit_amount, known_balance)

            quote = await self._jupiter.get_quote(
                token_in.mint, token_out.mint, amount, slippage_bps=self._slippage_bps
            )
            _slog.info(
                "swap_quoted",
                input=token_in.symbol,
                output=token_out.symbol,
                in_amount=quote.in_amount,
                out_amount=quote.out_amount,
            )

            swap_tx = await self._jupiter.build_swap_transaction(quote, owner)
            receipt = await self._submitter.submit(swap_tx.swap_transaction, keypair)

            return SwapResult(
                success=True,
                input_token=token_in.symbol,
                output_token=token_out.symbol,
                input_amount=str(quote.in_amount),
                output_amount=str(quote.out_amount),
                tx_signature=receipt.signature,
            )
        except SwapError as e:
            code = classify_error_code(e)
            _slog.warning("swap_failed", input=input_label, output=output_label, error_code=code, error=e.message)
            return SwapResult(
                success=False,
                input_token=input_label,
                output_token=output_label,
                error=e.message,
                error_code=code,
            )
        except Exception as e:
            self._logger.exception("Unexpected error executing swap")
            return SwapResult(
                success=False,
                input_token=input_label,
                output_token=output_label,
                error=f"Internal error: {e}",
                error_code=classify_error_code(e),
            )

    async def _resolve_amount(
        self,
        owner: str,
        token_in: TokenInfo,
        use_max_amount: bool,
        explicit_amount: Optional[int],
        known_balance: Optional[int],
    ) -> int:
        if explicit_amount is not None:
            if explicit_amount <= 0:
                raise ZeroAmountError()
            return int(explicit_amount)
        if not use_max_amount:
            raise ZeroAmountError("Please specify an amount to swap")
        resolved = await self._balances.resolve(owner, token_in, known_balance=known_balance)
        return resolved.amount


def _label(identifier: Optional[str]) -> str:
    return (identifier or "").strip() or "UNKNOWN"


# Singleton instance
_swap_orchestrator: Optional[SwapOrchestrator] = None


def get_swap_orchestrator() -> SwapOrchestrator:
    """Get the singleton orchestrator wired to the configured providers."""
    global _swap_orchestrator
    if _swap_orchestrator is None:
        _swap_orchestrator = SwapOrchestrator()
    return _swap_orchestrator


__all__ = ["SwapOrchestrator", "get_swap_orchestrator"]
