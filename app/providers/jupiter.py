"""
Jupiter aggregator client.

Covers the three aggregator endpoints the swap flow touches:
- ``GET  /quote``      route and amounts for one pair/amount
- ``POST /swap``       unsigned, pre-built transaction for a quote
- ``GET  /balances``   per-symbol balances for an address (Ultra API)

Routing is entirely Jupiter's; this module only moves JSON around and maps
non-success responses to ``QuoteError`` / ``BuildError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from .base import SwapAggregatorProvider
from ..config import settings
from ..core.swap.errors import BuildError, QuoteError

logger = logging.getLogger(__name__)

# Aggregator error bodies can be long HTML pages
_MAX_ERROR_BODY = 500


@dataclass(frozen=True)
class JupiterQuote:
    """Quote snapshot returned by Jupiter. Valid only briefly; never reused."""

    input_mint: str
    output_mint: str
    in_amount: int                              # In smallest units (lamports for SOL)
    out_amount: int                             # In smallest units
    other_amount_threshold: int                 # Minimum output (with slippage)
    slippage_bps: int
    route_plan: List[Dict[str, Any]] = field(default_factory=list)
    context_slot: Optional[int] = None
    price_impact_pct: float = 0.0

    # Untouched payload, posted back verbatim to /swap
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any], slippage_bps: int) -> "JupiterQuote":
        out_amount = int(data["outAmount"])
        return cls(
            input_mint=data["inputMint"],
            output_mint=data["outputMint"],
            in_amount=int(data["inAmount"]),
            out_amount=out_amount,
            other_amount_threshold=int(data.get("otherAmountThreshold", out_amount)),
            slippage_bps=int(data.get("slippageBps", slippage_bps)),
            route_plan=list(data.get("routePlan") or []),
            context_slot=data.get("contextSlot"),
            price_impact_pct=float(data.get("priceImpactPct") or 0),
            raw=data,
        )


@dataclass(frozen=True)
class SwapTransaction:
    """Unsigned transaction built by Jupiter for a quote."""

    swap_transaction: str                       # Base64, legacy or versioned wire format
    last_valid_block_height: Optional[int] = None
    prioritization_fee_lamports: int = 0


def _truncate(text: str) -> str:
    text = text or ""
    return text if len(text) <= _MAX_ERROR_BODY else text[:_MAX_ERROR_BODY] + "..."


class JupiterSwapProvider(SwapAggregatorProvider):
    """
    Quote, transaction-building and balance client for Jupiter.

    Usage:
        provider = JupiterSwapProvider()

        quote = await provider.get_quote(
            input_mint=NATIVE_SOL_MINT,
            output_mint=USDC_MINT,
            amount=1_000_000_000,  # 1 SOL in lamports
        )
        swap = await provider.build_swap_transaction(quote, user_public_key="...")
    """

    name = "jupiter"

    def __init__(
        self,
        swap_api_url: Optional[str] = None,
        balances_api_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.swap_api_url = (swap_api_url or settings.jupiter_swap_api_url).rstrip("/")
        self.balances_api_url = (balances_api_url or settings.jupiter_balances_api_url).rstrip("/")
        self.timeout_s = timeout_s or settings.request_timeout_seconds

    async def ready(self) -> bool:
        """Jupiter's public API requires no authentication."""
        return True

    async def health_check(self) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=5) as client:
                resp = await client.get(f"{self.swap_api_url}/quote")
            # /quote without parameters answers 400; any HTTP answer means reachable
            return {
                "status": "healthy" if resp.status_code < 500 else "degraded",
                "latency_ms": int(resp.elapsed.total_seconds() * 1000),
            }
        except httpx.HTTPError as e:
            return {"status": "error", "reason": str(e)}

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int = 100,
    ) -> JupiterQuote:
        """
        Get a swap quote from Jupiter.

        Args:
            input_mint: Input token mint address
            output_mint: Output token mint address
            amount: Amount in smallest units (lamports for SOL)
            slippage_bps: Slippage tolerance in basis points (100 = 1%)

        Returns:
            JupiterQuote with route and amounts

        Raises:
            QuoteError: non-positive amount, non-success status, or transport failure.
        """
        if int(amount) <= 0:
            raise QuoteError(f"Refusing to quote non-positive amount: {amount}")

        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(int(amount)),
            "slippageBps": str(slippage_bps),
        }
        logger.info(
            "Requesting Jupiter quote %s -> %s amount=%s slippage_bps=%s",
            input_mint, output_mint, params["amount"], slippage_bps,
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.get(f"{self.swap_api_url}/quote", params=params)
        except httpx.HTTPError as e:
            raise QuoteError(f"Jupiter quote request failed: {e}") from e

        if not response.is_success:
            body = _truncate(response.text)
            logger.warning("Jupiter quote rejected status=%s body=%s", response.status_code, body)
            raise QuoteError(
                f"Jupiter quote API error: {response.status_code}. Details: {body}",
                status=response.status_code,
                body=body,
            )

        try:
            data = response.json()
            if "error" in data:
                raise QuoteError(f"Jupiter quote error: {data['error']}", status=response.status_code)
            return JupiterQuote.from_api(data, slippage_bps)
        except QuoteError:
            raise
        except (ValueError, KeyError, TypeError) as e:
            raise QuoteError(f"Unexpected Jupiter quote payload: {e}", status=response.status_code) from e

    async def build_swap_transaction(
        self,
        quote: JupiterQuote,
        user_public_key: str,
        wrap_and_unwrap_sol: bool = True,
        **extra_flags: Any,
    ) -> SwapTransaction:
        """
        Build an unsigned swap transaction from a quote.

        Args:
            quote: The quote to build a transaction for
            user_public_key: Public key that will sign and pay
            wrap_and_unwrap_sol: Automatically wrap/unwrap SOL
            **extra_flags: Additional Jupiter /swap body fields
                (e.g. ``dynamicComputeUnitLimit=True``)

        Returns:
            SwapTransaction with the base64 encoded transaction

        Raises:
            BuildError: non-success status, transport failure, or missing transaction.
        """
        payload: Dict[str, Any] = {
            "quoteResponse": quote.raw,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": wrap_and_unwrap_sol,
        }
        payload.update(extra_flags)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.post(f"{self.swap_api_url}/swap", json=payload)
        except httpx.HTTPError as e:
            raise BuildError(f"Jupiter swap request failed: {e}") from e

        if not response.is_success:
            body = _truncate(response.text)
            logger.warning("Jupiter swap build rejected status=%s body=%s", response.status_code, body)
            raise BuildError(
                f"Jupiter swap API error: {response.status_code}. Details: {body}",
                status=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BuildError(f"Unexpected Jupiter swap payload: {e}", status=response.status_code) from e

        if "error" in data:
            raise BuildError(f"Jupiter swap error: {data['error']}", status=response.status_code)
        if not data.get("swapTransaction"):
            raise BuildError("Jupiter swap response missing swapTransaction", status=response.status_code)

        return SwapTransaction(
            swap_transaction=data["swapTransaction"],
            last_valid_block_height=data.get("lastValidBlockHeight"),
            prioritization_fee_lamports=int(data.get("prioritizationFeeLamports") or 0),
        )

    async def get_balances(self, address: str) -> Dict[str, Any]:
        """
        Fetch the per-symbol balance map for an address.

        The native entry is keyed ``"SOL"``; SPL tokens are keyed by mint.
        Each entry carries ``amount`` (base units, string) and ``uiAmount``.

        Raises:
            httpx.HTTPError: transport failure or non-success status.
            ValueError: response is not a JSON object.
        """
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            response = await client.get(
                f"{self.balances_api_url}/{address}",
                headers={"accept": "application/json"},
            )
            response.raise_for_status()
            payload = response.json()

        if not isinstance(payload, dict):
            raise ValueError("Unexpected response from Jupiter balances API")
        return payload


# Singleton instance
_jupiter_swap_provider: Optional[JupiterSwapProvider] = None


def get_jupiter_swap_provider() -> JupiterSwapProvider:
    """Get the singleton Jupiter swap provider."""
    global _jupiter_swap_provider
    if _jupiter_swap_provider is None:
        _jupiter_swap_provider = JupiterSwapProvider()
    return _jupiter_swap_provider


__all__ = [
    "JupiterQuote",
    "JupiterSwapProvider",
    "SwapTransaction",
    "get_jupiter_swap_provider",
]
