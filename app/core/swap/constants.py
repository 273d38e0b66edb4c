"""Token metadata and unit conversion for swap orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from types import MappingProxyType
from typing import Mapping, Optional, Union

from ...config import settings
from ...services.address import is_valid_solana_address
from .errors import UnknownTokenError

# Wrapped SOL mint; the aggregator treats it as native SOL when wrapAndUnwrapSol is set.
NATIVE_SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
JUP_MINT = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"

LAMPORTS_PER_SOL = 1_000_000_000


@dataclass(frozen=True)
class TokenInfo:
    symbol: str
    mint: str
    decimals: int
    fee_reserve: int = 0  # base units kept back when swapping the whole balance
    is_native: bool = False


def _build_registry() -> Mapping[str, TokenInfo]:
    entries = (
        TokenInfo(
            symbol="SOL",
            mint=NATIVE_SOL_MINT,
            decimals=9,
            fee_reserve=settings.sol_fee_reserve_lamports,
            is_native=True,
        ),
        TokenInfo(symbol="USDC", mint=USDC_MINT, decimals=6),
        TokenInfo(symbol="JUP", mint=JUP_MINT, decimals=6),
    )
    return MappingProxyType({entry.symbol: entry for entry in entries})


TOKEN_REGISTRY: Mapping[str, TokenInfo] = _build_registry()

_BY_MINT: Mapping[str, TokenInfo] = MappingProxyType(
    {entry.mint: entry for entry in TOKEN_REGISTRY.values()}
)


def resolve_token(
    identifier: Optional[str],
    *,
    registry: Mapping[str, TokenInfo] = TOKEN_REGISTRY,
) -> TokenInfo:
    """Resolve a symbol (case-insensitive) or mint address to ``TokenInfo``.

    Unknown but well-formed mints resolve to an entry with zero decimals;
    callers that need decimals for such mints must supply amounts in base
    units.
    """
    candidate = (identifier or "").strip()
    if not candidate:
        raise UnknownTokenError("Token identifier is required")

    by_symbol = registry.get(candidate.upper())
    if by_symbol is not None:
        return by_symbol

    for entry in registry.values():
        if entry.mint == candidate:
            return entry

    if is_valid_solana_address(candidate):
        return TokenInfo(symbol=candidate, mint=candidate, decimals=0)

    raise UnknownTokenError(f"Unknown token: {candidate}")


def symbol_for_mint(mint: str) -> Optional[str]:
    entry = _BY_MINT.get(mint)
    return entry.symbol if entry else None


def to_base_units(ui_amount: Union[str, float, Decimal], decimals: int) -> int:
    """Convert a human-readable amount to integer base units, rounding down."""
    try:
        value = Decimal(str(ui_amount).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {ui_amount!r}") from exc
    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid amount: {ui_amount!r}")
    scale = Decimal(10) ** decimals
    return int((value * scale).to_integral_value(rounding=ROUND_DOWN))


def to_ui_amount(base_units: Union[int, str], decimals: int) -> Decimal:
    return Decimal(int(base_units)) / (Decimal(10) ** decimals)


__all__ = [
    "NATIVE_SOL_MINT",
    "USDC_MINT",
    "JUP_MINT",
    "LAMPORTS_PER_SOL",
    "TokenInfo",
    "TOKEN_REGISTRY",
    "resolve_token",
    "symbol_for_mint",
    "to_base_units",
    "to_ui_amount",
]
