"""Typed models used by the swap subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ResolvedAmount:
    """Base-unit amount chosen for a swap and how it was reached."""

    amount: int
    source: str                 # explicit | confirmed | aggregator | ledger | placeholder
    balance: Optional[int] = None
    reserve: int = 0
    clamped: bool = False       # minimum floor substituted for a zero remainder


@dataclass(frozen=True)
class SwapResult:
    """Terminal record of one swap attempt. Amounts are base-unit strings."""

    success: bool
    input_token: str
    output_token: str
    input_amount: str = "0"
    output_amount: str = "0"
    tx_signature: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    # Set when the requested output failed and a stable fallback was swapped instead
    degraded: bool = False
    requested_output_token: Optional[str] = None
