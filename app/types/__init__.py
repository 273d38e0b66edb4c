from .portfolio import CamelModel, TokenBalance
from .requests import SwapTokensRequest, WalletAddressRequest
from .responses import (
    ErrorResponse,
    GenerateWalletResponse,
    SwapResultPayload,
    SwapTokensResponse,
    TokenBalancesResponse,
    WalletBalanceResponse,
)

__all__ = [
    "CamelModel",
    "TokenBalance",
    "SwapTokensRequest",
    "WalletAddressRequest",
    "ErrorResponse",
    "GenerateWalletResponse",
    "SwapResultPayload",
    "SwapTokensResponse",
    "TokenBalancesResponse",
    "WalletBalanceResponse",
]
