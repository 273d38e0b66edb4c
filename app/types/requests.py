from typing import Optional

from pydantic import Field

from .portfolio import CamelModel


class WalletAddressRequest(CamelModel):
    wallet_address: Optional[str] = Field(default=None, description="Base58 Solana wallet address")


class SwapTokensRequest(CamelModel):
    wallet_address: Optional[str] = Field(default=None, description="Wallet that signs the swap")
    secret_key: Optional[str] = Field(default=None, description="Base64 64-byte keypair for wallet_address")
    input_token: Optional[str] = Field(default=None, description="Symbol or mint to sell (defaults to SOL)")
    output_token: Optional[str] = Field(default=None, description="Symbol or mint to buy (defaults to USDC)")
    confirmed_balance: Optional[str] = Field(
        default=None,
        description="SOL balance the UI already displayed; skips the balance lookup",
    )
    amount: Optional[str] = Field(
        default=None,
        description="Explicit amount to swap in UI units; overrides the maximum-amount mode",
    )
