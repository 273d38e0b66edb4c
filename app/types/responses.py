from typing import List, Optional

from pydantic import Field

from .portfolio import CamelModel, TokenBalance


class ErrorResponse(CamelModel):
    success: bool = Field(default=False)
    error: str = Field(description="Error message")
    error_code: Optional[str] = Field(default=None, description="Stable machine-readable error code")
    wallet_address: Optional[str] = Field(default=None, description="Wallet the request referred to")


class GenerateWalletResponse(CamelModel):
    success: bool = True
    address: str = Field(description="Base58 public key of the new wallet")
    seed_phrase: List[str] = Field(description="24-word BIP-39 mnemonic")
    secret_key: str = Field(description="Base64 64-byte keypair")


class WalletBalanceResponse(CamelModel):
    success: bool = True
    address: str = Field(description="Wallet address")
    balance: float = Field(description="Native balance in SOL")
    lamports: int = Field(description="Native balance in lamports")


class TokenBalancesResponse(CamelModel):
    success: bool = True
    address: str = Field(description="Wallet address")
    balances: List[TokenBalance] = Field(default_factory=list, description="Native and SPL token balances")


class SwapResultPayload(CamelModel):
    input_token: str
    output_token: str
    input_amount: str = Field(description="Base units spent, as reported by the aggregator quote")
    output_amount: str = Field(description="Base units received, as reported by the aggregator quote")
    tx_signature: Optional[str] = None
    degraded: bool = Field(default=False, description="Output was swapped to the fallback token")
    requested_output_token: Optional[str] = None


class SwapTokensResponse(CamelModel):
    success: bool = True
    wallet_address: str
    swap_result: SwapResultPayload
