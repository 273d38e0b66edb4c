from pathlib import Path
from typing import Dict, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

CLUSTER_RPC_URLS: Dict[str, str] = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    request_timeout_seconds: int = Field(default=30, description="Outbound HTTP request timeout")

    # Solana cluster
    solana_cluster: Literal["mainnet-beta", "devnet", "testnet"] = Field(
        default="mainnet-beta",
        description="Cluster used by every ledger call (balances, blockhash, submission)",
    )
    solana_rpc_url: Optional[str] = Field(
        default=None,
        description="Explicit RPC endpoint; overrides the public URL of solana_cluster",
    )
    solana_commitment: str = Field(default="confirmed", description="Commitment for reads and confirmation")

    # Jupiter aggregator
    jupiter_swap_api_url: str = Field(
        default="https://quote-api.jup.ag/v6",
        description="Base URL serving /quote and /swap",
    )
    jupiter_balances_api_url: str = Field(
        default="https://lite-api.jup.ag/ultra/v1/balances",
        description="Per-address balance endpoint",
    )
    default_slippage_bps: int = Field(default=100, ge=0, le=10_000, description="Quote slippage in basis points")

    # Balance policy (lamports)
    sol_fee_reserve_lamports: int = Field(
        default=10_000_000,
        ge=0,
        description="SOL left behind for fees when swapping the max balance",
    )
    min_swap_amount_lamports: int = Field(
        default=50_000_000,
        gt=0,
        description="Floor substituted when the resolved amount is zero",
    )
    non_native_default_amount: int = Field(
        default=1_000_000,
        gt=0,
        description="Placeholder base-unit amount for non-native inputs without an explicit amount",
    )
    zero_amount_policy: Literal["minimum", "reject"] = Field(
        default="minimum",
        description="minimum: substitute min_swap_amount_lamports; reject: fail with zero_amount",
    )

    # Submission
    send_max_retries: int = Field(default=3, ge=0, description="Retries for transport-level RPC failures")
    confirmation_poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Delay between signature status polls",
    )

    # Routing
    default_input_token: str = Field(default="SOL", description="Input token when the request omits one")
    default_output_token: str = Field(default="USDC", description="Output token when the request omits one")
    swap_fallback_routes: Dict[str, str] = Field(
        default_factory=lambda: {"JUP": "USDC"},
        description="Requested output symbol -> stable output retried once on failure",
    )

    @property
    def solana_rpc_endpoint(self) -> str:
        if self.solana_rpc_url:
            return self.solana_rpc_url
        return CLUSTER_RPC_URLS[self.solana_cluster]


# Global settings instance
settings = Settings()
