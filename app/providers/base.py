from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: float = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status: ``{"status": "healthy" | "degraded" | "error", ...}``"""
        pass


class LedgerProvider(Provider):
    """Provider for Solana ledger reads and transaction submission"""

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Native balance in lamports"""
        pass

    @abstractmethod
    async def get_latest_blockhash(self) -> Any:
        """Current blockhash with the last block height it is valid for"""
        pass

    @abstractmethod
    async def get_block_height(self) -> int:
        pass

    @abstractmethod
    async def send_transaction(self, signed_transaction: str, skip_preflight: bool = False, max_retries: int = 3) -> str:
        """Submit a base64 signed transaction and return its signature"""
        pass

    @abstractmethod
    async def get_signature_status(self, signature: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def get_token_accounts(self, owner: str, mint: Optional[str] = None) -> List[Dict[str, Any]]:
        pass


class SwapAggregatorProvider(Provider):
    """Provider for aggregator quotes and pre-built swap transactions"""

    @abstractmethod
    async def get_quote(self, input_mint: str, output_mint: str, amount: int, slippage_bps: int = 100) -> Any:
        pass

    @abstractmethod
    async def build_swap_transaction(self, quote: Any, user_public_key: str, wrap_and_unwrap_sol: bool = True, **extra_flags: Any) -> Any:
        pass

    @abstractmethod
    async def get_balances(self, address: str) -> Dict[str, Any]:
        """Per-symbol balance map for an address"""
        pass
