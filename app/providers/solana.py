"""
Solana JSON-RPC provider.

Thin JSON-RPC client over httpx for the ledger calls the swap flow needs:
balances, latest blockhash, submission and signature status. Transport-level
failures (connection errors, HTTP 429/5xx) are retried a bounded number of
times; JSON-RPC errors are returned by the node itself and are never retried.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .base import LedgerProvider
from ..config import settings

logger = logging.getLogger(__name__)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"

# Token accounts live under one of these owners
TOKEN_PROGRAM_IDS = (TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID)

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


@dataclass(frozen=True)
class LatestBlockhash:
    blockhash: str
    last_valid_block_height: int


class SolanaRpcError(Exception):
    """Error in a Solana RPC call."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        logs: Optional[List[str]] = None,
        transient: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.logs = logs or []
        self.transient = transient


class SolanaRpcProvider(LedgerProvider):
    """
    JSON-RPC client for one Solana cluster.

    Usage:
        rpc = SolanaRpcProvider("https://api.mainnet-beta.solana.com")

        latest = await rpc.get_latest_blockhash()
        signature = await rpc.send_transaction(signed_tx_base64)
        status = await rpc.get_signature_status(signature)
    """

    name = "solana_rpc"

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        *,
        commitment: Optional[str] = None,
        max_retries: Optional[int] = None,
        timeout_s: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url or settings.solana_rpc_endpoint
        self.commitment = commitment or settings.solana_commitment
        self.max_retries = settings.send_max_retries if max_retries is None else max_retries
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._client = client
        self._request_id = 0

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        try:
            result = await self._rpc_call("getHealth", [])
            return {"status": "healthy" if result == "ok" else "degraded", "rpc_url": self.rpc_url}
        except SolanaRpcError as e:
            return {"status": "error", "reason": e.message, "rpc_url": self.rpc_url}

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        """Make an RPC call and return its ``result`` member."""
        client = await self._get_client()
        self._request_id += 1

        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                response = await client.post(
                    self.rpc_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                if response.status_code in _RETRYABLE_STATUS:
                    raise SolanaRpcError(
                        f"HTTP error: {response.status_code}",
                        transient=True,
                    )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as e:
                raise SolanaRpcError(f"HTTP error: {e.response.status_code}") from e
            except (httpx.TransportError, SolanaRpcError) as e:
                if isinstance(e, SolanaRpcError) and not e.transient:
                    raise
                if attempt == attempts - 1:
                    raise SolanaRpcError(f"{method} failed after {attempts} attempts: {e}", transient=True) from e
                logger.warning("RPC %s transient failure (attempt %s/%s): %s", method, attempt + 1, attempts, e)
                await asyncio.sleep(0.5 * (attempt + 1))
                continue
            except ValueError as e:
                raise SolanaRpcError(f"Invalid JSON-RPC response for {method}") from e

            if "error" in data:
                error = data["error"] or {}
                error_data = error.get("data") or {}
                logs = error_data.get("logs") if isinstance(error_data, dict) else None
                raise SolanaRpcError(
                    f"RPC error: {error.get('message', error)}",
                    code=error.get("code"),
                    logs=logs or [],
                )

            return data.get("result")

        raise SolanaRpcError("Max retries exceeded", transient=True)

    async def get_balance(self, address: str) -> int:
        """
        Get SOL balance for an address.

        Returns:
            Balance in lamports
        """
        result = await self._rpc_call(
            "getBalance",
            [address, {"commitment": self.commitment}],
        )
        return int((result or {}).get("value", 0))

    async def get_latest_blockhash(self) -> LatestBlockhash:
        """Fetch the current blockhash and the last block height it is valid for."""
        result = await self._rpc_call(
            "getLatestBlockhash",
            [{"commitment": self.commitment}],
        )
        value = (result or {}).get("value") or {}
        if not value.get("blockhash"):
            raise SolanaRpcError("getLatestBlockhash returned no blockhash")
        return LatestBlockhash(
            blockhash=value["blockhash"],
            last_valid_block_height=int(value["lastValidBlockHeight"]),
        )

    async def get_block_height(self) -> int:
        result = await self._rpc_call("getBlockHeight", [{"commitment": self.commitment}])
        return int(result)

    async def send_transaction(
        self,
        signed_transaction: str,
        skip_preflight: bool = False,
        max_retries: int = 3,
    ) -> str:
        """
        Send a signed transaction to the network.

        Args:
            signed_transaction: Base64 encoded signed transaction
            skip_preflight: Skip preflight simulation
            max_retries: Rebroadcast attempts the RPC node makes on its own

        Returns:
            Transaction signature (base58)
        """
        options = {
            "encoding": "base64",
            "skipPreflight": skip_preflight,
            "preflightCommitment": self.commitment,
            "maxRetries": max_retries,
        }
        signature = await self._rpc_call("sendTransaction", [signed_transaction, options])
        if not signature:
            raise SolanaRpcError("No signature returned from sendTransaction")
        return signature

    async def get_signature_status(self, signature: str) -> Optional[Dict[str, Any]]:
        """
        Get the status of one signature.

        Returns:
            Status dict (``confirmationStatus``, ``err``, ``slot``) or None
            when the cluster has not seen the signature yet.
        """
        result = await self._rpc_call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        statuses = (result or {}).get("value") or [None]
        return statuses[0]

    async def get_token_accounts(self, owner: str, mint: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Get SPL token accounts for an owner.

        Without a mint filter both the classic Token program and Token-2022
        are queried and their accounts merged.

        Args:
            owner: Wallet address
            mint: Optional token mint to filter by

        Returns:
            List of token accounts with balances
        """
        if mint:
            filters = [{"mint": mint}]
        else:
            filters = [{"programId": program_id} for program_id in TOKEN_PROGRAM_IDS]

        items: List[Dict[str, Any]] = []
        for filter_option in filters:
            result = await self._rpc_call(
                "getTokenAccountsByOwner",
                [
                    owner,
                    filter_option,
                    {"encoding": "jsonParsed", "commitment": self.commitment},
                ],
            )
            items.extend((result or {}).get("value", []))

        accounts = []
        for item in items:
            parsed = item.get("account", {}).get("data", {}).get("parsed", {})
            info = parsed.get("info", {})
            token_amount = info.get("tokenAmount", {})
            accounts.append({
                "address": item.get("pubkey"),
                "mint": info.get("mint"),
                "owner": info.get("owner"),
                "amount": int(token_amount.get("amount", 0)),
                "decimals": int(token_amount.get("decimals", 0)),
                "ui_amount": token_amount.get("uiAmountString"),
            })

        return accounts


# Singleton instance
_solana_rpc_provider: Optional[SolanaRpcProvider] = None


def get_solana_rpc_provider() -> SolanaRpcProvider:
    """
    Get the singleton RPC provider for the configured cluster.

    Endpoint resolution: ``SOLANA_RPC_URL`` if set, otherwise the public URL
    of ``SOLANA_CLUSTER``.
    """
    global _solana_rpc_provider
    if _solana_rpc_provider is None:
        _solana_rpc_provider = SolanaRpcProvider(settings.solana_rpc_endpoint)
    return _solana_rpc_provider


async def close_solana_rpc_provider() -> None:
    global _solana_rpc_provider
    if _solana_rpc_provider is not None:
        await _solana_rpc_provider.close()
        _solana_rpc_provider = None


__all__ = [
    "LatestBlockhash",
    "SolanaRpcError",
    "SolanaRpcProvider",
    "TOKEN_PROGRAM_ID",
    "TOKEN_2022_PROGRAM_ID",
    "TOKEN_PROGRAM_IDS",
    "get_solana_rpc_provider",
    "close_solana_rpc_provider",
]
