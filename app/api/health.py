from fastapi import APIRouter, Depends
from typing import Dict, Any

from ..config import settings
from ..providers.jupiter import JupiterSwapProvider, get_jupiter_swap_provider
from ..providers.solana import SolanaRpcProvider, get_solana_rpc_provider

router = APIRouter()


@router.get("/healthz")
async def health_check(
    rpc: SolanaRpcProvider = Depends(get_solana_rpc_provider),
    jupiter: JupiterSwapProvider = Depends(get_jupiter_swap_provider),
) -> Dict[str, Any]:
    """Health check endpoint that verifies the ledger RPC and the aggregator"""

    provider_status = {
        "solana_rpc": await rpc.health_check(),
        "jupiter": await jupiter.health_check(),
    }

    healthy = sum(
        1 for status in provider_status.values()
        if status["status"] == "healthy"
    )

    return {
        "status": "healthy" if healthy == len(provider_status) else "degraded",
        "cluster": settings.solana_cluster,
        "providers": provider_status,
        "available_providers": healthy,
        "total_providers": len(provider_status),
    }
