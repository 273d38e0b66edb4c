"""Wallet creation and balance routes."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.swap.constants import LAMPORTS_PER_SOL
from ..core.swap.errors import InvalidAddressError, classify_error_code
from ..core.wallet.keys import generate_wallet
from ..providers.solana import SolanaRpcError, SolanaRpcProvider, get_solana_rpc_provider
from ..services.address import validate_solana_address
from ..services.balances import get_token_balances, get_wallet_balance
from ..types.requests import WalletAddressRequest
from ..types.responses import (
    ErrorResponse,
    GenerateWalletResponse,
    TokenBalancesResponse,
    WalletBalanceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def error_response(status_code: int, error: str, error_code: str, wallet_address=None) -> JSONResponse:
    body = ErrorResponse(error=error, error_code=error_code, wallet_address=wallet_address)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, exclude_none=True))


@router.api_route("/generateWallet", methods=["GET", "POST"], response_model=GenerateWalletResponse)
async def generate_wallet_route():
    try:
        wallet = generate_wallet()
    except Exception as e:
        logger.exception("Error generating wallet")
        return error_response(500, str(e) or "Unknown error", classify_error_code(e))

    logger.info("Generated wallet %s", wallet.address)
    return GenerateWalletResponse(
        address=wallet.address,
        seed_phrase=wallet.seed_phrase,
        secret_key=wallet.secret_key,
    )


@router.post("/getWalletBalance", response_model=WalletBalanceResponse)
async def get_wallet_balance_route(
    req: WalletAddressRequest,
    rpc: SolanaRpcProvider = Depends(get_solana_rpc_provider),
):
    try:
        address = validate_solana_address(req.wallet_address)
    except InvalidAddressError as e:
        return error_response(400, e.message, e.code)

    try:
        balance = await get_wallet_balance(address, rpc=rpc)
    except SolanaRpcError as e:
        logger.error("Error getting wallet balance for %s: %s", address, e.message)
        return error_response(500, "Failed to get wallet balance", "balance_unavailable", address)

    return WalletBalanceResponse(
        address=address,
        balance=float(balance),
        lamports=int(balance * LAMPORTS_PER_SOL),
    )


@router.post("/getTokenBalances", response_model=TokenBalancesResponse)
async def get_token_balances_route(
    req: WalletAddressRequest,
    rpc: SolanaRpcProvider = Depends(get_solana_rpc_provider),
):
    try:
        address = validate_solana_address(req.wallet_address)
    except InvalidAddressError as e:
        return error_response(400, e.message, e.code)

    try:
        balances = await get_token_balances(address, rpc=rpc)
    except SolanaRpcError as e:
        logger.error("Error getting token balances for %s: %s", address, e.message)
        return error_response(500, "Failed to get token balances", "balance_unavailable", address)

    return TokenBalancesResponse(address=address, balances=balances)
