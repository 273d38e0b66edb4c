"""Custodial swap route."""

import logging

from fastapi import APIRouter, Depends

from ..config import settings
from ..core.swap.constants import resolve_token, to_base_units
from ..core.swap.errors import SwapError
from ..core.swap.orchestrator import SwapOrchestrator, get_swap_orchestrator
from ..core.wallet.keys import keypair_from_secret_key
from ..services.address import validate_solana_address
from ..types.requests import SwapTokensRequest
from ..types.responses import SwapResultPayload, SwapTokensResponse
from .wallet import error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

SOL_DECIMALS = 9


@router.post("/swapTokens", response_model=SwapTokensResponse)
async def swap_tokens(
    req: SwapTokensRequest,
    orchestrator: SwapOrchestrator = Depends(get_swap_orchestrator),
):
    """
    Swap the wallet's balance (or an explicit ``amount``) of ``inputToken``
    for ``outputToken``. Validation failures are 400; a failed swap is 500
    with the orchestrator's error and ``errorCode``.
    """
    try:
        address = validate_solana_address(req.wallet_address)
    except SwapError as e:
        return error_response(400, e.message, e.code)

    if not (req.secret_key or "").strip():
        return error_response(400, "Secret key is required", "invalid_secret_key", address)

    try:
        keypair = keypair_from_secret_key(req.secret_key)
    except SwapError as e:
        return error_response(400, e.message, e.code, address)
    if str(keypair.pubkey()) != address:
        return error_response(400, "Secret key does not match wallet address", "invalid_secret_key", address)

    input_token = req.input_token or settings.default_input_token
    output_token = req.output_token or settings.default_output_token

    known_balance = None
    if req.confirmed_balance:
        try:
            known_balance = to_base_units(req.confirmed_balance, SOL_DECIMALS)
        except ValueError:
            return error_response(400, "Invalid confirmedBalance", "invalid_amount", address)
        logger.info("Using confirmed balance from UI: %s SOL", req.confirmed_balance)

    explicit_amount = None
    if req.amount:
        try:
            token_in = resolve_token(input_token)
        except SwapError as e:
            return error_response(400, e.message, e.code, address)
        try:
            explicit_amount = to_base_units(req.amount, token_in.decimals)
        except ValueError:
            return error_response(400, "Invalid amount", "invalid_amount", address)
        if explicit_amount <= 0:
            return error_response(400, "Invalid amount", "invalid_amount", address)

    logger.info("Executing swap %s -> %s for %s", input_token, output_token, address)
    result = await orchestrator.execute_swap(
        req.secret_key,
        input_token,
        output_token,
        use_max_amount=explicit_amount is None,
        explicit_amount=explicit_amount,
        known_balance=known_balance,
    )

    if not result.success:
        return error_response(500, result.error or "Swap failed", result.error_code or "swap_failed", address)

    return SwapTokensResponse(
        wallet_address=address,
        swap_result=SwapResultPayload(
            input_token=result.input_token,
            output_token=result.output_token,
            input_amount=result.input_amount,
            output_amount=result.output_amount,
            tx_signature=result.tx_signature,
            degraded=result.degraded,
            requested_output_token=result.requested_output_token,
        ),
    )
