"""
Transaction submission for aggregator-built swaps.

Received(blob) -> Deserialized(format) -> Rebased(blockhash) -> Signed
-> Submitted(signature) -> Confirmed | Failed

Only the terminal outcome is visible to callers: a ``SubmissionReceipt`` on
success, a ``SwapError`` subclass otherwise.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import structlog
from solders.keypair import Keypair

from ...config import settings
from ...providers.solana import SolanaRpcError, SolanaRpcProvider
from .errors import OnChainFailure, SubmissionError, TransactionExpiredError
from .transaction import first_signature, parse_transaction, rebase, serialize, sign

logger = logging.getLogger(__name__)
_slog = structlog.stdlib.get_logger("swap.submitter")

_CONFIRMED_STATES = {"confirmed", "finalized"}


@dataclass(frozen=True)
class SubmissionReceipt:
    signature: str
    blockhash: str
    last_valid_block_height: int
    format: str
    slot: Optional[int] = None


class TransactionSubmitter:
    """
    Parse, re-stamp, sign, send and confirm one swap transaction.

    Usage:
        submitter = TransactionSubmitter(get_solana_rpc_provider())
        receipt = await submitter.submit(swap.swap_transaction, keypair)
    """

    def __init__(
        self,
        rpc: SolanaRpcProvider,
        *,
        send_retries: Optional[int] = None,
        poll_interval_s: Optional[float] = None,
    ):
        self._rpc = rpc
        self._send_retries = settings.send_max_retries if send_retries is None else send_retries
        self._poll_interval_s = poll_interval_s or settings.confirmation_poll_interval_seconds

    async def submit(self, blob: str, keypair: Keypair) -> SubmissionReceipt:
        """
        Run the blob through every submission stage.

        Raises:
            MalformedTransactionError: blob parses in neither wire format.
            SigningError: keypair cannot sign the transaction.
            SubmissionError: blockhash fetch or send was rejected.
            TransactionExpiredError: blockhash expired before confirmation.
            OnChainFailure: the transaction landed with an error.
        """
        parsed = parse_transaction(blob)
        _slog.info("swap_tx_deserialized", format=parsed.format)

        try:
            latest = await self._rpc.get_latest_blockhash()
        except SolanaRpcError as e:
            raise SubmissionError(f"Failed to fetch latest blockhash: {e.message}") from e

        signed = sign(rebase(parsed, latest.blockhash), keypair)
        _slog.debug("swap_tx_signed", signature=first_signature(signed), blockhash=latest.blockhash)

        try:
            signature = await self._rpc.send_transaction(
                serialize(signed),
                skip_preflight=False,
                max_retries=self._send_retries,
            )
        except SolanaRpcError as e:
            raise SubmissionError(_describe_rpc_error("Transaction rejected", e)) from e

        _slog.info(
            "swap_tx_submitted",
            signature=signature,
            format=signed.format,
            last_valid_block_height=latest.last_valid_block_height,
        )

        slot = await self.confirm(signature, latest.last_valid_block_height)
        return SubmissionReceipt(
            signature=signature,
            blockhash=latest.blockhash,
            last_valid_block_height=latest.last_valid_block_height,
            format=signed.format,
            slot=slot,
        )

    async def confirm(self, signature: str, last_valid_block_height: int) -> Optional[int]:
        """
        Poll until ``signature`` is confirmed or its blockhash expires.

        There is no wall-clock timeout: the wait ends when the cluster reports
        a terminal status or block height passes ``last_valid_block_height``.
        RPC errors while polling are logged and polling continues.

        Returns:
            Slot the transaction landed in.
        """
        while True:
            try:
                status = await self._rpc.get_signature_status(signature)
            except SolanaRpcError as e:
                logger.warning(
                    "Signature status poll failed for %s (code=%s): %s", signature, e.code, e.message
                )
                status = None

            if status:
                if status.get("err") is not None:
                    raise OnChainFailure(
                        f"Transaction failed: {status['err']}",
                        err=status["err"],
                        signature=signature,
                    )
                if status.get("confirmationStatus") in _CONFIRMED_STATES:
                    _slog.info("swap_tx_confirmed", signature=signature, slot=status.get("slot"))
                    return status.get("slot")
            else:
                try:
                    block_height = await self._rpc.get_block_height()
                except SolanaRpcError as e:
                    logger.warning("Block height poll failed for %s: %s", signature, e.message)
                    block_height = None
                if block_height is not None and block_height > last_valid_block_height:
                    raise TransactionExpiredError(
                        f"Transaction {signature} expired: block height {block_height} "
                        f"exceeded {last_valid_block_height}"
                    )

            await asyncio.sleep(self._poll_interval_s)


def _describe_rpc_error(prefix: str, error: SolanaRpcError) -> str:
    message = f"{prefix}: {error.message}"
    if error.logs:
        message += " | " + " | ".join(error.logs[-3:])
    return message


__all__ = ["SubmissionReceipt", "TransactionSubmitter"]
