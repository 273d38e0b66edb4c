import base64
from unittest.mock import AsyncMock, MagicMock

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from app.core.swap.errors import (
    MalformedTransactionError,
    OnChainFailure,
    SubmissionError,
    TransactionExpiredError,
)
from app.core.swap.submitter import TransactionSubmitter
from app.providers.solana import LatestBlockhash, SolanaRpcError


def unsigned_swap_blob(payer: Keypair) -> str:
    ix = transfer(TransferParams(from_pubkey=payer.pubkey(), to_pubkey=Pubkey.new_unique(), lamports=5_000))
    message = MessageV0.try_compile(payer.pubkey(), [ix], [], Hash.new_unique())
    return base64.b64encode(bytes(VersionedTransaction.populate(message, [Signature.default()]))).decode()


@pytest.fixture
def payer():
    return Keypair()


@pytest.fixture
def fresh_blockhash():
    return str(Hash.new_unique())


@pytest.fixture
def rpc(fresh_blockhash):
    mock = MagicMock()
    mock.get_latest_blockhash = AsyncMock(
        return_value=LatestBlockhash(blockhash=fresh_blockhash, last_valid_block_height=1_000)
    )
    mock.send_transaction = AsyncMock(return_value="5igSig")
    mock.get_signature_status = AsyncMock(return_value={"confirmationStatus": "confirmed", "err": None, "slot": 77})
    mock.get_block_height = AsyncMock(return_value=900)
    return mock


def submitter_for(rpc):
    return TransactionSubmitter(rpc, send_retries=3, poll_interval_s=0.001)


@pytest.mark.asyncio
async def test_submit_confirms_with_the_blockhash_it_signed(rpc, payer, fresh_blockhash):
    receipt = await submitter_for(rpc).submit(unsigned_swap_blob(payer), payer)

    assert receipt.signature == "5igSig"
    assert receipt.slot == 77
    assert receipt.format == "versioned"
    assert receipt.blockhash == fresh_blockhash
    assert receipt.last_valid_block_height == 1_000

    sent_blob = rpc.send_transaction.await_args.args[0]
    sent = VersionedTransaction.from_bytes(base64.b64decode(sent_blob))
    assert str(sent.message.recent_blockhash) == fresh_blockhash
    assert sent.signatures[0] != Signature.default()
    assert rpc.send_transaction.await_args.kwargs == {"skip_preflight": False, "max_retries": 3}
    rpc.get_latest_blockhash.assert_awaited_once()


@pytest.mark.asyncio
async def test_submit_polls_until_confirmed(rpc, payer):
    rpc.get_signature_status.side_effect = [
        None,
        {"confirmationStatus": "processed", "err": None, "slot": 70},
        {"confirmationStatus": "finalized", "err": None, "slot": 71},
    ]

    receipt = await submitter_for(rpc).submit(unsigned_swap_blob(payer), payer)

    assert receipt.slot == 71
    assert rpc.get_signature_status.await_count == 3


@pytest.mark.asyncio
async def test_onchain_error_is_reported(rpc, payer):
    rpc.get_signature_status.return_value = {
        "confirmationStatus": "confirmed",
        "err": {"InstructionError": [2, {"Custom": 6001}]},
        "slot": 80,
    }

    with pytest.raises(OnChainFailure) as excinfo:
        await submitter_for(rpc).submit(unsigned_swap_blob(payer), payer)

    assert excinfo.value.signature == "5igSig"
    assert excinfo.value.err == {"InstructionError": [2, {"Custom": 6001}]}


@pytest.mark.asyncio
async def test_expiry_is_keyed_to_last_valid_block_height(rpc, payer):
    rpc.get_signature_status.return_value = None
    rpc.get_block_height.side_effect = [999, 1_000, 1_001]

    with pytest.raises(TransactionExpiredError) as excinfo:
        await submitter_for(rpc).submit(unsigned_swap_blob(payer), payer)

    assert excinfo.value.code == "transaction_expired"
    assert rpc.get_block_height.await_count == 3


@pytest.mark.asyncio
async def test_send_rejection_includes_program_logs(rpc, payer):
    rpc.send_transaction.side_effect = SolanaRpcError(
        "RPC error: Transaction simulation failed",
        code=-32002,
        logs=["Program log: Instruction: Route", "Program log: Error: insufficient lamports"],
    )

    with pytest.raises(SubmissionError) as excinfo:
        await submitter_for(rpc).submit(unsigned_swap_blob(payer), payer)

    assert "insufficient lamports" in excinfo.value.message
    rpc.get_signature_status.assert_not_awaited()


@pytest.mark.asyncio
async def test_blockhash_fetch_failure(rpc, payer):
    rpc.get_latest_blockhash.side_effect = SolanaRpcError("HTTP error: 503", transient=True)

    with pytest.raises(SubmissionError):
        await submitter_for(rpc).submit(unsigned_swap_blob(payer), payer)
    rpc.send_transaction.assert_not_awaited()


@pytest.mark.asyncio
async def test_malformed_blob_never_reaches_the_network(rpc, payer):
    with pytest.raises(MalformedTransactionError):
        await submitter_for(rpc).submit(base64.b64encode(b"junk").decode(), payer)
    rpc.get_latest_blockhash.assert_not_awaited()


@pytest.mark.asyncio
async def test_status_poll_errors_do_not_end_the_wait(rpc, payer):
    rpc.get_signature_status.side_effect = [
        SolanaRpcError("RPC error: Node is behind by 42 slots", code=-32005),
        SolanaRpcError("HTTP error: 403"),
        {"confirmationStatus": "confirmed", "err": None, "slot": 90},
    ]

    receipt = await submitter_for(rpc).submit(unsigned_swap_blob(payer), payer)

    assert receipt.signature == "5igSig"
    assert receipt.slot == 90
    rpc.send_transaction.assert_awaited_once()


@pytest.mark.asyncio
async def test_status_poll_errors_still_expire(rpc, payer):
    rpc.get_signature_status.side_effect = SolanaRpcError("RPC error: Node is behind", code=-32005)
    rpc.get_block_height.side_effect = [1_000, 1_001]

    with pytest.raises(TransactionExpiredError):
        await submitter_for(rpc).submit(unsigned_swap_blob(payer), payer)
    rpc.send_transaction.assert_awaited_once()
