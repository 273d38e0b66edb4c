from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from solders.keypair import Keypair

from app.core.swap.models import SwapResult
from app.core.swap.orchestrator import get_swap_orchestrator
from app.core.wallet.keys import encode_secret_key
from app.main import app

client = TestClient(app)


@pytest.fixture
def keypair():
    return Keypair()


@pytest.fixture
def orchestrator():
    mock = MagicMock()
    mock.execute_swap = AsyncMock(
        return_value=SwapResult(
            success=True,
            input_token="SOL",
            output_token="USDC",
            input_amount="50000000",
            output_amount="7512000",
            tx_signature="5igSig",
        )
    )
    app.dependency_overrides[get_swap_orchestrator] = lambda: mock
    yield mock
    app.dependency_overrides.clear()


def swap_body(keypair, **extra):
    body = {"walletAddress": str(keypair.pubkey()), "secretKey": encode_secret_key(keypair)}
    body.update(extra)
    return body


def test_swap_success_envelope(orchestrator, keypair):
    resp = client.post("/api/swapTokens", json=swap_body(keypair, confirmedBalance="0.002"))
    assert resp.status_code == 200, resp.json()

    assert resp.json() == {
        "success": True,
        "walletAddress": str(keypair.pubkey()),
        "swapResult": {
            "inputToken": "SOL",
            "outputToken": "USDC",
            "inputAmount": "50000000",
            "outputAmount": "7512000",
            "txSignature": "5igSig",
            "degraded": False,
            "requestedOutputToken": None,
        },
    }

    args = orchestrator.execute_swap.await_args
    assert args.args[1:] == ("SOL", "USDC")
    assert args.kwargs["known_balance"] == 2_000_000
    assert args.kwargs["use_max_amount"] is True
    assert args.kwargs["explicit_amount"] is None


def test_swap_explicit_amount_in_ui_units(orchestrator, keypair):
    resp = client.post("/api/swapTokens", json=swap_body(keypair, inputToken="SOL", outputToken="JUP", amount="0.25"))
    assert resp.status_code == 200, resp.json()

    args = orchestrator.execute_swap.await_args
    assert args.args[1:] == ("SOL", "JUP")
    assert args.kwargs["explicit_amount"] == 250_000_000
    assert args.kwargs["use_max_amount"] is False


def test_swap_degraded_result_is_visible(orchestrator, keypair):
    orchestrator.execute_swap.return_value = SwapResult(
        success=True,
        input_token="SOL",
        output_token="USDC",
        input_amount="50000000",
        output_amount="7512000",
        tx_signature="5igSig",
        degraded=True,
        requested_output_token="JUP",
    )

    resp = client.post("/api/swapTokens", json=swap_body(keypair, outputToken="JUP"))

    result = resp.json()["swapResult"]
    assert result["outputToken"] == "USDC"
    assert result["degraded"] is True
    assert result["requestedOutputToken"] == "JUP"


def test_swap_invalid_address(orchestrator, keypair):
    resp = client.post("/api/swapTokens", json=swap_body(keypair, walletAddress="not-an-address"))

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid wallet address"
    orchestrator.execute_swap.assert_not_awaited()


def test_swap_missing_secret_key(orchestrator, keypair):
    resp = client.post("/api/swapTokens", json={"walletAddress": str(keypair.pubkey())})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Secret key is required"
    orchestrator.execute_swap.assert_not_awaited()


def test_swap_secret_key_for_another_wallet(orchestrator, keypair):
    resp = client.post("/api/swapTokens", json=swap_body(keypair, secretKey=encode_secret_key(Keypair())))

    assert resp.status_code == 400
    assert resp.json()["errorCode"] == "invalid_secret_key"
    orchestrator.execute_swap.assert_not_awaited()


def test_swap_invalid_confirmed_balance(orchestrator, keypair):
    resp = client.post("/api/swapTokens", json=swap_body(keypair, confirmedBalance="lots"))

    assert resp.status_code == 400
    assert resp.json()["errorCode"] == "invalid_amount"


def test_swap_failure_envelope(orchestrator, keypair):
    orchestrator.execute_swap.return_value = SwapResult(
        success=False,
        input_token="SOL",
        output_token="USDC",
        error="Jupiter quote API error: 400. Details: bad amount",
        error_code="quote_failed",
    )

    resp = client.post("/api/swapTokens", json=swap_body(keypair))

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": "Jupiter quote API error: 400. Details: bad amount",
        "errorCode": "quote_failed",
        "walletAddress": str(keypair.pubkey()),
    }


@pytest.mark.parametrize("amount", ["0", "0.0000000001"])
def test_swap_amount_below_one_base_unit_is_rejected(orchestrator, keypair, amount):
    resp = client.post("/api/swapTokens", json=swap_body(keypair, inputToken="SOL", amount=amount))

    assert resp.status_code == 400
    assert resp.json()["errorCode"] == "invalid_amount"
    orchestrator.execute_swap.assert_not_awaited()
