import json

import httpx
import pytest

from app.providers.solana import (
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    SolanaRpcError,
    SolanaRpcProvider,
)

RPC_URL = "https://rpc.test"


def make_provider(handler, max_retries=1):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SolanaRpcProvider(RPC_URL, commitment="confirmed", max_retries=max_retries, client=client)


def rpc_result(request, result):
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


@pytest.mark.asyncio
async def test_get_balance_returns_lamports():
    seen = []

    def handler(request):
        body = json.loads(request.content)
        seen.append(body)
        return rpc_result(request, {"context": {"slot": 1}, "value": 1_500_000_000})

    rpc = make_provider(handler)
    assert await rpc.get_balance("8hE8hihVk1DJyQjk96H41QJCUscqbZU9PmSmpXYCXdBL") == 1_500_000_000
    assert seen[0]["method"] == "getBalance"
    assert seen[0]["params"][1] == {"commitment": "confirmed"}
    await rpc.close()


@pytest.mark.asyncio
async def test_get_latest_blockhash():
    def handler(request):
        return rpc_result(
            request,
            {"context": {"slot": 1}, "value": {"blockhash": "abc", "lastValidBlockHeight": 250}},
        )

    rpc = make_provider(handler)
    latest = await rpc.get_latest_blockhash()
    assert latest.blockhash == "abc"
    assert latest.last_valid_block_height == 250
    await rpc.close()


@pytest.mark.asyncio
async def test_transient_http_errors_are_retried():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] == 1:
            return httpx.Response(503, text="busy")
        return rpc_result(request, 42)

    rpc = make_provider(handler, max_retries=1)
    assert await rpc.get_block_height() == 42
    assert calls["n"] == 2
    await rpc.close()


@pytest.mark.asyncio
async def test_rpc_errors_are_not_retried_and_keep_logs():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        body = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "jsonrpc": "2.0",
                "id": body["id"],
                "error": {
                    "code": -32002,
                    "message": "Transaction simulation failed",
                    "data": {"logs": ["Program log: Error: insufficient lamports"]},
                },
            },
        )

    rpc = make_provider(handler, max_retries=3)
    with pytest.raises(SolanaRpcError) as excinfo:
        await rpc.send_transaction("AQID")

    assert calls["n"] == 1
    assert excinfo.value.code == -32002
    assert excinfo.value.transient is False
    assert excinfo.value.logs == ["Program log: Error: insufficient lamports"]
    await rpc.close()


@pytest.mark.asyncio
async def test_get_signature_status_unknown_signature():
    def handler(request):
        return rpc_result(request, {"context": {"slot": 1}, "value": [None]})

    rpc = make_provider(handler)
    assert await rpc.get_signature_status("sig") is None
    await rpc.close()


OWNER = "8hE8hihVk1DJyQjk96H41QJCUscqbZU9PmSmpXYCXdBL"


def token_account(pubkey, mint, amount, decimals, ui_amount):
    return {
        "pubkey": pubkey,
        "account": {
            "data": {
                "parsed": {
                    "info": {
                        "mint": mint,
                        "owner": OWNER,
                        "tokenAmount": {
                            "amount": amount,
                            "decimals": decimals,
                            "uiAmountString": ui_amount,
                        },
                    }
                }
            }
        },
    }


@pytest.mark.asyncio
async def test_get_token_accounts_merges_token_and_token_2022():
    filters = []
    by_program = {
        TOKEN_PROGRAM_ID: [
            token_account(
                "TokenAccount1111111111111111111111111111111",
                "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
                "2500000",
                6,
                "2.5",
            )
        ],
        TOKEN_2022_PROGRAM_ID: [
            token_account(
                "TokenAccount2222222222222222222222222222222",
                "2b1kV6DkPAnxd5ixfnxCpjxmKwqjjaYmCZfHsFu24GXo",
                "1000000",
                6,
                "1",
            )
        ],
    }

    def handler(request):
        body = json.loads(request.content)
        program_id = body["params"][1]["programId"]
        filters.append(program_id)
        return rpc_result(request, {"context": {"slot": 1}, "value": by_program[program_id]})

    rpc = make_provider(handler)
    accounts = await rpc.get_token_accounts(OWNER)

    assert filters == [TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID]
    assert accounts == [
        {
            "address": "TokenAccount1111111111111111111111111111111",
            "mint": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
            "owner": OWNER,
            "amount": 2_500_000,
            "decimals": 6,
            "ui_amount": "2.5",
        },
        {
            "address": "TokenAccount2222222222222222222222222222222",
            "mint": "2b1kV6DkPAnxd5ixfnxCpjxmKwqjjaYmCZfHsFu24GXo",
            "owner": OWNER,
            "amount": 1_000_000,
            "decimals": 6,
            "ui_amount": "1",
        },
    ]
    await rpc.close()


@pytest.mark.asyncio
async def test_get_token_accounts_with_mint_filter_queries_once():
    filters = []

    def handler(request):
        filters.append(json.loads(request.content)["params"][1])
        return rpc_result(request, {"context": {"slot": 1}, "value": []})

    rpc = make_provider(handler)
    assert await rpc.get_token_accounts(OWNER, mint="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v") == []
    assert filters == [{"mint": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"}]
    await rpc.close()
