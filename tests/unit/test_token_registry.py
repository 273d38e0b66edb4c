from decimal import Decimal

import pytest

from app.core.swap.constants import (
    JUP_MINT,
    NATIVE_SOL_MINT,
    TOKEN_REGISTRY,
    USDC_MINT,
    resolve_token,
    symbol_for_mint,
    to_base_units,
    to_ui_amount,
)
from app.core.swap.errors import UnknownTokenError


def test_resolve_by_symbol_is_case_insensitive():
    assert resolve_token("sol").mint == NATIVE_SOL_MINT
    assert resolve_token("Usdc").mint == USDC_MINT
    assert resolve_token("JUP").mint == JUP_MINT


def test_resolve_by_mint():
    token = resolve_token(USDC_MINT)
    assert token.symbol == "USDC"
    assert token.decimals == 6


def test_only_native_sol_carries_a_fee_reserve():
    assert TOKEN_REGISTRY["SOL"].is_native is True
    assert TOKEN_REGISTRY["SOL"].fee_reserve > 0
    assert TOKEN_REGISTRY["USDC"].fee_reserve == 0


def test_unknown_valid_mint_resolves_without_decimals():
    mint = "8hE8hihVk1DJyQjk96H41QJCUscqbZU9PmSmpXYCXdBL"
    token = resolve_token(mint)
    assert token.mint == mint
    assert token.decimals == 0
    assert symbol_for_mint(mint) is None


@pytest.mark.parametrize("identifier", [None, "", "DOGECOIN-ON-MARS"])
def test_unknown_tokens_raise(identifier):
    with pytest.raises(UnknownTokenError):
        resolve_token(identifier)


def test_to_base_units_rounds_down():
    assert to_base_units("0.002", 9) == 2_000_000
    assert to_base_units("1.5", 6) == 1_500_000
    assert to_base_units("0.0000000019", 9) == 1


@pytest.mark.parametrize("value", ["abc", "-1", "NaN"])
def test_to_base_units_rejects_invalid(value):
    with pytest.raises(ValueError):
        to_base_units(value, 9)


def test_to_ui_amount():
    assert to_ui_amount(1_500_000_000, 9) == Decimal("1.5")
    assert to_ui_amount("2500000", 6) == Decimal("2.5")
