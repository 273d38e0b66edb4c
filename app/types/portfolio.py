from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TokenBalance(CamelModel):
    mint: str = Field(description="Token mint address (wrapped SOL mint for the native balance)")
    owner: str = Field(description="Wallet address holding the balance")
    symbol: Optional[str] = Field(default=None, description="Token symbol when the mint is known")
    account: Optional[str] = Field(default=None, description="Token account address (None for native SOL)")
    amount: str = Field(description="Raw balance in base units")
    decimals: int = Field(description="Token decimal places")
    ui_amount: Decimal = Field(description="Human readable balance")
    is_native: bool = Field(default=False, description="Whether this is the native SOL balance")
