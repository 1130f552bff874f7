"""Pydantic models for the HTTP API.

Request bodies use camelCase aliases (``fromToken``, ``privateKey``) like the
trading bot's original JSON API; snake_case names are accepted too.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, model_validator

from swap_router.models.types import PubkeyStr


class QuoteRequest(BaseModel):
    """Simulate-only swap request in human units."""

    from_token: str = Field(alias="fromToken", min_length=1, description="Symbol to sell")
    to_token: str = Field(alias="toToken", min_length=1, description="Symbol to buy")
    amount: Decimal = Field(gt=0, description="Amount of from_token in human units")
    slippage: Decimal = Field(
        default=Decimal("0.5"), ge=0, le=50, description="Slippage tolerance in percent"
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_distinct_tokens(self) -> "QuoteRequest":
        if self.from_token.upper() == self.to_token.upper():
            raise ValueError("Cannot swap a token for itself")
        return self


class SwapApiRequest(QuoteRequest):
    """Executing swap request; the signer is given as a base58 secret key."""

    private_key: str = Field(alias="privateKey", min_length=1, repr=False)


class BalanceRequest(BaseModel):
    """Balance lookup for one token.

    Either ``privateKey`` (the owner is its public key) or ``owner`` must be
    given.
    """

    token: str = Field(min_length=1)
    private_key: str | None = Field(default=None, alias="privateKey", repr=False)
    owner: PubkeyStr | None = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_owner_source(self) -> "BalanceRequest":
        if self.private_key is None and self.owner is None:
            raise ValueError("Either privateKey or owner is required")
        return self


class WalletInfoRequest(BaseModel):
    """Wallet overview: native balance plus token balances."""

    private_key: str | None = Field(default=None, alias="privateKey", repr=False)
    owner: PubkeyStr | None = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_owner_source(self) -> "WalletInfoRequest":
        if self.private_key is None and self.owner is None:
            raise ValueError("Either privateKey or owner is required")
        return self


class WrapRequest(BaseModel):
    """Wrap native balance into the wrapped-native token account."""

    private_key: str = Field(alias="privateKey", min_length=1, repr=False)
    amount: Decimal = Field(gt=0, description="Native amount in human units")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Failure envelope shared by every endpoint."""

    success: bool = False
    error: str
    reason: str
    details: dict[str, Any] | None = None
