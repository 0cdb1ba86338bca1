"""Gate configuration, decision and preview schemas."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GateDecisionResponse(BaseModel):
    """Outcome of one gate evaluation."""

    allowed: bool
    reason: str
    balance: float | None = None
    usd_value: float | None = None
    price_usd: float | None = None


class GateConfigUpdate(BaseModel):
    """Full replacement of the gate configuration.

    Blank strings for the thresholds are treated as "not set".
    """

    enabled: bool = False
    mint_address: str = ""
    min_amount: float | None = None
    min_usd: float | None = None
    tolerance_percent: float = Field(2.0, ge=0, lt=100)
    price_mode: Literal["coin_id", "onchain"] = "coin_id"
    price_coin_id: str | None = None
    price_platform: str | None = None
    price_token_address: str | None = None

    @field_validator("min_amount", "min_usd", mode="before")
    @classmethod
    def blank_threshold_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("min_amount", "min_usd", "tolerance_percent")
    @classmethod
    def must_be_finite(cls, v: float | None) -> float | None:
        if v is not None and not math.isfinite(v):
            raise ValueError("Threshold values must be finite numbers")
        return v

    @field_validator("mint_address", "price_coin_id", "price_platform", "price_token_address")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip()


class GateConfigResponse(BaseModel):
    """Current gate configuration as stored."""

    enabled: bool
    mint_address: str
    min_amount: float | None
    min_usd: float | None
    tolerance_percent: float
    price_mode: str
    price_coin_id: str | None
    price_platform: str | None
    price_token_address: str | None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class GatePreviewResponse(BaseModel):
    """Public summary of what a wallet needs to hold to pass the gate."""

    enabled: bool
    mode: Literal["amount", "usd", "none"]
    mint_address: str
    min_amount: float | None
    min_usd: float | None
    tolerance_percent: float
    price_usd: float | None
    required_usd: float | None
    required_tokens: float | None


class BlacklistCreate(BaseModel):
    """Request to bar a wallet from using its session."""

    pubkey: str = Field(..., min_length=1, description="Base58-encoded wallet public key")
    reason: str = Field("", max_length=500, description="Reason shown to the wallet")


class BlacklistEntryResponse(BaseModel):
    """Stored blacklist entry."""

    pubkey: str
    reason: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
