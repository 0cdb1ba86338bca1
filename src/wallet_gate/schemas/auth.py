"""Wallet sign-in Pydantic schemas."""

from pydantic import BaseModel, Field

from .gate import GateDecisionResponse


class NonceResponse(BaseModel):
    """Challenge returned to a wallet before sign-in."""

    nonce: str = Field(..., description="Single-use challenge value")
    message: str = Field(..., description="Message the wallet must sign; embeds the nonce")


class VerifyRequest(BaseModel):
    """Signed challenge submitted by a wallet.

    Fields are optional at the schema level so that missing values are reported
    as a plain 400 by the endpoint.
    """

    pubkey: str | None = Field(None, description="Base58-encoded wallet public key")
    signature: str | None = Field(None, description="Base58-encoded Ed25519 signature")
    message: str | None = Field(None, description="Exact message that was signed")


class VerifyResponse(BaseModel):
    """Successful sign-in: session token plus the gate decision."""

    token: str = Field(..., description="JWT session token for the wallet")
    details: GateDecisionResponse


class MeResponse(BaseModel):
    """Identity carried by a wallet session token."""

    pubkey: str = Field(..., description="Wallet public key from the session token")
