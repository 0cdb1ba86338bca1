# src/wallet_gate/api/v1/endpoints/auth.py
"""Wallet sign-in endpoints: challenge issuance and signed verification."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import JSONResponse
from jose import jwt

from wallet_gate.api.v1.dependencies import CurrentWalletDep, GateEngineDep, NonceStoreDep
from wallet_gate.core.security import verify_signature
from wallet_gate.core.settings import settings
from wallet_gate.schemas.auth import MeResponse, NonceResponse, VerifyRequest, VerifyResponse
from wallet_gate.schemas.gate import GateDecisionResponse
from wallet_gate.services.errors import OracleError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def create_access_token(pubkey: str) -> str:
    """Create a short-lived JWT session token for a verified wallet."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode: dict[str, object] = {"sub": pubkey, "exp": expire}
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


@router.get(
    "/nonce",
    summary="Issue a sign-in challenge for a wallet",
    response_model=NonceResponse,
)
async def issue_nonce(
    nonce_store: NonceStoreDep,
    pubkey: str = Query("", description="Base58-encoded wallet public key"),
) -> NonceResponse:
    """Create a fresh single-use nonce and the message the wallet must sign."""
    pubkey = pubkey.strip()
    if not pubkey:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing pubkey",
        )

    challenge = nonce_store.issue(pubkey)
    return NonceResponse(nonce=challenge.nonce, message=challenge.message)


@router.post(
    "/verify",
    summary="Verify a signed challenge and evaluate the access gate",
    response_model=VerifyResponse,
    responses={
        status.HTTP_403_FORBIDDEN: {"description": "Signature valid but the gate denies access"},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Balance or price lookup failed"},
    },
)
async def verify_wallet(
    payload: VerifyRequest,
    nonce_store: NonceStoreDep,
    gate_engine: GateEngineDep,
) -> VerifyResponse | JSONResponse:
    """Authenticate a wallet by its signature and issue a session if the gate allows."""
    pubkey = (payload.pubkey or "").strip()
    if not pubkey or not payload.signature or not payload.message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing fields",
        )

    nonce = nonce_store.consume(pubkey)
    if nonce is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Nonce expired or not found",
        )

    if nonce not in payload.message:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Message does not include valid nonce",
        )

    if not verify_signature(pubkey, payload.signature, payload.message):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid signature",
        )

    try:
        decision = await gate_engine.decide(pubkey)
    except OracleError as err:
        logger.warning("Gate evaluation for %s aborted: %s", pubkey, err)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Gate check unavailable: {err}",
        ) from err

    details = GateDecisionResponse(**decision.as_dict())
    if not decision.allowed:
        logger.info("Gate denied %s: %s", pubkey, decision.reason)
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={
                "detail": decision.reason,
                "reason": decision.reason,
                "details": details.model_dump(),
            },
        )

    logger.info("Gate allowed %s", pubkey)
    return VerifyResponse(token=create_access_token(pubkey), details=details)


@router.get("/me", summary="Return the wallet behind a session token", response_model=MeResponse)
async def read_current_wallet(pubkey: CurrentWalletDep) -> MeResponse:
    return MeResponse(pubkey=pubkey)
