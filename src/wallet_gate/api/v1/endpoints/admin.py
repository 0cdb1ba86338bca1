# src/wallet_gate/api/v1/endpoints/admin.py
"""Administrative endpoints for the gate policy and the wallet blacklist."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, HTTPException, status
from jose import jwt

from wallet_gate.api.v1.dependencies import ADMIN_ROLE, AdminDep, PriceOracleDep, SessionDep
from wallet_gate.core.security import is_wallet_address
from wallet_gate.core.settings import settings
from wallet_gate.schemas.gate import (
    BlacklistCreate,
    BlacklistEntryResponse,
    GateConfigResponse,
    GateConfigUpdate,
    GatePreviewResponse,
)
from wallet_gate.services.blacklist import add_to_blacklist, list_blacklist, remove_from_blacklist
from wallet_gate.services.errors import ConfigConflict
from wallet_gate.services.gate import build_gate_preview
from wallet_gate.services.gate_config import ensure_gate_config, update_gate_config

router = APIRouter(prefix="/admin", tags=["admin"])


def create_admin_token(subject: str) -> str:
    """Create an admin JWT signed with the admin secret."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.admin_token_expire_minutes)
    to_encode: dict[str, object] = {"sub": subject, "role": ADMIN_ROLE, "exp": expire}
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.admin_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


@router.get("/gate-config", response_model=GateConfigResponse)
async def read_gate_config(db: SessionDep, _admin: AdminDep) -> GateConfigResponse:
    """Return the stored gate configuration."""
    return GateConfigResponse.model_validate(ensure_gate_config(db))


@router.put("/gate-config", response_model=GateConfigResponse)
async def write_gate_config(
    payload: GateConfigUpdate,
    db: SessionDep,
    _admin: AdminDep,
) -> GateConfigResponse:
    """Replace the gate configuration.

    Setting both `min_amount` and `min_usd` is rejected and the stored
    configuration stays as it was.
    """
    try:
        config = update_gate_config(db, payload)
    except ConfigConflict as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(err),
        ) from err
    return GateConfigResponse.model_validate(config)


@router.get("/gate-preview", response_model=GatePreviewResponse)
async def admin_gate_preview(
    db: SessionDep,
    price_oracle: PriceOracleDep,
    _admin: AdminDep,
) -> GatePreviewResponse:
    """Preview the gate requirements, initialising the configuration if needed."""
    preview = await build_gate_preview(ensure_gate_config(db), price_oracle)
    return GatePreviewResponse(**preview.as_dict())


@router.get("/blacklist", response_model=list[BlacklistEntryResponse])
async def read_blacklist(db: SessionDep, _admin: AdminDep) -> list[BlacklistEntryResponse]:
    return [BlacklistEntryResponse.model_validate(entry) for entry in list_blacklist(db)]


@router.post(
    "/blacklist",
    response_model=BlacklistEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_blacklist_entry(
    payload: BlacklistCreate,
    db: SessionDep,
    _admin: AdminDep,
) -> BlacklistEntryResponse:
    pubkey = payload.pubkey.strip()
    if not is_wallet_address(pubkey):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid wallet address",
        )
    entry = add_to_blacklist(db, pubkey, payload.reason)
    return BlacklistEntryResponse.model_validate(entry)


@router.delete("/blacklist/{pubkey}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blacklist_entry(pubkey: str, db: SessionDep, _admin: AdminDep) -> None:
    if not remove_from_blacklist(db, pubkey):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blacklist entry not found",
        )
