# src/wallet_gate/api/v1/endpoints/gate.py
"""Public, read-only view of the gate requirements."""

from __future__ import annotations

from fastapi import APIRouter

from wallet_gate.api.v1.dependencies import PriceOracleDep, SessionDep
from wallet_gate.schemas.gate import GatePreviewResponse
from wallet_gate.services.gate import build_gate_preview, get_gate_config

router = APIRouter(tags=["gate"])


@router.get(
    "/gate-preview",
    summary="Show what a wallet must hold to pass the gate",
    response_model=GatePreviewResponse,
)
async def gate_preview(db: SessionDep, price_oracle: PriceOracleDep) -> GatePreviewResponse:
    """Return the configured thresholds with best-effort USD/token equivalents.

    No wallet is evaluated. If the price cannot be fetched the derived figures are null.
    """
    preview = await build_gate_preview(get_gate_config(db), price_oracle)
    return GatePreviewResponse(**preview.as_dict())
