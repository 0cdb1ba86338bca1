# src/wallet_gate/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import MeResponse, NonceResponse, VerifyRequest, VerifyResponse
from .gate import (
    BlacklistCreate,
    BlacklistEntryResponse,
    GateConfigResponse,
    GateConfigUpdate,
    GateDecisionResponse,
    GatePreviewResponse,
)

__all__ = [
    "MeResponse", "NonceResponse", "VerifyRequest", "VerifyResponse",
    "BlacklistCreate", "BlacklistEntryResponse",
    "GateConfigResponse", "GateConfigUpdate", "GateDecisionResponse", "GatePreviewResponse",
]
