# src/wallet_gate/models/__init__.py
"""SQLAlchemy models for the wallet gate service."""

from .auth_nonce import AuthNonce
from .blacklist import WalletBlacklist
from .gate import GATE_CONFIG_ID, GateConfig, GateState

__all__ = [
    "AuthNonce",
    "GATE_CONFIG_ID", "GateConfig", "GateState",
    "WalletBlacklist",
]
