# src/wallet_gate/models/auth_nonce.py
"""Sign-in challenge nonces awaiting a wallet signature."""

from datetime import datetime

from sqlalchemy import DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from wallet_gate.db.session import Base


class AuthNonce(Base):
    """The single live challenge nonce issued to a wallet."""

    __tablename__ = "auth_nonce"

    # One row per wallet; reissuing a challenge overwrites the previous nonce.
    pubkey: Mapped[str] = mapped_column(Text, primary_key=True)
    nonce: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
