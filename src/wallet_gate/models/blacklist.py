# src/wallet_gate/models/blacklist.py
"""Wallets barred from using an issued session."""

from datetime import datetime

from sqlalchemy import DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from wallet_gate.db.session import Base
from wallet_gate.db.time import utcnow


class WalletBlacklist(Base):
    """Blacklist entry keyed by wallet public key."""

    __tablename__ = "wallet_blacklist"

    pubkey: Mapped[str] = mapped_column(Text, primary_key=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
