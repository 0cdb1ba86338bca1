# src/wallet_gate/models/gate.py
"""Gate policy row and per-wallet hysteresis memory."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from wallet_gate.db.session import Base
from wallet_gate.db.time import utcnow

GATE_CONFIG_ID = 1


class GateConfig(Base):
    """Singleton gate policy edited by administrators.

    At most one of `min_amount` / `min_usd` is set; the update path enforces this.
    """

    __tablename__ = "gate_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=GATE_CONFIG_ID)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mint_address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    min_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    min_usd: Mapped[float | None] = mapped_column(Float, nullable=True)
    tolerance_percent: Mapped[float] = mapped_column(Float, nullable=False, default=2.0)
    price_mode: Mapped[str] = mapped_column(Text, nullable=False, default="coin_id")
    price_coin_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_platform: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_token_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class GateState(Base):
    """Last USD-mode outcome per wallet, used to band the next evaluation."""

    __tablename__ = "gate_state"

    pubkey: Mapped[str] = mapped_column(Text, primary_key=True)
    last_status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_value_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
