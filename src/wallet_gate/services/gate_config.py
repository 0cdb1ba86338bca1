"""Administrative reads and writes of the singleton gate configuration."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from wallet_gate.models import GATE_CONFIG_ID, GateConfig
from wallet_gate.schemas.gate import GateConfigUpdate
from wallet_gate.services.errors import ConfigConflict
from wallet_gate.services.gate import get_gate_config

logger = logging.getLogger(__name__)


def ensure_gate_config(db: Session) -> GateConfig:
    """Return the gate configuration, creating the default (disabled) row if absent."""
    config = get_gate_config(db)
    if config is None:
        config = GateConfig(id=GATE_CONFIG_ID, enabled=False, mint_address="", tolerance_percent=2.0)
        db.add(config)
        db.commit()
        db.refresh(config)
    return config


def validate_gate_update(update: GateConfigUpdate) -> None:
    """Enforce that exactly one threshold is active whenever the gate is enabled.

    Raises:
        ConfigConflict: If both thresholds are set, or the gate is enabled with neither.
    """
    if update.min_amount is not None and update.min_usd is not None:
        raise ConfigConflict("Set either min_amount or min_usd, not both")
    if update.enabled and update.min_amount is None and update.min_usd is None:
        raise ConfigConflict("An enabled gate needs min_amount or min_usd")


def update_gate_config(db: Session, update: GateConfigUpdate) -> GateConfig:
    """Replace the gate configuration with `update`.

    Validation happens before any write, so a rejected update leaves the stored
    configuration unchanged.
    """
    validate_gate_update(update)

    config = ensure_gate_config(db)
    config.enabled = update.enabled
    config.mint_address = update.mint_address
    config.min_amount = update.min_amount
    config.min_usd = update.min_usd
    config.tolerance_percent = update.tolerance_percent
    config.price_mode = update.price_mode
    config.price_coin_id = update.price_coin_id or None
    config.price_platform = update.price_platform or None
    config.price_token_address = update.price_token_address or None
    db.commit()
    db.refresh(config)

    logger.info(
        "Gate config updated: enabled=%s mode=%s mint=%s",
        config.enabled,
        "amount" if config.min_amount is not None else "usd" if config.min_usd is not None else "none",
        config.mint_address or "-",
    )
    return config
