"""Access-gate decision engine.

The gate turns a wallet's live token balance (and, in USD mode, the token's live
USD price) into an allow/deny verdict. USD mode applies hysteresis: a wallet that
currently passes keeps passing down to ``min_usd * (1 - tolerance)``, while a
failing wallet must reach ``min_usd * (1 + tolerance)`` before it passes. The
last outcome per wallet is kept in ``gate_state``.

Oracle failures are raised as :class:`~wallet_gate.services.errors.OracleError`
and never turned into a decision.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Protocol

from sqlalchemy.orm import Session

from wallet_gate.db.time import utcnow
from wallet_gate.db.upsert import upsert
from wallet_gate.models import GateConfig, GateState
from wallet_gate.services.errors import PriceUnavailable
from wallet_gate.services.pricing import DEFAULT_PLATFORM, PriceSource

logger = logging.getLogger(__name__)

REASON_OK = "OK"
REASON_MINT_NOT_CONFIGURED = "Gate mint not configured"
REASON_THRESHOLDS_NOT_CONFIGURED = "Gate thresholds not configured"
REASON_INSUFFICIENT_AMOUNT = "Insufficient token amount"
REASON_INSUFFICIENT_USD = "Insufficient USD value"


class BalanceOracle(Protocol):
    async def get_token_amount(self, owner: str, mint: str) -> float: ...


class PriceOracle(Protocol):
    async def get_usd_price(self, source: PriceSource) -> float: ...


# --- Policy ------------------------------------------------------------------------


@dataclass(frozen=True)
class Disabled:
    """Gate switched off: every wallet passes."""


@dataclass(frozen=True)
class Unconfigured:
    """Gate enabled without any threshold."""


@dataclass(frozen=True)
class AmountThreshold:
    """Pass when the wallet holds at least `min_amount` tokens."""

    min_amount: float


@dataclass(frozen=True)
class UsdThreshold:
    """Pass when the holding is worth at least `min_usd`, with hysteresis banding."""

    min_usd: float
    tolerance: float
    price_source: PriceSource

    @property
    def unlock_threshold(self) -> float:
        return self.min_usd * (1 + self.tolerance)

    @property
    def lock_threshold(self) -> float:
        return self.min_usd * (1 - self.tolerance)

    def passes(self, usd_value: float, *, was_passing: bool) -> bool:
        """Apply the band matching the wallet's previous outcome."""
        if was_passing:
            return usd_value >= self.lock_threshold
        return usd_value >= self.unlock_threshold


GateMode = Disabled | Unconfigured | AmountThreshold | UsdThreshold


@dataclass(frozen=True)
class GatePolicy:
    """Typed view of the gate configuration row."""

    mint_address: str
    mode: GateMode

    @classmethod
    def from_config(cls, config: GateConfig | None) -> GatePolicy:
        if config is None or not config.enabled:
            return cls(mint_address=(config.mint_address if config else "") or "", mode=Disabled())

        mint = (config.mint_address or "").strip()
        mode: GateMode
        if config.min_amount is not None:
            mode = AmountThreshold(min_amount=float(config.min_amount))
        elif config.min_usd is not None:
            mode = UsdThreshold(
                min_usd=float(config.min_usd),
                tolerance=float(config.tolerance_percent or 0) / 100,
                price_source=price_source_for(config),
            )
        else:
            mode = Unconfigured()
        return cls(mint_address=mint, mode=mode)


def price_source_for(config: GateConfig) -> PriceSource:
    """Build the price lookup for `config`, defaulting the contract to the gate mint."""
    mode = "onchain" if config.price_mode == "onchain" else "coin_id"
    return PriceSource(
        mode=mode,
        coin_id=config.price_coin_id,
        platform=config.price_platform or DEFAULT_PLATFORM,
        token_address=(config.price_token_address or config.mint_address or "").strip(),
    )


# --- Decisions ---------------------------------------------------------------------


@dataclass(frozen=True)
class Allowed:
    reason: str = REASON_OK
    balance: float = 0.0
    usd_value: float | None = None
    price_usd: float | None = None
    allowed: bool = field(default=True, init=False)

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class Denied:
    reason: str
    balance: float | None = None
    usd_value: float | None = None
    price_usd: float | None = None
    allowed: bool = field(default=False, init=False)

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


Decision = Allowed | Denied


# --- Engine ------------------------------------------------------------------------


def get_gate_config(db: Session) -> GateConfig | None:
    """Return the singleton gate configuration row, if any."""
    return db.query(GateConfig).order_by(GateConfig.id).first()


class GateEngine:
    """Evaluates the configured gate for one wallet per call."""

    def __init__(
        self,
        db: Session,
        balance_oracle: BalanceOracle,
        price_oracle: PriceOracle,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._db = db
        self._balances = balance_oracle
        self._prices = price_oracle
        self._clock = clock

    async def decide(self, pubkey: str) -> Decision:
        """Return the gate verdict for `pubkey`.

        Raises:
            OracleError: If the balance or price could not be obtained. No gate
                state is written in that case.
        """
        policy = GatePolicy.from_config(get_gate_config(self._db))
        mode = policy.mode

        if isinstance(mode, Disabled):
            return Allowed(balance=0.0)
        if not policy.mint_address:
            return Denied(reason=REASON_MINT_NOT_CONFIGURED)
        if isinstance(mode, Unconfigured):
            return Denied(reason=REASON_THRESHOLDS_NOT_CONFIGURED)

        balance = await self._balances.get_token_amount(pubkey, policy.mint_address)

        if isinstance(mode, AmountThreshold):
            if balance >= mode.min_amount:
                return Allowed(balance=balance)
            return Denied(reason=REASON_INSUFFICIENT_AMOUNT, balance=balance)

        return await self._decide_usd(pubkey, mode, balance)

    async def _decide_usd(self, pubkey: str, mode: UsdThreshold, balance: float) -> Decision:
        price_usd = await self._prices.get_usd_price(mode.price_source)
        usd_value = balance * price_usd

        state = self._db.get(GateState, pubkey)
        was_passing = bool(state.last_status) if state is not None else False
        allowed = mode.passes(usd_value, was_passing=was_passing)

        # Last write wins between concurrent evaluations of the same wallet.
        upsert(
            self._db,
            GateState,
            {
                "pubkey": pubkey,
                "last_status": allowed,
                "last_value_usd": usd_value,
                "updated_at": self._clock(),
            },
            key=("pubkey",),
        )
        self._db.commit()

        if allowed != was_passing:
            logger.info(
                "Gate status for %s changed to %s (usd_value=%.4f)",
                pubkey,
                "pass" if allowed else "fail",
                usd_value,
            )

        if allowed:
            return Allowed(balance=balance, usd_value=usd_value, price_usd=price_usd)
        return Denied(
            reason=REASON_INSUFFICIENT_USD,
            balance=balance,
            usd_value=usd_value,
            price_usd=price_usd,
        )


# --- Preview -----------------------------------------------------------------------


@dataclass(frozen=True)
class GatePreview:
    enabled: bool
    mode: str
    mint_address: str
    min_amount: float | None
    min_usd: float | None
    tolerance_percent: float
    price_usd: float | None
    required_usd: float | None
    required_tokens: float | None

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


async def build_gate_preview(config: GateConfig | None, price_oracle: PriceOracle) -> GatePreview:
    """Summarise the gate requirements for display.

    The price is best effort: if it cannot be fetched the derived figures are None.
    """
    if config is None:
        return GatePreview(
            enabled=False,
            mode="none",
            mint_address="",
            min_amount=None,
            min_usd=None,
            tolerance_percent=2.0,
            price_usd=None,
            required_usd=None,
            required_tokens=None,
        )

    if config.min_amount is not None:
        mode = "amount"
    elif config.min_usd is not None:
        mode = "usd"
    else:
        mode = "none"

    price_usd: float | None = None
    if mode != "none":
        try:
            price_usd = await price_oracle.get_usd_price(price_source_for(config))
        except PriceUnavailable as exc:
            logger.info("Gate preview without price: %s", exc)

    required_usd: float | None = None
    required_tokens: float | None = None
    if mode == "amount":
        required_tokens = float(config.min_amount)  # type: ignore[arg-type]
        if price_usd is not None:
            required_usd = required_tokens * price_usd
    elif mode == "usd":
        required_usd = float(config.min_usd)  # type: ignore[arg-type]
        if price_usd is not None:
            required_tokens = required_usd / price_usd

    return GatePreview(
        enabled=bool(config.enabled),
        mode=mode,
        mint_address=config.mint_address or "",
        min_amount=config.min_amount,
        min_usd=config.min_usd,
        tolerance_percent=float(config.tolerance_percent),
        price_usd=price_usd,
        required_usd=required_usd,
        required_tokens=required_tokens,
    )
