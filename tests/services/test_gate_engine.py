"""Tests for the gate decision engine."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import insert, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.dml import Insert

from tests.conftest import TEST_MINT, configure_gate
from wallet_gate.models import GateState
from wallet_gate.services.errors import BalanceUnavailable, PriceUnavailable
from wallet_gate.services.gate import (
    REASON_INSUFFICIENT_AMOUNT,
    REASON_INSUFFICIENT_USD,
    REASON_MINT_NOT_CONFIGURED,
    REASON_OK,
    REASON_THRESHOLDS_NOT_CONFIGURED,
    GateEngine,
    GatePolicy,
    UsdThreshold,
    price_source_for,
)
from wallet_gate.services.pricing import PriceSource

WALLET = "Wallet1111111111111111111111111111111111111"


def _engine(db: Session, balance_oracle: AsyncMock, price_oracle: AsyncMock) -> GateEngine:
    return GateEngine(db, balance_oracle, price_oracle)


def _set_state(db: Session, pubkey: str, passing: bool) -> None:
    db.add(GateState(pubkey=pubkey, last_status=passing, last_value_usd=0.0))
    db.commit()


@pytest.mark.asyncio
async def test_no_config_allows_without_lookups(db_session, balance_oracle, price_oracle) -> None:
    decision = await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    assert decision.allowed is True
    assert decision.reason == REASON_OK
    assert decision.balance == 0
    balance_oracle.get_token_amount.assert_not_awaited()
    price_oracle.get_usd_price.assert_not_awaited()


@pytest.mark.asyncio
async def test_disabled_gate_allows(db_session, balance_oracle, price_oracle) -> None:
    configure_gate(db_session, enabled=False, min_amount=1_000_000)

    decision = await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    assert decision.allowed is True
    balance_oracle.get_token_amount.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_mint_denies(db_session, balance_oracle, price_oracle) -> None:
    configure_gate(db_session, mint_address="  ", min_amount=1)

    decision = await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    assert decision.allowed is False
    assert decision.reason == REASON_MINT_NOT_CONFIGURED
    balance_oracle.get_token_amount.assert_not_awaited()


@pytest.mark.asyncio
async def test_enabled_without_thresholds_denies(db_session, balance_oracle, price_oracle) -> None:
    configure_gate(db_session, min_amount=None, min_usd=None)

    decision = await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    assert decision.allowed is False
    assert decision.reason == REASON_THRESHOLDS_NOT_CONFIGURED
    balance_oracle.get_token_amount.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("balance", "allowed"),
    [(10.0, True), (10.5, True), (9.999, False), (0.0, False)],
)
async def test_amount_threshold(db_session, balance_oracle, price_oracle, balance, allowed) -> None:
    configure_gate(db_session, min_amount=10)
    balance_oracle.get_token_amount.return_value = balance

    decision = await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    assert decision.allowed is allowed
    assert decision.balance == balance
    if not allowed:
        assert decision.reason == REASON_INSUFFICIENT_AMOUNT
    balance_oracle.get_token_amount.assert_awaited_once_with(WALLET, TEST_MINT)
    price_oracle.get_usd_price.assert_not_awaited()
    assert db_session.get(GateState, WALLET) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("previous", "usd_value", "allowed"),
    [
        (None, 101.0, False),
        (None, 102.5, True),
        (False, 101.0, False),
        (False, 102.5, True),
        (True, 99.0, True),
        (True, 98.5, True),
        (True, 97.0, False),
    ],
)
async def test_usd_threshold_hysteresis(
    db_session, balance_oracle, price_oracle, previous, usd_value, allowed
) -> None:
    configure_gate(db_session, min_usd=100, tolerance_percent=2)
    if previous is not None:
        _set_state(db_session, WALLET, previous)
    balance_oracle.get_token_amount.return_value = usd_value
    price_oracle.get_usd_price.return_value = 1.0

    decision = await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    assert decision.allowed is allowed
    assert decision.usd_value == pytest.approx(usd_value)
    assert decision.price_usd == 1.0
    if not allowed:
        assert decision.reason == REASON_INSUFFICIENT_USD

    state = db_session.get(GateState, WALLET)
    assert state is not None
    assert state.last_status is allowed
    assert state.last_value_usd == pytest.approx(usd_value)


@pytest.mark.asyncio
async def test_usd_value_is_balance_times_price(db_session, balance_oracle, price_oracle) -> None:
    configure_gate(db_session, min_usd=50, tolerance_percent=0)
    balance_oracle.get_token_amount.return_value = 4.0
    price_oracle.get_usd_price.return_value = 12.5

    decision = await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    assert decision.allowed is True
    assert decision.usd_value == pytest.approx(50.0)
    assert decision.balance == 4.0


@pytest.mark.asyncio
async def test_state_follows_successive_evaluations(db_session, balance_oracle, price_oracle) -> None:
    configure_gate(db_session, min_usd=100, tolerance_percent=2)
    engine = _engine(db_session, balance_oracle, price_oracle)

    # Climb over the unlock line, then dip inside the band and below it.
    for usd_value, expected in [(101.0, False), (103.0, True), (99.0, True), (97.5, False), (101.0, False)]:
        balance_oracle.get_token_amount.return_value = usd_value
        decision = await engine.decide(WALLET)
        assert decision.allowed is expected, usd_value

    assert db_session.query(GateState).count() == 1


@pytest.mark.asyncio
async def test_first_state_write_overwrites_concurrent_insert(
    db_session, balance_oracle, price_oracle, mocker
) -> None:
    configure_gate(db_session, min_usd=100, tolerance_percent=2)
    balance_oracle.get_token_amount.return_value = 150.0
    real_execute = db_session.execute
    raced = []

    def execute(statement, *args, **kwargs):
        # Another worker records its first verdict for the wallet just before ours.
        if isinstance(statement, Insert) and statement.table is GateState.__table__ and not raced:
            raced.append(True)
            real_execute(
                insert(GateState).values(pubkey=WALLET, last_status=False, last_value_usd=1.0)
            )
        return real_execute(statement, *args, **kwargs)

    mocker.patch.object(db_session, "execute", side_effect=execute)

    decision = await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    assert raced
    assert decision.allowed is True
    row = real_execute(
        select(GateState.last_status, GateState.last_value_usd).where(GateState.pubkey == WALLET)
    ).one()
    assert row.last_status is True
    assert row.last_value_usd == pytest.approx(150.0)


@pytest.mark.asyncio
async def test_state_is_per_wallet(db_session, balance_oracle, price_oracle) -> None:
    configure_gate(db_session, min_usd=100, tolerance_percent=2)
    _set_state(db_session, "PassingWallet", True)
    balance_oracle.get_token_amount.return_value = 99.0
    engine = _engine(db_session, balance_oracle, price_oracle)

    assert (await engine.decide("PassingWallet")).allowed is True
    assert (await engine.decide("FreshWallet")).allowed is False


@pytest.mark.asyncio
async def test_balance_failure_propagates(db_session, balance_oracle, price_oracle) -> None:
    configure_gate(db_session, min_usd=100)
    balance_oracle.get_token_amount.side_effect = BalanceUnavailable("rpc down")

    with pytest.raises(BalanceUnavailable):
        await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    price_oracle.get_usd_price.assert_not_awaited()
    assert db_session.get(GateState, WALLET) is None


@pytest.mark.asyncio
async def test_price_failure_leaves_state_untouched(db_session, balance_oracle, price_oracle) -> None:
    configure_gate(db_session, min_usd=100)
    _set_state(db_session, WALLET, True)
    balance_oracle.get_token_amount.return_value = 5.0
    price_oracle.get_usd_price.side_effect = PriceUnavailable("rate limited")

    with pytest.raises(PriceUnavailable):
        await _engine(db_session, balance_oracle, price_oracle).decide(WALLET)

    state = db_session.get(GateState, WALLET)
    assert state.last_status is True
    assert state.last_value_usd == 0.0


def test_price_source_defaults_to_gate_mint(db_session) -> None:
    config = configure_gate(
        db_session,
        min_usd=10,
        price_mode="onchain",
        price_platform=None,
        price_token_address=None,
    )

    assert price_source_for(config) == PriceSource(
        mode="onchain",
        coin_id="gate-token",
        platform="solana",
        token_address=TEST_MINT,
    )


def test_policy_bands(db_session) -> None:
    config = configure_gate(db_session, min_usd=200, tolerance_percent=5)
    mode = GatePolicy.from_config(config).mode

    assert isinstance(mode, UsdThreshold)
    assert mode.unlock_threshold == pytest.approx(210)
    assert mode.lock_threshold == pytest.approx(190)


def test_amount_takes_precedence_over_usd(db_session) -> None:
    config = configure_gate(db_session, min_amount=5, min_usd=10)

    assert GatePolicy.from_config(config).mode.min_amount == 5
