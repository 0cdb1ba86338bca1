# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from typing import Any
from unittest.mock import AsyncMock

import base58
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nacl.signing import SigningKey
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_SECRET_KEY", "test-admin-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from wallet_gate.api.v1 import dependencies as api_dependencies
from wallet_gate.api.v1.endpoints.admin import create_admin_token
from wallet_gate.db.session import Base
from wallet_gate.db.session import get_db as app_get_session
from wallet_gate.main import app as fastapi_app
from wallet_gate.models import GATE_CONFIG_ID, GateConfig
from wallet_gate.services.pricing import CoinGeckoPriceOracle
from wallet_gate.services.solana import SolanaBalanceOracle

TEST_DB_URL = "sqlite://"

# A syntactically valid mint address (base58 of 32 bytes).
TEST_MINT = base58.b58encode(bytes(range(32))).decode()


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def balance_oracle() -> AsyncMock:
    """Stand-in for the Solana RPC balance oracle."""
    oracle = AsyncMock(spec=SolanaBalanceOracle)
    oracle.get_token_amount.return_value = 0.0
    return oracle


@pytest.fixture()
def price_oracle() -> AsyncMock:
    """Stand-in for the CoinGecko price oracle."""
    oracle = AsyncMock(spec=CoinGeckoPriceOracle)
    oracle.get_usd_price.return_value = 1.0
    return oracle


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    balance_oracle: AsyncMock,
    price_oracle: AsyncMock,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    overrides: dict[Any, Any] = {
        app_get_session: _get_session_override,
        api_dependencies.get_balance_oracle_dep: lambda: balance_oracle,
        api_dependencies.get_price_oracle_dep: lambda: price_oracle,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


class Wallet:
    """Ed25519 keypair encoded the way a Solana wallet presents it."""

    def __init__(self) -> None:
        self.signing_key = SigningKey.generate()
        self.pubkey = base58.b58encode(bytes(self.signing_key.verify_key)).decode()

    def sign(self, message: str) -> str:
        signature = self.signing_key.sign(message.encode("utf-8")).signature
        return base58.b58encode(signature).decode()


@pytest.fixture()
def wallet() -> Wallet:
    return Wallet()


@pytest.fixture()
def other_wallet() -> Wallet:
    return Wallet()


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_admin_token('ops@example.com')}"}


def configure_gate(db: Session, **fields: Any) -> GateConfig:
    """Persist the gate configuration row with `fields` applied."""
    values: dict[str, Any] = {
        "enabled": True,
        "mint_address": TEST_MINT,
        "tolerance_percent": 2.0,
        "price_mode": "coin_id",
        "price_coin_id": "gate-token",
    }
    values.update(fields)
    config = db.get(GateConfig, GATE_CONFIG_ID)
    if config is None:
        config = GateConfig(id=GATE_CONFIG_ID, **values)
        db.add(config)
    else:
        for key, value in values.items():
            setattr(config, key, value)
    db.commit()
    return config
