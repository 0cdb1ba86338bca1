"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from wallet_gate.core.settings import settings
from wallet_gate.db.session import get_db
from wallet_gate.services.blacklist import blacklist_reason, get_blacklist_entry
from wallet_gate.services.gate import GateEngine
from wallet_gate.services.nonce import NonceStore
from wallet_gate.services.pricing import CoinGeckoPriceOracle, get_price_oracle
from wallet_gate.services.solana import SolanaBalanceOracle, get_balance_oracle

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

ADMIN_ROLE = "admin"

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_balance_oracle_dep() -> SolanaBalanceOracle:
    return get_balance_oracle()


def get_price_oracle_dep() -> CoinGeckoPriceOracle:
    return get_price_oracle()


BalanceOracleDep = Annotated[SolanaBalanceOracle, Depends(get_balance_oracle_dep)]
PriceOracleDep = Annotated[CoinGeckoPriceOracle, Depends(get_price_oracle_dep)]


def get_nonce_store(db: SessionDep) -> NonceStore:
    return NonceStore(db)


def get_gate_engine(
    db: SessionDep,
    balance_oracle: BalanceOracleDep,
    price_oracle: PriceOracleDep,
) -> GateEngine:
    return GateEngine(db, balance_oracle, price_oracle)


NonceStoreDep = Annotated[NonceStore, Depends(get_nonce_store)]
GateEngineDep = Annotated[GateEngine, Depends(get_gate_engine)]


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )


def get_current_wallet(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> str:
    """Return the wallet public key from a session token.

    Raises:
        HTTPException: 401 if the token is invalid, 403 if the wallet is blacklisted
    """
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise _credentials_error() from err

    pubkey = payload.get("sub")
    if not pubkey:
        raise _credentials_error()

    entry = get_blacklist_entry(db, pubkey)
    if entry is not None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=blacklist_reason(entry),
        )
    return str(pubkey)


def require_admin(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> str:
    """Return the admin subject from an admin token signed with the admin secret."""
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.admin_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise _credentials_error() from err

    if payload.get("role") != ADMIN_ROLE or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return str(payload["sub"])


# Type aliases for authenticated principals
CurrentWalletDep = Annotated[str, Depends(get_current_wallet)]
AdminDep = Annotated[str, Depends(require_admin)]
