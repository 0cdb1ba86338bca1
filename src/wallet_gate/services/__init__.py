# src/wallet_gate/services/__init__.py
"""Business logic services for the wallet gate."""

from .cache import MemoryCache, RedisCache
from .errors import BalanceUnavailable, ConfigConflict, OracleError, PriceUnavailable
from .gate import Allowed, Denied, GateEngine, GatePolicy
from .nonce import NonceStore
from .pricing import CoinGeckoPriceOracle, PriceSource
from .solana import SolanaBalanceOracle

__all__ = [
    "Allowed", "Denied", "GateEngine", "GatePolicy",
    "BalanceUnavailable", "ConfigConflict", "OracleError", "PriceUnavailable",
    "CoinGeckoPriceOracle", "PriceSource",
    "MemoryCache", "RedisCache",
    "NonceStore",
    "SolanaBalanceOracle",
]
