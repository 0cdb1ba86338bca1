"""Exception types shared by the gate services."""

from __future__ import annotations


class OracleError(RuntimeError):
    """Base exception for transient failures of an external data source.

    An oracle error means the gate could not reach a verdict. It must never be
    read as "insufficient holdings".
    """


class BalanceUnavailable(OracleError):
    """Raised when the Solana RPC node cannot report a wallet's token balance."""


class PriceUnavailable(OracleError):
    """Raised when no valid USD price can be obtained for the gate token."""


class ConfigConflict(ValueError):
    """Raised when a gate configuration update violates the threshold rules."""
