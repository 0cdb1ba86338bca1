"""Balance oracle reading SPL token holdings from a Solana JSON-RPC node."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from wallet_gate.core.settings import settings
from wallet_gate.services.errors import BalanceUnavailable

logger = logging.getLogger(__name__)

_request_ids = itertools.count(1)


def _ui_amount(account: Mapping[str, Any]) -> float:
    """Extract the decimal-adjusted amount from a jsonParsed token account."""
    info = account["account"]["data"]["parsed"]["info"]
    token_amount = info.get("tokenAmount") or {}
    raw = token_amount.get("uiAmountString")
    if raw is None:
        raw = token_amount.get("uiAmount")
    if raw is None:
        return 0.0
    return float(raw)


class SolanaBalanceOracle:
    """Sums a wallet's balance of one mint across all of its token accounts."""

    def __init__(
        self,
        rpc_url: str | None = None,
        *,
        commitment: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url or settings.solana_rpc_url
        self.commitment = commitment or settings.solana_commitment
        self._timeout = timeout_seconds or settings.rpc_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self._timeout),
                    transport=self._transport,
                )
        return self._client

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        client = await self._ensure_client()
        body = {"jsonrpc": "2.0", "id": next(_request_ids), "method": method, "params": params}
        try:
            response = await client.post(self.rpc_url, json=body)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Solana RPC %s failed: %s", method, exc)
            raise BalanceUnavailable(f"Solana RPC request failed: {exc}") from exc
        except ValueError as exc:
            raise BalanceUnavailable("Solana RPC returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise BalanceUnavailable("Solana RPC returned an unexpected payload")
        if payload.get("error"):
            error = payload["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.warning("Solana RPC %s returned error: %s", method, message)
            raise BalanceUnavailable(f"Solana RPC error: {message}")
        return payload.get("result")

    async def get_token_amount(self, owner: str, mint: str) -> float:
        """Return the total ui amount of `mint` held by `owner` (0 when none).

        Raises:
            BalanceUnavailable: If the node cannot be queried or its reply is malformed.
        """
        result = await self._rpc(
            "getTokenAccountsByOwner",
            [
                owner,
                {"mint": mint},
                {"encoding": "jsonParsed", "commitment": self.commitment},
            ],
        )
        try:
            accounts = result["value"]
            return float(sum(_ui_amount(account) for account in accounts))
        except (KeyError, TypeError, ValueError) as exc:
            raise BalanceUnavailable("Could not parse token account data") from exc

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


_balance_oracle: SolanaBalanceOracle | None = None


def get_balance_oracle() -> SolanaBalanceOracle:
    """Return the shared balance oracle instance."""
    global _balance_oracle
    if _balance_oracle is None:
        _balance_oracle = SolanaBalanceOracle()
    return _balance_oracle


async def close_balance_oracle() -> None:
    global _balance_oracle
    if _balance_oracle is not None:
        await _balance_oracle.close()
        _balance_oracle = None
