"""Single-use sign-in challenges bound to a wallet public key."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from wallet_gate.core.settings import settings
from wallet_gate.db.time import as_utc, utcnow
from wallet_gate.db.upsert import upsert
from wallet_gate.models import AuthNonce

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Challenge:
    """Nonce issued to a wallet together with the message it must sign."""

    nonce: str
    message: str
    expires_at: datetime


def make_nonce() -> str:
    """Return a nonce combining a nanosecond timestamp with two random draws."""
    return f"{time.time_ns():x}-{secrets.token_hex(8)}-{secrets.token_hex(8)}"


def build_sign_in_message(nonce: str, prefix: str | None = None) -> str:
    """Return the canonical sign-in message embedding `nonce`."""
    return f"{prefix or settings.sign_in_message_prefix}\n\nNonce: {nonce}"


class NonceStore:
    """Issues and consumes challenge nonces stored in the `auth_nonce` table.

    A wallet has at most one live nonce. Consumption is a compare-and-delete, so
    when two verifications race for the same wallet only one of them wins.
    """

    def __init__(
        self,
        db: Session,
        *,
        ttl_seconds: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._db = db
        self._ttl = timedelta(seconds=ttl_seconds or settings.nonce_ttl_seconds)
        self._clock = clock

    def issue(self, pubkey: str) -> Challenge:
        """Create a fresh nonce for `pubkey`, replacing any previous one."""
        nonce = make_nonce()
        expires_at = self._clock() + self._ttl

        upsert(
            self._db,
            AuthNonce,
            {"pubkey": pubkey, "nonce": nonce, "expires_at": expires_at},
            key=("pubkey",),
        )
        self._db.commit()

        return Challenge(nonce=nonce, message=build_sign_in_message(nonce), expires_at=expires_at)

    def consume(self, pubkey: str) -> str | None:
        """Destroy and return the live nonce for `pubkey`.

        Returns None when no nonce exists, when it has expired, or when a
        concurrent caller consumed it first.
        """
        record = self._db.execute(
            select(AuthNonce.nonce, AuthNonce.expires_at).where(AuthNonce.pubkey == pubkey)
        ).first()
        if record is None:
            return None

        nonce, expires_at = record
        now = self._clock()
        if as_utc(expires_at) <= now:
            return None

        result = self._db.execute(
            delete(AuthNonce).where(
                AuthNonce.pubkey == pubkey,
                AuthNonce.nonce == nonce,
                AuthNonce.expires_at > now,
            )
            .execution_options(synchronize_session="fetch")
        )
        self._db.commit()
        if result.rowcount != 1:
            logger.info("Nonce for %s was consumed concurrently", pubkey)
            return None
        return nonce

    def purge_expired(self) -> int:
        """Delete every expired nonce and return how many rows were removed."""
        result = self._db.execute(
            delete(AuthNonce)
            .where(AuthNonce.expires_at <= self._clock())
            .execution_options(synchronize_session="fetch")
        )
        self._db.commit()
        return int(result.rowcount or 0)
