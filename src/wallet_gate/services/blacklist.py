"""Wallet blacklist lookups and administration."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from wallet_gate.db.upsert import upsert
from wallet_gate.models import WalletBlacklist

DEFAULT_BLACKLIST_REASON = "Wallet blacklisted"


def get_blacklist_entry(db: Session, pubkey: str) -> WalletBlacklist | None:
    return db.get(WalletBlacklist, pubkey)


def list_blacklist(db: Session) -> list[WalletBlacklist]:
    return db.query(WalletBlacklist).order_by(WalletBlacklist.created_at.desc()).all()


def add_to_blacklist(db: Session, pubkey: str, reason: str = "") -> WalletBlacklist:
    """Insert or update the blacklist entry for `pubkey`."""
    upsert(db, WalletBlacklist, {"pubkey": pubkey, "reason": reason.strip()}, key=("pubkey",))
    db.commit()
    return db.execute(
        select(WalletBlacklist)
        .where(WalletBlacklist.pubkey == pubkey)
        .execution_options(populate_existing=True)
    ).scalar_one()


def remove_from_blacklist(db: Session, pubkey: str) -> bool:
    """Delete the entry for `pubkey`; return False if there was none."""
    entry = db.get(WalletBlacklist, pubkey)
    if entry is None:
        return False
    db.delete(entry)
    db.commit()
    return True


def blacklist_reason(entry: WalletBlacklist) -> str:
    return entry.reason.strip() or DEFAULT_BLACKLIST_REASON
