# src/wallet_gate/scripts/maintenance.py
"""
Periodic maintenance for the wallet gate database.

Run from cron to:
1. Create missing tables (``--create-tables``)
2. Seed the default gate configuration row
3. Delete sign-in nonces whose TTL has passed
"""

from __future__ import annotations

import argparse
import logging

from sqlalchemy.orm import Session

from wallet_gate.db.session import SessionLocal, create_tables
from wallet_gate.services.gate_config import ensure_gate_config
from wallet_gate.services.nonce import NonceStore

logger = logging.getLogger(__name__)


def purge_expired_nonces(db: Session) -> int:
    """Remove expired challenge nonces.

    Args:
        db: Database session

    Returns:
        Number of rows deleted
    """
    removed = NonceStore(db).purge_expired()
    logger.info("Purged %d expired nonces", removed)
    return removed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Wallet gate maintenance tasks")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.create_tables:
        create_tables()

    db = SessionLocal()
    try:
        ensure_gate_config(db)
        purge_expired_nonces(db)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
