# src/wallet_gate/scripts/tokens.py
"""
Mint an admin bearer token for the /admin endpoints.

Admin accounts are managed outside this service; an operator with access to
ADMIN_SECRET_KEY mints a token for a named subject:

    python -m wallet_gate.scripts.tokens ops@example.com
"""

from __future__ import annotations

import argparse

from wallet_gate.api.v1.endpoints.admin import create_admin_token


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Mint an admin JWT")
    parser.add_argument("subject", help="Identifier recorded as the token subject")
    args = parser.parse_args(argv)

    print(create_admin_token(args.subject))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
