"""Signature utilities for Solana wallets built on Ed25519 primitives."""
from __future__ import annotations

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey


def verify_signature(pubkey_b58: str, signature_b58: str, message: str) -> bool:
    """Verify a detached Ed25519 signature produced by a Solana wallet.

    Args:
        pubkey_b58: Base58-encoded 32-byte wallet public key.
        signature_b58: Base58-encoded 64-byte detached signature.
        message: Message text exactly as the wallet signed it (UTF-8).

    Returns:
        True if the signature is valid for `message` under `pubkey_b58`; False otherwise,
        including for any input that cannot be decoded.
    """
    try:
        verify_key = VerifyKey(base58.b58decode(pubkey_b58))
        signature = base58.b58decode(signature_b58)
        verify_key.verify(message.encode("utf-8"), signature)
        return True
    except (BadSignatureError, ValueError, TypeError):
        return False


def is_wallet_address(value: str) -> bool:
    """Return True if `value` decodes from base58 to a 32-byte public key."""
    try:
        return len(base58.b58decode(value)) == 32
    except ValueError:
        return False
