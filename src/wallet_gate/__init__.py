"""Wallet-gated access service: signed challenges and token-holding gates."""
