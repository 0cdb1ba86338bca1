"""HTTP API for the wallet gate."""
