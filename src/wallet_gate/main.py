# src/wallet_gate/main.py
"""Main entry point for the wallet gate application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from wallet_gate.api.v1 import admin_router, auth_router, gate_router
from wallet_gate.core.settings import settings
from wallet_gate.services.cache import close_price_cache
from wallet_gate.services.pricing import close_price_oracle
from wallet_gate.services.solana import close_balance_oracle

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Wallet Gate API",
    description="Solana wallet sign-in gated by token holdings",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(gate_router, prefix=settings.api_prefix)
app.include_router(admin_router, prefix=settings.api_prefix)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await close_balance_oracle()
    await close_price_oracle()
    await close_price_cache()
    logger.info("Outbound clients closed")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Solana wallet sign-in gated by token holdings",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("wallet_gate.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
