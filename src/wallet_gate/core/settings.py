"""Application settings and configuration.

This module defines all configuration options for the wallet gate service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Wallet Gate", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    api_prefix: str = Field(default="", alias="API_PREFIX")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    admin_secret_key: str = Field(alias="ADMIN_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    admin_token_expire_minutes: int = Field(default=360, alias="ADMIN_TOKEN_EXPIRE_MINUTES")

    # Wallet sign-in challenge
    nonce_ttl_seconds: int = Field(default=600, alias="NONCE_TTL_SECONDS")
    sign_in_message_prefix: str = Field(
        default="Sign in to Solana Catalog",
        alias="SIGN_IN_MESSAGE_PREFIX",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./wallet_gate.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis configuration for the price cache
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")

    # Solana RPC node used by the balance oracle
    solana_rpc_url: str = Field(
        default="https://api.mainnet-beta.solana.com",
        alias="SOLANA_RPC_URL",
    )
    solana_commitment: str = Field(default="confirmed", alias="SOLANA_COMMITMENT")
    rpc_timeout_seconds: float = Field(default=10.0, alias="RPC_TIMEOUT_SECONDS")

    # CoinGecko price oracle
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        alias="COINGECKO_BASE_URL",
    )
    coingecko_api_key: str | None = Field(default=None, alias="COINGECKO_API_KEY")
    price_timeout_seconds: float = Field(default=10.0, alias="PRICE_TIMEOUT_SECONDS")
    price_cache_ttl_seconds: int = Field(default=60, alias="PRICE_CACHE_TTL_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url


settings = Settings()  # type: ignore[call-arg]
