"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Tally"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Azure Cosmos DB (durable store)
    # Either a connection string (emulator / key auth) or an endpoint (RBAC).
    # When neither is set, or the account is unreachable at startup, the
    # service runs against the in-memory store.
    AZURE_COSMOS_CONNECTION_STRING: str | None = None
    AZURE_COSMOS_ENDPOINT: str | None = None
    AZURE_COSMOS_DATABASE: str = "tally"
    AZURE_COSMOS_DISABLE_SSL: bool = False
    COSMOS_CONNECT_TIMEOUT_SECONDS: float = 3.0

    # Change feed polling (durable mode only)
    CHANGE_FEED_POLL_INTERVAL_SECONDS: float = 1.0

    # Admin listing
    RECENT_RESPONSES_LIMIT: int = 100

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cosmos_configured(self) -> bool:
        """Whether any Cosmos DB credentials were supplied."""
        return bool(self.AZURE_COSMOS_CONNECTION_STRING or self.AZURE_COSMOS_ENDPOINT)

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
