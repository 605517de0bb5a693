"""
Application Configuration

Centralized settings management using Pydantic BaseSettings.
All values are loaded from environment variables or .env file.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable binding.

    No env var is required: the store runs with zero enrichment when
    OPENAI_API_KEY is missing.

    Optional env vars:
        HOST (127.0.0.1), PORT (8765), DATABASE_PATH (notes.db), OPENAI_API_KEY, EMBEDDING_MODEL,
        EMBEDDING_DIMENSION (1536), CHAT_MODEL (gpt-4o), PROVIDER_TIMEOUT (30),
        PROVIDER_MAX_RETRIES (2), EMBEDDING_MAX_RETRIES (3),
        EMBEDDING_RETRY_DELAY (1.0), DEFAULT_TITLE (untitled), LOG_LEVEL (INFO)
    """

    PROJECT_NAME: str = "Mindpad"

    # Server (loopback only: the store is single-user and local)
    HOST: str = "127.0.0.1"
    PORT: int = 8765

    # Storage
    DATABASE_PATH: str = "notes.db"

    # Remote provider (embeddings + chat completions)
    OPENAI_API_KEY: str | None = None
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_DIMENSION: int = 1536  # text-embedding-3-small output size
    CHAT_MODEL: str = "gpt-4o"
    PROVIDER_TIMEOUT: float = 30.0
    PROVIDER_MAX_RETRIES: int = 2
    EMBEDDING_MAX_RETRIES: int = 3
    EMBEDDING_RETRY_DELAY: float = 1.0  # Base delay, multiplied by attempt number

    # Notes
    DEFAULT_TITLE: str = "untitled"

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",  # Silently ignore unknown env vars
    )

    @property
    def DATABASE_URL(self) -> str:
        """Async SQLite connection string using the aiosqlite driver."""
        return f"sqlite+aiosqlite:///{Path(self.DATABASE_PATH).expanduser()}"

    @property
    def provider_configured(self) -> bool:
        """True when a provider credential is available."""
        return bool(self.OPENAI_API_KEY and self.OPENAI_API_KEY.strip())


settings = Settings()
