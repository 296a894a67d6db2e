"""
Application settings
====================

All runtime configuration comes from environment variables, falling back to
a `.env` file in the working directory. Unknown variables are ignored.

Groups
------
- Runtime: `ENVIRONMENT` (anything but "production" exposes error details),
  `LOG_LEVEL`, `FRONTEND_URL` (CORS origin)
- Database: `DATABASE_URL`, or the `DB_*` pieces it is assembled from
- Generation: `OPEN_AI_MODEL`, `API_KEY` and the `GENERATION_*` limits
- Admin tokens: `SECRET_KEY` (required), `ALGORITHM`, `ACCESS_TOKEN_EXPIRE_MINUTES`

`get_settings()` builds the settings on first use and caches them, so
importing the package never requires a populated environment. Tests build
`Settings(...)` directly instead.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of the environment. Field names match the variable names."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENVIRONMENT: str = Field("development", description="Deployment environment (`development`, `production`, ...).")
    LOG_LEVEL: str = Field("INFO", description="Root log level for the application loggers.")
    FRONTEND_URL: str = Field("http://localhost:3000", description="Base URL of the chat widget / admin frontend.")

    DATABASE_URL: Optional[str] = Field(None, description="Full SQLAlchemy URL; overrides the DB_* pieces when set.")
    DB_DRIVER_NAME: str = Field("postgresql+psycopg2", description="Database driver (e.g., `postgresql+psycopg2`, `sqlite`).")
    DB_USERNAME: Optional[str] = Field(None, description="Database username credential.")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password credential.")
    DB_HOST: Optional[str] = Field(None, description="Hostname or IP address of the database server.")
    DB_PORT: Optional[int] = Field(None, description="Port of the database server.")
    DB_DATABASE_NAME: Optional[str] = Field(None, description="Name of the application's database.")

    OPEN_AI_MODEL: str = Field("gpt-4o-mini", description="Chat model name used for grounded replies.")
    API_KEY: Optional[str] = Field(None, description="API key of the chat model provider.")
    GENERATION_MAX_TOKENS: int = Field(1024, description="Upper bound on generated tokens per reply.")
    GENERATION_TIMEOUT_SECONDS: float = Field(30.0, description="Deadline for a single generation attempt.")
    GENERATION_MAX_RETRIES: int = Field(0, description="Extra attempts after a timeout or quota error.")
    GENERATION_RETRY_BACKOFF_SECONDS: float = Field(0.5, description="Base delay of the exponential retry backoff.")

    SECRET_KEY: str = Field(..., description="Secret key for signing admin access tokens.")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm.")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(480, description="Duration (in minutes) before access tokens expire.")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Build the Settings object from the environment once and reuse it."""
    return Settings()
