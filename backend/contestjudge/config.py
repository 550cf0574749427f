"""Application configuration management"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Dict, List
from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

# Base directory: backend/
_BASE_DIR = Path(__file__).resolve().parent.parent

ROUNDING_MODES = ("half_up", "half_even")


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = "Contest Judge"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 4

    # Database
    DATABASE_URL: str = ""
    POSTGRES_HOST: str = ""
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "contestjudge_db"
    POSTGRES_USER: str = "contestjudge"
    POSTGRES_PASSWORD: str = "contestjudge"
    DATABASE_POOL_SIZE: int = 30
    DATABASE_MAX_OVERFLOW: int = 20

    # Database initialization
    DB_INIT_MODE: str = "create_all"  # create_all | off

    # Admin routes
    ADMIN_TOKEN: str = "dev-admin-token-change-in-production"

    # Judge0
    JUDGE0_BASE_URL: str = ""
    JUDGE0_AUTH_TOKEN: str = ""
    JUDGE0_POLL_DELAY_SECONDS: float = 0.5
    JUDGE0_MAX_POLL_ATTEMPTS: int = 30
    JUDGE0_TIMEOUT_SECONDS: float = 10.0

    # Scoring
    SCORE_ROUNDING: str = "half_up"  # half_up | half_even
    LANGUAGE_FACTOR_OVERRIDES: Annotated[Dict[int, float], NoDecode] = {}

    # Contest finalizer
    RUN_EMBEDDED_FINALIZER: bool = True
    FINALIZER_INTERVAL_SECONDS: float = 300.0
    FINALIZER_RECREDIT_RANKED: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # CORS
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = True

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: Any) -> Any:
        """
        Accept JSON array or comma-separated origins from env.

        Examples:
            CORS_ORIGINS=["http://localhost:3000","http://example.com"]
            CORS_ORIGINS=http://localhost:3000,http://example.com
        """
        if not isinstance(value, str):
            return value

        raw = value.strip()
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None

        if isinstance(parsed, str):
            return [parsed]
        if isinstance(parsed, list):
            return [str(origin).strip() for origin in parsed if str(origin).strip()]

        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @field_validator("LANGUAGE_FACTOR_OVERRIDES", mode="before")
    @classmethod
    def _parse_language_factors(cls, value: Any) -> Any:
        """
        Accept a JSON object of judge language id to factor.

        Example:
            LANGUAGE_FACTOR_OVERRIDES={"71": 0.9, "74": 0.9}
        """
        if not isinstance(value, str):
            return value

        raw = value.strip()
        if not raw:
            return {}

        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("LANGUAGE_FACTOR_OVERRIDES must be a JSON object")
        return {int(key): float(factor) for key, factor in parsed.items()}

    @field_validator("SCORE_ROUNDING")
    @classmethod
    def _check_rounding(cls, value: str) -> str:
        mode = value.strip().lower()
        if mode not in ROUNDING_MODES:
            raise ValueError(f"SCORE_ROUNDING must be one of {', '.join(ROUNDING_MODES)}")
        return mode

    def get_log_file(self) -> str:
        p = self.LOG_FILE
        if not p or p.startswith(".."):
            return str(_BASE_DIR.parent / "logs" / "app.log")
        return p

    def get_database_url(self) -> str:
        """
        Resolve database URL.

        Priority:
          1) Explicit DATABASE_URL
          2) Construct from POSTGRES_* parts with safe URL encoding
          3) Local SQLite file next to the backend directory
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if self.POSTGRES_HOST:
            user = quote_plus(self.POSTGRES_USER)
            password = quote_plus(self.POSTGRES_PASSWORD)
            return (
                f"postgresql://{user}:{password}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        return f"sqlite:///{_BASE_DIR / 'contestjudge.db'}"

    def validate_runtime_settings(self) -> None:
        """
        Validate runtime defaults in production.

        Raises:
            ValueError: If insecure defaults are detected.
        """
        if self.ENVIRONMENT.lower() != "production":
            return

        insecure_tokens = {
            "",
            "dev-admin-token-change-in-production",
            "change-me",
        }

        if self.ADMIN_TOKEN in insecure_tokens or len(self.ADMIN_TOKEN) < 32:
            raise ValueError(
                "Insecure ADMIN_TOKEN for production. Use a strong token (e.g. `openssl rand -hex 32`)."
            )

        if not self.JUDGE0_BASE_URL:
            raise ValueError("JUDGE0_BASE_URL must be set in production.")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
