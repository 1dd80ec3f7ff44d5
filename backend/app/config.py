"""
Tree Leaves Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py and passed down to the store factory and routes.
When:  Loaded once at module import time; the storage mode it selects is
       fixed for the lifetime of the process.

Environment flags accepted from older deployments:
    NODE_ENV   → accepted as an alias of ENVIRONMENT
    VERCEL=1   → accepted as an alias of EPHEMERAL_STORAGE=true
"""

from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

# Default static directory sits next to the `app` package: backend/public
_DEFAULT_STATIC_DIR = Path(__file__).resolve().parent.parent / "public"

DEV_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development.
    Attributes are grouped by concern for readability.
    """

    # ── Environment ───────────────────────────────────────────────────────
    # What: Deployment environment name; affects log verbosity, CORS
    #       allow-list and how much detail error envelopes carry.
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )

    # ── Storage ───────────────────────────────────────────────────────────
    # What: Selects the record store implementation.
    #       False → JSON file under data_dir (survives restarts)
    #       True  → in-memory list (lost when the process exits)
    ephemeral_storage: bool = Field(
        default=False,
        validation_alias=AliasChoices("EPHEMERAL_STORAGE", "VERCEL"),
    )

    # What: Directory holding the leaves JSON document, relative to CWD.
    #       Created on startup when file-backed storage is active.
    data_dir: str = Field(default="./data")
    leaves_file_name: str = Field(default="leaves-data.json")

    # What: Directory with index.html, thank-you.html and front-end assets.
    static_dir: str = Field(default=str(_DEFAULT_STATIC_DIR))

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="localhost")
    port: int = Field(default=3000, ge=1, le=65535)

    # What: Upper bound for request bodies, in bytes (default 10MB)
    max_body_size: int = Field(default=10_485_760, ge=1024)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs. In production these are the only
    # allowed origins; in development they extend the localhost defaults.
    cors_origins: str = Field(default="")

    # ── API Behaviour ─────────────────────────────────────────────────────
    # What: Registers GET /api/leaves/clear, a side-effecting GET kept only
    #       for clients that still depend on it.
    allow_clear_via_get: bool = Field(default=False)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    # Unset → DEBUG in development, INFO everywhere else.
    log_level: Optional[str] = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> Optional[str]:
        """Ensures log level is a valid Python logging level name."""
        if v is None or v == "":
            return None
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower() or "development"

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
    }

    # ── Derived Values ────────────────────────────────────────────────────

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level
        return "DEBUG" if self.environment == "development" else "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        """
        What: Allowed origins for the CORS middleware.
        How:  Production uses only the configured origins; any other
              environment adds them to the localhost defaults.
        """
        configured = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        if self.is_production:
            return configured
        return DEV_CORS_ORIGINS + [o for o in configured if o not in DEV_CORS_ORIGINS]

    @property
    def leaves_file_path(self) -> Path:
        return Path(self.data_dir) / self.leaves_file_name


# Singleton instance: default configuration for create_app()
settings = Settings()
