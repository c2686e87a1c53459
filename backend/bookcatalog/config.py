"""
Book Catalog — Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Settings are validated once at startup, so a bad value fails
       fast instead of surfacing mid-request.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and `load_settings()` turns a missing
       required variable into MissingEnvVariableError.
Who:   Called once by the application lifespan at startup.

Required environment variables:
    MONGODB_URL       MongoDB connection string
    DATABASE_NAME     Database holding the catalog
    COLLECTION_NAME   Collection holding book documents

Names are case-insensitive, so `mongodb_url` works as well.
"""

import logging

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from bookcatalog.exceptions import MissingEnvVariableError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The three store settings have no defaults: the service cannot run
    without knowing where books live.
    """

    # ── Document Store ────────────────────────────────────────────────────
    mongodb_url: str = Field(description="MongoDB connection URL")
    database_name: str = Field(description="Database holding the catalog")
    collection_name: str = Field(description="Collection holding book documents")

    # Applied to both connection establishment and server selection
    mongodb_timeout_ms: int = Field(default=2000, ge=100, le=60000)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8080, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings(**overrides) -> Settings:
    """
    Build Settings from the environment.

    Keyword overrides take precedence over environment values (used by
    tests and scripts).

    Raises:
        MissingEnvVariableError: a required variable is unset. The first
            missing one, in declaration order, is reported.
        pydantic.ValidationError: a variable is set but invalid.
    """
    try:
        return Settings(**overrides)
    except PydanticValidationError as exc:
        missing = [
            str(error["loc"][0])
            for error in exc.errors()
            if error["type"] == "missing" and error["loc"]
        ]
        if not missing:
            raise
        order = list(Settings.model_fields)
        missing.sort(key=lambda name: order.index(name) if name in order else len(order))
        names = [name.upper() for name in missing]
        logger.error("Missing required configuration: %s", ", ".join(names))
        raise MissingEnvVariableError(names[0], context={"missing": names}) from exc
