"""Application configuration model using pydantic-settings."""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from challenge_migrator.core.fatal_policy import FatalErrorPolicy

_IMPORT_PATH_PATTERN = re.compile(r"[A-Za-z_][\w.]*:[A-Za-z_]\w*")


class Config(BaseSettings):
    """Application configuration loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_path: str = "data/migration.db"
    log_level: str = "INFO"
    batch_size: int = 50
    fatal_error_policy: FatalErrorPolicy = FatalErrorPolicy.HALT
    challenge_migrator: str | None = None
    resource_migrator: str | None = None
    ledger_write_attempts: int = 3

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, value: str) -> str:
        """Ensure parent directory exists, creating it if necessary."""
        parent = Path(value).parent
        parent.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, value: int) -> int:
        """Batch size must be between 1 and 1000 records per page."""
        if value < 1 or value > 1000:
            msg = "batch_size must be between 1 and 1000"
            raise ValueError(msg)
        return value

    @field_validator("challenge_migrator", "resource_migrator")
    @classmethod
    def validate_migrator_path(cls, value: str | None) -> str | None:
        """Migrator paths must look like 'package.module:factory'."""
        if value is None:
            return None
        stripped = value.strip()
        if not _IMPORT_PATH_PATTERN.fullmatch(stripped):
            msg = "migrator path must match 'package.module:factory'"
            raise ValueError(msg)
        return stripped

    @field_validator("ledger_write_attempts")
    @classmethod
    def validate_ledger_write_attempts(cls, value: int) -> int:
        """Ledger write attempts must be between 1 and 10."""
        if value < 1 or value > 10:
            msg = "ledger_write_attempts must be between 1 and 10"
            raise ValueError(msg)
        return value
