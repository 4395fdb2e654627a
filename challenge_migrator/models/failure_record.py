"""Failure record model for items that could not be migrated."""

from __future__ import annotations

import re
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class FailureRecord(BaseModel):
    """One failed item in the error ledger, keyed by entity type."""

    model_config = ConfigDict(frozen=True)

    entity_type_key: str
    entity_id: str | int
    error_type: str | None = None
    error_message: str | None = None
    occurred_at: datetime = Field(default_factory=_utc_now)

    @field_validator("entity_type_key")
    @classmethod
    def validate_entity_type_key(cls, value: str) -> str:
        """Entity type key must be camelCase and end with 'Id' (e.g. challengeId)."""
        if not re.fullmatch(r"[a-z][a-zA-Z0-9]*Id", value):
            msg = "entity_type_key must be camelCase and end with 'Id'"
            raise ValueError(msg)
        return value

    @field_validator("entity_id")
    @classmethod
    def validate_entity_id(cls, value: str | int) -> str | int:
        """String identifiers must be non-empty."""
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                msg = "entity_id must not be empty"
                raise ValueError(msg)
            return stripped
        return value

    @field_validator("error_message")
    @classmethod
    def validate_error_message(cls, value: str | None) -> str | None:
        """Truncate overly long error messages to 5000 characters."""
        if value is not None and len(value) > 5000:
            return value[:5000]
        return value
