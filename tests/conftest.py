"""Shared test fixtures for the migration retry tool."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import structlog

from challenge_migrator.repositories.failure_repository import FailureRepository
from challenge_migrator.services.database import Database
from challenge_migrator.services.error_ledger import ErrorLedger

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> str:
    """Provide a temporary database file path."""
    return str(tmp_path / "test.db")


@pytest.fixture
def db(tmp_db_path: str) -> Database:
    """Provide an initialized temporary database."""
    database = Database(db_path=tmp_db_path)
    database.init_db()
    return database


@pytest.fixture
def failure_repo(db: Database) -> FailureRepository:
    """Provide a failure repository over the temporary database."""
    return FailureRepository(db)


@pytest.fixture
def ledger(failure_repo: FailureRepository) -> ErrorLedger:
    """Provide an open error ledger with a single write attempt."""
    return ErrorLedger(failure_repo, write_attempts=1)


@pytest.fixture
def sample_error_log() -> str:
    """Error-log JSON with challenge and resource failures."""
    return """[
    {"challengeId": "c-1", "error": "Timeout", "errorType": "ReadTimeout"},
    {"challengeId": "c-2", "error": "Missing phase"},
    {"resourceId": 101, "error": "Member not found"},
    {"challengeId": "c-3"},
    {"unrelated": "value"},
    {"resourceId": 102, "occurredAt": "2024-03-01T10:00:00+00:00"}
]"""


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo configure_logging() calls so later tests do not log to a closed stream."""
    yield
    structlog.reset_defaults()
