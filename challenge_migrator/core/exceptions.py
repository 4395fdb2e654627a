"""Custom exceptions for migration retry failures."""

from __future__ import annotations


class MigrationRetryError(Exception):
    """Base exception for retry orchestration errors."""


class BatchFatalError(MigrationRetryError):
    """Raised when an entity migrator call fails for a whole batch.

    Aborts the retry pass for that entity type; the offending batch is not
    retried and is not split into single items.
    """

    def __init__(self, entity_type: str, batch_number: int, cause: BaseException) -> None:
        self.entity_type = entity_type
        self.batch_number = batch_number
        self.cause = cause
        super().__init__(
            f"Fail to load {entity_type.lower()}s on batch {batch_number}: "
            f"{type(cause).__name__}: {cause}"
        )


class LedgerClosedError(MigrationRetryError):
    """Raised when the error ledger is used after it was closed."""


class MigratorLoadError(MigrationRetryError):
    """Raised when a configured entity migrator cannot be imported or built."""
