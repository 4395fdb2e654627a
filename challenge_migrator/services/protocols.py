"""Service protocols defining interfaces for dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from challenge_migrator.models.batch_result import MigrationBatch
    from challenge_migrator.models.entity_type import EntityId
    from challenge_migrator.models.retry_context import RetryContext


class ProgressReporterProtocol(Protocol):
    """Sink for human-readable retry progress; has no effect on control flow."""

    def start(self, prefix: str, text: str) -> None: ...

    def update(self, text: str) -> None: ...

    def succeed(self, text: str | None = None) -> None: ...

    def fail(self, text: str) -> None: ...


class EntityMigratorProtocol(Protocol):
    """Fetches, migrates and saves records of one entity type.

    Per-item failures are recorded in the error ledger by the migrator itself.
    An exception raised from ``fetch_and_migrate`` is fatal for the batch.
    """

    def fetch_and_migrate(
        self, ids: list[EntityId], context: RetryContext
    ) -> MigrationBatch: ...

    def persist(
        self,
        items: list[Any],
        reporter: ProgressReporterProtocol,
        context: RetryContext,
    ) -> None: ...


class ErrorLedgerProtocol(Protocol):
    """Read-and-close view of the error ledger used by the retry loop."""

    def get_error_ids(self, entity_type_key: str) -> list[EntityId]: ...

    def mark_resolved(self, entity_type_key: str, entity_ids: list[EntityId]) -> None: ...

    def close(self) -> None: ...
