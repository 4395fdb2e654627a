"""Outcomes returned by retry passes instead of terminating the process."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from challenge_migrator.core.exceptions import BatchFatalError
    from challenge_migrator.models.entity_type import EntityType


@dataclass
class RetryOutcome:
    """Result of one entity type's retry pass."""

    entity_type: EntityType
    total_ids: int
    planned_batches: int = 0
    batches_attempted: int = 0
    ids_attempted: int = 0
    items_processed: int = 0
    items_persisted: int = 0
    ids_resolved: int = 0
    finished_early: bool = False
    error: BatchFatalError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def summary(self) -> dict[str, int | str | bool | None]:
        """Return summary statistics."""
        return {
            "entity_type": str(self.entity_type),
            "total_ids": self.total_ids,
            "planned_batches": self.planned_batches,
            "batches_attempted": self.batches_attempted,
            "ids_attempted": self.ids_attempted,
            "items_processed": self.items_processed,
            "items_persisted": self.items_persisted,
            "ids_resolved": self.ids_resolved,
            "finished_early": self.finished_early,
            "error": str(self.error) if self.error else None,
        }


@dataclass
class AggregateRetryOutcome:
    """Result of retrying every entity type in sequence."""

    outcomes: list[RetryOutcome] = field(default_factory=list)
    skipped: list[EntityType] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return all(outcome.succeeded for outcome in self.outcomes)

    @property
    def errors(self) -> list[BatchFatalError]:
        return [outcome.error for outcome in self.outcomes if outcome.error is not None]
