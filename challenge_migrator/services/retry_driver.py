"""Paginated retry of the failed IDs recorded for one entity type."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from challenge_migrator.core.batching import RetrySession, count_batches
from challenge_migrator.core.exceptions import BatchFatalError
from challenge_migrator.models.batch_result import MigrationBatch
from challenge_migrator.models.retry_context import RetryContext
from challenge_migrator.models.retry_outcome import RetryOutcome

if TYPE_CHECKING:
    from challenge_migrator.models.entity_type import EntityType
    from challenge_migrator.services.protocols import (
        EntityMigratorProtocol,
        ErrorLedgerProtocol,
        ProgressReporterProtocol,
    )

logger = structlog.get_logger(__name__)


class BatchRetryDriver:
    """Re-run migration for exactly the IDs the ledger holds for one entity type.

    The ID list is read once when the pass starts; failures the migrator
    records during the pass are not picked up until the next run. The loop
    ends when the migrator reports ``finished`` or the ID list is exhausted,
    so an uninterrupted pass always ends on one empty slice.

    Only the IDs of batches that complete (migrated and persisted) are marked
    resolved. The batch the migrator finishes on, a batch that raises, and
    every ID after them stay in the ledger for the next run.
    """

    def __init__(
        self,
        entity_type: EntityType,
        migrator: EntityMigratorProtocol,
        ledger: ErrorLedgerProtocol,
        batch_size: int,
    ) -> None:
        self.entity_type = entity_type
        self.migrator = migrator
        self.ledger = ledger
        self.batch_size = batch_size

    @property
    def _noun(self) -> str:
        return f"{self.entity_type.value.lower()}s"

    def run(
        self,
        reporter: ProgressReporterProtocol,
        close_ledger: bool = True,
    ) -> RetryOutcome:
        """Retry every recorded failure of this entity type in batches.

        A standalone pass (``close_ledger=True``) closes the ledger once the
        loop exits; aggregate runs leave that to the coordinator. A migrator
        exception ends the pass and is returned in ``RetryOutcome.error``.
        """
        ledger_key = self.entity_type.ledger_key
        error_ids = self.ledger.get_error_ids(ledger_key)
        session = RetrySession(batch_size=self.batch_size)
        outcome = RetryOutcome(
            entity_type=self.entity_type,
            total_ids=len(error_ids),
            planned_batches=count_batches(len(error_ids), self.batch_size),
        )
        context = RetryContext(entity_type=self.entity_type)
        log = logger.bind(entity_type=str(self.entity_type))

        log.info(
            "retry_pass_started",
            failed_ids=len(error_ids),
            batch_size=self.batch_size,
            planned_batches=outcome.planned_batches,
        )

        while not session.finished:
            batch_context = context.for_batch(session.batch_number)
            reporter.start(session.batch_label, f"Loading {self._noun}")
            ids = session.next_slice(error_ids)
            try:
                if ids:
                    result = self.migrator.fetch_and_migrate(ids, batch_context)
                    outcome.batches_attempted += 1
                    outcome.ids_attempted += len(ids)
                    session.finished = result.finished
                    if result.finished and session.skip + len(ids) < len(error_ids):
                        outcome.finished_early = True
                else:
                    session.finished = True
                    result = MigrationBatch()

                outcome.items_processed += result.item_count
                if result.item_count < 1:
                    reporter.update("Done")
                if not session.finished and result.item_count > 0:
                    self.migrator.persist(result.processed_items, reporter, batch_context)
                    outcome.items_persisted += result.item_count
                if ids and not session.finished:
                    self.ledger.mark_resolved(ledger_key, ids)
                    outcome.ids_resolved += len(ids)
            except Exception as exc:
                session.finished = True
                outcome.error = BatchFatalError(str(self.entity_type), session.batch_number, exc)
                log.error(
                    "batch_fatal_error",
                    batch_number=session.batch_number,
                    batch_ids=len(ids),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                reporter.fail(f"Fail to load {self._noun} on batch {session.batch_number}")
                break

            reporter.succeed()
            session.advance()

        log.info("retry_pass_finished", **outcome.summary())

        if close_ledger:
            self.ledger.close()
        return outcome
