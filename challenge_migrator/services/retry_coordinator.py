"""Sequential retry of every entity type with one final ledger close."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from challenge_migrator.core.fatal_policy import FatalErrorPolicy, should_continue
from challenge_migrator.models.retry_outcome import AggregateRetryOutcome
from challenge_migrator.services.retry_driver import BatchRetryDriver

if TYPE_CHECKING:
    from collections.abc import Mapping

    from challenge_migrator.models.entity_type import EntityType
    from challenge_migrator.services.protocols import (
        EntityMigratorProtocol,
        ErrorLedgerProtocol,
        ProgressReporterProtocol,
    )

logger = structlog.get_logger(__name__)

COMPLETION_NOTICE = "All error data have been attempted to be migrated"


class RetryCoordinator:
    """Runs a BatchRetryDriver per entity type, in mapping order, one at a time."""

    def __init__(
        self,
        migrators: Mapping[EntityType, EntityMigratorProtocol],
        ledger: ErrorLedgerProtocol,
        batch_size: int,
        policy: FatalErrorPolicy = FatalErrorPolicy.HALT,
    ) -> None:
        self.migrators = migrators
        self.ledger = ledger
        self.batch_size = batch_size
        self.policy = policy

    def retry_all(self, reporter: ProgressReporterProtocol) -> AggregateRetryOutcome:
        """Retry every entity type, then close the ledger exactly once.

        With ``FatalErrorPolicy.HALT`` the first batch-fatal error skips the
        remaining entity types; with ``CONTINUE`` they still run.
        """
        aggregate = AggregateRetryOutcome()
        entity_types = list(self.migrators)

        try:
            for position, entity_type in enumerate(entity_types):
                driver = BatchRetryDriver(
                    entity_type,
                    self.migrators[entity_type],
                    self.ledger,
                    self.batch_size,
                )
                outcome = driver.run(reporter, close_ledger=False)
                aggregate.outcomes.append(outcome)

                if not should_continue(self.policy, outcome.succeeded):
                    aggregate.skipped.extend(entity_types[position + 1 :])
                    logger.error(
                        "aggregate_retry_halted",
                        failed_entity_type=str(entity_type),
                        skipped=[str(skipped) for skipped in aggregate.skipped],
                    )
                    break
        finally:
            self.ledger.close()

        if aggregate.succeeded:
            logger.info(
                "aggregate_retry_complete",
                notice=COMPLETION_NOTICE,
                entity_types=[str(outcome.entity_type) for outcome in aggregate.outcomes],
            )
        else:
            logger.error(
                "aggregate_retry_failed",
                errors=[str(error) for error in aggregate.errors],
                policy=str(self.policy),
            )
        return aggregate
