"""Data models for the migration retry tool."""

from challenge_migrator.models.batch_result import MigrationBatch
from challenge_migrator.models.config import Config
from challenge_migrator.models.entity_type import EntityId, EntityType
from challenge_migrator.models.failure_record import FailureRecord
from challenge_migrator.models.retry_context import RetryContext
from challenge_migrator.models.retry_outcome import AggregateRetryOutcome, RetryOutcome

__all__ = [
    "AggregateRetryOutcome",
    "Config",
    "EntityId",
    "EntityType",
    "FailureRecord",
    "MigrationBatch",
    "RetryContext",
    "RetryOutcome",
]
