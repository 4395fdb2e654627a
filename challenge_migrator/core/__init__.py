"""Core retry logic -- pure functions for batching, error logs and fatal-error policy."""

from __future__ import annotations

from challenge_migrator.core.batching import (
    RetrySession,
    count_batches,
    dedupe_preserving_order,
    slice_batch,
)
from challenge_migrator.core.error_log import (
    parse_error_entry,
    parse_error_log,
    render_error_entry,
    render_error_log,
)
from challenge_migrator.core.exceptions import (
    BatchFatalError,
    LedgerClosedError,
    MigrationRetryError,
    MigratorLoadError,
)
from challenge_migrator.core.fatal_policy import FatalErrorPolicy, should_continue

__all__ = [
    # batching
    "RetrySession",
    "count_batches",
    "dedupe_preserving_order",
    "slice_batch",
    # error_log
    "parse_error_entry",
    "parse_error_log",
    "render_error_entry",
    "render_error_log",
    # exceptions
    "BatchFatalError",
    "LedgerClosedError",
    "MigrationRetryError",
    "MigratorLoadError",
    # fatal_policy
    "FatalErrorPolicy",
    "should_continue",
]
