"""Error ledger: persistent record of item IDs that failed migration."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from challenge_migrator.core.batching import dedupe_preserving_order
from challenge_migrator.core.error_log import parse_error_log, render_error_log
from challenge_migrator.core.exceptions import LedgerClosedError
from challenge_migrator.models.failure_record import FailureRecord
from challenge_migrator.utils.retry import retry_with_logging

if TYPE_CHECKING:
    from challenge_migrator.models.entity_type import EntityId
    from challenge_migrator.repositories.failure_repository import FailureRepository

logger = structlog.get_logger(__name__)


class ErrorLedger:
    """Failed-item ledger partitioned by entity type key.

    Reads come from the persisted records. Failures recorded during a run are
    buffered and written on ``close()``: records of IDs marked resolved are
    deleted, then each partition gains the newly failed IDs it does not
    already hold. IDs never marked resolved keep their records.
    """

    def __init__(self, repository: FailureRepository, write_attempts: int = 3) -> None:
        self.repository = repository
        self.write_attempts = write_attempts
        self._pending: list[FailureRecord] = []
        self._resolved: dict[str, list[EntityId]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            msg = "error ledger is closed"
            raise LedgerClosedError(msg)

    def get_error_ids(self, entity_type_key: str) -> list[EntityId]:
        """Return the recorded failing IDs for a type, in insertion order.

        Unknown or empty types yield an empty list.
        """
        self._ensure_open()
        ids = dedupe_preserving_order(self.repository.get_failed_ids(entity_type_key))
        logger.debug("error_ids_loaded", entity_type_key=entity_type_key, count=len(ids))
        return ids

    def record_failure(
        self,
        entity_type_key: str,
        entity_id: EntityId,
        error: BaseException | str | None = None,
    ) -> FailureRecord:
        """Append a failure for the current run; persisted on close."""
        self._ensure_open()
        if isinstance(error, BaseException):
            error_type: str | None = type(error).__name__
            error_message: str | None = str(error)
        else:
            error_type = None
            error_message = error
        record = FailureRecord(
            entity_type_key=entity_type_key,
            entity_id=entity_id,
            error_type=error_type,
            error_message=error_message,
        )
        self._pending.append(record)
        logger.debug(
            "failure_recorded",
            entity_type_key=entity_type_key,
            entity_id=entity_id,
            error_type=error_type,
        )
        return record

    def mark_resolved(self, entity_type_key: str, entity_ids: list[EntityId]) -> None:
        """Mark IDs whose retry completed; their persisted records are dropped on close.

        Failures recorded for those IDs during this run are written back.
        """
        self._ensure_open()
        self._resolved.setdefault(entity_type_key, []).extend(entity_ids)

    def pending_failures(self, entity_type_key: str | None = None) -> list[FailureRecord]:
        """Failures recorded during this run and not yet flushed."""
        if entity_type_key is None:
            return list(self._pending)
        return [r for r in self._pending if r.entity_type_key == entity_type_key]

    def close(self) -> None:
        """Flush buffered failures. Later calls are no-ops."""
        if self._closed:
            logger.debug("error_ledger_already_closed")
            return

        flush = retry_with_logging(max_attempts=self.write_attempts)(self._flush)
        flush()
        self._closed = True

    def _flush(self) -> None:
        keys = dedupe_preserving_order(
            list(self._resolved) + [r.entity_type_key for r in self._pending]
        )
        written = 0
        for key in keys:
            written += self.repository.supersede_failures(
                key,
                dedupe_preserving_order(self._resolved.get(key, [])),
                self._unique_records(self.pending_failures(key)),
            )

        logger.info(
            "error_ledger_closed",
            resolved_ids={key: len(ids) for key, ids in self._resolved.items()},
            failures_written=written,
        )

    @staticmethod
    def _unique_records(records: list[FailureRecord]) -> list[FailureRecord]:
        seen: set[EntityId] = set()
        unique: list[FailureRecord] = []
        for record in records:
            if record.entity_id in seen:
                continue
            seen.add(record.entity_id)
            unique.append(record)
        return unique

    def count_by_type(self) -> dict[str, int]:
        """Persisted failure counts per entity type key."""
        self._ensure_open()
        return self.repository.count_by_type()

    def import_error_log(self, path: str | Path) -> int:
        """Load a JSON error-log file into the persisted ledger. Returns count added."""
        self._ensure_open()
        records = parse_error_log(Path(path).read_text(encoding="utf-8"))
        added = self.repository.add_failures(records)
        logger.info("error_log_imported", path=str(path), records=added)
        return added

    def export_error_log(self, path: str | Path, entity_type_key: str | None = None) -> int:
        """Write persisted failures to a JSON error-log file. Returns count written."""
        self._ensure_open()
        records = self.repository.get_failures(entity_type_key)
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render_error_log(records), encoding="utf-8")
        logger.info("error_log_exported", path=str(target), records=len(records))
        return len(records)
