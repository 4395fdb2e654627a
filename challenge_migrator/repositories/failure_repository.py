"""Failure record repository for database CRUD operations."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog

from challenge_migrator.models.failure_record import FailureRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from challenge_migrator.services.database import Database

logger = structlog.get_logger(__name__)

_INSERT_SQL = """INSERT INTO failure_records
   (entity_type_key, entity_id, id_is_numeric, error_type, error_message, occurred_at)
   VALUES (?, ?, ?, ?, ?, ?)"""


def _to_params(record: FailureRecord) -> tuple[Any, ...]:
    return (
        record.entity_type_key,
        str(record.entity_id),
        1 if isinstance(record.entity_id, int) else 0,
        record.error_type,
        record.error_message,
        record.occurred_at.isoformat(),
    )


def _restore_id(row: Any) -> str | int:
    return int(row["entity_id"]) if row["id_is_numeric"] else row["entity_id"]


class FailureRepository:
    """Repository for failure record data access."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def add_failure(self, record: FailureRecord) -> int:
        """Store a failure record. Returns row ID."""
        cursor = self.db.execute(_INSERT_SQL, _to_params(record))
        self.db.connection.commit()
        return cursor.lastrowid or 0

    def add_failures(self, records: Iterable[FailureRecord]) -> int:
        """Store several failure records in one transaction. Returns count stored."""
        params = [_to_params(record) for record in records]
        if not params:
            return 0
        with self.db.transaction() as cursor:
            cursor.executemany(_INSERT_SQL, params)
        return len(params)

    def supersede_failures(
        self,
        entity_type_key: str,
        resolved_ids: Iterable[str | int],
        records: Iterable[FailureRecord],
    ) -> int:
        """Delete resolved IDs of a type and store new failures, atomically.

        Records whose ID is still stored after the delete are skipped.
        Returns count stored.
        """
        delete_params = [
            (entity_type_key, str(entity_id), 1 if isinstance(entity_id, int) else 0)
            for entity_id in resolved_ids
        ]
        with self.db.transaction() as cursor:
            if delete_params:
                cursor.executemany(
                    """DELETE FROM failure_records
                       WHERE entity_type_key = ? AND entity_id = ? AND id_is_numeric = ?""",
                    delete_params,
                )
            cursor.execute(
                "SELECT entity_id, id_is_numeric FROM failure_records WHERE entity_type_key = ?",
                (entity_type_key,),
            )
            remaining = {_restore_id(row) for row in cursor.fetchall()}
            params = [_to_params(r) for r in records if r.entity_id not in remaining]
            if params:
                cursor.executemany(_INSERT_SQL, params)
        logger.debug(
            "failure_records_superseded",
            entity_type_key=entity_type_key,
            deleted_ids=len(delete_params),
            stored=len(params),
        )
        return len(params)

    def get_failures(self, entity_type_key: str | None = None) -> list[FailureRecord]:
        """Get failure records in insertion order, optionally for one type."""
        if entity_type_key is None:
            rows = self.db.fetchall("SELECT * FROM failure_records ORDER BY id")
        else:
            rows = self.db.fetchall(
                "SELECT * FROM failure_records WHERE entity_type_key = ? ORDER BY id",
                (entity_type_key,),
            )
        return [self._deserialize_row(row) for row in rows]

    def get_failed_ids(self, entity_type_key: str) -> list[str | int]:
        """Get failed IDs for a type in insertion order (may contain repeats)."""
        return [record.entity_id for record in self.get_failures(entity_type_key)]

    def count_by_type(self) -> dict[str, int]:
        """Count records per entity type key."""
        rows = self.db.fetchall(
            """SELECT entity_type_key, COUNT(*) as count
               FROM failure_records
               GROUP BY entity_type_key
               ORDER BY entity_type_key"""
        )
        return {row["entity_type_key"]: row["count"] for row in rows}

    def _deserialize_row(self, row: Any) -> FailureRecord:
        """Rebuild a FailureRecord, restoring numeric IDs."""
        data = dict(row)
        return FailureRecord(
            entity_type_key=data["entity_type_key"],
            entity_id=_restore_id(row),
            error_type=data.get("error_type"),
            error_message=data.get("error_message"),
            occurred_at=datetime.fromisoformat(data["occurred_at"]),
        )
