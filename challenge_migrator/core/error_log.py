"""Conversion between failure records and the JSON error-log file format.

The error log is a JSON array with one object per failed item. Each object
names its ID under the entity's ledger key (``challengeId``, ``resourceId``)
and may carry ``error``, ``errorType`` and ``occurredAt`` fields::

    [
        {"challengeId": "30051825", "error": "Timeout", "errorType": "ReadTimeout"},
        {"resourceId": 88123, "error": "Member not found"}
    ]
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import TYPE_CHECKING, Any

from challenge_migrator.models.entity_type import EntityType
from challenge_migrator.models.failure_record import FailureRecord
from challenge_migrator.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger(__name__)

DEFAULT_LEDGER_KEYS: tuple[str, ...] = tuple(entity.ledger_key for entity in EntityType)


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def parse_error_entry(
    entry: dict[str, Any],
    ledger_keys: tuple[str, ...] = DEFAULT_LEDGER_KEYS,
) -> FailureRecord | None:
    """Build a FailureRecord from one error-log object.

    Returns None when the object carries none of the known ledger keys.
    """
    for key in ledger_keys:
        entity_id = entry.get(key)
        if entity_id is None or entity_id == "":
            continue
        message = entry.get("error", entry.get("message"))
        fields: dict[str, Any] = {
            "entity_type_key": key,
            "entity_id": entity_id,
            "error_type": entry.get("errorType"),
            "error_message": str(message) if message is not None else None,
        }
        occurred_at = _parse_timestamp(entry.get("occurredAt"))
        if occurred_at is not None:
            fields["occurred_at"] = occurred_at
        return FailureRecord(**fields)
    return None


def parse_error_log(
    text: str,
    ledger_keys: tuple[str, ...] = DEFAULT_LEDGER_KEYS,
) -> list[FailureRecord]:
    """Parse the JSON error-log text into failure records, in file order."""
    if not text.strip():
        return []
    payload = json.loads(text)
    if not isinstance(payload, list):
        msg = "error log must be a JSON array"
        raise ValueError(msg)

    records: list[FailureRecord] = []
    for position, entry in enumerate(payload):
        if not isinstance(entry, dict):
            logger.warning("error_log_entry_skipped", position=position, reason="not_an_object")
            continue
        record = parse_error_entry(entry, ledger_keys)
        if record is None:
            logger.warning("error_log_entry_skipped", position=position, reason="no_ledger_key")
            continue
        records.append(record)
    return records


def render_error_entry(record: FailureRecord) -> dict[str, Any]:
    """Render a FailureRecord as one error-log object."""
    entry: dict[str, Any] = {record.entity_type_key: record.entity_id}
    if record.error_message is not None:
        entry["error"] = record.error_message
    if record.error_type is not None:
        entry["errorType"] = record.error_type
    entry["occurredAt"] = record.occurred_at.isoformat()
    return entry


def render_error_log(records: Iterable[FailureRecord]) -> str:
    """Render failure records as indented JSON error-log text."""
    return json.dumps([render_error_entry(record) for record in records], indent=2)
