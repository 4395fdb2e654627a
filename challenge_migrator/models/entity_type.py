"""Entity types known to the migration and their error ledger keys."""

from __future__ import annotations

from enum import StrEnum

EntityId = str | int


class EntityType(StrEnum):
    """Category of migrated record, each with its own ledger partition.

    Declaration order is the order in which an aggregate retry visits them.
    """

    CHALLENGE = "Challenge"
    RESOURCE = "Resource"

    @property
    def ledger_key(self) -> str:
        """Key under which failed IDs of this type are recorded."""
        return _LEDGER_KEYS[self]

    @classmethod
    def from_ledger_key(cls, key: str) -> EntityType:
        """Resolve an entity type from its ledger key."""
        for entity_type, ledger_key in _LEDGER_KEYS.items():
            if ledger_key == key:
                return entity_type
        msg = f"Unknown ledger key: {key}"
        raise ValueError(msg)


_LEDGER_KEYS: dict[EntityType, str] = {
    EntityType.CHALLENGE: "challengeId",
    EntityType.RESOURCE: "resourceId",
}
