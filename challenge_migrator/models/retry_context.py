"""Context handed to entity migrators on every retry call."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from challenge_migrator.models.entity_type import EntityType


@dataclass(frozen=True)
class RetryContext:
    """Tells a migrator it is re-running previously failed items.

    Migrators consult ``retrying`` to adjust their own logging or validation.
    """

    entity_type: EntityType
    batch_number: int = 1
    retrying: bool = True

    def for_batch(self, batch_number: int) -> RetryContext:
        return replace(self, batch_number=batch_number)
