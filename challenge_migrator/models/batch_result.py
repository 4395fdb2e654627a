"""Result of one entity migrator call on a batch of IDs."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class MigrationBatch(BaseModel):
    """Items migrated from one batch, plus the migrator's completion signal."""

    processed_items: list[Any] = []
    finished: bool = False

    @property
    def item_count(self) -> int:
        return len(self.processed_items)
