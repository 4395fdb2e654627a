"""Pure batching helpers for the paginated retry loop."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")


@dataclass
class RetrySession:
    """Per-entity-type loop state; lives only for one retry pass."""

    batch_size: int
    skip: int = 0
    batch_number: int = 1
    finished: bool = False

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            msg = "batch_size must be at least 1"
            raise ValueError(msg)

    @property
    def batch_label(self) -> str:
        return f"Batch-{self.batch_number}"

    def next_slice(self, ids: list[T]) -> list[T]:
        """Return the IDs of the current batch without advancing."""
        return slice_batch(ids, self.skip, self.batch_size)

    def advance(self) -> None:
        self.skip += self.batch_size
        self.batch_number += 1


def slice_batch(ids: list[T], skip: int, batch_size: int) -> list[T]:
    """Return ids[skip : skip + batch_size]; empty once the list is exhausted."""
    return ids[skip : skip + batch_size]


def count_batches(total: int, batch_size: int) -> int:
    """Number of non-empty batches needed to cover ``total`` IDs."""
    if batch_size < 1:
        msg = "batch_size must be at least 1"
        raise ValueError(msg)
    return math.ceil(total / batch_size) if total > 0 else 0


def dedupe_preserving_order(ids: list[T]) -> list[T]:
    """Drop repeated IDs, keeping the first occurrence."""
    seen: set[T] = set()
    unique: list[T] = []
    for entity_id in ids:
        if entity_id in seen:
            continue
        seen.add(entity_id)
        unique.append(entity_id)
    return unique
