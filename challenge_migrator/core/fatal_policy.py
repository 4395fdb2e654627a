"""Policy for batch-fatal errors during an aggregate retry run."""

from __future__ import annotations

from enum import StrEnum


class FatalErrorPolicy(StrEnum):
    """What an aggregate run does after one entity type's pass aborts."""

    HALT = "halt"
    CONTINUE = "continue"


def should_continue(policy: FatalErrorPolicy, pass_succeeded: bool) -> bool:
    """Return True if the aggregate run moves on to the next entity type."""
    if pass_succeeded:
        return True
    return policy is FatalErrorPolicy.CONTINUE
