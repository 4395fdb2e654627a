"""Contract tests for RetryCoordinator with stub migrators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

from structlog.testing import capture_logs

from challenge_migrator.core.fatal_policy import FatalErrorPolicy
from challenge_migrator.models.batch_result import MigrationBatch
from challenge_migrator.models.entity_type import EntityType
from challenge_migrator.models.failure_record import FailureRecord
from challenge_migrator.services.retry_coordinator import COMPLETION_NOTICE, RetryCoordinator

if TYPE_CHECKING:
    from challenge_migrator.models.retry_context import RetryContext
    from challenge_migrator.repositories.failure_repository import FailureRepository
    from challenge_migrator.services.error_ledger import ErrorLedger


class EventLogMigrator:
    """Appends (entity, event, ids) tuples to a shared event list."""

    def __init__(self, name: str, events: list[tuple[str, str, list[Any]]], fail: bool = False):
        self.name = name
        self.events = events
        self.fail = fail

    def fetch_and_migrate(self, ids: list[Any], context: RetryContext) -> MigrationBatch:
        self.events.append((self.name, "fetch", list(ids)))
        if self.fail:
            raise TimeoutError("gateway timeout")
        return MigrationBatch(processed_items=list(ids))

    def persist(self, items: list[Any], reporter: Any, context: RetryContext) -> None:
        self.events.append((self.name, "persist", list(items)))


def _ledger(challenge_ids: list[Any], resource_ids: list[Any]) -> MagicMock:
    ledger = MagicMock()
    ledger.get_error_ids.side_effect = lambda key: {
        "challengeId": challenge_ids,
        "resourceId": resource_ids,
    }[key]
    return ledger


class TestAggregateOrdering:
    """Entity types run one after another, close happens once at the end."""

    def test_challenge_pass_completes_before_resource(self) -> None:
        events: list[tuple[str, str, list[Any]]] = []
        ledger = _ledger(["c1", "c2", "c3", "c4"], [1, 2])
        coordinator = RetryCoordinator(
            {
                EntityType.CHALLENGE: EventLogMigrator("Challenge", events),
                EntityType.RESOURCE: EventLogMigrator("Resource", events),
            },
            ledger,
            batch_size=3,
        )

        outcome = coordinator.retry_all(MagicMock())

        names = [name for name, _, _ in events]
        assert names == ["Challenge"] * 4 + ["Resource"] * 2
        assert events[-2] == ("Resource", "fetch", [1, 2])
        assert outcome.succeeded
        assert [o.entity_type for o in outcome.outcomes] == [
            EntityType.CHALLENGE,
            EntityType.RESOURCE,
        ]

    def test_close_called_once_after_both_passes(self) -> None:
        events: list[tuple[str, str, list[Any]]] = []
        ledger = _ledger(["c1"], [1])
        ledger.close.side_effect = lambda: events.append(("ledger", "close", []))
        coordinator = RetryCoordinator(
            {
                EntityType.CHALLENGE: EventLogMigrator("Challenge", events),
                EntityType.RESOURCE: EventLogMigrator("Resource", events),
            },
            ledger,
            batch_size=3,
        )

        coordinator.retry_all(MagicMock())

        assert ledger.close.call_count == 1
        assert events[-1] == ("ledger", "close", [])

    def test_completion_notice_logged_once(self) -> None:
        coordinator = RetryCoordinator(
            {EntityType.CHALLENGE: EventLogMigrator("Challenge", [])},
            _ledger(["c1"], []),
            batch_size=3,
        )

        with capture_logs() as logs:
            coordinator.retry_all(MagicMock())

        notices = [log for log in logs if log.get("notice") == COMPLETION_NOTICE]
        assert len(notices) == 1
        assert notices[0]["log_level"] == "info"

    def test_empty_ledger(self) -> None:
        ledger = _ledger([], [])
        challenge = MagicMock()
        resource = MagicMock()
        coordinator = RetryCoordinator(
            {EntityType.CHALLENGE: challenge, EntityType.RESOURCE: resource},
            ledger,
            batch_size=5,
        )

        outcome = coordinator.retry_all(MagicMock())

        challenge.fetch_and_migrate.assert_not_called()
        resource.fetch_and_migrate.assert_not_called()
        assert outcome.succeeded
        ledger.close.assert_called_once()


class TestFatalErrorPolicy:
    """HALT skips the remaining entity types, CONTINUE runs them."""

    def _coordinator(
        self, events: list[tuple[str, str, list[Any]]], ledger: MagicMock, policy: FatalErrorPolicy
    ) -> RetryCoordinator:
        return RetryCoordinator(
            {
                EntityType.CHALLENGE: EventLogMigrator("Challenge", events, fail=True),
                EntityType.RESOURCE: EventLogMigrator("Resource", events),
            },
            ledger,
            batch_size=2,
            policy=policy,
        )

    def test_halt_skips_remaining(self) -> None:
        events: list[tuple[str, str, list[Any]]] = []
        ledger = _ledger(["c1", "c2", "c3"], [1])

        outcome = self._coordinator(events, ledger, FatalErrorPolicy.HALT).retry_all(MagicMock())

        assert events == [("Challenge", "fetch", ["c1", "c2"])]
        assert outcome.succeeded is False
        assert outcome.skipped == [EntityType.RESOURCE]
        assert len(outcome.errors) == 1
        ledger.close.assert_called_once()

    def test_continue_runs_remaining(self) -> None:
        events: list[tuple[str, str, list[Any]]] = []
        ledger = _ledger(["c1", "c2", "c3"], [1])

        outcome = self._coordinator(events, ledger, FatalErrorPolicy.CONTINUE).retry_all(
            MagicMock()
        )

        assert ("Resource", "fetch", [1]) in events
        assert outcome.succeeded is False
        assert outcome.skipped == []
        assert [o.succeeded for o in outcome.outcomes] == [False, True]
        ledger.mark_resolved.assert_called_once_with("resourceId", [1])
        ledger.close.assert_called_once()

    def test_no_completion_notice_after_halt(self) -> None:
        coordinator = RetryCoordinator(
            {EntityType.CHALLENGE: EventLogMigrator("Challenge", [], fail=True)},
            _ledger(["c1"], []),
            batch_size=3,
        )

        with capture_logs() as logs:
            coordinator.retry_all(MagicMock())

        assert not [log for log in logs if log.get("notice") == COMPLETION_NOTICE]
        assert "aggregate_retry_failed" in [log["event"] for log in logs]


class TestWithRealLedger:
    """Aggregate run over a real SQLite-backed ledger."""

    def test_failed_type_keeps_ids_and_resolved_type_is_cleared(
        self, ledger: ErrorLedger, failure_repo: FailureRepository
    ) -> None:
        failure_repo.add_failures(
            [
                FailureRecord(entity_type_key="challengeId", entity_id="c1"),
                FailureRecord(entity_type_key="resourceId", entity_id=1),
                FailureRecord(entity_type_key="resourceId", entity_id=2),
            ]
        )
        events: list[tuple[str, str, list[Any]]] = []
        coordinator = RetryCoordinator(
            {
                EntityType.CHALLENGE: EventLogMigrator("Challenge", events, fail=True),
                EntityType.RESOURCE: EventLogMigrator("Resource", events),
            },
            ledger,
            batch_size=10,
            policy=FatalErrorPolicy.CONTINUE,
        )

        coordinator.retry_all(MagicMock())

        assert ledger.closed is True
        assert failure_repo.get_failed_ids("challengeId") == ["c1"]
        assert failure_repo.get_failed_ids("resourceId") == []
