"""Unit tests for utility modules: progress reporters and retry decorator."""

from __future__ import annotations

import sqlite3

import pytest

from challenge_migrator.utils.progress import ClickProgressReporter, LoggingProgressReporter
from challenge_migrator.utils.retry import retry_with_logging


class TestLoggingProgressReporter:
    """Tests for LoggingProgressReporter."""

    def test_initial_state(self) -> None:
        reporter = LoggingProgressReporter()
        assert reporter.succeeded == 0
        assert reporter.failed == 0
        assert reporter.failures == []

    def test_start_sets_prefix_and_text(self) -> None:
        reporter = LoggingProgressReporter()
        reporter.start("Batch-1", "Loading challenges")
        assert reporter.prefix == "Batch-1"
        assert reporter.text == "Loading challenges"

    def test_update_changes_text(self) -> None:
        reporter = LoggingProgressReporter()
        reporter.start("Batch-1", "Loading challenges")
        reporter.update("Done")
        assert reporter.text == "Done"

    def test_succeed_counts(self) -> None:
        reporter = LoggingProgressReporter()
        reporter.start("Batch-1", "Loading")
        reporter.succeed()
        reporter.start("Batch-2", "Loading")
        reporter.succeed("Saved")
        assert reporter.succeeded == 2
        assert reporter.text == "Saved"

    def test_fail_records_message(self) -> None:
        reporter = LoggingProgressReporter()
        reporter.start("Batch-2", "Loading resources")
        reporter.fail("Fail to load resources on batch 2")
        assert reporter.failed == 1
        assert reporter.summary() == {
            "succeeded": 0,
            "failed": 1,
            "failures": ["Fail to load resources on batch 2"],
        }

    def test_elapsed_non_negative(self) -> None:
        reporter = LoggingProgressReporter()
        reporter.start("Batch-1", "Loading")
        assert reporter.elapsed_seconds >= 0.0


class TestClickProgressReporter:
    """Tests for ClickProgressReporter."""

    def test_start_and_succeed_lines(self, capsys: pytest.CaptureFixture[str]) -> None:
        reporter = ClickProgressReporter()
        reporter.start("Batch-3", "Loading challenges")
        reporter.update("Done")
        reporter.succeed()
        out = capsys.readouterr().out.splitlines()
        assert out == ["[....] Batch-3 Loading challenges", "[OK] Batch-3 Done"]

    def test_fail_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        reporter = ClickProgressReporter()
        reporter.start("Batch-1", "Loading resources")
        reporter.fail("Fail to load resources on batch 1")
        captured = capsys.readouterr()
        assert "[FAIL] Batch-1 Fail to load resources on batch 1" in captured.err


class TestRetryWithLogging:
    """Tests for retry_with_logging."""

    def test_retries_operational_error(self) -> None:
        calls: list[int] = []

        @retry_with_logging(max_attempts=3, min_wait=0, max_wait=0)
        def flaky() -> str:
            calls.append(1)
            if len(calls) < 3:
                raise sqlite3.OperationalError("database is locked")
            return "ok"

        assert flaky() == "ok"
        assert len(calls) == 3

    def test_reraises_after_max_attempts(self) -> None:
        calls: list[int] = []

        @retry_with_logging(max_attempts=2, min_wait=0, max_wait=0)
        def always_locked() -> None:
            calls.append(1)
            raise sqlite3.OperationalError("database is locked")

        with pytest.raises(sqlite3.OperationalError):
            always_locked()
        assert len(calls) == 2

    def test_other_errors_not_retried(self) -> None:
        calls: list[int] = []

        @retry_with_logging(max_attempts=3, min_wait=0, max_wait=0)
        def broken() -> None:
            calls.append(1)
            raise ValueError("bad data")

        with pytest.raises(ValueError):
            broken()
        assert len(calls) == 1

    def test_preserves_name(self) -> None:
        @retry_with_logging()
        def named_operation() -> None:
            return None

        assert named_operation.__name__ == "named_operation"
