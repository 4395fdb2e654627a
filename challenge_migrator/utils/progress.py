"""Progress reporters for batch retry passes."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import click

from challenge_migrator.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LoggingProgressReporter:
    """Report batch progress as structured log events."""

    prefix: str = ""
    text: str = ""
    succeeded: int = 0
    failed: int = 0
    failures: list[str] = field(default_factory=list)
    phase_started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed_seconds(self) -> float:
        """Time elapsed since the current phase started."""
        return time.monotonic() - self.phase_started_at

    def start(self, prefix: str, text: str) -> None:
        self.prefix = prefix
        self.text = text
        self.phase_started_at = time.monotonic()
        logger.info("batch_started", batch=prefix, status=text)

    def update(self, text: str) -> None:
        self.text = text
        logger.debug("batch_status", batch=self.prefix, status=text)

    def succeed(self, text: str | None = None) -> None:
        if text is not None:
            self.text = text
        self.succeeded += 1
        logger.info(
            "batch_succeeded",
            batch=self.prefix,
            status=self.text,
            elapsed=f"{self.elapsed_seconds:.1f}s",
        )

    def fail(self, text: str) -> None:
        self.text = text
        self.failed += 1
        self.failures.append(text)
        logger.error("batch_failed", batch=self.prefix, status=text)

    def summary(self) -> dict[str, int | list[str]]:
        """Return summary statistics."""
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": self.failures,
        }


@dataclass
class ClickProgressReporter:
    """Report batch progress as terminal lines."""

    prefix: str = ""
    text: str = ""

    def _line(self, mark: str, text: str) -> str:
        return f"[{mark}] {self.prefix} {text}".rstrip()

    def start(self, prefix: str, text: str) -> None:
        self.prefix = prefix
        self.text = text
        click.echo(self._line("....", text))

    def update(self, text: str) -> None:
        self.text = text

    def succeed(self, text: str | None = None) -> None:
        if text is not None:
            self.text = text
        click.echo(self._line("OK", self.text))

    def fail(self, text: str) -> None:
        self.text = text
        click.echo(self._line("FAIL", text), err=True)
