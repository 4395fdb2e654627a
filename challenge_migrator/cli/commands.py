"""CLI command implementations for the migration retry tool."""

from __future__ import annotations

import sys
from typing import Any

import click

from challenge_migrator.core.exceptions import MigratorLoadError
from challenge_migrator.models.config import Config
from challenge_migrator.models.entity_type import EntityType
from challenge_migrator.repositories.failure_repository import FailureRepository
from challenge_migrator.services.database import Database
from challenge_migrator.services.error_ledger import ErrorLedger
from challenge_migrator.utils.logger import configure_logging

_ENTITY_CHOICES = [entity.value for entity in EntityType]


def _get_config() -> Config:
    """Load configuration from .env file."""
    return Config()


def _get_db(config: Config) -> Database:
    """Initialize database with schema."""
    db = Database(db_path=config.database_path)
    db.init_db()
    return db


def _get_ledger(config: Config, db: Database) -> ErrorLedger:
    return ErrorLedger(FailureRepository(db), write_attempts=config.ledger_write_attempts)


def _print_summary(title: str, stats: dict[str, Any], ok: bool = True) -> None:
    """Print a formatted summary of a retry pass."""
    click.echo(f"\n[{'SUCCESS' if ok else 'ERROR'}] {title}")
    for key, value in stats.items():
        if key == "error" and value is None:
            continue
        click.echo(f"  {key}: {value}")


@click.command()
@click.option(
    "--entity",
    default="ALL",
    type=click.Choice([*_ENTITY_CHOICES, "ALL"]),
    help="Entity type to retry, or ALL for every type in order",
)
@click.option(
    "--batch-size",
    default=None,
    type=click.IntRange(1, 1000),
    help="Records per batch (defaults to BATCH_SIZE)",
)
def retry(entity: str, batch_size: int | None) -> None:
    """Retry migration of the items recorded in the error ledger."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from challenge_migrator.services.migrator_registry import load_migrators
    from challenge_migrator.services.retry_coordinator import COMPLETION_NOTICE, RetryCoordinator
    from challenge_migrator.services.retry_driver import BatchRetryDriver
    from challenge_migrator.utils.progress import ClickProgressReporter

    ledger = _get_ledger(config, db)
    size = batch_size or config.batch_size
    reporter = ClickProgressReporter()

    try:
        if entity == "ALL":
            migrators = load_migrators(config, ledger)
            coordinator = RetryCoordinator(migrators, ledger, size, config.fatal_error_policy)
            click.echo(f"[INFO] Retrying all entity types (batch size: {size})...")
            aggregate = coordinator.retry_all(reporter)
            outcomes = aggregate.outcomes
            succeeded = aggregate.succeeded
            for skipped in aggregate.skipped:
                click.echo(f"[WARN] Skipped {skipped} after a fatal error", err=True)
        else:
            entity_type = EntityType(entity)
            migrators = load_migrators(config, ledger, [entity_type])
            driver = BatchRetryDriver(entity_type, migrators[entity_type], ledger, size)
            click.echo(f"[INFO] Retrying {entity_type} failures (batch size: {size})...")
            outcome = driver.run(reporter, close_ledger=True)
            outcomes = [outcome]
            succeeded = outcome.succeeded
    except MigratorLoadError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        db.close()

    for outcome in outcomes:
        _print_summary(f"{outcome.entity_type} retry", outcome.summary(), ok=outcome.succeeded)

    if not succeeded:
        sys.exit(1)
    if entity == "ALL":
        click.echo(f"\n[INFO] {COMPLETION_NOTICE}")


@click.command()
@click.option(
    "--entity",
    default=None,
    type=click.Choice(_ENTITY_CHOICES),
    help="Only show this entity type",
)
@click.option("--show-ids", is_flag=True, help="Print the failed IDs")
def list_failures(entity: str | None, show_ids: bool) -> None:
    """Show failed items recorded in the error ledger."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)
    ledger = _get_ledger(config, db)

    entity_types = [EntityType(entity)] if entity else list(EntityType)
    counts = ledger.count_by_type()

    for entity_type in entity_types:
        key = entity_type.ledger_key
        click.echo(f"{entity_type} ({key}): {counts.get(key, 0)} failed")
        if show_ids:
            for entity_id in ledger.get_error_ids(key):
                click.echo(f"  - {entity_id}")
    db.close()


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def import_errors(path: str) -> None:
    """Load a JSON error-log file into the error ledger."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)
    ledger = _get_ledger(config, db)

    try:
        added = ledger.import_error_log(path)
    except ValueError as exc:
        raise click.ClickException(f"Invalid error log: {exc}") from exc
    finally:
        db.close()

    click.echo(f"[SUCCESS] Imported {added} failure records from {path}")


@click.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option(
    "--entity",
    default=None,
    type=click.Choice(_ENTITY_CHOICES),
    help="Only export this entity type",
)
def export_errors(path: str, entity: str | None) -> None:
    """Write the error ledger to a JSON error-log file."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)
    ledger = _get_ledger(config, db)

    key = EntityType(entity).ledger_key if entity else None
    written = ledger.export_error_log(path, key)
    db.close()

    click.echo(f"[SUCCESS] Exported {written} failure records to {path}")
