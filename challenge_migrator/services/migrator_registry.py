"""Load the configured entity migrators from 'module:factory' import paths."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any

import structlog

from challenge_migrator.core.exceptions import MigratorLoadError
from challenge_migrator.models.entity_type import EntityType

if TYPE_CHECKING:
    from challenge_migrator.models.config import Config
    from challenge_migrator.services.error_ledger import ErrorLedger
    from challenge_migrator.services.protocols import EntityMigratorProtocol

logger = structlog.get_logger(__name__)

_REQUIRED_METHODS = ("fetch_and_migrate", "persist")


def configured_paths(config: Config) -> dict[EntityType, str | None]:
    """Import path configured for each entity type, in retry order."""
    return {
        EntityType.CHALLENGE: config.challenge_migrator,
        EntityType.RESOURCE: config.resource_migrator,
    }


def resolve_factory(path: str) -> Any:
    """Import ``module:attribute`` and return the attribute."""
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        msg = f"Invalid migrator path '{path}', expected 'module:factory'"
        raise MigratorLoadError(msg)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import migrator module '{module_name}': {exc}"
        raise MigratorLoadError(msg) from exc
    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        msg = f"Module '{module_name}' has no attribute '{attribute}'"
        raise MigratorLoadError(msg) from exc


def build_migrator(path: str, ledger: ErrorLedger) -> EntityMigratorProtocol:
    """Call the factory at ``path`` with the ledger and check the result's interface."""
    factory = resolve_factory(path)
    if not callable(factory):
        msg = f"Migrator factory '{path}' is not callable"
        raise MigratorLoadError(msg)
    migrator = factory(ledger)
    missing = [name for name in _REQUIRED_METHODS if not callable(getattr(migrator, name, None))]
    if missing:
        msg = f"Migrator from '{path}' lacks {', '.join(missing)}"
        raise MigratorLoadError(msg)
    return migrator


def load_migrators(
    config: Config,
    ledger: ErrorLedger,
    entity_types: list[EntityType] | None = None,
) -> dict[EntityType, EntityMigratorProtocol]:
    """Build migrators for the requested entity types (all known types by default)."""
    paths = configured_paths(config)
    wanted = entity_types if entity_types is not None else list(EntityType)
    migrators: dict[EntityType, EntityMigratorProtocol] = {}
    for entity_type in wanted:
        path = paths[entity_type]
        if path is None:
            msg = f"No migrator configured for {entity_type} (set {entity_type.upper()}_MIGRATOR)"
            raise MigratorLoadError(msg)
        migrators[entity_type] = build_migrator(path, ledger)
        logger.debug("migrator_loaded", entity_type=str(entity_type), path=path)
    return migrators
