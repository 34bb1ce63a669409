"""
seed-factories - Test Data Factories for ORM Entities

Declare how to build each entity type, optional named traits and
associations, then save fully-populated, persisted instances on demand.
"""

from seed_factories.builder import FactoryBuilder
from seed_factories.config import FactorySettings
from seed_factories.exceptions import (
    AsyncCallbackError,
    BuildRecipeMissingError,
    FactoryDefinitionError,
    FactoryNotRegisteredError,
    SeedFactoriesError,
    TraitNotFoundError,
)
from seed_factories.factory import Factory
from seed_factories.models import Association, AssociationKind
from seed_factories.persistence import (
    ActiveRecordPersister,
    AsyncSessionPersister,
    Persister,
    RecordingPersister,
    SessionPersister,
)
from seed_factories.registry import (
    FactoryRegistry,
    configure,
    define,
    factory,
    get_registry,
    reset_registry,
    set_registry,
)

__version__ = "0.1.0"

__all__ = [
    "define",
    "factory",
    "configure",
    "get_registry",
    "set_registry",
    "reset_registry",
    "Factory",
    "FactoryBuilder",
    "FactoryRegistry",
    "FactorySettings",
    "Association",
    "AssociationKind",
    "Persister",
    "ActiveRecordPersister",
    "SessionPersister",
    "AsyncSessionPersister",
    "RecordingPersister",
    "SeedFactoriesError",
    "FactoryNotRegisteredError",
    "TraitNotFoundError",
    "BuildRecipeMissingError",
    "FactoryDefinitionError",
    "AsyncCallbackError",
]
