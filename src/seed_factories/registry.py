"""Factory registry: maps entity types to their factory definitions."""

import logging
from collections.abc import Callable
from typing import Optional

from seed_factories.builder import FactoryBuilder
from seed_factories.exceptions import FactoryNotRegisteredError
from seed_factories.factory import Factory
from seed_factories.models import EntityType, entity_name
from seed_factories.persistence import ActiveRecordPersister, Persister

logger = logging.getLogger(__name__)

DefinitionCallback = Callable[[Factory], None]


class FactoryRegistry:
    """
    Registry of factory definitions, keyed by entity type.

    The registry also owns the persister used by every builder it hands out,
    including builders created for associations.
    """

    def __init__(self, persister: Optional[Persister] = None):
        self.persister: Persister = persister if persister is not None else ActiveRecordPersister()
        self._factories: dict[EntityType, Factory] = {}

    def register(self, entity_type: EntityType, definition: DefinitionCallback) -> None:
        """
        Register a factory for an entity type.

        Args:
            entity_type: Entity class (or any hashable key)
            definition: Called with a fresh Factory to configure it

        Re-registering an entity type replaces the previous factory.
        """
        factory = Factory(entity_type)
        definition(factory)
        if entity_type in self._factories:
            logger.debug(f"Replacing factory for {factory.entity_name}")
        self._factories[entity_type] = factory
        logger.debug(f"Registered {factory!r}")

    def get_factory(self, entity_type: EntityType) -> Factory:
        """
        Get the registered factory for an entity type.

        Raises:
            FactoryNotRegisteredError: If nothing is registered for entity_type
        """
        try:
            return self._factories[entity_type]
        except KeyError:
            raise FactoryNotRegisteredError(entity_name(entity_type)) from None

    def lookup(self, entity_type: EntityType) -> FactoryBuilder:
        """
        Get a builder for an entity type.

        Raises:
            FactoryNotRegisteredError: If nothing is registered for entity_type
        """
        return FactoryBuilder(self.get_factory(entity_type), self)

    def is_registered(self, entity_type: EntityType) -> bool:
        return entity_type in self._factories

    def registered_names(self) -> list[str]:
        """
        List registered entity names.

        Returns:
            Entity names in registration order
        """
        return [factory.entity_name for factory in self._factories.values()]

    def clear(self) -> None:
        """Remove all factories (for testing)."""
        self._factories.clear()

    def __len__(self) -> int:
        return len(self._factories)


# Global registry instance
_registry = FactoryRegistry()


def define(entity_type: EntityType, definition: DefinitionCallback) -> None:
    """
    Register a factory on the default registry (user-facing API).

    Example:
        >>> def define_user(f):
        ...     f.build(lambda options: User(name=options.get("name", "John Doe")))
        ...     f.trait("admin", lambda user: setattr(user, "role", "admin"))
        >>>
        >>> define(User, define_user)
    """
    _registry.register(entity_type, definition)


def factory(entity_type: EntityType) -> FactoryBuilder:
    """
    Get a builder from the default registry.

    Example:
        >>> factory(User).with_traits("admin").save_one({"name": "Minh Ngo"})
    """
    return _registry.lookup(entity_type)


def get_registry() -> FactoryRegistry:
    return _registry


def set_registry(registry: FactoryRegistry) -> FactoryRegistry:
    """
    Install a registry as the process default.

    Returns:
        The previously installed registry, so callers can restore it
    """
    global _registry
    previous = _registry
    _registry = registry
    return previous


def reset_registry(persister: Optional[Persister] = None) -> FactoryRegistry:
    """Install and return a fresh, empty default registry."""
    registry = FactoryRegistry(persister)
    set_registry(registry)
    return registry


def configure(persister: Persister) -> None:
    """Set the persister of the default registry."""
    _registry.persister = persister
