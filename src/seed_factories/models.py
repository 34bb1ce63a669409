"""Data models and type definitions."""

from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

EntityType = Hashable
Options = dict[str, Any]

BuildRecipe = Callable[[Options], Any]
AfterSaveCallback = Callable[[Any], Union[None, Awaitable[None]]]
TraitCallback = Callable[[Any], Union[None, AfterSaveCallback, Awaitable[Optional[AfterSaveCallback]]]]


class AssociationKind(Enum):
    """Cardinality of a declared association."""

    MANY = "many"
    ONE = "one"


@dataclass(frozen=True)
class Association:
    """
    Declared relationship from an owning entity to entities of another type.

    Attributes:
        property_name: Attribute on the owner that receives the related entity/entities
        relation_property_name: Attribute on the related entity pointing back at the owner
        target: Entity type of the related entities
        kind: MANY (list of ``count`` entities) or ONE (single entity)
        count: Number of related entities for MANY associations
        options: Extra options passed to the target factory's build recipe
    """

    property_name: str
    relation_property_name: str
    target: EntityType
    kind: AssociationKind
    count: int = 1
    options: Options = field(default_factory=dict)

    def build_options(self, owner: Any) -> Options:
        """Options for the target build: declared options plus the back-reference."""
        return {**self.options, self.relation_property_name: owner}

    def is_satisfied(self, owner: Any) -> bool:
        """True when the owner's property is already populated."""
        return bool(getattr(owner, self.property_name, None))


def entity_name(entity_type: EntityType) -> str:
    """Display name for an entity type (class name or key)."""
    return getattr(entity_type, "__name__", None) or str(entity_type)


@dataclass
class FactoryPlan:
    """
    Plan for saving entities of one type before a test runs.

    Attributes:
        entity_type: Registered entity type
        count: Number of entities to save
        traits: Trait names applied to each entity
        options: Options passed to the build recipe
    """

    entity_type: EntityType
    count: int = 1
    traits: tuple[str, ...] = ()
    options: Options = field(default_factory=dict)


class SavedEntities:
    """
    Entities saved for a test, grouped by entity name.

    Allows accessing groups as attributes or items:
        entities.User      # List of saved User entities
        entities["Post"]   # List of saved Post entities
    """

    def __init__(self):
        self._groups: dict[str, list[Any]] = {}

    def add(self, name: str, entities: list[Any]) -> None:
        """Append entities to the group for name."""
        self._groups.setdefault(name, []).extend(entities)

    def names(self) -> list[str]:
        return list(self._groups)

    def __getattr__(self, name: str) -> list[Any]:
        if name.startswith("_"):
            raise AttributeError(f"No attribute '{name}'")
        if name in self._groups:
            return self._groups[name]
        raise AttributeError(f"No entities saved for '{name}'")

    def __getitem__(self, name: str) -> list[Any]:
        return self._groups[name]

    def __contains__(self, name: object) -> bool:
        return name in self._groups
