"""Factory definition: build recipe, traits, associations and after-save hook."""

from typing import Any, Optional

from seed_factories.exceptions import FactoryDefinitionError, TraitNotFoundError
from seed_factories.models import (
    AfterSaveCallback,
    Association,
    AssociationKind,
    BuildRecipe,
    EntityType,
    Options,
    TraitCallback,
    entity_name,
)


class Factory:
    """
    Recipe for producing persisted instances of one entity type.

    A Factory is created by the registry and handed to the definition callback,
    which configures it:

        >>> def define_user(f):
        ...     f.build(lambda options: User(name=options.get("name", "John Doe")))
        ...     f.trait("admin", lambda user: setattr(user, "role", "admin"))
        ...     f.association_many("posts", "user", Post, count=3)
        >>>
        >>> define(User, define_user)

    The build recipe receives the save-time options dict and is solely
    responsible for applying them; unconsumed keys are never copied onto the
    entity.
    """

    def __init__(self, entity_type: EntityType):
        self.entity_type = entity_type
        self.build_recipe: Optional[BuildRecipe] = None
        self.after_save_hook: Optional[AfterSaveCallback] = None
        self.traits: dict[str, TraitCallback] = {}
        self.associations: dict[str, Association] = {}

    @property
    def entity_name(self) -> str:
        return entity_name(self.entity_type)

    @property
    def associations_many(self) -> list[Association]:
        return [a for a in self.associations.values() if a.kind is AssociationKind.MANY]

    @property
    def associations_one(self) -> list[Association]:
        return [a for a in self.associations.values() if a.kind is AssociationKind.ONE]

    def trait(self, name: str, callback: TraitCallback) -> None:
        """
        Register or overwrite a named trait.

        Args:
            name: Trait name used in with_traits()
            callback: Called with the saved entity; may mutate it and may return
                a callable that runs after the entity is saved again

        Raises:
            FactoryDefinitionError: If name is empty or callback is not callable
        """
        if not isinstance(name, str) or not name:
            raise FactoryDefinitionError(self.entity_name, "trait name must be a non-empty string")
        self._require_callable(callback, f"trait '{name}'")
        self.traits[name] = callback

    def build(self, recipe: BuildRecipe) -> None:
        """Set the build recipe: ``recipe(options) -> unsaved entity``."""
        self._require_callable(recipe, "build recipe")
        self.build_recipe = recipe

    def after_save(self, callback: AfterSaveCallback) -> None:
        """Set the hook run once the entity and its associations are saved."""
        self._require_callable(callback, "after_save hook")
        self.after_save_hook = callback

    def association_many(
        self,
        property_name: str,
        relation_property_name: str,
        target: EntityType,
        count: int,
        options: Optional[Options] = None,
    ) -> None:
        """
        Declare a one-to-many association.

        Unless ``property_name`` is already populated after traits run, ``count``
        entities of ``target`` are saved with ``relation_property_name`` set to
        the owner, then assigned to the owner's ``property_name`` as a list.

        Raises:
            FactoryDefinitionError: If count is not a non-negative integer
        """
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise FactoryDefinitionError(
                self.entity_name,
                f"association '{property_name}' count must be a non-negative integer, got {count!r}",
            )
        self._add_association(
            property_name, relation_property_name, target, AssociationKind.MANY, count, options
        )

    def association_one(
        self,
        property_name: str,
        relation_property_name: str,
        target: EntityType,
        options: Optional[Options] = None,
    ) -> None:
        """Declare a one-to-one association (single related entity)."""
        self._add_association(
            property_name, relation_property_name, target, AssociationKind.ONE, 1, options
        )

    def get_trait(self, name: str) -> TraitCallback:
        """
        Resolve a trait callback by name.

        Raises:
            TraitNotFoundError: If no trait is registered under name
        """
        try:
            return self.traits[name]
        except KeyError:
            raise TraitNotFoundError(name, self.entity_name) from None

    def _add_association(
        self,
        property_name: str,
        relation_property_name: str,
        target: EntityType,
        kind: AssociationKind,
        count: int,
        options: Optional[Options],
    ) -> None:
        for label, value in (
            ("property name", property_name),
            ("relation property name", relation_property_name),
        ):
            if not isinstance(value, str) or not value:
                raise FactoryDefinitionError(
                    self.entity_name, f"association {label} must be a non-empty string"
                )
        if target is None:
            raise FactoryDefinitionError(
                self.entity_name, f"association '{property_name}' has no target entity type"
            )

        self.associations[property_name] = Association(
            property_name=property_name,
            relation_property_name=relation_property_name,
            target=target,
            kind=kind,
            count=count,
            options=dict(options or {}),
        )

    def _require_callable(self, value: Any, what: str) -> None:
        if not callable(value):
            raise FactoryDefinitionError(
                self.entity_name, f"{what} must be callable, got {type(value).__name__}"
            )

    def __repr__(self) -> str:
        return (
            f"Factory({self.entity_name!r}, traits={sorted(self.traits)}, "
            f"associations={list(self.associations)})"
        )
