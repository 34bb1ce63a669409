"""FactoryBuilder: trait selection and the build/save pipeline."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from seed_factories.exceptions import (
    AsyncCallbackError,
    BuildRecipeMissingError,
)
from seed_factories.factory import Factory
from seed_factories.models import AfterSaveCallback, Association, Options

if TYPE_CHECKING:
    from seed_factories.registry import FactoryRegistry

logger = logging.getLogger(__name__)


class FactoryBuilder:
    """
    Per-call builder bound to one Factory.

    Usage:
        >>> user = factory(User).with_traits("with_posts", "admin").save_one({"name": "John"})
        >>> users = factory(User).save_many(3)
        >>> user = await factory(User).asave_one()

    Every save runs, in order: build recipe, first save, selected traits,
    second save, deferred trait callbacks, many-associations, one-associations,
    after-save hook (followed by a save). Errors from any step propagate
    unchanged; entities saved before the failure stay saved.
    """

    def __init__(self, factory: Factory, registry: FactoryRegistry):
        self.factory = factory
        self.registry = registry
        self._traits: tuple[str, ...] = ()

    @property
    def traits(self) -> tuple[str, ...]:
        """Currently selected trait names, in application order."""
        return self._traits

    def with_traits(self, *names: str) -> FactoryBuilder:
        """
        Select traits for the next save call(s), replacing any previous selection.

        Names are resolved when saving, not here.
        """
        self._traits = tuple(names)
        return self

    # ------------------------------------------------------------------
    # Synchronous pipeline
    # ------------------------------------------------------------------

    def save_one(self, options: Optional[Options] = None) -> Any:
        """
        Build, persist and return one fully-resolved entity.

        Args:
            options: Passed to the build recipe (copied); association
                back-references arrive here too

        Returns:
            The saved entity

        Raises:
            BuildRecipeMissingError: If the factory has no build recipe
            TraitNotFoundError: If a selected trait is not defined
            AsyncCallbackError: If a persister or callback returns an awaitable
        """
        entity = self._build(options)
        if inspect.isawaitable(entity):
            _discard(entity)
            raise AsyncCallbackError(self.factory.entity_name, "Build recipe")
        self._persist(entity, "first save")

        deferred: list[AfterSaveCallback] = []
        for name in self._traits:
            trait = self.factory.get_trait(name)
            result = self._call(trait, entity, f"Trait '{name}'")
            self._queue_deferred(deferred, result)
            logger.debug(f"Applied trait '{name}' to {self.factory.entity_name}")

        self._persist(entity, "trait save")

        for callback in deferred:
            self._call(callback, entity, "Trait after-save callback")

        for association in self.factory.associations_many:
            if association.is_satisfied(entity):
                continue
            related = self._target_builder(association).save_many(
                association.count, association.build_options(entity)
            )
            self._attach(entity, association, related)

        for association in self.factory.associations_one:
            if association.is_satisfied(entity):
                continue
            related = self._target_builder(association).save_one(
                association.build_options(entity)
            )
            self._attach(entity, association, related)

        if self.factory.after_save_hook is not None:
            self._call(self.factory.after_save_hook, entity, "after_save hook")
            self._persist(entity, "after_save hook save")

        return entity

    def save_many(self, count: int, options: Optional[Options] = None) -> list[Any]:
        """
        Save ``count`` entities one after another, returned in creation order.

        Raises:
            ValueError: If count is negative or not an integer
        """
        self._check_count(count)
        return [self.save_one(options) for _ in range(count)]

    def _persist(self, entity: Any, stage: str) -> None:
        result = self.registry.persister.save(entity)
        if inspect.isawaitable(result):
            _discard(result)
            raise AsyncCallbackError(self.factory.entity_name, "Persister")
        logger.debug(f"Persisted {self.factory.entity_name} ({stage})")

    def _call(self, callback: Callable[[Any], Any], entity: Any, step: str) -> Any:
        result = callback(entity)
        if inspect.isawaitable(result):
            _discard(result)
            raise AsyncCallbackError(self.factory.entity_name, step)
        return result

    def _attach(self, entity: Any, association: Association, related: Any) -> None:
        setattr(entity, association.property_name, related)
        self._persist(entity, f"association '{association.property_name}'")
        logger.debug(
            f"Resolved {association.kind.value} association "
            f"{self.factory.entity_name}.{association.property_name}"
        )

    # ------------------------------------------------------------------
    # Asynchronous pipeline
    # ------------------------------------------------------------------

    async def asave_one(self, options: Optional[Options] = None) -> Any:
        """
        Async version of save_one().

        Persister results, traits, deferred callbacks and the after-save hook
        may be coroutine functions; each result is awaited before the next step.
        """
        entity = await _resolve(self._build(options))
        await self._apersist(entity, "first save")

        deferred: list[AfterSaveCallback] = []
        for name in self._traits:
            trait = self.factory.get_trait(name)
            result = await _resolve(trait(entity))
            self._queue_deferred(deferred, result)
            logger.debug(f"Applied trait '{name}' to {self.factory.entity_name}")

        await self._apersist(entity, "trait save")

        for callback in deferred:
            await _resolve(callback(entity))

        for association in self.factory.associations_many:
            if association.is_satisfied(entity):
                continue
            related = await self._target_builder(association).asave_many(
                association.count, association.build_options(entity)
            )
            await self._aattach(entity, association, related)

        for association in self.factory.associations_one:
            if association.is_satisfied(entity):
                continue
            related = await self._target_builder(association).asave_one(
                association.build_options(entity)
            )
            await self._aattach(entity, association, related)

        if self.factory.after_save_hook is not None:
            await _resolve(self.factory.after_save_hook(entity))
            await self._apersist(entity, "after_save hook save")

        return entity

    async def asave_many(self, count: int, options: Optional[Options] = None) -> list[Any]:
        """Async version of save_many(); builds never overlap."""
        self._check_count(count)
        entities = []
        for _ in range(count):
            entities.append(await self.asave_one(options))
        return entities

    async def _apersist(self, entity: Any, stage: str) -> None:
        await _resolve(self.registry.persister.save(entity))
        logger.debug(f"Persisted {self.factory.entity_name} ({stage})")

    async def _aattach(self, entity: Any, association: Association, related: Any) -> None:
        setattr(entity, association.property_name, related)
        await self._apersist(entity, f"association '{association.property_name}'")
        logger.debug(
            f"Resolved {association.kind.value} association "
            f"{self.factory.entity_name}.{association.property_name}"
        )

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    def _build(self, options: Optional[Options]) -> Any:
        recipe = self.factory.build_recipe
        if recipe is None:
            raise BuildRecipeMissingError(self.factory.entity_name)
        entity = recipe(dict(options or {}))
        logger.debug(f"Built {self.factory.entity_name} with options {sorted(options or {})}")
        return entity

    def _queue_deferred(self, deferred: list[AfterSaveCallback], result: Any) -> None:
        # Only callables are after-save callbacks; other return values are ignored
        if callable(result):
            deferred.append(result)

    def _target_builder(self, association: Association) -> FactoryBuilder:
        return self.registry.lookup(association.target)

    def _check_count(self, count: int) -> None:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError(f"count must be a non-negative integer, got {count!r}")

    def __repr__(self) -> str:
        return f"FactoryBuilder({self.factory.entity_name!r}, traits={list(self._traits)})"


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _discard(awaitable: Any) -> None:
    close = getattr(awaitable, "close", None)
    if close is not None:
        close()
