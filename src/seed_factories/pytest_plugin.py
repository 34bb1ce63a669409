"""Pytest fixtures and decorators for factory-built test data.

Loaded automatically through the ``pytest11`` entry point. Override
``factory_persister`` to persist through your ORM session and
``factory_definitions`` to register factories:

    @pytest.fixture
    def factory_persister(session):
        return SessionPersister(session)

    @pytest.fixture
    def factory_definitions(factory_registry):
        factory_registry.register(User, define_user)

    @with_factories(User, count=2, traits=["admin"])
    def test_admins(factory_entities):
        assert all(u.role == "admin" for u in factory_entities.User)
"""

from collections.abc import Callable, Iterable
from typing import Any, Optional

import pytest

from seed_factories.config import FactorySettings
from seed_factories.models import EntityType, FactoryPlan, SavedEntities, entity_name
from seed_factories.persistence import ActiveRecordPersister, Persister
from seed_factories.registry import FactoryRegistry, set_registry
from seed_factories.values import configure_faker_from_settings, reset_sequences

PLANS_ATTRIBUTE = "_factory_plans"


def with_factories(
    entity_type: EntityType,
    count: int = 1,
    traits: Iterable[str] = (),
    options: Optional[dict[str, Any]] = None,
):
    """
    Decorator to save entities before a pytest test runs.

    Usage:
        @with_factories(User, count=1)
        @with_factories(Post, count=3, options={"title": "Hello"})
        def test_feed(factory_entities):
            assert len(factory_entities.Post) == 3

    Plans run top to bottom. The decorator works with the ``factory_entities``
    fixture.
    """

    def decorator(func: Callable) -> Callable:
        if not hasattr(func, PLANS_ATTRIBUTE):
            setattr(func, PLANS_ATTRIBUTE, [])

        # Decorators apply bottom-up; insert first to keep reading order
        getattr(func, PLANS_ATTRIBUTE).insert(
            0,
            FactoryPlan(
                entity_type=entity_type,
                count=count,
                traits=tuple(traits),
                options=dict(options or {}),
            ),
        )

        return func

    return decorator


def run_plans(registry: FactoryRegistry, plans: Iterable[FactoryPlan]) -> SavedEntities:
    """Execute factory plans in order against a registry."""
    saved = SavedEntities()
    for plan in plans:
        entities = (
            registry.lookup(plan.entity_type)
            .with_traits(*plan.traits)
            .save_many(plan.count, plan.options)
        )
        saved.add(entity_name(plan.entity_type), entities)
    return saved


@pytest.fixture
def factory_settings() -> FactorySettings:
    """Settings read from SEED_FACTORIES_* environment variables."""
    return FactorySettings()


@pytest.fixture
def factory_persister() -> Persister:
    """Persister used by the test registry. Override for ORM sessions."""
    return ActiveRecordPersister()


@pytest.fixture
def factory_registry(factory_persister: Persister, factory_settings: FactorySettings):
    """
    Fresh default registry for the duration of one test.

    Faker is re-seeded from settings and named sequences restart, so builds
    are repeatable. The previous default registry is restored afterwards.
    """
    configure_faker_from_settings(factory_settings)
    reset_sequences()

    registry = FactoryRegistry(factory_persister)
    previous = set_registry(registry)

    yield registry

    set_registry(previous)


@pytest.fixture
def factory_definitions(factory_registry: FactoryRegistry) -> None:
    """Register factories for the test. Override in conftest.py."""
    return None


@pytest.fixture
def factory_entities(
    request, factory_registry: FactoryRegistry, factory_definitions: None
) -> Optional[SavedEntities]:
    """
    Entities saved from @with_factories() plans on the test function.

    Returns None when the test has no plans.
    """
    plans = getattr(request.function, PLANS_ATTRIBUTE, None)
    if not plans:
        return None
    return run_plans(factory_registry, plans)
