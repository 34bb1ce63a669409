"""Pytest configuration and shared fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from entities import Base, Post, Profile, User
from seed_factories import (
    FactoryRegistry,
    FactorySettings,
    RecordingPersister,
    SessionPersister,
    factory,
)
from seed_factories.factory import Factory


@pytest.fixture
def engine(factory_settings: FactorySettings):
    """Engine on the configured database (in-memory SQLite by default)."""
    engine = create_engine(factory_settings.database_url)
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine) -> Session:
    """SQLAlchemy session rolled back after each test."""
    session = Session(engine)

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def factory_persister(session: Session) -> RecordingPersister:
    """Record every save and write it through the test session."""
    return RecordingPersister(SessionPersister(session))


@pytest.fixture
def recorder() -> RecordingPersister:
    """Persister that only records saves (no database)."""
    return RecordingPersister()


@pytest.fixture
def registry(recorder: RecordingPersister) -> FactoryRegistry:
    """Isolated registry for pipeline tests on plain records."""
    return FactoryRegistry(recorder)


def define_user(f: Factory) -> None:
    def with_posts(user: User) -> None:
        user.posts = factory(Post).save_many(
            3, {"title": "Post title", "body": "Post body", "user": user}
        )

    def with_admin(user: User) -> None:
        user.role = "admin"

    def build_user(options: dict) -> User:
        return User(
            name=options.get("name", "John Doe"),
            email=options.get("email", "example@gmail.com"),
            role=options.get("role"),
        )

    f.trait("withPosts", with_posts)
    f.trait("withAdmin", with_admin)
    f.build(build_user)


def define_post(f: Factory) -> None:
    def build_post(options: dict) -> Post:
        post = Post(
            title=options.get("title", "Post title"),
            body=options.get("body", "Post body"),
        )
        # Assigning user=None would null out a caller-supplied user_id on flush
        if "user" in options:
            post.user = options["user"]
        if "user_id" in options:
            post.user_id = options["user_id"]
        return post

    f.build(build_post)


def define_profile(f: Factory) -> None:
    f.build(lambda options: Profile(bio=options.get("bio", "Hello"), user=options.get("user")))


@pytest.fixture
def factory_definitions(factory_registry: FactoryRegistry) -> None:
    """Register the blog factories on the per-test default registry."""
    factory_registry.register(User, define_user)
    factory_registry.register(Post, define_post)
    factory_registry.register(Profile, define_profile)
