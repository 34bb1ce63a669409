"""Persistence adapters used by the build pipeline.

The pipeline only ever calls ``persister.save(entity)``. Writing, identity
assignment and transactions belong to the ORM behind the adapter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import Session

    from seed_factories.config import FactorySettings

logger = logging.getLogger(__name__)


@runtime_checkable
class Persister(Protocol):
    """Writes the current in-memory state of an entity."""

    def save(self, entity: Any) -> Any:
        """Persist entity; may return an awaitable for async builds."""
        ...


class ActiveRecordPersister:
    """Persist entities that know how to save themselves (``entity.save()``)."""

    def save(self, entity: Any) -> Any:
        return entity.save()


class SessionPersister:
    """
    Persist entities through a SQLAlchemy ``Session``.

    Every save adds the entity to the session and flushes, so primary keys
    are assigned on the first save. With ``commit=True`` each save commits.
    """

    def __init__(self, session: Session, commit: bool = False):
        self.session = session
        self.commit = commit

    @classmethod
    def from_settings(cls, session: Session, settings: FactorySettings) -> SessionPersister:
        return cls(session, commit=settings.commit_on_save)

    def save(self, entity: Any) -> None:
        self.session.add(entity)
        if self.commit:
            self.session.commit()
        else:
            self.session.flush()


class AsyncSessionPersister:
    """Persist entities through a SQLAlchemy ``AsyncSession`` (async builds only)."""

    def __init__(self, session: AsyncSession, commit: bool = False):
        self.session = session
        self.commit = commit

    @classmethod
    def from_settings(
        cls, session: AsyncSession, settings: FactorySettings
    ) -> AsyncSessionPersister:
        return cls(session, commit=settings.commit_on_save)

    async def save(self, entity: Any) -> None:
        self.session.add(entity)
        if self.commit:
            await self.session.commit()
        else:
            await self.session.flush()


class RecordingPersister:
    """
    Record every save in order, optionally delegating to another persister.

    Attributes:
        saved: Entities in the order they were saved (repeats included)
    """

    def __init__(self, inner: Optional[Persister] = None):
        self.inner = inner
        self.saved: list[Any] = []

    def save(self, entity: Any) -> Any:
        self.saved.append(entity)
        logger.debug(f"Recorded save #{len(self.saved)} of {type(entity).__name__}")
        if self.inner is not None:
            return self.inner.save(entity)
        return None

    def count_for(self, entity: Any) -> int:
        """Number of times this exact entity was saved."""
        return sum(1 for saved in self.saved if saved is entity)

    def clear(self) -> None:
        self.saved.clear()
