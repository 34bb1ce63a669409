"""Value generation helpers for build recipes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from faker import Faker

if TYPE_CHECKING:
    from seed_factories.config import FactorySettings

fake = Faker()


def configure_faker(locale: Optional[str] = None, seed: Optional[int] = None) -> Faker:
    """
    Replace the shared Faker instance and optionally seed it.

    Recipes should reference ``values.fake`` at call time (not bind it at
    import) so reconfiguration is picked up.
    """
    global fake
    fake = Faker(locale) if locale else Faker()
    if seed is not None:
        fake.seed_instance(seed)
    return fake


def configure_faker_from_settings(settings: FactorySettings) -> Faker:
    return configure_faker(settings.faker_locale, settings.faker_seed)


class Sequence:
    """Monotonically increasing integers, e.g. for primary keys."""

    def __init__(self, start: int = 1):
        self.start = start
        self._next = start

    def next_value(self) -> int:
        value = self._next
        self._next += 1
        return value

    def peek(self) -> int:
        """Value the next call to next_value() returns."""
        return self._next

    def reset(self) -> None:
        self._next = self.start

    def __next__(self) -> int:
        return self.next_value()

    def __iter__(self) -> Sequence:
        return self


_sequences: dict[str, Sequence] = {}


def sequence(name: str, start: int = 1) -> Sequence:
    """
    Get a named shared sequence, creating it on first use.

    Example:
        >>> user_ids = sequence("user_id")
        >>> next(user_ids), next(user_ids)
        (1, 2)
    """
    if name not in _sequences:
        _sequences[name] = Sequence(start)
    return _sequences[name]


def reset_sequences() -> None:
    """Restart every named sequence from its start value."""
    for seq in _sequences.values():
        seq.reset()
