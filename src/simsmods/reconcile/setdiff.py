"""Set difference shared by verification, directory reconciliation and retagging."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Generic, Hashable, Iterable, TypeVar

T = TypeVar("T", bound=Hashable)


@dataclass(frozen=True, slots=True)
class SetDiff(Generic[T]):
    """Partition of two sets into what was added, removed, and kept.

    Attributes:
        added: Elements only present in the target set.
        removed: Elements only present in the baseline set.
        common: Elements present in both sets.
    """

    added: frozenset[T]
    removed: frozenset[T]
    common: frozenset[T]

    @classmethod
    def between(cls, baseline: Iterable[T], target: Iterable[T]) -> "SetDiff[T]":
        """Compare ``baseline`` against ``target``."""
        before: AbstractSet[T] = frozenset(baseline)
        after: AbstractSet[T] = frozenset(target)
        return cls(
            added=frozenset(after - before),
            removed=frozenset(before - after),
            common=frozenset(before & after),
        )

    @property
    def unchanged(self) -> bool:
        """Return True when nothing was added or removed."""
        return not self.added and not self.removed

    def apply(self, baseline: Iterable[T]) -> frozenset[T]:
        """Return ``baseline`` with the additions applied and the removals dropped."""
        return (frozenset(baseline) | self.added) - self.removed


__all__ = ["SetDiff"]
