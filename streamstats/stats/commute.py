"""Capability protocols shared by every accumulator, plus reduction helpers.

Any type with a ``merge(other)`` method that folds ``other`` into ``self``
is commutable; nothing needs to inherit from these protocols.  A freshly
constructed accumulator is the identity of its ``merge``.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any, Protocol, TypeVar, runtime_checkable

from streamstats.stats.errors import IncompatibleMerge

T = TypeVar("T", bound="Commute")


@runtime_checkable
class Commute(Protocol):
    def merge(self, other: Any) -> None:
        """Fold ``other`` into ``self``."""
        ...


@runtime_checkable
class Accumulator(Commute, Protocol):
    def add(self, value: Any) -> None:
        ...

    def extend(self, values: Iterable[Any]) -> None:
        ...

    def __len__(self) -> int:
        ...


def consume(target: T, others: Iterable[T]) -> T:
    """Merge every item of *others* into *target* and return it."""
    for other in others:
        target.merge(other)
    return target


def merge_all(items: Iterable[T]) -> T | None:
    """Reduce *items* with ``merge``.

    Returns ``None`` for an empty iterable.  The first item is copied, so
    none of the inputs are mutated.
    """
    it = iter(items)
    try:
        first = next(it)
    except StopIteration:
        return None
    return consume(copy.deepcopy(first), it)


def merge_optional(left: T | None, right: T | None) -> T | None:
    """None-aware merge: a missing side is the identity."""
    if left is None:
        return right
    if right is not None:
        left.merge(right)
    return left


def merge_pairwise(left: list[T], right: list[T]) -> list[T]:
    """Merge two equal-length lists element by element, in place on *left*."""
    if len(left) != len(right):
        raise IncompatibleMerge(
            f"cannot merge {len(right)} accumulators into {len(left)}"
        )
    for mine, theirs in zip(left, right):
        mine.merge(theirs)
    return left
