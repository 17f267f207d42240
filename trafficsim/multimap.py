"""Sorted multimap used as the event schedule."""

from __future__ import annotations

import bisect
from collections.abc import Iterator
from typing import Generic, TypeVar

K = TypeVar("K", int, float, str)
V = TypeVar("V")


class MultiTreeMap(Generic[K, V]):
    """Map from key to an ordered bag of values.

    Keys iterate in ascending order; values under the same key keep the
    order in which they were inserted.
    """

    def __init__(self) -> None:
        self._keys: list[K] = []
        self._bags: dict[K, list[V]] = {}
        self._size = 0

    def put_value(self, key: K, value: V) -> None:
        bag = self._bags.get(key)
        if bag is None:
            bisect.insort(self._keys, key)
            bag = self._bags[key] = []
        bag.append(value)
        self._size += 1

    def get(self, key: K) -> tuple[V, ...]:
        return tuple(self._bags.get(key, ()))

    def items(self) -> Iterator[tuple[K, tuple[V, ...]]]:
        for k in self._keys:
            yield k, tuple(self._bags[k])

    def values_list(self) -> list[V]:
        return [v for k in self._keys for v in self._bags[k]]

    def values_from(self, key: K) -> list[V]:
        """All values whose key is >= ``key``, in iteration order."""
        start = bisect.bisect_left(self._keys, key)
        return [v for k in self._keys[start:] for v in self._bags[k]]

    def clear(self) -> None:
        self._keys.clear()
        self._bags.clear()
        self._size = 0

    def __contains__(self, key: object) -> bool:
        return key in self._bags

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._keys))
