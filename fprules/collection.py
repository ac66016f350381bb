"""In-memory partitioned collection with Spark-style transformations."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any, Generic

from .typing import K, T, U, V, W


class LocalCollection(Generic[T]):
    """Immutable, partitioned, in-memory collection.

    Mirrors the subset of the Spark RDD API used by the rule pipeline so
    the same stage functions run locally and on a cluster.  Narrow
    transformations (``map``, ``flat_map``, ``filter``) work partition by
    partition; ``join`` hash-partitions both sides by key first, as a
    shuffle would.

    Examples
    --------
    >>> pairs = LocalCollection.parallelize([("a", 1), ("b", 2)], num_partitions=2)
    >>> sorted(pairs.join(LocalCollection.parallelize([("a", "x")])).collect())
    [('a', (1, 'x'))]
    """

    def __init__(self, partitions: Iterable[Iterable[T]]):
        self._partitions: tuple[tuple[T, ...], ...] = tuple(tuple(p) for p in partitions)
        if not self._partitions:
            self._partitions = ((),)

    @classmethod
    def parallelize(cls, data: Iterable[T], num_partitions: int = 1) -> LocalCollection[T]:
        """Distribute ``data`` round-robin over ``num_partitions`` partitions."""
        if num_partitions < 1:
            raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
        parts: list[list[T]] = [[] for _ in range(num_partitions)]
        for i, x in enumerate(data):
            parts[i % num_partitions].append(x)
        return cls(parts)

    @property
    def num_partitions(self) -> int:
        return len(self._partitions)

    @property
    def partitions(self) -> Sequence[tuple[T, ...]]:
        return self._partitions

    def map(self, f: Callable[[T], U]) -> LocalCollection[U]:
        return LocalCollection([f(x) for x in part] for part in self._partitions)

    def flat_map(self, f: Callable[[T], Iterable[U]]) -> LocalCollection[U]:
        return LocalCollection([y for x in part for y in f(x)] for part in self._partitions)

    def filter(self, f: Callable[[T], bool]) -> LocalCollection[T]:
        return LocalCollection([x for x in part if f(x)] for part in self._partitions)

    def join(
        self: LocalCollection[tuple[K, V]],
        other: LocalCollection[tuple[K, W]],
        num_partitions: int | None = None,
    ) -> LocalCollection[tuple[K, tuple[V, W]]]:
        """Inner equi-join of two ``(key, value)`` collections.

        Emits ``(key, (left, right))`` for every pair of matching keys.
        Keys present on one side only are dropped.
        """
        n = num_partitions or max(self.num_partitions, other.num_partitions)
        left = self._shuffle(n)
        right = other._shuffle(n)

        out: list[list[tuple[K, tuple[V, W]]]] = []
        for lpart, rpart in zip(left, right):
            table: dict[K, list[W]] = defaultdict(list)
            for k, w in rpart:
                table[k].append(w)
            out.append([(k, (v, w)) for k, v in lpart if k in table for w in table[k]])
        return LocalCollection(out)

    def _shuffle(self: LocalCollection[tuple[K, Any]], n: int) -> list[list[tuple[K, Any]]]:
        parts: list[list[tuple[K, Any]]] = [[] for _ in range(n)]
        for part in self._partitions:
            for k, v in part:
                parts[hash(k) % n].append((k, v))
        return parts

    def collect(self) -> list[T]:
        return [x for part in self._partitions for x in part]

    def count(self) -> int:
        return sum(len(part) for part in self._partitions)

    def __iter__(self) -> Iterator[T]:
        for part in self._partitions:
            yield from part

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"LocalCollection(num_partitions={self.num_partitions}, count={self.count()})"
