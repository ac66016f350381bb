from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

if TYPE_CHECKING:
    import pandas as pd
    import polars as pl
    import pyarrow as pa

    try:
        import pyspark.sql

        _SparkDataFrame = pyspark.sql.DataFrame
    except ImportError:
        _SparkDataFrame = Any

    DataFrameType = pd.DataFrame | pl.DataFrame | pa.Table | _SparkDataFrame
else:
    DataFrameType = Any


class SupportsItem(Protocol):
    """Protocol for item labels.

    Items are used as join keys and are sorted to build canonical itemset
    keys, so they must hash and compare.
    """

    def __hash__(self) -> int: ...

    def __eq__(self, other: object) -> bool: ...

    def __lt__(self, other: Any) -> bool: ...


Item = TypeVar("Item", bound=SupportsItem)
T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K")
V = TypeVar("V")
W = TypeVar("W")


class PairCollection(Protocol[T]):
    """The operations the rule pipeline needs from a partitioned collection.

    Implemented by :class:`fprules.collection.LocalCollection` and, for
    Spark RDDs, by :class:`fprules.spark.RDDCollection`.  ``join`` is an
    inner equi-join on the first element of ``(key, value)`` pairs.
    """

    def map(self, f: Callable[[T], U]) -> PairCollection[U]: ...

    def flat_map(self, f: Callable[[T], Iterable[U]]) -> PairCollection[U]: ...

    def filter(self, f: Callable[[T], bool]) -> PairCollection[T]: ...

    def join(self, other: PairCollection[Any]) -> PairCollection[Any]: ...

    def collect(self) -> list[T]: ...
