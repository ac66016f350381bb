"""Frequent itemsets and their canonical join keys."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Generic

from .typing import Item


def canonical_key(items: Iterable[Item]) -> tuple[Item, ...]:
    """Return the order-independent key of an itemset.

    Two itemsets holding the same items produce equal keys whatever order
    their items were listed in, so the key can be hashed and joined on.

    Raises
    ------
    ValueError
        If an item occurs more than once.
    TypeError
        If the items cannot be ordered against each other.
    """
    key = tuple(sorted(items))
    for prev, cur in zip(key, key[1:]):
        if prev == cur:
            raise ValueError(f"Itemset items must be unique, but {cur!r} occurs more than once in {key!r}.")
    return key


@dataclass(frozen=True)
class FreqItemset(Generic[Item]):
    """An itemset together with its number of occurrences.

    Parameters
    ----------
    items : tuple
        The items of the set.  Order carries no meaning.
    freq : int
        Number of transactions containing every item of the set.
    """

    items: tuple[Item, ...]
    freq: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "freq", int(self.freq))

    @classmethod
    def of(cls, value: Any) -> FreqItemset[Any]:
        """Coerce a ``FreqItemset`` or an ``(items, freq)`` pair."""
        if isinstance(value, cls):
            return value
        try:
            items, freq = value
        except (TypeError, ValueError) as e:
            raise TypeError(f"Expected a FreqItemset or an (items, freq) pair, got {value!r}") from e
        return cls(tuple(items), freq)

    @property
    def key(self) -> tuple[Item, ...]:
        """Canonical join key of the itemset."""
        return canonical_key(self.items)

    def __len__(self) -> int:
        return len(self.items)


def item_frequencies(freq_itemsets: Iterable[Any]) -> list[tuple[Any, int]]:
    """Derive the ``(item, freq)`` table from the single-item itemsets.

    A frequent-itemset miner reports every frequent single item as a
    one-element itemset, so those rows double as the item frequency table
    for items above the support threshold.
    """
    return [(fi.items[0], fi.freq) for fi in map(FreqItemset.of, freq_itemsets) if len(fi.items) == 1]
