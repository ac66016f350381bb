"""Single-consequent association rules from frequent itemsets.

The rules are produced by a three-stage pipeline over partitioned
collections:

1. every frequent itemset is split into ``(antecedent, consequent)``
   candidates whose consequent is a single item;
2. two inner equi-joins attach the frequency of the antecedent (looked up
   among the frequent itemsets) and of the consequent (looked up in the
   item frequency table);
3. confidence and lift are computed and rules below the minimum
   confidence are dropped.

All joins are keyed by :func:`~fprules.itemset.canonical_key`, so itemsets
listing the same items in different orders meet in the same join bucket.
Candidates whose antecedent or consequent has no frequency are silently
dropped by the inner joins: their confidence cannot be computed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ._compat import frame_type, from_pandas, to_pandas
from ._validation import check_columns, check_item_count, check_min_confidence
from .collection import LocalCollection
from .itemset import FreqItemset, canonical_key
from .rule import Rule

if TYPE_CHECKING:
    import pandas as pd
    from typing_extensions import Self

    from .typing import DataFrameType, PairCollection

logger = logging.getLogger(__name__)

RULE_COLUMNS = [
    "antecedent",
    "consequent",
    "freq",
    "antecedent_freq",
    "consequent_freq",
    "confidence",
    "lift",
]


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------


def _split_itemset(itemset: Any) -> list[tuple[tuple[Any, ...], tuple[Any, int]]]:
    fi = FreqItemset.of(itemset)
    key = fi.key
    if len(key) < 2:
        return []
    # key is sorted, so dropping one position keeps the antecedent canonical
    return [(key[:i] + key[i + 1 :], (item, fi.freq)) for i, item in enumerate(key)]


def _key_by_items(itemset: Any) -> tuple[tuple[Any, ...], int]:
    fi = FreqItemset.of(itemset)
    return fi.key, fi.freq


def _key_by_item(record: tuple[Any, int]) -> tuple[tuple[Any, ...], int]:
    item, freq = record
    return (item,), int(freq)


def _is_single_item(itemset: Any) -> bool:
    return len(FreqItemset.of(itemset).items) == 1


def _single_item_frequency(itemset: Any) -> tuple[Any, int]:
    fi = FreqItemset.of(itemset)
    return fi.items[0], fi.freq


def _key_by_consequent(joined: Any) -> tuple[tuple[Any, ...], tuple[tuple[Any, ...], int, int]]:
    antecedent, ((consequent, freq_union), freq_antecedent) = joined
    return (consequent,), (antecedent, freq_union, freq_antecedent)


def _flatten(joined: Any) -> tuple[tuple[Any, ...], tuple[Any, ...], int, int, int]:
    consequent, ((antecedent, freq_union, freq_antecedent), freq_consequent) = joined
    return antecedent, consequent, freq_union, freq_antecedent, freq_consequent


def generate_candidates(freq_itemsets: PairCollection[Any]) -> PairCollection[Any]:
    """For candidate rule ``X => y`` emit ``(X, (y, freq(X | {y})))``.

    ``X`` is the canonical key of the antecedent.  Itemsets with a single
    item produce no candidates.
    """
    return freq_itemsets.flat_map(_split_itemset)


def join_frequencies(
    candidates: PairCollection[Any],
    freq_itemsets: PairCollection[Any],
    frequencies: PairCollection[Any],
) -> PairCollection[Any]:
    """Attach antecedent and consequent frequencies to the candidates.

    Returns records ``(antecedent, consequent, freq_union, freq_antecedent,
    freq_consequent)`` where ``consequent`` is a one-item tuple.
    """
    antecedent_freqs = freq_itemsets.map(_key_by_items)
    consequent_freqs = frequencies.map(_key_by_item)
    return candidates.join(antecedent_freqs).map(_key_by_consequent).join(consequent_freqs).map(_flatten)


def score_rules(records: PairCollection[Any], item_count: int, min_confidence: float) -> PairCollection[Rule[Any]]:
    """Build a :class:`Rule` per record and keep those with enough confidence."""

    def to_rule(record: tuple[Any, ...]) -> Rule[Any]:
        antecedent, consequent, freq_union, freq_antecedent, freq_consequent = record
        return Rule(antecedent, consequent, freq_union, freq_antecedent, freq_consequent, item_count)

    return records.map(to_rule).filter(lambda rule: rule.confidence >= min_confidence)


# ---------------------------------------------------------------------------
# Collection front end
# ---------------------------------------------------------------------------


def _is_rdd(data: Any) -> bool:
    mod = getattr(type(data), "__module__", "") or ""
    return mod.startswith("pyspark") and hasattr(data, "flatMap")


def _as_collection(data: Any, like: Any = None, num_partitions: int = 1) -> Any:
    from .spark import RDDCollection

    distributed = isinstance(data, RDDCollection) or _is_rdd(data)
    if distributed and isinstance(like, LocalCollection):
        raise TypeError(
            f"Cannot join a distributed {type(data).__name__} with local itemsets. "
            "Pass the itemsets as an RDD as well, or collect the frequencies first."
        )
    if isinstance(data, LocalCollection):
        if isinstance(like, RDDCollection):
            return like.parallelize(data.collect())
        return data
    if isinstance(data, RDDCollection):
        return data
    if _is_rdd(data):
        return RDDCollection(data)
    if isinstance(data, (str, bytes)) or not isinstance(data, Iterable) or hasattr(data, "columns"):
        raise TypeError(
            f"Expected an iterable, LocalCollection or RDD, got {type(data)}. "
            "Use fprules.association_rules() for DataFrame input."
        )
    if isinstance(like, RDDCollection):
        return like.parallelize(list(data))
    return LocalCollection.parallelize(list(data), num_partitions=num_partitions)


class AssociationRules:
    """Generates association rules with a single item as the consequent.

    Parameters
    ----------
    min_confidence : float, default=0.8
        Minimal confidence of the returned rules, in ``[0, 1]``.

    Raises
    ------
    ValueError
        If ``min_confidence`` is outside ``[0, 1]``.

    Examples
    --------
    >>> itemsets = [(["A", "B"], 10), (["A"], 20), (["B"], 15)]
    >>> rules = AssociationRules(min_confidence=0.4).run(itemsets, [("A", 20), ("B", 15)], 100)
    >>> sorted((r.antecedent, r.consequent, round(r.confidence, 3)) for r in rules)
    [(('A',), ('B',), 0.5), (('B',), ('A',), 0.667)]
    """

    def __init__(self, min_confidence: float = 0.8):
        self.min_confidence = min_confidence

    @property
    def min_confidence(self) -> float:
        return self._min_confidence

    @min_confidence.setter
    def min_confidence(self, value: float) -> None:
        self._min_confidence = check_min_confidence(value)

    def set_min_confidence(self, min_confidence: float) -> Self:
        """Set the minimal confidence (default: ``0.8``) and return ``self``."""
        self.min_confidence = min_confidence
        return self

    def run(
        self,
        freq_itemsets: Any,
        frequencies: Any = None,
        item_count: int | None = None,
        num_partitions: int = 1,
    ) -> Any:
        """Compute the association rules with confidence above ``min_confidence``.

        Parameters
        ----------
        freq_itemsets
            Frequent itemsets as :class:`~fprules.itemset.FreqItemset` objects
            or ``(items, freq)`` pairs, held in a list (or any iterable), a
            :class:`~fprules.collection.LocalCollection` or a Spark RDD.
        frequencies
            ``(item, freq)`` pairs for the whole item set.  If None, the
            single-item itemsets of ``freq_itemsets`` are used.  Local
            frequencies are parallelized onto the SparkContext of RDD
            itemsets; RDD frequencies next to local itemsets raise
            ``TypeError``.
        item_count
            Number of transactions the frequencies were counted over.
        num_partitions
            Partitions used when plain iterables are parallelized locally.

        Returns
        -------
        list[Rule] | LocalCollection[Rule] | pyspark.RDD
            The rules, in the collection type of ``freq_itemsets``: a list for
            plain iterables.  Their order is unspecified.
        """
        item_count = check_item_count(item_count)

        itemsets = _as_collection(freq_itemsets, num_partitions=num_partitions)
        if frequencies is None:
            freqs = itemsets.filter(_is_single_item).map(_single_item_frequency)
        else:
            freqs = _as_collection(frequencies, like=itemsets, num_partitions=num_partitions)

        logger.debug(
            "Generating rules on %s with min_confidence=%s, item_count=%d",
            type(itemsets).__name__,
            self.min_confidence,
            item_count,
        )

        candidates = generate_candidates(itemsets)
        records = join_frequencies(candidates, itemsets, freqs)
        rules = score_rules(records, item_count, self.min_confidence)

        if isinstance(itemsets, LocalCollection):
            logger.debug(
                "%d candidates, %d fully joined, %d rules kept",
                candidates.count(),
                records.count(),
                rules.count(),
            )

        if isinstance(freq_itemsets, LocalCollection):
            return rules
        if _is_rdd(freq_itemsets):
            return rules.rdd
        if isinstance(rules, LocalCollection):
            return rules.collect()
        return rules


# ---------------------------------------------------------------------------
# DataFrame front end
# ---------------------------------------------------------------------------


def _as_python(x: Any) -> Any:
    import numpy as np

    return x.item() if isinstance(x, np.generic) else x


def _empty_rules_frame() -> pd.DataFrame:
    import pandas as pd

    return pd.DataFrame(columns=pd.Index(RULE_COLUMNS))


def association_rules(
    df: DataFrameType,
    item_count: int,
    frequencies: DataFrameType | None = None,
    min_confidence: float = 0.8,
    items_col: str = "items",
    freq_col: str = "freq",
    item_col: str = "item",
) -> Any:
    """Generate single-consequent association rules from a DataFrame of frequent itemsets.

    Runs the candidate / join / score pipeline with pandas merges.  Spark
    DataFrames are handed to :func:`fprules.spark.association_rules_spark`
    and stay distributed.

    Parameters
    ----------
    df : DataFrame
        Frequent itemsets with a list-like ``items_col`` and an integer
        ``freq_col`` column, e.g. the output of Spark ML's ``FPGrowth``.
    item_count : int
        Total number of transactions.
    frequencies : DataFrame, optional
        Item frequencies with ``item_col`` and ``freq_col`` columns.  Defaults
        to the single-item rows of ``df``.
    min_confidence : float, default=0.8
        Minimal confidence of the returned rules, in ``[0, 1]``.
    items_col, freq_col, item_col : str
        Column names of the inputs.

    Returns
    -------
    DataFrame
        Same type as ``df``, with columns ``antecedent``, ``consequent``,
        ``freq``, ``antecedent_freq``, ``consequent_freq``, ``confidence``
        and ``lift``.

    Raises
    ------
    ValueError
        If ``min_confidence`` or ``item_count`` is out of range, a column is
        missing, or an itemset repeats an item.
    TypeError
        If ``df`` is not a supported DataFrame.
    """
    min_confidence = check_min_confidence(min_confidence)
    item_count = check_item_count(item_count)

    kind = frame_type(df)
    if kind == "spark":
        from .spark import association_rules_spark

        return association_rules_spark(
            df,
            item_count,
            frequencies=frequencies,
            min_confidence=min_confidence,
            items_col=items_col,
            freq_col=freq_col,
            item_col=item_col,
        )

    import pandas as pd

    pdf = to_pandas(df)
    check_columns(pdf, [items_col, freq_col], "DataFrame of frequent itemsets")

    itemsets = pd.DataFrame(
        {
            "items": [canonical_key(_as_python(x) for x in iset) for iset in pdf[items_col]],
            "freq": pdf[freq_col].astype("int64").to_numpy(),
        }
    )
    sizes = itemsets["items"].map(len)

    if frequencies is None:
        singles = itemsets[sizes == 1]
        consequent_freqs = pd.DataFrame({"consequent": list(singles["items"]), "consequent_freq": singles["freq"].to_numpy()})
    else:
        fpdf = to_pandas(frequencies)
        check_columns(fpdf, [item_col, freq_col], "DataFrame of item frequencies")
        consequent_freqs = pd.DataFrame(
            {
                "consequent": [(_as_python(x),) for x in fpdf[item_col]],
                "consequent_freq": fpdf[freq_col].astype("int64").to_numpy(),
            }
        )

    candidates = itemsets[sizes > 1]
    if candidates.empty:
        logger.debug("No itemset with two or more items, no rules generated")
        return from_pandas(_empty_rules_frame(), kind)

    # For candidate rule X => y, generate (X, (y,), freq(X | {y}))
    candidates = candidates.assign(consequent=candidates["items"]).explode("consequent")
    candidates = pd.DataFrame(
        {
            "antecedent": [tuple(x for x in key if x != c) for key, c in zip(candidates["items"], candidates["consequent"])],
            "consequent": [(c,) for c in candidates["consequent"]],
            "freq": candidates["freq"].to_numpy(),
        }
    )

    antecedent_freqs = itemsets.rename(columns={"items": "antecedent", "freq": "antecedent_freq"})
    rules = candidates.merge(antecedent_freqs, on="antecedent", how="inner").merge(
        consequent_freqs, on="consequent", how="inner"
    )

    rules["confidence"] = rules["freq"] / rules["antecedent_freq"]
    rules["lift"] = rules["confidence"] / (rules["consequent_freq"] / item_count)

    logger.debug("%d candidates, %d fully joined", len(candidates), len(rules))

    rules = rules.loc[rules["confidence"] >= min_confidence, RULE_COLUMNS].reset_index(drop=True)
    return from_pandas(rules, kind)
