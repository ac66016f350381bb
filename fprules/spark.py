from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pandas as pd

from ._validation import check_item_count, check_min_confidence

logger = logging.getLogger(__name__)


def to_spark(spark_session: Any, df: Any) -> Any:
    """Convert a Pandas or Polars DataFrame into a PySpark DataFrame.

    Parameters
    ----------
    spark_session
        The active PySpark `SparkSession`.
    df
        The `pd.DataFrame` or `pl.DataFrame` to convert.

    Returns
    -------
    pyspark.sql.DataFrame
        The resulting PySpark DataFrame.
    """
    mod = getattr(type(df), "__module__", "") or ""
    if mod.startswith("polars"):
        df = df.to_pandas()  # PySpark does not natively accept Polars yet

    return spark_session.createDataFrame(df)


class RDDCollection:
    """Adapts a PySpark RDD to the collection interface of the rule pipeline.

    Lets :class:`~fprules.association_rules.AssociationRules` run its stages
    on a cluster; the wrapped RDD is available as :attr:`rdd`.
    """

    def __init__(self, rdd: Any):
        self.rdd = rdd

    def parallelize(self, data: Iterable[Any]) -> RDDCollection:
        """Distribute local ``data`` with the SparkContext of the wrapped RDD."""
        return RDDCollection(self.rdd.context.parallelize(list(data)))

    def map(self, f: Callable[[Any], Any]) -> RDDCollection:
        return RDDCollection(self.rdd.map(f))

    def flat_map(self, f: Callable[[Any], Iterable[Any]]) -> RDDCollection:
        return RDDCollection(self.rdd.flatMap(f))

    def filter(self, f: Callable[[Any], bool]) -> RDDCollection:
        return RDDCollection(self.rdd.filter(f))

    def join(self, other: RDDCollection, num_partitions: int | None = None) -> RDDCollection:
        return RDDCollection(self.rdd.join(other.rdd, numPartitions=num_partitions))

    def collect(self) -> list[Any]:
        return self.rdd.collect()

    def count(self) -> int:
        return self.rdd.count()


def association_rules_spark(
    df: Any,
    item_count: int,
    frequencies: Any = None,
    min_confidence: float = 0.8,
    items_col: str = "items",
    freq_col: str = "freq",
    item_col: str = "item",
) -> Any:
    """Generate single-consequent association rules with Spark SQL.

    The distributed counterpart of :func:`fprules.association_rules`:
    itemsets are keyed by their sorted item arrays, exploded into
    candidates, and joined twice against the frequency tables.

    Parameters
    ----------
    df
        Spark DataFrame of frequent itemsets with an array ``items_col`` and
        an integer ``freq_col`` column (the ``freqItemsets`` of Spark ML's
        ``FPGrowthModel`` qualify as-is).
    item_count
        Total number of transactions.
    frequencies
        Spark (or pandas/polars) DataFrame with ``item_col`` and
        ``freq_col`` columns.  Defaults to the single-item rows of ``df``.
    min_confidence
        Minimal confidence of the returned rules, in ``[0, 1]``.
    items_col, freq_col, item_col
        Column names of the inputs.

    Returns
    -------
    pyspark.sql.DataFrame
        Columns ``antecedent``, ``consequent`` (arrays), ``freq``,
        ``antecedent_freq``, ``consequent_freq`` (longs), ``confidence`` and
        ``lift`` (doubles).
    """
    from fprules._dependencies import import_optional_dependency

    F = import_optional_dependency("pyspark.sql.functions", "association_rules_spark() needs it.")

    from .association_rules import RULE_COLUMNS

    min_confidence = check_min_confidence(min_confidence)
    item_count = check_item_count(item_count)

    items = F.array_sort(F.col(items_col))
    itemsets = df.select(
        F.when(F.size(F.array_distinct(items)) == F.size(items), items)
        .otherwise(F.raise_error(F.lit("Itemset items must be unique")))
        .alias("items"),
        F.col(freq_col).cast("long").alias("freq"),
    )

    # For candidate rule X => y, generate (X, [y], freq(X | {y}))
    candidates = (
        itemsets.where(F.size("items") > 1)
        .select("items", "freq", F.explode("items").alias("consequent_item"))
        .select(
            F.expr("array_remove(items, consequent_item)").alias("antecedent"),
            F.array("consequent_item").alias("consequent"),
            "freq",
        )
    )

    antecedent_freqs = itemsets.select(F.col("items").alias("antecedent"), F.col("freq").alias("antecedent_freq"))

    if frequencies is None:
        consequent_freqs = itemsets.where(F.size("items") == 1).select(
            F.col("items").alias("consequent"), F.col("freq").alias("consequent_freq")
        )
    else:
        if not (getattr(type(frequencies), "__module__", "") or "").startswith("pyspark"):
            frequencies = to_spark(df.sparkSession, frequencies)
        consequent_freqs = frequencies.select(
            F.array(F.col(item_col)).alias("consequent"), F.col(freq_col).cast("long").alias("consequent_freq")
        )

    logger.debug("Building Spark rule plan with min_confidence=%s, item_count=%d", min_confidence, item_count)

    rules = (
        candidates.join(antecedent_freqs, on="antecedent", how="inner")
        .join(consequent_freqs, on="consequent", how="inner")
        .withColumn("confidence", F.col("freq") / F.col("antecedent_freq"))
        .withColumn("lift", F.col("confidence") / (F.col("consequent_freq") / F.lit(float(item_count))))
        .where(F.col("confidence") >= F.lit(min_confidence))
    )
    return rules.select(*RULE_COLUMNS)


def _group_item_count(item_count: int | dict[Any, int], group_id: str) -> int:
    """Transaction count of ``group_id``; dict keys may be strings or ints."""
    if not isinstance(item_count, dict):
        return item_count
    # Try string key, then fallback to int key
    key_int = int(group_id) if group_id.isdigit() else group_id
    num_tx = item_count.get(group_id, item_count.get(key_int))
    if num_tx is None:
        raise ValueError(f"No item_count given for group {group_id!r}")
    return num_tx


def rules_grouped(
    df: Any,
    group_col: str,
    item_count: dict[Any, int] | int,
    min_confidence: float = 0.8,
    items_col: str = "items",
    freq_col: str = "freq",
) -> Any:
    """Distribute Association Rule generation across PySpark partitions.

    This takes a frequent itemsets DataFrame holding several independent
    groups (e.g. one per store) and applies
    :func:`fprules.association_rules` to each group.  Items are returned
    as strings.

    Parameters
    ----------
    df
        The PySpark `DataFrame` containing frequent itemsets.
    group_col
        The column to group by.
    item_count
        A dictionary mapping group IDs to their total transaction count,
        or a single integer if all groups have the same number of transactions.
    min_confidence
        Minimal confidence of the returned rules, in ``[0, 1]``.
    items_col, freq_col
        Column names of the itemsets.

    Returns
    -------
    pyspark.sql.DataFrame
        A DataFrame with the rule columns of :func:`fprules.association_rules`,
        prepended with the `group_col`.
    """
    from fprules._dependencies import import_optional_dependency

    pd = import_optional_dependency("pandas")
    pa = import_optional_dependency("pyarrow")
    T = import_optional_dependency("pyspark.sql.types", "rules_grouped() needs it.")

    from .association_rules import RULE_COLUMNS

    min_confidence = check_min_confidence(min_confidence)
    if not isinstance(item_count, dict):
        item_count = check_item_count(item_count)

    schema = T.StructType(
        [
            T.StructField(group_col, T.StringType(), True),
            T.StructField("antecedent", T.ArrayType(T.StringType()), True),
            T.StructField("consequent", T.ArrayType(T.StringType()), True),
            T.StructField("freq", T.LongType(), True),
            T.StructField("antecedent_freq", T.LongType(), True),
            T.StructField("consequent_freq", T.LongType(), True),
            T.StructField("confidence", T.DoubleType(), True),
            T.StructField("lift", T.DoubleType(), True),
        ]
    )
    schema_pa = pa.schema(
        [
            (group_col, pa.string()),
            ("antecedent", pa.list_(pa.string())),
            ("consequent", pa.list_(pa.string())),
            ("freq", pa.int64()),
            ("antecedent_freq", pa.int64()),
            ("consequent_freq", pa.int64()),
            ("confidence", pa.float64()),
            ("lift", pa.float64()),
        ]
    )

    def _rules_for(pdf: pd.DataFrame, group_id: str) -> pd.DataFrame:
        from fprules.association_rules import association_rules

        res_df = association_rules(
            pdf[[items_col, freq_col]],
            _group_item_count(item_count, group_id),
            min_confidence=min_confidence,
            items_col=items_col,
            freq_col=freq_col,
        )
        res_df["antecedent"] = res_df["antecedent"].apply(lambda xs: [str(x) for x in xs])
        res_df["consequent"] = res_df["consequent"].apply(lambda xs: [str(x) for x in xs])
        res_df.insert(0, group_col, group_id)
        return res_df

    def _rules_group(table: pa.Table) -> pa.Table:
        group_id = str(table.column(group_col)[0].as_py())

        # Input is Arrow, convert directly to pandas
        res_df = _rules_for(table.to_pandas(), group_id)

        if len(res_df) == 0:
            return pa.Table.from_batches([], schema=schema_pa)
        return pa.Table.from_pandas(res_df[[group_col, *RULE_COLUMNS]], preserve_index=False).cast(schema_pa)

    if hasattr(df.groupby(group_col), "applyInArrow"):
        return df.groupby(group_col).applyInArrow(_rules_group, schema=schema)
    else:

        def _rules_group_pd(pdf: pd.DataFrame) -> pd.DataFrame:
            group_id = str(pdf[group_col].iloc[0])
            res_df = _rules_for(pdf, group_id)
            if len(res_df) == 0:
                return pd.DataFrame(columns=[group_col, *RULE_COLUMNS])
            return res_df[[group_col, *RULE_COLUMNS]]

        return df.groupby(group_col).applyInPandas(_rules_group_pd, schema=schema)
