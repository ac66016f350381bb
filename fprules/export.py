from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .rule import Rule


def export_rules(rules: Iterable[Rule[Any]], format: str = "pandas") -> Any:
    """Tabulates association rules as a DataFrame.

    Parameters
    ----------
    rules : Iterable[Rule]
        Rules, e.g. the output of :meth:`AssociationRules.run`.  A Spark RDD
        of rules is collected to the driver first.
    format : str, default="pandas"
        The DataFrame format to return. One of "pandas", "polars", "pyarrow"
        or "spark" (requires an active ``SparkSession``).

    Returns
    -------
    Any
        A DataFrame with one row per rule and the columns ``antecedent``,
        ``consequent``, ``freq``, ``antecedent_freq``, ``consequent_freq``,
        ``confidence`` and ``lift``.

    Examples
    --------
    >>> rules = AssociationRules(min_confidence=0.5).run(itemsets, item_count=100)
    >>> df = fprules.export_rules(rules).sort_values("lift", ascending=False)
    """
    import pandas as pd

    from ._compat import from_pandas
    from .association_rules import RULE_COLUMNS

    if format not in ("pandas", "polars", "pyarrow", "spark"):
        raise ValueError(f"Unknown format: {format!r}. Expected 'pandas', 'polars', 'pyarrow' or 'spark'.")

    if hasattr(rules, "collect"):
        rules = rules.collect()  # type: ignore[union-attr]

    rows = [rule.to_dict() for rule in rules]
    df = pd.DataFrame(rows, columns=pd.Index(RULE_COLUMNS))
    # to_dict() yields lists, DataFrames from fprules carry tuples
    df["antecedent"] = df["antecedent"].apply(tuple)
    df["consequent"] = df["consequent"].apply(tuple)
    return from_pandas(df, format)
