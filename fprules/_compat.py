from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pandas as pd

_LIST_COLUMNS = ("items", "antecedent", "consequent")


def frame_type(data: Any) -> str:
    """Name the DataFrame flavour of ``data``: pandas, polars, pyarrow or spark."""
    _type = type(data)
    mod = getattr(_type, "__module__", "") or ""
    if _type.__name__ == "Table" and mod.startswith("pyarrow"):
        return "pyarrow"
    if _type.__name__ == "DataFrame":
        if mod.startswith("pyspark"):
            return "spark"
        if mod.startswith("polars"):
            return "polars"
        if mod.startswith("pandas"):
            return "pandas"
    raise TypeError(f"Expected a pandas/polars/pyarrow/spark DataFrame, got {_type}")


def to_pandas(data: Any) -> pd.DataFrame:
    """Coerce a polars/pyarrow/Spark DataFrame to pandas; pandas input is returned unchanged."""
    kind = frame_type(data)
    if kind == "pandas":
        return data
    if kind == "spark":
        return data.toPandas()
    # polars and pyarrow both expose to_pandas()
    return data.to_pandas()


def from_pandas(df: pd.DataFrame, kind: str) -> Any:
    """Convert a pandas result back to the DataFrame flavour named by ``kind``."""
    if kind == "pandas":
        return df

    # Tuples are not Arrow list types
    df = df.copy()
    for col in _LIST_COLUMNS:
        if col in df.columns:
            df[col] = df[col].apply(lambda x: list(x) if isinstance(x, (tuple, set, frozenset)) else x)

    if kind == "pyarrow":
        from fprules._dependencies import import_optional_dependency

        pa = import_optional_dependency("pyarrow")

        return pa.Table.from_pandas(df, preserve_index=False)
    if kind == "polars":
        from fprules._dependencies import import_optional_dependency

        pl = import_optional_dependency("polars")

        return pl.from_pandas(df)
    if kind == "spark":
        from fprules._dependencies import import_optional_dependency

        sql = import_optional_dependency("pyspark.sql", "Returning a Spark DataFrame needs it.")

        spark = sql.SparkSession.getActiveSession()
        if spark is None:
            raise RuntimeError("Converting the result to a Spark DataFrame requires an active SparkSession.")
        return spark.createDataFrame(df)
    raise ValueError(f"Unknown DataFrame type: {kind!r}")
