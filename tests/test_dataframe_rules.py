"""DataFrame front end: pandas, polars and pyarrow in, same type out."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from fprules import AssociationRules, association_rules
from fprules.association_rules import RULE_COLUMNS


def _rules_by_sides(res: pd.DataFrame) -> dict[tuple[tuple, tuple], dict]:
    return {(row["antecedent"], row["consequent"]): row for row in res.to_dict("records")}


@pytest.fixture
def basket_df(basket_itemsets) -> pd.DataFrame:
    return pd.DataFrame(basket_itemsets, columns=["items", "freq"])


@pytest.fixture
def basket_freq_df(basket_frequencies) -> pd.DataFrame:
    return pd.DataFrame(basket_frequencies, columns=["item", "freq"])


@pytest.fixture
def mllib_df(mllib_itemsets) -> pd.DataFrame:
    return pd.DataFrame({"items": [list(fi.items) for fi in mllib_itemsets], "freq": [fi.freq for fi in mllib_itemsets]})


def test_default(basket_df, basket_freq_df) -> None:
    res = association_rules(basket_df, 100, basket_freq_df, min_confidence=0.4)
    assert isinstance(res, pd.DataFrame)
    assert list(res.columns) == RULE_COLUMNS
    assert res.shape[0] == 2

    rules = _rules_by_sides(res)
    a_b = rules[(("A",), ("B",))]
    assert (a_b["freq"], a_b["antecedent_freq"], a_b["consequent_freq"]) == (10, 20, 15)
    assert a_b["confidence"] == pytest.approx(0.5)
    assert a_b["lift"] == pytest.approx(0.5 / 0.15)


def test_datatypes(basket_df) -> None:
    res = association_rules(basket_df, 100, min_confidence=0.0)
    for col in ("antecedent", "consequent"):
        assert all(isinstance(x, tuple) for x in res[col])
    assert res["confidence"].dtype == np.float64
    assert res["lift"].dtype == np.float64


def test_confidence_threshold_is_inclusive(basket_df) -> None:
    assert association_rules(basket_df, 100, min_confidence=0.5).shape[0] == 2
    assert association_rules(basket_df, 100, min_confidence=0.51).shape[0] == 1


def test_invalid_min_confidence_checked_first() -> None:
    # the configuration is rejected before the input is looked at
    with pytest.raises(ValueError, match="Minimal confidence"):
        association_rules(None, 100, min_confidence=1.5)
    with pytest.raises(ValueError, match="Minimal confidence"):
        association_rules(None, 100, min_confidence=-0.1)


def test_invalid_item_count(basket_df) -> None:
    with pytest.raises(ValueError, match="item_count"):
        association_rules(basket_df, 0)


def test_not_a_dataframe() -> None:
    with pytest.raises(TypeError):
        association_rules([(["A", "B"], 1)], 10)


def test_no_freq_col(basket_df) -> None:
    with pytest.raises(ValueError, match="freq"):
        association_rules(basket_df[["items"]], 100)


def test_no_items_col(basket_df) -> None:
    with pytest.raises(ValueError, match="items"):
        association_rules(basket_df[["freq"]], 100)


def test_bad_frequencies_columns(basket_df) -> None:
    with pytest.raises(ValueError, match="item"):
        association_rules(basket_df, 100, pd.DataFrame({"label": ["A"], "freq": [20]}))


def test_custom_column_names(basket_itemsets) -> None:
    df = pd.DataFrame(basket_itemsets, columns=["basket", "count"])
    freqs = pd.DataFrame({"product": ["A", "B"], "count": [20, 15]})
    res = association_rules(df, 100, freqs, min_confidence=0.0, items_col="basket", freq_col="count", item_col="product")
    assert res.shape[0] == 2


def test_empty_result(basket_df) -> None:
    res = association_rules(basket_df, 100, min_confidence=1.0)
    assert res.shape[0] == 0
    assert list(res.columns) == RULE_COLUMNS


def test_with_empty_dataframe(basket_df) -> None:
    res = association_rules(basket_df.iloc[:0], 100)
    assert res.shape[0] == 0
    assert list(res.columns) == RULE_COLUMNS


def test_only_single_itemsets(basket_df) -> None:
    res = association_rules(basket_df.iloc[1:], 100, min_confidence=0.0)
    assert res.shape[0] == 0


def test_repeated_items_rejected() -> None:
    df = pd.DataFrame({"items": [["A", "B", "A"]], "freq": [3]})
    with pytest.raises(ValueError, match="unique"):
        association_rules(df, 10)


def test_on_df_with_missing_entries(basket_frequencies) -> None:
    # {A} is not frequent, so A => B cannot be scored and is dropped
    df = pd.DataFrame({"items": [["A", "B"], ["B"]], "freq": [10, 15]})
    freqs = pd.DataFrame(basket_frequencies, columns=["item", "freq"])
    res = association_rules(df, 100, freqs, min_confidence=0.0)
    assert list(_rules_by_sides(res)) == [(("B",), ("A",))]


def test_integer_items() -> None:
    df = pd.DataFrame({"items": [[2, 1], [1], [2]], "freq": [3, 4, 3]})
    freqs = pd.DataFrame({"item": np.array([1, 2], dtype=np.int64), "freq": [4, 3]})
    res = association_rules(df, 5, freqs, min_confidence=0.0)
    assert set(_rules_by_sides(res)) == {((1,), (2,)), ((2,), (1,))}


def test_item_order_does_not_matter(mllib_df) -> None:
    reversed_df = mllib_df.assign(items=mllib_df["items"].apply(lambda xs: list(reversed(xs))))
    a = association_rules(mllib_df, 6, min_confidence=0.0)
    b = association_rules(reversed_df.sample(frac=1.0, random_state=0), 6, min_confidence=0.0)
    assert set(_rules_by_sides(a)) == set(_rules_by_sides(b))


@pytest.mark.parametrize("min_confidence", [0.0, 0.75, 0.9])
def test_matches_collection_pipeline(mllib_df, mllib_itemsets, min_confidence: float) -> None:
    res = association_rules(mllib_df, 6, min_confidence=min_confidence)
    rules = AssociationRules(min_confidence).run(mllib_itemsets, item_count=6)

    frame_rules = _rules_by_sides(res)
    assert set(frame_rules) == {(r.antecedent, r.consequent) for r in rules}
    for r in rules:
        row = frame_rules[(r.antecedent, r.consequent)]
        assert row["confidence"] == pytest.approx(r.confidence)
        assert row["lift"] == pytest.approx(r.lift)


def test_spark_mllib_association_rules(mllib_df) -> None:
    ar = association_rules(mllib_df, 6, min_confidence=0.9)
    assert len(ar) == 23
    assert (ar["confidence"] >= 0.999999).sum() == 23

    ar_all = association_rules(mllib_df, 6, min_confidence=0.0)
    assert len(ar_all) == 30
    assert (ar_all["confidence"] >= 0.999999).sum() == 23
    assert (ar_all["consequent"].apply(len) == 1).all()


# ---------------------------------------------------------------------------
# Other DataFrame libraries
# ---------------------------------------------------------------------------


def test_polars_roundtrip(basket_itemsets) -> None:
    pl = pytest.importorskip("polars")
    pytest.importorskip("pyarrow")

    df = pl.DataFrame({"items": [items for items, _ in basket_itemsets], "freq": [f for _, f in basket_itemsets]})
    res = association_rules(df, 100, min_confidence=0.4)

    assert isinstance(res, pl.DataFrame)
    assert res.columns == RULE_COLUMNS
    rows = {(tuple(r["antecedent"]), tuple(r["consequent"])): r for r in res.to_dicts()}
    assert set(rows) == {(("A",), ("B",)), (("B",), ("A",))}
    assert rows[(("A",), ("B",))]["confidence"] == pytest.approx(0.5)


def test_polars_frequencies(basket_df) -> None:
    pl = pytest.importorskip("polars")
    pytest.importorskip("pyarrow")

    freqs = pl.DataFrame({"item": ["A"], "freq": [20]})
    res = association_rules(basket_df, 100, freqs, min_confidence=0.0)
    assert isinstance(res, pd.DataFrame)
    assert list(_rules_by_sides(res)) == [(("B",), ("A",))]


def test_pyarrow_roundtrip(basket_itemsets) -> None:
    pa = pytest.importorskip("pyarrow")

    table = pa.table({"items": [items for items, _ in basket_itemsets], "freq": [f for _, f in basket_itemsets]})
    res = association_rules(table, 100, min_confidence=0.4)

    assert isinstance(res, pa.Table)
    assert res.num_rows == 2
    assert res.column_names == RULE_COLUMNS
    assert sorted(res.column("antecedent").to_pylist()) == [["A"], ["B"]]
