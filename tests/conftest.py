"""pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from fprules import FreqItemset

# ---------------------------------------------------------------------------
# Frequent itemsets of the Spark MLlib AssociationRulesSuite
#
# Mined with minSupport=0.5 from the six transactions
#   r z h k p / z y x w v u t s / s x o n r / x z y m t s q e / z / x z y r q t p
# ---------------------------------------------------------------------------

MLLIB_ITEM_COUNT = 6

MLLIB_FREQ_ITEMSETS: list[tuple[list[str], int]] = [
    (["s"], 3),
    (["z"], 5),
    (["x"], 4),
    (["t"], 3),
    (["y"], 3),
    (["r"], 3),
    (["x", "z"], 3),
    (["t", "y"], 3),
    (["t", "x"], 3),
    (["s", "x"], 3),
    (["y", "x"], 3),
    (["y", "z"], 3),
    (["t", "z"], 3),
    (["y", "x", "z"], 3),
    (["t", "x", "z"], 3),
    (["t", "y", "z"], 3),
    (["t", "y", "x"], 3),
    (["t", "y", "x", "z"], 3),
]


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "spark: tests that start a local SparkSession (need Java)",
    )


@pytest.fixture
def mllib_itemsets() -> list[FreqItemset[str]]:
    return [FreqItemset(tuple(items), freq) for items, freq in MLLIB_FREQ_ITEMSETS]


@pytest.fixture
def basket_itemsets() -> list[tuple[list[str], int]]:
    """Two-item example: {A,B} seen 10 times, A 20 times, B 15 times out of 100."""
    return [(["A", "B"], 10), (["A"], 20), (["B"], 15)]


@pytest.fixture
def basket_frequencies() -> list[tuple[str, int]]:
    return [("A", 20), ("B", 15)]
