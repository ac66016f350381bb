"""Input validation shared by the collection and DataFrame entry points."""

from __future__ import annotations

import math
import numbers
from collections.abc import Iterable
from typing import Any


def _is_real(x: Any) -> bool:
    return isinstance(x, numbers.Real) and not isinstance(x, bool)


def check_min_confidence(min_confidence: Any) -> float:
    """Return ``min_confidence`` as a float, or raise if it is not in [0, 1]."""
    if not _is_real(min_confidence):
        raise ValueError(f"Minimal confidence must be a number in range [0, 1] but got {min_confidence!r}")
    value = float(min_confidence)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Minimal confidence must be in range [0, 1] but got {min_confidence!r}")
    return value


def check_item_count(item_count: Any) -> int:
    """Return ``item_count`` as an int, or raise if it is not a positive integer."""
    if not _is_real(item_count):
        raise ValueError(f"item_count must be a positive integer but got {item_count!r}")
    if not isinstance(item_count, numbers.Integral):
        as_float = float(item_count)
        if not (math.isfinite(as_float) and as_float.is_integer()):
            raise ValueError(f"item_count must be a positive integer but got {item_count!r}")
    value = int(item_count)
    if value <= 0:
        raise ValueError(f"item_count must be a positive integer but got {item_count!r}")
    return value


def check_columns(df: Any, columns: Iterable[str], name: str = "DataFrame") -> None:
    """Raise if ``df`` lacks any of ``columns``."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"The {name} needs to contain the column(s) {missing!r}, got {list(df.columns)!r}")
