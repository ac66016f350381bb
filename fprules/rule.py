from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic

from .typing import Item


def _fmt_items(items: tuple[Any, ...]) -> str:
    return "{" + ",".join(str(x) for x in items) + "}"


@dataclass(frozen=True)
class Rule(Generic[Item]):
    """An association rule ``antecedent => consequent``.

    Parameters
    ----------
    antecedent : tuple
        Items on the "if" side of the rule.
    consequent : tuple
        Items on the "then" side of the rule.  Rules built by
        :class:`~fprules.association_rules.AssociationRules` always hold a
        single consequent item.
    freq_union : float
        Frequency of the itemset ``antecedent | consequent``.
    freq_antecedent : float
        Frequency of the antecedent itemset alone.
    freq_consequent : float
        Frequency of the consequent alone.
    total_item_count : int
        Number of transactions the frequencies were counted over.

    Raises
    ------
    ValueError
        If the consequent is empty or shares items with the antecedent.
    """

    antecedent: tuple[Item, ...]
    consequent: tuple[Item, ...]
    freq_union: float = field(repr=False)
    freq_antecedent: float = field(repr=False)
    freq_consequent: float = field(repr=False)
    total_item_count: int = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "antecedent", tuple(self.antecedent))
        object.__setattr__(self, "consequent", tuple(self.consequent))
        if not self.consequent:
            raise ValueError("A valid association rule must have a non-empty consequent.")
        shared = set(self.antecedent) & set(self.consequent)
        if shared:
            raise ValueError(
                "A valid association rule must have disjoint antecedent and "
                f"consequent but {sorted(shared, key=repr)!r} is present in both."
            )

    @property
    def confidence(self) -> float:
        """Estimated ``P(consequent | antecedent)``."""
        return self.freq_union / self.freq_antecedent

    @property
    def lift(self) -> float:
        """Confidence over the consequent's marginal probability."""
        return self.confidence / (self.freq_consequent / self.total_item_count)

    def to_dict(self) -> dict[str, Any]:
        """Plain-Python view of the rule, e.g. for DataFrame construction."""
        return {
            "antecedent": list(self.antecedent),
            "consequent": list(self.consequent),
            "freq": self.freq_union,
            "antecedent_freq": self.freq_antecedent,
            "consequent_freq": self.freq_consequent,
            "confidence": self.confidence,
            "lift": self.lift,
        }

    def __str__(self) -> str:
        return (
            f"{_fmt_items(self.antecedent)} => {_fmt_items(self.consequent)}: "
            f"{self.freq_antecedent} {self.freq_union} {self.freq_consequent} {self.confidence} {self.lift}"
        )
