"""fprules – single-consequent association rules from frequent itemsets."""

from .association_rules import (
    AssociationRules,
    association_rules,
    generate_candidates,
    join_frequencies,
    score_rules,
)
from .collection import LocalCollection
from .export import export_rules
from .itemset import FreqItemset, canonical_key, item_frequencies
from .rule import Rule

__all__ = [
    "AssociationRules",
    "association_rules",
    "generate_candidates",
    "join_frequencies",
    "score_rules",
    "LocalCollection",
    "FreqItemset",
    "canonical_key",
    "item_frequencies",
    "Rule",
    "export_rules",
]
