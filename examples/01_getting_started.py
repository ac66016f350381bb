"""
fprules — Getting Started
=========================

The simplest possible example: turn frequent itemsets (as produced by an
FP-Growth run over 5 market baskets with min_support=0.4) into
single-consequent association rules, first on a plain Python list, then
on a pandas DataFrame.
"""

import pandas as pd

from fprules import AssociationRules, association_rules, export_rules, item_frequencies

# Baskets:
#   bread butter milk / bread milk eggs / butter milk eggs cheese / bread butter / bread milk eggs
N_TRANSACTIONS = 5

freq_itemsets = [
    (["bread"], 4),
    (["butter"], 3),
    (["milk"], 4),
    (["eggs"], 3),
    (["bread", "butter"], 2),
    (["bread", "milk"], 3),
    (["bread", "eggs"], 2),
    (["butter", "milk"], 2),
    (["milk", "eggs"], 3),
    (["bread", "milk", "eggs"], 2),
]

# ── 1. Collection API ───────────────────────────────────────────────────────
frequencies = item_frequencies(freq_itemsets)
rules = AssociationRules(min_confidence=0.6).run(freq_itemsets, frequencies, N_TRANSACTIONS)

print("Association rules (confidence ≥ 0.6):")
for rule in sorted(rules, key=lambda r: r.lift, reverse=True):
    print(f"  {rule}")
print()

# ── 2. DataFrame API ────────────────────────────────────────────────────────
df = pd.DataFrame(freq_itemsets, columns=["items", "freq"])
rules_df = association_rules(df, item_count=N_TRANSACTIONS, min_confidence=0.6)

print("Same rules as a DataFrame:")
cols = ["antecedent", "consequent", "confidence", "lift"]
print(rules_df[cols].sort_values("lift", ascending=False).to_string(index=False))
print()

assert len(export_rules(rules)) == len(rules_df)
