"""
Fuzzy matching of return records to the product catalog.

Leaf modules (similarity, normalizer, policy) are re-exported here; import
the matcher itself from returnsync.matching.matcher.
"""

from returnsync.matching.normalizer import (
    extract_color,
    simplify_option,
    simplify_return_reason,
)
from returnsync.matching.policy import DEFAULT_POLICY, MatchPolicy, load_policy
from returnsync.matching.similarity import keyword_overlap, similarity

__all__ = [
    "DEFAULT_POLICY",
    "MatchPolicy",
    "extract_color",
    "keyword_overlap",
    "load_policy",
    "similarity",
    "simplify_option",
    "simplify_return_reason",
]
