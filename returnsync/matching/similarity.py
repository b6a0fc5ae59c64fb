"""
String similarity primitives shared by every matcher stage.

similarity() is a case-folded Levenshtein ratio. It returns 0.0 without
computing the edit distance when the two strings differ in length by more
than ``length_gap_ratio`` (0.3) of the shorter one, so
similarity("abcdefghij", "abc") is 0.0 even though the plain ratio is 0.3.
"""

from __future__ import annotations

import re

from rapidfuzz.distance import Levenshtein

from returnsync.matching.policy import DEFAULT_POLICY, MatchPolicy

# Anything that is not a word character (any script) or whitespace.
_PUNCTUATION = re.compile(r"[^\w\s]+")
_WHITESPACE = re.compile(r"\s+")


def similarity(a: str | None, b: str | None, *, policy: MatchPolicy = DEFAULT_POLICY) -> float:
    """
    Case-folded Levenshtein ratio in [0, 1].

    Returns:
        ``1 - distance / max(len)``; 0.0 when either side is empty or when the
        length gap exceeds ``policy.length_gap_ratio`` of the shorter string.
    """
    if not a or not b:
        return 0.0

    a = a.casefold()
    b = b.casefold()
    len_a, len_b = len(a), len(b)

    if abs(len_a - len_b) > policy.length_gap_ratio * min(len_a, len_b):
        return 0.0

    distance = Levenshtein.distance(a, b)
    return 1.0 - distance / max(len_a, len_b)


def _clean_for_keywords(text: str) -> str:
    text = _PUNCTUATION.sub(" ", text.casefold())
    return _WHITESPACE.sub(" ", text).strip()


def keyword_tokens(text: str | None, *, policy: MatchPolicy = DEFAULT_POLICY) -> list[str]:
    """Punctuation-free tokens of at least ``keyword_min_token_len`` characters."""
    if not text:
        return []
    return [w for w in _clean_for_keywords(text).split(" ") if len(w) >= policy.keyword_min_token_len]


def keyword_overlap(a: str | None, b: str | None, *, policy: MatchPolicy = DEFAULT_POLICY) -> bool:
    """
    Check whether two product names share enough keywords.

    True when one cleaned string contains the other, or when the tokens of
    ``a`` that are a substring of (or contain) some token of ``b`` make up at
    least ``keyword_overlap_min`` of the token union.
    """
    if not a or not b:
        return False

    clean_a = _clean_for_keywords(a)
    clean_b = _clean_for_keywords(b)
    if not clean_a or not clean_b:
        return False
    if clean_a in clean_b or clean_b in clean_a:
        return True

    words_a = keyword_tokens(a, policy=policy)
    words_b = keyword_tokens(b, policy=policy)
    union = set(words_a) | set(words_b)
    if not union:
        return False

    common = [w for w in words_a if any(w in other or other in w for other in words_b)]
    return len(common) / len(union) >= policy.keyword_overlap_min
