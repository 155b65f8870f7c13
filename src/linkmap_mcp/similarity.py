"""Cheap approximate string similarity used by fuzzy link search.

This is not an edit distance. Scores are in [0, 1]:

0. Both empty -> 0.0
1. Exact match (case-insensitive) -> 1.0
2. One string contains the other -> len(shorter) / len(longer)
3. Otherwise, the share of characters of ``a`` that occur anywhere in
   ``b``, divided by the longer length.

Branch 3 iterates the characters of the first argument, so the score is
not symmetric in general.
"""


def similarity(a: str, b: str) -> float:
    """Return an approximate similarity score between two strings."""
    s1 = a.lower()
    s2 = b.lower()

    # 0/0 is defined as 0 so two empty strings never count as a match
    if not s1 and not s2:
        return 0.0

    if s1 == s2:
        return 1.0

    longer = max(len(s1), len(s2))

    if s1 in s2 or s2 in s1:
        return min(len(s1), len(s2)) / longer

    matches = sum(1 for ch in s1 if ch in s2)
    return matches / longer
