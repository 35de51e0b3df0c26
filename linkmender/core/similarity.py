"""
String and path similarity measures used for fuzzy matching.
"""

from typing import List


def levenshtein_distance(s1: str, s2: str) -> int:
    """
    Calculate Levenshtein distance between two strings.

    Uses dynamic programming with a single rolling row.

    Args:
        s1: First string
        s2: Second string

    Returns:
        Number of edits (insertions, deletions, substitutions) needed
    """
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def normalized_similarity(a: str, b: str) -> float:
    """
    Case-insensitive similarity in [0, 1]: 1 - distance / longer length.

    Two empty strings are identical (1.0).
    """
    a_lower = a.lower()
    b_lower = b.lower()
    max_len = max(len(a_lower), len(b_lower))
    if max_len == 0:
        return 1.0
    return 1 - levenshtein_distance(a_lower, b_lower) / max_len


def _segments(path: str) -> List[str]:
    return [segment for segment in path.split('/') if segment]


def path_segment_similarity(path1: str, path2: str) -> float:
    """
    Share of path1's segments that also appear in path2.

    Divided by the segment count of the longer path, so
    'guide/setup.md' vs 'guide/old/setup.md' scores 2/3.
    """
    segments1 = _segments(path1)
    segments2 = _segments(path2)
    total = max(len(segments1), len(segments2))
    if total == 0:
        return 0.0

    common = sum(1 for segment in segments1 if segment in segments2)
    return common / total
