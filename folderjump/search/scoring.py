"""Relevance scoring for folder names against a typed query.

Single words are ranked by match tier (exact, prefix, word boundary,
substring, fuzzy subsequence). Multi-word queries require every word to match
and average the per-word tiers. History and depth adjust the tier score.
"""

from __future__ import annotations

from .types import ScoreResult

EMPTY_QUERY_SCORE = 50
HISTORY_BONUS = 20
DEPTH_PENALTY_PER_LEVEL = 5
MAX_DEPTH_PENALTY = 25

EXACT_SCORE = 100
PREFIX_SCORE = 90
WORD_BOUNDARY_SCORE = 80
SUBSTRING_SCORE = 70
FUZZY_BASE_SCORE = 50
FUZZY_RATIO_WEIGHT = 20
FUZZY_MIN_RATIO = 0.5

WORD_BOUNDARY_CHARS = frozenset(" -_")


def fuzzy_ratio(pattern: str, candidate: str) -> float:
    """Return the fraction of ``pattern`` consumed by one greedy subsequence scan.

    The ratio is only meaningful when every pattern character was consumed in
    order; a partial match yields ``0.0``. This is not an edit distance.
    """
    if not pattern:
        return 0.0
    consumed = 0
    for ch in candidate:
        if consumed < len(pattern) and ch == pattern[consumed]:
            consumed += 1
    if consumed < len(pattern):
        return 0.0
    return consumed / len(pattern)


def _matches_at_word_boundary(query: str, name: str) -> bool:
    start = name.find(query, 1)
    while start > 0:
        if name[start - 1] in WORD_BOUNDARY_CHARS:
            return True
        start = name.find(query, start + 1)
    return False


def tier_score(name: str, query: str) -> ScoreResult:
    """Score one already-normalized word against a normalized name."""
    if name == query:
        return ScoreResult(EXACT_SCORE, "exact")
    if name.startswith(query):
        return ScoreResult(PREFIX_SCORE, "prefix")
    if _matches_at_word_boundary(query, name):
        return ScoreResult(WORD_BOUNDARY_SCORE, "word boundary")
    if query in name:
        return ScoreResult(SUBSTRING_SCORE, "substring")
    ratio = fuzzy_ratio(query, name)
    if ratio > FUZZY_MIN_RATIO:
        return ScoreResult(FUZZY_BASE_SCORE + int(ratio * FUZZY_RATIO_WEIGHT), "fuzzy")
    return ScoreResult(0, "no match")


def _word_matches(name: str, word: str) -> bool:
    return word in name or fuzzy_ratio(word, name) > 0


def _multi_word_score(name: str, words: list[str]) -> ScoreResult:
    if not all(_word_matches(name, word) for word in words):
        return ScoreResult(0, "no match")
    per_word = [tier_score(name, word) for word in words]
    total = sum(result.score for result in per_word)
    reasons = ", ".join(result.reason for result in per_word)
    return ScoreResult(total // len(per_word), f"multi-word ({reasons})")


def depth_penalty(depth: int) -> int:
    return min(max(0, depth) * DEPTH_PENALTY_PER_LEVEL, MAX_DEPTH_PENALTY)


def score_name(name: str, query: str, depth: int = 0, is_from_history: bool = False) -> ScoreResult:
    """Score folder ``name`` for ``query``.

    An empty query returns a flat baseline so unfiltered lists keep every row.
    Otherwise a score of ``0`` means "no match" and callers must drop the row;
    any matched row scores at least ``1`` after the depth penalty.
    """
    words = query.casefold().split()
    if not words:
        if is_from_history:
            return ScoreResult(EMPTY_QUERY_SCORE + HISTORY_BONUS, "no filter + history")
        return ScoreResult(EMPTY_QUERY_SCORE, "no filter")

    folded = name.casefold()
    if len(words) == 1:
        result = tier_score(folded, words[0])
    else:
        result = _multi_word_score(folded, words)
    if not result.matched:
        return result

    score = result.score
    reason = result.reason
    if is_from_history:
        score += HISTORY_BONUS
        reason = f"{reason} + history"
    penalty = depth_penalty(depth)
    if penalty:
        score = max(1, score - penalty)
        reason = f"{reason} - depth {depth}"
    return ScoreResult(score, reason)


__all__ = [
    "EMPTY_QUERY_SCORE",
    "HISTORY_BONUS",
    "depth_penalty",
    "fuzzy_ratio",
    "score_name",
    "tier_score",
]
