"""Ranked incremental folder search.

Combines the scoring function, the depth-bounded walker, and the orchestrator
that merges history, parent roots, and live results.
"""

from __future__ import annotations

from .cancellation import CancellationToken, SearchGeneration
from .orchestrator import ResultCollection, SearchOrchestrator, display_path, rank_entries
from .scoring import fuzzy_ratio, score_name, tier_score
from .types import FolderEntry, ResultSnapshot, ScoreResult, SearchOutcome, SearchRequest
from .walker import WALK_BATCH_SIZE, WALK_RESULT_LIMIT, iter_batches, walk

__all__ = [
    "CancellationToken",
    "FolderEntry",
    "ResultCollection",
    "ResultSnapshot",
    "ScoreResult",
    "SearchGeneration",
    "SearchOrchestrator",
    "SearchOutcome",
    "SearchRequest",
    "WALK_BATCH_SIZE",
    "WALK_RESULT_LIMIT",
    "display_path",
    "fuzzy_ratio",
    "iter_batches",
    "rank_entries",
    "score_name",
    "tier_score",
    "walk",
]
