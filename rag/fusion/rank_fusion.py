"""
Rank fusion of multiple ranked passage lists.

Reciprocal rank fusion (RRF) scores each passage by position only:
score = sum(1 / (k + rank + 1)) over every list it appears in (rank is
0-based). Raw similarity scores are never consulted, so lists coming from
backends with incomparable score scales fuse cleanly.
"""
import logging
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple

from knowledge.models import Passage


logger = logging.getLogger(__name__)


DEFAULT_RRF_K = 60.0

FusionMethod = Literal["rrf", "dedup"]


class FusionScoreTable:
    """
    Accumulated fusion scores keyed by passage id.

    The first passage seen for an id is kept as its representative; later
    duplicates only add to the score.
    """

    def __init__(self):
        self._scores: Dict[str, float] = {}
        self._passages: Dict[str, Passage] = {}

    def add(self, passage: Passage, score: float) -> None:
        pid = passage.id
        if pid not in self._passages:
            self._passages[pid] = passage
            self._scores[pid] = 0.0
        self._scores[pid] += score

    def score(self, passage_id: str) -> float:
        return self._scores.get(passage_id, 0.0)

    def passage(self, passage_id: str) -> Passage:
        return self._passages[passage_id]

    def scores(self) -> Dict[str, float]:
        return dict(self._scores)

    def ranked(self, top_n: Optional[int] = None) -> List[Tuple[Passage, float]]:
        """Passages by descending score; equal scores keep first-seen order."""
        # sorted() is stable with reverse=True, so ties stay in insertion order
        ids = sorted(self._scores, key=lambda pid: self._scores[pid], reverse=True)
        if top_n is not None:
            ids = ids[:top_n]
        return [(self._passages[pid], self._scores[pid]) for pid in ids]

    def __len__(self) -> int:
        return len(self._passages)

    def __contains__(self, passage_id: str) -> bool:
        return passage_id in self._passages


def _build_table(
    lists: Sequence[Sequence[Passage]],
    contribution: Callable[[int], float]
) -> FusionScoreTable:
    table = FusionScoreTable()
    for ranked_list in lists:
        for rank, passage in enumerate(ranked_list):
            table.add(passage, contribution(rank))
    return table


def reciprocal_rank_fusion(
    lists: Sequence[Sequence[Passage]],
    k_damping: float = DEFAULT_RRF_K
) -> FusionScoreTable:
    """
    Build an RRF score table.

    Args:
        lists: Ranked lists, one per query variant
        k_damping: RRF constant; larger values flatten top-rank influence

    Returns:
        Score table with one entry per distinct passage id
    """
    if k_damping < 0:
        raise ValueError(f"k_damping must be non-negative, got {k_damping}")
    return _build_table(lists, lambda rank: 1.0 / (k_damping + rank + 1))


def dedup_fusion(lists: Sequence[Sequence[Passage]]) -> FusionScoreTable:
    """
    Arrival-order deduplication: the k_damping -> infinity limit of RRF
    where every position contributes nothing and first-seen order decides.
    """
    return _build_table(lists, lambda rank: 0.0)


def fuse(
    lists: Sequence[Sequence[Passage]],
    k_damping: float = DEFAULT_RRF_K,
    top_n: Optional[int] = None,
    method: FusionMethod = "rrf"
) -> List[Passage]:
    """
    Merge ranked lists into one ranked list.

    Args:
        lists: Ranked passage lists (index 0 = best)
        k_damping: RRF constant
        top_n: Cutoff on the fused list (None keeps every distinct passage)
        method: 'rrf' (default) or 'dedup'

    Returns:
        Fused passages, best first, unique by id
    """
    if method == "rrf":
        table = reciprocal_rank_fusion(lists, k_damping)
    elif method == "dedup":
        table = dedup_fusion(lists)
    else:
        raise ValueError(f"Unknown fusion method: {method}")

    fused = [passage for passage, _ in table.ranked(top_n)]
    logger.debug(
        f"Fused {len(lists)} lists ({sum(len(l) for l in lists)} hits) "
        f"into {len(table)} distinct passages, kept {len(fused)}"
    )
    return fused
