"""
Rank fusion strategies.
"""
from rag.fusion.rank_fusion import (
    DEFAULT_RRF_K,
    FusionScoreTable,
    dedup_fusion,
    fuse,
    reciprocal_rank_fusion
)

__all__ = [
    'DEFAULT_RRF_K',
    'FusionScoreTable',
    'dedup_fusion',
    'fuse',
    'reciprocal_rank_fusion'
]
