"""PageRank entry point, options and score normalization."""

from .config import DEFAULT_PAGERANK_OPTIONS, PagerankOptions, ScorePolicy
from .pagerank import PagerankResult, pagerank

__all__ = [
    "DEFAULT_PAGERANK_OPTIONS",
    "PagerankOptions",
    "PagerankResult",
    "ScorePolicy",
    "pagerank",
]
